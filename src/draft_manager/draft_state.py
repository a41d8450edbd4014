"""Draft state data models - single source of truth for all draft information."""

import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import List, Optional, Set

from src.draft_manager.config import (
    DEFAULT_MAX_TEAMS,
    DEFAULT_ROSTER_SIZE,
    DEFAULT_SECONDS_PER_PICK,
    DEFAULT_STARTER_COUNT,
)
from src.scoring_engine.models import ScoringRules


class DraftStatus(str, Enum):
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class LeagueStatus(str, Enum):
    PRE_DRAFT = "PRE_DRAFT"
    DRAFTING = "DRAFTING"
    IN_SEASON = "IN_SEASON"
    COMPLETED = "COMPLETED"


# ------------------------------------------------------------------
# Snake draft arithmetic
# ------------------------------------------------------------------


def round_for_pick(pick_number: int, team_count: int) -> int:
    """1-based round that a 1-based pick number falls in."""
    if team_count < 1:
        raise ValueError("team_count must be positive")
    return math.ceil(pick_number / team_count)


def team_index_for_pick(pick_number: int, team_count: int) -> int:
    """Index into the draft order of the team on the clock at a pick.

    Odd rounds run 0 -> N-1, even rounds run N-1 -> 0.
    """
    if pick_number < 1:
        raise ValueError(f"pick_number must be >= 1, got {pick_number}")
    round_number = round_for_pick(pick_number, team_count)
    position_in_round = (pick_number - 1) % team_count

    if round_number % 2 == 0:
        return team_count - 1 - position_in_round
    return position_in_round


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ------------------------------------------------------------------
# Records
# ------------------------------------------------------------------


@dataclass(frozen=True)
class DraftPick:
    """A single draft pick. Append-only, never mutated."""

    session_id: str
    team_id: str
    player_id: str
    pick_number: int
    round: int
    is_auto_pick: bool
    timestamp: str

    @classmethod
    def create(
        cls,
        session_id: str,
        team_id: str,
        player_id: str,
        pick_number: int,
        round: int,
        is_auto_pick: bool = False,
        now: Optional[datetime] = None,
    ) -> "DraftPick":
        return cls(
            session_id=session_id,
            team_id=team_id,
            player_id=player_id,
            pick_number=pick_number,
            round=round,
            is_auto_pick=is_auto_pick,
            timestamp=(now or utc_now()).isoformat(),
        )


@dataclass(frozen=True)
class RosterEntry:
    """Ownership of a drafted player by a fantasy team."""

    team_id: str
    player_id: str
    session_id: str
    acquired_at: str


@dataclass
class League:
    """League settings the draft engine reads."""

    league_id: str
    name: str
    team_ids: List[str] = field(default_factory=list)
    team_names: List[str] = field(default_factory=list)
    roster_size: int = DEFAULT_ROSTER_SIZE
    starter_count: int = DEFAULT_STARTER_COUNT
    max_teams: int = DEFAULT_MAX_TEAMS
    seconds_per_pick: int = DEFAULT_SECONDS_PER_PICK
    scoring_rules: ScoringRules = field(default_factory=ScoringRules)
    status: LeagueStatus = LeagueStatus.PRE_DRAFT

    def total_picks(self) -> int:
        return len(self.team_ids) * self.roster_size


# ------------------------------------------------------------------
# Session
# ------------------------------------------------------------------


@dataclass
class DraftSession:
    """Complete state of one league's draft."""

    session_id: str
    league_id: str
    seconds_per_pick: int = DEFAULT_SECONDS_PER_PICK
    draft_order: List[str] = field(default_factory=list)
    current_pick: int = 1
    current_round: int = 1
    status: DraftStatus = DraftStatus.NOT_STARTED
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    picks: List[DraftPick] = field(default_factory=list)

    @property
    def team_count(self) -> int:
        return len(self.draft_order)

    @property
    def is_in_progress(self) -> bool:
        return self.status == DraftStatus.IN_PROGRESS

    @property
    def is_complete(self) -> bool:
        return self.status == DraftStatus.COMPLETED

    def turn_owner(self, pick_number: Optional[int] = None) -> Optional[str]:
        """Team on the clock at ``pick_number`` (default: the current pick)."""
        if not self.draft_order:
            return None
        pick_number = pick_number or self.current_pick
        return self.draft_order[team_index_for_pick(pick_number, self.team_count)]

    def round_for(self, pick_number: int) -> int:
        return round_for_pick(pick_number, self.team_count)

    def drafted_player_ids(self) -> Set[str]:
        return {pick.player_id for pick in self.picks}

    def picks_for_team(self, team_id: str) -> List[DraftPick]:
        return [pick for pick in self.picks if pick.team_id == team_id]

    def pick_deadline(self) -> Optional[datetime]:
        """Advisory deadline for the current pick.

        Last pick time (or start time before the first pick) plus the
        per-pick allowance. None unless the draft is in progress.
        """
        if not self.is_in_progress:
            return None
        reference = self.picks[-1].timestamp if self.picks else self.start_time
        if reference is None:
            return None
        return datetime.fromisoformat(reference) + timedelta(
            seconds=self.seconds_per_pick
        )

    # ------------------------------------------------------------------
    # Transitions (callers hold the session lock)
    # ------------------------------------------------------------------

    def start(self, draft_order: List[str], now: datetime):
        self.draft_order = list(draft_order)
        self.status = DraftStatus.IN_PROGRESS
        self.current_pick = 1
        self.current_round = 1
        self.start_time = now.isoformat()

    def record_pick(self, pick: DraftPick):
        if pick.pick_number != self.current_pick:
            raise ValueError(
                f"Pick {pick.pick_number} recorded while on pick {self.current_pick}"
            )
        self.picks.append(pick)

    def advance_to_next_pick(self):
        """Move to the next pick; the round follows from the pick number."""
        if not self.is_in_progress:
            return
        self.current_pick += 1
        self.current_round = self.round_for(self.current_pick)

    def complete(self, now: datetime):
        self.status = DraftStatus.COMPLETED
        self.end_time = now.isoformat()
