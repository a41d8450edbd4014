"""Roster and lineup validation."""

from datetime import datetime
from typing import Dict, List, Tuple

from src.draft_manager.draft_state import League
from src.draft_manager.roster_store import Lineup
from src.scoring_engine.models import ScoringWindow


class LineupError(ValueError):
    """Raised when a lineup cannot be accepted."""


class RosterValidator:
    """Validates drafted rosters and weekly lineups for a league."""

    def __init__(self, league: League):
        self.league = league

    def validate_lineup(
        self,
        lineup: Lineup,
        roster_player_ids: List[str],
        window: ScoringWindow,
        now: datetime,
    ):
        """
        Check a lineup before it is stored.

        Raises:
            LineupError: Window locked, wrong starter count, duplicate
                players, or players not on the team's roster.
        """
        if lineup.window_id != window.window_id:
            raise LineupError(
                f"Lineup is for window {lineup.window_id}, not {window.window_id}"
            )

        if lineup.is_locked or window.is_locked_at(now):
            raise LineupError(
                f"Lineup is locked for scoring window {window.window_id}"
            )

        starter_count = len(lineup.starters)
        if starter_count != self.league.starter_count:
            raise LineupError(
                f"Must have exactly {self.league.starter_count} starters "
                f"(got {starter_count})"
            )

        player_ids = lineup.player_ids()
        if len(set(player_ids)) != len(player_ids):
            raise LineupError("A player may fill only one lineup slot")

        not_owned = set(player_ids) - set(roster_player_ids)
        if not_owned:
            raise LineupError(
                f"Players not on team {lineup.team_id}'s roster: {sorted(not_owned)}"
            )

    def validate_final_roster(
        self, team_id: str, roster_player_ids: List[str]
    ) -> Tuple[bool, List[str]]:
        """
        Validate that a drafted roster is full.

        Returns:
            (is_valid, list_of_errors)
        """
        errors = []
        actual = len(roster_player_ids)
        required = self.league.roster_size

        if actual < required:
            errors.append(
                f"Team {team_id} is missing {required - actual} players "
                f"(have {actual}, need {required})"
            )
        elif actual > required:
            errors.append(
                f"Team {team_id} has too many players (have {actual}, max {required})"
            )

        if len(set(roster_player_ids)) != actual:
            errors.append(f"Team {team_id} rosters the same player twice")

        return (len(errors) == 0, errors)

    def get_roster_summary(self, roster_player_ids: List[str]) -> Dict[str, int]:
        """Filled and open roster spots for a team."""
        filled = len(roster_player_ids)
        return {
            "filled": filled,
            "required": self.league.roster_size,
            "remaining": max(0, self.league.roster_size - filled),
            "starters": self.league.starter_count,
        }
