"""Roster and lineup store - which team owns which player, and who starts."""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from src.draft_manager.draft_rules import PlayerAlreadyDrafted
from src.draft_manager.draft_state import RosterEntry, utc_now

logger = logging.getLogger(__name__)


@dataclass
class Lineup:
    """A team's starters and bench for one scoring window."""

    team_id: str
    window_id: str
    starters: List[str] = field(default_factory=list)
    bench: List[str] = field(default_factory=list)
    is_locked: bool = False

    def player_ids(self) -> List[str]:
        return self.starters + self.bench


class InMemoryRosterStore:
    """Roster entries and lineups held in process memory."""

    def __init__(self):
        self._entries: List[RosterEntry] = []
        self._lineups: Dict[Tuple[str, str], Lineup] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Rosters
    # ------------------------------------------------------------------

    def add_roster_entry(
        self,
        team_id: str,
        player_id: str,
        session_id: str,
        now: Optional[datetime] = None,
    ) -> RosterEntry:
        """Grant ``team_id`` ownership of ``player_id``.

        Raises:
            PlayerAlreadyDrafted: The player is already rostered in this draft.
        """
        with self._lock:
            for entry in self._entries:
                if entry.session_id == session_id and entry.player_id == player_id:
                    raise PlayerAlreadyDrafted(
                        f"Player {player_id} is already on team {entry.team_id}"
                    )
            entry = RosterEntry(
                team_id=team_id,
                player_id=player_id,
                session_id=session_id,
                acquired_at=(now or utc_now()).isoformat(),
            )
            self._entries.append(entry)

        logger.debug("Roster entry: team %s <- player %s", team_id, player_id)
        return entry

    def list_drafted_player_ids(self, session_id: str) -> List[str]:
        with self._lock:
            return [e.player_id for e in self._entries if e.session_id == session_id]

    def get_roster(self, team_id: str) -> List[RosterEntry]:
        with self._lock:
            return [e for e in self._entries if e.team_id == team_id]

    def get_roster_player_ids(self, team_id: str) -> List[str]:
        return [entry.player_id for entry in self.get_roster(team_id)]

    # ------------------------------------------------------------------
    # Lineups
    # ------------------------------------------------------------------

    def set_lineup(self, lineup: Lineup):
        """Store a lineup, replacing any earlier one for the same window."""
        key = (lineup.team_id, lineup.window_id)
        with self._lock:
            existing = self._lineups.get(key)
            if existing is not None and existing.is_locked:
                raise ValueError(
                    f"Lineup for team {lineup.team_id} is locked for "
                    f"window {lineup.window_id}"
                )
            self._lineups[key] = lineup

    def get_lineup(self, team_id: str, window_id: str) -> Optional[Lineup]:
        return self._lineups.get((team_id, window_id))

    def lock_lineups(self, window_id: str) -> int:
        """Lock every unlocked lineup of a window. Returns how many changed."""
        locked = 0
        with self._lock:
            for (_, lineup_window), lineup in self._lineups.items():
                if lineup_window == window_id and not lineup.is_locked:
                    lineup.is_locked = True
                    locked += 1
        logger.info("Locked %d lineups for window %s", locked, window_id)
        return locked
