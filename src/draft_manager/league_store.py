"""League store - in-process home for league settings and status."""

import logging
import threading
from typing import Dict, List, Optional

from src.draft_manager.draft_state import League, LeagueStatus

logger = logging.getLogger(__name__)


class LeagueNotFound(KeyError):
    pass


class InMemoryLeagueStore:
    """Holds leagues keyed by league_id."""

    def __init__(self):
        self._leagues: Dict[str, League] = {}
        self._lock = threading.Lock()

    def add_league(self, league: League):
        with self._lock:
            self._leagues[league.league_id] = league

    def get_league(self, league_id: str) -> Optional[League]:
        return self._leagues.get(league_id)

    def get_participants(self, league_id: str) -> List[str]:
        return list(self._require(league_id).team_ids)

    def get_roster_size(self, league_id: str) -> int:
        return self._require(league_id).roster_size

    def mark_league_drafting(self, league_id: str):
        self._set_status(league_id, LeagueStatus.DRAFTING)

    def mark_league_in_season(self, league_id: str):
        self._set_status(league_id, LeagueStatus.IN_SEASON)

    def _set_status(self, league_id: str, status: LeagueStatus):
        with self._lock:
            league = self._require(league_id)
            previous = league.status
            league.status = status
        logger.info(
            "League %s status %s -> %s", league_id, previous.value, status.value
        )

    def _require(self, league_id: str) -> League:
        league = self._leagues.get(league_id)
        if league is None:
            raise LeagueNotFound(f"League {league_id} not found")
        return league
