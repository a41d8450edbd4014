"""Contracts for the collaborators the draft engine depends on."""

from typing import Any, Callable, Dict, Hashable, Iterable, List, Optional, Protocol

from src.draft_manager.draft_state import RosterEntry


class RosterStore(Protocol):
    def add_roster_entry(
        self, team_id: str, player_id: str, session_id: str
    ) -> RosterEntry: ...

    def list_drafted_player_ids(self, session_id: str) -> List[str]: ...


class PlayerSource(Protocol):
    def get_player(self, player_id: str) -> Optional[Any]: ...

    def list_available_players(self, exclude_ids: Iterable[str]) -> List[Any]: ...


class LeagueStore(Protocol):
    def get_participants(self, league_id: str) -> List[str]: ...

    def get_roster_size(self, league_id: str) -> int: ...

    def mark_league_drafting(self, league_id: str) -> None: ...

    def mark_league_in_season(self, league_id: str) -> None: ...


class NotificationSink(Protocol):
    def publish(
        self, session_id: str, event_kind: str, payload: Dict[str, Any]
    ) -> None: ...


class TimerFacility(Protocol):
    def schedule_once(
        self, key: Hashable, delay: float, callback: Callable[[], None]
    ) -> None: ...

    def cancel(self, key: Hashable) -> bool: ...
