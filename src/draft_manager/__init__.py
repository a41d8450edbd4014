from src.draft_manager.draft_controller import DraftController, DraftView, PickResult
from src.draft_manager.draft_initializer import DraftInitializer
from src.draft_manager.draft_rules import (
    AlreadyStarted,
    DraftError,
    DraftNotFound,
    DraftNotInProgress,
    DraftRules,
    NoPlayersAvailable,
    NotEnoughParticipants,
    NotYourTurn,
    PlayerAlreadyDrafted,
    StalePick,
    ValidationError,
)
from src.draft_manager.draft_state import (
    DraftPick,
    DraftSession,
    DraftStatus,
    League,
    LeagueStatus,
    RosterEntry,
)
from src.draft_manager.league_store import InMemoryLeagueStore
from src.draft_manager.notifications import (
    InMemoryNotificationSink,
    LoggingNotificationSink,
)
from src.draft_manager.player_catalog import Player, PlayerCatalog
from src.draft_manager.roster_store import InMemoryRosterStore, Lineup
from src.draft_manager.roster_validator import LineupError, RosterValidator
from src.draft_manager.scheduler import ThreadingTimerFacility, TurnTimeoutScheduler
from src.draft_manager.session_repository import DraftSessionRepository
from src.draft_manager.state_persistence import StatePersistence

__all__ = [
    "AlreadyStarted",
    "DraftController",
    "DraftError",
    "DraftInitializer",
    "DraftNotFound",
    "DraftNotInProgress",
    "DraftPick",
    "DraftRules",
    "DraftSession",
    "DraftSessionRepository",
    "DraftStatus",
    "DraftView",
    "InMemoryLeagueStore",
    "InMemoryNotificationSink",
    "InMemoryRosterStore",
    "League",
    "LeagueStatus",
    "Lineup",
    "LineupError",
    "LoggingNotificationSink",
    "NoPlayersAvailable",
    "NotEnoughParticipants",
    "NotYourTurn",
    "PickResult",
    "Player",
    "PlayerAlreadyDrafted",
    "PlayerCatalog",
    "RosterEntry",
    "RosterValidator",
    "StalePick",
    "StatePersistence",
    "ThreadingTimerFacility",
    "TurnTimeoutScheduler",
    "ValidationError",
]
