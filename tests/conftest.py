"""Shared fixtures for the draft, scoring and pipeline test suites."""

import random
from datetime import datetime, timedelta, timezone

import pytest

from src.data_pipeline.cleaning import DataCleaner
from src.data_pipeline.transformation import DataTransformer
from src.draft_manager.draft_controller import DraftController
from src.draft_manager.draft_state import DraftSession, League
from src.draft_manager.league_store import InMemoryLeagueStore
from src.draft_manager.notifications import InMemoryNotificationSink, SafeNotifier
from src.draft_manager.player_catalog import Player, PlayerCatalog
from src.draft_manager.roster_store import InMemoryRosterStore
from src.draft_manager.scheduler import TurnTimeoutScheduler
from src.draft_manager.session_repository import DraftSessionRepository
from src.draft_manager.state_persistence import StatePersistence

BASE_TIME = datetime(2025, 3, 1, 18, 0, tzinfo=timezone.utc)


# ------------------------------------------------------------------
# Test doubles
# ------------------------------------------------------------------


class ManualTimerFacility:
    """Timer facility that never fires on its own.

    Tests trigger callbacks with :meth:`fire`, which makes timeout paths
    deterministic.
    """

    def __init__(self):
        self.scheduled = {}
        self.delays = {}
        self.cancelled = []

    def schedule_once(self, key, delay, callback):
        self.scheduled[key] = callback
        self.delays[key] = delay

    def cancel(self, key):
        self.cancelled.append(key)
        return self.scheduled.pop(key, None) is not None

    def fire(self, key):
        callback = self.scheduled.pop(key)
        return callback()


class FailingPersistence(StatePersistence):
    """Disk store whose next save raises once ``fail_next`` is set."""

    def __init__(self, storage_dir):
        super().__init__(storage_dir)
        self.fail_next = False

    def save_session(self, session):
        if self.fail_next:
            self.fail_next = False
            raise OSError("disk full")
        return super().save_session(session)


class StepClock:
    """Clock that advances one second per call."""

    def __init__(self, start=BASE_TIME):
        self.now = start

    def __call__(self):
        current = self.now
        self.now = self.now + timedelta(seconds=1)
        return current


def make_players(count, prefix="p"):
    """Players with ADP 1..count, so p01 is the best available."""
    return [
        Player(
            player_id=f"{prefix}{i:02d}",
            gamer_tag=f"Gamer{i:02d}",
            team="OPT",
            role="SMG" if i % 2 else "AR",
            average_draft_position=float(i),
        )
        for i in range(1, count + 1)
    ]


# ------------------------------------------------------------------
# Draft fixtures
# ------------------------------------------------------------------


@pytest.fixture
def timers():
    return ManualTimerFacility()


@pytest.fixture
def sink():
    return InMemoryNotificationSink()


@pytest.fixture
def league_store():
    return InMemoryLeagueStore()


@pytest.fixture
def roster_store():
    return InMemoryRosterStore()


@pytest.fixture
def repository():
    return DraftSessionRepository()


@pytest.fixture
def catalog():
    return PlayerCatalog(make_players(40))


@pytest.fixture
def scheduler(timers, sink):
    return TurnTimeoutScheduler(timer_facility=timers, notifier=SafeNotifier(sink))


@pytest.fixture
def controller(repository, league_store, catalog, roster_store, scheduler, sink):
    return DraftController(
        repository=repository,
        league_store=league_store,
        player_source=catalog,
        roster_store=roster_store,
        scheduler=scheduler,
        notification_sink=sink,
        rng=random.Random(7),
        clock=StepClock(),
    )


@pytest.fixture
def make_draft(league_store, repository):
    """Factory: register a league with ``team_count`` teams and its session."""

    def _make(team_count=4, roster_size=6, seconds_per_pick=60, session_id="s1"):
        league_id = f"league-{session_id}"
        league = League(
            league_id=league_id,
            name="Test League",
            team_ids=[f"t{i}" for i in range(1, team_count + 1)],
            team_names=[f"Team {i}" for i in range(1, team_count + 1)],
            roster_size=roster_size,
            seconds_per_pick=seconds_per_pick,
        )
        league_store.add_league(league)
        session = DraftSession(
            session_id=session_id,
            league_id=league_id,
            seconds_per_pick=seconds_per_pick,
        )
        repository.add(session)
        return session_id

    return _make


# ------------------------------------------------------------------
# Pipeline fixtures
# ------------------------------------------------------------------


@pytest.fixture(scope="module")
def cleaner():
    return DataCleaner()


@pytest.fixture(scope="module")
def transformer():
    return DataTransformer()
