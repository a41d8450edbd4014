"""Tests for draft controller - draft start, pick execution and state management."""

import math
import random
import threading

import pytest

from src.draft_manager.config import (
    EVENT_DRAFT_COMPLETE,
    EVENT_DRAFT_STARTED,
    EVENT_PICK_MADE,
)
from src.draft_manager.draft_controller import DraftController
from src.draft_manager.draft_rules import (
    AlreadyStarted,
    DraftError,
    DraftNotFound,
    DraftNotInProgress,
    NotEnoughParticipants,
    NotYourTurn,
    PlayerAlreadyDrafted,
    StalePick,
    ValidationError,
)
from src.draft_manager.draft_state import DraftSession, DraftStatus, League, LeagueStatus
from src.draft_manager.session_repository import DraftSessionRepository

from tests.conftest import FailingPersistence, StepClock


# ── Helpers ──────────────────────────────────────────────────────────

def _next_free_player(controller, session_id):
    view = controller.get_draft_view(session_id)
    return view.current_team_id, view.available_players[0].player_id


def _make_picks(controller, session_id, count):
    results = []
    for _ in range(count):
        team_id, player_id = _next_free_player(controller, session_id)
        results.append(controller.submit_pick(session_id, team_id, player_id))
    return results


class ExplodingSink:
    def publish(self, session_id, event_kind, payload):
        raise RuntimeError("transport down")


# ── Starting a draft ─────────────────────────────────────────────────

class TestStartDraft:
    def test_start_randomizes_participants(self, controller, make_draft, repository):
        session_id = make_draft(team_count=4)
        order = controller.start_draft(session_id)

        assert sorted(order) == ["t1", "t2", "t3", "t4"]
        session = repository.get(session_id)
        assert session.status == DraftStatus.IN_PROGRESS
        assert session.draft_order == order
        assert session.current_pick == 1
        assert session.start_time is not None

    def test_start_marks_league_drafting(self, controller, make_draft, league_store):
        session_id = make_draft()
        controller.start_draft(session_id)
        league = league_store.get_league(f"league-{session_id}")
        assert league.status == LeagueStatus.DRAFTING

    def test_start_arms_first_pick(self, controller, make_draft, timers):
        session_id = make_draft(seconds_per_pick=45)
        controller.start_draft(session_id)
        assert (session_id, 1) in timers.scheduled
        assert timers.delays[(session_id, 1)] == 45

    def test_start_publishes_order(self, controller, make_draft, sink):
        session_id = make_draft()
        order = controller.start_draft(session_id)
        events = sink.events(session_id, EVENT_DRAFT_STARTED)
        assert len(events) == 1
        assert events[0].payload["draft_order"] == order

    def test_start_twice(self, controller, make_draft):
        session_id = make_draft()
        controller.start_draft(session_id)
        with pytest.raises(AlreadyStarted):
            controller.start_draft(session_id)

    def test_not_enough_participants_leaves_session_untouched(
        self, controller, make_draft, repository, timers
    ):
        session_id = make_draft(team_count=1)
        with pytest.raises(NotEnoughParticipants):
            controller.start_draft(session_id)
        assert repository.get(session_id).status == DraftStatus.NOT_STARTED
        assert timers.scheduled == {}

    def test_unknown_draft(self, controller):
        with pytest.raises(DraftNotFound):
            controller.start_draft("nope")


# ── Submitting picks ─────────────────────────────────────────────────

class TestSubmitPick:
    def test_first_pick(self, controller, make_draft, roster_store):
        session_id = make_draft()
        order = controller.start_draft(session_id)

        result = controller.submit_pick(session_id, order[0], "p05")

        assert result.pick.pick_number == 1
        assert result.pick.round == 1
        assert result.pick.team_id == order[0]
        assert not result.pick.is_auto_pick
        assert not result.is_complete
        assert roster_store.get_roster_player_ids(order[0]) == ["p05"]

    @pytest.mark.parametrize("k", [1, 3, 4, 5, 9])
    def test_after_k_picks(self, controller, make_draft, repository, k):
        session_id = make_draft(team_count=4)
        controller.start_draft(session_id)
        _make_picks(controller, session_id, k)

        session = repository.get(session_id)
        assert len(session.picks) == k
        assert session.current_pick == k + 1
        assert session.current_round == math.ceil((k + 1) / 4)
        assert [p.pick_number for p in session.picks] == list(range(1, k + 1))

    def test_snake_turn_order(self, controller, make_draft, repository):
        session_id = make_draft(team_count=3)
        order = controller.start_draft(session_id)
        results = _make_picks(controller, session_id, 6)
        teams = [r.pick.team_id for r in results]
        assert teams == order + list(reversed(order))

    def test_full_draft_completes(
        self, controller, make_draft, repository, league_store, roster_store, scheduler
    ):
        session_id = make_draft(team_count=4, roster_size=6)
        order = controller.start_draft(session_id)
        results = _make_picks(controller, session_id, 24)

        assert [r.is_complete for r in results] == [False] * 23 + [True]
        session = repository.get(session_id)
        assert session.status == DraftStatus.COMPLETED
        assert session.end_time is not None
        assert league_store.get_league(session.league_id).status == LeagueStatus.IN_SEASON
        assert scheduler.armed_picks(session_id) == set()
        for team_id in order:
            assert len(roster_store.get_roster_player_ids(team_id)) == 6

        with pytest.raises(DraftNotInProgress):
            controller.submit_pick(session_id, order[0], "p30")

    def test_wrong_team(self, controller, make_draft, repository):
        session_id = make_draft()
        order = controller.start_draft(session_id)
        with pytest.raises(NotYourTurn):
            controller.submit_pick(session_id, order[1], "p01")
        assert repository.get(session_id).picks == []

    def test_player_already_drafted_changes_nothing(
        self, controller, make_draft, repository, roster_store
    ):
        session_id = make_draft()
        order = controller.start_draft(session_id)
        controller.submit_pick(session_id, order[0], "p01")
        before = repository.get(session_id)

        with pytest.raises(PlayerAlreadyDrafted):
            controller.submit_pick(session_id, order[1], "p01")

        after = repository.get(session_id)
        assert after.current_pick == before.current_pick
        assert after.picks == before.picks
        assert roster_store.get_roster_player_ids(order[1]) == []

    def test_stale_pick_at_round_turn(self, controller, make_draft, repository):
        session_id = make_draft(team_count=2)
        order = controller.start_draft(session_id)
        controller.submit_pick(session_id, order[0], "p01", pick_number=1)
        controller.submit_pick(session_id, order[1], "p02", pick_number=2)

        # order[1] is on the clock again for pick 3; a retry of pick 2 must fail
        with pytest.raises(StalePick):
            controller.submit_pick(session_id, order[1], "p03", pick_number=2)
        assert len(repository.get(session_id).picks) == 2

        result = controller.submit_pick(session_id, order[1], "p03", pick_number=3)
        assert result.pick.pick_number == 3
        assert result.pick.round == 2

    def test_blank_ids(self, controller, make_draft):
        session_id = make_draft()
        controller.start_draft(session_id)
        with pytest.raises(ValidationError, match="team_id"):
            controller.submit_pick(session_id, " ", "p01")
        with pytest.raises(ValidationError, match="player_id"):
            controller.submit_pick(session_id, "t1", "")

    def test_unknown_player(self, controller, make_draft):
        session_id = make_draft()
        order = controller.start_draft(session_id)
        with pytest.raises(ValidationError, match="not found"):
            controller.submit_pick(session_id, order[0], "ghost")

    def test_not_started(self, controller, make_draft):
        session_id = make_draft()
        with pytest.raises(DraftNotInProgress):
            controller.submit_pick(session_id, "t1", "p01")

    def test_pick_rearms_timer_and_cancels_previous(self, controller, make_draft, timers):
        session_id = make_draft()
        order = controller.start_draft(session_id)
        controller.submit_pick(session_id, order[0], "p01")

        assert (session_id, 2) in timers.scheduled
        assert (session_id, 1) not in timers.scheduled
        assert (session_id, 1) in timers.cancelled

    def test_player_already_on_a_roster_is_rejected(
        self, controller, make_draft, roster_store, repository
    ):
        session_id = make_draft()
        order = controller.start_draft(session_id)
        roster_store.add_roster_entry("t9", "p01", session_id)

        with pytest.raises(PlayerAlreadyDrafted, match="roster"):
            controller.submit_pick(session_id, order[0], "p01")
        assert repository.get(session_id).picks == []


# ── Persistence failures ─────────────────────────────────────────────

class TestPickPersistenceFailure:
    def _make_persistent_controller(self, tmp_path, league_store, catalog, roster_store,
                                    scheduler, sink):
        persistence = FailingPersistence(tmp_path)
        repository = DraftSessionRepository(persistence)
        controller = DraftController(
            repository=repository,
            league_store=league_store,
            player_source=catalog,
            roster_store=roster_store,
            scheduler=scheduler,
            notification_sink=sink,
            rng=random.Random(7),
            clock=StepClock(),
        )
        league_store.add_league(League(
            league_id="league-s1",
            name="Disk League",
            team_ids=["t1", "t2", "t3", "t4"],
            roster_size=6,
            seconds_per_pick=60,
        ))
        repository.add(DraftSession(session_id="s1", league_id="league-s1", seconds_per_pick=60))
        return controller, repository, persistence

    def test_failed_save_leaves_no_trace(
        self, tmp_path, league_store, catalog, roster_store, scheduler, sink, timers
    ):
        controller, repository, persistence = self._make_persistent_controller(
            tmp_path, league_store, catalog, roster_store, scheduler, sink
        )
        order = controller.start_draft("s1")

        persistence.fail_next = True
        with pytest.raises(OSError, match="disk full"):
            controller.submit_pick("s1", order[0], "p01")

        session = repository.get("s1")
        assert session.current_pick == 1
        assert session.picks == []
        assert persistence.load_session("s1").current_pick == 1
        assert roster_store.list_drafted_player_ids("s1") == []
        assert list(timers.scheduled) == [("s1", 1)]
        assert sink.events("s1", EVENT_PICK_MADE) == []

    def test_retry_after_failed_save_succeeds(
        self, tmp_path, league_store, catalog, roster_store, scheduler, sink, timers
    ):
        controller, repository, persistence = self._make_persistent_controller(
            tmp_path, league_store, catalog, roster_store, scheduler, sink
        )
        order = controller.start_draft("s1")

        persistence.fail_next = True
        with pytest.raises(OSError):
            controller.submit_pick("s1", order[0], "p01")
        result = controller.submit_pick("s1", order[0], "p01")

        assert result.pick.pick_number == 1
        assert roster_store.list_drafted_player_ids("s1") == ["p01"]
        assert persistence.load_session("s1").current_pick == 2
        assert list(timers.scheduled) == [("s1", 2)]
        assert len(sink.events("s1", EVENT_PICK_MADE)) == 1

    def test_failed_start_arms_nothing(
        self, tmp_path, league_store, catalog, roster_store, scheduler, sink, timers
    ):
        controller, repository, persistence = self._make_persistent_controller(
            tmp_path, league_store, catalog, roster_store, scheduler, sink
        )

        persistence.fail_next = True
        with pytest.raises(OSError):
            controller.start_draft("s1")

        assert repository.get("s1").status == DraftStatus.NOT_STARTED
        assert timers.scheduled == {}
        assert sink.events("s1", EVENT_DRAFT_STARTED) == []
        assert league_store.get_league("league-s1").status == LeagueStatus.PRE_DRAFT


# ── Notifications ────────────────────────────────────────────────────

class TestNotifications:
    def test_event_sequence(self, controller, make_draft, sink):
        session_id = make_draft(team_count=2, roster_size=4)
        controller.start_draft(session_id)
        _make_picks(controller, session_id, 8)

        kinds = [e.event_kind for e in sink.events(session_id)]
        assert kinds == (
            [EVENT_DRAFT_STARTED] + [EVENT_PICK_MADE] * 8 + [EVENT_DRAFT_COMPLETE]
        )
        pick_numbers = [
            e.payload["pick_number"] for e in sink.events(session_id, EVENT_PICK_MADE)
        ]
        assert pick_numbers == list(range(1, 9))
        complete = sink.events(session_id, EVENT_DRAFT_COMPLETE)[0]
        assert complete.payload["total_picks"] == 8

    def test_failed_publish_keeps_the_pick(
        self, repository, league_store, catalog, roster_store, scheduler, make_draft
    ):
        controller = DraftController(
            repository=repository,
            league_store=league_store,
            player_source=catalog,
            roster_store=roster_store,
            scheduler=scheduler,
            notification_sink=ExplodingSink(),
        )
        session_id = make_draft()
        order = controller.start_draft(session_id)
        controller.submit_pick(session_id, order[0], "p01")
        assert len(repository.get(session_id).picks) == 1


# ── Concurrency ──────────────────────────────────────────────────────

class TestConcurrentPicks:
    def test_same_pick_number_only_one_wins(self, controller, make_draft, repository):
        session_id = make_draft(team_count=4)
        order = controller.start_draft(session_id)
        attempts = 8
        barrier = threading.Barrier(attempts)
        outcomes = []
        outcome_lock = threading.Lock()

        def attempt(i):
            barrier.wait()
            try:
                controller.submit_pick(
                    session_id, order[0], f"p{i + 1:02d}", pick_number=1
                )
                outcome = "ok"
            except DraftError as e:
                outcome = type(e).__name__
            with outcome_lock:
                outcomes.append(outcome)

        threads = [threading.Thread(target=attempt, args=(i,)) for i in range(attempts)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10)

        assert outcomes.count("ok") == 1
        assert outcomes.count("StalePick") == attempts - 1
        session = repository.get(session_id)
        assert len(session.picks) == 1
        assert session.current_pick == 2

    def test_same_player_only_drafted_once(self, controller, make_draft, repository):
        session_id = make_draft(team_count=4)
        order = controller.start_draft(session_id)
        barrier = threading.Barrier(len(order))
        errors = []

        def attempt(team_id):
            barrier.wait()
            try:
                controller.submit_pick(session_id, team_id, "p01")
            except DraftError as e:
                errors.append(e)

        threads = [threading.Thread(target=attempt, args=(t,)) for t in order]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10)

        session = repository.get(session_id)
        assert len(session.picks) == 1
        assert session.picks[0].team_id == order[0]
        assert len(errors) == len(order) - 1


# ── Draft view ───────────────────────────────────────────────────────

class TestDraftView:
    def test_view_during_draft(self, controller, make_draft):
        session_id = make_draft()
        order = controller.start_draft(session_id)
        controller.submit_pick(session_id, order[0], "p01")

        view = controller.get_draft_view(session_id)
        assert view.current_team_id == order[1]
        assert "p01" not in {p.player_id for p in view.available_players}
        assert view.available_players[0].player_id == "p02"
        assert view.pick_deadline is not None

    def test_view_before_start(self, controller, make_draft):
        session_id = make_draft()
        view = controller.get_draft_view(session_id)
        assert view.current_team_id is None
        assert view.pick_deadline is None

    def test_view_unknown_draft(self, controller):
        with pytest.raises(DraftNotFound):
            controller.get_draft_view("nope")
