"""Draft controller - orchestrates draft start, pick flow and auto-picks."""

import logging
import random
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional

from src.draft_manager.config import (
    EVENT_DRAFT_COMPLETE,
    EVENT_DRAFT_STARTED,
    EVENT_PICK_MADE,
)
from src.draft_manager.draft_rules import (
    DraftError,
    DraftNotFound,
    DraftRules,
    NoPlayersAvailable,
    PlayerAlreadyDrafted,
    ValidationError,
)
from src.draft_manager.draft_state import DraftPick, DraftSession, DraftStatus, utc_now
from src.draft_manager.interfaces import (
    LeagueStore,
    NotificationSink,
    PlayerSource,
    RosterStore,
)
from src.draft_manager.notifications import SafeNotifier
from src.draft_manager.player_catalog import Player
from src.draft_manager.scheduler import TurnTimeoutScheduler
from src.draft_manager.session_repository import DraftSessionRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PickResult:
    pick: DraftPick
    is_complete: bool


@dataclass(frozen=True)
class DraftView:
    """Everything a client needs to render the draft room."""

    session: DraftSession
    available_players: List[Player]
    current_team_id: Optional[str]
    pick_deadline: Optional[datetime]


class DraftController:
    """Main controller for draft orchestration.

    Coordinates DraftRules (validation), the session repository (the
    serialization point), the roster store, the turn-timeout scheduler
    and the notification sink. Human picks and timer-fired auto-picks
    share one code path, :meth:`_apply_pick`, which always runs inside
    the session's transaction. Roster writes, timers and notifications are
    registered as commit hooks, so a pick that fails to persist leaves no
    trace outside the restored session.
    """

    def __init__(
        self,
        repository: DraftSessionRepository,
        league_store: LeagueStore,
        player_source: PlayerSource,
        roster_store: RosterStore,
        scheduler: TurnTimeoutScheduler,
        notification_sink: Optional[NotificationSink] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.repository = repository
        self.league_store = league_store
        self.player_source = player_source
        self.roster_store = roster_store
        self.scheduler = scheduler
        self.notifier = SafeNotifier(notification_sink)
        self.rules = DraftRules()
        self.rng = rng or random.Random()
        self.clock = clock

        self.scheduler.bind(self.auto_pick)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def start_draft(self, session_id: str) -> List[str]:
        """Randomize the draft order and open pick 1.

        Returns:
            The draft order (team IDs, first pick first).

        Raises:
            DraftNotFound, AlreadyStarted, NotEnoughParticipants
        """
        with self.repository.transaction(session_id) as session:
            participants = self.league_store.get_participants(session.league_id)
            self.rules.check_can_start(session, participants)

            draft_order = list(participants)
            self.rng.shuffle(draft_order)

            session.start(draft_order, self.clock())
            seconds_per_pick = session.seconds_per_pick
            payload = {"draft_order": list(draft_order), "start_time": session.start_time}

            def _on_start():
                self.league_store.mark_league_drafting(session.league_id)
                self.scheduler.arm(session_id, 1, seconds_per_pick)
                self.notifier.publish(session_id, EVENT_DRAFT_STARTED, payload)

            self.repository.on_commit(session_id, _on_start)

        logger.info(
            "Draft %s started: %d teams, order %s",
            session_id,
            len(draft_order),
            draft_order,
        )
        return draft_order

    def resume_draft(self, session_id: str) -> Optional[int]:
        """Re-arm the turn timer of a draft restored from disk.

        The timer gets whatever is left of the current pick's allowance,
        or fires immediately when the deadline has already passed.

        Returns:
            The pick number that was armed, or None if the draft is not
            in progress.

        Raises:
            DraftNotFound
        """
        with self.repository.transaction(session_id) as session:
            if not session.is_in_progress:
                return None
            pick_number = session.current_pick
            deadline = session.pick_deadline()
            if deadline is None:
                delay = float(session.seconds_per_pick)
            else:
                delay = max((deadline - self.clock()).total_seconds(), 0.0)
            self.repository.on_commit(
                session_id, lambda: self.scheduler.arm(session_id, pick_number, delay)
            )

        logger.info(
            "Resumed draft %s at pick %d (%.1fs left)", session_id, pick_number, delay
        )
        return pick_number

    def resume_saved_drafts(self) -> List[str]:
        """Resume every saved draft that was in progress. Returns their IDs."""
        persistence = self.repository.persistence
        if persistence is None:
            return []

        resumed = []
        for info in persistence.list_saved_drafts():
            if info["status"] != DraftStatus.IN_PROGRESS.value:
                continue
            try:
                if self.resume_draft(info["session_id"]) is not None:
                    resumed.append(info["session_id"])
            except DraftNotFound:
                logger.warning("Saved draft %s vanished before resume", info["session_id"])
        return resumed

    def submit_pick(
        self,
        session_id: str,
        team_id: str,
        player_id: str,
        pick_number: Optional[int] = None,
    ) -> PickResult:
        """Validate and execute a human pick.

        Args:
            session_id: The draft.
            team_id: Team making the pick; must be on the clock.
            player_id: Player being drafted.
            pick_number: The pick the caller believes it is answering.
                When given and the draft has moved past it, the pick
                fails with StalePick instead of landing on a later turn.

        Raises:
            ValidationError: Blank IDs or unknown player.
            DraftNotFound, DraftNotInProgress, NotYourTurn, StalePick,
            PlayerAlreadyDrafted
        """
        if not team_id or not str(team_id).strip():
            raise ValidationError("team_id is required")
        if not player_id or not str(player_id).strip():
            raise ValidationError("player_id is required")
        if self.player_source.get_player(player_id) is None:
            raise ValidationError(f"Player {player_id} not found")

        with self.repository.transaction(session_id) as session:
            return self._apply_pick(
                session,
                team_id,
                player_id,
                is_auto_pick=False,
                expected_pick=pick_number,
            )

    def auto_pick(self, session_id: str, pick_number: int) -> Optional[PickResult]:
        """Pick the best available player for a team that timed out.

        Stale or obsolete timers are a silent no-op (returns None).

        Raises:
            NoPlayersAvailable: Nobody left to draft; the draft stalls.
        """
        if not self.repository.exists(session_id):
            logger.info("Draft %s not found, skipping auto-pick", session_id)
            return None

        try:
            with self.repository.transaction(session_id) as session:
                if session.current_pick != pick_number:
                    logger.debug(
                        "Pick %d already made in draft %s, skipping auto-pick",
                        pick_number,
                        session_id,
                    )
                    return None

                if not session.is_in_progress:
                    logger.info(
                        "Draft %s is not in progress, skipping auto-pick", session_id
                    )
                    return None

                drafted = session.drafted_player_ids()
                drafted.update(self.roster_store.list_drafted_player_ids(session_id))
                available = self.player_source.list_available_players(drafted)
                if not available:
                    raise NoPlayersAvailable(
                        f"No players available for auto-pick in draft {session_id}"
                    )

                best = available[0]
                result = self._apply_pick(
                    session,
                    session.turn_owner(pick_number),
                    best.player_id,
                    is_auto_pick=True,
                    expected_pick=pick_number,
                )
        except DraftNotFound:
            logger.info("Draft %s disappeared, skipping auto-pick", session_id)
            return None

        logger.info(
            "Auto-picked %s for team %s (draft %s pick %d)",
            best.gamer_tag,
            result.pick.team_id,
            session_id,
            pick_number,
        )
        return result

    def get_draft_view(self, session_id: str) -> DraftView:
        """Snapshot of the draft for clients.

        Raises:
            DraftNotFound
        """
        session = self.repository.get(session_id)
        if session is None:
            raise DraftNotFound(f"Draft {session_id} not found")

        available = self.player_source.list_available_players(
            session.drafted_player_ids()
        )
        current_team_id = session.turn_owner() if session.is_in_progress else None

        return DraftView(
            session=session,
            available_players=available,
            current_team_id=current_team_id,
            pick_deadline=session.pick_deadline(),
        )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _apply_pick(
        self,
        session: DraftSession,
        team_id: Optional[str],
        player_id: str,
        is_auto_pick: bool,
        expected_pick: Optional[int],
    ) -> PickResult:
        """Validate, record, and advance. Caller holds the session lock."""
        try:
            turn_owner = self.rules.check_pick(
                session,
                team_id,
                player_id,
                is_auto_pick=is_auto_pick,
                expected_pick=expected_pick,
            )
            if player_id in self.roster_store.list_drafted_player_ids(session.session_id):
                raise PlayerAlreadyDrafted(
                    f"Player {player_id} is already on a roster in this draft"
                )
        except DraftError as e:
            logger.warning(
                "Invalid pick attempted in draft %s: %s", session.session_id, e
            )
            raise

        session_id = session.session_id
        now = self.clock()
        pick = DraftPick.create(
            session_id=session.session_id,
            team_id=turn_owner,
            player_id=player_id,
            pick_number=session.current_pick,
            round=session.round_for(session.current_pick),
            is_auto_pick=is_auto_pick,
            now=now,
        )

        session.record_pick(pick)

        roster_size = self.league_store.get_roster_size(session.league_id)
        is_complete = self.rules.is_final_pick(session, roster_size)

        if is_complete:
            session.complete(now)
        else:
            session.advance_to_next_pick()

        league_id = session.league_id
        next_pick = session.current_pick
        seconds_per_pick = session.seconds_per_pick
        total_picks = len(session.picks)
        end_time = session.end_time

        # Runs only once the pick is persisted.
        def _on_pick():
            self.roster_store.add_roster_entry(turn_owner, player_id, session_id, now)
            logger.info(
                "Pick %d (Rd %d): team %s selects %s%s",
                pick.pick_number,
                pick.round,
                turn_owner,
                player_id,
                " [auto]" if is_auto_pick else "",
            )
            if is_complete:
                self.league_store.mark_league_in_season(league_id)
                self.scheduler.cancel_session(session_id)
                logger.info("Draft %s complete after %d picks", session_id, total_picks)
            else:
                self.scheduler.arm(session_id, next_pick, seconds_per_pick)

            self.notifier.publish(
                session_id,
                EVENT_PICK_MADE,
                {
                    "pick_number": pick.pick_number,
                    "round": pick.round,
                    "team_id": pick.team_id,
                    "player_id": pick.player_id,
                    "is_auto_pick": pick.is_auto_pick,
                    "timestamp": pick.timestamp,
                    "is_complete": is_complete,
                },
            )
            if is_complete:
                self.notifier.publish(
                    session_id,
                    EVENT_DRAFT_COMPLETE,
                    {"total_picks": total_picks, "end_time": end_time},
                )

        self.repository.on_commit(session_id, _on_pick)
        return PickResult(pick=pick, is_complete=is_complete)
