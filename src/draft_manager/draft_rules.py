"""Draft rule enforcement and pick validation."""

from typing import List, Optional

from src.draft_manager.config import MIN_PARTICIPANTS
from src.draft_manager.draft_state import DraftSession, DraftStatus


class DraftError(Exception):
    """Base class for every draft-engine failure."""


class ValidationError(DraftError):
    """Raised when input is malformed, before any state is touched."""


class DraftNotFound(DraftError):
    pass


class AlreadyStarted(DraftError):
    pass


class NotEnoughParticipants(DraftError):
    pass


class DraftNotInProgress(DraftError):
    pass


class NotYourTurn(DraftError):
    pass


class StalePick(NotYourTurn):
    """The pick number the caller answered has already been filled."""


class PlayerAlreadyDrafted(DraftError):
    pass


class NoPlayersAvailable(DraftError):
    """Auto-pick found nobody left to draft. Stalls the draft."""


class DraftRules:
    """Enforces lifecycle and pick rules against a session.

    Stateless; every check reads the session it is handed, which the
    caller must have loaded under the session lock.
    """

    def check_can_start(self, session: DraftSession, participants: List[str]):
        """
        Raises:
            AlreadyStarted: Session is in progress or completed.
            NotEnoughParticipants: Fewer than two teams in the league.
        """
        if session.status != DraftStatus.NOT_STARTED:
            raise AlreadyStarted(
                f"Draft {session.session_id} has already started or completed"
            )
        if len(participants) < MIN_PARTICIPANTS:
            raise NotEnoughParticipants(
                f"Need at least {MIN_PARTICIPANTS} teams to start draft "
                f"(have {len(participants)})"
            )

    def check_pick(
        self,
        session: DraftSession,
        team_id: Optional[str],
        player_id: str,
        is_auto_pick: bool = False,
        expected_pick: Optional[int] = None,
    ) -> str:
        """
        Validate a pick against the current state.

        Returns:
            The team on the clock, which is the team the pick is credited to.

        Raises:
            DraftNotInProgress, StalePick, NotYourTurn, PlayerAlreadyDrafted
        """
        # Check 1: Is the draft running?
        if not session.is_in_progress:
            raise DraftNotInProgress(
                f"Draft {session.session_id} is not in progress "
                f"(status: {session.status.value})"
            )

        # Check 2: Is the caller still answering the current pick?
        if expected_pick is not None and expected_pick != session.current_pick:
            raise StalePick(
                f"Pick {expected_pick} has already been made "
                f"(now on pick {session.current_pick})"
            )

        # Check 3: Is it this team's turn? (Auto-picks act for the owner)
        turn_owner = session.turn_owner()
        if not is_auto_pick and team_id != turn_owner:
            raise NotYourTurn(
                f"Not team {team_id}'s turn to pick (current: {turn_owner})"
            )

        # Check 4: Is player available?
        if player_id in session.drafted_player_ids():
            raise PlayerAlreadyDrafted(f"Player {player_id} has already been drafted")

        return turn_owner

    @staticmethod
    def is_final_pick(session: DraftSession, roster_size: int) -> bool:
        """Whether the current pick fills the last roster spot in the league."""
        total_picks = session.team_count * roster_size
        return session.current_pick >= total_picks
