"""Turn-timeout scheduling - auto-pick when a team runs out of time.

Each armed timer is keyed by ``(session_id, pick_number)``. Re-arming a
key replaces the old timer, and arming pick P cancels the session's
timers for earlier picks. A timer that still fires late is harmless: the
auto-pick handler re-checks the pick number under the session lock.
"""

import logging
import threading
from typing import Callable, Dict, Hashable, Optional, Set, Tuple

from src.draft_manager.config import EVENT_DRAFT_STALLED
from src.draft_manager.draft_rules import DraftError, NoPlayersAvailable
from src.draft_manager.interfaces import TimerFacility
from src.draft_manager.notifications import SafeNotifier

logger = logging.getLogger(__name__)

TimerKey = Tuple[str, int]
AutoPickHandler = Callable[[str, int], object]


class ThreadingTimerFacility:
    """Runs callbacks on daemon ``threading.Timer`` threads."""

    def __init__(self):
        self._timers: Dict[Hashable, threading.Timer] = {}
        self._lock = threading.Lock()

    def schedule_once(self, key: Hashable, delay: float, callback: Callable[[], None]):
        timer = threading.Timer(max(delay, 0.0), self._run, args=(key, callback))
        timer.daemon = True
        with self._lock:
            previous = self._timers.pop(key, None)
            self._timers[key] = timer
        if previous is not None:
            previous.cancel()
        timer.start()

    def cancel(self, key: Hashable) -> bool:
        with self._lock:
            timer = self._timers.pop(key, None)
        if timer is None:
            return False
        timer.cancel()
        return True

    def pending(self) -> int:
        with self._lock:
            return len(self._timers)

    def shutdown(self):
        with self._lock:
            timers = list(self._timers.values())
            self._timers.clear()
        for timer in timers:
            timer.cancel()

    def _run(self, key: Hashable, callback: Callable[[], None]):
        with self._lock:
            if self._timers.get(key) is threading.current_thread():
                del self._timers[key]
        callback()


class TurnTimeoutScheduler:
    """Arms one auto-pick attempt per outstanding turn.

    The handler (normally :meth:`DraftController.auto_pick`) is bound after
    construction because the controller itself arms the scheduler.
    """

    def __init__(
        self,
        timer_facility: Optional[TimerFacility] = None,
        notifier: Optional[SafeNotifier] = None,
    ):
        self.timer_facility = timer_facility or ThreadingTimerFacility()
        self.notifier = notifier or SafeNotifier()
        self._handler: Optional[AutoPickHandler] = None
        self._armed: Dict[str, Set[int]] = {}
        self._lock = threading.Lock()

    def bind(self, handler: AutoPickHandler):
        self._handler = handler

    def arm(self, session_id: str, pick_number: int, delay_seconds: float):
        """Schedule the auto-pick for ``pick_number`` after ``delay_seconds``."""
        with self._lock:
            armed = self._armed.setdefault(session_id, set())
            superseded = [p for p in armed if p < pick_number]
            for p in superseded:
                armed.discard(p)
            armed.add(pick_number)

        for p in superseded:
            self.timer_facility.cancel((session_id, p))

        self.timer_facility.schedule_once(
            (session_id, pick_number),
            delay_seconds,
            lambda: self.fire(session_id, pick_number),
        )
        logger.debug(
            "Armed auto-pick for draft %s pick %d in %ss",
            session_id,
            pick_number,
            delay_seconds,
        )

    def cancel_session(self, session_id: str):
        """Drop every outstanding timer of a session."""
        with self._lock:
            armed = self._armed.pop(session_id, set())
        for pick_number in armed:
            self.timer_facility.cancel((session_id, pick_number))

    def armed_picks(self, session_id: str) -> Set[int]:
        with self._lock:
            return set(self._armed.get(session_id, set()))

    def fire(self, session_id: str, pick_number: int):
        """Timer callback. There is no caller to report to, so failures
        are escalated through logging and the notification sink."""
        with self._lock:
            armed = self._armed.get(session_id)
            if armed is not None:
                armed.discard(pick_number)
                if not armed:
                    del self._armed[session_id]

        if self._handler is None:
            logger.error(
                "Auto-pick timer fired for draft %s pick %d with no handler bound",
                session_id,
                pick_number,
            )
            return

        try:
            self._handler(session_id, pick_number)
        except NoPlayersAvailable as e:
            logger.critical(
                "Draft %s stalled at pick %d: %s. Manual intervention required.",
                session_id,
                pick_number,
                e,
            )
            self.notifier.publish(
                session_id,
                EVENT_DRAFT_STALLED,
                {"pick_number": pick_number, "reason": str(e)},
            )
        except DraftError as e:
            logger.info(
                "Auto-pick for draft %s pick %d lost a race: %s",
                session_id,
                pick_number,
                e,
            )
        except Exception:
            logger.exception(
                "Auto-pick for draft %s pick %d failed", session_id, pick_number
            )
