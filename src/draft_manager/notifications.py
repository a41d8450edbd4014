"""Notification sinks for draft-state transitions.

The real-time transport lives outside this package; anything with a
``publish(session_id, event_kind, payload)`` method can be plugged in.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from src.draft_manager.interfaces import NotificationSink

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DraftEvent:
    session_id: str
    event_kind: str
    payload: Dict[str, Any]


class InMemoryNotificationSink:
    """Keeps every published event, in publish order."""

    def __init__(self):
        self._events: List[DraftEvent] = []
        self._lock = threading.Lock()

    def publish(self, session_id: str, event_kind: str, payload: Dict[str, Any]):
        with self._lock:
            self._events.append(DraftEvent(session_id, event_kind, dict(payload)))

    def events(
        self, session_id: Optional[str] = None, event_kind: Optional[str] = None
    ) -> List[DraftEvent]:
        with self._lock:
            return [
                e
                for e in self._events
                if (session_id is None or e.session_id == session_id)
                and (event_kind is None or e.event_kind == event_kind)
            ]


class LoggingNotificationSink:
    """Writes events to the log. Useful when no transport is attached."""

    def publish(self, session_id: str, event_kind: str, payload: Dict[str, Any]):
        logger.info("[draft %s] %s %s", session_id, event_kind, payload)


class SafeNotifier:
    """Wraps a sink so a failed publish never undoes a committed change."""

    def __init__(self, sink: Optional[NotificationSink] = None):
        self.sink = sink or LoggingNotificationSink()

    def publish(self, session_id: str, event_kind: str, payload: Dict[str, Any]):
        try:
            self.sink.publish(session_id, event_kind, payload)
        except Exception:
            logger.exception(
                "Failed to publish %s for draft %s", event_kind, session_id
            )
