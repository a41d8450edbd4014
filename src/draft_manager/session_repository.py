"""Session repository - the serialization point for draft mutations.

Every read-modify-write of a draft session goes through
:meth:`DraftSessionRepository.transaction`, which holds that session's
lock for the whole block. Concurrent pick attempts for one pick number
therefore observe each other's writes; only the first can succeed.
"""

import copy
import logging
import threading
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from src.draft_manager.draft_rules import DraftNotFound
from src.draft_manager.draft_state import DraftSession
from src.draft_manager.state_persistence import StatePersistence

logger = logging.getLogger(__name__)

CommitHook = Callable[[], None]


class DraftSessionRepository:
    """Holds live sessions with one re-entrant lock per session.

    When a :class:`StatePersistence` is supplied, every committed
    transaction is written through to disk and unknown session IDs are
    looked up there before giving up.
    """

    def __init__(self, persistence: Optional[StatePersistence] = None):
        self.persistence = persistence
        self._sessions: Dict[str, DraftSession] = {}
        self._locks: Dict[str, threading.RLock] = {}
        self._registry_lock = threading.Lock()
        self._commit_hooks: Dict[str, List[CommitHook]] = {}

    def add(self, session: DraftSession):
        with self._registry_lock:
            if session.session_id in self._sessions:
                raise ValueError(f"Draft {session.session_id} already exists")
            self._sessions[session.session_id] = session
            self._locks[session.session_id] = threading.RLock()
        if self.persistence is not None:
            self.persistence.save_session(session)

    def exists(self, session_id: str) -> bool:
        return self._lookup(session_id) is not None

    def get(self, session_id: str) -> Optional[DraftSession]:
        """Consistent snapshot of a session, or None if unknown."""
        found = self._lookup(session_id)
        if found is None:
            return None
        session, lock = found
        with lock:
            return copy.deepcopy(session)

    def remove(self, session_id: str) -> bool:
        """Forget a session and its saved file.

        Waits for an open transaction on the session to finish, so a
        commit can never write a removed draft back to disk.
        """
        found = self._lookup(session_id)
        if found is None:
            return False
        _, lock = found
        with lock:
            with self._registry_lock:
                self._sessions.pop(session_id, None)
                self._locks.pop(session_id, None)
            if self.persistence is not None:
                self.persistence.delete_session(session_id)
        logger.info("Removed draft %s", session_id)
        return True

    @contextmanager
    def transaction(self, session_id: str) -> Iterator[DraftSession]:
        """Exclusive access to the live session for one logical operation.

        The block's changes are persisted first; hooks registered with
        :meth:`on_commit` run only after that save succeeds, still under
        the session lock. If the block or the save raises, the session is
        restored to the state it had on entry and the hooks are dropped.

        Raises:
            DraftNotFound: No such session, or it was removed while the
                caller waited for the lock.
        """
        found = self._lookup(session_id)
        if found is None:
            raise DraftNotFound(f"Draft {session_id} not found")
        session, lock = found

        with lock:
            if not self._is_registered(session):
                raise DraftNotFound(f"Draft {session_id} not found")

            outermost = session_id not in self._commit_hooks
            hooks = self._commit_hooks.setdefault(session_id, [])
            mark = len(hooks)
            snapshot = copy.deepcopy(session)
            try:
                yield session
                if outermost and self.persistence is not None:
                    if self._is_registered(session):
                        self.persistence.save_session(session)
            except BaseException:
                session.__dict__.update(snapshot.__dict__)
                del hooks[mark:]
                if outermost:
                    del self._commit_hooks[session_id]
                raise

            if outermost:
                del self._commit_hooks[session_id]
                for hook in hooks:
                    hook()

    def on_commit(self, session_id: str, hook: CommitHook):
        """Defer ``hook`` until the open transaction on ``session_id`` commits.

        Raises:
            RuntimeError: No transaction is open on the session.
        """
        hooks = self._commit_hooks.get(session_id)
        if hooks is None:
            raise RuntimeError(f"No open transaction on draft {session_id}")
        hooks.append(hook)

    def _is_registered(self, session: DraftSession) -> bool:
        with self._registry_lock:
            return self._sessions.get(session.session_id) is session

    def _lookup(
        self, session_id: str
    ) -> Optional[Tuple[DraftSession, threading.RLock]]:
        with self._registry_lock:
            session = self._sessions.get(session_id)
            if session is not None:
                return session, self._locks[session_id]
            if self.persistence is None:
                return None

            loaded = self.persistence.load_session(session_id)
            if loaded is None:
                return None
            lock = threading.RLock()
            self._sessions[session_id] = loaded
            self._locks[session_id] = lock
            logger.info("Restored draft %s from disk", session_id)
            return loaded, lock
