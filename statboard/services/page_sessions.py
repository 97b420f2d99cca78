from __future__ import annotations

import logging
import threading
import uuid
from collections import OrderedDict
from typing import Callable, Optional

from statboard.services.coordinator import DashboardCoordinator

logger = logging.getLogger(__name__)


def generate_page_session_id() -> str:
    return f"page-{uuid.uuid4().hex[:12]}"


class PageSessions:
    """
    One DashboardCoordinator (and so one FilterStore) per page session.

    Every page load gets a fresh id and coordinator; nothing is shared between
    browser tabs. The least recently used sessions are closed once more than
    'max_sessions' are open.
    """

    def __init__(self, factory: Callable[[], DashboardCoordinator], max_sessions: int = 64):
        if max_sessions < 1:
            raise ValueError("max_sessions must be at least 1")
        self._factory = factory
        self.max_sessions = max_sessions
        self._lock = threading.Lock()
        self._sessions: "OrderedDict[str, DashboardCoordinator]" = OrderedDict()

    @property
    def active_count(self) -> int:
        return len(self._sessions)

    def open(self) -> str:
        """Start a new page session and return its id."""
        session_id = generate_page_session_id()
        self.ensure(session_id)
        return session_id

    def ensure(self, session_id: Optional[str]) -> DashboardCoordinator:
        """
        Coordinator for 'session_id', created on first use.

        Unknown ids (server restarted, session evicted) get a fresh coordinator
        with the default filters; the caller restores the page's filters on it.
        """
        if not session_id:
            raise ValueError("A page session id is required")

        evicted = []
        with self._lock:
            coordinator = self._sessions.get(session_id)
            if coordinator is not None:
                self._sessions.move_to_end(session_id)
                return coordinator

            coordinator = self._factory()
            self._sessions[session_id] = coordinator
            while len(self._sessions) > self.max_sessions:
                evicted.append(self._sessions.popitem(last=False))

        logger.info(
            "Page session opened",
            extra={"session_id": session_id, "active_sessions": len(self._sessions)},
        )
        for old_id, old in evicted:
            old.close()
            logger.info("Page session evicted", extra={"session_id": old_id})
        return coordinator

    def close(self, session_id: str) -> None:
        with self._lock:
            coordinator = self._sessions.pop(session_id, None)
        if coordinator is not None:
            coordinator.close()
            logger.info("Page session closed", extra={"session_id": session_id})

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions
