"""Logging service singleton used by the demo runners."""

import threading
from typing import Callable, List, Optional

from lazysingleton.infrastructure.logging import get_logger
from lazysingleton.infrastructure.patterns import GuardedSingleton, SingletonEnum

logger = get_logger(__name__)


class LoggingService(GuardedSingleton):
    """Console logging service; at most one exists per process."""

    def __init__(self, writer: Optional[Callable[[str], None]] = None):
        self._writer = writer or print
        self._history: List[str] = []
        self._lock = threading.Lock()
        self._writer("Logging Service Initialized")
        logger.debug("Logging service constructed", service_id=id(self))

    def log(self, message: str) -> str:
        """Write a log line and return it."""
        line = f"[Log] : {message}"
        with self._lock:
            self._history.append(line)
        self._writer(line)
        return line

    @property
    def history(self) -> List[str]:
        with self._lock:
            return list(self._history)


class AuditTrail(SingletonEnum):
    """Append-only audit trail that can never be constructed twice."""

    INSTANCE = "audit-trail"

    def __init__(self, *args):
        self._entries: List[str] = []
        self._lock = threading.Lock()

    def record(self, event: str) -> int:
        """Record an event and return its sequence number."""
        with self._lock:
            self._entries.append(event)
            return len(self._entries)

    def entries(self) -> List[str]:
        with self._lock:
            return list(self._entries)
