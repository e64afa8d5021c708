"""
In-flight Request Guard

Rejects a second submission of the same action from the same client
while the first is still being processed (double-clicked lookups,
repeated chat sends). Keys live in process memory only.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Iterator, Optional, Set, Tuple

from ..exceptions import RequestInFlightError

logger = logging.getLogger(__name__)


class InFlightGuard:
    """Set of (client, action) pairs currently being processed"""

    def __init__(self):
        self._active: Set[Tuple[str, str]] = set()
        self._lock = threading.Lock()

    def acquire(self, client_id: str, action: str) -> None:
        key = (client_id, action)
        with self._lock:
            if key in self._active:
                logger.warning(
                    f"Duplicate {action} request rejected",
                    extra={'session_id': client_id}
                )
                raise RequestInFlightError(action)
            self._active.add(key)

    def release(self, client_id: str, action: str) -> None:
        with self._lock:
            self._active.discard((client_id, action))

    def is_active(self, client_id: str, action: str) -> bool:
        with self._lock:
            return (client_id, action) in self._active

    @contextmanager
    def guard(self, client_id: Optional[str], action: str) -> Iterator[None]:
        """
        Hold the (client, action) slot for the duration of the block.

        Requests without a client id are not guarded.
        """
        if not client_id:
            yield
            return

        self.acquire(client_id, action)
        try:
            yield
        finally:
            self.release(client_id, action)


inflight_guard = InFlightGuard()
