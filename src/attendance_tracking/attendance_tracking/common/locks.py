from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Dict, Hashable, Iterator

from ..core.constants import DEFAULT_LOCK_TIMEOUT_SECONDS
from ..core.exceptions import ConflictError

logger = logging.getLogger(__name__)


class KeyedLock:
    """One mutex per key, created on demand and dropped when idle.

    Used to serialize read-then-write sequences on the same (employee, date).
    A caller that cannot acquire the key within ``timeout`` seconds gets a
    ``ConflictError`` instead of waiting forever.
    """

    def __init__(self, *, timeout: float = DEFAULT_LOCK_TIMEOUT_SECONDS):
        self._timeout = float(timeout)
        self._guard = threading.Lock()
        self._locks: Dict[Hashable, threading.Lock] = {}
        self._users: Dict[Hashable, int] = {}

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
            self._users[key] = self._users.get(key, 0) + 1

        acquired = lock.acquire(timeout=self._timeout)
        try:
            if not acquired:
                logger.warning("Lock timeout for key %s after %.1fs", key, self._timeout)
                raise ConflictError("Another attendance operation is in progress, please retry")
            yield
        finally:
            if acquired:
                lock.release()
            with self._guard:
                self._users[key] -= 1
                if self._users[key] == 0:
                    del self._users[key]
                    del self._locks[key]

    def active_keys(self) -> int:
        with self._guard:
            return len(self._locks)
