"""Per-key mutual exclusion for check-then-act sequences."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Dict, Hashable, Iterator, List


class KeyedLock:
    """Hands out one ``threading.Lock`` per key.

    A key's lock exists only while some thread holds or waits for it, so
    caller-chosen keys do not accumulate.
    """

    def __init__(self) -> None:
        # key -> [lock, number of threads holding or waiting]
        self._locks: Dict[Hashable, List] = {}
        self._locks_lock = threading.Lock()

    def _get_key_lock(self, key: Hashable) -> threading.Lock:
        """Get or create the lock for ``key`` and register one more user."""
        with self._locks_lock:
            entry = self._locks.get(key)
            if entry is None:
                entry = self._locks[key] = [threading.Lock(), 0]
            entry[1] += 1
            return entry[0]

    def _release_key_lock(self, key: Hashable) -> None:
        with self._locks_lock:
            entry = self._locks[key]
            entry[1] -= 1
            if entry[1] == 0:
                del self._locks[key]

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        lock = self._get_key_lock(key)
        try:
            with lock:
                yield
        finally:
            self._release_key_lock(key)

    def __len__(self) -> int:
        """Number of keys currently held or waited on."""
        with self._locks_lock:
            return len(self._locks)
