"""Per-key mutual exclusion for read-modify-write sequences."""

from __future__ import annotations

import threading
from collections.abc import Hashable, Iterable, Iterator
from contextlib import ExitStack, contextmanager


class KeyedLock:
    """One lock per key; holders of different keys never contend.

    A key's lock can be discarded while it is held. Waiters that were queued on
    the discarded lock notice that it is no longer registered once they acquire
    it, so two holders of the same key never run at once.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[Hashable, threading.Lock] = {}

    def _lock_for(self, key: Hashable) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    def _is_registered(self, key: Hashable, lock: threading.Lock) -> bool:
        with self._guard:
            return self._locks.get(key) is lock

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        while True:
            lock = self._lock_for(key)
            lock.acquire()
            if self._is_registered(key, lock):
                break
            lock.release()
        try:
            yield
        finally:
            lock.release()

    @contextmanager
    def hold_existing(self, key: Hashable) -> Iterator[bool]:
        """Hold the key's lock only if one is registered; yields whether it was."""
        with self._guard:
            lock = self._locks.get(key)
        if lock is None:
            yield False
            return
        with lock:
            yield self._is_registered(key, lock)

    @contextmanager
    def hold_many(self, keys: Iterable[str]) -> Iterator[None]:
        # Sorted acquisition order keeps concurrent multi-key holders deadlock free.
        with ExitStack() as stack:
            for key in sorted(set(keys)):
                stack.enter_context(self.hold(key))
            yield

    def discard(self, key: Hashable) -> None:
        with self._guard:
            self._locks.pop(key, None)

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
