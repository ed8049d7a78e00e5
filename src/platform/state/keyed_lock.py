"""
In-process keyed lock

Serializes writes that share a key (e.g. all writes touching one child's
hours ledger) so a read-then-decide check cannot race a concurrent write.
Keys are always acquired in sorted order, so two callers locking
overlapping key sets cannot deadlock.
"""

from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager

import anyio

from src.platform.logging.loguru_io import Logger


class KeyedLock:
    def __init__(self, *, namespace: str = 'lock') -> None:
        self.namespace = namespace
        self._locks: dict[str, anyio.Lock] = {}
        # Holders plus waiters per key; a lock is dropped when this hits zero
        self._users: dict[str, int] = {}

    def _checkout(self, key: str) -> anyio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = anyio.Lock()
        self._users[key] = self._users.get(key, 0) + 1
        return lock

    def _checkin(self, key: str) -> None:
        self._users[key] -= 1
        if not self._users[key]:
            del self._users[key]
            del self._locks[key]

    def is_locked(self, key: str) -> bool:
        lock = self._locks.get(f'{self.namespace}:{key}')
        return lock is not None and lock.locked()

    @property
    def size(self) -> int:
        return len(self._locks)

    @asynccontextmanager
    async def hold(self, keys: Iterable[str]) -> AsyncIterator[None]:
        """
        Hold the lock for every key until the block exits

        Args:
            keys: Keys to lock; duplicates are ignored
        """
        ordered = sorted({f'{self.namespace}:{key}' for key in keys})
        checked_out: list[str] = []
        acquired: list[str] = []
        try:
            for key in ordered:
                lock = self._checkout(key)
                checked_out.append(key)
                await lock.acquire()
                acquired.append(key)
                Logger.base.debug(f'🔒 [LOCK] Acquired lock: {key}')
            yield
        finally:
            for key in reversed(acquired):
                self._locks[key].release()
                Logger.base.debug(f'🔓 [LOCK] Released lock: {key}')
            for key in reversed(checked_out):
                self._checkin(key)
