"""Keyed asyncio locks.

One lock per key (room id, reservation id). Callers on different keys never
contend. A key's lock is discarded once no task holds or waits for it.
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Hashable, Optional

from domain.errors import LockTimeoutError

logger = logging.getLogger(__name__)


class KeyedLock:

    def __init__(self, name: str, timeout: float = 5.0):
        self.name = name
        self.timeout = timeout
        self._locks: Dict[Hashable, asyncio.Lock] = {}
        self._users: Dict[Hashable, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    def locked(self, key: Hashable) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()

    @asynccontextmanager
    async def hold(self, key: Hashable, timeout: Optional[float] = None) -> AsyncIterator[None]:
        """Hold the lock for key; raise LockTimeoutError if the wait expires"""
        wait = self.timeout if timeout is None else timeout
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            try:
                await asyncio.wait_for(lock.acquire(), wait)
            except asyncio.TimeoutError:
                logger.warning("%s lock on %s not acquired within %ss", self.name, key, wait)
                raise LockTimeoutError(key, wait) from None
            try:
                yield
            finally:
                lock.release()
        finally:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                del self._locks[key]
