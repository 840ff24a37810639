"""Per-key in-process mutex.

Serializes read-modify-write sequences on one record (a ledger field, an
application, an applicant's corrections) inside a single worker.
"""

import asyncio
from collections.abc import AsyncIterator, Hashable
from contextlib import asynccontextmanager


class KeyedMutex:
    """Mutual exclusion per key.

    A key's lock is dropped as soon as nobody holds it or waits on it, so
    the map only contains keys in use.

    Usage:
        async with mutex.acquire((tenant_id, applicant_id)):
            ...
    """

    def __init__(self) -> None:
        self._locks: dict[Hashable, asyncio.Lock] = {}
        self._users: dict[Hashable, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    @asynccontextmanager
    async def acquire(self, key: Hashable) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if not self._users[key]:
                del self._users[key]
                del self._locks[key]
