# roomchat/services/room_locks.py

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict


class RoomLocks:
    """
    One asyncio.Lock per room, kept only while someone holds or waits for it.

    Room ids come from clients, so a lock is created on first use and
    dropped as soon as its last holder/waiter is done.

    Usage:
        locks = RoomLocks()
        async with locks.hold("CR1"):
            ...
    """

    def __init__(self) -> None:
        self._locks: Dict[str, asyncio.Lock] = {}
        self._users: Dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, room_id: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(room_id, asyncio.Lock())
        self._users[room_id] = self._users.get(room_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[room_id] -= 1
            if not self._users[room_id]:
                del self._users[room_id]
                del self._locks[room_id]

    def __len__(self) -> int:
        return len(self._locks)
