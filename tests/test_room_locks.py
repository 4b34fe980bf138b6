"""
Unit tests for roomchat.services.room_locks
"""

import asyncio
import unittest

from roomchat.services.room_locks import RoomLocks


class TestRoomLocks(unittest.IsolatedAsyncioTestCase):
    """Test cases for the per-room lock table."""

    async def test_same_room_is_serialized(self):
        """Test that two holders of one room never overlap."""
        locks = RoomLocks()
        trace = []

        async def worker(name):
            async with locks.hold("CR1"):
                trace.append(f"{name}-in")
                await asyncio.sleep(0)
                trace.append(f"{name}-out")

        await asyncio.gather(worker("a"), worker("b"))

        self.assertEqual(trace, ["a-in", "a-out", "b-in", "b-out"])

    async def test_lock_kept_while_waiters_remain(self):
        """Test that the lock survives until its last waiter is done."""
        locks = RoomLocks()
        entered = asyncio.Event()
        release = asyncio.Event()

        async def holder():
            async with locks.hold("CR1"):
                entered.set()
                await release.wait()

        async def waiter():
            async with locks.hold("CR1"):
                pass

        first = asyncio.create_task(holder())
        await entered.wait()
        second = asyncio.create_task(waiter())
        await asyncio.sleep(0)
        self.assertEqual(len(locks), 1)

        release.set()
        await asyncio.gather(first, second)
        self.assertEqual(len(locks), 0)

    async def test_lock_dropped_after_error(self):
        """Test that an exception inside the block still releases the room."""
        locks = RoomLocks()

        with self.assertRaises(RuntimeError):
            async with locks.hold("CR1"):
                raise RuntimeError("boom")

        self.assertEqual(len(locks), 0)


if __name__ == "__main__":
    unittest.main()
