"""
Reader/writer lock serializing access to the shared catalog.

Reads and existence probes share the lock; create, update and delete hold
it exclusively for the whole operation. A waiting writer blocks new
readers so a steady stream of reads cannot starve it.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator


class CatalogLock:
    """Async reader/writer lock."""

    def __init__(self):
        self._cond = asyncio.Condition()
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @property
    def readers(self) -> int:
        return self._readers

    @property
    def locked(self) -> bool:
        """True while a writer holds the lock."""
        return self._writer

    async def acquire_shared(self) -> None:
        async with self._cond:
            await self._cond.wait_for(
                lambda: not self._writer and self._writers_waiting == 0
            )
            self._readers += 1

    async def release_shared(self) -> None:
        async with self._cond:
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    async def acquire_exclusive(self) -> None:
        async with self._cond:
            self._writers_waiting += 1
            try:
                await self._cond.wait_for(
                    lambda: not self._writer and self._readers == 0
                )
            except BaseException:
                # readers queued behind this writer may proceed now
                self._writers_waiting -= 1
                self._cond.notify_all()
                raise
            self._writers_waiting -= 1
            self._writer = True

    async def release_exclusive(self) -> None:
        async with self._cond:
            self._writer = False
            self._cond.notify_all()

    @asynccontextmanager
    async def shared(self) -> AsyncIterator[None]:
        """Hold the lock in shared (read) mode."""
        await self.acquire_shared()
        try:
            yield
        finally:
            await self.release_shared()

    @asynccontextmanager
    async def exclusive(self) -> AsyncIterator[None]:
        """Hold the lock in exclusive (write) mode."""
        await self.acquire_exclusive()
        try:
            yield
        finally:
            await self.release_exclusive()
