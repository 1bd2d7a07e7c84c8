"""Starboard bookkeeping shared by the sync engine and the expiry reaper."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional
import asyncio
import logging
import time

from pyrebot.starboard.models import MessageKey, MirrorRef


class StarboardTable:
    """Source message -> mirror post mapping.

    Not safe for uncoordinated use; callers hold ``StarboardState.exclusive``.
    """

    def __init__(self) -> None:
        self._entries: Dict[MessageKey, MirrorRef] = {}

    def lookup(self, key: MessageKey) -> Optional[MirrorRef]:
        return self._entries.get(key)

    def insert_or_replace(self, key: MessageKey, mirror: MirrorRef) -> None:
        self._entries[key] = mirror

    def remove(self, key: MessageKey) -> Optional[MirrorRef]:
        return self._entries.pop(key, None)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class StarboardState:
    """Owns the table, the pending expiry handles and the lock guarding both.

    The lock spans a whole fetch/decide/mutate sequence, not single table
    accesses.
    """

    def __init__(self, *, logger: Optional[logging.Logger] = None) -> None:
        self.table = StarboardTable()
        self.pending: Dict[MessageKey, asyncio.Task] = {}
        self._lock = asyncio.Lock()
        self._logger = logger or logging.getLogger("pyrebot.starboard.state")

    @property
    def locked(self) -> bool:
        return self._lock.locked()

    @asynccontextmanager
    async def exclusive(self, owner: object = None) -> AsyncIterator["StarboardState"]:
        if not self._lock.locked():
            await self._lock.acquire()
            self._logger.debug("starboard_lock_acquired owner=%s wait_ms=0", owner)
        else:
            self._logger.debug("starboard_lock_contended owner=%s", owner)
            started = time.perf_counter()
            await self._lock.acquire()
            wait_ms = int((time.perf_counter() - started) * 1000)
            self._logger.debug("starboard_lock_acquired owner=%s wait_ms=%s", owner, wait_ms)
        try:
            yield self
        finally:
            self._lock.release()
