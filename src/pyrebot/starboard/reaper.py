"""Deferred reclamation of starboard table entries."""

from __future__ import annotations

from typing import Optional
import asyncio
import logging

from pyrebot.starboard.models import MessageKey
from pyrebot.starboard.table import StarboardState

DEFAULT_RETENTION_SECONDS = 72 * 60 * 60.0


class ExpiryReaper:
    """Runs one supervised background task per mirrored entry.

    After the retention window the entry is dropped from the table; the mirror
    post itself stays in the starboard channel. ``schedule`` and ``cancel``
    must be called while holding ``StarboardState.exclusive``.
    """

    def __init__(
        self,
        state: StarboardState,
        *,
        retention_seconds: float = DEFAULT_RETENTION_SECONDS,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        if retention_seconds < 0:
            raise ValueError("retention_seconds must be >= 0.")
        self._state = state
        self.retention_seconds = retention_seconds
        self._logger = logger or logging.getLogger("pyrebot.starboard.reaper")

    def schedule(self, key: MessageKey, delay: Optional[float] = None) -> asyncio.Task:
        self.cancel(key)
        effective_delay = self.retention_seconds if delay is None else delay
        task = asyncio.create_task(self._reap(key, effective_delay), name=f"starboard-expiry-{key}")
        self._state.pending[key] = task
        self._logger.debug("starboard_expiry_scheduled key=%s delay_s=%s", key, effective_delay)
        return task

    def cancel(self, key: MessageKey) -> bool:
        task = self._state.pending.pop(key, None)
        if task is None:
            return False
        if not task.done():
            task.cancel()
        self._logger.debug("starboard_expiry_cancelled key=%s", key)
        return True

    def pending_count(self) -> int:
        return len(self._state.pending)

    async def start(self) -> None:
        return None

    async def stop(self) -> None:
        await self.shutdown()

    async def shutdown(self) -> None:
        tasks = list(self._state.pending.values())
        self._state.pending.clear()
        for task in tasks:
            if not task.done():
                task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._logger.info("starboard_expiry_shutdown cancelled=%s", len(tasks))

    async def _reap(self, key: MessageKey, delay: float) -> None:
        current = asyncio.current_task()
        try:
            await asyncio.sleep(delay)
            async with self._state.exclusive(owner=f"reaper:{key}"):
                if self._state.pending.get(key) is current:
                    if self._state.table.remove(key) is not None:
                        self._logger.info("starboard_entry_expired key=%s", key)
        finally:
            if self._state.pending.get(key) is current:
                del self._state.pending[key]
