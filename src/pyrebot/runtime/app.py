"""Runtime lifecycle wiring for pyrebot."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Protocol
import asyncio
import logging
import signal

from pyrebot.config.settings import AppSettings


class RuntimeService(Protocol):
    """Small lifecycle contract used by the runtime host."""

    async def start(self) -> None:
        ...

    async def stop(self) -> None:
        ...


class RuntimeApp:
    """Application host with deterministic startup and shutdown ordering."""

    def __init__(
        self,
        settings: AppSettings,
        services: Optional[list[RuntimeService]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.settings = settings
        self.logger = logger or logging.getLogger("pyrebot.runtime")
        self._services = services or []
        self._started: list[RuntimeService] = []

    async def start(self) -> None:
        if self._started:
            return

        for service in self._services:
            await service.start()
            self._started.append(service)

    async def stop(self) -> None:
        # Stop services in reverse order
        while self._started:
            service = self._started.pop()
            try:
                await service.stop()
            except Exception:
                self.logger.exception("Service shutdown failed.")

    async def run(self, shutdown_event: Optional[asyncio.Event] = None) -> None:
        stop_event = shutdown_event or asyncio.Event()
        added_signals = self._install_signal_handlers(stop_event)

        try:
            await self.start()
            self.logger.info(
                "Runtime started for guild_id=%s (starboard_channel_id=%s).",
                self.settings.discord.guild_id,
                self.settings.starboard.channel_id,
            )
            await stop_event.wait()
        finally:
            self.logger.info("Runtime shutdown requested.")
            await self.stop()
            self._remove_signal_handlers(added_signals)

    @staticmethod
    def _install_signal_handlers(stop_event: asyncio.Event) -> list[signal.Signals]:
        loop = asyncio.get_running_loop()
        added = []

        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, stop_event.set)
                added.append(sig)
            except (NotImplementedError, RuntimeError):
                # Signal handlers may be unsupported on some environments.
                break

        return added

    @staticmethod
    def _remove_signal_handlers(signals_to_remove: list[signal.Signals]) -> None:
        loop = asyncio.get_running_loop()

        for sig in signals_to_remove:
            try:
                loop.remove_signal_handler(sig)
            except (NotImplementedError, RuntimeError):
                break


def configure_logging(log_level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


async def run_runtime(
    settings: AppSettings,
    *,
    config_path: Optional[Path] = None,
    shutdown_event: Optional[asyncio.Event] = None,
) -> None:
    from pyrebot.runtime.factory import create_services

    configure_logging(settings.runtime.log_level)
    logger = logging.getLogger("pyrebot.runtime")

    services = create_services(settings, config_path=config_path, logger=logger)
    app = RuntimeApp(settings=settings, services=list(services), logger=logger)

    await app.run(shutdown_event=shutdown_event)
