"""Factory for wiring up the complete pyrebot runtime."""

from __future__ import annotations

from pathlib import Path
from typing import Optional
import logging

from pyrebot.config.settings import AppSettings, resolve_env_secret
from pyrebot.config.store import ConfigStore
from pyrebot.discord.api import DiscordMessagingApi
from pyrebot.discord.client import DiscordClientService
from pyrebot.discord.events import (
    REACTION_ADD,
    REACTION_REMOVE,
    EventDispatcher,
    MessageCreateHandler,
    ReactionHandler,
    ReadyHandler,
)
from pyrebot.discord.slash_commands import CommandRegistry, PingCommand, ReloadCommand
from pyrebot.runtime.app import RuntimeService
from pyrebot.starboard.reaper import ExpiryReaper
from pyrebot.starboard.sync import StarboardSync
from pyrebot.starboard.table import StarboardState


def create_services(
    settings: AppSettings,
    *,
    config_path: Optional[Path] = None,
    logger: Optional[logging.Logger] = None,
) -> tuple[RuntimeService, ...]:
    """Create the runtime services in start order."""

    _logger = logger or logging.getLogger("pyrebot.factory")

    store = ConfigStore(settings, config_path=config_path, logger=_logger)

    commands = CommandRegistry()
    commands.register(PingCommand())
    commands.register(ReloadCommand(store, logger=_logger))

    dispatcher = EventDispatcher(logger=_logger)
    bot_token = resolve_env_secret(settings.discord.bot_token_env)
    discord_service = DiscordClientService(
        bot_token=bot_token,
        guild_id=settings.discord.guild_id,
        dispatcher=dispatcher,
        commands=commands,
        logger=_logger,
    )
    api = DiscordMessagingApi(discord_service.client, logger=_logger)

    state = StarboardState(logger=_logger)
    reaper = ExpiryReaper(
        state,
        retention_seconds=settings.starboard.retention_seconds,
        logger=_logger,
    )
    sync = StarboardSync(
        api=api,
        state=state,
        reaper=reaper,
        settings_provider=lambda: store.current.starboard,
        logger=_logger,
    )

    def current_settings() -> AppSettings:
        return store.current

    dispatcher.register(
        ReadyHandler(gateway=discord_service, settings_provider=current_settings, logger=_logger)
    )
    dispatcher.register(
        MessageCreateHandler(
            sender=api,
            settings_provider=current_settings,
            bot_user_id=lambda: discord_service.bot_user_id,
            logger=_logger,
        )
    )
    for event_name in (REACTION_ADD, REACTION_REMOVE):
        dispatcher.register(
            ReactionHandler(
                event_name=event_name,
                sync=sync,
                settings_provider=current_settings,
                logger=_logger,
            )
        )

    _logger.info(
        "Starboard wired: channel_id=%s threshold=%s retention_hours=%s",
        settings.starboard.channel_id,
        settings.starboard.threshold,
        settings.starboard.retention_hours,
    )

    return reaper, discord_service
