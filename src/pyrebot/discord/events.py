"""Gateway event routing and the handlers behind it."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol
import logging

from pyrebot.config.settings import AppSettings
from pyrebot.starboard.models import ReactionEvent, ReactionKind
from pyrebot.starboard.sync import StarboardSync, SyncOutcome

READY = "ready"
MESSAGE_CREATE = "message_create"
REACTION_ADD = "reaction_add"
REACTION_REMOVE = "reaction_remove"


@dataclass(frozen=True)
class DiscordMessage:
    """Adapter from discord.Message to what the handlers need."""

    message_id: int
    channel_id: int
    author_id: int
    author_is_bot: bool
    attachment_count: int = 0


@dataclass(frozen=True)
class RawReaction:
    """Adapter from discord.RawReactionActionEvent."""

    kind: ReactionKind
    channel_id: int
    message_id: int
    emoji_name: Optional[str]


class EventHandler(Protocol):
    event_name: str

    async def handle(self, payload: Any) -> None:
        ...


class GatewayControls(Protocol):
    """Client operations the ready handler drives."""

    async def sync_commands(self, guild_id: int) -> int:
        ...

    async def set_presence(self, activity_name: str) -> None:
        ...


class ReactionSender(Protocol):
    async def add_reaction(self, channel_id: int, message_id: int, emoji: str) -> None:
        ...


SettingsProvider = Callable[[], AppSettings]


class EventDispatcher:
    """Routes gateway events to every handler registered for them.

    A failing handler is logged and does not stop the others.
    """

    def __init__(self, *, logger: Optional[logging.Logger] = None) -> None:
        self._handlers: dict[str, list[EventHandler]] = {}
        self._logger = logger or logging.getLogger("pyrebot.discord.events")

    def register(self, handler: EventHandler) -> None:
        self._handlers.setdefault(handler.event_name, []).append(handler)

    def handlers_for(self, event_name: str) -> tuple[EventHandler, ...]:
        return tuple(self._handlers.get(event_name, ()))

    async def dispatch(self, event_name: str, payload: Any = None) -> int:
        handlers = self._handlers.get(event_name)
        if not handlers:
            return 0

        handled = 0
        for handler in list(handlers):
            try:
                await handler.handle(payload)
                handled += 1
            except Exception:
                self._logger.exception(
                    "event_handler_failed event=%s handler=%s",
                    event_name,
                    type(handler).__name__,
                )
        return handled


class ReadyHandler:
    """Registers the slash commands in the guild and sets the presence."""

    event_name = READY

    def __init__(
        self,
        *,
        gateway: GatewayControls,
        settings_provider: SettingsProvider,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._gateway = gateway
        self._settings_provider = settings_provider
        self._logger = logger or logging.getLogger("pyrebot.discord.ready")

    async def handle(self, payload: Any = None) -> None:
        settings = self._settings_provider().discord
        synced = await self._gateway.sync_commands(settings.guild_id)
        self._logger.info("slash_commands_synced guild_id=%s count=%s", settings.guild_id, synced)
        await self._gateway.set_presence(settings.activity_name)


class ReactionHandler:
    """Feeds designated-emoji reactions into the starboard."""

    def __init__(
        self,
        *,
        event_name: str,
        sync: StarboardSync,
        settings_provider: SettingsProvider,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        if event_name not in (REACTION_ADD, REACTION_REMOVE):
            raise ValueError(f"Unsupported reaction event: {event_name}")
        self.event_name = event_name
        self._sync = sync
        self._settings_provider = settings_provider
        self._logger = logger or logging.getLogger("pyrebot.discord.reactions")

    async def handle(self, payload: RawReaction) -> Optional[SyncOutcome]:
        emoji = self._settings_provider().starboard.emoji
        if payload.emoji_name != emoji:
            return None

        outcome = await self._sync.handle(
            ReactionEvent(
                kind=payload.kind,
                channel_id=payload.channel_id,
                message_id=payload.message_id,
            )
        )
        self._logger.debug(
            "reaction_handled kind=%s message_id=%s outcome=%s",
            payload.kind.value,
            payload.message_id,
            outcome.value,
        )
        return outcome


class MessageCreateHandler:
    """Reacts to attachments posted in the special channel."""

    event_name = MESSAGE_CREATE

    def __init__(
        self,
        *,
        sender: ReactionSender,
        settings_provider: SettingsProvider,
        bot_user_id: Callable[[], Optional[int]],
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._sender = sender
        self._settings_provider = settings_provider
        self._bot_user_id = bot_user_id
        self._logger = logger or logging.getLogger("pyrebot.discord.messages")

    async def handle(self, payload: DiscordMessage) -> None:
        settings = self._settings_provider().discord
        if payload.author_is_bot or payload.author_id == self._bot_user_id():
            return
        if payload.channel_id not in settings.bot_channel_ids:
            return

        if (
            settings.special_channel_id is not None
            and settings.special_channel_emoji
            and payload.channel_id == settings.special_channel_id
            and payload.attachment_count > 0
        ):
            await self._sender.add_reaction(
                payload.channel_id,
                payload.message_id,
                settings.special_channel_emoji,
            )
            self._logger.debug(
                "special_channel_reaction message_id=%s emoji=%s",
                payload.message_id,
                settings.special_channel_emoji,
            )
