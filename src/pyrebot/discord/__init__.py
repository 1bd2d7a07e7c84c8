"""Discord-facing utilities."""

from pyrebot.discord.api import DiscordMessagingApi, to_discord_embed, to_star_message
from pyrebot.discord.client import DiscordClientService
from pyrebot.discord.events import (
    DiscordMessage,
    EventDispatcher,
    MessageCreateHandler,
    RawReaction,
    ReactionHandler,
    ReadyHandler,
)
from pyrebot.discord.slash_commands import (
    CommandContext,
    CommandRegistry,
    CommandResponse,
    PingCommand,
    ReloadCommand,
    format_command_error,
)

__all__ = [
    "CommandContext",
    "CommandRegistry",
    "CommandResponse",
    "DiscordClientService",
    "DiscordMessage",
    "DiscordMessagingApi",
    "EventDispatcher",
    "MessageCreateHandler",
    "PingCommand",
    "RawReaction",
    "ReactionHandler",
    "ReadyHandler",
    "ReloadCommand",
    "format_command_error",
    "to_discord_embed",
    "to_star_message",
]
