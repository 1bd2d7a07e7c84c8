"""Slash command handlers and the registry the gateway installs them from."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Iterator, Optional, Protocol
import logging

from pyrebot.config.settings import SettingsError
from pyrebot.config.store import ConfigStore


@dataclass(frozen=True)
class CommandResponse:
    content: str
    ephemeral: bool = True


@dataclass(frozen=True)
class CommandContext:
    """What a command gets to see of the invoking interaction."""

    user_id: int
    channel_id: Optional[int]
    created_at: datetime


class SlashCommand(Protocol):
    name: str
    description: str
    admin_only: bool

    async def run(self, context: CommandContext) -> CommandResponse:
        ...


def format_command_error(exc: Exception) -> str:
    if isinstance(exc, SettingsError):
        return f"Configuration error: {exc}"
    return (
        "Command failed: internal runtime error. "
        "Please retry or inspect service logs."
    )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PingCommand:
    """/ping: replies with the latency since the interaction was created."""

    name = "ping"
    description = "Ping Pong!"
    admin_only = False

    def __init__(self, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock

    async def run(self, context: CommandContext) -> CommandResponse:
        latency_ms = int((self._clock() - context.created_at).total_seconds() * 1000)
        return CommandResponse(content=f"Pong! Latency: {latency_ms}ms", ephemeral=False)


class ReloadCommand:
    """/reload: re-reads the config file."""

    name = "reload"
    description = "Reloads the config"
    admin_only = True

    def __init__(self, store: ConfigStore, logger: Optional[logging.Logger] = None) -> None:
        self._store = store
        self._logger = logger or logging.getLogger("pyrebot.discord.commands")

    async def run(self, context: CommandContext) -> CommandResponse:
        try:
            self._store.reload()
        except Exception as exc:
            self._logger.warning("config_reload_failed user_id=%s error=%s", context.user_id, exc)
            return CommandResponse(content=format_command_error(exc))
        return CommandResponse(content="Config reloaded!")


class CommandRegistry:
    """Named set of slash commands."""

    def __init__(self) -> None:
        self._commands: dict[str, SlashCommand] = {}

    def register(self, command: SlashCommand) -> None:
        if command.name in self._commands:
            raise ValueError(f"Command '{command.name}' is already registered.")
        self._commands[command.name] = command

    def get(self, name: str) -> Optional[SlashCommand]:
        return self._commands.get(name)

    def __iter__(self) -> Iterator[SlashCommand]:
        return iter(self._commands.values())

    def __len__(self) -> int:
        return len(self._commands)
