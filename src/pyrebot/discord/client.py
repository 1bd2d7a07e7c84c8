"""Discord client service wrapping discord.py."""

from __future__ import annotations

from typing import Optional
import asyncio
import logging

import discord
from discord import app_commands

from pyrebot.discord.events import (
    MESSAGE_CREATE,
    READY,
    REACTION_ADD,
    REACTION_REMOVE,
    DiscordMessage,
    EventDispatcher,
    RawReaction,
)
from pyrebot.discord.slash_commands import (
    CommandContext,
    CommandRegistry,
    SlashCommand,
    format_command_error,
)
from pyrebot.starboard.models import ReactionKind


def to_raw_reaction(kind: ReactionKind, payload: discord.RawReactionActionEvent) -> RawReaction:
    return RawReaction(
        kind=kind,
        channel_id=payload.channel_id,
        message_id=payload.message_id,
        emoji_name=payload.emoji.name,
    )


def to_discord_message(message: discord.Message) -> DiscordMessage:
    return DiscordMessage(
        message_id=message.id,
        channel_id=message.channel.id,
        author_id=message.author.id,
        author_is_bot=message.author.bot,
        attachment_count=len(message.attachments),
    )


class DiscordClientService:
    """Discord bot service that bridges discord.py events to the dispatcher."""

    def __init__(
        self,
        *,
        bot_token: str,
        guild_id: int,
        dispatcher: EventDispatcher,
        commands: CommandRegistry,
        client: Optional[discord.Client] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        if guild_id <= 0:
            raise ValueError("guild_id must be a positive integer.")

        self._bot_token = bot_token
        self._guild = discord.Object(id=guild_id)
        self._dispatcher = dispatcher
        self._commands = commands
        self._logger = logger or logging.getLogger("pyrebot.discord.client")

        if client is None:
            intents = discord.Intents.default()
            intents.message_content = True
            intents.guild_reactions = True
            self._logger.info(
                "Intents: message_content=%s, guild_reactions=%s, guilds=%s",
                intents.message_content,
                intents.guild_reactions,
                intents.guilds,
            )
            client = discord.Client(intents=intents)
        self._client = client
        self._tree = app_commands.CommandTree(self._client)

        self._ready_event = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

        for command in self._commands:
            self._tree.add_command(self._build_app_command(command))

        self._logger.info("Registering Discord event handlers...")

        @self._client.event
        async def on_ready():
            await self._on_ready()

        @self._client.event
        async def on_message(message):
            await self._on_message(message)

        @self._client.event
        async def on_raw_reaction_add(payload):
            await self._dispatcher.dispatch(REACTION_ADD, to_raw_reaction(ReactionKind.ADDED, payload))

        @self._client.event
        async def on_raw_reaction_remove(payload):
            await self._dispatcher.dispatch(
                REACTION_REMOVE, to_raw_reaction(ReactionKind.REMOVED, payload)
            )

    @property
    def client(self) -> discord.Client:
        return self._client

    @property
    def bot_user_id(self) -> Optional[int]:
        return self._client.user.id if self._client.user else None

    async def start(self) -> None:
        """Start the Discord client in the background."""
        self._task = asyncio.create_task(self._client.start(self._bot_token))
        await self._ready_event.wait()
        self._logger.info(
            "Discord client ready: bot_user_id=%s guild_id=%s",
            self.bot_user_id,
            self._guild.id,
        )

    async def stop(self) -> None:
        """Stop the Discord client gracefully."""
        await self._client.close()
        if self._task is not None:
            try:
                await self._task
            except asyncio.CancelledError:
                pass

    async def sync_commands(self, guild_id: int) -> int:
        """Replace the guild's slash commands with the registered ones."""
        # Commands live in the global set; only guild copies are ever synced.
        guild = discord.Object(id=guild_id)
        self._tree.copy_global_to(guild=guild)
        synced = await self._tree.sync(guild=guild)
        self._logger.info("Slash commands synced: guild_id=%s count=%s", guild_id, len(synced))
        return len(synced)

    async def set_presence(self, activity_name: str) -> None:
        await self._client.change_presence(
            status=discord.Status.online,
            activity=discord.Game(name=activity_name),
        )

    async def _on_ready(self) -> None:
        self._logger.info("Discord client connected as %s", self._client.user)
        await self._dispatcher.dispatch(READY)
        self._ready_event.set()

    async def _on_message(self, message: discord.Message) -> None:
        await self._dispatcher.dispatch(MESSAGE_CREATE, to_discord_message(message))

    def _build_app_command(self, command: SlashCommand) -> app_commands.Command:
        async def callback(interaction: discord.Interaction) -> None:
            context = CommandContext(
                user_id=interaction.user.id,
                channel_id=interaction.channel_id,
                created_at=interaction.created_at,
            )
            try:
                response = await command.run(context)
                await interaction.response.send_message(
                    response.content,
                    ephemeral=response.ephemeral,
                )
            except Exception as exc:
                self._logger.exception("Slash command failed: /%s", command.name)
                if not interaction.response.is_done():
                    await interaction.response.send_message(
                        format_command_error(exc),
                        ephemeral=True,
                    )

        app_command = app_commands.Command(
            name=command.name,
            description=command.description,
            callback=callback,
        )
        if command.admin_only:
            app_command.default_permissions = discord.Permissions(administrator=True)
        return app_command
