"""discord.py implementation of the messaging operations the bot needs."""

from __future__ import annotations

from typing import Any, Optional
import logging

import discord

from pyrebot.starboard.errors import NotFound, TransportError
from pyrebot.starboard.models import (
    Attachment,
    Author,
    ChannelInfo,
    MessageKey,
    MirrorRef,
    Reaction,
    StarMessage,
)
from pyrebot.starboard.renderer import MirrorEmbed

PROFILE_URL = "https://discord.com/users/{user_id}"


def to_star_message(message: Any) -> StarMessage:
    """Snapshot a discord.Message into the starboard's value types."""

    author = message.author
    avatar = getattr(author, "display_avatar", None)
    reference = None
    if message.reference is not None and message.reference.message_id is not None:
        reference = MessageKey(
            channel_id=message.reference.channel_id or message.channel.id,
            message_id=message.reference.message_id,
        )

    return StarMessage(
        key=MessageKey(channel_id=message.channel.id, message_id=message.id),
        author=Author(
            id=author.id,
            name=author.name,
            avatar_url=str(avatar.url) if avatar is not None else None,
            profile_url=PROFILE_URL.format(user_id=author.id),
        ),
        content=message.content or "",
        created_at=message.created_at,
        url=message.jump_url,
        reactions=tuple(_to_reaction(reaction) for reaction in message.reactions),
        attachments=tuple(
            Attachment(
                url=attachment.url,
                content_type=attachment.content_type,
                filename=attachment.filename,
            )
            for attachment in message.attachments
        ),
        reference=reference,
    )


def _to_reaction(reaction: Any) -> Reaction:
    emoji = reaction.emoji
    if isinstance(emoji, str):
        return Reaction(emoji_name=emoji, count=reaction.count)
    return Reaction(emoji_name=emoji.name, count=reaction.count, emoji_id=emoji.id)


def to_discord_embed(embed: MirrorEmbed) -> discord.Embed:
    # from_dict keeps the video field, which the Embed setters do not expose.
    return discord.Embed.from_dict(embed.to_dict())


class DiscordMessagingApi:
    """Messaging calls over a discord.py client, with errors mapped to
    ``NotFound`` and ``TransportError``."""

    def __init__(self, client: discord.Client, logger: Optional[logging.Logger] = None) -> None:
        self._client = client
        self._logger = logger or logging.getLogger("pyrebot.discord.api")

    async def get_message(self, channel_id: int, message_id: int) -> StarMessage:
        channel = await self._messageable(channel_id)
        try:
            message = await channel.fetch_message(message_id)
        except discord.NotFound as exc:
            raise NotFound(f"message {channel_id}/{message_id} not found") from exc
        except discord.DiscordException as exc:
            raise TransportError(f"fetch message {channel_id}/{message_id} failed: {exc}") from exc
        return to_star_message(message)

    async def get_channel(self, channel_id: int) -> ChannelInfo:
        channel = await self._resolve_channel(channel_id)
        return ChannelInfo(id=channel.id, name=getattr(channel, "name", "") or "")

    async def create_message(self, channel_id: int, content: str, embed: MirrorEmbed) -> MirrorRef:
        channel = await self._messageable(channel_id)
        try:
            sent = await channel.send(content=content, embed=to_discord_embed(embed))
        except discord.NotFound as exc:
            raise NotFound(f"channel {channel_id} not found") from exc
        except discord.DiscordException as exc:
            raise TransportError(f"send to channel {channel_id} failed: {exc}") from exc
        return MirrorRef(channel_id=sent.channel.id, message_id=sent.id)

    async def edit_message(self, mirror: MirrorRef, content: str, embed: MirrorEmbed) -> MirrorRef:
        channel = await self._messageable(mirror.channel_id)
        try:
            edited = await channel.get_partial_message(mirror.message_id).edit(
                content=content,
                embed=to_discord_embed(embed),
            )
        except discord.NotFound as exc:
            raise NotFound(f"mirror {mirror} not found") from exc
        except discord.DiscordException as exc:
            raise TransportError(f"edit of mirror {mirror} failed: {exc}") from exc
        return MirrorRef(channel_id=edited.channel.id, message_id=edited.id)

    async def delete_message(self, mirror: MirrorRef) -> None:
        channel = await self._messageable(mirror.channel_id)
        try:
            await channel.get_partial_message(mirror.message_id).delete()
        except discord.NotFound as exc:
            raise NotFound(f"mirror {mirror} not found") from exc
        except discord.DiscordException as exc:
            raise TransportError(f"delete of mirror {mirror} failed: {exc}") from exc

    async def add_reaction(self, channel_id: int, message_id: int, emoji: str) -> None:
        channel = await self._messageable(channel_id)
        try:
            await channel.get_partial_message(message_id).add_reaction(emoji)
        except discord.NotFound as exc:
            raise NotFound(f"message {channel_id}/{message_id} not found") from exc
        except discord.DiscordException as exc:
            raise TransportError(f"add_reaction on {channel_id}/{message_id} failed: {exc}") from exc

    async def _resolve_channel(self, channel_id: int) -> Any:
        channel = self._client.get_channel(channel_id)
        if channel is not None:
            return channel
        try:
            return await self._client.fetch_channel(channel_id)
        except discord.NotFound as exc:
            raise NotFound(f"channel {channel_id} not found") from exc
        except discord.DiscordException as exc:
            raise TransportError(f"fetch channel {channel_id} failed: {exc}") from exc

    async def _messageable(self, channel_id: int) -> Any:
        channel = await self._resolve_channel(channel_id)
        if not hasattr(channel, "fetch_message"):
            raise NotFound(f"channel {channel_id} cannot hold messages")
        return channel
