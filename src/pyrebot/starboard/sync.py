"""Reaction-driven starboard synchronization."""

from __future__ import annotations

from enum import Enum
from typing import Callable, Optional, Protocol
import logging

from pyrebot.config.settings import StarboardSettings
from pyrebot.starboard.errors import NotFound, RenderError, TransportError
from pyrebot.starboard.models import (
    ChannelInfo,
    MessageKey,
    MirrorRef,
    ReactionEvent,
    ReactionKind,
    StarMessage,
)
from pyrebot.starboard.reaper import ExpiryReaper
from pyrebot.starboard.renderer import MirrorEmbed, render
from pyrebot.starboard.table import StarboardState
from pyrebot.starboard.tally import count_reactions


class MessagingApi(Protocol):
    """Messaging operations the starboard needs from Discord.

    Implementations raise ``NotFound`` for vanished resources and
    ``TransportError`` for any other API failure.
    """

    async def get_message(self, channel_id: int, message_id: int) -> StarMessage:
        ...

    async def get_channel(self, channel_id: int) -> ChannelInfo:
        ...

    async def create_message(self, channel_id: int, content: str, embed: MirrorEmbed) -> MirrorRef:
        ...

    async def edit_message(self, mirror: MirrorRef, content: str, embed: MirrorEmbed) -> MirrorRef:
        ...

    async def delete_message(self, mirror: MirrorRef) -> None:
        ...


class SyncOutcome(Enum):
    IGNORED = "ignored"
    CREATED = "created"
    UPDATED = "updated"
    REMOVED = "removed"
    FAILED = "failed"


class StarboardSync:
    """Applies reaction events to the starboard.

    Every event runs its fetch/decide/mutate sequence under the state lock, so
    two events for the same message can never both decide to create a mirror.
    Post mutations happen before table writes; failures leave the table as it
    was, except that a mirror which is already gone is always forgotten.
    """

    def __init__(
        self,
        *,
        api: MessagingApi,
        state: StarboardState,
        reaper: ExpiryReaper,
        settings_provider: Callable[[], StarboardSettings],
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._api = api
        self._state = state
        self._reaper = reaper
        self._settings_provider = settings_provider
        self._logger = logger or logging.getLogger("pyrebot.starboard.sync")

    async def handle(self, event: ReactionEvent) -> SyncOutcome:
        key = event.key
        async with self._state.exclusive(owner=f"{event.kind.value}:{key}"):
            try:
                return await self._apply(event, key)
            except TransportError as exc:
                self._logger.warning(
                    "starboard_sync_failed key=%s error_type=transport error=%s", key, exc
                )
            except NotFound as exc:
                self._logger.warning(
                    "starboard_sync_failed key=%s error_type=not_found error=%s", key, exc
                )
            except RenderError as exc:
                self._logger.warning(
                    "starboard_sync_failed key=%s error_type=render error=%s", key, exc
                )
        return SyncOutcome.FAILED

    async def _apply(self, event: ReactionEvent, key: MessageKey) -> SyncOutcome:
        settings = self._settings_provider()
        mirror = self._state.table.lookup(key)

        try:
            message: Optional[StarMessage] = await self._api.get_message(
                key.channel_id, key.message_id
            )
        except NotFound:
            message = None

        if message is None:
            if mirror is None:
                return SyncOutcome.IGNORED
            self._logger.info("starboard_source_gone key=%s", key)
            return await self._remove(key, mirror)

        star_count = count_reactions(message.reactions, settings.emoji)
        self._logger.debug(
            "starboard_event kind=%s key=%s stars=%s tracked=%s",
            event.kind.value,
            key,
            star_count,
            mirror is not None,
        )

        if star_count < settings.threshold:
            if mirror is None:
                return SyncOutcome.IGNORED
            if event.kind is ReactionKind.REMOVED:
                return await self._remove(key, mirror)

        # Only the add landing exactly on the threshold creates; a jump past it is not mirrored.
        if mirror is None and not (
            event.kind is ReactionKind.ADDED and star_count == settings.threshold
        ):
            return SyncOutcome.IGNORED

        if mirror is None and settings.channel_id is None:
            self._logger.warning("starboard_channel_unset key=%s", key)
            return SyncOutcome.IGNORED

        channel = await self._api.get_channel(key.channel_id)
        referenced = await self._fetch_reference(message)
        rendered = render(message, referenced, star_count, channel.name, emoji=settings.emoji)

        if mirror is not None:
            try:
                updated = await self._api.edit_message(mirror, rendered.header, rendered.embed)
            except NotFound:
                self._logger.info("starboard_mirror_missing key=%s mirror=%s", key, mirror)
                self._forget(key)
                return SyncOutcome.REMOVED
            self._state.table.insert_or_replace(key, updated)
            self._logger.info("starboard_mirror_updated key=%s stars=%s", key, star_count)
            return SyncOutcome.UPDATED

        created = await self._api.create_message(settings.channel_id, rendered.header, rendered.embed)
        self._state.table.insert_or_replace(key, created)
        self._reaper.schedule(key)
        self._logger.info(
            "starboard_mirror_created key=%s mirror=%s stars=%s", key, created, star_count
        )
        return SyncOutcome.CREATED

    async def _remove(self, key: MessageKey, mirror: MirrorRef) -> SyncOutcome:
        try:
            await self._api.delete_message(mirror)
        except NotFound:
            self._logger.debug("starboard_mirror_already_deleted key=%s", key)
        self._forget(key)
        self._logger.info("starboard_mirror_removed key=%s mirror=%s", key, mirror)
        return SyncOutcome.REMOVED

    def _forget(self, key: MessageKey) -> None:
        self._state.table.remove(key)
        self._reaper.cancel(key)

    async def _fetch_reference(self, message: StarMessage) -> Optional[StarMessage]:
        if message.reference is None:
            return None
        try:
            return await self._api.get_message(
                message.reference.channel_id, message.reference.message_id
            )
        except NotFound:
            return None
