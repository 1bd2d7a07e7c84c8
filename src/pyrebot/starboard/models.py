"""Value types shared by the starboard components."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import NamedTuple, Optional, Tuple


class MessageKey(NamedTuple):
    """Stable identity of a source message."""

    channel_id: int
    message_id: int

    def __str__(self) -> str:
        return f"{self.channel_id}/{self.message_id}"


class MirrorRef(NamedTuple):
    """Identity of a mirror post in the starboard channel."""

    channel_id: int
    message_id: int


class ReactionKind(Enum):
    ADDED = "added"
    REMOVED = "removed"


@dataclass(frozen=True)
class ReactionEvent:
    kind: ReactionKind
    channel_id: int
    message_id: int

    @property
    def key(self) -> MessageKey:
        return MessageKey(channel_id=self.channel_id, message_id=self.message_id)


@dataclass(frozen=True)
class Author:
    id: int
    name: str
    avatar_url: Optional[str] = None
    profile_url: Optional[str] = None


@dataclass(frozen=True)
class Reaction:
    emoji_name: Optional[str]
    count: int
    emoji_id: Optional[int] = None


@dataclass(frozen=True)
class Attachment:
    url: str
    content_type: Optional[str] = None
    filename: str = ""


@dataclass(frozen=True)
class ChannelInfo:
    id: int
    name: str


@dataclass(frozen=True)
class StarMessage:
    """Snapshot of a Discord message as seen by the starboard."""

    key: MessageKey
    author: Optional[Author]
    content: str
    created_at: Optional[datetime]
    url: str
    reactions: Tuple[Reaction, ...] = ()
    attachments: Tuple[Attachment, ...] = ()
    reference: Optional[MessageKey] = None
