"""Builds the mirror post for a starred message."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Tuple

from pyrebot.starboard.errors import RenderError
from pyrebot.starboard.models import StarMessage
from pyrebot.starboard.tally import DEFAULT_EMOJI

HIGHLIGHT_COLOR = 0xFFFF00
# Discord rejects embed descriptions longer than this.
DESCRIPTION_LIMIT = 4096
QUOTE_SEPARATOR = "\n\n"
TRUNCATION_MARKER = "…"


@dataclass(frozen=True)
class EmbedField:
    name: str
    value: str
    inline: bool = False


@dataclass(frozen=True)
class MirrorEmbed:
    author_name: str
    author_url: Optional[str]
    author_icon_url: Optional[str]
    description: str
    timestamp: datetime
    color: int = HIGHLIGHT_COLOR
    image_url: Optional[str] = None
    video_url: Optional[str] = None
    fields: Tuple[EmbedField, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Discord embed payload."""

        author: dict[str, Any] = {"name": self.author_name}
        if self.author_url:
            author["url"] = self.author_url
        if self.author_icon_url:
            author["icon_url"] = self.author_icon_url

        payload: dict[str, Any] = {
            "type": "rich",
            "author": author,
            "color": self.color,
            "description": self.description,
            "timestamp": self.timestamp.isoformat(),
        }
        if self.image_url:
            payload["image"] = {"url": self.image_url}
        if self.video_url:
            payload["video"] = {"url": self.video_url}
        if self.fields:
            payload["fields"] = [
                {"name": field.name, "value": field.value, "inline": field.inline}
                for field in self.fields
            ]
        return payload


@dataclass(frozen=True)
class RenderedMirror:
    header: str
    embed: MirrorEmbed


def render(
    source: StarMessage,
    referenced: Optional[StarMessage],
    star_count: int,
    channel_name: str,
    *,
    emoji: str = DEFAULT_EMOJI,
) -> RenderedMirror:
    if star_count < 0:
        raise RenderError(f"star_count cannot be negative: {star_count}")
    if source.author is None or not source.author.name:
        raise RenderError(f"message {source.key} has no author")
    if source.created_at is None:
        raise RenderError(f"message {source.key} has no creation time")
    if not source.url:
        raise RenderError(f"message {source.key} has no permalink")

    header = f"{emoji} **{star_count}** | [`# {channel_name}`](<{source.url}>)"

    quoted = _quote_reference(referenced)
    description = _fit_description(quoted, source.content)

    image_url = None
    video_url = None
    fields: Tuple[EmbedField, ...] = ()
    # Only the first attachment is mirrored.
    if source.attachments:
        attachment = source.attachments[0]
        content_type = attachment.content_type or ""
        if "image" in content_type:
            image_url = attachment.url
        elif "video" in content_type:
            video_url = attachment.url
        else:
            fields = (EmbedField(name="Attachment", value=attachment.url),)

    embed = MirrorEmbed(
        author_name=source.author.name,
        author_url=source.author.profile_url,
        author_icon_url=source.author.avatar_url,
        description=description,
        timestamp=source.created_at,
        image_url=image_url,
        video_url=video_url,
        fields=fields,
    )
    return RenderedMirror(header=header, embed=embed)


def _quote_reference(referenced: Optional[StarMessage]) -> str:
    if referenced is None or not referenced.content:
        return ""
    author_name = referenced.author.name if referenced.author is not None else "Unknown"
    text = f"**{author_name}:**\n{referenced.content}"
    return "\n".join(f"> {line}" for line in text.split("\n"))


def _fit_description(quoted: str, content: str) -> str:
    """Joins quote and content, shortening the quote first, then the content."""

    if not quoted:
        return _truncate(content, DESCRIPTION_LIMIT)

    budget = DESCRIPTION_LIMIT - len(content) - len(QUOTE_SEPARATOR)
    if budget >= len(quoted):
        return f"{quoted}{QUOTE_SEPARATOR}{content}"
    if budget > len(TRUNCATION_MARKER):
        return f"{_truncate(quoted, budget)}{QUOTE_SEPARATOR}{content}"
    return _truncate(content, DESCRIPTION_LIMIT)


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - len(TRUNCATION_MARKER)].rstrip() + TRUNCATION_MARKER
