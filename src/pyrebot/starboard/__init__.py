"""Starboard: mirrors highly starred messages into a dedicated channel."""

from pyrebot.starboard.errors import NotFound, RenderError, StarboardError, TransportError
from pyrebot.starboard.models import (
    Attachment,
    Author,
    ChannelInfo,
    MessageKey,
    MirrorRef,
    Reaction,
    ReactionEvent,
    ReactionKind,
    StarMessage,
)
from pyrebot.starboard.reaper import ExpiryReaper
from pyrebot.starboard.renderer import EmbedField, MirrorEmbed, RenderedMirror, render
from pyrebot.starboard.sync import MessagingApi, StarboardSync, SyncOutcome
from pyrebot.starboard.table import StarboardState, StarboardTable
from pyrebot.starboard.tally import count_reactions

__all__ = [
    "Attachment",
    "Author",
    "ChannelInfo",
    "EmbedField",
    "ExpiryReaper",
    "MessageKey",
    "MessagingApi",
    "MirrorEmbed",
    "MirrorRef",
    "NotFound",
    "Reaction",
    "ReactionEvent",
    "ReactionKind",
    "RenderError",
    "RenderedMirror",
    "StarMessage",
    "StarboardError",
    "StarboardState",
    "StarboardSync",
    "StarboardTable",
    "SyncOutcome",
    "TransportError",
    "count_reactions",
    "render",
]
