from __future__ import annotations


class StarboardError(Exception):
    """Base error for starboard failures."""


class TransportError(StarboardError):
    """Raised when a messaging API call fails."""


class NotFound(StarboardError):
    """Raised when a message or channel no longer exists."""


class RenderError(StarboardError):
    """Raised when a source message cannot be rendered into a mirror post."""
