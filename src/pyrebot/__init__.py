"""pyrebot: a Discord bot with a starboard."""

__version__ = "0.1.0"
