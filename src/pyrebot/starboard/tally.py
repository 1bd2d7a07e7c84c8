"""Star counting over a message's reactions."""

from __future__ import annotations

from typing import Iterable, Optional

from pyrebot.starboard.models import Reaction

DEFAULT_EMOJI = "⭐"


def count_reactions(
    reactions: Iterable[Reaction],
    emoji_name: str = DEFAULT_EMOJI,
    *,
    emoji_id: Optional[int] = None,
) -> int:
    """Return the count of the designated emoji, or 0 when nobody used it.

    Matching is by name unless ``emoji_id`` is given, in which case custom
    emoji are matched by id regardless of their current name.
    """

    for reaction in reactions:
        if emoji_id is not None:
            if reaction.emoji_id == emoji_id:
                return reaction.count
        elif reaction.emoji_name == emoji_name:
            return reaction.count
    return 0
