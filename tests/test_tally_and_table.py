from __future__ import annotations

from pathlib import Path
import asyncio
import sys
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from pyrebot.starboard.models import MessageKey, MirrorRef, Reaction
from pyrebot.starboard.table import StarboardState, StarboardTable
from pyrebot.starboard.tally import count_reactions


class CountReactionsTests(unittest.TestCase):
    def test_counts_designated_emoji_in_unsorted_list(self) -> None:
        reactions = [
            Reaction(emoji_name="🔥", count=9),
            Reaction(emoji_name="⭐", count=4),
            Reaction(emoji_name="👍", count=1),
        ]

        self.assertEqual(count_reactions(reactions), 4)

    def test_missing_emoji_counts_zero(self) -> None:
        self.assertEqual(count_reactions([Reaction(emoji_name="👍", count=3)]), 0)
        self.assertEqual(count_reactions([]), 0)

    def test_custom_emoji_matches_by_id_when_requested(self) -> None:
        reactions = [
            Reaction(emoji_name="star", count=2, emoji_id=111),
            Reaction(emoji_name="goldstar", count=6, emoji_id=222),
        ]

        self.assertEqual(count_reactions(reactions, "star"), 2)
        self.assertEqual(count_reactions(reactions, emoji_id=222), 6)
        self.assertEqual(count_reactions(reactions, emoji_id=333), 0)


class StarboardTableTests(unittest.TestCase):
    def test_insert_lookup_and_remove(self) -> None:
        table = StarboardTable()
        key = MessageKey(channel_id=1, message_id=2)
        first = MirrorRef(channel_id=9, message_id=10)
        second = MirrorRef(channel_id=9, message_id=11)

        self.assertIsNone(table.lookup(key))
        table.insert_or_replace(key, first)
        table.insert_or_replace(key, second)

        self.assertEqual(table.lookup(key), second)
        self.assertEqual(len(table), 1)
        self.assertEqual(table.remove(key), second)
        self.assertIsNone(table.remove(key))
        self.assertNotIn(key, table)


class StarboardStateTests(unittest.IsolatedAsyncioTestCase):
    async def test_exclusive_serializes_critical_sections(self) -> None:
        state = StarboardState()
        events: list[str] = []

        async def worker(name: str) -> None:
            async with state.exclusive(owner=name):
                events.append(f"{name}:enter")
                await asyncio.sleep(0.01)
                events.append(f"{name}:exit")

        await asyncio.gather(worker("a"), worker("b"))

        self.assertEqual(events, ["a:enter", "a:exit", "b:enter", "b:exit"])
        self.assertFalse(state.locked)

    async def test_contended_acquire_is_logged(self) -> None:
        state = StarboardState()

        async def holder() -> None:
            async with state.exclusive(owner="holder"):
                await asyncio.sleep(0.01)

        with self.assertLogs("pyrebot.starboard.state", level="DEBUG") as logs:
            task = asyncio.create_task(holder())
            await asyncio.sleep(0)
            async with state.exclusive(owner="waiter"):
                pass
            await task

        self.assertTrue(
            any("starboard_lock_contended owner=waiter" in line for line in logs.output),
            logs.output,
        )

    async def test_lock_is_released_on_error(self) -> None:
        state = StarboardState()

        with self.assertRaises(RuntimeError):
            async with state.exclusive():
                raise RuntimeError("boom")

        self.assertFalse(state.locked)


if __name__ == "__main__":
    unittest.main()
