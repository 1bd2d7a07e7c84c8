from __future__ import annotations

from datetime import datetime, timedelta, timezone
import json
from pathlib import Path
import sys
import tempfile
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from pyrebot.config.settings import SettingsError, load_settings
from pyrebot.config.store import ConfigStore
from pyrebot.discord.slash_commands import (
    CommandContext,
    CommandRegistry,
    PingCommand,
    ReloadCommand,
    format_command_error,
)

CREATED = datetime(2026, 2, 14, 9, 0, tzinfo=timezone.utc)


def _context() -> CommandContext:
    return CommandContext(user_id=7, channel_id=200, created_at=CREATED)


class SlashCommandTests(unittest.IsolatedAsyncioTestCase):
    async def test_ping_reports_latency(self) -> None:
        command = PingCommand(clock=lambda: CREATED + timedelta(milliseconds=87))

        response = await command.run(_context())

        self.assertEqual(response.content, "Pong! Latency: 87ms")
        self.assertFalse(response.ephemeral)

    async def test_reload_swaps_config(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.json"
            config_path.write_text(json.dumps({"discord": {"guild_id": 1}}), encoding="utf-8")
            store = ConfigStore(
                load_settings(config_path=config_path, environ={}),
                config_path=config_path,
                environ={},
            )
            config_path.write_text(
                json.dumps({"discord": {"guild_id": 1}, "starboard": {"channel_id": 900}}),
                encoding="utf-8",
            )

            response = await ReloadCommand(store).run(_context())

        self.assertEqual(response.content, "Config reloaded!")
        self.assertEqual(store.current.starboard.channel_id, 900)

    async def test_reload_failure_is_formatted(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.json"
            config_path.write_text(json.dumps({"discord": {"guild_id": 1}}), encoding="utf-8")
            store = ConfigStore(
                load_settings(config_path=config_path, environ={}),
                config_path=config_path,
                environ={},
            )
            config_path.unlink()

            with self.assertLogs("pyrebot.discord.commands", level="WARNING"):
                response = await ReloadCommand(store).run(_context())

        self.assertTrue(response.content.startswith("Configuration error:"), response.content)
        self.assertEqual(store.current.discord.guild_id, 1)

    def test_registry_rejects_duplicate_names(self) -> None:
        registry = CommandRegistry()
        registry.register(PingCommand())

        with self.assertRaises(ValueError):
            registry.register(PingCommand())

        self.assertEqual([command.name for command in registry], ["ping"])
        self.assertIsNotNone(registry.get("ping"))
        self.assertIsNone(registry.get("keyword"))

    def test_reload_is_admin_only(self) -> None:
        self.assertTrue(ReloadCommand.admin_only)
        self.assertFalse(PingCommand.admin_only)


class CommandErrorFormattingTests(unittest.TestCase):
    def test_settings_error_formatter(self) -> None:
        message = format_command_error(SettingsError("missing guild"))
        self.assertEqual(message, "Configuration error: missing guild")

    def test_generic_error_formatter(self) -> None:
        message = format_command_error(RuntimeError("boom"))
        self.assertEqual(
            message,
            "Command failed: internal runtime error. Please retry or inspect service logs.",
        )


if __name__ == "__main__":
    unittest.main()
