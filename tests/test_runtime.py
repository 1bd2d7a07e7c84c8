import asyncio
from pathlib import Path
import sys
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from pyrebot.config.settings import load_settings
from pyrebot.runtime.app import RuntimeApp


class _ProbeService:
    def __init__(self, name, log, fail_stop=False):
        self.name = name
        self.log = log
        self.fail_stop = fail_stop

    async def start(self):
        self.log.append(f"start:{self.name}")

    async def stop(self):
        self.log.append(f"stop:{self.name}")
        if self.fail_stop:
            raise RuntimeError("stop failed")


class RuntimeAppTests(unittest.IsolatedAsyncioTestCase):
    def _settings(self):
        return load_settings(
            environ={
                "PYREBOT_DISCORD_GUILD_ID": "123456789",
                "PYREBOT_RUNTIME_LOG_LEVEL": "DEBUG",
            }
        )

    async def test_run_starts_and_stops_services_in_reverse_order(self):
        log = []
        app = RuntimeApp(
            settings=self._settings(),
            services=[_ProbeService("reaper", log), _ProbeService("discord", log)],
        )

        stop_event = asyncio.Event()
        stop_event.set()

        await app.run(shutdown_event=stop_event)

        self.assertEqual(log, ["start:reaper", "start:discord", "stop:discord", "stop:reaper"])

    async def test_failed_service_stop_does_not_block_others(self):
        log = []
        app = RuntimeApp(
            settings=self._settings(),
            services=[_ProbeService("reaper", log), _ProbeService("discord", log, fail_stop=True)],
        )
        await app.start()

        with self.assertLogs("pyrebot.runtime", level="ERROR"):
            await app.stop()

        self.assertEqual(log[-2:], ["stop:discord", "stop:reaper"])


if __name__ == "__main__":
    unittest.main()
