"""Live, reloadable settings holder."""

from __future__ import annotations

from pathlib import Path
from typing import Mapping, Optional
import logging

from pyrebot.config.settings import AppSettings, load_settings


class ConfigStore:
    """Keeps the current settings and swaps them on reload.

    Readers call ``current`` on every decision instead of caching settings, so
    a reload takes effect for the next event. A failed reload keeps the
    previous settings and re-raises the ``SettingsError``.
    """

    def __init__(
        self,
        settings: AppSettings,
        *,
        config_path: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._settings = settings
        self._config_path = config_path
        self._environ = dict(environ) if environ is not None else None
        self._logger = logger or logging.getLogger("pyrebot.config")

    @property
    def current(self) -> AppSettings:
        return self._settings

    def reload(self) -> AppSettings:
        settings = load_settings(config_path=self._config_path, environ=self._environ)
        self._settings = settings
        self._logger.info("config_reloaded path=%s", self._config_path)
        return settings
