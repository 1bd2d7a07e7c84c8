"""Configuration APIs."""

from pyrebot.config.settings import (
    AppSettings,
    DiscordSettings,
    RuntimeSettings,
    SettingsError,
    StarboardSettings,
    load_settings,
    migrate_legacy_config,
    resolve_env_secret,
    settings_summary,
)
from pyrebot.config.store import ConfigStore

__all__ = [
    "AppSettings",
    "ConfigStore",
    "DiscordSettings",
    "RuntimeSettings",
    "SettingsError",
    "StarboardSettings",
    "load_settings",
    "migrate_legacy_config",
    "resolve_env_secret",
    "settings_summary",
]
