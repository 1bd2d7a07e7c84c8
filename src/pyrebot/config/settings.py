"""Typed settings loader for pyrebot."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Tuple
import json
import os


_MISSING = object()
_VALID_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}
_SECTIONS = ("discord", "starboard", "runtime")

# Flat keys of the legacy config.json -> (section, key).
_LEGACY_KEYS = {
    "guildId": ("discord", "guild_id"),
    "botChannels": ("discord", "bot_channel_ids"),
    "specialChannel": ("discord", "special_channel_id"),
    "specialChannelEmote": ("discord", "special_channel_emoji"),
    "starboardChannel": ("starboard", "channel_id"),
}


class SettingsError(ValueError):
    """Raised when settings cannot be loaded or validated."""


@dataclass(frozen=True)
class DiscordSettings:
    guild_id: int
    bot_token_env: str = "DISCORD_BOT_TOKEN"
    bot_channel_ids: Tuple[int, ...] = ()
    special_channel_id: Optional[int] = None
    special_channel_emoji: Optional[str] = None
    activity_name: str = "with fire"

    def __post_init__(self) -> None:
        if self.guild_id <= 0:
            raise SettingsError("discord.guild_id must be a positive integer.")

        bot_token_env = self.bot_token_env.strip()
        if not bot_token_env:
            raise SettingsError("discord.bot_token_env cannot be empty.")

        for channel_id in self.bot_channel_ids:
            if channel_id <= 0:
                raise SettingsError("discord.bot_channel_ids must contain positive integers.")

        if self.special_channel_id is not None and self.special_channel_id <= 0:
            raise SettingsError("discord.special_channel_id must be a positive integer.")

        activity_name = self.activity_name.strip()
        if not activity_name:
            raise SettingsError("discord.activity_name cannot be empty.")

        object.__setattr__(self, "bot_token_env", bot_token_env)
        object.__setattr__(self, "bot_channel_ids", tuple(self.bot_channel_ids))
        object.__setattr__(self, "activity_name", activity_name)


@dataclass(frozen=True)
class StarboardSettings:
    channel_id: Optional[int] = None
    emoji: str = "⭐"
    threshold: int = 2
    retention_hours: float = 72.0

    def __post_init__(self) -> None:
        if self.channel_id is not None and self.channel_id <= 0:
            raise SettingsError("starboard.channel_id must be a positive integer.")

        emoji = self.emoji.strip()
        if not emoji:
            raise SettingsError("starboard.emoji cannot be empty.")

        if self.threshold <= 0:
            raise SettingsError("starboard.threshold must be > 0.")

        if self.retention_hours <= 0:
            raise SettingsError("starboard.retention_hours must be > 0.")

        object.__setattr__(self, "emoji", emoji)

    @property
    def retention_seconds(self) -> float:
        return self.retention_hours * 3600.0


@dataclass(frozen=True)
class RuntimeSettings:
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        log_level = self.log_level.strip().upper()
        if log_level not in _VALID_LOG_LEVELS:
            raise SettingsError(
                "runtime.log_level must be one of: " + ", ".join(sorted(_VALID_LOG_LEVELS))
            )

        object.__setattr__(self, "log_level", log_level)


@dataclass(frozen=True)
class AppSettings:
    discord: DiscordSettings
    starboard: StarboardSettings
    runtime: RuntimeSettings


def load_settings(
    config_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> AppSettings:
    """Load validated settings from JSON config and environment overrides."""

    env = dict(environ) if environ is not None else dict(os.environ)
    config = _load_config(config_path)

    discord = DiscordSettings(
        guild_id=_read_value(
            config,
            env,
            section="discord",
            key="guild_id",
            env_key="PYREBOT_DISCORD_GUILD_ID",
            caster=_as_int,
        ),
        bot_token_env=_read_value(
            config,
            env,
            section="discord",
            key="bot_token_env",
            env_key="PYREBOT_DISCORD_BOT_TOKEN_ENV",
            caster=_as_str,
            default="DISCORD_BOT_TOKEN",
        ),
        bot_channel_ids=_read_value(
            config,
            env,
            section="discord",
            key="bot_channel_ids",
            env_key="PYREBOT_DISCORD_BOT_CHANNEL_IDS",
            caster=_as_int_tuple,
            default=(),
        ),
        special_channel_id=_read_value(
            config,
            env,
            section="discord",
            key="special_channel_id",
            env_key="PYREBOT_DISCORD_SPECIAL_CHANNEL_ID",
            caster=_as_optional_int,
            default=None,
        ),
        special_channel_emoji=_read_value(
            config,
            env,
            section="discord",
            key="special_channel_emoji",
            env_key="PYREBOT_DISCORD_SPECIAL_CHANNEL_EMOJI",
            caster=_as_optional_str,
            default=None,
        ),
        activity_name=_read_value(
            config,
            env,
            section="discord",
            key="activity_name",
            env_key="PYREBOT_DISCORD_ACTIVITY_NAME",
            caster=_as_str,
            default="with fire",
        ),
    )

    starboard = StarboardSettings(
        channel_id=_read_value(
            config,
            env,
            section="starboard",
            key="channel_id",
            env_key="PYREBOT_STARBOARD_CHANNEL_ID",
            caster=_as_optional_int,
            default=None,
        ),
        emoji=_read_value(
            config,
            env,
            section="starboard",
            key="emoji",
            env_key="PYREBOT_STARBOARD_EMOJI",
            caster=_as_str,
            default="⭐",
        ),
        threshold=_read_value(
            config,
            env,
            section="starboard",
            key="threshold",
            env_key="PYREBOT_STARBOARD_THRESHOLD",
            caster=_as_int,
            default=2,
        ),
        retention_hours=_read_value(
            config,
            env,
            section="starboard",
            key="retention_hours",
            env_key="PYREBOT_STARBOARD_RETENTION_HOURS",
            caster=_as_float,
            default=72.0,
        ),
    )

    runtime = RuntimeSettings(
        log_level=_read_value(
            config,
            env,
            section="runtime",
            key="log_level",
            env_key="PYREBOT_RUNTIME_LOG_LEVEL",
            caster=_as_str,
            default="INFO",
        ),
    )

    return AppSettings(discord=discord, starboard=starboard, runtime=runtime)


def migrate_legacy_config(config: Mapping[str, Any]) -> dict:
    """Convert the flat legacy config.json layout into sectioned settings.

    Keys without a counterpart (the inline ``token``, keyword tables) are
    dropped; the bot token is always read from the environment.
    """

    migrated: dict = {section: {} for section in _SECTIONS}
    for section in _SECTIONS:
        existing = config.get(section)
        if isinstance(existing, Mapping):
            migrated[section].update(existing)

    for legacy_key, (section, key) in _LEGACY_KEYS.items():
        if legacy_key in config and key not in migrated[section]:
            migrated[section][key] = config[legacy_key]

    return {section: values for section, values in migrated.items() if values}


def resolve_env_secret(env_name: str, environ: Optional[Mapping[str, str]] = None) -> str:
    """Resolve a secret value from environment by indirection key."""

    env = environ if environ is not None else os.environ
    value = env.get(env_name)
    if value is None:
        raise SettingsError(f"Required secret environment variable '{env_name}' is not set.")

    if not value.strip():
        raise SettingsError(f"Secret environment variable '{env_name}' cannot be empty.")

    return value


def settings_summary(settings: AppSettings) -> dict:
    """Render redacted settings for diagnostics."""

    return {
        "discord": {
            "guild_id": settings.discord.guild_id,
            "bot_token_env": settings.discord.bot_token_env,
            "bot_channel_ids": list(settings.discord.bot_channel_ids),
            "special_channel_id": settings.discord.special_channel_id,
            "special_channel_emoji": settings.discord.special_channel_emoji,
            "activity_name": settings.discord.activity_name,
        },
        "starboard": {
            "channel_id": settings.starboard.channel_id,
            "emoji": settings.starboard.emoji,
            "threshold": settings.starboard.threshold,
            "retention_hours": settings.starboard.retention_hours,
        },
        "runtime": {
            "log_level": settings.runtime.log_level,
        },
    }


def _load_config(config_path: Optional[Path]) -> Mapping[str, Any]:
    if config_path is None:
        return {}

    resolved = config_path.expanduser()
    if not resolved.exists():
        raise SettingsError(f"Config file does not exist: {resolved}")

    try:
        with resolved.open("r", encoding="utf-8") as handle:
            loaded = json.load(handle)
    except json.JSONDecodeError as exc:
        raise SettingsError(f"Config file is not valid JSON: {resolved}") from exc

    if not isinstance(loaded, dict):
        raise SettingsError("Config root must be an object.")

    if any(legacy_key in loaded for legacy_key in _LEGACY_KEYS):
        return migrate_legacy_config(loaded)

    return loaded


def _read_value(
    config: Mapping[str, Any],
    environ: Mapping[str, str],
    *,
    section: str,
    key: str,
    env_key: str,
    caster: Callable[[Any], Any],
    default: Any = _MISSING,
) -> Any:
    raw_value, source = _resolve_raw_value(
        config=config,
        environ=environ,
        section=section,
        key=key,
        env_key=env_key,
        default=default,
    )

    try:
        return caster(raw_value)
    except SettingsError:
        raise
    except Exception as exc:  # pragma: no cover - defensive
        raise SettingsError(
            f"Invalid value for {section}.{key} from {source}: {raw_value!r}"
        ) from exc


def _resolve_raw_value(
    *,
    config: Mapping[str, Any],
    environ: Mapping[str, str],
    section: str,
    key: str,
    env_key: str,
    default: Any,
) -> Tuple[Any, str]:
    env_value = environ.get(env_key)
    if env_value not in (None, ""):
        return env_value, "environment"

    section_map = config.get(section)
    if section_map is not None and not isinstance(section_map, Mapping):
        raise SettingsError(f"Config section '{section}' must be an object.")

    if isinstance(section_map, Mapping) and key in section_map:
        return section_map[key], "config"

    if default is not _MISSING:
        return default, "default"

    raise SettingsError(
        f"Missing required setting '{section}.{key}'. "
        f"Provide it in config or via '{env_key}'."
    )


def _as_str(value: Any) -> str:
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise SettingsError("Value cannot be empty.")
        return text

    raise SettingsError("Expected string value.")


def _as_optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        text = value.strip()
        return text if text else None
    raise SettingsError("Expected string value.")


def _as_int(value: Any) -> int:
    if isinstance(value, bool):
        raise SettingsError("Boolean is not a valid integer value.")

    if isinstance(value, int):
        return value

    if isinstance(value, str):
        return int(value.strip())

    raise SettingsError("Expected integer value.")


def _as_optional_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    return _as_int(value)


def _as_int_tuple(value: Any) -> Tuple[int, ...]:
    if isinstance(value, str):
        parts = [part for part in value.replace(",", " ").split() if part]
        return tuple(_as_int(part) for part in parts)

    if isinstance(value, (list, tuple)):
        return tuple(_as_int(item) for item in value)

    raise SettingsError("Expected a list of integers.")


def _as_float(value: Any) -> float:
    if isinstance(value, bool):
        raise SettingsError("Boolean is not a valid float value.")

    if isinstance(value, (int, float)):
        return float(value)

    if isinstance(value, str):
        return float(value.strip())

    raise SettingsError("Expected float value.")
