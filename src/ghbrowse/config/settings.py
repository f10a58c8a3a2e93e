"""Configuration structures and loading for ghbrowse."""

import os
import tomllib
from pathlib import Path

import msgspec

from ghbrowse.errors.types import ConfigError

# Default values
DEFAULT_BASE_URL = "https://api.github.com/"
DEFAULT_TIMEOUT = 30.0
DEFAULT_USER_AGENT = "ghbrowse"
DEFAULT_RATE_LIMIT_MINUTES = 10


# Remote API configuration
class ApiConfig(msgspec.Struct, omit_defaults=True):
    """GitHub API client settings."""

    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT


# Local cache configuration
class CacheConfig(msgspec.Struct, omit_defaults=True):
    """Local store and refresh settings."""

    rate_limit_minutes: int = DEFAULT_RATE_LIMIT_MINUTES
    database: str = ""  # empty: default path in the cache dir

    def database_path(self) -> str:
        """Resolved database location (":memory:" passes through)."""
        if self.database:
            return self.database
        from .paths import database_file

        return str(database_file())


# Main configuration
class Config(msgspec.Struct, omit_defaults=True):
    """Main configuration structure."""

    api: ApiConfig = msgspec.field(default_factory=ApiConfig)
    cache: CacheConfig = msgspec.field(default_factory=CacheConfig)


def _load_from_toml(path: Path) -> dict:
    """Load configuration from TOML file."""
    if not path.exists():
        return {}

    with path.open("rb") as f:
        try:
            return tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML in {path}: {e}") from e


def _save_to_toml(data: dict, path: Path) -> None:
    """Save configuration to TOML file."""
    import tomli_w

    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("wb") as f:
        tomli_w.dump(data, f)


def convert_config(data: dict) -> Config:
    """Convert raw dict to Config struct."""
    try:
        return msgspec.convert(data, type=Config)
    except msgspec.ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def _apply_env_overrides(config: Config) -> Config:
    """Apply environment variable overrides to config.

    GHBROWSE_BASE_URL: API base URL (e.g. a GitHub Enterprise host)
    GHBROWSE_RATE_LIMIT_MINUTES: Refresh cooldown for repo lists
    """
    if base_url := os.environ.get("GHBROWSE_BASE_URL"):
        api = msgspec.structs.replace(config.api, base_url=base_url)
        config = msgspec.structs.replace(config, api=api)

    if minutes := os.environ.get("GHBROWSE_RATE_LIMIT_MINUTES"):
        try:
            value = int(minutes)
        except ValueError as e:
            raise ConfigError(
                f"GHBROWSE_RATE_LIMIT_MINUTES must be an integer, got {minutes!r}"
            ) from e
        cache = msgspec.structs.replace(config.cache, rate_limit_minutes=value)
        config = msgspec.structs.replace(config, cache=cache)

    return config


# Config state storage
_config: Config | None = None


def get_config() -> Config:
    """Get the current configuration (singleton)."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config() -> Config:
    """Reload configuration from disk."""
    global _config
    _config = load_config()
    return _config


def load_config(path: Path | None = None, apply_env: bool = True) -> Config:
    """Load configuration from file with defaults.

    With apply_env=False the result is exactly what the file holds, which is
    what should be written back by save_config.
    """
    from .paths import config_file

    config_path = path or config_file()

    raw_data = _load_from_toml(config_path)
    if not raw_data:
        config = Config()
    else:
        config = convert_config(raw_data)

    return _apply_env_overrides(config) if apply_env else config


def save_config(config: Config, path: Path | None = None) -> None:
    """Save configuration to file."""
    from .paths import config_file

    config_path = path or config_file()

    data = msgspec.to_builtins(config)
    _save_to_toml(data, config_path)

    # Update singleton
    global _config
    _config = _apply_env_overrides(config)


def update_config(config: Config, key: str, value: str) -> Config:
    """Return ``config`` with the dotted setting ``key`` set from a string.

    Keys name a section and a field, e.g. ``api.base_url`` or
    ``cache.rate_limit_minutes``. The value is converted to the field's type.
    """
    section_name, _, field_name = key.partition(".")
    if section_name not in config.__struct_fields__:
        raise ConfigError(f"Unknown setting {key!r}")

    section = getattr(config, section_name)
    if field_name not in section.__struct_fields__:
        raise ConfigError(f"Unknown setting {key!r}")

    data = msgspec.to_builtins(section)
    data[field_name] = value
    try:
        updated = msgspec.convert(data, type=type(section), strict=False)
    except msgspec.ValidationError as e:
        raise ConfigError(f"Invalid value for {key}: {e}") from e

    return msgspec.structs.replace(config, **{section_name: updated})
