"""Platform-specific paths for ghbrowse configuration and cache."""

from __future__ import annotations

import os
from pathlib import Path

from platformdirs import user_cache_dir
from platformdirs import user_config_dir

PACKAGE_NAME = "ghbrowse"


def _get_env_path(env_var: str, fallback: Path) -> Path:
    """Get path from environment variable or fallback."""
    if env_value := os.environ.get(env_var):
        return Path(env_value)
    return fallback


def config_dir() -> Path:
    """Get user config directory.

    Respects GHBROWSE_CONFIG_DIR environment variable.
    """
    base_dir = Path(user_config_dir(PACKAGE_NAME))
    return _get_env_path("GHBROWSE_CONFIG_DIR", base_dir)


def cache_dir() -> Path:
    """Get user cache directory.

    Respects GHBROWSE_CACHE_DIR environment variable.
    """
    base_dir = Path(user_cache_dir(PACKAGE_NAME))
    return _get_env_path("GHBROWSE_CACHE_DIR", base_dir)


def credentials_dir() -> Path:
    """Get credentials subdirectory."""
    return config_dir() / "credentials"


def token_file() -> Path:
    """Get the stored access token path."""
    return credentials_dir() / "token.json"


def database_file() -> Path:
    """Get the default local store path."""
    return cache_dir() / "github.db"


def config_file() -> Path:
    """Get main config.toml path."""
    return config_dir() / "config.toml"


def ensure_directories() -> None:
    """Ensure all required directories exist."""
    for directory in (config_dir(), cache_dir(), credentials_dir()):
        directory.mkdir(parents=True, exist_ok=True)
