"""Configuration management for ghbrowse."""

from ghbrowse.config.credentials import (
    delete_credential,
    read_credential,
    write_credential,
)
from ghbrowse.config.paths import (
    cache_dir,
    config_dir,
    config_file,
    credentials_dir,
    database_file,
    ensure_directories,
    token_file,
)
from ghbrowse.config.settings import (
    ApiConfig,
    CacheConfig,
    Config,
    get_config,
    load_config,
    reload_config,
    save_config,
    update_config,
)

__all__ = [
    # paths
    "config_dir",
    "cache_dir",
    "credentials_dir",
    "token_file",
    "database_file",
    "config_file",
    "ensure_directories",
    # settings
    "Config",
    "ApiConfig",
    "CacheConfig",
    "get_config",
    "load_config",
    "reload_config",
    "save_config",
    "update_config",
    # credentials
    "write_credential",
    "read_credential",
    "delete_credential",
]
