"""Configuration management for the relay."""

from .environment import (
    get_env_config,
    profile_key,
)

from .paths import (
    get_data_dir,
    store_path,
    chromedriver_log_path,
)

__all__ = [
    "get_env_config",
    "profile_key",
    "get_data_dir",
    "store_path",
    "chromedriver_log_path",
]
