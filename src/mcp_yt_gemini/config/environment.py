"""Chrome profile and relay settings read from the environment."""

import os
import hashlib
from typing import Optional

import logging
logger = logging.getLogger(__name__)


DEFAULT_DEBUG_PORT = 9225
DEFAULT_PROFILE_NAME = "Default"

_TRUTHY = ("1", "true", "True", "yes", "Yes")


def _env(name: str) -> Optional[str]:
    value = (os.getenv(name) or "").strip()
    return value or None


def get_env_config() -> dict:
    """
    Build the relay's browser configuration.

    CHROME_PROFILE_USER_DATA_DIR is mandatory. Chrome refuses remote debugging
    on a default channel directory, so point it at a dedicated automation
    profile in which you are logged in to Gemini. Everything else is optional:
    CHROME_PROFILE_NAME, CHROME_EXECUTABLE_PATH, CHROME_REMOTE_DEBUG_PORT,
    MCP_HEADLESS and MCP_YT_GEMINI_STORE.

    Raises:
        EnvironmentError: when no user-data dir is configured.
    """
    user_data_dir = _env("CHROME_PROFILE_USER_DATA_DIR")
    if user_data_dir is None:
        raise EnvironmentError("CHROME_PROFILE_USER_DATA_DIR is required.")

    port = _env("CHROME_REMOTE_DEBUG_PORT")
    if port is not None and not port.isdigit():
        logger.warning(f"Ignoring non-numeric CHROME_REMOTE_DEBUG_PORT={port!r}; using {DEFAULT_DEBUG_PORT}.")
        port = None

    return {
        "user_data_dir": user_data_dir,
        "profile_name": _env("CHROME_PROFILE_NAME") or DEFAULT_PROFILE_NAME,
        "chrome_path": _env("CHROME_EXECUTABLE_PATH"),
        "debug_port": int(port) if port else DEFAULT_DEBUG_PORT,
        "headless": (_env("MCP_HEADLESS") or "0") in _TRUTHY,
        "store_path": _env("MCP_YT_GEMINI_STORE"),
    }


def profile_key(config: Optional[dict] = None) -> str:
    """Hash identifying one Chrome profile (resolved user-data dir plus profile name)."""
    config = config if config is not None else get_env_config()
    user_data_dir = (config.get("user_data_dir") or "").strip()
    if not user_data_dir:
        raise EnvironmentError("CHROME_PROFILE_USER_DATA_DIR is required and cannot be empty.")
    profile = (config.get("profile_name") or "").strip() or DEFAULT_PROFILE_NAME
    identity = f"{os.path.realpath(user_data_dir)}|{profile}"
    return hashlib.sha256(identity.encode("utf-8")).hexdigest()
