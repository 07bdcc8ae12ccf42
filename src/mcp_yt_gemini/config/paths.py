"""Path utilities for the store file and the chromedriver log."""

import os
import platform
import tempfile
from pathlib import Path
from typing import Optional

from .environment import profile_key


APP_DIR_NAME = "mcp_yt_gemini"


def get_data_dir() -> str:
    """
    Per-user data directory for this application.

    The directory is created if it doesn't exist.
    """
    system = platform.system()
    if system == "Windows":
        base = Path(os.getenv("APPDATA") or (Path.home() / "AppData" / "Roaming"))
    elif system == "Darwin":
        base = Path.home() / "Library" / "Application Support"
    else:
        base = Path(os.getenv("XDG_DATA_HOME") or (Path.home() / ".local" / "share"))

    data_dir = base / APP_DIR_NAME
    data_dir.mkdir(parents=True, exist_ok=True)
    return str(data_dir)


def store_path(config: Optional[dict] = None) -> str:
    """Path of the JSON store file; MCP_YT_GEMINI_STORE overrides the default."""
    configured = (config or {}).get("store_path") or os.getenv("MCP_YT_GEMINI_STORE")
    if configured:
        return str(Path(configured).expanduser())
    return os.path.join(get_data_dir(), "store.json")


def chromedriver_log_path(config: dict) -> str:
    """Get the path to the ChromeDriver log file."""
    return os.path.join(tempfile.gettempdir(), f"chromedriver_yt_gemini_{profile_key(config)}_{os.getpid()}.log")
