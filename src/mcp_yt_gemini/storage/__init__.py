"""Persistent settings and pending-request storage."""

from .store import SettingsStore
from .settings import (
    Settings,
    get_default_settings,
    get_settings,
    set_settings,
    reset_settings,
    get_pending,
    set_pending,
    clear_pending,
)

__all__ = [
    "SettingsStore",
    "Settings",
    "get_default_settings",
    "get_settings",
    "set_settings",
    "reset_settings",
    "get_pending",
    "set_pending",
    "clear_pending",
]
