# mcp_yt_gemini/tools/__init__.py
"""
MCP tool implementations - async functions that return JSON responses.

Triggers and redelivery need the relay (attached Chrome); settings and the
pending request are read from the store directly.
"""

from .relay import (
    open_gemini,
    summarize_link,
    summarize_active_tab,
    redeliver_pending,
    get_pending_request,
)

from .settings import (
    read_settings,
    update_settings,
    restore_default_settings,
)

from .debugging import (
    get_debug_info,
)

__all__ = [
    # Relay
    "open_gemini",
    "summarize_link",
    "summarize_active_tab",
    "redeliver_pending",
    "get_pending_request",
    # Settings
    "read_settings",
    "update_settings",
    "restore_default_settings",
    # Debugging
    "get_debug_info",
]
