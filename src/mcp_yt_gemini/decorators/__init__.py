# mcp_yt_gemini/decorators/__init__.py

from .ensure import ensure_relay_ready
from .envelope import tool_envelope

__all__ = [
    "ensure_relay_ready",
    "tool_envelope",
]
