"""Smoke tests for the FastMCP server module."""

import json
import asyncio
import pytest

from mcp_yt_gemini.context import get_context, reset_context
from mcp_yt_gemini.storage.store import SettingsStore

## We DO NOT want to use pytest-asyncio.
## Instead, use event_loop.run_until_complete()!


@pytest.fixture(scope="function")
def event_loop():
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    yield loop
    loop.close()


EXPECTED_TOOLS = {
    "mcp_yt_gemini__open_gemini",
    "mcp_yt_gemini__summarize_link",
    "mcp_yt_gemini__summarize_active_tab",
    "mcp_yt_gemini__redeliver_pending",
    "mcp_yt_gemini__get_settings",
    "mcp_yt_gemini__update_settings",
    "mcp_yt_gemini__reset_settings",
    "mcp_yt_gemini__get_pending",
    "mcp_yt_gemini__get_debug_info",
}


def test_all_tools_are_registered(event_loop):
    from mcp_yt_gemini.__main__ import mcp

    tools = event_loop.run_until_complete(mcp.list_tools())
    assert EXPECTED_TOOLS <= {t.name for t in tools}


def test_settings_tool_works_without_browser(event_loop, monkeypatch, tmp_path):
    from mcp_yt_gemini import __main__ as server

    monkeypatch.delenv("CHROME_PROFILE_USER_DATA_DIR", raising=False)
    reset_context()
    try:
        get_context().store = SettingsStore(tmp_path / "store.json")
        out = json.loads(event_loop.run_until_complete(server.mcp_yt_gemini__get_pending()))
        assert out == {"ok": True, "pending": None}
    finally:
        reset_context()


def test_trigger_tool_reports_missing_configuration(event_loop, monkeypatch):
    from mcp_yt_gemini import __main__ as server

    monkeypatch.delenv("CHROME_PROFILE_USER_DATA_DIR", raising=False)
    reset_context()
    try:
        out = json.loads(event_loop.run_until_complete(
            server.mcp_yt_gemini__summarize_link("https://www.youtube.com/watch?v=1")
        ))
        assert out["ok"] is False
        assert out["error"] == "invalid_configuration"
    finally:
        reset_context()
