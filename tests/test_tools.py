"""Tests for the tool implementations behind the MCP server."""

import json
import asyncio
import pytest

from mcp_yt_gemini.context import get_context, reset_context
from mcp_yt_gemini.correlator import RequestCorrelator
from mcp_yt_gemini.storage import settings as settings_mod
from mcp_yt_gemini.storage.store import SettingsStore
from mcp_yt_gemini.tools import debugging, relay, settings

from _utils import FakeTabHost, GEMINI_URL, YT_URL

## We DO NOT want to use pytest-asyncio.
## Instead, use event_loop.run_until_complete()!


@pytest.fixture(scope="function")
def event_loop():
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    yield loop
    loop.close()


@pytest.fixture
def ctx(tmp_path, monkeypatch):
    monkeypatch.delenv("CHROME_PROFILE_USER_DATA_DIR", raising=False)
    monkeypatch.setattr(settings_mod, "default_language", lambda: "en")
    reset_context()
    ctx = get_context()
    ctx.store = SettingsStore(tmp_path / "store.json")
    ctx.tabs = FakeTabHost()
    ctx.correlator = RequestCorrelator(ctx.store, ctx.tabs)
    yield ctx
    reset_context()


def test_open_gemini_accepts_video(event_loop, ctx):
    out = json.loads(event_loop.run_until_complete(relay.open_gemini(YT_URL, "T", "C")))
    assert out["ok"] is True
    assert out["accepted"] is True
    assert out["pending"]["url"] == YT_URL
    assert out["pending"]["title"] == "T"


def test_open_gemini_rejects_other_urls(event_loop, ctx):
    out = json.loads(event_loop.run_until_complete(relay.open_gemini("https://example.com")))
    assert out == {"ok": True, "accepted": False, "pending": None}


def test_summarize_link_and_get_pending(event_loop, ctx):
    out = json.loads(event_loop.run_until_complete(relay.summarize_link(YT_URL)))
    assert out["accepted"] is True
    pending = json.loads(event_loop.run_until_complete(relay.get_pending_request()))["pending"]
    assert pending["id"] == out["pending"]["id"]


def test_summarize_active_tab_without_video(event_loop, ctx):
    out = json.loads(event_loop.run_until_complete(relay.summarize_active_tab()))
    assert out["accepted"] is False
    assert "not a YouTube video" in out["message"]


def test_redeliver_pending(event_loop, ctx):
    event_loop.run_until_complete(relay.summarize_link(YT_URL))
    out = json.loads(event_loop.run_until_complete(relay.redeliver_pending()))
    assert out["signaled"] is True
    assert ctx.tabs.sent[-1][1]["payload"]["id"] == out["pending"]["id"]


def test_settings_tools(event_loop, ctx):
    s = json.loads(event_loop.run_until_complete(settings.read_settings()))["settings"]
    assert s["autoSend"] is True

    s = json.loads(event_loop.run_until_complete(
        settings.update_settings(auto_send=False, send_delay_ms=9000, language="tr")
    ))["settings"]
    assert s["autoSend"] is False
    assert s["sendDelayMs"] == 2000
    assert s["language"] == "tr"
    assert s["promptTemplate"].startswith("Bu YouTube videosunu")

    s = json.loads(event_loop.run_until_complete(settings.restore_default_settings()))["settings"]
    assert s["autoSend"] is True
    assert s["language"] == "en"


def test_debug_info(event_loop, ctx):
    event_loop.run_until_complete(relay.summarize_link(YT_URL))
    out = json.loads(event_loop.run_until_complete(debugging.get_debug_info()))
    diag = out["diagnostics"]
    assert out["ok"] is True
    assert diag["driver_initialized"] is False
    assert diag["correlation"]["current_request_id"] == ctx.correlator.state.current_request_id
    assert diag["correlation"]["waiting_for_tab"] is not None
    assert "Store file" in diag["summary"]
