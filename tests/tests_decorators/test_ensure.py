# tests/tests_decorators/test_ensure.py
import json
import asyncio
import pytest

import mcp_yt_gemini.context as context_mod
from mcp_yt_gemini.decorators import ensure_relay_ready

## We DO NOT want to use pytest-asyncio.
## Instead, use event_loop.run_until_complete()!


@pytest.fixture(scope="function")
def event_loop():
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    yield loop
    loop.close()


def test_runs_tool_when_relay_attaches(monkeypatch, event_loop):
    calls = []

    async def fake_ensure_relay():
        calls.append("ensure")

    monkeypatch.setattr(context_mod, "ensure_relay", fake_ensure_relay)

    @ensure_relay_ready
    async def tool(x):
        calls.append(("tool", x))
        return "ok"

    assert event_loop.run_until_complete(tool(1)) == "ok"
    assert calls == ["ensure", ("tool", 1)]


def test_configuration_error_payload(monkeypatch, event_loop):
    async def fake_ensure_relay():
        raise EnvironmentError("CHROME_PROFILE_USER_DATA_DIR is required.")

    monkeypatch.setattr(context_mod, "ensure_relay", fake_ensure_relay)

    @ensure_relay_ready
    async def tool():
        raise AssertionError("must not run")

    payload = json.loads(event_loop.run_until_complete(tool()))
    assert payload["ok"] is False
    assert payload["error"] == "invalid_configuration"
    assert "CHROME_PROFILE_USER_DATA_DIR" in payload["details"]["required"]


def test_attach_error_payload(monkeypatch, event_loop):
    async def fake_ensure_relay():
        raise RuntimeError("DevTools not reachable")

    monkeypatch.setattr(context_mod, "ensure_relay", fake_ensure_relay)

    @ensure_relay_ready
    async def tool():
        raise AssertionError("must not run")

    payload = json.loads(event_loop.run_until_complete(tool()))
    assert payload["error"] == "browser_not_attached"
    assert "DevTools not reachable" in payload["message"]


def test_rejects_sync_functions():
    with pytest.raises(TypeError):
        @ensure_relay_ready
        def tool():
            return None
