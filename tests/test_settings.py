# tests/test_settings.py
import pytest
from pathlib import Path

from mcp_yt_gemini.constants import DEFAULT_PROMPT_TEMPLATES, PENDING_KEY, SETTINGS_KEY
from mcp_yt_gemini.models import PendingRequest
from mcp_yt_gemini.storage import settings as settings_mod
from mcp_yt_gemini.storage.settings import (
    clear_pending,
    get_default_settings,
    get_pending,
    get_settings,
    normalize_delay,
    reset_settings,
    set_pending,
    set_settings,
)
from mcp_yt_gemini.storage.store import SettingsStore


@pytest.fixture
def store(tmp_path, monkeypatch):
    monkeypatch.setattr(settings_mod, "default_language", lambda: "en")
    return SettingsStore(tmp_path / "store.json")


def test_defaults_when_nothing_stored(store):
    s = get_settings(store)
    assert s.language == "en"
    assert s.autoSend is True
    assert s.sendDelayMs == 150
    assert s.promptTemplate == DEFAULT_PROMPT_TEMPLATES["en"]
    assert s.showButtonOnHoverOnly is True


def test_stored_values_are_merged_over_defaults(store):
    store.set({SETTINGS_KEY: {"autoSend": False, "sendDelayMs": 500}})
    s = get_settings(store)
    assert s.autoSend is False
    assert s.sendDelayMs == 500
    assert s.promptTemplate == DEFAULT_PROMPT_TEMPLATES["en"]


def test_invalid_values_fall_back(store):
    store.set({SETTINGS_KEY: {
        "language": "xx",
        "autoSend": "yes",
        "sendDelayMs": "abc",
        "promptTemplate": "",
        "showButtonOnHoverOnly": 1,
    }})
    s = get_settings(store)
    assert s.language == "en"
    assert s.autoSend is True
    assert s.sendDelayMs == 150
    assert s.promptTemplate == DEFAULT_PROMPT_TEMPLATES["en"]
    assert s.showButtonOnHoverOnly is True


@pytest.mark.parametrize("value,expected", [
    (-5, 0), (0, 0), (700, 700), (99999, 2000), ("300", 300), (None, 150), (True, 150),
])
def test_normalize_delay(value, expected):
    assert normalize_delay(value) == expected


def test_default_settings_for_language():
    s = get_default_settings("tr")
    assert s.language == "tr"
    assert s.promptTemplate == DEFAULT_PROMPT_TEMPLATES["tr"]


def test_set_settings_merges_partial(store):
    set_settings(store, {"autoSend": False})
    s = set_settings(store, {"sendDelayMs": 5000})
    assert s.autoSend is False
    assert s.sendDelayMs == 2000
    assert get_settings(store) == s


def test_language_switch_replaces_untouched_default_template(store):
    s = set_settings(store, {"language": "de"})
    assert s.language == "de"
    assert s.promptTemplate == DEFAULT_PROMPT_TEMPLATES["de"]


def test_language_switch_keeps_custom_template(store):
    set_settings(store, {"promptTemplate": "Mine: {url}"})
    s = set_settings(store, {"language": "fr"})
    assert s.language == "fr"
    assert s.promptTemplate == "Mine: {url}"


def test_language_switch_with_explicit_template(store):
    s = set_settings(store, {"language": "es", "promptTemplate": "Custom {title}"})
    assert s.promptTemplate == "Custom {title}"


def test_reset_settings(store):
    set_settings(store, {"autoSend": False, "promptTemplate": "x"})
    s = reset_settings(store)
    assert s == get_default_settings()
    assert get_settings(store) == s


def test_pending_roundtrip_and_clear(store):
    assert get_pending(store) is None
    pending = PendingRequest(id="r1", url="https://www.youtube.com/watch?v=1", title="T", channel="C", created_at=42)
    assert set_pending(store, pending) is True
    assert store.get(PENDING_KEY)["createdAt"] == 42
    assert get_pending(store) == pending
    assert clear_pending(store) is True
    assert get_pending(store) is None


def test_pending_ignores_garbage(store):
    store.set({PENDING_KEY: "nope"})
    assert get_pending(store) is None


def test_non_finite_numbers_in_store_fall_back(store):
    Path(store.path).write_text(
        '{"settings": {"sendDelayMs": Infinity}, '
        '"pendingPrompt": {"id": "p1", "url": "https://www.youtube.com/watch?v=x", "createdAt": NaN}}'
    )

    assert get_settings(store).sendDelayMs == 150
    pending = get_pending(store)
    assert pending.id == "p1"
    assert pending.created_at == 0


def test_normalize_delay_rejects_infinity():
    assert normalize_delay(float("inf")) == 150
    assert normalize_delay(float("-inf"), fallback=300) == 300
    assert normalize_delay(float("nan")) == 150
