# tests/test_storage.py
import json

from mcp_yt_gemini.storage.store import SettingsStore


def test_get_returns_default_for_missing_file(tmp_path):
    store = SettingsStore(tmp_path / "nested" / "store.json")
    assert store.get("settings", {"x": 1}) == {"x": 1}
    assert store.get("pendingPrompt") is None


def test_set_creates_directories_and_overwrites_whole_keys(tmp_path):
    path = tmp_path / "nested" / "store.json"
    store = SettingsStore(path)
    assert store.set({"settings": {"a": 1, "b": 2}}) is True
    assert store.set({"settings": {"a": 3}}) is True
    assert store.get("settings") == {"a": 3}
    assert json.loads(path.read_text(encoding="utf-8")) == {"settings": {"a": 3}}
    assert not (tmp_path / "nested" / "store.json.mutex").exists()


def test_set_keeps_other_keys(tmp_path):
    store = SettingsStore(tmp_path / "store.json")
    store.set({"settings": {"a": 1}})
    store.set({"pendingPrompt": {"id": "x"}})
    assert store.get("settings") == {"a": 1}
    assert store.get("pendingPrompt") == {"id": "x"}


def test_remove(tmp_path):
    store = SettingsStore(tmp_path / "store.json")
    store.set({"pendingPrompt": {"id": "x"}, "settings": {}})
    assert store.remove("pendingPrompt") is True
    assert store.get("pendingPrompt") is None
    assert store.get("settings") == {}
    # removing an absent key is fine
    assert store.remove("pendingPrompt") is True


def test_corrupt_file_reads_default_and_is_rewritten(tmp_path, caplog):
    path = tmp_path / "store.json"
    path.write_text("{not json", encoding="utf-8")
    store = SettingsStore(path)

    assert store.get("settings", "fallback") == "fallback"
    assert "Failed to read storage key" in caplog.text

    assert store.set({"settings": {"a": 1}}) is True
    assert store.get("settings") == {"a": 1}


def test_write_failure_returns_false(tmp_path, caplog):
    blocker = tmp_path / "file"
    blocker.write_text("", encoding="utf-8")
    store = SettingsStore(blocker / "store.json")  # parent is a regular file
    assert store.set({"settings": {}}) is False
    assert store.remove("settings") is False
    assert "Failed to write storage keys" in caplog.text
