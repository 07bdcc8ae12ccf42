# tests/test_chrome.py
import pytest
from unittest.mock import MagicMock

from mcp_yt_gemini.browser import chrome


def test_build_chrome_command():
    cmd = chrome.build_chrome_command("/bin/chrome", 9225, "/tmp/p", "Profile 1", headless=True)
    assert cmd[0] == "/bin/chrome"
    assert "--remote-debugging-port=9225" in cmd
    assert "--user-data-dir=/tmp/p" in cmd
    assert "--profile-directory=Profile 1" in cmd
    assert "--headless=new" in cmd


def test_devtools_active_port_from_file(tmp_path):
    assert chrome.devtools_active_port_from_file(str(tmp_path)) is None
    (tmp_path / "DevToolsActivePort").write_text("9333\n/devtools/browser/abc\n")
    assert chrome.devtools_active_port_from_file(str(tmp_path)) == 9333
    (tmp_path / "DevToolsActivePort").write_text("garbage\n")
    assert chrome.devtools_active_port_from_file(str(tmp_path)) is None


def test_get_chrome_binary_prefers_config():
    assert chrome.get_chrome_binary({"chrome_path": "/opt/chrome"}) == "/opt/chrome"


def test_attach_prefers_port_from_file(monkeypatch, tmp_path):
    monkeypatch.setattr(chrome, "devtools_active_port_from_file", lambda udir: 9444)
    monkeypatch.setattr(chrome, "is_debugger_listening", lambda host, port, timeout=3.0: port == 9444)
    launch = MagicMock()
    monkeypatch.setattr(chrome, "launch_chrome_process", launch)

    host, port = chrome.start_or_attach_chrome({"user_data_dir": str(tmp_path), "debug_port": 9225})

    assert (host, port) == ("127.0.0.1", 9444)
    launch.assert_not_called()


def test_attach_to_configured_port(monkeypatch, tmp_path):
    monkeypatch.setattr(chrome, "devtools_active_port_from_file", lambda udir: None)
    monkeypatch.setattr(chrome, "is_debugger_listening", lambda host, port, timeout=3.0: True)
    monkeypatch.setattr(chrome, "devtools_user_data_dir", lambda host, port: str(tmp_path))

    assert chrome.start_or_attach_chrome({"user_data_dir": str(tmp_path), "debug_port": 9225}) == ("127.0.0.1", 9225)


def test_launch_when_nothing_listens(monkeypatch, tmp_path):
    monkeypatch.setattr(chrome, "devtools_active_port_from_file", lambda udir: None)
    monkeypatch.setattr(chrome, "is_debugger_listening", lambda host, port, timeout=3.0: False)
    monkeypatch.setattr(chrome.time, "sleep", lambda s: None)
    proc = MagicMock()
    proc.poll.return_value = None
    launched = []
    monkeypatch.setattr(chrome, "launch_chrome_process", lambda cmd: launched.append(cmd) or proc)
    monkeypatch.setattr(chrome, "wait_for_devtools_ready", lambda host, port, udir: None)

    config = {"user_data_dir": str(tmp_path / "p"), "debug_port": 9555, "chrome_path": "/bin/chrome"}
    assert chrome.start_or_attach_chrome(config) == ("127.0.0.1", 9555)
    assert launched[0][0] == "/bin/chrome"
    assert (tmp_path / "p").is_dir()


def test_launch_failure(monkeypatch, tmp_path):
    monkeypatch.setattr(chrome, "devtools_active_port_from_file", lambda udir: None)
    monkeypatch.setattr(chrome, "is_debugger_listening", lambda host, port, timeout=3.0: False)
    monkeypatch.setattr(chrome.time, "sleep", lambda s: None)
    proc = MagicMock()
    proc.poll.return_value = 1
    proc.returncode = 1
    monkeypatch.setattr(chrome, "launch_chrome_process", lambda cmd: proc)

    with pytest.raises(RuntimeError, match="exited immediately"):
        chrome.start_or_attach_chrome({"user_data_dir": str(tmp_path), "chrome_path": "/bin/chrome"})


def test_wait_for_devtools_reports_profile_in_use(monkeypatch):
    monkeypatch.setattr(chrome, "is_debugger_listening", lambda host, port, timeout=3.0: False)
    monkeypatch.setattr(chrome.time, "sleep", lambda s: None)
    monkeypatch.setattr(chrome, "is_chrome_running_with_userdata", lambda udir: True)

    with pytest.raises(RuntimeError, match="dedicated automation profile"):
        chrome.wait_for_devtools_ready("127.0.0.1", 9225, "/tmp/p", timeout_iterations=2)
