"""Attach to, or launch, a Chrome instance with remote debugging enabled."""

import json
import time
import shutil
import platform
import subprocess
import urllib.request
from pathlib import Path
from typing import Optional, Tuple

import psutil

import logging
logger = logging.getLogger(__name__)


DEBUGGER_HOST = "127.0.0.1"

_DEFAULT_BINARIES = {
    "Windows": [
        r"C:\Program Files\Google\Chrome\Application\chrome.exe",
        r"C:\Program Files (x86)\Google\Chrome\Application\chrome.exe",
    ],
    "Darwin": ["/Applications/Google Chrome.app/Contents/MacOS/Google Chrome"],
}
_LINUX_BINARIES = ["google-chrome", "google-chrome-stable", "chromium", "chromium-browser"]

_LAUNCH_FLAGS = (
    "--no-first-run",
    "--no-default-browser-check",
    "--disable-dev-shm-usage",
)


def _devtools_version(host: str, port: int, timeout: float) -> Optional[dict]:
    """Body of /json/version, or None when nothing answers on the port."""
    try:
        with urllib.request.urlopen(f"http://{host}:{port}/json/version", timeout=timeout) as resp:
            if resp.status != 200:
                return None
            return json.load(resp)
    except (OSError, ValueError):
        return None


def is_debugger_listening(host: str, port: int, timeout: float = 3.0) -> bool:
    return _devtools_version(host, port, timeout) is not None


def devtools_user_data_dir(host: str, port: int, timeout: float = 1.5) -> Optional[str]:
    """Profile dir of the Chrome answering on the port, when it reports one."""
    info = _devtools_version(host, port, timeout) or {}
    return info.get("userDataDir")


def devtools_active_port_from_file(user_data_dir: str) -> Optional[int]:
    """
    Port written by a debuggable Chrome into <user_data_dir>/DevToolsActivePort.

    The first line of that file is the port; None when the file is missing or
    does not start with a number.
    """
    marker = Path(user_data_dir) / "DevToolsActivePort"
    try:
        head = marker.read_text().partition("\n")[0].strip()
    except OSError:
        return None
    return int(head) if head.isdigit() else None


def _cmdline_user_data_dir(cmdline) -> Optional[str]:
    for arg in cmdline or ():
        if arg and arg.startswith("--user-data-dir="):
            return arg[len("--user-data-dir="):].strip('"')
    return None


def is_chrome_running_with_userdata(user_data_dir: str) -> bool:
    """True if a Chrome process was started on this user-data dir."""
    for proc in psutil.process_iter(["name", "cmdline"]):
        try:
            name = (proc.info.get("name") or "").lower()
            if "chrome" in name and _cmdline_user_data_dir(proc.info.get("cmdline")) == user_data_dir:
                return True
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            continue
    return False


def get_chrome_binary(config: dict) -> str:
    """Configured Chrome binary, else the first platform default that exists."""
    configured = config.get("chrome_path")
    if configured:
        return configured
    candidates = _DEFAULT_BINARIES.get(platform.system(), _LINUX_BINARIES) + ["chrome"]
    found = next((c for c in candidates if Path(c).is_file() or shutil.which(c)), None)
    return found or "chrome"


def build_chrome_command(binary: str, port: int, user_data_dir: str, profile_name: str, headless: bool = False) -> list:
    cmd = [binary, f"--remote-debugging-port={port}", f"--user-data-dir={user_data_dir}",
           f"--profile-directory={profile_name}", *_LAUNCH_FLAGS]
    if headless:
        cmd.append("--headless=new")
    # Trailing non-flag args are URLs to open.
    cmd.append("about:blank")
    return cmd


def launch_chrome_process(cmd: list) -> subprocess.Popen:
    extra = {"creationflags": subprocess.CREATE_NO_WINDOW} if platform.system() == "Windows" else {}
    return subprocess.Popen(
        cmd,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        **extra,
    )


def wait_for_devtools_ready(host: str, port: int, user_data_dir: str, timeout_iterations: int = 100) -> None:
    """
    Poll the DevTools endpoint every 100ms.

    Raises:
        RuntimeError: If the endpoint never appears. The message names the
            likely cause when another Chrome already holds the profile.
    """
    attempts = 0
    while attempts < timeout_iterations:
        if is_debugger_listening(host, port, timeout=0.5):
            return
        attempts += 1
        time.sleep(0.1)

    if is_chrome_running_with_userdata(user_data_dir):
        raise RuntimeError(
            "DevTools endpoint did not appear. Another Chrome instance started without "
            "--remote-debugging-port is probably holding this user-data-dir. Quit it, or "
            "point CHROME_PROFILE_USER_DATA_DIR at a dedicated automation profile."
        )
    raise RuntimeError(f"Chrome did not expose DevTools on port {port}.")


def start_or_attach_chrome(config: dict) -> Tuple[str, int]:
    """
    Return (host, port) of a debuggable Chrome for the configured profile.

    Attaches to the port advertised in DevToolsActivePort, then to the
    configured port, and launches Chrome on the configured port otherwise.
    """
    host = DEBUGGER_HOST
    profile_dir = Path(config["user_data_dir"])
    port = int(config.get("debug_port") or 9225)
    profile_dir.mkdir(parents=True, exist_ok=True)

    advertised = devtools_active_port_from_file(str(profile_dir))
    if advertised and is_debugger_listening(host, advertised):
        logger.info(f"Attaching to running Chrome on port {advertised}")
        return host, advertised

    if is_debugger_listening(host, port):
        reported = devtools_user_data_dir(host, port)
        if reported and Path(reported).resolve() != profile_dir.resolve():
            logger.warning(f"Chrome on port {port} uses profile dir {reported}, not {profile_dir}; attaching anyway.")
        logger.info(f"Attaching to Chrome already listening on port {port}")
        return host, port

    proc = launch_chrome_process(build_chrome_command(
        get_chrome_binary(config),
        port,
        str(profile_dir),
        config.get("profile_name") or "Default",
        headless=bool(config.get("headless")),
    ))
    time.sleep(0.2)
    exit_code = proc.poll()
    if exit_code is not None:
        raise RuntimeError(f"Chrome exited immediately with code {exit_code}; check CHROME_EXECUTABLE_PATH.")

    wait_for_devtools_ready(host, port, str(profile_dir))
    logger.info(f"Chrome started on port {port} (pid {proc.pid})")
    return host, port


__all__ = [
    "is_debugger_listening",
    "devtools_user_data_dir",
    "devtools_active_port_from_file",
    "is_chrome_running_with_userdata",
    "get_chrome_binary",
    "build_chrome_command",
    "launch_chrome_process",
    "wait_for_devtools_ready",
    "start_or_attach_chrome",
]
