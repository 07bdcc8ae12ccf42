"""Human-readable summary of the relay's runtime environment."""

import sys
import platform
from typing import List, Optional, Tuple

import selenium
from selenium.common.exceptions import WebDriverException

from ..context import RelayContext, get_context
from ..browser.chrome import get_chrome_binary
from ..browser.driver import chromedriver_version


def _browser_rows(driver) -> List[Tuple[str, str]]:
    try:
        product = (driver.execute_cdp_cmd("Browser.getVersion", {}) or {}).get("product")
    except WebDriverException:
        product = None
    return [
        ("Chrome", product or "<unknown>"),
        ("Chromedriver", chromedriver_version(driver) or "<unknown>"),
    ]


def collect_diagnostics(ctx: Optional[RelayContext] = None, exc: Optional[Exception] = None) -> str:
    """
    One "label: value" line per fact about the host, Chrome profile, store and
    relay wiring; `exc`, when given, is appended at the end.
    """
    ctx = ctx or get_context()
    config = ctx.config or {}

    binary = get_chrome_binary(config) if config else None
    rows = [
        ("Platform", f"{platform.system()} {platform.release()}"),
        ("Python", sys.version.split()[0]),
        ("Selenium", getattr(selenium, "__version__", "?")),
        ("User-data dir", config.get("user_data_dir") or "<not configured>"),
        ("Profile", config.get("profile_name") or "<not configured>"),
        ("Chrome binary", binary or "<unknown>"),
        ("Store file", ctx.store.path if ctx.store is not None else "<not opened>"),
        ("Debugger", ctx.get_debugger_address() or "<not attached>"),
        ("Relay ready", str(ctx.is_relay_ready())),
    ]
    if ctx.driver is not None:
        rows += _browser_rows(ctx.driver)
    if exc is not None:
        rows.append(("Last error", f"{type(exc).__name__}: {exc}"))

    width = max(len(label) for label, _ in rows)
    return "\n".join(f"{label.ljust(width)} : {value}" for label, value in rows)


__all__ = ["collect_diagnostics"]
