"""WebDriver attached to the relay's Chrome."""

from typing import Optional

from selenium import webdriver
from selenium.webdriver.chrome.options import Options
from selenium.webdriver.chrome.service import Service as ChromeService

from ..config.paths import chromedriver_log_path
from .chrome import start_or_attach_chrome

import logging
logger = logging.getLogger(__name__)


def create_webdriver(debugger_host: str, debugger_port: int, config: dict) -> webdriver.Chrome:
    """A chromedriver session on an already running Chrome (never launches its own)."""
    options = Options()
    if config.get("chrome_path"):
        options.binary_location = config["chrome_path"]
    options.debugger_address = f"{debugger_host}:{debugger_port}"
    service = ChromeService(log_output=chromedriver_log_path(config))
    return webdriver.Chrome(service=service, options=options)


def attach_driver(config: dict):
    """Start or attach Chrome and return (driver, host, port)."""
    host, port = start_or_attach_chrome(config)
    driver = create_webdriver(host, port, config)
    logger.info(f"Attached WebDriver to Chrome at {host}:{port}")
    return driver, host, port


def chromedriver_version(driver: Optional[webdriver.Chrome]) -> Optional[str]:
    """Version reported in the session capabilities, e.g. '124.0.6367.91'."""
    if driver is None:
        return None
    caps = getattr(driver, "capabilities", None) or {}
    chrome_caps = caps.get("chrome") or {}
    raw = chrome_caps.get("chromedriverVersion") or caps.get("chromedriverVersion")
    return raw.split(" ")[0] if isinstance(raw, str) and raw else None


__all__ = [
    "create_webdriver",
    "attach_driver",
    "chromedriver_version",
]
