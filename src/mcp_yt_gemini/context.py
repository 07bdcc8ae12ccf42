"""
Relay session state.

One `RelayContext` per server process holds the attached driver, the store,
the tab host (with its watcher task) and the request correlator. Tools go
through `get_context()`; `ensure_relay()` attaches Chrome and wires the
pieces together on first use.

Usage:
    from mcp_yt_gemini.context import ensure_relay

    ctx = await ensure_relay()
    await ctx.correlator.trigger_link(url)
"""

from typing import Optional
from selenium import webdriver
from dataclasses import dataclass, field

from .agent import DeliveryAgent
from .browser.driver import attach_driver
from .browser.page import SeleniumPage
from .browser.tabs import ChromeTabHost
from .config.paths import store_path
from .constants import REQUEST_TIMEOUT_SECS, TAB_WATCH_INTERVAL_SECS
from .correlator import RequestCorrelator
from .storage.store import SettingsStore

import logging
logger = logging.getLogger(__name__)


@dataclass
class RelayContext:
    """
    Attributes:
        driver: Selenium WebDriver attached to the debuggable Chrome
        debugger_host: Chrome DevTools debugger hostname
        debugger_port: Chrome DevTools debugger port
        config: Environment configuration dictionary
        store: Settings and pending-request store
        tabs: Tab host watching Gemini tabs
        correlator: Request correlator driving deliveries
    """

    driver: Optional[webdriver.Chrome] = None
    debugger_host: Optional[str] = None
    debugger_port: Optional[int] = None

    config: dict = field(default_factory=dict)

    store: Optional[SettingsStore] = None
    tabs: Optional[ChromeTabHost] = None
    correlator: Optional[RequestCorrelator] = None

    def is_driver_initialized(self) -> bool:
        return self.driver is not None

    def is_relay_ready(self) -> bool:
        return self.driver is not None and self.tabs is not None and self.correlator is not None

    def get_debugger_address(self) -> Optional[str]:
        if self.debugger_host and self.debugger_port:
            return f"{self.debugger_host}:{self.debugger_port}"
        return None

    def get_store(self) -> SettingsStore:
        """The store, created on demand; settings tools work without a browser."""
        if self.store is None:
            self.store = SettingsStore(store_path(self.config or None))
        return self.store


_global_context: Optional[RelayContext] = None


def get_context() -> RelayContext:
    """
    Get or create the global relay context.

    All calls return the same instance; `reset_context()` clears it (tests).
    """
    global _global_context

    if _global_context is None:
        try:
            from .config.environment import get_env_config
            _global_context = RelayContext(config=get_env_config())
        except Exception:
            # No Chrome profile configured yet; the store still works.
            _global_context = RelayContext()

    return _global_context


def reset_context() -> None:
    global _global_context
    _global_context = None


def build_agent_factory(tabs_ref, store: SettingsStore):
    """Agent factory for a tab host: one DeliveryAgent per Gemini tab."""
    def factory(tab_id: str) -> DeliveryAgent:
        return DeliveryAgent(SeleniumPage(tabs_ref(), tab_id), store)
    return factory


async def ensure_relay() -> RelayContext:
    """Attach Chrome and start the tab watcher if not done yet."""
    ctx = get_context()
    if ctx.is_relay_ready():
        return ctx

    if not ctx.config:
        from .config.environment import get_env_config
        ctx.config = get_env_config()

    driver, host, port = attach_driver(ctx.config)
    ctx.driver, ctx.debugger_host, ctx.debugger_port = driver, host, port

    store = ctx.get_store()
    ctx.tabs = ChromeTabHost(
        driver,
        build_agent_factory(lambda: ctx.tabs, store),
        watch_interval=TAB_WATCH_INTERVAL_SECS,
    )
    ctx.tabs.start()
    ctx.correlator = RequestCorrelator(store, ctx.tabs, ready_timeout=REQUEST_TIMEOUT_SECS)
    logger.info(f"Relay ready (debugger {ctx.get_debugger_address()}, store {store.path})")
    return ctx


async def shutdown_relay() -> None:
    """Stop the watcher and detach the driver; Chrome itself keeps running."""
    ctx = get_context()
    if ctx.correlator is not None:
        ctx.correlator.state.disarm()
    if ctx.tabs is not None:
        await ctx.tabs.stop()
    if ctx.driver is not None:
        try:
            ctx.driver.quit()
        except Exception as e:
            logger.warning(f"Error while detaching WebDriver: {e}")
    ctx.driver = None
    ctx.tabs = None
    ctx.correlator = None


__all__ = [
    "RelayContext",
    "get_context",
    "reset_context",
    "build_agent_factory",
    "ensure_relay",
    "shutdown_relay",
]
