"""
Host tab-lifecycle capability.

`TabHost` is the contract the request correlator depends on: query, update
and create tabs, subscribe to per-tab load-status changes, and send messages
to the delivery agent living in a tab. `ChromeTabHost` implements it on top
of a Selenium-attached Chrome using CDP target commands.

Chrome has no push notification for load status over WebDriver, so
`ChromeTabHost` runs one watcher task that polls `document.readyState` of the
tabs it cares about and emits `(tab_id, {"status": ...})` on every
transition. A tab that reaches "complete" on a Gemini URL gets its delivery
agent (created on first load) and that agent's page-load entry point runs
before listeners are notified.
"""

import time
import asyncio
import fnmatch
from typing import Callable, Dict, List, Optional, Set

from selenium.common.exceptions import WebDriverException

from ..constants import GEMINI_MATCH_PATTERN, TAB_WATCH_INTERVAL_SECS
from ..errors import TabHostError, TabUnreachableError
from ..models import Tab
from ..utils.retry import retry_op

import logging
logger = logging.getLogger(__name__)


TabListener = Callable[[str, dict], None]

# A document we navigated away from keeps reporting "complete" until the new
# one replaces it; the flag makes it read as "loading" in the meantime.
_STALE_FLAG = "__mcpYtGeminiStale"
_MARK_STALE_JS = f"window.{_STALE_FLAG} = true;"
_READY_STATE_JS = f"return window.{_STALE_FLAG} ? 'loading' : document.readyState;"


def url_matches(url: str, pattern: str) -> bool:
    return fnmatch.fnmatchcase(url or "", pattern)


class TabHost:
    """Base tab host: listener registry and message routing to delivery agents."""

    def __init__(self):
        self._listeners: List[TabListener] = []
        self._agents: Dict[str, object] = {}

    # -- load-status notifications ------------------------------------------

    def add_listener(self, listener: TabListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: TabListener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def listener_count(self) -> int:
        return len(self._listeners)

    def _emit(self, tab_id: str, change: dict) -> None:
        for listener in list(self._listeners):
            try:
                listener(tab_id, dict(change))
            except Exception as e:
                logger.warning(f"Tab listener failed for tab {tab_id}: {e}")

    # -- agents -------------------------------------------------------------

    def register_agent(self, tab_id: str, agent) -> None:
        self._agents[tab_id] = agent

    def unregister_agent(self, tab_id: str) -> None:
        self._agents.pop(tab_id, None)

    def get_agent(self, tab_id: str):
        return self._agents.get(tab_id)

    def agents(self) -> Dict[str, object]:
        return dict(self._agents)

    async def send_message(self, tab_id: str, message: dict):
        """Deliver `message` to the agent in `tab_id`; raises TabUnreachableError if none listens."""
        agent = self._agents.get(tab_id)
        if agent is None:
            raise TabUnreachableError(tab_id)
        return agent.handle_message(message)

    # -- tab lifecycle ------------------------------------------------------

    async def query(self, pattern: str) -> List[Tab]:
        raise NotImplementedError

    async def update(self, tab_id: str, *, active: Optional[bool] = None, url: Optional[str] = None) -> Tab:
        raise NotImplementedError

    async def create(self, url: str, *, active: bool = True) -> Tab:
        raise NotImplementedError

    async def get_active(self) -> Optional[Tab]:
        raise NotImplementedError

    async def get_page_source(self, tab_id: str) -> str:
        raise NotImplementedError


class ChromeTabHost(TabHost):
    """TabHost over a Selenium WebDriver attached to a debuggable Chrome."""

    def __init__(
        self,
        driver,
        agent_factory: Callable[[str], object],
        *,
        match_pattern: str = GEMINI_MATCH_PATTERN,
        watch_interval: float = TAB_WATCH_INTERVAL_SECS,
    ):
        super().__init__()
        self.driver = driver
        self.agent_factory = agent_factory
        self.match_pattern = match_pattern
        self.watch_interval = watch_interval
        self._status: Dict[str, str] = {}
        self._tracked: Set[str] = set()
        self._watch_task: Optional[asyncio.Task] = None

    # -- watcher ------------------------------------------------------------

    def start(self) -> None:
        if self._watch_task is None or self._watch_task.done():
            self._watch_task = asyncio.ensure_future(self._watch_loop())

    async def stop(self) -> None:
        task, self._watch_task = self._watch_task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _watch_loop(self) -> None:
        while True:
            try:
                self.poll_once()
            except WebDriverException as e:
                logger.debug(f"Tab watcher poll failed: {e}")
            except Exception as e:
                logger.warning(f"Tab watcher poll raised {type(e).__name__}: {e}")
            await asyncio.sleep(self.watch_interval)

    def poll_once(self) -> None:
        """Read the status of every watched tab and emit transitions."""
        present = {ti["targetId"]: ti for ti in self._page_targets()}

        for tab_id in list(self._status):
            if tab_id not in present:
                self._forget(tab_id)

        watched = {tid for tid, ti in present.items() if url_matches(ti.get("url", ""), self.match_pattern)}
        watched |= self._tracked & present.keys()

        for tab_id in sorted(watched):
            try:
                status = self._read_status(tab_id)
            except (WebDriverException, TabHostError) as e:
                logger.debug(f"Could not read status of tab {tab_id}: {e}")
                continue
            self._set_status(tab_id, status, present[tab_id].get("url", ""))

    def _set_status(self, tab_id: str, status: str, url: str = "") -> None:
        if self._status.get(tab_id) == status:
            return
        self._status[tab_id] = status
        if status == "complete" and url_matches(url, self.match_pattern):
            self._on_page_loaded(tab_id)
        self._emit(tab_id, {"status": status, "url": url})

    def _on_page_loaded(self, tab_id: str) -> None:
        agent = self.get_agent(tab_id)
        if agent is None:
            agent = self.agent_factory(tab_id)
            self.register_agent(tab_id, agent)
        agent.on_page_load()

    def _forget(self, tab_id: str) -> None:
        self._status.pop(tab_id, None)
        self._tracked.discard(tab_id)
        self.unregister_agent(tab_id)

    # -- selenium plumbing --------------------------------------------------

    def _page_targets(self) -> List[dict]:
        infos = self.driver.execute_cdp_cmd("Target.getTargets", {}) or {}
        return [ti for ti in (infos.get("targetInfos") or []) if ti.get("type") == "page"]

    def _handle_for_target(self, tab_id: str) -> Optional[str]:
        # chromedriver window handles end with the CDP targetId
        for _ in range(20):
            for h in self.driver.window_handles:
                if h == tab_id or h.endswith(tab_id):
                    return h
            time.sleep(0.05)
        return None

    def switch_to(self, tab_id: str) -> None:
        """Point the driver at `tab_id`. Raises TabUnreachableError if the tab is gone."""
        handle = self._handle_for_target(tab_id)
        if not handle:
            raise TabUnreachableError(tab_id)
        retry_op(lambda: self.driver.switch_to.window(handle))

    def _read_status(self, tab_id: str) -> str:
        self.switch_to(tab_id)
        state = self.driver.execute_script(_READY_STATE_JS)
        return "complete" if state == "complete" else "loading"

    def _tab_from_target(self, info: dict, **overrides) -> Tab:
        tab_id = info.get("targetId")
        fields = {
            "id": tab_id,
            "url": info.get("url", ""),
            "title": info.get("title", ""),
            "status": self._status.get(tab_id, "loading"),
        }
        fields.update(overrides)
        return Tab(**fields)

    # -- TabHost ------------------------------------------------------------

    async def query(self, pattern: str) -> List[Tab]:
        try:
            tabs = []
            for info in self._page_targets():
                if not url_matches(info.get("url", ""), pattern):
                    continue
                tab_id = info["targetId"]
                if tab_id not in self._status:
                    self._set_status(tab_id, self._read_status(tab_id), info.get("url", ""))
                tabs.append(self._tab_from_target(info))
            return tabs
        except WebDriverException as e:
            raise TabHostError(f"Failed to query tabs: {e}") from e

    async def update(self, tab_id: str, *, active: Optional[bool] = None, url: Optional[str] = None) -> Tab:
        try:
            self.switch_to(tab_id)
            if url:
                self.driver.execute_script(_MARK_STALE_JS)
                self.driver.execute_cdp_cmd("Page.navigate", {"url": url})
                self._tracked.add(tab_id)
                self._set_status(tab_id, "loading", url)
            if active:
                self.driver.execute_cdp_cmd("Target.activateTarget", {"targetId": tab_id})
            current_url = url or self.driver.current_url
        except WebDriverException as e:
            raise TabHostError(f"Failed to update tab {tab_id}: {e}") from e
        return Tab(id=tab_id, url=current_url, status=self._status.get(tab_id, "loading"), active=bool(active))

    async def create(self, url: str, *, active: bool = True) -> Tab:
        try:
            result = self.driver.execute_cdp_cmd("Target.createTarget", {"url": url, "background": not active}) or {}
        except WebDriverException as e:
            raise TabHostError(f"Failed to create tab for {url}: {e}") from e
        tab_id = result.get("targetId")
        if not tab_id:
            raise TabHostError(f"Target.createTarget returned {result!r}")
        self._tracked.add(tab_id)
        self._set_status(tab_id, "loading", url)
        return Tab(id=tab_id, url=url, status="loading", active=active)

    async def get_active(self) -> Optional[Tab]:
        """The page tab whose document is visible, if any."""
        try:
            targets = self._page_targets()
            previous_handle = self.driver.current_window_handle if self.driver.window_handles else None
            try:
                for info in targets:
                    try:
                        self.switch_to(info["targetId"])
                        visible = self.driver.execute_script("return document.visibilityState") == "visible"
                    except (WebDriverException, TabHostError):
                        continue
                    if visible:
                        return self._tab_from_target(info, active=True, title=self.driver.title or info.get("title", ""))
            finally:
                if previous_handle and previous_handle in self.driver.window_handles:
                    self.driver.switch_to.window(previous_handle)
        except WebDriverException as e:
            raise TabHostError(f"Failed to find the active tab: {e}") from e
        return None

    async def get_page_source(self, tab_id: str) -> str:
        try:
            self.switch_to(tab_id)
            return self.driver.page_source or ""
        except WebDriverException as e:
            raise TabHostError(f"Failed to read page source of tab {tab_id}: {e}") from e


__all__ = [
    "TabListener",
    "TabHost",
    "ChromeTabHost",
    "url_matches",
]
