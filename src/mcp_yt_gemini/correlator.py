"""
Request correlator: the orchestrating side of a delivery.

Each accepted trigger mints a correlation id that supersedes any earlier one,
persists the single pending request, finds or creates the Gemini tab and
either signals it right away (already loaded) or arms a readiness wait. Only
the most recent trigger is ever delivered: stale ids are dropped here before
signaling and again by the delivery agent when it fetches the pending request.

Everything runs on one asyncio event loop. The supersede step (new id plus
disarming the old wait) happens before the first await of `trigger`, so no
other coroutine can observe a half-replaced state.
"""

import asyncio
from dataclasses import dataclass
from typing import Callable, Optional, Set
from urllib.parse import urlsplit

from .browser.extraction import extract_video_metadata
from .browser.tabs import TabHost, TabListener
from .constants import (
    GEMINI_APP_URL,
    GEMINI_MATCH_PATTERN,
    MSG_OPEN_GEMINI,
    REQUEST_TIMEOUT_SECS,
    YOUTUBE_HOST,
    YOUTUBE_VIDEO_PATHS,
)
from .models import PendingRequest, Tab, deliver_prompt_message, new_request_id
from .storage.settings import get_pending, set_pending
from .storage.store import SettingsStore

import logging
logger = logging.getLogger(__name__)


def is_youtube_url(raw_url) -> bool:
    """True for http(s) www.youtube.com watch and shorts URLs."""
    if not raw_url or not isinstance(raw_url, str):
        return False
    try:
        parsed = urlsplit(raw_url.strip())
    except ValueError as e:
        logger.warning(f"Invalid URL provided: {e}")
        return False
    if parsed.scheme not in ("http", "https") or parsed.hostname != YOUTUBE_HOST:
        return False
    return parsed.path.startswith(YOUTUBE_VIDEO_PATHS)


@dataclass
class ReadinessWait:
    """A pending wait for one tab's load-complete notification."""

    tabs: TabHost
    tab_id: str
    request_id: str
    listener: TabListener
    timeout: float
    on_timeout: Callable[[], None]
    timer: Optional[asyncio.TimerHandle] = None

    def start(self) -> None:
        self.tabs.add_listener(self.listener)
        self.timer = asyncio.get_running_loop().call_later(self.timeout, self.on_timeout)

    def cancel(self) -> None:
        self.tabs.remove_listener(self.listener)
        if self.timer is not None:
            self.timer.cancel()
            self.timer = None


class CorrelationState:
    """
    Current correlation id and the (at most one) active readiness wait.

    `supersede`, `arm` and `disarm` are the only mutators.
    """

    def __init__(self):
        self.current_request_id: Optional[str] = None
        self.active_wait: Optional[ReadinessWait] = None

    def is_current(self, request_id: str) -> bool:
        return request_id is not None and request_id == self.current_request_id

    def supersede(self, request_id: str) -> None:
        self.current_request_id = request_id
        self.disarm()

    def arm(self, wait: ReadinessWait) -> None:
        self.disarm()
        wait.start()
        self.active_wait = wait

    def disarm(self) -> None:
        wait, self.active_wait = self.active_wait, None
        if wait is not None:
            wait.cancel()


class RequestCorrelator:
    def __init__(self, store: SettingsStore, tabs: TabHost, *, ready_timeout: float = REQUEST_TIMEOUT_SECS):
        self.store = store
        self.tabs = tabs
        self.ready_timeout = ready_timeout
        self.state = CorrelationState()
        self._deliveries: Set[asyncio.Task] = set()

    # -- signal entry point ---------------------------------------------------

    async def handle_message(self, message) -> Optional[dict]:
        """Handle an OPEN_GEMINI signal and acknowledge it; other messages are ignored."""
        if not isinstance(message, dict) or message.get("type") != MSG_OPEN_GEMINI:
            return None
        try:
            accepted = await self.trigger(message.get("payload") or {})
        except Exception as e:
            logger.warning(f"Failed to handle {MSG_OPEN_GEMINI} message: {e}")
            return {"ok": False}
        return {"ok": True, "accepted": accepted}

    # -- operations -------------------------------------------------------------

    async def trigger(self, payload) -> bool:
        """
        Start delivery of `payload` ({url, title, channel}) to Gemini.

        Returns False when the trigger is rejected (invalid URL) or the Gemini
        tab could not be opened; True once the delivery signal was sent or a
        readiness wait was armed.
        """
        payload = payload if isinstance(payload, dict) else {}
        url = (payload.get("url") or "").strip()
        if not is_youtube_url(url):
            logger.warning(f"Rejected trigger with invalid video URL: {url!r}")
            return False

        request_id = new_request_id()
        self.state.supersede(request_id)

        pending = PendingRequest(
            id=request_id,
            url=url,
            title=payload.get("title") or "",
            channel=payload.get("channel") or "",
        )
        if not set_pending(self.store, pending):
            logger.warning("Failed to persist pending prompt; continuing with in-memory correlation.")

        try:
            tab = await self._get_or_create_gemini_tab()
        except Exception as e:
            logger.warning(f"Failed to open Gemini tab: {e}")
            return False

        if tab is None or not tab.id:
            logger.warning("Gemini tab was not created.")
            return False

        if not self.state.is_current(request_id):
            logger.debug(f"Request {request_id} superseded while opening the Gemini tab.")
            return True

        if tab.is_complete():
            await self._deliver(tab.id, request_id)
        else:
            self._wait_for_tab_complete(tab.id, request_id)
        return True

    async def trigger_link(self, url: str) -> bool:
        """Trigger for a bare video link (no title or channel known)."""
        if not is_youtube_url(url):
            return False
        return await self.trigger({"url": url, "title": "", "channel": ""})

    async def trigger_active_tab(self) -> bool:
        """Trigger for the video open in the active tab, if it is a YouTube video."""
        try:
            tab = await self.tabs.get_active()
        except Exception as e:
            logger.warning(f"Failed to read the active tab: {e}")
            return False
        if tab is None or not is_youtube_url(tab.url):
            return False

        meta = {"title": "", "channel": ""}
        try:
            meta = extract_video_metadata(await self.tabs.get_page_source(tab.id))
        except Exception as e:
            logger.debug(f"Could not extract video metadata from tab {tab.id}: {e}")

        return await self.trigger({
            "url": tab.url,
            "title": meta["title"] or tab.title or "",
            "channel": meta["channel"],
        })

    async def redeliver(self) -> bool:
        """Signal the stored pending request to an open Gemini tab again."""
        pending = get_pending(self.store)
        if pending is None or not pending.id:
            logger.info("No pending prompt to redeliver.")
            return False
        try:
            tabs = await self.tabs.query(GEMINI_MATCH_PATTERN)
        except Exception as e:
            logger.warning(f"Failed to query Gemini tabs: {e}")
            return False
        tab = next((t for t in tabs if t and t.id), None)
        if tab is None:
            logger.info("No Gemini tab open; nothing to redeliver to.")
            return False

        self.state.supersede(pending.id)
        await self._deliver(tab.id, pending.id)
        return True

    # -- internals ------------------------------------------------------------

    async def _get_or_create_gemini_tab(self) -> Optional[Tab]:
        tabs = await self.tabs.query(GEMINI_MATCH_PATTERN)
        existing = next((t for t in tabs if t and t.id), None)
        if existing is not None:
            updated = await self.tabs.update(existing.id, active=True, url=GEMINI_APP_URL)
            return updated or existing
        return await self.tabs.create(GEMINI_APP_URL, active=True)

    async def _deliver(self, tab_id: str, request_id: str) -> None:
        if not self.state.is_current(request_id):
            logger.debug(f"Dropping delivery of superseded request {request_id}.")
            return
        try:
            await self.tabs.send_message(tab_id, deliver_prompt_message(request_id))
        except Exception as e:
            logger.warning(f"Failed to deliver prompt to Gemini tab {tab_id}: {e}")

    def _wait_for_tab_complete(self, tab_id: str, request_id: str) -> None:
        wait = None

        def listener(updated_tab_id: str, change: dict) -> None:
            if updated_tab_id != tab_id or change.get("status") != "complete":
                return
            if self.state.active_wait is not wait:
                return
            self.state.disarm()
            task = asyncio.ensure_future(self._deliver(tab_id, request_id))
            self._deliveries.add(task)
            task.add_done_callback(self._deliveries.discard)

        def on_timeout() -> None:
            if self.state.active_wait is not wait:
                return
            if self.state.is_current(request_id):
                logger.warning(
                    f"Gemini tab did not finish loading within {self.ready_timeout:g}s; pending prompt retained."
                )
            self.state.disarm()

        wait = ReadinessWait(
            tabs=self.tabs,
            tab_id=tab_id,
            request_id=request_id,
            listener=listener,
            timeout=self.ready_timeout,
            on_timeout=on_timeout,
        )
        self.state.arm(wait)


__all__ = [
    "is_youtube_url",
    "ReadinessWait",
    "CorrelationState",
    "RequestCorrelator",
]
