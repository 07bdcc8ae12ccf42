"""
Delivery agent: the destination side of a delivery, one per Gemini tab.

A delivery runs through FETCHING -> LOCATING_INPUT -> INJECTING and then
either stops in SUBMIT_DISABLED (fill-only) or goes on to ATTEMPTING_SUBMIT.
Deliveries never overlap: a request that arrives while one runs is queued
(only the newest is kept) and runs right after. The pending request is
cleared only after the send button was clicked; every other outcome leaves
it in the store for a later attempt.
"""

import asyncio
from enum import Enum
from typing import Optional

from .browser.page import PageSurface
from .constants import (
    EDITOR_POLL_ATTEMPTS,
    EDITOR_POLL_INTERVAL_SECS,
    MSG_DELIVER_PROMPT,
    SEND_RETRIES,
    SEND_RETRY_INTERVAL_SECS,
)
from .models import DeliveryOptions
from .storage.settings import clear_pending, get_pending, get_settings
from .storage.store import SettingsStore
from .template import build_prompt_blocks, render_template

import logging
logger = logging.getLogger(__name__)


class DeliveryState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    LOCATING_INPUT = "locating_input"
    INJECTING = "injecting"
    SUBMIT_DISABLED = "submit_disabled"
    ATTEMPTING_SUBMIT = "attempting_submit"
    DONE = "done"


class DeliveryOutcome(str, Enum):
    AUTO_SEND_OFF = "auto_send_off"      # page-load delivery skipped
    NO_PENDING = "no_pending"
    STALE = "stale"
    EDITOR_NOT_FOUND = "editor_not_found"
    FILLED = "filled"                    # fill-only mode
    SENT = "sent"
    SEND_NOT_READY = "send_not_ready"
    FAILED = "failed"


class DeliveryAgent:
    def __init__(
        self,
        page: PageSurface,
        store: SettingsStore,
        *,
        editor_attempts: int = EDITOR_POLL_ATTEMPTS,
        poll_interval: float = EDITOR_POLL_INTERVAL_SECS,
        send_retries: int = SEND_RETRIES,
        send_retry_interval: float = SEND_RETRY_INTERVAL_SECS,
    ):
        self.page = page
        self.store = store
        self.editor_attempts = editor_attempts
        self.poll_interval = poll_interval
        self.send_retries = send_retries
        self.send_retry_interval = send_retry_interval

        self.state = DeliveryState.IDLE
        self.last_outcome: Optional[DeliveryOutcome] = None
        self._delivering = False
        self._queued: Optional[DeliveryOptions] = None
        self._task: Optional[asyncio.Task] = None

    # -- entry points -----------------------------------------------------------

    def handle_message(self, message) -> None:
        if not isinstance(message, dict) or message.get("type") != MSG_DELIVER_PROMPT:
            return None
        payload = message.get("payload") or {}
        self.schedule_delivery(DeliveryOptions(expected_id=payload.get("id"), only_if_auto_send=False))
        return None

    def on_page_load(self) -> Optional[asyncio.Task]:
        return self.schedule_delivery(DeliveryOptions(expected_id=None, only_if_auto_send=True))

    # -- serialization ------------------------------------------------------------

    @property
    def is_delivering(self) -> bool:
        return self._delivering

    def schedule_delivery(self, options: DeliveryOptions) -> Optional[asyncio.Task]:
        """
        Run a delivery now, or queue it behind the running one.

        Returns the task that drains the queue; awaiting it waits for every
        delivery scheduled so far.
        """
        if self._delivering:
            self._queued = options
            return self._task
        self._delivering = True
        self._task = asyncio.ensure_future(self._drain(options))
        return self._task

    async def wait_idle(self) -> None:
        if self._task is not None:
            await self._task

    async def _drain(self, options: DeliveryOptions) -> None:
        try:
            while options is not None:
                await self.run_delivery(options)
                options, self._queued = self._queued, None
        finally:
            self._delivering = False

    # -- one delivery ---------------------------------------------------------------

    async def run_delivery(self, options: DeliveryOptions) -> DeliveryOutcome:
        try:
            outcome = await self._run(options)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning(f"Failed to deliver Gemini prompt: {e}")
            outcome = DeliveryOutcome.FAILED
        self.state = DeliveryState.DONE
        self.last_outcome = outcome
        return outcome

    async def _run(self, options: DeliveryOptions) -> DeliveryOutcome:
        self.state = DeliveryState.FETCHING
        settings = get_settings(self.store)
        if options.only_if_auto_send and not settings.autoSend:
            return DeliveryOutcome.AUTO_SEND_OFF

        pending = get_pending(self.store)
        if pending is None:
            logger.info("No pending prompt found for Gemini.")
            return DeliveryOutcome.NO_PENDING

        if options.expected_id and pending.id and options.expected_id != pending.id:
            logger.info("Pending prompt ID mismatch; ignoring delivery.")
            return DeliveryOutcome.STALE

        self.state = DeliveryState.LOCATING_INPUT
        editor = await self.wait_for_editor()
        if editor is None:
            logger.warning("Gemini editor not found; pending prompt retained.")
            return DeliveryOutcome.EDITOR_NOT_FOUND

        self.state = DeliveryState.INJECTING
        prompt = render_template(settings.promptTemplate, pending)
        await self.page.write_blocks(editor, build_prompt_blocks(prompt))

        if not settings.autoSend:
            self.state = DeliveryState.SUBMIT_DISABLED
            logger.info("Auto-send disabled; prompt filled only.")
            return DeliveryOutcome.FILLED

        self.state = DeliveryState.ATTEMPTING_SUBMIT
        if await self.attempt_send(settings.sendDelayMs):
            clear_pending(self.store)
            return DeliveryOutcome.SENT

        logger.warning("Gemini send button not ready; pending prompt retained.")
        return DeliveryOutcome.SEND_NOT_READY

    async def wait_for_editor(self):
        for attempt in range(self.editor_attempts):
            editor = await self.page.find_editor()
            if editor is not None:
                return editor
            if attempt < self.editor_attempts - 1:
                await asyncio.sleep(self.poll_interval)
        return None

    async def attempt_send(self, send_delay_ms: int) -> bool:
        """Wait `send_delay_ms`, then click the send button once it is enabled."""
        await asyncio.sleep(max(send_delay_ms, 0) / 1000.0)
        remaining = self.send_retries
        while True:
            try:
                button = await self.page.find_send_button()
                if button is not None and await self.page.is_enabled(button):
                    await self.page.click(button)
                    return True
            except Exception as e:
                logger.warning(f"Failed to click Gemini send button: {e}")
                return False
            if remaining <= 0:
                return False
            remaining -= 1
            await asyncio.sleep(self.send_retry_interval)


__all__ = [
    "DeliveryState",
    "DeliveryOutcome",
    "DeliveryAgent",
]
