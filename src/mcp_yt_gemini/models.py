"""
Data shapes shared by the correlator, the delivery agents and the tab host.

Persisted shapes keep the camelCase keys of the stored JSON so that an
existing store file stays readable.
"""

import math
import time
import uuid
from dataclasses import dataclass, field
from typing import Optional

from .constants import MSG_DELIVER_PROMPT, MSG_OPEN_GEMINI


def new_request_id() -> str:
    """Mint a fresh correlation id."""
    return str(uuid.uuid4())


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class PendingRequest:
    """The single outstanding request waiting to be delivered to Gemini."""

    id: str
    url: str = ""
    title: str = ""
    channel: str = ""
    created_at: int = field(default_factory=_now_ms)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "url": self.url,
            "title": self.title,
            "channel": self.channel,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data) -> Optional["PendingRequest"]:
        """Build from stored JSON; returns None for anything that is not a request."""
        if not isinstance(data, dict):
            return None
        created_at = data.get("createdAt")
        return cls(
            id=str(data.get("id") or ""),
            url=str(data.get("url") or ""),
            title=str(data.get("title") or ""),
            channel=str(data.get("channel") or ""),
            created_at=int(created_at) if isinstance(created_at, (int, float)) and math.isfinite(created_at) else 0,
        )


@dataclass
class Tab:
    """Snapshot of a browser tab as reported by the tab host."""

    id: str
    url: str = ""
    title: str = ""
    status: str = "loading"  # "loading" or "complete"
    active: bool = False

    def is_complete(self) -> bool:
        return self.status == "complete"


@dataclass
class DeliveryOptions:
    """Options of one scheduled delivery run."""

    expected_id: Optional[str] = None
    only_if_auto_send: bool = False


def open_gemini_message(url: str, title: str = "", channel: str = "") -> dict:
    return {"type": MSG_OPEN_GEMINI, "payload": {"url": url, "title": title, "channel": channel}}


def deliver_prompt_message(request_id: str) -> dict:
    return {"type": MSG_DELIVER_PROMPT, "payload": {"id": request_id}}


__all__ = [
    "new_request_id",
    "PendingRequest",
    "Tab",
    "DeliveryOptions",
    "open_gemini_message",
    "deliver_prompt_message",
]
