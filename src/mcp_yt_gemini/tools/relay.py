"""Trigger and delivery tool implementations."""

import json

from ..context import get_context
from ..models import open_gemini_message
from ..storage.settings import get_pending


def _pending_payload(store):
    pending = get_pending(store)
    return pending.to_dict() if pending is not None else None


async def open_gemini(url: str, title: str = "", channel: str = "") -> str:
    """Send an OPEN_GEMINI trigger for a video through the correlator."""
    ctx = get_context()
    ack = await ctx.correlator.handle_message(open_gemini_message(url, title, channel))
    ack = ack or {"ok": False}
    return json.dumps({
        "ok": bool(ack.get("ok")),
        "accepted": bool(ack.get("accepted")),
        "pending": _pending_payload(ctx.get_store()),
    })


async def summarize_link(url: str) -> str:
    ctx = get_context()
    accepted = await ctx.correlator.trigger_link(url)
    return json.dumps({
        "ok": True,
        "accepted": accepted,
        "pending": _pending_payload(ctx.get_store()),
    })


async def summarize_active_tab() -> str:
    ctx = get_context()
    accepted = await ctx.correlator.trigger_active_tab()
    payload = {"ok": True, "accepted": accepted, "pending": _pending_payload(ctx.get_store())}
    if not accepted:
        payload["message"] = "The active tab is not a YouTube video."
    return json.dumps(payload)


async def redeliver_pending() -> str:
    ctx = get_context()
    delivered = await ctx.correlator.redeliver()
    return json.dumps({
        "ok": True,
        "signaled": delivered,
        "pending": _pending_payload(ctx.get_store()),
    })


async def get_pending_request() -> str:
    ctx = get_context()
    return json.dumps({"ok": True, "pending": _pending_payload(ctx.get_store())})
