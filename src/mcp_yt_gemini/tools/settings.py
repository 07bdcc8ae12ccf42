"""Settings tool implementations. These work without an attached browser."""

import json
from typing import Any, Dict, Optional

from ..context import get_context
from ..storage.settings import get_settings, reset_settings, set_settings


async def read_settings() -> str:
    ctx = get_context()
    return json.dumps({"ok": True, "settings": get_settings(ctx.get_store()).to_dict()}, ensure_ascii=False)


async def update_settings(
    language: Optional[str] = None,
    auto_send: Optional[bool] = None,
    send_delay_ms: Optional[int] = None,
    prompt_template: Optional[str] = None,
    show_button_on_hover_only: Optional[bool] = None,
) -> str:
    partial: Dict[str, Any] = {}
    if language is not None:
        partial["language"] = language
    if auto_send is not None:
        partial["autoSend"] = auto_send
    if send_delay_ms is not None:
        partial["sendDelayMs"] = send_delay_ms
    if prompt_template is not None:
        partial["promptTemplate"] = prompt_template
    if show_button_on_hover_only is not None:
        partial["showButtonOnHoverOnly"] = show_button_on_hover_only

    ctx = get_context()
    settings = set_settings(ctx.get_store(), partial)
    return json.dumps({"ok": True, "settings": settings.to_dict()}, ensure_ascii=False)


async def restore_default_settings() -> str:
    ctx = get_context()
    return json.dumps({"ok": True, "settings": reset_settings(ctx.get_store()).to_dict()}, ensure_ascii=False)
