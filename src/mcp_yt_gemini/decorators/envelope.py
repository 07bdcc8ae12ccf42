"""Uniform string results for MCP tools."""

import os
import json
import asyncio
import inspect
import datetime
import functools
import traceback
from enum import Enum
from typing import Any, Callable, Optional

from ..errors import TabUnreachableError


TRACEBACK_ENV = "MCP_YT_GEMINI_TOOL_ERRORS_TRACEBACK"


def _json_default(o: Any):
    if isinstance(o, Enum):
        return o.value
    if callable(getattr(o, "to_dict", None)):
        return o.to_dict()
    return getattr(o, "__dict__", repr(o))


def _as_text(value: Any) -> str:
    """None -> "", bytes decoded, str as-is, everything else JSON."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bytes):
        return value.decode("utf-8", "replace")
    try:
        return json.dumps(value, ensure_ascii=False, default=_json_default)
    except (TypeError, ValueError):
        return str(value)


def _tracebacks_enabled() -> bool:
    return os.getenv(TRACEBACK_ENV, "1") not in ("0", "false", "False")


def _failure(err: Exception, tb: Optional[str]) -> str:
    name = type(err).__name__
    error = {"type": name, "message": str(err)}
    if isinstance(err, TabUnreachableError):
        error["tab_id"] = err.tab_id
    if tb:
        error["traceback"] = tb
    return json.dumps({
        "ok": False,
        "summary": f"{name}: {err}",
        "error": error,
        "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat(),
    }, ensure_ascii=False)


def tool_envelope(func: Callable):
    """
    Wrap a tool (sync or async) so it always returns a string.

    Results go through `_as_text`; an exception becomes an `ok: false` JSON
    payload instead of propagating. Cancellation is never swallowed. Set
    MCP_YT_GEMINI_TOOL_ERRORS_TRACEBACK=0 to leave tracebacks out of payloads.
    """
    with_tb = _tracebacks_enabled()

    if inspect.iscoroutinefunction(func):
        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            try:
                return _as_text(await func(*args, **kwargs))
            except asyncio.CancelledError:
                raise
            except Exception as e:
                return _failure(e, traceback.format_exc() if with_tb else None)
        return async_wrapper

    @functools.wraps(func)
    def sync_wrapper(*args, **kwargs):
        try:
            return _as_text(func(*args, **kwargs))
        except Exception as e:
            return _failure(e, traceback.format_exc() if with_tb else None)
    return sync_wrapper


__all__ = ["tool_envelope"]
