# mcp_yt_gemini/decorators/ensure.py
import json
import inspect
import functools

import logging
logger = logging.getLogger(__name__)


def _not_ready_payload(err: Exception) -> str:
    if isinstance(err, EnvironmentError):
        return json.dumps({
            "ok": False,
            "error": "invalid_configuration",
            "message": f"Browser configuration error: {err}. Please check your environment variables.",
            "details": {
                "required": ["CHROME_PROFILE_USER_DATA_DIR"],
                "optional": ["CHROME_PROFILE_NAME", "CHROME_EXECUTABLE_PATH", "CHROME_REMOTE_DEBUG_PORT"],
            },
        })
    return json.dumps({
        "ok": False,
        "error": "browser_not_attached",
        "message": f"Could not attach to a debuggable Chrome session: {err}",
    })


def ensure_relay_ready(fn):
    """
    Attach Chrome and start the relay before running a browser-facing tool.

    Configuration and attach failures are returned as a JSON payload instead
    of running the tool.
    """
    if not inspect.iscoroutinefunction(fn):
        raise TypeError("ensure_relay_ready only wraps coroutine functions")

    @functools.wraps(fn)
    async def wrapper(*args, **kwargs):
        from ..context import ensure_relay

        try:
            await ensure_relay()
        except Exception as e:
            logger.warning(f"Relay not ready: {e}")
            return _not_ready_payload(e)
        return await fn(*args, **kwargs)
    return wrapper
