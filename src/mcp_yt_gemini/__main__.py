#region Overview
"""
## What this server does

Relays a YouTube video to Gemini. A trigger (a video URL, optionally with its
title and channel) is stored as the single pending prompt request; the Gemini
tab in the attached Chrome is opened or reused and navigated to the Gemini
app; once it has loaded, the delivery agent for that tab renders the prompt
template, fills the composer and, when auto-send is on, clicks send.

Only the most recent trigger is ever delivered. A pending request stays in the
store until it was sent, so `redeliver_pending` can retry it later.

## Browser

The server attaches to (or launches) a debuggable Chrome using
CHROME_PROFILE_USER_DATA_DIR. Use a dedicated profile in which you are logged
in to Gemini. Settings tools work without a browser.
"""
#endregion

#region Tools
"""
```
open_gemini
```
> Trigger a delivery for a video URL with the given title and channel.

```
summarize_link
```
> Trigger a delivery for a bare YouTube video link.

```
summarize_active_tab
```
> Trigger a delivery for the YouTube video open in the active tab.

```
redeliver_pending
```
> Signal the stored pending request to an open Gemini tab again.

```
get_settings / update_settings / reset_settings
```
> Read, change or reset language, autoSend, sendDelayMs, promptTemplate.

```
get_pending
```
> Show the pending prompt request, if any.

```
get_debug_info
```
> Chrome, driver, store, correlation and agent state.
"""
#endregion

#region Imports
import sys
import logging
from typing import Optional
from dotenv import load_dotenv
from mcp.server.fastmcp import FastMCP
#endregion

#region Import from your package __init__.py
import mcp_yt_gemini as MYG
from mcp_yt_gemini.decorators import tool_envelope, ensure_relay_ready
from mcp_yt_gemini.tools import relay, settings, debugging
#endregion

#region Logger
logger = logging.getLogger(__name__)
#endregion

#region Logging
load_dotenv()
# stdout carries the MCP stdio protocol
logging.basicConfig(
    level=logging.INFO,
    stream=sys.stderr,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger.info(f"mcp_yt_gemini from: {getattr(MYG, '__file__', '<namespace>')}")
#endregion

#region FastMCP Initialization
mcp = FastMCP("mcp_yt_gemini")
#endregion

#region Tools -- Triggers
@mcp.tool()
@tool_envelope
@ensure_relay_ready
async def mcp_yt_gemini__open_gemini(url: str, title: str = "", channel: str = "") -> str:
    """
    Send a YouTube video to Gemini for summarization.

    Args:
        url: YouTube watch or shorts URL (https://www.youtube.com/watch?v=... or /shorts/...)
        title: Video title used in the prompt
        channel: Channel name used in the prompt

    Returns:
        JSON with `accepted` (False for a non-YouTube URL or when the Gemini
        tab could not be opened) and the stored pending request.
    """
    return await relay.open_gemini(url, title, channel)

@mcp.tool()
@tool_envelope
@ensure_relay_ready
async def mcp_yt_gemini__summarize_link(url: str) -> str:
    """
    Send a bare YouTube video link to Gemini (title and channel left empty).
    """
    return await relay.summarize_link(url)

@mcp.tool()
@tool_envelope
@ensure_relay_ready
async def mcp_yt_gemini__summarize_active_tab() -> str:
    """
    Send the video open in the browser's active tab to Gemini.

    Title and channel are read from the watch page when available.
    """
    return await relay.summarize_active_tab()

@mcp.tool()
@tool_envelope
@ensure_relay_ready
async def mcp_yt_gemini__redeliver_pending() -> str:
    """
    Deliver the stored pending request to an already open Gemini tab.

    Use after a delivery was not completed (composer not found, send button
    not ready, auto-send off).
    """
    return await relay.redeliver_pending()
#endregion

#region Tools -- Settings
@mcp.tool()
@tool_envelope
async def mcp_yt_gemini__get_settings() -> str:
    return await settings.read_settings()

@mcp.tool()
@tool_envelope
async def mcp_yt_gemini__update_settings(
    language: Optional[str] = None,
    auto_send: Optional[bool] = None,
    send_delay_ms: Optional[int] = None,
    prompt_template: Optional[str] = None,
    show_button_on_hover_only: Optional[bool] = None,
) -> str:
    """
    Change settings; omitted arguments keep their value.

    Args:
        language: One of en, tr, de, es, fr. Switching language also switches an
            unmodified default prompt template.
        auto_send: Click send after filling the composer.
        send_delay_ms: Delay before clicking send, clamped to 0..2000.
        prompt_template: Template with {url}, {title} and {channel} placeholders.
        show_button_on_hover_only: Stored for trigger surfaces that show a button.
    """
    return await settings.update_settings(
        language=language,
        auto_send=auto_send,
        send_delay_ms=send_delay_ms,
        prompt_template=prompt_template,
        show_button_on_hover_only=show_button_on_hover_only,
    )

@mcp.tool()
@tool_envelope
async def mcp_yt_gemini__reset_settings() -> str:
    return await settings.restore_default_settings()

@mcp.tool()
@tool_envelope
async def mcp_yt_gemini__get_pending() -> str:
    return await relay.get_pending_request()
#endregion

#region Tools -- Debugging
@mcp.tool()
@tool_envelope
async def mcp_yt_gemini__get_debug_info() -> str:
    """
    Return Chrome/driver/Selenium versions, the store path, the current
    correlation id and the state of every delivery agent.
    """
    return await debugging.get_debug_info()
#endregion


def main():
    mcp.run()


if __name__ == "__main__":
    main()
