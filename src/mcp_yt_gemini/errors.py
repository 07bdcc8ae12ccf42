"""Exceptions raised by the tab host and its Selenium adapters."""


class RelayError(Exception):
    """Base class for mcp_yt_gemini errors."""


class TabHostError(RelayError):
    """A tab lifecycle operation (query, update, create) failed."""


class TabUnreachableError(TabHostError):
    """A message could not be delivered because no agent listens in the tab."""

    def __init__(self, tab_id: str):
        super().__init__(f"Could not establish connection to tab {tab_id}: receiving end does not exist.")
        self.tab_id = tab_id


__all__ = [
    "RelayError",
    "TabHostError",
    "TabUnreachableError",
]
