"""Selenium-backed browser access: Chrome attach/launch, tabs and the Gemini page."""

from .tabs import TabHost, ChromeTabHost, url_matches
from .page import PageSurface, SeleniumPage
from .extraction import extract_video_metadata

__all__ = [
    "TabHost",
    "ChromeTabHost",
    "url_matches",
    "PageSurface",
    "SeleniumPage",
    "extract_video_metadata",
]
