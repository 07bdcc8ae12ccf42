"""
Relay a YouTube video to Gemini as a filled (and optionally sent) prompt.

The request correlator accepts triggers and signals the Gemini tab; the
delivery agent in that tab writes the prompt. Both share one store holding
the settings and the single pending request.
"""

from .agent import DeliveryAgent, DeliveryOutcome, DeliveryState
from .correlator import RequestCorrelator, is_youtube_url
from .errors import RelayError, TabHostError, TabUnreachableError
from .models import PendingRequest, Tab
from .storage import SettingsStore, Settings
from .template import render_template, build_prompt_blocks

__all__ = [
    "DeliveryAgent",
    "DeliveryOutcome",
    "DeliveryState",
    "RequestCorrelator",
    "is_youtube_url",
    "RelayError",
    "TabHostError",
    "TabUnreachableError",
    "PendingRequest",
    "Tab",
    "SettingsStore",
    "Settings",
    "render_template",
    "build_prompt_blocks",
]
