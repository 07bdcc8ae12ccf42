"""
Global constants and configuration defaults.
No dependencies - safe to import from anywhere.
"""

import os

# ============================================================================
# Destination (Gemini)
# ============================================================================

GEMINI_APP_URL = "https://gemini.google.com/app"
"""Canonical URL the destination tab is navigated to on every trigger."""

GEMINI_MATCH_PATTERN = "https://gemini.google.com/*"
"""Tab URL pattern identifying an existing destination tab."""

EDITOR_SELECTOR = '.ql-editor.textarea.new-input-ui[contenteditable="true"]'
"""CSS selector of the Gemini composer (input surface)."""

SEND_BUTTON_SELECTOR = "button.send-button.submit"
"""CSS selector of the Gemini send button (submit control)."""


# ============================================================================
# Source (YouTube)
# ============================================================================

YOUTUBE_HOST = "www.youtube.com"
YOUTUBE_VIDEO_PATHS = ("/watch", "/shorts")


# ============================================================================
# Signals
# ============================================================================

MSG_OPEN_GEMINI = "OPEN_GEMINI"
"""Trigger signal sent by the trigger surface to the request correlator."""

MSG_DELIVER_PROMPT = "DELIVER_PROMPT"
"""Delivery signal sent by the request correlator to a delivery agent."""


# ============================================================================
# Storage Keys
# ============================================================================

SETTINGS_KEY = "settings"
PENDING_KEY = "pendingPrompt"


# ============================================================================
# Timing
# ============================================================================

REQUEST_TIMEOUT_SECS = float(os.getenv("MCP_YT_GEMINI_READY_TIMEOUT", "15"))
"""How long the correlator waits for the destination tab to finish loading."""

TAB_WATCH_INTERVAL_SECS = float(os.getenv("MCP_YT_GEMINI_WATCH_INTERVAL", "0.25"))
"""Poll interval of the tab load-status watcher."""

EDITOR_POLL_ATTEMPTS = 5
EDITOR_POLL_INTERVAL_SECS = 0.3

SEND_RETRIES = 2
SEND_RETRY_INTERVAL_SECS = 0.3

SEND_DELAY_MIN_MS = 0
SEND_DELAY_MAX_MS = 2000


# ============================================================================
# Settings Defaults
# ============================================================================

SUPPORTED_LANGUAGES = ("en", "tr", "de", "es", "fr")
FALLBACK_LANGUAGE = "en"

DEFAULT_PROMPT_TEMPLATES = {
    "en": (
        "Summarize this YouTube video in English.\n"
        "Title: {title}\n"
        "Channel: {channel}\n"
        "URL: {url}\n"
        "\n"
        "Format:\n"
        "- 8-12 bullet summary\n"
        "- 3 key takeaways\n"
        "- If it is a tutorial: step-by-step actions"
    ),
    "tr": (
        "Bu YouTube videosunu Türkçe özetle.\n"
        "Başlık: {title}\n"
        "Kanal: {channel}\n"
        "URL: {url}\n"
        "\n"
        "Format:\n"
        "- 8-12 madde özet\n"
        "- 3 ana çıkarım\n"
        "- Eğer öğreticiyse: adım adım yapılacaklar"
    ),
    "de": (
        "Fasse dieses YouTube-Video auf Deutsch zusammen.\n"
        "Titel: {title}\n"
        "Kanal: {channel}\n"
        "URL: {url}\n"
        "\n"
        "Format:\n"
        "- 8-12 Stichpunkte\n"
        "- 3 zentrale Erkenntnisse\n"
        "- Falls es ein Tutorial ist: Schritt-für-Schritt-Anleitung"
    ),
    "es": (
        "Resume este video de YouTube en español.\n"
        "Título: {title}\n"
        "Canal: {channel}\n"
        "URL: {url}\n"
        "\n"
        "Formato:\n"
        "- Resumen de 8-12 puntos\n"
        "- 3 conclusiones clave\n"
        "- Si es un tutorial: pasos a seguir"
    ),
    "fr": (
        "Résume cette vidéo YouTube en français.\n"
        "Titre : {title}\n"
        "Chaîne : {channel}\n"
        "URL : {url}\n"
        "\n"
        "Format :\n"
        "- Résumé en 8 à 12 points\n"
        "- 3 points clés\n"
        "- S'il s'agit d'un tutoriel : étapes à suivre"
    ),
}

DEFAULT_SEND_DELAY_MS = 150


__all__ = [
    "GEMINI_APP_URL",
    "GEMINI_MATCH_PATTERN",
    "EDITOR_SELECTOR",
    "SEND_BUTTON_SELECTOR",
    "YOUTUBE_HOST",
    "YOUTUBE_VIDEO_PATHS",
    "MSG_OPEN_GEMINI",
    "MSG_DELIVER_PROMPT",
    "SETTINGS_KEY",
    "PENDING_KEY",
    "REQUEST_TIMEOUT_SECS",
    "TAB_WATCH_INTERVAL_SECS",
    "EDITOR_POLL_ATTEMPTS",
    "EDITOR_POLL_INTERVAL_SECS",
    "SEND_RETRIES",
    "SEND_RETRY_INTERVAL_SECS",
    "SEND_DELAY_MIN_MS",
    "SEND_DELAY_MAX_MS",
    "SUPPORTED_LANGUAGES",
    "FALLBACK_LANGUAGE",
    "DEFAULT_PROMPT_TEMPLATES",
    "DEFAULT_SEND_DELAY_MS",
]
