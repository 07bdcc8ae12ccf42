"""
Typed access to the two persisted keys: `settings` and `pendingPrompt`.

Reads never fail: whatever could be retrieved is merged over the compiled-in
defaults, and invalid field values are replaced by their defaults.
"""

import locale
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

from ..constants import (
    SETTINGS_KEY,
    PENDING_KEY,
    SUPPORTED_LANGUAGES,
    FALLBACK_LANGUAGE,
    DEFAULT_PROMPT_TEMPLATES,
    DEFAULT_SEND_DELAY_MS,
    SEND_DELAY_MIN_MS,
    SEND_DELAY_MAX_MS,
)
from ..models import PendingRequest
from .store import SettingsStore

import logging
logger = logging.getLogger(__name__)


@dataclass
class Settings:
    language: str
    autoSend: bool
    sendDelayMs: int
    promptTemplate: str
    showButtonOnHoverOnly: bool

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def sanitize_language(value) -> str:
    return value if value in SUPPORTED_LANGUAGES else FALLBACK_LANGUAGE


def default_language() -> str:
    """Supported language matching the host locale, else the fallback."""
    try:
        code = locale.getlocale()[0] or ""
    except (ValueError, TypeError):
        code = ""
    return sanitize_language(code.replace("-", "_").split("_")[0].lower())


def default_prompt_template(language: str) -> str:
    return DEFAULT_PROMPT_TEMPLATES[sanitize_language(language)]


def normalize_delay(value, fallback: int = DEFAULT_SEND_DELAY_MS) -> int:
    """Parse `value` as milliseconds and clamp it to the allowed range."""
    if isinstance(value, bool):
        return fallback
    try:
        parsed = int(value)
    except (TypeError, ValueError, OverflowError):
        return fallback
    return min(max(parsed, SEND_DELAY_MIN_MS), SEND_DELAY_MAX_MS)


def get_default_settings(language: Optional[str] = None) -> Settings:
    language = sanitize_language(language) if language else default_language()
    return Settings(
        language=language,
        autoSend=True,
        sendDelayMs=DEFAULT_SEND_DELAY_MS,
        promptTemplate=default_prompt_template(language),
        showButtonOnHoverOnly=True,
    )


def _coerce(stored) -> Settings:
    stored = stored if isinstance(stored, dict) else {}
    language = sanitize_language(stored.get("language")) if "language" in stored else None
    defaults = get_default_settings(language)

    template = stored.get("promptTemplate")
    return Settings(
        language=defaults.language,
        autoSend=stored["autoSend"] if isinstance(stored.get("autoSend"), bool) else defaults.autoSend,
        sendDelayMs=normalize_delay(stored.get("sendDelayMs", defaults.sendDelayMs), defaults.sendDelayMs),
        promptTemplate=template if isinstance(template, str) and template else defaults.promptTemplate,
        showButtonOnHoverOnly=(
            stored["showButtonOnHoverOnly"]
            if isinstance(stored.get("showButtonOnHoverOnly"), bool)
            else defaults.showButtonOnHoverOnly
        ),
    )


def get_settings(store: SettingsStore) -> Settings:
    return _coerce(store.get(SETTINGS_KEY, {}))


def set_settings(store: SettingsStore, partial: Optional[Dict[str, Any]]) -> Settings:
    """
    Merge `partial` over the current settings and overwrite the whole key.

    Switching `language` also switches `promptTemplate` to the new language's
    default when the current template is empty or still the previous default,
    unless `partial` sets a template itself.
    """
    updates = dict(partial) if isinstance(partial, dict) else {}
    current = get_settings(store)

    if "language" in updates and "promptTemplate" not in updates:
        new_language = sanitize_language(updates["language"])
        previous_default = default_prompt_template(current.language)
        if not current.promptTemplate.strip() or current.promptTemplate == previous_default:
            updates["promptTemplate"] = default_prompt_template(new_language)

    merged = _coerce({**current.to_dict(), **updates})
    if not store.set({SETTINGS_KEY: merged.to_dict()}):
        logger.warning("Settings were not persisted; returning the merged values anyway.")
    return merged


def reset_settings(store: SettingsStore) -> Settings:
    defaults = get_default_settings()
    store.set({SETTINGS_KEY: defaults.to_dict()})
    return defaults


def get_pending(store: SettingsStore) -> Optional[PendingRequest]:
    return PendingRequest.from_dict(store.get(PENDING_KEY, None))


def set_pending(store: SettingsStore, pending: PendingRequest) -> bool:
    return store.set({PENDING_KEY: pending.to_dict()})


def clear_pending(store: SettingsStore) -> bool:
    return store.remove(PENDING_KEY)


__all__ = [
    "Settings",
    "sanitize_language",
    "default_language",
    "default_prompt_template",
    "normalize_delay",
    "get_default_settings",
    "get_settings",
    "set_settings",
    "reset_settings",
    "get_pending",
    "set_pending",
    "clear_pending",
]
