"""Prompt template rendering and composer block layout."""

import re
from typing import List, Mapping, Optional

from .constants import DEFAULT_PROMPT_TEMPLATES, FALLBACK_LANGUAGE

_PLACEHOLDER_RE = re.compile(r"\{(url|title|channel)\}")


def render_template(template, data: Optional[Mapping] = None) -> str:
    """
    Substitute {url}, {title} and {channel} in `template`.

    Missing or None fields become empty strings. Any other brace token,
    e.g. {foo} or {{url}}'s outer braces, is left untouched. A non-string
    template falls back to the default English template.
    """
    if not isinstance(template, str):
        template = DEFAULT_PROMPT_TEMPLATES[FALLBACK_LANGUAGE]

    data = data or {}
    values = {}
    for key in ("url", "title", "channel"):
        value = data.get(key) if isinstance(data, Mapping) else getattr(data, key, None)
        values[key] = "" if value is None else str(value)

    return _PLACEHOLDER_RE.sub(lambda m: values[m.group(1)], template)


def build_prompt_blocks(prompt: str) -> List[Optional[str]]:
    """
    Split a prompt into the composer's block structure.

    Each line becomes one paragraph. Empty lines are returned as None and are
    rendered as a paragraph holding a single <br> so the composer keeps them.
    """
    normalized = prompt.replace("\r\n", "\n").replace("\r", "\n")
    return [line if line else None for line in normalized.split("\n")]


__all__ = ["render_template", "build_prompt_blocks"]
