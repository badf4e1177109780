"""Text helpers shared by the sanitizers."""

from __future__ import annotations

import html
import re

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_WHITESPACE = re.compile(r"\s+")


def escape_html(text: object) -> str:
    """Escape text for safe insertion as HTML, quotes included."""
    if text is None:
        return ""
    return html.escape(str(text), quote=True)


def truncate(text: str, max_length: int) -> str:
    """Hard-truncate text to max_length characters."""
    if len(text) <= max_length:
        return text
    return text[:max_length]


def collapse_whitespace(text: str) -> str:
    """Collapse runs of whitespace to a single space and trim."""
    return _WHITESPACE.sub(" ", text).strip()


def has_control_chars(text: str) -> bool:
    return bool(_CONTROL_CHARS.search(text))


def strip_control_chars(text: str) -> str:
    return _CONTROL_CHARS.sub("", text)
