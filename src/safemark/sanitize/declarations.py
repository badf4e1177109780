"""Inline ``style`` declaration-list sanitizer."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from safemark.sanitize.policy import CSS_PROPERTY_VALIDATORS
from safemark.utils.text import has_control_chars

# Any of these anywhere in the text disqualifies the whole declaration list.
BLOCKED_CSS_TOKENS = ("expression(", "javascript:", "vbscript:", "url(")

MAX_VALUE_LENGTH = 160

_TRAILING_IMPORTANT = re.compile(r"\s*!important\s*$", re.IGNORECASE)
_ANY_IMPORTANT = re.compile(r"!\s*important", re.IGNORECASE)


@dataclass
class CssDeclaration:
    property: str
    value: str
    important: bool = False

    def to_css(self) -> str:
        suffix = " !important" if self.important else ""
        return f"{self.property}:{self.value}{suffix}"


def contains_blocked_token(text: str) -> bool:
    lowered = text.lower()
    return any(token in lowered for token in BLOCKED_CSS_TOKENS)


def parse_declarations(text: str) -> list[CssDeclaration]:
    """Split ``prop:value;...`` into declarations without validating values.

    Segments with no ``:`` (or nothing before it) are skipped. A trailing
    ``!important`` is lifted into the ``important`` flag.
    """
    declarations = []
    for part in text.split(";"):
        segment = part.strip()
        idx = segment.find(":")
        if idx <= 0:
            continue
        prop = segment[:idx].strip().lower()
        value = segment[idx + 1:].strip()
        important = bool(_TRAILING_IMPORTANT.search(value))
        if important:
            value = _TRAILING_IMPORTANT.sub("", value).strip()
        declarations.append(CssDeclaration(prop, value, important))
    return declarations


def sanitize_declaration(decl: CssDeclaration) -> Optional[CssDeclaration]:
    """Return the declaration with its normalized value, or None to drop it."""
    validator = CSS_PROPERTY_VALIDATORS.get(decl.property)
    if validator is None:
        return None
    value = decl.value
    if not value or len(value) > MAX_VALUE_LENGTH or has_control_chars(value):
        return None
    # A second importance marker inside the value is never legitimate.
    if _ANY_IMPORTANT.search(value):
        return None
    safe_value = validator(value)
    if not safe_value:
        return None
    return CssDeclaration(decl.property, safe_value, decl.important)


def sanitize_style_text(style_text: Optional[str]) -> str:
    """Reduce an inline style string to its allow-listed declarations.

    Returns the surviving ``prop:value`` pairs joined by ``;``, or an empty
    string when nothing survives. Never raises.
    """
    if not style_text or not isinstance(style_text, str):
        return ""
    text = style_text.strip()
    if not text or contains_blocked_token(text):
        return ""

    safe = []
    for decl in parse_declarations(text):
        cleaned = sanitize_declaration(decl)
        if cleaned is not None:
            safe.append(cleaned.to_css())
    return ";".join(safe)
