"""Scalar CSS value validators."""

from __future__ import annotations

import math
import re
from typing import Optional

_HEX_COLOR = re.compile(r"#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})")
_KEYWORD = re.compile(r"[a-zA-Z]+")
_RGB = re.compile(r"rgb\(\s*([0-9]{1,3})\s*,\s*([0-9]{1,3})\s*,\s*([0-9]{1,3})\s*\)", re.IGNORECASE)
_RGBA = re.compile(
    r"rgba\(\s*([0-9]{1,3})\s*,\s*([0-9]{1,3})\s*,\s*([0-9]{1,3})\s*,\s*(0|1|0?\.[0-9]+)\s*\)",
    re.IGNORECASE,
)
_ZERO = re.compile(r"-?0+(?:\.0+)?")
_LENGTH = re.compile(r"(-?[0-9]+(?:\.[0-9]+)?)(px|em|rem|%|vh|vw)", re.IGNORECASE)

MAX_COLOR_LENGTH = 48
LENGTH_MIN = -2000
LENGTH_MAX = 2000


def _channels_ok(*channels: str) -> bool:
    return all(0 <= int(c) <= 255 for c in channels)


def is_safe_css_color(value: Optional[str]) -> bool:
    """Hex (#rgb / #rrggbb), a bare keyword, or rgb()/rgba() with in-range channels."""
    if not value or not isinstance(value, str):
        return False
    v = value.strip()
    if not v or len(v) > MAX_COLOR_LENGTH:
        return False
    if _HEX_COLOR.fullmatch(v) or _KEYWORD.fullmatch(v):
        return True
    m = _RGB.fullmatch(v)
    if m:
        return _channels_ok(*m.groups())
    m = _RGBA.fullmatch(v)
    if m:
        r, g, b, a = m.groups()
        return _channels_ok(r, g, b) and 0 <= float(a) <= 1
    return False


def is_safe_css_length(value: Optional[str]) -> bool:
    """A signed zero, or a number in [-2000, 2000] with a px/em/rem/%/vh/vw unit."""
    if not value or not isinstance(value, str):
        return False
    v = value.strip()
    if _ZERO.fullmatch(v):
        return True
    m = _LENGTH.fullmatch(v)
    if not m:
        return False
    num = float(m.group(1))
    if not math.isfinite(num):
        return False
    return LENGTH_MIN <= num <= LENGTH_MAX


def is_safe_css_length_list(value: str, max_tokens: int = 4, allow_auto: bool = False) -> bool:
    """1..max_tokens space-separated lengths (margin/padding style shorthands)."""
    tokens = value.split()
    if not 1 <= len(tokens) <= max_tokens:
        return False
    return all((allow_auto and t.lower() == "auto") or is_safe_css_length(t) for t in tokens)
