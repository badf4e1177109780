"""Static allow-list policy: tags, stripped tags and CSS property validators.

Every table here is built once at import time and exposed as an immutable
frozenset or read-only mapping. A CSS validator takes the declaration value
(with any trailing ``!important`` already removed) and returns the value to
emit, or ``None`` to drop the declaration.
"""

from __future__ import annotations

import re
from enum import Enum
from types import MappingProxyType
from typing import Callable, Optional

from safemark.sanitize.css_values import (
    is_safe_css_color,
    is_safe_css_length,
    is_safe_css_length_list,
)

CssValidator = Callable[[str], Optional[str]]


class TagAction(str, Enum):
    KEEP = "keep"
    UNWRAP = "unwrap"
    STRIP = "strip"


ALLOWED_TAGS: frozenset[str] = frozenset({
    "a", "b", "blockquote", "br", "code", "del", "details", "div", "em",
    "h1", "h2", "h3", "h4", "h5", "h6", "hr", "i", "img", "kbd", "li",
    "mark", "ol", "p", "pre", "small", "span", "strong", "sub", "summary",
    "sup", "table", "tbody", "td", "th", "thead", "tr", "u", "ul", "style",
})

STRIPPED_TAGS: frozenset[str] = frozenset({
    "script", "iframe", "object", "embed", "link", "meta",
    "frame", "frameset", "form", "noscript", "template", "applet", "base",
})


def tag_action(tag: str) -> TagAction:
    """Keep, unwrap or strip a (lower-cased) tag name."""
    if tag in STRIPPED_TAGS:
        return TagAction.STRIP
    if tag in ALLOWED_TAGS:
        return TagAction.KEEP
    return TagAction.UNWRAP


# --- value validators ---

def _keywords(*allowed: str) -> CssValidator:
    allowed_set = frozenset(allowed)

    def validate(value: str) -> Optional[str]:
        v = value.lower()
        return v if v in allowed_set else None

    return validate


def _color(value: str) -> Optional[str]:
    return value if is_safe_css_color(value) else None


def _lengths(value: str) -> Optional[str]:
    return value if is_safe_css_length_list(value) else None


def _offset(value: str) -> Optional[str]:
    v = value.lower()
    return v if v == "auto" or is_safe_css_length(v) else None


def _inset(value: str) -> Optional[str]:
    if not is_safe_css_length_list(value, allow_auto=True):
        return None
    return " ".join(t.lower() for t in value.split())


_FONT_WEIGHT = re.compile(r"normal|bold|bolder|lighter|[1-9]00")


def _font_weight(value: str) -> Optional[str]:
    v = value.lower()
    return v if _FONT_WEIGHT.fullmatch(v) else None


_OPACITY = re.compile(r"0|1|0?\.[0-9]+|1\.0+")


def _opacity(value: str) -> Optional[str]:
    if not _OPACITY.fullmatch(value):
        return None
    return value if 0 <= float(value) <= 1 else None


_Z_INDEX = re.compile(r"-?[0-9]{1,5}")


def _z_index(value: str) -> Optional[str]:
    if not _Z_INDEX.fullmatch(value):
        return None
    n = int(value)
    return str(n) if -9999 <= n <= 9999 else None


_TRANSFORM_CHARS = re.compile(r"[0-9a-zA-Z().,%+\- \t]+")
_TRANSFORM_FN = re.compile(r"[a-z-]+\(")
_TRANSFORM_FUNCTIONS = frozenset({
    "translate", "translatex", "translatey", "scale", "scalex", "scaley",
    "rotate", "skew", "skewx", "skewy", "perspective",
})


def _transform(value: str) -> Optional[str]:
    lowered = value.lower()
    if lowered == "none":
        return "none"
    if len(value) > 120 or not _TRANSFORM_CHARS.fullmatch(value):
        return None
    if "url(" in lowered or "expression(" in lowered:
        return None
    names = [m[:-1] for m in _TRANSFORM_FN.findall(lowered)]
    if not names or any(name not in _TRANSFORM_FUNCTIONS for name in names):
        return None
    return value


_CONTENT_KEYWORDS = frozenset({
    "none", "normal", "open-quote", "close-quote", "no-open-quote", "no-close-quote",
})
_CONTENT_STRING = re.compile(r"""(['"])(?:\\.|(?!\1)[^\\\n\r])*?\1""")


def _content(value: str) -> Optional[str]:
    lowered = value.lower()
    if lowered in _CONTENT_KEYWORDS:
        return lowered
    if len(value) > 120 or "<" in value or ">" in value:
        return None
    return value if _CONTENT_STRING.fullmatch(value) else None


_FONT_FAMILY = re.compile(r"[A-Za-z0-9 ,_-]{1,80}")


def _font_family(value: str) -> Optional[str]:
    return value if _FONT_FAMILY.fullmatch(value) else None


_BORDER_STYLES = frozenset({"none", "solid", "dashed", "dotted", "double"})


def _border(value: str) -> Optional[str]:
    """Shorthand: up to one each of width, style and colour, in any order."""
    tokens = value.split()
    if not 1 <= len(tokens) <= 3:
        return None
    seen: set[str] = set()
    out = []
    for token in tokens:
        lowered = token.lower()
        if lowered in _BORDER_STYLES:
            kind, token = "style", lowered
        elif is_safe_css_length(token):
            kind = "width"
        elif is_safe_css_color(token):
            kind = "color"
        else:
            return None
        if kind in seen:
            return None
        seen.add(kind)
        out.append(token)
    return " ".join(out)


_OVERFLOW = _keywords("visible", "hidden", "scroll", "auto")

_VALIDATORS: dict[str, CssValidator] = {
    "color": _color,
    "background-color": _color,
    "border-color": _color,
    "border-top-color": _color,
    "border-right-color": _color,
    "border-bottom-color": _color,
    "border-left-color": _color,
    "font-weight": _font_weight,
    "font-style": _keywords("normal", "italic", "oblique"),
    "font-family": _font_family,
    "text-decoration": _keywords("none", "underline", "line-through", "overline"),
    "text-align": _keywords("left", "right", "center", "justify"),
    "white-space": _keywords("normal", "nowrap", "pre", "pre-wrap", "pre-line"),
    "word-break": _keywords("normal", "break-all", "keep-all", "break-word"),
    "overflow": _OVERFLOW,
    "overflow-x": _OVERFLOW,
    "overflow-y": _OVERFLOW,
    "display": _keywords("inline", "block", "inline-block", "flex", "inline-flex", "none"),
    "position": _keywords("static", "relative", "absolute", "sticky"),
    "top": _offset,
    "right": _offset,
    "bottom": _offset,
    "left": _offset,
    "inset": _inset,
    "z-index": _z_index,
    "opacity": _opacity,
    "pointer-events": _keywords("auto", "none"),
    "transform": _transform,
    "content": _content,
    "border": _border,
    "border-style": _keywords(*_BORDER_STYLES),
}

for _prop in (
    "font-size", "line-height", "width", "height", "min-width", "max-width",
    "min-height", "max-height", "border-radius", "border-width",
    "margin", "margin-top", "margin-right", "margin-bottom", "margin-left",
    "padding", "padding-top", "padding-right", "padding-bottom", "padding-left",
):
    _VALIDATORS[_prop] = _lengths

CSS_PROPERTY_VALIDATORS: MappingProxyType[str, CssValidator] = MappingProxyType(_VALIDATORS)
ALLOWED_CSS_PROPERTIES: frozenset[str] = frozenset(_VALIDATORS)
