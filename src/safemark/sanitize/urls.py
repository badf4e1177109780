"""URL scheme checks for link targets and image sources."""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import unquote

_PROBE_STRIP = re.compile(r"[^A-Za-z0-9/:]")

_BLOCKED_SCHEMES = ("javascript:", "vbscript:", "data:")

# Only base64 raster/svg payloads; any other data: media type falls through
# to sanitize_url, which rejects it.
_DATA_IMAGE = re.compile(
    r"data:image/(png|jpeg|jpg|gif|webp|bmp|svg\+xml);base64,[a-z0-9+/=]+",
    re.IGNORECASE,
)


def _decode_strict(url: str) -> str:
    """Percent-decode, raising ValueError on malformed escapes or bytes."""
    if re.search(r"%(?![0-9A-Fa-f]{2})", url):
        raise ValueError("malformed percent escape")
    return unquote(url, errors="strict")


def sanitize_url(url: Optional[str]) -> str:
    """Return url unchanged if its scheme is safe, else an empty string.

    The scheme check runs on a lowercase probe with everything except
    letters, digits, ``/`` and ``:`` removed, so ``java\\tscript:`` or
    ``%6aavascript:`` are caught. The probe is never returned.
    """
    if not url or not isinstance(url, str):
        return ""
    try:
        probe = _PROBE_STRIP.sub("", _decode_strict(url)).lower()
    except (ValueError, UnicodeDecodeError):
        return ""
    if probe.startswith(_BLOCKED_SCHEMES):
        return ""
    return url


def sanitize_image_src(src: Optional[str]) -> str:
    """Like sanitize_url, but admits base64 ``data:image/...`` payloads."""
    if not src or not isinstance(src, str):
        return ""
    value = src.strip()
    if _DATA_IMAGE.fullmatch(value):
        return value
    return sanitize_url(value)
