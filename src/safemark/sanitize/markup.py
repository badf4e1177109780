"""XSS sanitization for markdown-to-HTML output.

The fragment is parsed into a BeautifulSoup tree and walked depth-first.
Children are resolved before their parent, so when a parent is unwrapped the
nodes promoted into its place are already clean. Each element is kept (with
its attributes filtered), unwrapped, or stripped with its whole subtree
according to the allow-list policy.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.dammit import EntitySubstitution
from bs4.element import PreformattedString, Stylesheet
from bs4.formatter import HTMLFormatter

from safemark.core.models import SanitizerConfig
from safemark.sanitize.declarations import sanitize_style_text
from safemark.sanitize.policy import TagAction, tag_action
from safemark.sanitize.stylesheet import sanitize_stylesheet_text
from safemark.sanitize.urls import sanitize_image_src, sanitize_url
from safemark.utils.text import collapse_whitespace, escape_html, strip_control_chars, truncate

logger = logging.getLogger(__name__)

MAX_CLASS_LENGTH = 128
MAX_LABEL_LENGTH = 200
MAX_IMAGE_DIMENSION = 2000

_CLASS_UNSAFE = re.compile(r"[^a-zA-Z0-9 _-]")
_DIMENSION = re.compile(r"[0-9]{1,4}")
_SAFE_REL = "noopener noreferrer"
_LABEL_ATTRS = frozenset({"title", "aria-label"})


class _DocumentOrderFormatter(HTMLFormatter):
    """HTML5 serialization that keeps attributes in document order."""

    def attributes(self, tag):
        if tag.attrs is None:
            return []
        return [
            (key, None if self.empty_attributes_are_booleans and value == "" else value)
            for key, value in tag.attrs.items()
        ]


_FORMATTER = _DocumentOrderFormatter(
    entity_substitution=EntitySubstitution.substitute_xml,
    void_element_close_prefix=None,
    empty_attributes_are_booleans=True,
)


def sanitize_class_name(class_name: Optional[str]) -> str:
    """Keep letters, digits, space, ``_`` and ``-``; collapse whitespace; cap length."""
    if not class_name or not isinstance(class_name, str):
        return ""
    cleaned = collapse_whitespace(_CLASS_UNSAFE.sub(" ", class_name))
    return truncate(cleaned, MAX_CLASS_LENGTH).strip()


def _label(value: str) -> Optional[str]:
    cleaned = truncate(strip_control_chars(value), MAX_LABEL_LENGTH)
    return cleaned or None


def _anchor_attr(name: str, value: str) -> Optional[str]:
    if name == "href":
        return sanitize_url(value) or None
    if name == "target":
        v = value.strip().lower()
        return v if v in ("_blank", "_self") else None
    if name == "rel":
        return _SAFE_REL
    return None


def _image_attr(name: str, value: str) -> Optional[str]:
    if name == "src":
        return sanitize_image_src(value) or None
    if name in ("width", "height"):
        v = value.strip()
        return v if _DIMENSION.fullmatch(v) and int(v) <= MAX_IMAGE_DIMENSION else None
    if name == "loading":
        v = value.strip().lower()
        return v if v in ("lazy", "eager") else "lazy"
    if name == "alt":
        return _label(value)
    return None


_TAG_ATTRS = {
    "a": _anchor_attr,
    "img": _image_attr,
}


def sanitize_attribute(tag: str, name: str, value: str) -> Optional[str]:
    """Return the safe value for one attribute of a kept tag, or None to drop it."""
    if name.startswith("on"):
        return None
    if name == "style":
        return sanitize_style_text(value) or None
    if name == "class":
        return sanitize_class_name(value) or None
    handler = _TAG_ATTRS.get(tag)
    if handler is not None:
        safe = handler(name, value)
        if safe is not None:
            return safe
    if name in _LABEL_ATTRS and value:
        return _label(value)
    return None


class _TreeSanitizer:
    """One-shot walker; counts nodes against the per-call limits."""

    def __init__(self, config: SanitizerConfig):
        self.config = config
        self.seen = 0
        self.limit_hit = False

    def sanitize_children(self, parent: Tag, depth: int) -> None:
        for child in list(parent.contents):
            if isinstance(child, Tag):
                self.sanitize_element(child, depth + 1)
            elif isinstance(child, PreformattedString):
                # Comments, CDATA, doctypes and processing instructions.
                child.extract()

    def sanitize_element(self, el: Tag, depth: int) -> None:
        self.seen += 1
        if depth > self.config.max_depth or self.seen > self.config.max_nodes:
            if not self.limit_hit:
                logger.warning(
                    "Markup exceeds limits (depth %d, node %d); dropping the remainder",
                    depth,
                    self.seen,
                )
                self.limit_hit = True
            el.decompose()
            return

        tag = (el.name or "").lower()
        action = tag_action(tag)
        if action is TagAction.STRIP:
            logger.debug("Stripped <%s> subtree", tag)
            el.decompose()
            return

        self.sanitize_children(el, depth)

        if action is TagAction.UNWRAP:
            logger.debug("Unwrapped <%s>", tag)
            el.unwrap()
            return

        if tag == "style":
            self.sanitize_style_element(el)
            return

        self.sanitize_attributes(el, tag)

    def sanitize_style_element(self, el: Tag) -> None:
        css = "".join(str(c) for c in el.contents if isinstance(c, NavigableString))
        safe_css = sanitize_stylesheet_text(
            css,
            self.config.container_class,
            self.config.scope_aliases,
        )
        if not safe_css:
            el.decompose()
            return
        el.attrs = {}
        el.string = Stylesheet(safe_css)

    def sanitize_attributes(self, el: Tag, tag: str) -> None:
        attrs: dict[str, str] = {}
        for name, value in el.attrs.items():
            if not isinstance(value, str):
                value = " ".join(value)
            key = name.lower()
            safe = sanitize_attribute(tag, key, value)
            if safe is not None:
                attrs[key] = safe

        if tag == "a" and attrs.get("target") == "_blank":
            attrs["rel"] = _SAFE_REL
        elif tag == "img":
            attrs.setdefault("loading", "lazy")
        el.attrs = attrs


def sanitize_markup_html(html: Optional[str], config: Optional[SanitizerConfig] = None) -> str:
    """Sanitize an HTML fragment, keeping only allow-listed markup and styles.

    Never raises: if parsing or serialization fails the whole input comes back
    HTML-escaped as plain text.
    """
    if not html:
        return ""
    raw = str(html)
    cfg = config or SanitizerConfig()
    try:
        soup = BeautifulSoup(raw, "html.parser", multi_valued_attributes=None)
        _TreeSanitizer(cfg).sanitize_children(soup, 0)
        return soup.decode(formatter=_FORMATTER)
    except Exception:
        logger.exception("HTML sanitization failed; falling back to escaped text")
        return escape_html(raw)
