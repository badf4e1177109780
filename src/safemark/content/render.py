"""Render untrusted Markdown to HTML that is safe to insert into the overlay."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional, Protocol

import markdown

from safemark.content.extensions import SafeEmissionExtension
from safemark.core.models import AppConfig, MarkdownConfig, SanitizerConfig
from safemark.sanitize.markup import sanitize_markup_html
from safemark.utils.text import escape_html

logger = logging.getLogger(__name__)


class Converter(Protocol):
    def render(self, text: str) -> str: ...


class MarkdownConverter:
    """Python-Markdown behind a single ``render`` call.

    The ``Markdown`` instance is built once and reset between documents.
    """

    def __init__(self, config: Optional[MarkdownConfig] = None):
        cfg = config or MarkdownConfig()
        self._md = markdown.Markdown(
            extensions=[
                *cfg.extensions,
                SafeEmissionExtension(
                    link_target=cfg.link_target,
                    mermaid=cfg.mermaid,
                ),
            ],
            output_format="html",
        )

    def render(self, text: str) -> str:
        self._md.reset()
        return self._md.convert(text)


class MarkdownRenderer:
    """Markdown → HTML → sanitized HTML.

    ``converter`` may be None when no Markdown engine is available, in which
    case the source is returned escaped as plain text.
    """

    def __init__(
        self,
        converter: Optional[Converter],
        sanitizer_config: Optional[SanitizerConfig] = None,
    ):
        self.converter = converter
        self.sanitizer_config = sanitizer_config or SanitizerConfig()

    @classmethod
    def from_config(cls, config: Optional[AppConfig] = None) -> "MarkdownRenderer":
        cfg = config or AppConfig()
        return cls(MarkdownConverter(cfg.markdown), cfg.sanitizer)

    def render(self, text: Optional[str]) -> str:
        if not text:
            return ""
        if self.converter is None:
            return escape_html(text)
        try:
            raw = self.converter.render(text)
        except Exception:
            logger.exception("Markdown conversion failed; returning escaped source")
            return escape_html(text)
        return sanitize_markup_html(raw, self.sanitizer_config)


@lru_cache(maxsize=1)
def _default_renderer() -> MarkdownRenderer:
    return MarkdownRenderer.from_config()


def render_markdown(text: Optional[str], config: Optional[AppConfig] = None) -> str:
    """Convert Markdown to sanitized HTML."""
    renderer = MarkdownRenderer.from_config(config) if config else _default_renderer()
    return renderer.render(text)
