"""Python-Markdown extension that checks links and images as they are emitted.

This is a first line of defence only; the rendered HTML still goes through
the full markup sanitizer afterwards.
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as etree
from typing import Optional

from markdown import Markdown
from markdown.extensions import Extension
from markdown.postprocessors import Postprocessor
from markdown.treeprocessors import Treeprocessor

from safemark.sanitize.urls import sanitize_image_src, sanitize_url

_MERMAID_BLOCK = re.compile(
    r'<pre><code class="language-(?:mermaid|mmd)">(.*?)</code></pre>',
    re.DOTALL,
)


def _unwrap(parent: etree.Element, el: etree.Element, text: Optional[str] = None) -> None:
    """Replace el with its children and text (or with ``text`` alone)."""
    idx = list(parent).index(el)
    lead = (el.text if text is None else text) or ""
    children = list(el) if text is None else []
    trail = el.tail or ""
    parent.remove(el)
    for offset, child in enumerate(children):
        el.remove(child)
        parent.insert(idx + offset, child)
    if children:
        children[-1].tail = (children[-1].tail or "") + trail
        glue = lead
    else:
        glue = lead + trail
    if idx > 0:
        prev = parent[idx - 1]
        prev.tail = (prev.tail or "") + glue
    else:
        parent.text = (parent.text or "") + glue


class SafeLinkTreeprocessor(Treeprocessor):
    """Checks ``a``/``img`` URLs as the inline processor emits them."""

    def __init__(self, md: Markdown, link_target: str):
        super().__init__(md)
        self.link_target = link_target

    def run(self, root: etree.Element) -> None:
        parents = {child: parent for parent in root.iter() for child in parent}

        for el in list(root.iter("a")):
            href = sanitize_url(el.get("href", ""))
            if not href:
                _unwrap(parents[el], el)
                continue
            el.set("href", href)
            if self.link_target:
                el.set("target", self.link_target)
            el.set("rel", "noopener noreferrer")

        parents = {child: parent for parent in root.iter() for child in parent}
        for el in list(root.iter("img")):
            src = sanitize_image_src(el.get("src", ""))
            if not src:
                _unwrap(parents[el], el, el.get("alt", ""))
                continue
            el.set("src", src)
            el.set("loading", "lazy")


class MermaidPostprocessor(Postprocessor):
    """Turns ``mermaid`` fenced code into ``<div class="mermaid">`` blocks."""

    def run(self, text: str) -> str:
        return _MERMAID_BLOCK.sub(r'<div class="mermaid">\1</div>', text)


class SafeEmissionExtension(Extension):
    def __init__(self, **kwargs):
        self.config = {
            "link_target": ["_blank", "target attribute for emitted links ('' for none)"],
            "mermaid": [True, "render mermaid fences as div.mermaid"],
        }
        super().__init__(**kwargs)

    def extendMarkdown(self, md: Markdown) -> None:
        # After the inline processor (20) has built the a/img elements.
        md.treeprocessors.register(
            SafeLinkTreeprocessor(md, self.getConfig("link_target")),
            "safemark_links",
            15,
        )
        if self.getConfig("mermaid"):
            # After raw_html (30) has restored stashed fenced code.
            md.postprocessors.register(MermaidPostprocessor(md), "safemark_mermaid", 10)
