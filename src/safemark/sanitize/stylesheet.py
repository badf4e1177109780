"""``<style>`` sheet sanitizer with container scoping.

Sheets are parsed with a deliberately small grammar: split on ``}``, then on
the first ``{``. Anything that does not fit is dropped rather than repaired.
Every surviving selector is rewritten to live under the container class so
nothing in the sheet can style the host page.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, Optional

from safemark.sanitize.declarations import (
    CssDeclaration,
    contains_blocked_token,
    parse_declarations,
    sanitize_declaration,
)

logger = logging.getLogger(__name__)

DEFAULT_CONTAINER_CLASS = "markdown-content"
DEFAULT_SCOPE_ALIASES = ("#pet-context-preview", "#pet-message-preview", ".context-editor-preview")

_GLOBAL_ROOT = re.compile(r"^(?::root|html|body)\b", re.IGNORECASE)
_PSEUDO_ELEMENT = re.compile(r"(^|[^-])::?(before|after)\b", re.IGNORECASE)
_SELECTOR_UNSAFE = re.compile(r"""[<"'\\]""")


@dataclass
class CssRule:
    selectors: list[str]
    declarations: list[CssDeclaration] = field(default_factory=list)

    def to_css(self) -> str:
        decls = ";".join(d.to_css() for d in self.declarations)
        return f"{', '.join(self.selectors)}{{{decls}}}"


def parse_rules(css_text: str) -> list[CssRule]:
    """Parse ``selectors { declarations }`` blocks; values are not validated."""
    rules = []
    for block in css_text.split("}"):
        b = block.strip()
        idx = b.find("{")
        if idx <= 0:
            continue
        selector_part = b[:idx].strip()
        decl_part = b[idx + 1:].strip()
        if not selector_part or not decl_part:
            continue
        selectors = [s.strip() for s in selector_part.split(",") if s.strip()]
        if selectors:
            rules.append(CssRule(selectors, parse_declarations(decl_part)))
    return rules


def _is_scoped(selector: str, container: str) -> bool:
    """True if selector starts with the container class as its own compound
    and reaches the rest of the document only through descendant or child
    combinators."""
    m = re.match(rf"\.{re.escape(container)}(?![\w-])[^\s>+~]*\s*", selector)
    if not m:
        return False
    return not selector[m.end():].startswith(("+", "~"))


def scope_selector(
    selector: str,
    container_class: str = DEFAULT_CONTAINER_CLASS,
    aliases: Iterable[str] = DEFAULT_SCOPE_ALIASES,
) -> str:
    """Rewrite a single selector so it can only match inside the container.

    Host-surface aliases and global roots (``:root``, ``html``, ``body``) are
    replaced by the container class; anything else is prefixed with it.
    Returns an empty string for selectors that cannot be scoped.
    """
    s = (selector or "").strip()
    if not s or _SELECTOR_UNSAFE.search(s):
        return ""
    container = f".{container_class}"
    if _is_scoped(s, container_class):
        return s
    for alias in aliases:
        s = re.sub(rf"{re.escape(alias)}(?![\w-])", container, s)
    s = _GLOBAL_ROOT.sub(container, s).strip()
    if not s or s.startswith(("+", "~")):
        return ""
    if _is_scoped(s, container_class):
        return s
    return f"{container} {s}"


def sanitize_rule(
    rule: CssRule,
    container_class: str = DEFAULT_CONTAINER_CLASS,
    aliases: Iterable[str] = DEFAULT_SCOPE_ALIASES,
) -> Optional[CssRule]:
    declarations = [d for d in map(sanitize_declaration, rule.declarations) if d is not None]
    if not declarations:
        return None

    aliases = tuple(aliases)
    selectors = [scoped for scoped in (scope_selector(s, container_class, aliases) for s in rule.selectors) if scoped]
    if not selectors:
        return None

    # ::before/::after only paint with a content declaration.
    if any(_PSEUDO_ELEMENT.search(sel) for sel in selectors) and not any(
        d.property == "content" for d in declarations
    ):
        declarations.append(CssDeclaration("content", '""'))
    return CssRule(selectors, declarations)


def sanitize_stylesheet_text(
    css_text: Optional[str],
    container_class: str = DEFAULT_CONTAINER_CLASS,
    aliases: Iterable[str] = DEFAULT_SCOPE_ALIASES,
) -> str:
    """Sanitize a full stylesheet, scoping each rule under the container.

    Sheets containing at-rules, a blocked token or an end-tag opener (``</``)
    are rejected outright, since the result is written back raw inside
    ``<style>``. Surviving rules are emitted one per line.
    """
    if not css_text or not isinstance(css_text, str):
        return ""
    text = css_text.strip()
    if not text:
        return ""
    if "@" in text or contains_blocked_token(text) or "</" in text:
        logger.debug("Rejected stylesheet containing an at-rule, blocked token or end tag")
        return ""

    aliases = tuple(aliases)
    out = []
    for rule in parse_rules(text):
        safe = sanitize_rule(rule, container_class, aliases)
        if safe is not None:
            out.append(safe.to_css())
    return "\n".join(out)
