"""Pydantic configuration models for safemark."""

from __future__ import annotations

from pydantic import BaseModel, Field


class SanitizerConfig(BaseModel):
    container_class: str = "markdown-content"
    scope_aliases: list[str] = Field(
        default_factory=lambda: ["#pet-context-preview", "#pet-message-preview", ".context-editor-preview"]
    )
    max_depth: int = Field(default=128, ge=1)
    max_nodes: int = Field(default=20000, ge=1)


class MarkdownConfig(BaseModel):
    extensions: list[str] = Field(default_factory=lambda: ["extra", "sane_lists", "nl2br"])
    mermaid: bool = True
    link_target: str = "_blank"


class AppConfig(BaseModel):
    sanitizer: SanitizerConfig = Field(default_factory=SanitizerConfig)
    markdown: MarkdownConfig = Field(default_factory=MarkdownConfig)
