"""Configuration loader: YAML files + environment variables."""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv

from safemark.core.models import AppConfig, MarkdownConfig, SanitizerConfig

logger = logging.getLogger(__name__)

_CSS_IDENT = re.compile(r"-?[A-Za-z_][A-Za-z0-9_-]*")


def _find_project_root() -> Path:
    """Walk up from cwd to find a directory containing pyproject.toml."""
    cwd = Path.cwd()
    for p in [cwd, *cwd.parents]:
        if (p / "pyproject.toml").exists():
            return p
    return cwd


def _container_class(value: str) -> str:
    default = SanitizerConfig.model_fields["container_class"].default
    if _CSS_IDENT.fullmatch(value):
        return value
    logger.warning("Invalid container class %r, falling back to %r", value, default)
    return default


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """Load configuration from YAML + environment variables.

    Priority: env vars > .env file > YAML defaults.
    """
    root = _find_project_root()
    load_dotenv(root / ".env")

    yaml_path = Path(config_path) if config_path else root / "config" / "default.yaml"
    yaml_data: dict = {}
    if yaml_path.exists():
        with open(yaml_path) as f:
            yaml_data = yaml.safe_load(f) or {}

    # Sanitizer config with env overrides
    san_data = dict(yaml_data.get("sanitizer", {}))
    if "SAFEMARK_CONTAINER_CLASS" in os.environ:
        san_data["container_class"] = os.environ["SAFEMARK_CONTAINER_CLASS"]
    if "SAFEMARK_MAX_DEPTH" in os.environ:
        san_data["max_depth"] = int(os.environ["SAFEMARK_MAX_DEPTH"])
    if "SAFEMARK_MAX_NODES" in os.environ:
        san_data["max_nodes"] = int(os.environ["SAFEMARK_MAX_NODES"])
    if "container_class" in san_data:
        san_data["container_class"] = _container_class(str(san_data["container_class"]))
    sanitizer = SanitizerConfig(**san_data)

    md_data = yaml_data.get("markdown", {})
    markdown = MarkdownConfig(**md_data)

    return AppConfig(sanitizer=sanitizer, markdown=markdown)
