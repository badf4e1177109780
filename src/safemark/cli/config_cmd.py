"""Configuration inspection CLI commands."""

from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from safemark.core.config import load_config
from safemark.sanitize.policy import ALLOWED_CSS_PROPERTIES, ALLOWED_TAGS, STRIPPED_TAGS

console = Console()
config_app = typer.Typer(name="config", help="Configuration and policy inspection.")


@config_app.command("show")
def show(
    path: Optional[str] = typer.Option(None, "--config", help="Path to a YAML config file"),
) -> None:
    """Show the effective configuration."""
    cfg = load_config(path)

    table = Table(title="safemark configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="white")

    san = cfg.sanitizer
    table.add_row("sanitizer.container_class", san.container_class)
    table.add_row("sanitizer.scope_aliases", ", ".join(san.scope_aliases) or "—")
    table.add_row("sanitizer.max_depth", str(san.max_depth))
    table.add_row("sanitizer.max_nodes", str(san.max_nodes))

    md = cfg.markdown
    table.add_row("markdown.extensions", ", ".join(md.extensions) or "—")
    table.add_row("markdown.mermaid", "[green]on[/green]" if md.mermaid else "[red]off[/red]")
    table.add_row("markdown.link_target", md.link_target or "—")

    console.print(table)


@config_app.command("policy")
def policy() -> None:
    """List the built-in tag and CSS property allow-lists."""
    table = Table(title="Allow-list policy")
    table.add_column("List", style="cyan")
    table.add_column("Entries", style="white")
    table.add_row("Allowed tags", ", ".join(sorted(ALLOWED_TAGS)))
    table.add_row("Stripped tags", ", ".join(sorted(STRIPPED_TAGS)))
    table.add_row("CSS properties", ", ".join(sorted(ALLOWED_CSS_PROPERTIES)))
    console.print(table)
