"""Root CLI application: render, sanitize and inspect commands."""

from __future__ import annotations

import logging
import sys
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from safemark.cli.config_cmd import config_app
from safemark.content.render import MarkdownRenderer
from safemark.core.config import load_config
from safemark.sanitize.declarations import sanitize_style_text
from safemark.sanitize.markup import sanitize_markup_html
from safemark.sanitize.stylesheet import sanitize_stylesheet_text
from safemark.sanitize.urls import sanitize_image_src, sanitize_url

err_console = Console(stderr=True)
app = typer.Typer(
    name="safemark",
    help="Render untrusted Markdown and sanitize HTML/CSS for an overlay surface.",
    no_args_is_help=True,
)

app.add_typer(config_app)

_state: dict = {"config_path": None}


@app.callback()
def main(
    config: Optional[str] = typer.Option(None, "--config", help="Path to a YAML config file"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Log dropped markup at DEBUG level"),
) -> None:
    _state["config_path"] = config
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _read_input(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    try:
        with open(path, encoding="utf-8") as f:
            return f.read()
    except OSError as exc:
        err_console.print(f"[red]Cannot read {path}:[/red] {exc}")
        raise typer.Exit(1)


@app.command()
def render(
    path: str = typer.Argument("-", help="Markdown file, or - for stdin"),
) -> None:
    """Render Markdown to sanitized HTML."""
    cfg = load_config(_state["config_path"])
    html = MarkdownRenderer.from_config(cfg).render(_read_input(path))
    typer.echo(html)


@app.command()
def sanitize(
    path: str = typer.Argument("-", help="HTML file, or - for stdin"),
) -> None:
    """Sanitize an HTML fragment."""
    cfg = load_config(_state["config_path"])
    html = sanitize_markup_html(_read_input(path), cfg.sanitizer)
    typer.echo(html)


@app.command()
def style(
    text: str = typer.Argument(..., help="Inline declaration list, e.g. 'color:red;width:10px'"),
) -> None:
    """Reduce an inline style string to its safe declarations."""
    typer.echo(sanitize_style_text(text))


@app.command()
def stylesheet(
    path: str = typer.Argument("-", help="CSS file, or - for stdin"),
) -> None:
    """Sanitize a stylesheet and scope it under the container class."""
    cfg = load_config(_state["config_path"])
    css = sanitize_stylesheet_text(
        _read_input(path),
        cfg.sanitizer.container_class,
        cfg.sanitizer.scope_aliases,
    )
    typer.echo(css)


@app.command()
def url(
    value: str = typer.Argument(..., help="URL to check"),
    image: bool = typer.Option(False, "--image", help="Apply the image-source rules (base64 data: images)"),
) -> None:
    """Check a URL; exits 1 if it is rejected."""
    safe = sanitize_image_src(value) if image else sanitize_url(value)
    if not safe:
        err_console.print("[red]Rejected[/red]")
        raise typer.Exit(1)
    typer.echo(safe)
