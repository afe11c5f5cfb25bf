"""CLI entry point for umlmacro."""

from __future__ import annotations

import sys
from pathlib import Path

import typer
import yaml
from rich.console import Console
from rich.markup import escape

import umlmacro
from umlmacro.config import MacroConfig, load_config
from umlmacro.errors import ConfigurationError, MacroError
from umlmacro.formats import ImageFormat
from umlmacro.http_client import close_client
from umlmacro.keys import artifact_key
from umlmacro.logging import configure_logging
from umlmacro.macro import MacroContext, create_macro
from umlmacro.parameters import MacroParameters
from umlmacro.store import ImageStore

app = typer.Typer(
    name="umlmacro",
    help="Render PlantUML diagrams to cached images and HTML fragments.",
    no_args_is_help=True,
)

# Fragments go to stdout; diagnostics go to stderr
_stderr_console = Console(stderr=True)

ConfigOption = typer.Option(None, "--config", "-c", help="Path to umlmacro.yaml.")


def _version_callback(value: bool) -> None:
    if value:
        print(f"umlmacro {umlmacro.__version__}")
        raise typer.Exit()


def _read_source(source: Path) -> str:
    if str(source) == "-":
        return sys.stdin.read()
    try:
        return source.read_text(encoding="utf-8")
    except OSError as e:
        _stderr_console.print(f"[red]Cannot read {source}: {escape(str(e))}[/red]")
        raise typer.Exit(1) from e


def _load(config_path: Path | None) -> MacroConfig:
    try:
        config = load_config(config_path)
    except ConfigurationError as e:
        _stderr_console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1) from e
    configure_logging(config.log_level)
    return config


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Render PlantUML diagrams to cached images and HTML fragments.

    Commands:
        render  - Render a diagram and print its HTML fragment
        key     - Print the artifact key of a diagram
        clean   - Evict expired artifacts from the image store
        config  - Show the effective configuration
    """


@app.command()
def render(
    source: Path = typer.Argument(..., help="PlantUML source file ('-' for stdin)."),
    fmt: str | None = typer.Option(None, "--format", "-f", help="png, svg, svg_inline or txt."),
    server: str | None = typer.Option(None, "--server", "-s", help="PlantUML server URL."),
    inline: bool = typer.Option(False, "--inline", help="Render for inline display."),
    image_tag: bool = typer.Option(False, "--image-tag", help="Use <img/> for SVG output."),
    scale_fit: bool = typer.Option(False, "--scale-fit", help="Fit SVG output to page width."),
    config_path: Path | None = ConfigOption,
) -> None:
    """Render a diagram and print its HTML fragment."""
    config = _load(config_path)
    content = _read_source(source)

    if fmt is not None and ImageFormat.parse(fmt) is None:
        _stderr_console.print(f"[red]Unknown format {escape(repr(fmt))}[/red]")
        raise typer.Exit(2)

    parameters = MacroParameters(
        server=server, format=fmt, image_tag=image_tag, scale_fit=scale_fit
    )
    macro = create_macro(config)
    try:
        fragment = macro.execute(
            parameters, content, MacroContext(is_inline=inline, immediate=True)
        )
    except MacroError as e:
        _stderr_console.print(f"[red]{escape(str(e))}[/red]")
        if e.__cause__ is not None:
            _stderr_console.print(f"[dim]{escape(str(e.__cause__))}[/dim]")
        raise typer.Exit(1) from e
    finally:
        macro.close()
        close_client()

    print(fragment.to_html())


@app.command()
def key(
    source: Path = typer.Argument(..., help="PlantUML source file ('-' for stdin)."),
    fmt: str = typer.Option("png", "--format", "-f", help="png, svg, svg_inline or txt."),
) -> None:
    """Print the artifact key of a diagram."""
    image_format = ImageFormat.parse(fmt)
    if image_format is None:
        _stderr_console.print(f"[red]Unknown format {escape(repr(fmt))}[/red]")
        raise typer.Exit(2)
    print(artifact_key(image_format.request_type, _read_source(source)))


@app.command()
def clean(config_path: Path | None = ConfigOption) -> None:
    """Evict artifacts older than store.ttl from the image store."""
    config = _load(config_path)
    store = ImageStore(
        store_dir=config.get_store_path(), base_url=config.store.base_url, ttl=config.store.ttl
    )
    if config.store.ttl <= 0:
        _stderr_console.print("[yellow]store.ttl is 0, artifacts never expire.[/yellow]")
        return
    try:
        cleaned = store.cleanup()
    except MacroError as e:
        _stderr_console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1) from e
    _stderr_console.print(f"Removed {cleaned} artifact(s) from {store.store_dir}")


@app.command("config")
def show_config(config_path: Path | None = ConfigOption) -> None:
    """Show the effective configuration as YAML."""
    config = _load(config_path)
    print(yaml.safe_dump(config.model_dump(mode="json"), sort_keys=False), end="")


def cli() -> None:
    """Run the CLI application."""
    app()


if __name__ == "__main__":
    cli()
