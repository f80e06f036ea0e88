"""Typer application for changelog-importer.

Every command is read-only: files are parsed and analysed, never
imported, because the changelog store lives in the host application.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from changelog_importer import __version__

app = typer.Typer(
    name="changelog-importer",
    help="Inspect Markdown changelogs before importing them.",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)

FileArgument = Annotated[str, typer.Argument(help="Path to a Markdown changelog")]


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"changelog-importer {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show version"),
    ] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
) -> None:
    from changelog_importer.config import load_config
    from changelog_importer.exceptions import ConfigError
    from changelog_importer.logging_config import setup_logging

    try:
        config = load_config(Path.cwd())
    except ConfigError as e:
        err_console.print(f"[red]Error loading config:[/] {e}")
        raise SystemExit(1) from e

    setup_logging("DEBUG" if verbose else config.log_level, json_logs=config.json_logs)


@app.command()
def detect(path: FileArgument) -> None:
    """Detect the changelog convention a file follows."""
    from changelog_importer.cli.commands.detect import run_detect

    run_detect(path, console, err_console)


@app.command()
def check(path: FileArgument) -> None:
    """Run the pre-flight content check."""
    from changelog_importer.cli.commands.check import run_check

    run_check(path, console, err_console)


@app.command()
def preview(
    path: FileArgument,
    show_issues: Annotated[
        bool, typer.Option("--issues", help="List every validation message")
    ] = False,
) -> None:
    """Parse and validate a changelog without importing it."""
    from changelog_importer.cli.commands.preview import run_preview

    run_preview(path, show_issues, console, err_console)


@app.command()
def recommend(path: FileArgument) -> None:
    """Suggest import options for a changelog."""
    from changelog_importer.cli.commands.recommend import run_recommend

    run_recommend(path, console, err_console)


def main() -> None:
    app()
