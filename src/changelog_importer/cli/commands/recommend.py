"""Implementation of the 'recommend' command."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.panel import Panel

from changelog_importer.cli.commands.common import read_changelog
from changelog_importer.core.service import ChangelogImportService

if TYPE_CHECKING:
    from rich.console import Console


def run_recommend(path: str, console: Console, err_console: Console) -> None:
    """Print suggested import options for a changelog file.

    Args:
        path: Changelog file to analyse
        console: Console for standard output
        err_console: Console for error output
    """
    content = read_changelog(path, err_console)
    advice = ChangelogImportService.get_import_recommendations(content)

    lines = [f"Strategy: [green]{advice.recommended_strategy}[/]", ""]
    lines += [f"  {key} = [cyan]{value}[/]" for key, value in advice.recommended_options.items()]
    console.print(Panel("\n".join(lines), title="Recommended Options", border_style="green"))

    for warning in advice.warnings:
        console.print(f"[yellow]Warning:[/] {warning}")
    for suggestion in advice.suggestions:
        console.print(f"[dim]•[/] {suggestion}")
