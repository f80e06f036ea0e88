"""Implementation of the 'check' command.

Runs the cheap content pre-flight check that hosts perform before
showing an import dialog.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from changelog_importer.cli.commands.common import read_changelog
from changelog_importer.core.service import ChangelogImportService

if TYPE_CHECKING:
    from rich.console import Console


def run_check(path: str, console: Console, err_console: Console) -> None:
    """Run the content pre-flight check, exiting with status 1 on errors.

    Args:
        path: Changelog file to check
        console: Console for standard output
        err_console: Console for error output
    """
    content = read_changelog(path, err_console)
    check = ChangelogImportService.validate_content(content)

    stats = check.stats
    console.print(
        f"{stats.character_count} characters, {stats.line_count} lines, "
        f"~{stats.estimated_entries} entries"
    )
    for warning in check.warnings:
        console.print(f"[yellow]Warning:[/] {warning}")

    if not check.is_valid:
        for error in check.errors:
            err_console.print(f"[red]Error:[/] {error}")
        raise SystemExit(1)

    console.print("[green]✓[/] Content looks importable")
