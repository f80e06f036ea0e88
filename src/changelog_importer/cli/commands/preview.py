"""Implementation of the 'preview' command.

Parses and validates a changelog file and shows what an import would
contain. Nothing is written anywhere.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.panel import Panel
from rich.table import Table

from changelog_importer.cli.commands.common import read_changelog
from changelog_importer.core.service import ChangelogImportService

if TYPE_CHECKING:
    from rich.console import Console


def run_preview(path: str, show_issues: bool, console: Console, err_console: Console) -> None:
    """Run the preview command.

    Args:
        path: Changelog file to preview
        show_issues: Whether to list every warning and error message
        console: Console for standard output
        err_console: Console for error output
    """
    content = read_changelog(path, err_console)
    outcome = ChangelogImportService.preview_import(content)
    parsed, preview = outcome.parsed, outcome.preview

    for warning in parsed.metadata.parse_warnings:
        err_console.print(f"[yellow]Warning:[/] {warning}")

    if not parsed.entries:
        err_console.print("[red]Error:[/] No valid entries found in the provided content")
        raise SystemExit(1)

    table = Table(title=f"Entries ({parsed.metadata.original_format})")
    table.add_column("#", justify="right")
    table.add_column("Title")
    table.add_column("Version")
    table.add_column("Date")
    table.add_column("Tags")
    table.add_column("Status")

    for index, entry in enumerate(outcome.validated_entries, start=1):
        if not entry.is_valid:
            status = "[red]invalid[/]"
        elif entry.warnings:
            status = f"[yellow]{len(entry.warnings)} warning(s)[/]"
        else:
            status = "[green]ok[/]"
        table.add_row(
            str(index),
            entry.title,
            entry.version or "",
            entry.published_at.isoformat() if entry.published_at else "",
            ", ".join(entry.tags),
            status,
        )
    console.print(table)

    summary = [
        f"Total: [bold]{preview.total_entries}[/]",
        f"Valid: [green]{preview.valid_entries}[/]",
        f"Invalid: [red]{preview.invalid_entries}[/]",
    ]
    if preview.duplicate_versions:
        summary.append(f"Duplicate versions: [yellow]{', '.join(preview.duplicate_versions)}[/]")
    for original, suggested in preview.suggested_mappings.versions.items():
        summary.append(f"Version [cyan]{original}[/] → [green]{suggested}[/]")
    for original, suggested in preview.suggested_mappings.tags.items():
        summary.append(f"Tag [cyan]{original}[/] → [green]{suggested}[/]")

    console.print(Panel("\n".join(summary), title="Import Preview", border_style="cyan"))

    if show_issues:
        for message in preview.errors:
            console.print(f"  [red]✗[/] {message}")
        for message in preview.warnings:
            console.print(f"  [yellow]![/] {message}")
