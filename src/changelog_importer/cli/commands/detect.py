"""Implementation of the 'detect' command."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.table import Table

from changelog_importer.cli.commands.common import read_changelog
from changelog_importer.core.service import ChangelogImportService

if TYPE_CHECKING:
    from rich.console import Console


def run_detect(path: str, console: Console, err_console: Console) -> None:
    """Print the detected changelog format and structural signals.

    Args:
        path: Changelog file to inspect
        console: Console for standard output
        err_console: Console for error output
    """
    content = read_changelog(path, err_console)
    detection = ChangelogImportService.detect_format(content)

    console.print(
        f"Format: [cyan]{detection.format}[/] "
        f"(confidence [green]{detection.confidence:.0%}[/])"
    )
    for characteristic in detection.characteristics:
        console.print(f"  • {characteristic}")

    table = Table(title="Structure", show_header=False)
    table.add_column("Signal")
    table.add_column("Present")
    structure = detection.structure
    for label, present in (
        ("Version headers", structure.has_version_headers),
        ("Date headers", structure.has_date_headers),
        ("Type headers", structure.has_type_headers),
        ("List format", structure.uses_list_format),
        ("Markdown syntax", structure.uses_markdown_syntax),
    ):
        table.add_row(label, "[green]yes[/]" if present else "[dim]no[/]")
    console.print(table)
