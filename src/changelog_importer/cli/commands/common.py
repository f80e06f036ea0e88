"""Helpers shared by CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rich.console import Console


def read_changelog(path: str, err_console: Console) -> str:
    """Read a changelog file as UTF-8, exiting with status 1 on failure."""
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        err_console.print(f"[red]Error reading {path}:[/] {e}")
        raise SystemExit(1) from e
