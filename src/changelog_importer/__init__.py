"""Parse, validate and import Markdown changelogs."""

from __future__ import annotations

__version__ = "0.1.0"
