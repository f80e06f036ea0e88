"""Configuration management for changelog-importer."""

from __future__ import annotations

from changelog_importer.config.loader import load_config
from changelog_importer.config.models import ImporterConfig

__all__ = [
    "ImporterConfig",
    "load_config",
]
