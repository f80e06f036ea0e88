"""Core business logic for changelog-importer.

This package contains the import pipeline:
- Format detection for common changelog conventions
- Markdown parsing into versioned entries
- Entry validation and import previews
- Conflict resolution and writes against a changelog store
"""

from __future__ import annotations

from changelog_importer.core.detector import detect_format
from changelog_importer.core.models import (
    ChangelogSection,
    ConflictResolution,
    DateHandling,
    FormatDetectionResult,
    ImportFormat,
    ImportPreview,
    ImportResult,
    ImportStrategy,
    ParsedChangelog,
    ParsedChangelogEntry,
    ValidatedEntry,
    ValidationIssue,
)
from changelog_importer.core.options import ImportOptions, validate_import_options
from changelog_importer.core.parser import parse_changelog
from changelog_importer.core.processor import ImportProcessor
from changelog_importer.core.service import ChangelogImportService
from changelog_importer.core.validator import check_conflicts, validate_entries, validate_entry

__all__ = [
    # Models
    "ChangelogSection",
    "ConflictResolution",
    "DateHandling",
    "FormatDetectionResult",
    "ImportFormat",
    "ImportPreview",
    "ImportResult",
    "ImportStrategy",
    "ParsedChangelog",
    "ParsedChangelogEntry",
    "ValidatedEntry",
    "ValidationIssue",
    # Options
    "ImportOptions",
    "validate_import_options",
    # Pipeline
    "ChangelogImportService",
    "ImportProcessor",
    "check_conflicts",
    "detect_format",
    "parse_changelog",
    "validate_entries",
    "validate_entry",
]
