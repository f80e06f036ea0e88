"""Data model for parsed, validated and imported changelog entries.

Pipeline records (parsed entries, sections, validated entries, previews) are
frozen dataclasses that live for a single preview or import call. The
result and stats records are mutable because the processor fills them in
while it runs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import StrEnum
from typing import Any


class ImportFormat(StrEnum):
    """Changelog conventions recognised by the format detector."""

    KEEP_A_CHANGELOG = "keepachangelog"
    GITHUB_RELEASES = "github_releases"
    SIMPLE = "simple"
    CUSTOM = "custom"


class ImportStrategy(StrEnum):
    """How imported entries combine with entries already stored."""

    MERGE = "merge"
    REPLACE = "replace"
    APPEND = "append"


class ConflictResolution(StrEnum):
    """What to do when an imported version already exists."""

    SKIP = "skip"
    OVERWRITE = "overwrite"
    PROMPT = "prompt"


class DateHandling(StrEnum):
    """Which timestamps imported entries receive."""

    PRESERVE = "preserve"
    CURRENT = "current"
    SEQUENCE = "sequence"


class Severity(StrEnum):
    ERROR = "error"
    WARNING = "warning"


class IssueType(StrEnum):
    """Kinds of problems the validator reports."""

    MISSING_TITLE = "missing_title"
    MISSING_CONTENT = "missing_content"
    INVALID_VERSION = "invalid_version"
    DUPLICATE_VERSION = "duplicate_version"
    INVALID_DATE = "invalid_date"
    CONTENT_TOO_LONG = "content_too_long"


@dataclass(frozen=True)
class EntryMetadata:
    original_index: int
    has_content: bool
    estimated_reading_time: int


@dataclass(frozen=True)
class ParsedChangelogEntry:
    """A single release recovered from changelog text."""

    title: str
    content: str = ""
    version: str | None = None
    published_at: date | None = None
    tags: tuple[str, ...] = ()
    metadata: EntryMetadata | None = None


@dataclass(frozen=True)
class ChangelogSection:
    """A header seen while scanning, kept for diagnostics."""

    heading: str
    level: int
    content: str = ""
    raw_content: str = ""
    entries: tuple[ParsedChangelogEntry, ...] = ()


@dataclass(frozen=True)
class ParseMetadata:
    total_sections: int
    total_entries: int
    has_versions: bool
    has_dates: bool
    original_format: ImportFormat
    parse_warnings: tuple[str, ...] = ()


@dataclass(frozen=True)
class ParsedChangelog:
    sections: tuple[ChangelogSection, ...]
    entries: tuple[ParsedChangelogEntry, ...]
    metadata: ParseMetadata


@dataclass(frozen=True)
class FormatStructure:
    has_version_headers: bool = False
    has_date_headers: bool = False
    has_type_headers: bool = False
    uses_list_format: bool = False
    uses_markdown_syntax: bool = False


@dataclass(frozen=True)
class FormatDetectionResult:
    format: ImportFormat
    confidence: float
    characteristics: tuple[str, ...]
    structure: FormatStructure


@dataclass(frozen=True)
class ValidationIssue:
    """A field-level validation finding."""

    type: IssueType
    message: str
    severity: Severity
    field: str | None = None
    value: str | None = None


@dataclass(frozen=True)
class ValidatedEntry(ParsedChangelogEntry):
    """A parsed entry together with its validation outcome.

    ``is_valid`` is derived from ``errors`` so it can never disagree with
    them; warnings never affect validity.
    """

    errors: tuple[ValidationIssue, ...] = ()
    warnings: tuple[ValidationIssue, ...] = ()
    suggested_fixes: dict[str, Any] = field(default_factory=dict, hash=False)

    @property
    def is_valid(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class SuggestedMappings:
    versions: dict[str, str] = field(default_factory=dict)
    tags: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ImportPreview:
    """Batch-level summary shown before anything is written."""

    total_entries: int
    valid_entries: int
    invalid_entries: int
    duplicate_versions: tuple[str, ...]
    missing_titles: int
    missing_content: int
    suggested_mappings: SuggestedMappings
    warnings: tuple[str, ...]
    errors: tuple[str, ...]


@dataclass(frozen=True)
class CreatedEntry:
    id: str
    title: str
    version: str | None = None


@dataclass(frozen=True)
class EntryError:
    entry: ParsedChangelogEntry | None
    error: str


@dataclass
class ImportResult:
    """Outcome of one import run.

    ``success`` is a "mostly succeeded" signal: it is true when fewer than
    half of the submitted entries errored. Callers that need an
    all-or-nothing guarantee should inspect ``error_count`` directly.
    """

    success: bool = False
    imported_count: int = 0
    skipped_count: int = 0
    error_count: int = 0
    created_entries: list[CreatedEntry] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    errors: list[EntryError] = field(default_factory=list)
    processing_time: timedelta = timedelta(0)


@dataclass
class ImportStats:
    start_time: datetime
    processed: int = 0
    imported: int = 0
    skipped: int = 0
    errors: int = 0
    end_time: datetime | None = None
