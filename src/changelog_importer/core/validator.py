"""Entry validation and import preview generation.

Everything here is a pure function of the entries passed in. Validation
problems are reported per field and never raise; an entry is valid when
it has no error-severity issues, whatever its warnings.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field, fields
from datetime import date
from typing import Any

from changelog_importer.core.models import (
    ImportPreview,
    IssueType,
    ParsedChangelogEntry,
    Severity,
    SuggestedMappings,
    ValidatedEntry,
    ValidationIssue,
)

MAX_TITLE_LENGTH = 200
MAX_CONTENT_LENGTH = 50_000
VERSION_REGEX = re.compile(r"^v?\d+\.\d+\.\d+(?:-[a-zA-Z0-9.-]+)?$")

_VERSION_PREFIX = re.compile(r"^(version|release|v)\s*", re.IGNORECASE)
_LOOSE_VERSION = re.compile(r"(\d+)\.?(\d+)?\.?(\d+)?(?:-(.+))?")
_PRERELEASE_JUNK = re.compile(r"[^A-Za-z0-9.-]")

TAG_SYNONYMS: dict[str, str] = {
    "bug": "fix",
    "bugfix": "fix",
    "bugs": "fix",
    "bug-fixes": "fix",
    "fixes": "fix",
    "feature": "feat",
    "features": "feat",
    "enhancement": "feat",
    "enhancements": "feat",
    "improvement": "feat",
    "improvements": "feat",
    "documentation": "docs",
    "doc": "docs",
    "breaking": "breaking-change",
    "breaking-changes": "breaking-change",
    "performance": "perf",
    "optimization": "perf",
    "optimizations": "perf",
    "security": "security",
    "sec": "security",
    "maintenance": "chore",
    "housekeeping": "chore",
    "misc": "chore",
    "miscellaneous": "chore",
}

_ENTRY_FIELDS = tuple(f.name for f in fields(ParsedChangelogEntry))


def sanitize_version(version: str) -> str | None:
    """Coerce a loose version string into ``MAJOR.MINOR.PATCH[-pre]``.

    Missing minor or patch numbers default to 0. Returns None when the
    string holds no number at all.
    """
    if not version:
        return None

    clean = _VERSION_PREFIX.sub("", version)
    match = _LOOSE_VERSION.search(clean)
    if not match:
        return None

    major, minor, patch, prerelease = match.groups()
    result = f"{major}.{minor or '0'}.{patch or '0'}"

    if prerelease:
        clean_prerelease = _PRERELEASE_JUNK.sub("", prerelease)
        if clean_prerelease:
            result += f"-{clean_prerelease}"

    return result


def normalize_tag(tag: str) -> str:
    """Map a tag onto its conventional name (``bugfix`` -> ``fix``)."""
    normalized = tag.lower().strip()
    return TAG_SYNONYMS.get(normalized, normalized)


def validate_entry(entry: ParsedChangelogEntry) -> ValidatedEntry:
    """Validate a single entry.

    Args:
        entry: Entry produced by the parser

    Returns:
        The same entry with its errors, warnings and suggested fixes
    """
    errors: list[ValidationIssue] = []
    warnings: list[ValidationIssue] = []
    suggested_fixes: dict[str, Any] = {}

    title = entry.title or ""
    if not title.strip():
        errors.append(
            ValidationIssue(
                type=IssueType.MISSING_TITLE,
                message="Entry title is required",
                severity=Severity.ERROR,
                field="title",
            )
        )
    elif len(title) > MAX_TITLE_LENGTH:
        warnings.append(
            ValidationIssue(
                type=IssueType.CONTENT_TOO_LONG,
                message=f"Title is too long ({len(title)} chars, max {MAX_TITLE_LENGTH})",
                severity=Severity.WARNING,
                field="title",
                value=title,
            )
        )
        suggested_fixes["title"] = title[: MAX_TITLE_LENGTH - 3] + "..."

    content = entry.content or ""
    if not content.strip():
        warnings.append(
            ValidationIssue(
                type=IssueType.MISSING_CONTENT,
                message="Entry content is empty",
                severity=Severity.WARNING,
                field="content",
            )
        )
        suggested_fixes["content"] = entry.title
    elif len(content) > MAX_CONTENT_LENGTH:
        errors.append(
            ValidationIssue(
                type=IssueType.CONTENT_TOO_LONG,
                message=f"Content is too long ({len(content)} chars, max {MAX_CONTENT_LENGTH})",
                severity=Severity.ERROR,
                field="content",
                value=f"{len(content)} characters",
            )
        )

    if entry.version and not VERSION_REGEX.match(entry.version):
        warnings.append(
            ValidationIssue(
                type=IssueType.INVALID_VERSION,
                message=f'Version format may be invalid: "{entry.version}"',
                severity=Severity.WARNING,
                field="version",
                value=entry.version,
            )
        )
        sanitized = sanitize_version(entry.version)
        if sanitized:
            suggested_fixes["version"] = sanitized

    if entry.published_at is not None and not isinstance(entry.published_at, date):
        errors.append(
            ValidationIssue(
                type=IssueType.INVALID_DATE,
                message="Published date is invalid",
                severity=Severity.ERROR,
                field="published_at",
                value=str(entry.published_at),
            )
        )

    return ValidatedEntry(
        **{name: getattr(entry, name) for name in _ENTRY_FIELDS},
        errors=tuple(errors),
        warnings=tuple(warnings),
        suggested_fixes=suggested_fixes,
    )


def _duplicates(values: Iterable[str]) -> tuple[str, ...]:
    seen: set[str] = set()
    duplicates: dict[str, None] = {}
    for value in values:
        if value in seen:
            duplicates[value] = None
        seen.add(value)
    return tuple(duplicates)


def _mapping_suggestions(entries: Sequence[ValidatedEntry]) -> SuggestedMappings:
    versions = {
        entry.version: entry.suggested_fixes["version"]
        for entry in entries
        if entry.version and entry.suggested_fixes.get("version")
    }

    tags: dict[str, str] = {}
    for tag in dict.fromkeys(tag for entry in entries for tag in entry.tags):
        normalized = normalize_tag(tag)
        if normalized != tag:
            tags[tag] = normalized

    return SuggestedMappings(versions=versions, tags=tags)


def validate_entries(
    entries: Sequence[ParsedChangelogEntry],
) -> tuple[list[ValidatedEntry], ImportPreview]:
    """Validate a batch and summarise it for preview.

    Duplicate versions are names that occur more than once within the
    batch; existing stored entries are not consulted.

    Returns:
        Validated entries in input order and the batch preview
    """
    validated = [validate_entry(entry) for entry in entries]
    valid_count = sum(1 for entry in validated if entry.is_valid)

    preview = ImportPreview(
        total_entries=len(validated),
        valid_entries=valid_count,
        invalid_entries=len(validated) - valid_count,
        duplicate_versions=_duplicates(entry.version for entry in validated if entry.version),
        missing_titles=sum(1 for entry in validated if not (entry.title or "").strip()),
        missing_content=sum(1 for entry in validated if not (entry.content or "").strip()),
        suggested_mappings=_mapping_suggestions(validated),
        warnings=tuple(issue.message for entry in validated for issue in entry.warnings),
        errors=tuple(issue.message for entry in validated for issue in entry.errors),
    )

    return validated, preview


@dataclass(frozen=True)
class VersionConflict:
    entry: ValidatedEntry
    existing_version: str


@dataclass(frozen=True)
class TitleConflict:
    entry: ValidatedEntry
    similar_title: str


@dataclass
class ConflictReport:
    version_conflicts: list[VersionConflict] = field(default_factory=list)
    title_conflicts: list[TitleConflict] = field(default_factory=list)

    @property
    def has_conflicts(self) -> bool:
        return bool(self.version_conflicts or self.title_conflicts)


def check_conflicts(
    entries: Sequence[ValidatedEntry],
    existing_versions: Iterable[str],
    existing_titles: Iterable[str] = (),
) -> ConflictReport:
    """Flag entries that would collide with data the caller already holds.

    Versions are compared exactly. Titles are compared case-insensitively
    after trimming.
    """
    versions = set(existing_versions)
    titles = {title.strip().lower(): title for title in existing_titles if title}
    report = ConflictReport()

    for entry in entries:
        if entry.version and entry.version in versions:
            report.version_conflicts.append(VersionConflict(entry, entry.version))
        similar = titles.get((entry.title or "").strip().lower())
        if similar is not None:
            report.title_conflicts.append(TitleConflict(entry, similar))

    return report
