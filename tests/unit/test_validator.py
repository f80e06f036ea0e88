"""Tests for entry validation, import previews and conflict checks."""

from __future__ import annotations

from datetime import date

import pytest

from changelog_importer.core.models import IssueType, ParsedChangelogEntry, Severity
from changelog_importer.core.validator import (
    MAX_CONTENT_LENGTH,
    MAX_TITLE_LENGTH,
    check_conflicts,
    normalize_tag,
    sanitize_version,
    validate_entries,
    validate_entry,
)


def make_entry(**overrides) -> ParsedChangelogEntry:
    values = {
        "title": "Version 1.0.0",
        "content": "- Initial release",
        "version": "1.0.0",
        "published_at": date(2024, 1, 15),
    }
    values.update(overrides)
    return ParsedChangelogEntry(**values)


class TestValidateEntry:
    """Tests for validate_entry()."""

    def test_valid_entry(self):
        """A complete entry has no issues."""
        validated = validate_entry(make_entry())

        assert validated.is_valid
        assert validated.errors == ()
        assert validated.warnings == ()
        assert validated.suggested_fixes == {}

    def test_entry_fields_are_carried_over(self):
        """The validated entry keeps every parsed field."""
        entry = make_entry(tags=("fix",))

        validated = validate_entry(entry)

        assert validated.title == entry.title
        assert validated.content == entry.content
        assert validated.version == entry.version
        assert validated.published_at == entry.published_at
        assert validated.tags == ("fix",)

    def test_missing_title(self):
        """Blank titles are errors."""
        validated = validate_entry(make_entry(title="   "))

        assert not validated.is_valid
        assert validated.errors[0].type == IssueType.MISSING_TITLE
        assert validated.errors[0].field == "title"
        assert validated.errors[0].message == "Entry title is required"

    def test_long_title_is_a_warning_with_truncation(self):
        """Long titles stay valid and get a truncated suggestion."""
        validated = validate_entry(make_entry(title="x" * 250))

        assert validated.is_valid
        assert len(validated.warnings) == 1
        assert validated.warnings[0].type == IssueType.CONTENT_TOO_LONG
        assert validated.warnings[0].severity == Severity.WARNING
        assert "250 chars" in validated.warnings[0].message
        fix = validated.suggested_fixes["title"]
        assert len(fix) == MAX_TITLE_LENGTH
        assert fix.endswith("...")

    def test_missing_content_is_a_warning(self):
        """Empty content suggests reusing the title."""
        validated = validate_entry(make_entry(content=""))

        assert validated.is_valid
        assert validated.warnings[0].type == IssueType.MISSING_CONTENT
        assert validated.suggested_fixes["content"] == "Version 1.0.0"

    def test_content_too_long_is_an_error(self):
        """Content beyond the limit makes the entry invalid."""
        validated = validate_entry(make_entry(content="a" * (MAX_CONTENT_LENGTH + 1)))

        assert not validated.is_valid
        issue = validated.errors[0]
        assert issue.type == IssueType.CONTENT_TOO_LONG
        assert issue.field == "content"
        assert issue.value == f"{MAX_CONTENT_LENGTH + 1} characters"

    def test_content_at_limit_is_valid(self):
        validated = validate_entry(make_entry(content="a" * MAX_CONTENT_LENGTH))

        assert validated.is_valid

    def test_invalid_version_warns_with_suggestion(self):
        """Loose versions are warned about and normalised."""
        validated = validate_entry(make_entry(version="1.2"))

        assert validated.is_valid
        assert validated.warnings[0].type == IssueType.INVALID_VERSION
        assert validated.warnings[0].message == 'Version format may be invalid: "1.2"'
        assert validated.suggested_fixes["version"] == "1.2.0"

    def test_prefixed_version_is_accepted(self):
        """A leading v is part of the accepted version format."""
        assert validate_entry(make_entry(version="v2.0.0-beta.1")).warnings == ()

    def test_invalid_date(self):
        """A published date that is not a date is an error."""
        validated = validate_entry(make_entry(published_at="not-a-date"))

        assert not validated.is_valid
        assert validated.errors[0].type == IssueType.INVALID_DATE
        assert validated.errors[0].value == "not-a-date"

    def test_missing_date_is_fine(self):
        assert validate_entry(make_entry(published_at=None)).is_valid


class TestSanitizeVersion:
    """Tests for sanitize_version()."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("1", "1.0.0"),
            ("1.2", "1.2.0"),
            ("v1.2.3", "1.2.3"),
            ("Version 3.1", "3.1.0"),
            ("release 2.0.0-rc 1!", "2.0.0-rc1"),
        ],
    )
    def test_sanitize(self, raw: str, expected: str):
        assert sanitize_version(raw) == expected

    def test_no_digits(self):
        assert sanitize_version("latest") is None

    def test_empty(self):
        assert sanitize_version("") is None


class TestNormalizeTag:
    """Tests for normalize_tag()."""

    def test_synonyms(self):
        assert normalize_tag("Bug-Fixes") == "fix"
        assert normalize_tag("features") == "feat"

    def test_unknown_tag_is_lowercased(self):
        assert normalize_tag(" Added ") == "added"


class TestValidateEntries:
    """Tests for validate_entries()."""

    def test_preview_counts(self):
        """Valid and invalid counts add up to the total."""
        entries = [
            make_entry(),
            make_entry(title="", version="1.1.0"),
            make_entry(content="", version="1.2.0"),
            make_entry(content="a" * (MAX_CONTENT_LENGTH + 1), version="1.3.0"),
        ]

        validated, preview = validate_entries(entries)

        assert len(validated) == 4
        assert preview.total_entries == 4
        assert preview.valid_entries == 2
        assert preview.invalid_entries == 2
        assert preview.valid_entries + preview.invalid_entries == preview.total_entries
        assert preview.missing_titles == 1
        assert preview.missing_content == 1
        assert "Entry title is required" in preview.errors
        assert "Entry content is empty" in preview.warnings

    def test_order_is_preserved(self):
        entries = [make_entry(version="2.0.0"), make_entry(version="1.0.0")]

        validated, _ = validate_entries(entries)

        assert [e.version for e in validated] == ["2.0.0", "1.0.0"]

    def test_duplicate_versions(self):
        """Versions occurring more than once are reported once each."""
        entries = [
            make_entry(version="1.0.0"),
            make_entry(version="1.0.0"),
            make_entry(version="1.0.0"),
            make_entry(version="2.0.0"),
        ]

        _, preview = validate_entries(entries)

        assert preview.duplicate_versions == ("1.0.0",)

    def test_suggested_mappings(self):
        """Version fixes and tag synonyms are collected for the batch."""
        entries = [
            make_entry(version="1.2", tags=("bug-fixes", "added")),
            make_entry(version="2.0.0", tags=("features",)),
        ]

        _, preview = validate_entries(entries)

        assert preview.suggested_mappings.versions == {"1.2": "1.2.0"}
        assert preview.suggested_mappings.tags == {"bug-fixes": "fix", "features": "feat"}

    def test_empty_batch(self):
        validated, preview = validate_entries([])

        assert validated == []
        assert preview.total_entries == 0
        assert preview.duplicate_versions == ()


class TestCheckConflicts:
    """Tests for check_conflicts()."""

    def test_version_and_title_conflicts(self):
        """Existing versions and similar titles are both reported."""
        validated, _ = validate_entries(
            [
                make_entry(version="1.0.0", title="First"),
                make_entry(version="2.0.0", title="Second Release"),
                make_entry(version="3.0.0", title="Third"),
            ]
        )

        report = check_conflicts(validated, ["1.0.0"], ["second release "])

        assert report.has_conflicts
        assert [c.existing_version for c in report.version_conflicts] == ["1.0.0"]
        assert [c.entry.title for c in report.title_conflicts] == ["Second Release"]
        assert report.title_conflicts[0].similar_title == "second release "

    def test_no_conflicts(self):
        validated, _ = validate_entries([make_entry(version=None)])

        report = check_conflicts(validated, ["1.0.0"])

        assert not report.has_conflicts
