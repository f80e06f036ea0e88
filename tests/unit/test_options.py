"""Tests for import options."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from changelog_importer.core.models import ConflictResolution, DateHandling, ImportStrategy
from changelog_importer.core.options import ImportOptions, validate_import_options
from changelog_importer.exceptions import InvalidImportOptionsError


class TestImportOptions:
    """Tests for the ImportOptions model."""

    def test_defaults(self):
        """Default options merge, skip conflicts and keep source dates."""
        options = ImportOptions()

        assert options.strategy == ImportStrategy.MERGE
        assert options.conflict_resolution == ConflictResolution.SKIP
        assert options.date_handling == DateHandling.PRESERVE
        assert options.auto_generate_versions is False
        assert options.publish_imported_entries is False
        assert options.preserve_existing_entries is True
        assert options.default_tags == []

    def test_string_values_are_coerced(self):
        options = ImportOptions(strategy="replace", date_handling="current")

        assert options.strategy == ImportStrategy.REPLACE
        assert options.date_handling == DateHandling.CURRENT

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            ImportOptions(stratgy="merge")

    def test_frozen(self):
        options = ImportOptions()

        with pytest.raises(ValidationError):
            options.strategy = ImportStrategy.APPEND

    def test_from_mapping(self):
        """Missing and None values fall back to defaults."""
        options = ImportOptions.from_mapping(
            {"strategy": "append", "conflict_resolution": None, "default_tags": ["imported"]}
        )

        assert options.strategy == ImportStrategy.APPEND
        assert options.conflict_resolution == ConflictResolution.SKIP
        assert options.default_tags == ["imported"]

    def test_from_mapping_invalid(self):
        """Unknown enum values raise with every problem listed."""
        with pytest.raises(InvalidImportOptionsError) as exc_info:
            ImportOptions.from_mapping({"strategy": "upsert", "date_handling": "never"})

        assert len(exc_info.value.errors) == 2
        assert "Invalid strategy: upsert" in str(exc_info.value)

    def test_from_mapping_unknown_key(self):
        """Unknown keys, such as camelCase request fields, are rejected."""
        with pytest.raises(InvalidImportOptionsError) as exc_info:
            ImportOptions.from_mapping({"strategy": "merge", "defaultTags": ["x"]})

        assert len(exc_info.value.errors) == 1
        assert exc_info.value.errors[0].startswith("defaultTags:")

    def test_from_mapping_wrong_type(self):
        """Values of the wrong type are rejected."""
        with pytest.raises(InvalidImportOptionsError) as exc_info:
            ImportOptions.from_mapping({"publish_imported_entries": "maybe"})

        assert exc_info.value.errors[0].startswith("publish_imported_entries:")


class TestValidateImportOptions:
    """Tests for validate_import_options()."""

    def test_empty_is_valid(self):
        check = validate_import_options({})

        assert check.is_valid
        assert check.errors == []
        assert check.warnings == []

    def test_invalid_values(self):
        check = validate_import_options(
            {"strategy": "upsert", "conflict_resolution": "ask", "date_handling": "never"}
        )

        assert not check.is_valid
        assert check.errors == [
            "Invalid strategy: upsert. Must be one of: merge, replace, append",
            "Invalid conflict resolution: ask. Must be one of: skip, overwrite, prompt",
            "Invalid date handling: never. Must be one of: preserve, current, sequence",
        ]

    def test_replace_with_preserve_warns(self):
        """The contradictory combination warns but stays valid."""
        check = validate_import_options(
            {"strategy": "replace", "preserve_existing_entries": True}
        )

        assert check.is_valid
        assert check.warnings == [
            "Replace strategy with preserve existing entries may cause unexpected behavior"
        ]

    def test_replace_without_preserve(self):
        check = validate_import_options(
            {"strategy": ImportStrategy.REPLACE, "preserve_existing_entries": False}
        )

        assert check.is_valid
        assert check.warnings == []
