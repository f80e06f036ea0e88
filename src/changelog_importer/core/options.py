"""Import options and their validation."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from changelog_importer.core.models import ConflictResolution, DateHandling, ImportStrategy
from changelog_importer.exceptions import InvalidImportOptionsError

_ENUM_FIELDS: tuple[tuple[str, str, type[StrEnum]], ...] = (
    ("strategy", "strategy", ImportStrategy),
    ("conflict_resolution", "conflict resolution", ConflictResolution),
    ("date_handling", "date handling", DateHandling),
)


class ImportOptions(BaseModel):
    """Per-invocation import configuration."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    strategy: ImportStrategy = ImportStrategy.MERGE
    conflict_resolution: ConflictResolution = ConflictResolution.SKIP
    date_handling: DateHandling = DateHandling.PRESERVE
    auto_generate_versions: bool = False
    publish_imported_entries: bool = False
    preserve_existing_entries: bool = True
    default_tags: list[str] = Field(default_factory=list)

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any]) -> ImportOptions:
        """Build options from loosely typed input such as a request body.

        Raises:
            InvalidImportOptionsError: If an enum field holds an unknown value,
                a key is unknown or a value has the wrong type
        """
        check = validate_import_options(options)
        if not check.is_valid:
            raise InvalidImportOptionsError(check.errors)
        try:
            return cls.model_validate(
                {key: value for key, value in options.items() if value is not None}
            )
        except ValidationError as e:
            errors = [
                f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
            ]
            raise InvalidImportOptionsError(errors) from e


@dataclass
class OptionsValidation:
    is_valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def validate_import_options(options: Mapping[str, Any]) -> OptionsValidation:
    """Check a partial set of import options.

    Unknown enum values are errors. Replacing while asking to preserve
    existing entries is contradictory and produces a warning only.
    """
    errors: list[str] = []
    warnings: list[str] = []

    for key, label, enum_type in _ENUM_FIELDS:
        value = options.get(key)
        allowed = [member.value for member in enum_type]
        if value is not None and value not in allowed:
            errors.append(f"Invalid {label}: {value}. Must be one of: {', '.join(allowed)}")

    if options.get("strategy") == ImportStrategy.REPLACE and options.get(
        "preserve_existing_entries"
    ):
        warnings.append(
            "Replace strategy with preserve existing entries may cause unexpected behavior"
        )

    return OptionsValidation(is_valid=not errors, errors=errors, warnings=warnings)
