"""Exception hierarchy for changelog-importer.

Only run-level preconditions raise. Malformed changelog text never does:
the detector, parser and validator degrade to warnings instead.
"""

from __future__ import annotations


class ImporterError(Exception):
    """Base exception for all changelog-importer errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class NoEntriesFoundError(ImporterError):
    """Parsing produced zero entries, so there is nothing to import."""


class InvalidImportOptionsError(ImporterError):
    """Import options contain unknown enum values."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        super().__init__("Invalid import options: " + "; ".join(errors))


class PermissionDeniedError(ImporterError):
    """The actor may not import into the target."""

    def __init__(self, reason: str | None = None) -> None:
        self.reason = reason or "Insufficient permissions"
        super().__init__(self.reason)


class StorageError(ImporterError):
    """The storage collaborator failed.

    Raised by host ChangelogStore implementations. The processor reports it
    like any other storage exception.
    """


class ImportCancelledError(ImporterError):
    """The import run was cancelled before it completed."""

    def __init__(self, message: str = "Import cancelled") -> None:
        super().__init__(message)


class ConfigError(ImporterError):
    """Base exception for configuration problems."""


class ConfigNotFoundError(ConfigError):
    """No pyproject.toml could be located."""


class ConfigValidationError(ConfigError):
    """The [tool.changelog-importer] section holds invalid values."""
