"""Import orchestration.

``ChangelogImportService`` is the entry point used by hosts such as a CLI
or an HTTP handler. Preview operations only parse and validate; a
complete import additionally hands the validated entries to the
processor, which needs a store and an authorizer.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any

import structlog

from changelog_importer.core.detector import detect_format
from changelog_importer.core.models import (
    ConflictResolution,
    DateHandling,
    FormatDetectionResult,
    ImportPreview,
    ImportResult,
    ImportStrategy,
    ParsedChangelog,
    ValidatedEntry,
)
from changelog_importer.core.options import ImportOptions
from changelog_importer.core.parser import parse_changelog
from changelog_importer.core.processor import ImportProcessor
from changelog_importer.core.validator import validate_entries
from changelog_importer.exceptions import ImporterError, NoEntriesFoundError

if TYPE_CHECKING:
    import threading

    from changelog_importer.config.models import ImporterConfig
    from changelog_importer.storage import Authorizer, ChangelogStore

logger = structlog.get_logger()

MIN_CONTENT_LENGTH = 10
MAX_CONTENT_LENGTH = 1_000_000

_HEADER = re.compile(r"^#+\s")
_LIST_ITEM = re.compile(r"^\s*[-*+]\s")
_MARKDOWN = re.compile(r"[#*`\[\]]")


@dataclass(frozen=True)
class ImportPreviewResult:
    parsed: ParsedChangelog
    preview: ImportPreview
    validated_entries: list[ValidatedEntry]


@dataclass(frozen=True)
class CompleteImportResult:
    parsed: ParsedChangelog
    preview: ImportPreview
    result: ImportResult


@dataclass(frozen=True)
class ContentStats:
    character_count: int
    line_count: int
    estimated_entries: int
    has_markdown: bool


@dataclass(frozen=True)
class ContentCheck:
    is_valid: bool
    errors: list[str]
    warnings: list[str]
    stats: ContentStats


@dataclass(frozen=True)
class ImportHistory:
    """Import statistics for a target.

    Import runs are not recorded separately, so an existing changelog
    counts as a single import.
    """

    total_imports: int
    total_entries_imported: int
    last_import_date: datetime | None = None


@dataclass(frozen=True)
class ImportRecommendations:
    """Advice for the import dialog. Never applied automatically."""

    recommended_strategy: ImportStrategy
    recommended_options: dict[str, Any]
    warnings: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)


class ChangelogImportService:
    """Parse, validate and import changelog text."""

    def __init__(
        self,
        store: ChangelogStore | None = None,
        authorizer: Authorizer | None = None,
        config: ImporterConfig | None = None,
    ) -> None:
        self._store = store
        self._authorizer = authorizer
        self._default_options = config.defaults if config is not None else ImportOptions()

    @staticmethod
    def detect_format(content: str) -> FormatDetectionResult:
        return detect_format(content)

    @staticmethod
    def preview_import(content: str) -> ImportPreviewResult:
        """Parse and validate without writing anything."""
        parsed = parse_changelog(content)
        validated, preview = validate_entries(parsed.entries)
        return ImportPreviewResult(parsed=parsed, preview=preview, validated_entries=validated)

    def perform_complete_import(
        self,
        content: str,
        target_id: str,
        options: ImportOptions | Mapping[str, Any] | None = None,
        actor_id: str = "",
        *,
        cancel_event: threading.Event | None = None,
    ) -> CompleteImportResult:
        """Parse, validate and import ``content`` into ``target_id``.

        Args:
            content: Raw changelog text
            target_id: Destination the changelog belongs to
            options: Options model, loose mapping, or None for configured defaults
            actor_id: Who is importing
            cancel_event: Stops the run before its next write when set

        Returns:
            Parse output, batch preview and the processor's result

        Raises:
            InvalidImportOptionsError: If ``options`` holds unknown values
            NoEntriesFoundError: If the content contains no entries
            ImporterError: If the service has no store or authorizer
        """
        if self._store is None or self._authorizer is None:
            raise ImporterError("A store and an authorizer are required to import")

        if options is None:
            import_options = self._default_options
        elif isinstance(options, ImportOptions):
            import_options = options
        else:
            import_options = ImportOptions.from_mapping(options)

        parsed = parse_changelog(content)
        if not parsed.entries:
            raise NoEntriesFoundError("No valid entries found in the provided content")

        validated, preview = validate_entries(parsed.entries)
        logger.info(
            "import_preview_ready",
            target_id=target_id,
            total=preview.total_entries,
            valid=preview.valid_entries,
            format=str(parsed.metadata.original_format),
        )

        processor = ImportProcessor(self._store, self._authorizer)
        result = processor.process_import(
            target_id, validated, import_options, actor_id, cancel_event=cancel_event
        )
        return CompleteImportResult(parsed=parsed, preview=preview, result=result)

    def get_import_history(self, target_id: str) -> ImportHistory:
        """Summarise what has been imported into ``target_id``.

        Raises:
            ImporterError: If the service has no store
        """
        if self._store is None:
            raise ImporterError("A store is required to read import history")

        collection = self._store.find_collection(target_id)
        if collection is None:
            return ImportHistory(total_imports=0, total_entries_imported=0)

        entries = self._store.list_entries(collection.id)
        timestamps = [entry.created_at for entry in entries if entry.created_at is not None]
        return ImportHistory(
            total_imports=1,
            total_entries_imported=len(entries),
            last_import_date=max(timestamps, default=None),
        )

    @staticmethod
    def validate_content(content: str) -> ContentCheck:
        """Cheap pre-flight check run before a full parse."""
        errors: list[str] = []
        warnings: list[str] = []

        if not content:
            errors.append("Content must be a non-empty string")
        if len(content) < MIN_CONTENT_LENGTH:
            errors.append("Content is too short to contain valid changelog entries")
        if len(content) > MAX_CONTENT_LENGTH:
            errors.append("Content is too large (max 1MB)")

        lines = content.split("\n")
        has_markdown = bool(_MARKDOWN.search(content))
        header_count = sum(1 for line in lines if _HEADER.match(line))
        list_item_count = sum(1 for line in lines if _LIST_ITEM.match(line))

        if not has_markdown and not header_count and not list_item_count:
            warnings.append("Content does not appear to be in a recognized changelog format")

        estimated_entries = max(header_count, list_item_count // 3)
        if estimated_entries == 0:
            warnings.append("No potential changelog entries detected")

        return ContentCheck(
            is_valid=not errors,
            errors=errors,
            warnings=warnings,
            stats=ContentStats(
                character_count=len(content),
                line_count=len(lines),
                estimated_entries=estimated_entries,
                has_markdown=has_markdown,
            ),
        )

    @staticmethod
    def get_import_recommendations(content: str) -> ImportRecommendations:
        """Suggest options based on the size and shape of the content."""
        parsed = parse_changelog(content)
        has_versions = parsed.metadata.has_versions
        has_dates = parsed.metadata.has_dates
        entry_count = len(parsed.entries)

        warnings: list[str] = []
        suggestions: list[str] = []

        if entry_count > 50:
            strategy = ImportStrategy.REPLACE
            warnings.append("Large number of entries detected. Consider using replace strategy.")
        elif entry_count > 10:
            strategy = ImportStrategy.MERGE
            suggestions.append(
                "Medium-sized import. Merge strategy recommended to preserve existing data."
            )
        else:
            strategy = ImportStrategy.APPEND
            suggestions.append("Small import. Append strategy will add entries to existing ones.")

        date_handling = DateHandling.PRESERVE
        if not has_dates:
            date_handling = DateHandling.CURRENT
            warnings.append("No dates found in entries. Consider using current date for all entries.")

        auto_generate_versions = not has_versions and entry_count > 5
        if auto_generate_versions:
            suggestions.append(
                "No versions detected. Auto-generation recommended for better organization."
            )

        publish_imported_entries = entry_count <= 10 and has_versions
        if publish_imported_entries:
            suggestions.append(
                "Small import with versions. Consider publishing entries immediately."
            )

        return ImportRecommendations(
            recommended_strategy=strategy,
            recommended_options={
                "strategy": strategy,
                "date_handling": date_handling,
                "auto_generate_versions": auto_generate_versions,
                "publish_imported_entries": publish_imported_entries,
                "conflict_resolution": ConflictResolution.SKIP,
                "preserve_existing_entries": True,
            },
            warnings=warnings,
            suggestions=suggestions,
        )
