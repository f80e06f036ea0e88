"""Import processing: conflict resolution and transactional writes.

A run moves through a fixed sequence: authorize the actor, look up or
create the target collection, apply the strategy (``replace`` wipes and
writes inside one transaction, ``merge``/``append`` resolve version
conflicts against a snapshot of stored entries and write entry by entry),
then summarise.

Run-level failures (authorization, collection lookup, conflict setup, a
failed transaction) abort the whole run and report every entry as
errored. A failed write of a single entry is recorded and the run moves
on. No locking is done here: the existing-version snapshot is read once
per run, so concurrent imports into the same target can both write the
same version unless the store's isolation prevents it.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta

import structlog

from changelog_importer.core.models import (
    ConflictResolution,
    CreatedEntry,
    DateHandling,
    EntryError,
    ImportResult,
    ImportStats,
    ImportStrategy,
    ValidatedEntry,
)
from changelog_importer.core.options import ImportOptions, validate_import_options
from changelog_importer.exceptions import ImportCancelledError, PermissionDeniedError
from changelog_importer.storage import Authorizer, ChangelogStore, EntryData

logger = structlog.get_logger()

REPLACED_WARNING = "All existing entries were replaced"
FAILED_VALIDATION = "Entry failed validation"


@dataclass
class _ImportRun:
    """State owned by a single ``process_import`` call."""

    target_id: str
    collection_id: str
    actor_id: str
    options: ImportOptions
    stats: ImportStats
    result: ImportResult
    cancel_event: threading.Event | None = None
    # Positions of entries that have not reached a final state yet
    pending: dict[int, ValidatedEntry] = field(default_factory=dict)

    def check_cancelled(self) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise ImportCancelledError()


def _as_datetime(value: date) -> datetime:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    return datetime(value.year, value.month, value.day, tzinfo=UTC)


def entry_timestamps(
    entry: ValidatedEntry,
    options: ImportOptions,
    now: datetime,
) -> tuple[datetime, datetime | None]:
    """Return ``(created_at, published_at)`` for an entry about to be written.

    ``sequence`` currently behaves like ``current``.
    """
    if options.date_handling == DateHandling.PRESERVE and entry.published_at:
        created_at = _as_datetime(entry.published_at)
    else:
        created_at = now
    return created_at, created_at if options.publish_imported_entries else None


class ImportProcessor:
    """Write validated entries into a changelog store."""

    def __init__(self, store: ChangelogStore, authorizer: Authorizer) -> None:
        self._store = store
        self._authorizer = authorizer

    def process_import(
        self,
        target_id: str,
        validated_entries: Sequence[ValidatedEntry],
        options: ImportOptions,
        actor_id: str,
        *,
        cancel_event: threading.Event | None = None,
    ) -> ImportResult:
        """Import validated entries into the target's changelog.

        Args:
            target_id: Destination the changelog belongs to
            validated_entries: Output of the validator, in source order
            options: Strategy, conflict resolution and date handling
            actor_id: Who is importing, checked with the authorizer
            cancel_event: When set, the run stops before its next write

        Returns:
            Counts, created entries, warnings and per-entry errors. This
            method does not raise; run-level failures are reported in
            the result.
        """
        entries = list(validated_entries)
        started = time.perf_counter()
        result = ImportResult()
        run_log = logger.bind(target_id=target_id, actor_id=actor_id, entries=len(entries))

        run_log.info(
            "import_started",
            strategy=str(options.strategy),
            conflict_resolution=str(options.conflict_resolution),
            date_handling=str(options.date_handling),
        )

        option_check = validate_import_options(options.model_dump())
        result.warnings.extend(option_check.warnings)

        run: _ImportRun | None = None
        try:
            self._authorize(actor_id, target_id)
            collection = self._store.find_or_create_collection(target_id)
            run = _ImportRun(
                target_id=target_id,
                collection_id=collection.id,
                actor_id=actor_id,
                options=options,
                stats=ImportStats(start_time=datetime.now(UTC)),
                result=result,
                cancel_event=cancel_event,
                pending=dict(enumerate(entries)),
            )

            if options.strategy == ImportStrategy.REPLACE:
                removed = self._store.run_in_transaction(
                    lambda tx: self._replace(tx, run, entries)
                )
                # Only reported once the transaction has committed
                if removed is not None:
                    result.warnings.append(REPLACED_WARNING)
            else:
                self._merge_or_append(run, entries)

        except ImportCancelledError as e:
            if run is not None and options.strategy != ImportStrategy.REPLACE:
                run_log.warning("import_cancelled", remaining=len(run.pending))
                self._fail_pending(run, e.message)
            else:
                result = self._abort(entries, e.message, result.warnings)
                run_log.warning("import_cancelled", remaining=len(entries))
        except Exception as e:
            message = str(e) or type(e).__name__
            result = self._abort(entries, message, result.warnings)
            run_log.error("import_aborted", error=message, error_type=type(e).__name__)

        if run is not None:
            run.stats.end_time = datetime.now(UTC)

        result.processing_time = timedelta(seconds=time.perf_counter() - started)
        result.success = result.error_count < len(entries) / 2

        run_log.info(
            "import_completed",
            success=result.success,
            imported=result.imported_count,
            skipped=result.skipped_count,
            errors=result.error_count,
            duration_ms=round(result.processing_time.total_seconds() * 1000, 2),
        )
        return result

    def _authorize(self, actor_id: str, target_id: str) -> None:
        decision = self._authorizer.can_import(actor_id, target_id)
        if not decision.allowed:
            raise PermissionDeniedError(decision.reason)

    @staticmethod
    def _abort(entries: list[ValidatedEntry], message: str, warnings: list[str]) -> ImportResult:
        return ImportResult(
            error_count=len(entries),
            warnings=list(warnings),
            errors=[EntryError(entry=entry, error=message) for entry in entries],
        )

    @staticmethod
    def _fail_pending(run: _ImportRun, message: str) -> None:
        for entry in run.pending.values():
            run.stats.errors += 1
            run.result.error_count += 1
            run.result.errors.append(EntryError(entry=entry, error=message))
        run.pending.clear()

    def _replace(
        self,
        tx: ChangelogStore,
        run: _ImportRun,
        entries: list[ValidatedEntry],
    ) -> int | None:
        """Write the batch inside a transaction.

        Returns:
            Number of entries deleted, or None when existing entries were kept
        """
        removed: int | None = None
        if not run.options.preserve_existing_entries:
            run.check_cancelled()
            removed = tx.delete_all_entries(run.collection_id)
            logger.info("existing_entries_removed", collection_id=run.collection_id, removed=removed)

        self._import_entries(tx, run, list(enumerate(entries)))
        return removed

    def _merge_or_append(self, run: _ImportRun, entries: list[ValidatedEntry]) -> None:
        existing = self._store.list_entries(run.collection_id)
        existing_versions = {entry.version for entry in existing if entry.version}
        to_import = self._resolve_conflicts(run, entries, existing_versions)
        self._import_entries(self._store, run, to_import)

    def _resolve_conflicts(
        self,
        run: _ImportRun,
        entries: list[ValidatedEntry],
        existing_versions: set[str],
    ) -> list[tuple[int, ValidatedEntry]]:
        resolution = run.options.conflict_resolution
        to_import: list[tuple[int, ValidatedEntry]] = []

        for position, entry in enumerate(entries):
            if not (entry.version and entry.version in existing_versions):
                to_import.append((position, entry))
                continue

            if resolution == ConflictResolution.OVERWRITE:
                to_import.append((position, entry))
                run.result.warnings.append(
                    f"Will overwrite existing entry with version: {entry.version}"
                )
                logger.info("version_conflict", version=entry.version, resolution="overwrite")
                continue

            run.stats.skipped += 1
            run.result.skipped_count += 1
            run.pending.pop(position, None)
            if resolution == ConflictResolution.PROMPT:
                # No interactive channel exists here, so prompting degrades to skip
                run.result.warnings.append(
                    f"Conflict detected for version {entry.version} - skipped (would prompt user)"
                )
                logger.info(
                    "version_conflict", version=entry.version, resolution="skip", prompted=True
                )
            else:
                run.result.warnings.append(
                    f"Skipped entry with duplicate version: {entry.version}"
                )
                logger.info("version_conflict", version=entry.version, resolution="skip")

        return to_import

    def _import_entries(
        self,
        store: ChangelogStore,
        run: _ImportRun,
        entries: list[tuple[int, ValidatedEntry]],
    ) -> None:
        for position, entry in entries:
            run.check_cancelled()
            run.stats.processed += 1
            run.pending.pop(position, None)

            if not entry.is_valid:
                run.stats.skipped += 1
                run.result.skipped_count += 1
                run.result.errors.append(EntryError(entry=entry, error=FAILED_VALIDATION))
                continue

            try:
                created = store.create_entry(self._prepare_entry_data(store, run, entry))
            except Exception as e:
                message = str(e) or "Failed to create entry"
                run.stats.errors += 1
                run.result.error_count += 1
                run.result.errors.append(EntryError(entry=entry, error=message))
                logger.warning("entry_import_failed", title=entry.title, error=message)
                continue

            run.stats.imported += 1
            run.result.imported_count += 1
            run.result.created_entries.append(
                CreatedEntry(id=created.id, title=created.title, version=created.version)
            )

    def _prepare_entry_data(
        self,
        store: ChangelogStore,
        run: _ImportRun,
        entry: ValidatedEntry,
    ) -> EntryData:
        created_at, published_at = entry_timestamps(entry, run.options, datetime.now(UTC))
        return EntryData(
            collection_id=run.collection_id,
            title=entry.title,
            content=entry.content,
            version=entry.version or None,
            created_at=created_at,
            published_at=published_at,
            tag_ids=self._resolve_tags(store, entry.tags, run.options.default_tags),
        )

    @staticmethod
    def _resolve_tags(
        store: ChangelogStore,
        entry_tags: Sequence[str],
        default_tags: Sequence[str],
    ) -> tuple[str, ...]:
        names = dict.fromkeys(tag.strip().lower() for tag in (*entry_tags, *default_tags))
        return tuple(store.find_or_create_tag(name).id for name in names if name)
