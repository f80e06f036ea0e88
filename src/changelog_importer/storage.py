"""Collaborator interfaces consumed by the import processor.

The storage engine and the authorization check live outside this
package. Hosts plug them in by implementing these protocols.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Collection:
    """The changelog that imported entries are written into."""

    id: str
    target_id: str


@dataclass(frozen=True)
class ExistingEntry:
    version: str | None
    title: str
    created_at: datetime | None = None


@dataclass(frozen=True)
class Tag:
    id: str
    name: str


@dataclass(frozen=True)
class EntryData:
    """Everything needed to create one changelog entry."""

    collection_id: str
    title: str
    content: str
    version: str | None
    created_at: datetime
    published_at: datetime | None
    tag_ids: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class StoredEntry:
    id: str
    title: str
    version: str | None = None


@dataclass(frozen=True)
class PermissionDecision:
    allowed: bool
    reason: str | None = None


class ChangelogStore(Protocol):
    """Persistence for changelogs, their entries and tags."""

    def find_collection(self, target_id: str) -> Collection | None: ...

    def find_or_create_collection(self, target_id: str) -> Collection: ...

    def list_entries(self, collection_id: str) -> list[ExistingEntry]: ...

    def delete_all_entries(self, collection_id: str) -> int: ...

    def create_entry(self, data: EntryData) -> StoredEntry: ...

    def find_or_create_tag(self, name: str) -> Tag: ...

    def run_in_transaction(self, fn: Callable[[ChangelogStore], T]) -> T:
        """Run ``fn`` against a transaction-scoped store.

        Implementations commit when ``fn`` returns and roll back when it
        raises, re-raising the exception.
        """
        ...


class Authorizer(Protocol):
    def can_import(self, actor_id: str, target_id: str) -> PermissionDecision: ...
