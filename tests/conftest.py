"""Shared fixtures for changelog-importer tests."""

from __future__ import annotations

import copy
import itertools
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import pytest

from changelog_importer.storage import (
    Collection,
    EntryData,
    ExistingEntry,
    PermissionDecision,
    StoredEntry,
    Tag,
)

if TYPE_CHECKING:
    from collections.abc import Callable


@dataclass
class InMemoryChangelogStore:
    """A ChangelogStore that keeps everything in dictionaries.

    Transactions snapshot the state and restore it when the callback
    raises. Titles listed in ``fail_titles`` make ``create_entry`` fail.
    """

    collections: dict[str, Collection] = field(default_factory=dict)
    entries: dict[str, list[EntryData]] = field(default_factory=dict)
    entry_ids: dict[str, list[str]] = field(default_factory=dict)
    tags: dict[str, Tag] = field(default_factory=dict)
    fail_titles: set[str] = field(default_factory=set)
    transactions: int = 0
    _ids: Any = field(default_factory=lambda: itertools.count(1))

    def find_collection(self, target_id: str) -> Collection | None:
        return self.collections.get(target_id)

    def find_or_create_collection(self, target_id: str) -> Collection:
        if target_id not in self.collections:
            self.collections[target_id] = Collection(id=f"cl-{target_id}", target_id=target_id)
        return self.collections[target_id]

    def list_entries(self, collection_id: str) -> list[ExistingEntry]:
        return [
            ExistingEntry(version=data.version, title=data.title, created_at=data.created_at)
            for data in self.entries.get(collection_id, [])
        ]

    def delete_all_entries(self, collection_id: str) -> int:
        removed = len(self.entries.get(collection_id, []))
        self.entries[collection_id] = []
        self.entry_ids[collection_id] = []
        return removed

    def create_entry(self, data: EntryData) -> StoredEntry:
        if data.title in self.fail_titles:
            raise RuntimeError(f"write failed for {data.title}")
        entry_id = f"entry-{next(self._ids)}"
        self.entries.setdefault(data.collection_id, []).append(data)
        self.entry_ids.setdefault(data.collection_id, []).append(entry_id)
        return StoredEntry(id=entry_id, title=data.title, version=data.version)

    def find_or_create_tag(self, name: str) -> Tag:
        if name not in self.tags:
            self.tags[name] = Tag(id=f"tag-{name}", name=name)
        return self.tags[name]

    def run_in_transaction(self, fn: Callable[[InMemoryChangelogStore], Any]) -> Any:
        self.transactions += 1
        snapshot = (copy.deepcopy(self.entries), copy.deepcopy(self.entry_ids), dict(self.tags))
        try:
            return fn(self)
        except Exception:
            self.entries, self.entry_ids, self.tags = snapshot
            raise

    def seed(self, target_id: str, *pairs: tuple[str | None, str]) -> None:
        """Store pre-existing entries as (version, title) pairs."""
        collection = self.find_or_create_collection(target_id)
        for version, title in pairs:
            self.create_entry(
                EntryData(
                    collection_id=collection.id,
                    title=title,
                    content=title,
                    version=version,
                    created_at=datetime(2023, 1, 1, tzinfo=UTC),
                    published_at=None,
                )
            )

    def stored(self, target_id: str) -> list[EntryData]:
        return self.entries.get(f"cl-{target_id}", [])


@dataclass
class StaticAuthorizer:
    allowed: bool = True
    reason: str | None = None
    calls: list[tuple[str, str]] = field(default_factory=list)

    def can_import(self, actor_id: str, target_id: str) -> PermissionDecision:
        self.calls.append((actor_id, target_id))
        return PermissionDecision(allowed=self.allowed, reason=self.reason)


@pytest.fixture
def store() -> InMemoryChangelogStore:
    return InMemoryChangelogStore()


@pytest.fixture
def authorizer() -> StaticAuthorizer:
    return StaticAuthorizer()


@pytest.fixture
def keep_a_changelog() -> str:
    return """\
# Changelog

All notable changes to this project will be documented in this file.

The format is based on [Keep a Changelog](https://keepachangelog.com/en/1.1.0/).

## [Unreleased]

## [1.1.0] - 2024-03-01

### Added

- Support for GitLab imports
- [SECURITY] Token scopes are checked

### Fixed

- fix(parser): handle CRLF line endings

## [1.0.0] - 2024-01-15

### Added

- Initial release

[1.1.0]: https://github.com/acme/widget/compare/v1.0.0...v1.1.0
[1.0.0]: https://github.com/acme/widget/releases/tag/v1.0.0
"""


@pytest.fixture
def github_releases() -> str:
    return """\
# Changelog

## [](https://github.com/acme/widget/compare/v1.6.1...v1.7.0) (2025-07-09)

### Features

* feat: add dark mode

## v1.6.1 (2025-06-30)

### Bug Fixes

* correct tooltip placement
"""
