"""Markdown changelog parsing.

The parser makes one forward pass over the lines of a changelog. Level 1
and 2 headers that look like releases open a new entry; every other line
inside a release is collected into that entry's body. Header text is
decoded by ``HEADER_RULES``, an ordered table of (pattern, extractor)
pairs where the first matching pattern wins, so the most specific header
conventions must come first.

Malformed input never raises. Text without recognisable releases yields
an empty entry list and a parse warning.
"""

from __future__ import annotations

import math
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date

import structlog
from dateutil import parser as dateutil_parser

from changelog_importer.core.detector import detect_format
from changelog_importer.core.models import (
    ChangelogSection,
    EntryMetadata,
    ParsedChangelog,
    ParsedChangelogEntry,
    ParseMetadata,
)
from changelog_importer.core.patterns import (
    DATE_PATTERNS,
    HEADER_LINE,
    LIST_ITEM,
    SECTION_MARKERS,
    SEMVER,
    VERSION_PATTERNS,
)

logger = structlog.get_logger()

NO_ENTRIES_WARNING = "No valid changelog entries found"
WORDS_PER_MINUTE = 200

_FOUR_DIGIT_YEAR = re.compile(r"\d{4}")
_SUB_HEADER = re.compile(r"^(#{3,6})\s+(.+)$")
_LEADING_DASH = re.compile(r"^-\s*")
_OUTER_BRACKETS = re.compile(r"^\[|\]$")
_OUTER_PARENS = re.compile(r"^\(\s*|\s*\)$")
_COMMIT_PREFIX = re.compile(
    r"^(feat|fix|docs|style|refactor|test|chore|perf)(?:\([^)]+\))?!?:\s*", re.IGNORECASE
)
_BRACKET_LABEL = re.compile(r"\[([A-Z]+)\]")

# [1.0.3] - 2024-01-15
_CLI_HEADER = re.compile(rf"^\[({SEMVER})\]\s*-\s*(.+)$")
# [](https://github.com/owner/repo/compare/v1.6.1...v1.7.0) (2025-07-09)
_GITHUB_COMPARE_HEADER = re.compile(r"^\[\]\([^)]*/compare/[^)]*\)\s*\(([^)]+)\)$")
_COMPARE_URL_VERSION = re.compile(r"/compare/v?([^.]+\.[^.]+\.[^)]*)\.\.\.")
# [1.0.0] (2024-01-15)
_VERSION_DATE_HEADER = re.compile(r"^\[([^\]]+)\]\s*\(([^)]+)\)$")
# [1.0.0] Some title
_BRACKET_VERSION_HEADER = re.compile(rf"^\[({SEMVER})\]")
_ANY_HEADER = re.compile(r"")

_RELEASE_HEADER_PATTERNS: tuple[re.Pattern[str], ...] = (
    *VERSION_PATTERNS,
    re.compile(rf"^\[{SEMVER}\]\s*-\s*"),
    re.compile(r"^\[\]\([^)]+\)\s*\([^)]+\)$"),
    re.compile(r"^\[[^\]]+\]\s*\([^)]+\)$"),
    re.compile(r"^(?:unreleased|latest|current)", re.IGNORECASE),
)


@dataclass(frozen=True)
class HeaderInfo:
    """Version, date and display title recovered from a header."""

    title: str
    version: str | None = None
    published_at: date | None = None


def parse_date(text: str) -> date | None:
    """Parse a free-form date, returning None when it is not a date.

    Strings without a four digit year are rejected up front because the
    underlying parser happily fills missing fields from today's date.
    """
    text = text.strip()
    if not _FOUR_DIGIT_YEAR.search(text):
        return None
    try:
        return dateutil_parser.parse(text).date()
    except (ValueError, OverflowError):
        return None


def _finish_header(header_text: str, title: str, version: str | None) -> HeaderInfo:
    found_date: date | None = None
    for pattern in DATE_PATTERNS:
        match = pattern.search(header_text)
        if match:
            found_date = parse_date(match.group(1))
            if found_date is not None:
                title = pattern.sub("", title, count=1).strip()
            break

    title = _OUTER_BRACKETS.sub("", title)
    title = _LEADING_DASH.sub("", title)
    title = _OUTER_PARENS.sub("", title).strip()

    if not title:
        if version:
            title = f"Version {version}"
        elif found_date:
            title = f"Release {found_date.isoformat()}"
        else:
            title = "Release"

    return HeaderInfo(title=title, version=version, published_at=found_date)


def _from_cli_header(header_text: str, match: re.Match[str]) -> HeaderInfo:
    version, date_text = match.groups()
    return HeaderInfo(
        title=f"Version {version} - {date_text}",
        version=version,
        published_at=parse_date(date_text),
    )


def _from_github_compare_header(header_text: str, match: re.Match[str]) -> HeaderInfo:
    date_text = match.group(1)
    url_version = _COMPARE_URL_VERSION.search(header_text)
    return HeaderInfo(
        title=f"Release {date_text}",
        version=url_version.group(1) if url_version else None,
        published_at=parse_date(date_text),
    )


def _from_version_date_header(header_text: str, match: re.Match[str]) -> HeaderInfo:
    version, date_text = match.groups()
    return HeaderInfo(
        title=f"{version} - {date_text}",
        version=version,
        published_at=parse_date(date_text),
    )


def _from_bracket_version_header(header_text: str, match: re.Match[str]) -> HeaderInfo:
    title = header_text[match.end() :].strip()
    title = _LEADING_DASH.sub("", title).strip()
    return _finish_header(header_text, title, match.group(1))


def _from_generic_header(header_text: str, match: re.Match[str]) -> HeaderInfo:
    for pattern in VERSION_PATTERNS:
        version_match = pattern.search(header_text)
        if version_match:
            title = pattern.sub("", header_text, count=1).strip()
            return _finish_header(header_text, title, version_match.group(1))
    return _finish_header(header_text, header_text, None)


HeaderExtractor = Callable[[str, re.Match[str]], HeaderInfo]

HEADER_RULES: tuple[tuple[re.Pattern[str], HeaderExtractor], ...] = (
    (_CLI_HEADER, _from_cli_header),
    (_GITHUB_COMPARE_HEADER, _from_github_compare_header),
    (_VERSION_DATE_HEADER, _from_version_date_header),
    (_BRACKET_VERSION_HEADER, _from_bracket_version_header),
    (_ANY_HEADER, _from_generic_header),
)


def parse_header_info(header_text: str) -> HeaderInfo:
    """Extract version, date and a clean title from header text.

    Args:
        header_text: Header without its leading ``#`` markers

    Returns:
        The result of the first rule in ``HEADER_RULES`` that matches
    """
    for pattern, extract in HEADER_RULES:
        match = pattern.match(header_text)
        if match:
            return extract(header_text, match)
    # _ANY_HEADER always matches
    raise AssertionError("unreachable")


def looks_like_version_header(header_text: str) -> bool:
    """Return True when a header starts a release rather than a subsection."""
    return any(pattern.match(header_text) for pattern in _RELEASE_HEADER_PATTERNS)


def process_content_buffer(lines: Sequence[str]) -> str:
    """Turn the lines collected for one release into its Markdown body.

    Sub-headers become bold labels separated by blank lines, list items
    are kept verbatim and trailing blank lines are dropped.
    """
    processed: list[str] = []
    current_section = ""

    for line in lines:
        sub_header = _SUB_HEADER.match(line)
        if sub_header:
            label = sub_header.group(2).strip()
            if current_section:
                processed.append("")
            processed.append(f"**{label}**")
            processed.append("")
            current_section = label
            continue

        if LIST_ITEM.match(line):
            processed.append(line)
            continue

        if line.strip() or processed:
            processed.append(line)

    while processed and not processed[-1].strip():
        processed.pop()

    return "\n".join(processed)


def _section_tag(label: str) -> str | None:
    words = re.sub(r"[^a-z0-9 ]", "", label.lower()).split()
    name = " ".join(words)
    if name in SECTION_MARKERS:
        return name.replace(" ", "-")
    return None


def infer_tags(lines: Sequence[str]) -> tuple[str, ...]:
    """Collect tags from section sub-headers and list item prefixes.

    Tags are returned lowercased, deduplicated, in first-seen order.
    """
    tags: list[str] = []

    for line in lines:
        sub_header = _SUB_HEADER.match(line)
        if sub_header:
            tag = _section_tag(sub_header.group(2))
            if tag:
                tags.append(tag)
            continue

        item = LIST_ITEM.match(line)
        if not item:
            continue
        text = item.group(1).strip()
        prefix = _COMMIT_PREFIX.match(text)
        if prefix:
            tags.append(prefix.group(1).lower())
        tags.extend(label.lower() for label in _BRACKET_LABEL.findall(text))

    return tuple(dict.fromkeys(tags))


def _finalize_entry(
    info: HeaderInfo,
    buffer: list[str],
    entries: list[ParsedChangelogEntry],
) -> None:
    content = process_content_buffer(buffer)
    if not content.strip():
        return

    entries.append(
        ParsedChangelogEntry(
            title=info.title,
            content=content,
            version=info.version,
            published_at=info.published_at,
            tags=infer_tags(buffer),
            metadata=EntryMetadata(
                original_index=len(entries),
                has_content=True,
                estimated_reading_time=math.ceil(len(content.split(" ")) / WORDS_PER_MINUTE),
            ),
        )
    )


def parse_changelog(content: str) -> ParsedChangelog:
    """Parse Markdown changelog text into entries and sections.

    Args:
        content: Raw changelog text

    Returns:
        Parsed entries in source order, every level 1-2 header as a
        section, and parse metadata including warnings
    """
    sections: list[ChangelogSection] = []
    entries: list[ParsedChangelogEntry] = []
    warnings: list[str] = []

    current: HeaderInfo | None = None
    buffer: list[str] = []
    in_version_section = False

    for index, line in enumerate(content.splitlines()):
        stripped = line.strip()

        # Document banner such as "# Changelog"
        if stripped.startswith("# ") and (index == 0 or "changelog" in stripped.lower()):
            continue

        header = HEADER_LINE.match(line)
        if header and len(header.group(1)) <= 2:
            if current is not None and in_version_section:
                _finalize_entry(current, buffer, entries)
            current = None
            buffer = []

            heading = header.group(2).strip()
            if looks_like_version_header(heading):
                current = parse_header_info(heading)
                in_version_section = True
            else:
                in_version_section = False

            sections.append(
                ChangelogSection(heading=heading, level=len(header.group(1)), raw_content=line)
            )
            continue

        if in_version_section and current is not None:
            if not buffer and not stripped:
                continue
            buffer.append(line)

    if current is not None and in_version_section:
        _finalize_entry(current, buffer, entries)

    if not entries:
        warnings.append(NO_ENTRIES_WARNING)
        logger.warning("changelog_no_entries", sections=len(sections))

    detection = detect_format(content)

    return ParsedChangelog(
        sections=tuple(sections),
        entries=tuple(entries),
        metadata=ParseMetadata(
            total_sections=len(sections),
            total_entries=len(entries),
            has_versions=any(entry.version for entry in entries),
            has_dates=any(entry.published_at for entry in entries),
            original_format=detection.format,
            parse_warnings=tuple(warnings),
        ),
    )
