"""Regular expressions shared by the format detector and the parser.

Version patterns are matched against header text, i.e. the part of a
Markdown header that follows the ``#`` markers.
"""

from __future__ import annotations

import re

SEMVER = r"\d+\.\d+\.\d+(?:-[a-zA-Z0-9.-]+)?"

VERSION_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(rf"^\[?v?({SEMVER})\]?", re.IGNORECASE),
    re.compile(rf"^version\s+v?({SEMVER})", re.IGNORECASE),
    re.compile(rf"^release\s+v?({SEMVER})", re.IGNORECASE),
)

DATE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"(\d{4}-\d{2}-\d{2})"),
    re.compile(r"(\d{2}/\d{2}/\d{4})"),
    re.compile(
        r"(\d{1,2}\s+(?:jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)[a-z]*\s+\d{4})",
        re.IGNORECASE,
    ),
    re.compile(
        r"((?:jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)[a-z]*\s+\d{1,2},?\s+\d{4})",
        re.IGNORECASE,
    ),
)

SECTION_MARKERS: tuple[str, ...] = (
    "added",
    "changed",
    "deprecated",
    "removed",
    "fixed",
    "security",
    "features",
    "bug fixes",
    "improvements",
    "breaking changes",
    "enhancements",
    "patches",
    "updates",
    "new",
    "fixes",
)

HEADER_LINE = re.compile(r"^(#{1,6})\s+(.+)$")
LIST_ITEM = re.compile(r"^\s*[-*+]\s+(.+)$")
MARKDOWN_SYNTAX = re.compile(r"[#*`\[\]]")
