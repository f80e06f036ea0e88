"""Changelog format detection.

Scores raw text against the conventions the parser understands and
reports the structural signals it found. Detection is best effort and
never fails, even for empty input.
"""

from __future__ import annotations

import re

from changelog_importer.core.models import FormatDetectionResult, FormatStructure, ImportFormat
from changelog_importer.core.patterns import (
    DATE_PATTERNS,
    HEADER_LINE,
    MARKDOWN_SYNTAX,
    SECTION_MARKERS,
    VERSION_PATTERNS,
)

_KEEP_A_CHANGELOG = re.compile(r"keep\s*a\s*changelog", re.IGNORECASE)
_UNRELEASED = re.compile(r"unreleased", re.IGNORECASE)
_VERSION_LINK = re.compile(r"\[[\d.]+\]:\s*http", re.IGNORECASE)
_RELEASE_HEADER = re.compile(r"^#+\s*(?:release|v?\d+\.\d+\.\d+)", re.IGNORECASE)
_LIST_LINE = re.compile(r"^\s*[-*+]\s", re.MULTILINE)
_SECTION_HEADERS = tuple(
    re.compile(rf"^#+\s*{re.escape(marker)}", re.IGNORECASE) for marker in SECTION_MARKERS
)


def _is_version_header(line: str) -> bool:
    match = HEADER_LINE.match(line)
    if not match:
        return False
    text = match.group(2).strip()
    return any(pattern.search(text) for pattern in VERSION_PATTERNS)


def detect_format(content: str) -> FormatDetectionResult:
    """Guess which changelog convention ``content`` follows.

    Args:
        content: Raw changelog text

    Returns:
        Detected format, a confidence in [0, 1], human readable
        characteristics and independent structural flags
    """
    lines = content.splitlines()
    characteristics: list[str] = []
    confidence = 0.0

    is_keep_a_changelog = bool(_KEEP_A_CHANGELOG.search(content)) or (
        bool(_UNRELEASED.search(content)) and bool(_VERSION_LINK.search(content))
    )
    if is_keep_a_changelog:
        characteristics.append("Keep a Changelog format detected")
        confidence += 0.4

    has_release_headers = any(_RELEASE_HEADER.match(line) for line in lines)
    if has_release_headers:
        characteristics.append("GitHub Releases format detected")
        confidence += 0.3

    has_section_headers = any(
        pattern.match(line) for line in lines for pattern in _SECTION_HEADERS
    )
    if has_section_headers:
        characteristics.append("Structured sections found")
        confidence += 0.2

    structure = FormatStructure(
        has_version_headers=any(_is_version_header(line) for line in lines),
        has_date_headers=any(
            pattern.search(line) for line in lines for pattern in DATE_PATTERNS
        ),
        has_type_headers=has_section_headers,
        uses_list_format=bool(_LIST_LINE.search(content)),
        uses_markdown_syntax=bool(MARKDOWN_SYNTAX.search(content)),
    )

    detected = ImportFormat.SIMPLE
    if is_keep_a_changelog:
        detected = ImportFormat.KEEP_A_CHANGELOG
        confidence += 0.2
    elif has_release_headers and structure.has_version_headers:
        detected = ImportFormat.GITHUB_RELEASES
        confidence += 0.15
    elif structure.uses_markdown_syntax and structure.has_version_headers:
        detected = ImportFormat.CUSTOM
        confidence += 0.1

    return FormatDetectionResult(
        format=detected,
        confidence=round(min(confidence, 1.0), 2),
        characteristics=tuple(characteristics),
        structure=structure,
    )
