"""Load configuration from pyproject.toml."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from changelog_importer.config.models import ImporterConfig
from changelog_importer.exceptions import ConfigNotFoundError, ConfigValidationError

TOOL_NAME = "changelog-importer"


def find_pyproject_toml(start: Path | None = None) -> Path:
    """Find the nearest pyproject.toml, searching upwards from ``start``.

    Raises:
        ConfigNotFoundError: If no pyproject.toml exists up to the root
    """
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            return candidate
    raise ConfigNotFoundError(f"No pyproject.toml found in {current} or its parents")


def load_pyproject_toml(path: Path) -> dict[str, Any]:
    """Parse a pyproject.toml file.

    Raises:
        ConfigNotFoundError: If the file does not exist
        ConfigValidationError: If the file is not valid TOML
    """
    if not path.is_file():
        raise ConfigNotFoundError(f"Config file not found: {path}")
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigValidationError(f"Invalid TOML in {path}: {e}") from e


def extract_importer_config(pyproject: dict[str, Any]) -> dict[str, Any]:
    """Return the ``[tool.changelog-importer]`` table, or an empty dict."""
    return dict(pyproject.get("tool", {}).get(TOOL_NAME, {}))


def load_config(path: Path | None = None) -> ImporterConfig:
    """Load configuration for the project containing ``path``.

    Defaults are returned when there is no pyproject.toml or when it has
    no ``[tool.changelog-importer]`` table.

    Raises:
        ConfigValidationError: If the table holds invalid values
    """
    try:
        if path is not None and path.is_file():
            pyproject_path = path
        else:
            pyproject_path = find_pyproject_toml(path)
    except ConfigNotFoundError:
        return ImporterConfig()

    data = extract_importer_config(load_pyproject_toml(pyproject_path))
    try:
        return ImporterConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid configuration in {pyproject_path}: {e}") from e
