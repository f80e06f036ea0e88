"""Configuration models for changelog-importer.

Settings live in the ``[tool.changelog-importer]`` table of
pyproject.toml::

    [tool.changelog-importer]
    log_level = "DEBUG"

    [tool.changelog-importer.defaults]
    strategy = "append"
    default_tags = ["imported"]
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from changelog_importer.core.options import ImportOptions

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ImporterConfig(BaseModel):
    """Root configuration."""

    model_config = ConfigDict(extra="forbid")

    log_level: str = "INFO"
    json_logs: bool = False
    defaults: ImportOptions = Field(default_factory=ImportOptions)

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of: {', '.join(_LOG_LEVELS)}")
        return level
