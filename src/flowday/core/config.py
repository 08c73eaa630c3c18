"""Configuration models for FlowDay.

Pydantic models for loading and validating the optional YAML settings file.
Every field has a default, so an absent file yields a working configuration.

Example YAML:
    store:
      path: ~/.flowday/flowday.json
    logging:
      level: INFO
      format: json
    insights:
      max_insights: 10
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from flowday.core.constants import MAX_INSIGHTS, MIN_HISTORY_FOR_PATTERNS
from flowday.core.errors import ConfigError

DEFAULT_STORE_PATH = Path("~/.flowday/flowday.json")


class LogConfig(BaseModel):
    """Configuration for structured logging."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Minimum log level to capture",
    )
    format: Literal["json", "console"] = Field(
        default="console",
        description="Output format: json for structured, console for human-readable",
    )
    file_path: Path | None = Field(
        default=None,
        description="Write logs to this file instead of stderr",
    )
    include_timestamps: bool = Field(
        default=True,
        description="Include ISO8601 UTC timestamps in log entries",
    )


class StoreConfig(BaseModel):
    """Where the planner data lives."""

    path: Path = Field(
        default=DEFAULT_STORE_PATH,
        description="JSON document holding tasks, history, schedule, patterns and settings",
    )

    @field_validator("path")
    @classmethod
    def _expand_user(cls, v: Path) -> Path:
        return v.expanduser()


class InsightConfig(BaseModel):
    """Top-level knobs of the analysis run.

    The per-analyzer thresholds are fixed constants; only the global gate
    and the size of the returned ranking are configurable.
    """

    max_insights: int = Field(
        default=MAX_INSIGHTS,
        ge=1,
        le=50,
        description="Insights returned per analysis, highest priority first",
    )
    min_history: int = Field(
        default=MIN_HISTORY_FOR_PATTERNS,
        ge=1,
        description="History entries required before analyzers run",
    )


class FlowdayConfig(BaseModel):
    """Root configuration model."""

    store: StoreConfig = Field(default_factory=StoreConfig)
    logging: LogConfig = Field(default_factory=LogConfig)
    insights: InsightConfig = Field(default_factory=InsightConfig)

    @classmethod
    def from_yaml(cls, path: Path) -> FlowdayConfig:
        """Load configuration from a YAML file.

        Raises:
            ConfigError: If the file is unreadable, not YAML, or invalid.
        """
        try:
            with open(path, encoding="utf-8") as f:
                text = f.read()
        except OSError as e:
            raise ConfigError(f"Cannot read config file {path}: {e}") from e
        return cls.from_yaml_string(text)

    @classmethod
    def from_yaml_string(cls, yaml_str: str) -> FlowdayConfig:
        """Load configuration from a YAML string.

        Raises:
            ConfigError: If the text is not YAML or fails validation.
        """
        try:
            data = yaml.safe_load(yaml_str) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError("Config root must be a mapping")
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e
