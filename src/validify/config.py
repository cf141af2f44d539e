"""Configuration management for validify using Pydantic models."""

import json
import logging
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

CONFIG_FILE_NAME = ".validify.json"


class OutputFormat(str, Enum):
    """Error report formats."""
    TABLE = "table"
    JSON = "json"


class LogLevel(str, Enum):
    """Logging levels."""
    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    DEBUG = "debug"

    @property
    def logging_level(self) -> int:
        return {
            LogLevel.ERROR: logging.ERROR,
            LogLevel.WARN: logging.WARNING,
            LogLevel.INFO: logging.INFO,
            LogLevel.DEBUG: logging.DEBUG,
        }[self]


class OutputConfig(BaseModel):
    """Error report configuration section."""
    format: OutputFormat = OutputFormat.TABLE
    include_params: bool = Field(alias="includeParams", default=True)
    location_separator: str = Field(alias="locationSeparator", default="/")

    @field_validator("location_separator")
    @classmethod
    def validate_location_separator(cls, v):
        if len(v) != 1 or v in "[]" or v.isalnum():
            raise ValueError(f"location_separator must be a single punctuation character, got: {v!r}")
        return v

    model_config = ConfigDict(populate_by_name=True)


class CheckConfig(BaseModel):
    """Defaults for the check command."""
    schema_ref: str | None = Field(alias="schema", default=None)

    @field_validator("schema_ref")
    @classmethod
    def validate_schema_ref(cls, v):
        if v is not None and v.count(":") != 1:
            raise ValueError(f"schema must look like 'package.module:Record', got: {v}")
        return v

    model_config = ConfigDict(populate_by_name=True)


class LoggingConfig(BaseModel):
    """Logging configuration section."""
    level: LogLevel = LogLevel.WARN


class ValidifyConfig(BaseModel):
    """Complete validify configuration model."""
    output: OutputConfig = Field(default_factory=OutputConfig)
    check: CheckConfig = Field(default_factory=CheckConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(extra="forbid")


def load_config(config_path: str | Path | None = None) -> ValidifyConfig:
    """Load configuration from file with fallback to defaults.

    Args:
        config_path: Optional path to configuration file. If None, searches
                    current directory and parents for .validify.json

    Returns:
        ValidifyConfig: Loaded and validated configuration

    Raises:
        ValueError: If the file cannot be read, is not JSON, or does not
                    describe a valid configuration
    """
    path = find_config_file() if config_path is None else Path(config_path)
    if path is None or not path.is_file():
        return create_default_config()

    try:
        config_data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ValueError(f"Cannot read config file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in config file {path} (line {e.lineno}, column {e.colno}): {e.msg}") from e

    if not isinstance(config_data, dict):
        raise ValueError(f"Config file {path} must hold a JSON object, got {type(config_data).__name__}")

    try:
        return ValidifyConfig.model_validate(config_data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or '<root>'}: {error['msg']}"
            for error in e.errors()
        )
        raise ValueError(f"Invalid settings in config file {path}: {problems}") from e


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Find the nearest .validify.json, starting at ``start_dir`` and walking up.

    Args:
        start_dir: Directory to start search from (default: current directory)

    Returns:
        Path to config file if found, None otherwise
    """
    start = Path(start_dir or Path.cwd()).resolve()
    for directory in (start, *start.parents):
        candidate = directory / CONFIG_FILE_NAME
        if candidate.is_file():
            return candidate
    return None


def create_default_config() -> ValidifyConfig:
    """Create default configuration."""
    return ValidifyConfig()
