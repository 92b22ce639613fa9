"""
Pydantic models for YAML configuration validation.
Every field defaults to the values the extractor was originally built with,
so a run without a config file processes indonesian-news-title.csv.
"""

from __future__ import annotations
from typing import Dict, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from news_extractor.http.client import DEFAULT_HEADERS
from news_extractor.parse.html_utils import DEFAULT_SELECTOR


class SourceConfig(BaseModel):
    """Configuration for the CSV input."""
    model_config = ConfigDict(extra="forbid")

    path: str = Field("indonesian-news-title.csv", description="Path to the input CSV file")
    title_column: str = Field("title", description="Header name of the title column")
    url_column: str = Field("url", description="Header name of the url column")
    encoding: str = Field("utf-8", description="Input file encoding")
    decode_errors: Literal["replace", "ignore", "strict"] = Field(
        "replace", description="How undecodable bytes in the input are handled"
    )

    @model_validator(mode='after')
    def validate_columns(self):
        if self.title_column == self.url_column:
            raise ValueError('title_column and url_column must differ')
        return self


class SinkConfig(BaseModel):
    """Configuration for the CSV output."""
    model_config = ConfigDict(extra="forbid")

    path: str = Field("detiknews-title-content.csv", description="Path to the output CSV file")
    encoding: str = Field("utf-8", description="Output file encoding")


class ExtractConfig(BaseModel):
    """Configuration for fetching and extracting documents."""
    model_config = ConfigDict(extra="forbid")

    selector: str = Field(DEFAULT_SELECTOR, description="CSS selector of the region to extract")
    timeout_s: float = Field(30.0, gt=0, le=600, description="Per-request HTTP timeout in seconds")
    headers: Dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_HEADERS), description="HTTP headers")
    user_agent: Optional[str] = Field(None, description="User-Agent header; overrides headers['User-Agent']")

    @field_validator('selector')
    @classmethod
    def validate_selector(cls, v):
        if not v.strip():
            raise ValueError('selector cannot be empty')
        return v.strip()

    @model_validator(mode='after')
    def apply_user_agent(self):
        if self.user_agent:
            self.headers = {**self.headers, "User-Agent": self.user_agent}
        return self


class PoolConfig(BaseModel):
    """Configuration for the worker pool and job queue."""
    model_config = ConfigDict(extra="forbid")

    workers: int = Field(100, ge=1, le=1000, description="Number of concurrent workers")
    queue_capacity: int = Field(1000, ge=1, le=1_000_000, description="Jobs buffered ahead of the workers")
    progress_every: int = Field(1000, ge=1, description="Rows per worker between progress log lines")


class ScheduleConfig(BaseModel):
    """Configuration for scheduled execution."""
    model_config = ConfigDict(extra="forbid")

    enabled: bool = Field(False, description="Whether scheduling is enabled")
    interval_hours: int = Field(24, ge=1, le=168, description="Interval between runs in hours")


class LoggingConfig(BaseModel):
    """Configuration for logging setup."""
    model_config = ConfigDict(extra="forbid")

    config_path: str = Field("configs/logging.yaml", description="Path to a dictConfig YAML file")
    level: str = Field("INFO", description="Fallback level when the YAML file is absent")

    @field_validator('level')
    @classmethod
    def validate_level(cls, v):
        v = v.upper()
        if v not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError('level must be one of DEBUG, INFO, WARNING, ERROR, CRITICAL')
        return v


class PipelineSettings(BaseModel):
    """Root configuration model for an extraction run."""
    model_config = ConfigDict(extra="forbid")

    source: SourceConfig = Field(default_factory=SourceConfig)
    sink: SinkConfig = Field(default_factory=SinkConfig)
    extract: ExtractConfig = Field(default_factory=ExtractConfig)
    pool: PoolConfig = Field(default_factory=PoolConfig)
    schedule: ScheduleConfig = Field(default_factory=ScheduleConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode='after')
    def validate_paths(self):
        """Refuse to overwrite the input with the output."""
        if self.source.path == self.sink.path:
            raise ValueError('sink.path must differ from source.path')
        return self


def load_and_validate_config(config_path: Optional[str] = None) -> PipelineSettings:
    """
    Load and validate pipeline settings from a YAML file.

    Args:
        config_path: Path to the YAML configuration file, or None for defaults.

    Returns:
        Validated PipelineSettings object

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If the YAML is malformed or fails validation
    """
    import yaml

    if config_path is None:
        return PipelineSettings()

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            raw_config = yaml.safe_load(f) or {}
    except FileNotFoundError:
        raise FileNotFoundError(f"Configuration file not found: {config_path}")
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {config_path}: {e}")

    if not isinstance(raw_config, dict):
        raise ValueError(f"Configuration in {config_path} must be a mapping")

    try:
        return PipelineSettings(**raw_config)
    except ValidationError as e:
        # Format validation errors nicely
        error_messages = []
        for error in e.errors():
            field_path = '.'.join(str(loc) for loc in error['loc'])
            error_messages.append(f"  {field_path}: {error['msg']}")

        raise ValueError(
            f"Configuration validation failed for {config_path}:\n" +
            '\n'.join(error_messages)
        ) from e
