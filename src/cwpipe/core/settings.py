"""
Configuration models for cwpipe using Pydantic v2 Settings.

Values can be supplied programmatically or through the environment, e.g.
``CWPIPE_WRITER__FLUSH_INTERVAL_SECONDS=0.5`` or ``CWPIPE_AWS__REGION``.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import (  # type: ignore[import-not-found]
    BaseSettings,
    SettingsConfigDict,
)

# Service limits: PutLogEvents 5 req/s per stream, GetLogEvents 10 req/s per
# account.
DEFAULT_FLUSH_INTERVAL_SECONDS = 1.0 / 5
DEFAULT_POLL_INTERVAL_SECONDS = 1.0 / 10


class WriterSettings(BaseModel):
    flush_interval_seconds: float = Field(
        default=DEFAULT_FLUSH_INTERVAL_SECONDS,
        gt=0.0,
        description="Interval between batch submissions for one stream",
    )


class ReaderSettings(BaseModel):
    poll_interval_seconds: float = Field(
        default=DEFAULT_POLL_INTERVAL_SECONDS,
        gt=0.0,
        description="Interval between polls for new events",
    )


class BootstrapSettings(BaseModel):
    """Retry policy for discovering the token of an existing stream."""

    max_attempts: int = Field(
        default=3,
        ge=1,
        description="Describe attempts before giving up",
    )
    backoff_seconds: float = Field(
        default=1.0,
        ge=0.0,
        description="Unit of the linear backoff between attempts",
    )


class AwsSettings(BaseModel):
    region: str | None = Field(default=None, description="AWS region name")
    endpoint_url: str | None = Field(
        default=None,
        description="Override endpoint, e.g. for LocalStack",
    )

    @field_validator("endpoint_url")
    @classmethod
    def _strip_endpoint(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        return value or None


class Settings(BaseSettings):
    """Top-level configuration."""

    writer: WriterSettings = Field(default_factory=WriterSettings)
    reader: ReaderSettings = Field(default_factory=ReaderSettings)
    bootstrap: BootstrapSettings = Field(default_factory=BootstrapSettings)
    aws: AwsSettings = Field(default_factory=AwsSettings)

    internal_logging_enabled: bool = Field(
        default=False,
        description="Emit DEBUG/WARN diagnostics for internal events",
    )
    enable_metrics: bool = Field(
        default=False,
        description="Enable Prometheus-compatible metrics",
    )

    model_config = SettingsConfigDict(
        env_prefix="CWPIPE_",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )
