"""Configuration system for the monitoring SDK."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..backends.factory import BackendKind


class LoggingSettings(BaseModel):
    """Structured logging configuration."""

    level: str = Field(default="INFO", description="Log level for application output")
    json_output: bool = Field(default=True, description="Render log events as JSON lines")


class MetricsSettings(BaseModel):
    """Prometheus metrics configuration."""

    path: str = Field(default="/metrics", description="HTTP path for Prometheus metrics")
    namespace: str | None = Field(default=None, description="Prefix joined to every metric name")
    process_collectors: bool = Field(
        default=False, description="Expose process and platform metrics alongside registered ones"
    )

    @field_validator("path")
    @classmethod
    def _ensure_leading_slash(cls, value: str) -> str:
        if not value.startswith("/"):
            return f"/{value}"
        return value


class ServerSettings(BaseModel):
    """HTTP server binding for the scrape endpoint."""

    host: str = Field(default="0.0.0.0", description="Interface the server listens on")
    port: int = Field(default=2112, ge=1, le=65535, description="Port the server listens on")


class MonitoringSettings(BaseSettings):
    """Top-level monitoring settings."""

    service_name: str = "monitoring-sdk"
    backend: BackendKind = BackendKind.PROMETHEUS
    server: ServerSettings = Field(default_factory=ServerSettings)
    metrics: MetricsSettings = Field(default_factory=MetricsSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    definitions_path: Path | None = Field(
        default=None, description="YAML file listing metric definitions"
    )

    model_config = SettingsConfigDict(env_prefix="MONITORING_", env_nested_delimiter="__")


def load_settings(**overrides: object) -> MonitoringSettings:
    """Load settings from the environment with optional overrides."""
    try:
        return MonitoringSettings(**overrides)
    except ValidationError as err:
        raise RuntimeError(f"Invalid configuration: {err}") from err


@lru_cache(maxsize=1)
def get_settings() -> MonitoringSettings:
    """Cached accessor used by production code."""
    return load_settings()
