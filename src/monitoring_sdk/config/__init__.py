"""Lightweight configuration package exports."""

from __future__ import annotations

from .definitions import (
    MetricDefinition,
    MetricDefinitionFile,
    load_definitions,
    parse_definitions,
    resolve_producer,
)
from .settings import (
    LoggingSettings,
    MetricsSettings,
    MonitoringSettings,
    ServerSettings,
    get_settings,
    load_settings,
)

__all__ = [
    "LoggingSettings",
    "MetricDefinition",
    "MetricDefinitionFile",
    "MetricsSettings",
    "MonitoringSettings",
    "ServerSettings",
    "get_settings",
    "load_definitions",
    "load_settings",
    "parse_definitions",
    "resolve_producer",
]
