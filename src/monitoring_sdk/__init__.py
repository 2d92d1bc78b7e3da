"""Periodically updated counters and gauges exposed for Prometheus scraping."""

from .backends import BackendKind, CounterHandle, GaugeHandle, MetricHandle
from .client import MonitoringClient, create_client
from .exceptions import (
    DuplicateMetricError,
    IncompatibleOperationError,
    InvalidMetricDefinitionError,
    MonitoringConfigurationError,
    MonitoringError,
    NegativeCounterIncrementError,
    UnknownBackendError,
    UnsupportedOperationError,
)
from .models import MetricDescriptor, MetricKind, Operation
from .registry import MetricRegistry
from .scheduler import JobState, MetricJob, MetricScheduler

__all__ = [
    "BackendKind",
    "CounterHandle",
    "DuplicateMetricError",
    "GaugeHandle",
    "IncompatibleOperationError",
    "InvalidMetricDefinitionError",
    "JobState",
    "MetricDescriptor",
    "MetricHandle",
    "MetricJob",
    "MetricKind",
    "MetricRegistry",
    "MetricScheduler",
    "MonitoringClient",
    "MonitoringConfigurationError",
    "MonitoringError",
    "NegativeCounterIncrementError",
    "Operation",
    "UnknownBackendError",
    "UnsupportedOperationError",
    "create_client",
]
