"""Metric backends and the operation dispatch."""

from .base import (
    CounterHandle,
    GaugeHandle,
    MetricBackend,
    MetricHandle,
    apply_operation,
)
from .factory import BackendFactory, BackendKind, create_backend
from .prometheus import PrometheusBackend

__all__ = [
    "BackendFactory",
    "BackendKind",
    "CounterHandle",
    "GaugeHandle",
    "MetricBackend",
    "MetricHandle",
    "PrometheusBackend",
    "apply_operation",
    "create_backend",
]
