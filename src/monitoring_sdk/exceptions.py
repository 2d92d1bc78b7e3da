"""Exception hierarchy for the monitoring SDK."""

from __future__ import annotations

from collections.abc import Iterable


class MonitoringError(RuntimeError):
    """Base error for monitoring related failures."""


class MonitoringConfigurationError(MonitoringError):
    """Raised when the monitoring setup is invalid and cannot start."""


class UnknownBackendError(MonitoringConfigurationError):
    """Raised when a client is requested for an unsupported backend."""

    def __init__(self, backend: object, supported: Iterable[str]) -> None:
        self.backend = backend
        self.supported = tuple(sorted(supported))
        message = f"Unknown metric backend '{backend}'. Supported: {', '.join(self.supported) or 'none'}"
        super().__init__(message)


class IncompatibleOperationError(MonitoringConfigurationError):
    """Raised when an operation is not supported by the metric kind."""

    def __init__(self, kind: str, operation: str, *, metric: str | None = None) -> None:
        self.kind = kind
        self.operation = operation
        self.metric = metric
        target = f" (metric '{metric}')" if metric else ""
        super().__init__(f"Operation '{operation}' is not supported by {kind} metrics{target}")


UnsupportedOperationError = IncompatibleOperationError


class DuplicateMetricError(MonitoringConfigurationError):
    """Raised when two metrics share a name within one registry."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Metric '{name}' is already registered")


class InvalidMetricDefinitionError(MonitoringConfigurationError):
    """Raised when a metric descriptor or definition is malformed."""

    def __init__(self, message: str, *, metric: str | None = None) -> None:
        super().__init__(message)
        self.metric = metric


class NegativeCounterIncrementError(MonitoringError, ValueError):
    """Raised when a counter is asked to add a negative or non-finite amount."""

    def __init__(self, metric: str, value: float) -> None:
        self.metric = metric
        self.value = value
        super().__init__(f"Counter '{metric}' can only be increased by a finite non-negative amount, got {value}")


__all__ = [
    "DuplicateMetricError",
    "IncompatibleOperationError",
    "InvalidMetricDefinitionError",
    "MonitoringConfigurationError",
    "MonitoringError",
    "NegativeCounterIncrementError",
    "UnknownBackendError",
    "UnsupportedOperationError",
]
