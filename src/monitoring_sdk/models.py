"""Metric descriptors and the operation vocabulary shared by all backends.

Key Responsibilities:
    - Define the metric kinds and operations the SDK understands
    - Describe one metric as inert, immutable configuration
    - Enforce kind/operation compatibility when a descriptor is built

Collaborators:
    - Upstream: Applications and the YAML definition loader build descriptors
    - Downstream: Registry, scheduler and backend adapters consume them

Thread Safety:
    - Descriptors are frozen dataclasses and safe to share between tasks
"""

from __future__ import annotations

import math
import re
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Union

from .exceptions import IncompatibleOperationError, InvalidMetricDefinitionError

# ==============================================================================
# ENUMERATIONS
# ==============================================================================


class MetricKind(str, Enum):
    """Metric types supported by the SDK."""

    COUNTER = "counter"
    GAUGE = "gauge"


class Operation(str, Enum):
    """Operations applied to a metric on every tick."""

    SET = "set"
    ADD = "add"
    SUB = "sub"
    INCREMENT = "increment"
    DECREMENT = "decrement"

    @property
    def uses_value(self) -> bool:
        """Whether the operation consumes the producer's value."""
        return self in {Operation.SET, Operation.ADD, Operation.SUB}


SUPPORTED_OPERATIONS: Mapping[MetricKind, frozenset[Operation]] = {
    MetricKind.COUNTER: frozenset({Operation.ADD, Operation.INCREMENT}),
    MetricKind.GAUGE: frozenset(Operation),
}

METRIC_NAME_PATTERN = re.compile(r"^[a-zA-Z_:][a-zA-Z0-9_:]*$")

ProducerResult = Union[float, int, None]
Producer = Callable[[], Union[ProducerResult, Awaitable[ProducerResult]]]


def ensure_supported(kind: MetricKind, operation: Operation, *, metric: str | None = None) -> None:
    """Raise if ``operation`` cannot be applied to metrics of ``kind``."""
    if operation not in SUPPORTED_OPERATIONS[kind]:
        raise IncompatibleOperationError(kind.value, operation.value, metric=metric)


# ==============================================================================
# DESCRIPTOR
# ==============================================================================


@dataclass(frozen=True)
class MetricDescriptor:
    """Static configuration for one metric.

    Attributes:
        name: Metric name, unique within a registry.
        description: Help text exposed on the scrape endpoint.
        kind: Counter or gauge.
        operation: Operation applied on every tick.
        interval: Seconds between ticks; ``timedelta`` values are converted.
        producer: Zero-argument callable (sync or async) returning the value
            to apply. ``None`` means every tick uses ``0``.

    Raises:
        InvalidMetricDefinitionError: On a malformed name or interval.
        IncompatibleOperationError: When ``operation`` is not valid for ``kind``.
    """

    name: str
    description: str
    kind: MetricKind
    operation: Operation
    interval: float
    producer: Producer | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not METRIC_NAME_PATTERN.match(self.name):
            raise InvalidMetricDefinitionError(f"Invalid metric name '{self.name}'", metric=str(self.name))
        try:
            kind = MetricKind(self.kind)
            operation = Operation(self.operation)
        except ValueError as exc:
            raise InvalidMetricDefinitionError(str(exc), metric=self.name) from exc
        interval = self.interval
        if isinstance(interval, timedelta):
            interval = interval.total_seconds()
        if isinstance(interval, bool) or not isinstance(interval, (int, float)):
            raise InvalidMetricDefinitionError(
                f"Interval for metric '{self.name}' must be a number of seconds", metric=self.name
            )
        if not math.isfinite(interval) or interval <= 0:
            raise InvalidMetricDefinitionError(
                f"Interval for metric '{self.name}' must be positive, got {interval}", metric=self.name
            )
        if self.producer is not None and not callable(self.producer):
            raise InvalidMetricDefinitionError(
                f"Producer for metric '{self.name}' is not callable", metric=self.name
            )
        ensure_supported(kind, operation, metric=self.name)
        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "operation", operation)
        object.__setattr__(self, "interval", float(interval))


__all__ = [
    "METRIC_NAME_PATTERN",
    "SUPPORTED_OPERATIONS",
    "MetricDescriptor",
    "MetricKind",
    "Operation",
    "Producer",
    "ProducerResult",
    "ensure_supported",
]
