"""Backend-neutral metric handles and the operation dispatch."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import Any, Protocol

from ..exceptions import IncompatibleOperationError, NegativeCounterIncrementError
from ..models import MetricDescriptor, MetricKind, Operation

# ==============================================================================
# NATIVE PRIMITIVE PROTOCOLS
# ==============================================================================


class NativeCounter(Protocol):
    """Counter primitive supplied by a metrics library."""

    def inc(self, amount: float = 1) -> None: ...


class NativeGauge(Protocol):
    """Gauge primitive supplied by a metrics library."""

    def set(self, value: float) -> None: ...

    def inc(self, amount: float = 1) -> None: ...

    def dec(self, amount: float = 1) -> None: ...


# ==============================================================================
# HANDLES
# ==============================================================================


class MetricHandle:
    """Live metric owned by a registry and mutated by one scheduled task."""

    kind: MetricKind

    def __init__(self, name: str, native: Any) -> None:
        self.name = name
        self.native = native

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class CounterHandle(MetricHandle):
    """Counter handle. Only increment and finite non-negative add are available."""

    kind = MetricKind.COUNTER
    native: NativeCounter

    def inc(self) -> None:
        self.native.inc()

    def add(self, value: float) -> None:
        if not math.isfinite(value) or value < 0:
            raise NegativeCounterIncrementError(self.name, value)
        self.native.inc(value)


class GaugeHandle(MetricHandle):
    """Gauge handle supporting every operation."""

    kind = MetricKind.GAUGE
    native: NativeGauge

    def set(self, value: float) -> None:
        self.native.set(value)

    def add(self, value: float) -> None:
        self.native.inc(value)

    def sub(self, value: float) -> None:
        self.native.dec(value)

    def inc(self) -> None:
        self.native.inc()

    def dec(self) -> None:
        self.native.dec()


def apply_operation(operation: Operation, handle: MetricHandle, value: float = 0.0) -> None:
    """Apply ``operation`` to ``handle``.

    Args:
        operation: Operation to perform.
        handle: Target metric handle.
        value: Value used by SET, ADD and SUB; ignored otherwise.

    Raises:
        IncompatibleOperationError: If the handle's kind does not support the
            operation (counters reject SET, SUB and DECREMENT).
        NegativeCounterIncrementError: If a counter is asked to add a negative
            or non-finite amount.
    """
    if isinstance(handle, GaugeHandle):
        if operation is Operation.SET:
            handle.set(value)
        elif operation is Operation.ADD:
            handle.add(value)
        elif operation is Operation.SUB:
            handle.sub(value)
        elif operation is Operation.INCREMENT:
            handle.inc()
        elif operation is Operation.DECREMENT:
            handle.dec()
        else:  # pragma: no cover - exhaustive over Operation
            raise IncompatibleOperationError(handle.kind.value, str(operation), metric=handle.name)
        return

    if isinstance(handle, CounterHandle):
        if operation is Operation.INCREMENT:
            handle.inc()
        elif operation is Operation.ADD:
            handle.add(value)
        else:
            raise IncompatibleOperationError(handle.kind.value, Operation(operation).value, metric=handle.name)
        return

    raise TypeError(f"Unsupported metric handle {handle!r}")


# ==============================================================================
# BACKEND
# ==============================================================================


class MetricBackend(ABC):
    """Abstract monitoring backend.

    A backend creates concrete handles for descriptors, applies operations to
    them and renders every handle it owns in its scrape format.
    """

    name: str
    content_type: str

    @abstractmethod
    def create_handle(self, descriptor: MetricDescriptor) -> MetricHandle:
        """Create and register a handle for ``descriptor``."""
        ...

    @abstractmethod
    def remove_handle(self, handle: MetricHandle) -> None:
        """Unregister a handle created by :meth:`create_handle`."""
        ...

    @abstractmethod
    def render(self) -> bytes:
        """Serialise current metric state in the backend's scrape format."""
        ...

    @abstractmethod
    def get_handler(self) -> Any:
        """Return a request handler serving :meth:`render` output."""
        ...

    def apply(self, operation: Operation, handle: MetricHandle, value: float = 0.0) -> None:
        """Apply an operation to one of this backend's handles."""
        apply_operation(operation, handle, value)


__all__ = [
    "CounterHandle",
    "GaugeHandle",
    "MetricBackend",
    "MetricHandle",
    "NativeCounter",
    "NativeGauge",
    "apply_operation",
]
