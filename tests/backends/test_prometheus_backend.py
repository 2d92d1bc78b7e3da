"""Tests for the Prometheus backend and the operation dispatch."""

from __future__ import annotations

import pytest
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry

from monitoring_sdk.backends.base import CounterHandle, GaugeHandle, apply_operation
from monitoring_sdk.backends.prometheus import PrometheusBackend
from monitoring_sdk.exceptions import IncompatibleOperationError, NegativeCounterIncrementError
from monitoring_sdk.models import MetricDescriptor, MetricKind, Operation


def _gauge(name: str = "temperature_celsius") -> MetricDescriptor:
    return MetricDescriptor(name, "Room temperature", MetricKind.GAUGE, Operation.SET, 1)


def _counter(name: str = "requests") -> MetricDescriptor:
    return MetricDescriptor(name, "Handled requests", MetricKind.COUNTER, Operation.INCREMENT, 1)


class TestCreateHandle:
    def test_gauge_descriptor_creates_gauge_handle(self, backend: PrometheusBackend) -> None:
        handle = backend.create_handle(_gauge())
        assert isinstance(handle, GaugeHandle)
        assert handle.name == "temperature_celsius"

    def test_counter_descriptor_creates_counter_handle(self, backend: PrometheusBackend) -> None:
        handle = backend.create_handle(_counter())
        assert isinstance(handle, CounterHandle)
        assert not hasattr(handle, "set")
        assert not hasattr(handle, "dec")

    def test_metrics_start_at_zero(
        self, backend: PrometheusBackend, collector_registry: CollectorRegistry
    ) -> None:
        backend.create_handle(_gauge())
        backend.create_handle(_counter())
        assert collector_registry.get_sample_value("temperature_celsius") == 0.0
        assert collector_registry.get_sample_value("requests_total") == 0.0

    def test_namespace_prefixes_metric_names(self, collector_registry: CollectorRegistry) -> None:
        backend = PrometheusBackend(collector_registry, namespace="billing")
        backend.create_handle(_gauge())
        assert collector_registry.get_sample_value("billing_temperature_celsius") == 0.0

    def test_duplicate_names_are_rejected_by_prometheus(self, backend: PrometheusBackend) -> None:
        backend.create_handle(_gauge())
        with pytest.raises(ValueError):
            backend.create_handle(_gauge())

    def test_private_registry_by_default(self) -> None:
        first = PrometheusBackend()
        second = PrometheusBackend()
        first.create_handle(_gauge())
        second.create_handle(_gauge())
        assert first.registry is not second.registry

    def test_process_collectors_are_optional(self) -> None:
        backend = PrometheusBackend(process_collectors=True)
        assert b"python_info" in backend.render()
        assert b"python_info" not in PrometheusBackend().render()


class TestGaugeOperations:
    @pytest.mark.parametrize(
        ("operation", "value", "expected"),
        [
            (Operation.SET, 7.0, 7.0),
            (Operation.ADD, 2.5, 12.5),
            (Operation.SUB, 4.0, 6.0),
            (Operation.INCREMENT, 99.0, 11.0),
            (Operation.DECREMENT, 99.0, 9.0),
        ],
    )
    def test_operation_semantics(
        self,
        backend: PrometheusBackend,
        collector_registry: CollectorRegistry,
        operation: Operation,
        value: float,
        expected: float,
    ) -> None:
        handle = backend.create_handle(_gauge())
        apply_operation(Operation.SET, handle, 10.0)
        backend.apply(operation, handle, value)
        assert collector_registry.get_sample_value("temperature_celsius") == expected


class TestCounterOperations:
    def test_increment_ignores_value(
        self, backend: PrometheusBackend, collector_registry: CollectorRegistry
    ) -> None:
        handle = backend.create_handle(_counter())
        backend.apply(Operation.INCREMENT, handle, 40.0)
        backend.apply(Operation.INCREMENT, handle, 40.0)
        assert collector_registry.get_sample_value("requests_total") == 2.0

    def test_add_accumulates(self, backend: PrometheusBackend, collector_registry: CollectorRegistry) -> None:
        handle = backend.create_handle(_counter())
        for _ in range(4):
            backend.apply(Operation.ADD, handle, 3.0)
        assert collector_registry.get_sample_value("requests_total") == 12.0

    @pytest.mark.parametrize("operation", [Operation.SET, Operation.SUB, Operation.DECREMENT])
    def test_unsupported_operations_raise(self, backend: PrometheusBackend, operation: Operation) -> None:
        handle = backend.create_handle(_counter())
        with pytest.raises(IncompatibleOperationError) as excinfo:
            backend.apply(operation, handle, 1.0)
        assert excinfo.value.kind == "counter"
        assert excinfo.value.metric == "requests"

    def test_negative_add_is_rejected_and_value_kept(
        self, backend: PrometheusBackend, collector_registry: CollectorRegistry
    ) -> None:
        handle = backend.create_handle(_counter())
        backend.apply(Operation.ADD, handle, 5.0)
        with pytest.raises(NegativeCounterIncrementError):
            backend.apply(Operation.ADD, handle, -1.0)
        assert collector_registry.get_sample_value("requests_total") == 5.0

    @pytest.mark.parametrize("value", [float("nan"), float("inf")])
    def test_non_finite_add_is_rejected_and_value_kept(
        self, backend: PrometheusBackend, collector_registry: CollectorRegistry, value: float
    ) -> None:
        handle = backend.create_handle(_counter())
        backend.apply(Operation.ADD, handle, 2.0)
        with pytest.raises(NegativeCounterIncrementError):
            backend.apply(Operation.ADD, handle, value)
        assert collector_registry.get_sample_value("requests_total") == 2.0


def test_apply_rejects_unknown_handles() -> None:
    with pytest.raises(TypeError):
        apply_operation(Operation.SET, object(), 1.0)  # type: ignore[arg-type]


def test_render_uses_exposition_format(backend: PrometheusBackend) -> None:
    backend.create_handle(_gauge())
    payload = backend.render().decode()
    assert "# HELP temperature_celsius Room temperature" in payload
    assert "# TYPE temperature_celsius gauge" in payload
    assert backend.content_type == CONTENT_TYPE_LATEST
