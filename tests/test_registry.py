"""Tests for MetricRegistry."""

from __future__ import annotations

from unittest.mock import Mock

import pytest
from prometheus_client import CollectorRegistry

from monitoring_sdk.backends.base import CounterHandle, GaugeHandle
from monitoring_sdk.backends.prometheus import PrometheusBackend
from monitoring_sdk.exceptions import DuplicateMetricError
from monitoring_sdk.models import MetricDescriptor, MetricKind, Operation
from monitoring_sdk.registry import MetricRegistry
from monitoring_sdk.scheduler import MetricScheduler


def _descriptors() -> list[MetricDescriptor]:
    return [
        MetricDescriptor("gauge_metric_test", "average", MetricKind.GAUGE, Operation.SET, 3),
        MetricDescriptor("counter_metric_test", "ticks", MetricKind.COUNTER, Operation.INCREMENT, 5),
    ]


class TestMetricRegistry:
    """Test cases for MetricRegistry."""

    def test_initialize_creates_one_handle_per_descriptor(self, backend: PrometheusBackend) -> None:
        registry = MetricRegistry(backend)
        handles = registry.initialize(_descriptors())

        assert [type(handle) for handle in handles] == [GaugeHandle, CounterHandle]
        assert len(registry) == 2
        assert "gauge_metric_test" in registry
        assert registry.get_handle("counter_metric_test") is handles[1]
        assert [d.name for d in registry.descriptors()] == ["gauge_metric_test", "counter_metric_test"]

    def test_initialize_hands_each_handle_to_scheduler(self, backend: PrometheusBackend) -> None:
        scheduler = Mock(spec=MetricScheduler)
        registry = MetricRegistry(backend, scheduler)
        descriptors = _descriptors()

        handles = registry.initialize(descriptors)

        assert scheduler.schedule.call_count == 2
        scheduler.schedule.assert_any_call(handles[0], descriptors[0])
        scheduler.schedule.assert_any_call(handles[1], descriptors[1])

    def test_duplicate_names_in_batch_register_nothing(
        self, backend: PrometheusBackend, collector_registry: CollectorRegistry
    ) -> None:
        registry = MetricRegistry(backend)
        batch = _descriptors() + [
            MetricDescriptor("gauge_metric_test", "again", MetricKind.GAUGE, Operation.ADD, 1)
        ]

        with pytest.raises(DuplicateMetricError) as excinfo:
            registry.initialize(batch)

        assert excinfo.value.name == "gauge_metric_test"
        assert len(registry) == 0
        assert collector_registry.get_sample_value("gauge_metric_test") is None

    def test_second_initialize_with_same_names_fails(self, backend: PrometheusBackend) -> None:
        registry = MetricRegistry(backend)
        registry.initialize(_descriptors())

        with pytest.raises(DuplicateMetricError):
            registry.initialize(_descriptors())
        assert len(registry.scheduler.jobs) == 2

    def test_get_handle_unknown_metric(self, backend: PrometheusBackend) -> None:
        with pytest.raises(KeyError):
            MetricRegistry(backend).get_handle("missing")

    def test_render_before_any_tick_reports_zero_values(self, backend: PrometheusBackend) -> None:
        registry = MetricRegistry(backend)
        registry.initialize(_descriptors())

        payload = registry.render().decode()

        assert "gauge_metric_test 0.0" in payload
        assert "counter_metric_test_total 0.0" in payload
        assert "# HELP gauge_metric_test average" in payload

    def test_get_handler_returns_asgi_app(self, backend: PrometheusBackend) -> None:
        handler = MetricRegistry(backend).get_handler()
        assert callable(handler)

    def test_colliding_series_names_register_nothing(
        self, backend: PrometheusBackend, collector_registry: CollectorRegistry
    ) -> None:
        registry = MetricRegistry(backend)
        batch = [
            MetricDescriptor("requests", "served", MetricKind.COUNTER, Operation.INCREMENT, 1),
            MetricDescriptor("requests_total", "served again", MetricKind.COUNTER, Operation.INCREMENT, 1),
        ]

        with pytest.raises(DuplicateMetricError) as excinfo:
            registry.initialize(batch)

        assert excinfo.value.name == "requests_total"
        assert len(registry) == 0
        assert len(registry.scheduler.jobs) == 0
        assert collector_registry.get_sample_value("requests_total") is None

    def test_collision_with_registered_metric_keeps_existing_state(
        self, backend: PrometheusBackend, collector_registry: CollectorRegistry
    ) -> None:
        registry = MetricRegistry(backend)
        registry.initialize([MetricDescriptor("x", "base", MetricKind.COUNTER, Operation.INCREMENT, 1)])

        with pytest.raises(DuplicateMetricError):
            registry.initialize(
                [
                    MetricDescriptor("fresh", "new gauge", MetricKind.GAUGE, Operation.SET, 1),
                    MetricDescriptor("x_created", "clash", MetricKind.GAUGE, Operation.SET, 1),
                ]
            )

        assert len(registry) == 1
        assert len(registry.scheduler.jobs) == 1
        assert collector_registry.get_sample_value("fresh") is None
        # The rolled back name can be registered again.
        registry.initialize([MetricDescriptor("fresh", "new gauge", MetricKind.GAUGE, Operation.SET, 1)])
        assert collector_registry.get_sample_value("fresh") == 0.0
