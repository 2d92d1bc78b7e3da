"""Prometheus implementation of the metric backend."""

from __future__ import annotations

from typing import Any

import structlog
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    PlatformCollector,
    ProcessCollector,
    generate_latest,
    make_asgi_app,
)

from ..models import MetricDescriptor, MetricKind
from .base import CounterHandle, GaugeHandle, MetricBackend, MetricHandle

logger = structlog.get_logger(__name__)


class PrometheusBackend(MetricBackend):
    """Backend creating ``prometheus_client`` counters and gauges.

    Each backend owns a :class:`CollectorRegistry`. A private registry is
    created unless one is passed in, so several clients never collide on
    metric names.
    """

    name = "prometheus"
    content_type = CONTENT_TYPE_LATEST

    def __init__(
        self,
        registry: CollectorRegistry | None = None,
        *,
        namespace: str | None = None,
        process_collectors: bool = False,
    ) -> None:
        """Initialize the backend.

        Args:
            registry: Collector registry to register metrics on.
            namespace: Optional prefix joined to every metric name with ``_``.
            process_collectors: Register process and platform collectors on
                the registry.
        """
        self._registry = registry if registry is not None else CollectorRegistry(auto_describe=True)
        self._namespace = namespace or ""
        if process_collectors:
            ProcessCollector(registry=self._registry)
            PlatformCollector(registry=self._registry)

    @property
    def registry(self) -> CollectorRegistry:
        return self._registry

    def create_handle(self, descriptor: MetricDescriptor) -> MetricHandle:
        if descriptor.kind is MetricKind.GAUGE:
            gauge = Gauge(
                descriptor.name,
                descriptor.description,
                namespace=self._namespace,
                registry=self._registry,
            )
            handle: MetricHandle = GaugeHandle(descriptor.name, gauge)
        else:
            counter = Counter(
                descriptor.name,
                descriptor.description,
                namespace=self._namespace,
                registry=self._registry,
            )
            handle = CounterHandle(descriptor.name, counter)
        logger.debug("prometheus.metric.created", metric=descriptor.name, kind=descriptor.kind.value)
        return handle

    def remove_handle(self, handle: MetricHandle) -> None:
        self._registry.unregister(handle.native)
        logger.debug("prometheus.metric.removed", metric=handle.name)

    def render(self) -> bytes:
        return generate_latest(self._registry)

    def get_handler(self) -> Any:
        return make_asgi_app(registry=self._registry)


__all__ = ["PrometheusBackend"]
