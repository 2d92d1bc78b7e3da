"""Public entry point of the monitoring SDK.

Example:
    >>> client = MonitoringClient.new(BackendKind.PROMETHEUS)
    >>> client.init([
    ...     MetricDescriptor(
    ...         name="queue_depth",
    ...         description="Items waiting in the queue",
    ...         kind=MetricKind.GAUGE,
    ...         operation=Operation.SET,
    ...         interval=5,
    ...         producer=queue.qsize,
    ...     ),
    ... ])
    >>> app.mount("/metrics", client.get_handler())

:meth:`MonitoringClient.get_handler` and :meth:`MonitoringClient.render` are
alternative ways to serve the same payload: mount the handler into an
existing ASGI application, or return ``render()`` from a route of your own as
:func:`monitoring_sdk.http.create_app` does to keep its endpoint ``GET`` only.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

import structlog

from .backends.factory import BackendFactory, BackendKind
from .models import MetricDescriptor
from .registry import MetricRegistry

if TYPE_CHECKING:  # pragma: no cover - import hints only
    from .backends.base import MetricHandle
    from .config.settings import MonitoringSettings

logger = structlog.get_logger(__name__)


class MonitoringClient:
    """Facade combining a backend, a registry and its scheduler."""

    def __init__(self, registry: MetricRegistry, backend_kind: BackendKind) -> None:
        self._registry = registry
        self.backend_kind = backend_kind

    @classmethod
    def new(cls, backend: BackendKind | str = BackendKind.PROMETHEUS, **options: Any) -> MonitoringClient:
        """Create a client for ``backend``.

        Args:
            backend: Monitoring application to publish to.
            **options: Forwarded to the backend constructor.

        Raises:
            UnknownBackendError: If the backend is not supported.
        """
        kind = BackendFactory.resolve(backend)
        metric_backend = BackendFactory.create(kind, **options)
        logger.info("monitoring.client.created", backend=kind.value)
        return cls(MetricRegistry(metric_backend), kind)

    @property
    def registry(self) -> MetricRegistry:
        return self._registry

    def init(self, descriptors: Iterable[MetricDescriptor]) -> list[MetricHandle]:
        """Register ``descriptors`` and schedule their updates."""
        return self._registry.initialize(descriptors)

    def get_handler(self) -> Any:
        """ASGI application serving the scrape payload on any path it is mounted at."""
        return self._registry.get_handler()

    def render(self) -> bytes:
        """Scrape payload for routes that serve it themselves."""
        return self._registry.render()

    @property
    def content_type(self) -> str:
        return self._registry.backend.content_type

    async def start(self) -> None:
        """Start update jobs registered outside of a running event loop."""
        await self._registry.scheduler.start()

    async def stop(self) -> None:
        """Cancel and join every update job."""
        await self._registry.scheduler.stop()

    async def __aenter__(self) -> MonitoringClient:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()


def create_client(settings: MonitoringSettings) -> MonitoringClient:
    """Create a client configured from ``settings``."""
    return MonitoringClient.new(
        settings.backend,
        namespace=settings.metrics.namespace,
        process_collectors=settings.metrics.process_collectors,
    )


__all__ = ["MonitoringClient", "create_client"]
