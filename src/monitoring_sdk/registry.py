"""Registry owning the live metric handles and the scrape handler."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import structlog

from .backends.base import MetricBackend, MetricHandle
from .exceptions import DuplicateMetricError
from .models import MetricDescriptor
from .scheduler import MetricScheduler

logger = structlog.get_logger(__name__)


class MetricRegistry:
    """Creates one handle per descriptor and schedules its updates.

    Scope:
        - Handle creation and ownership
        - Handing handles to the scheduler
        - Rendering the scrape payload

    Out of Scope:
        - Metric storage and wire serialisation (delegated to the backend)
    """

    def __init__(self, backend: MetricBackend, scheduler: MetricScheduler | None = None) -> None:
        """Initialize the registry.

        Args:
            backend: Backend creating and rendering metric handles
            scheduler: Scheduler driving handle updates (a new one if None)
        """
        self._backend = backend
        self._scheduler = scheduler or MetricScheduler(backend)
        self._handles: dict[str, MetricHandle] = {}
        self._descriptors: dict[str, MetricDescriptor] = {}

    @property
    def backend(self) -> MetricBackend:
        return self._backend

    @property
    def scheduler(self) -> MetricScheduler:
        return self._scheduler

    def initialize(self, descriptors: Iterable[MetricDescriptor]) -> list[MetricHandle]:
        """Register ``descriptors`` and schedule their update jobs.

        The whole batch is validated and every handle created before any
        job is scheduled, so a duplicate name, or a name whose exposed
        series collide in the backend, leaves the registry unchanged.

        Args:
            descriptors: Metric descriptors to register

        Returns:
            The created handles, in descriptor order

        Raises:
            DuplicateMetricError: If a name repeats within the batch, is
                already registered, or collides with another metric's series
        """
        batch = list(descriptors)
        seen: set[str] = set(self._handles)
        for descriptor in batch:
            if descriptor.name in seen:
                raise DuplicateMetricError(descriptor.name)
            seen.add(descriptor.name)

        # Backends may still reject a name whose exposed series collide, e.g.
        # counter "requests" next to counter "requests_total".
        handles: list[MetricHandle] = []
        for descriptor in batch:
            try:
                handles.append(self._backend.create_handle(descriptor))
            except ValueError as exc:
                for handle in handles:
                    self._backend.remove_handle(handle)
                logger.error("metrics.registration.failed", metric=descriptor.name, error=str(exc))
                raise DuplicateMetricError(descriptor.name) from exc

        for descriptor, handle in zip(batch, handles):
            self._handles[descriptor.name] = handle
            self._descriptors[descriptor.name] = descriptor
            self._scheduler.schedule(handle, descriptor)
        logger.info("metrics.registered", count=len(handles), backend=self._backend.name)
        return handles

    def get_handle(self, name: str) -> MetricHandle:
        """Retrieve a registered handle by name.

        Raises:
            KeyError: If no metric with that name is registered
        """
        if name not in self._handles:
            raise KeyError(f"Metric '{name}' not found in registry")
        return self._handles[name]

    def descriptors(self) -> list[MetricDescriptor]:
        return list(self._descriptors.values())

    def __contains__(self, name: object) -> bool:
        return name in self._handles

    def __len__(self) -> int:
        return len(self._handles)

    def render(self) -> bytes:
        """Current state of every handle in the backend's scrape format."""
        return self._backend.render()

    def get_handler(self) -> Any:
        """Return the backend's request handler serving the scrape payload."""
        return self._backend.get_handler()


__all__ = ["MetricRegistry"]
