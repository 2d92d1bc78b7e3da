"""Factory selecting the metric backend implementation."""

from __future__ import annotations

from enum import Enum
from typing import Any

from ..exceptions import UnknownBackendError
from .base import MetricBackend
from .prometheus import PrometheusBackend


class BackendKind(str, Enum):
    """Monitoring applications the SDK can publish to."""

    PROMETHEUS = "prometheus"


class BackendFactory:
    """Factory for creating metric backends by kind."""

    _backend_classes: dict[BackendKind, type[MetricBackend]] = {
        BackendKind.PROMETHEUS: PrometheusBackend,
    }

    @classmethod
    def resolve(cls, kind: BackendKind | str) -> BackendKind:
        """Normalise ``kind`` to a supported :class:`BackendKind`.

        Raises:
            UnknownBackendError: If the backend is not supported.
        """
        try:
            resolved = BackendKind(kind)
        except ValueError as exc:
            raise UnknownBackendError(kind, cls.supported_backends()) from exc
        if resolved not in cls._backend_classes:
            raise UnknownBackendError(kind, cls.supported_backends())
        return resolved

    @classmethod
    def create(cls, kind: BackendKind | str, **options: Any) -> MetricBackend:
        """Create a backend of ``kind`` passing ``options`` to its constructor.

        Args:
            kind: Backend kind or its string value.
            **options: Backend specific keyword arguments.

        Returns:
            The new backend instance.

        Raises:
            UnknownBackendError: If the backend is not supported.
        """
        backend_class = cls._backend_classes[cls.resolve(kind)]
        return backend_class(**options)

    @classmethod
    def supported_backends(cls) -> list[str]:
        return [kind.value for kind in cls._backend_classes]


def create_backend(kind: BackendKind | str, **options: Any) -> MetricBackend:
    """Shortcut for :meth:`BackendFactory.create`."""
    return BackendFactory.create(kind, **options)


__all__ = ["BackendFactory", "BackendKind", "create_backend"]
