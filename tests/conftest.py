from __future__ import annotations

import pytest
import structlog
from prometheus_client import CollectorRegistry

from monitoring_sdk.backends.prometheus import PrometheusBackend
from monitoring_sdk.config.settings import get_settings


@pytest.fixture(autouse=True)
def _isolate_settings(monkeypatch):
    for name in ("MONITORING_BACKEND", "MONITORING_DEFINITIONS_PATH", "MONITORING_METRICS__PATH"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.reset_defaults()


@pytest.fixture
def collector_registry() -> CollectorRegistry:
    return CollectorRegistry()


@pytest.fixture
def backend(collector_registry: CollectorRegistry) -> PrometheusBackend:
    return PrometheusBackend(collector_registry)


class CallCounter:
    """Producer returning a fixed value and counting its invocations."""

    def __init__(self, value: float | None = 1.0) -> None:
        self.value = value
        self.calls = 0

    def __call__(self) -> float | None:
        self.calls += 1
        return self.value


@pytest.fixture
def call_counter() -> type[CallCounter]:
    return CallCounter
