"""Demonstration metrics served by the command line entry point."""

from __future__ import annotations

import asyncio
import random
import threading

import structlog

from .models import MetricDescriptor, MetricKind, Operation

logger = structlog.get_logger(__name__)


class SampleAverager:
    """Collects samples and hands out their average once per read."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._count = 0
        self._sum = 0.0

    def record(self, value: float) -> None:
        with self._lock:
            self._sum += value
            self._count += 1
            count, total = self._count, self._sum
        logger.debug("demo.sample.recorded", value=value, count=count, sum=total)

    def average(self) -> float | None:
        """Return the average since the previous call and reset, or None without samples."""
        with self._lock:
            if self._count == 0:
                return None
            value = self._sum / self._count
            self._sum = 0.0
            self._count = 0
        logger.debug("demo.average", value=value)
        return value

    async def feed_random(self, interval: float = 1.0, low: int = 0, high: int = 5) -> None:
        """Record a random integer sample every ``interval`` seconds forever."""
        while True:
            await asyncio.sleep(interval)
            self.record(float(random.randint(low, high)))


def demo_descriptors(averager: SampleAverager) -> list[MetricDescriptor]:
    return [
        MetricDescriptor(
            name="gauge_metric_test",
            description="this metric will always be changed on every 3 second",
            kind=MetricKind.GAUGE,
            operation=Operation.SET,
            interval=3,
            producer=averager.average,
        ),
        MetricDescriptor(
            name="counter_metric_test",
            description="this metric will always be incremented by 1 every 5 second",
            kind=MetricKind.COUNTER,
            operation=Operation.INCREMENT,
            interval=5,
        ),
        MetricDescriptor(
            name="counter_metric_test_add_by_3",
            description="this metric will always be incremented by 3 every 10 second",
            kind=MetricKind.COUNTER,
            operation=Operation.ADD,
            interval=10,
            producer=lambda: 3,
        ),
    ]


__all__ = ["SampleAverager", "demo_descriptors"]
