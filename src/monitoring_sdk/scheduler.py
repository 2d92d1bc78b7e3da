"""Periodic update jobs driving every registered metric.

Key Responsibilities:
    - Run one independent asyncio task per metric on its own interval
    - Poll the metric's producer and dispatch the value through the backend
    - Cancel and join every task on shutdown

Collaborators:
    - Upstream: MetricRegistry hands over handle/descriptor pairs
    - Downstream: MetricBackend applies operations to handles

Side Effects:
    - Calls user supplied producers; synchronous ones run in worker threads
    - Mutates metric handles

Thread Safety:
    - Each handle is written by exactly one job; jobs never share state
    - Scheduler methods must be called from the event loop thread

Performance Characteristics:
    - One sleeping task per metric; ticks never catch up on missed intervals
"""

from __future__ import annotations

# ==============================================================================
# IMPORTS
# ==============================================================================

import asyncio
import inspect
from enum import Enum

import structlog

from .backends.base import MetricBackend, MetricHandle
from .exceptions import IncompatibleOperationError, NegativeCounterIncrementError
from .models import MetricDescriptor

logger = structlog.get_logger(__name__)

# ==============================================================================
# JOBS
# ==============================================================================


class JobState(str, Enum):
    """Lifecycle of a scheduled metric job."""

    PENDING = "pending"
    RUNNING = "running"
    TERMINATED = "terminated"


class MetricJob:
    """Repeating update job bound to one descriptor and its handle."""

    def __init__(self, descriptor: MetricDescriptor, handle: MetricHandle, backend: MetricBackend) -> None:
        self.descriptor = descriptor
        self.handle = handle
        self._backend = backend
        self.state = JobState.PENDING
        self.ticks = 0
        self.error: BaseException | None = None

    @property
    def name(self) -> str:
        return self.descriptor.name

    async def _produce(self) -> float | None:
        producer = self.descriptor.producer
        if producer is None:
            return 0.0
        if inspect.iscoroutinefunction(producer):
            result = await producer()
        else:
            result = await asyncio.to_thread(producer)
            if inspect.isawaitable(result):
                result = await result
        if result is None:
            return None
        return float(result)

    async def tick(self) -> bool:
        """Run a single update.

        Returns:
            ``True`` when the operation was applied, ``False`` when the tick
            was skipped because the producer failed, returned no value, or
            the value was rejected by the metric.

        Raises:
            IncompatibleOperationError: If the operation is not supported by
                the metric kind.
        """
        operation = self.descriptor.operation
        try:
            value = await self._produce()
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("metric.producer.failed", metric=self.name)
            return False

        if value is None:
            if operation.uses_value:
                logger.debug("metric.tick.skipped", metric=self.name, reason="no_value")
                return False
            value = 0.0

        try:
            self._backend.apply(operation, self.handle, value)
        except NegativeCounterIncrementError as exc:
            logger.warning("metric.value.rejected", metric=self.name, value=value, reason=str(exc))
            return False

        self.ticks += 1
        logger.debug("metric.tick", metric=self.name, operation=operation.value, value=value, tick=self.ticks)
        return True

    async def run(self) -> None:
        """Tick forever at the descriptor's interval until cancelled."""
        loop = asyncio.get_running_loop()
        interval = self.descriptor.interval
        self.state = JobState.RUNNING
        deadline = loop.time() + interval
        try:
            while True:
                delay = deadline - loop.time()
                if delay > 0:
                    await asyncio.sleep(delay)
                await self.tick()
                now = loop.time()
                deadline += interval
                if deadline <= now:
                    # Missed boundaries are dropped, the next tick waits for the next boundary.
                    missed = int((now - deadline) // interval) + 1
                    deadline += missed * interval
                    logger.debug("metric.tick.missed", metric=self.name, missed=missed)
        except IncompatibleOperationError as exc:
            self.error = exc
            logger.error("metric.job.failed", metric=self.name, error=str(exc))
        finally:
            self.state = JobState.TERMINATED


# ==============================================================================
# SCHEDULER
# ==============================================================================


class MetricScheduler:
    """Owns the update tasks of every registered metric.

    Jobs scheduled while an event loop is running start immediately; jobs
    scheduled from synchronous code wait for :meth:`start`. :meth:`stop`
    cancels every task and waits for them to finish.

    Example:
        >>> async with MetricScheduler(backend) as scheduler:
        ...     scheduler.schedule(handle, descriptor)
    """

    def __init__(self, backend: MetricBackend) -> None:
        self._backend = backend
        self._jobs: list[MetricJob] = []
        self._tasks: dict[str, asyncio.Task[None]] = {}

    @property
    def jobs(self) -> tuple[MetricJob, ...]:
        return tuple(self._jobs)

    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._tasks.values())

    def schedule(self, handle: MetricHandle, descriptor: MetricDescriptor) -> MetricJob:
        """Register a repeating job for ``handle`` without blocking the caller."""
        job = MetricJob(descriptor, handle, self._backend)
        self._jobs.append(job)
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("scheduler.job.deferred", metric=job.name)
        else:
            self._start_job(job)
        return job

    def _start_job(self, job: MetricJob) -> None:
        if job.name in self._tasks:
            return
        self._tasks[job.name] = asyncio.create_task(job.run(), name=f"metric-job:{job.name}")
        logger.info("scheduler.task.started", metric=job.name, interval=job.descriptor.interval)

    async def start(self) -> None:
        """Start every job that is not running yet."""
        for job in self._jobs:
            self._start_job(job)

    async def stop(self) -> None:
        """Cancel every job and wait until all of them terminated."""
        tasks = list(self._tasks.values())
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        for job in self._jobs:
            if job.name in self._tasks:
                job.state = JobState.TERMINATED
        self._tasks.clear()
        logger.info("scheduler.stopped", jobs=len(tasks))

    async def __aenter__(self) -> MetricScheduler:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()


__all__ = ["JobState", "MetricJob", "MetricScheduler"]
