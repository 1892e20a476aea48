"""In-memory FIFO job queue with broadcast lifecycle events."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass
from typing import AsyncIterator, Optional, Union

LOGGER = logging.getLogger(__name__)


class QueueClosedError(RuntimeError):
    """Raised when a job is enqueued after :meth:`JobQueue.shutdown`."""


class Job(ABC):
    """Unit of background work; not persisted."""

    def __init__(self, *, job_id: str, job_type: str) -> None:
        self.id = job_id
        self.type = job_type

    @abstractmethod
    async def execute(self) -> None: ...

    def __repr__(self) -> str:
        return f"Job({self.type}: {self.id})"


@dataclass(frozen=True)
class JobEnqueued:
    job: Job


@dataclass(frozen=True)
class JobStarted:
    job: Job


@dataclass(frozen=True)
class JobCompleted:
    job: Job


@dataclass(frozen=True)
class JobFailed:
    job: Job
    error: BaseException


JobEvent = Union[JobEnqueued, JobStarted, JobCompleted, JobFailed]


class JobSubscription:
    """Unbounded per-subscriber event buffer, consumed with ``async for``."""

    _SENTINEL = object()

    def __init__(self, queue: "JobQueue") -> None:
        self._owner = queue
        self._buffer: asyncio.Queue[object] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _push(self, event: JobEvent) -> None:
        if not self._closed:
            self._buffer.put_nowait(event)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._owner._unsubscribe(self)
        self._buffer.put_nowait(self._SENTINEL)

    async def get(self) -> Optional[JobEvent]:
        """Return the next event, or ``None`` once the subscription is closed and drained."""

        item = await self._buffer.get()
        if item is self._SENTINEL:
            self._buffer.put_nowait(self._SENTINEL)
            return None
        return item  # type: ignore[return-value]

    def __aiter__(self) -> AsyncIterator[JobEvent]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[JobEvent]:
        while True:
            event = await self.get()
            if event is None:
                return
            yield event


class JobQueue:
    """Runs at most ``max_concurrent`` jobs at a time in FIFO order.

    Jobs never fail the caller that enqueued them: a raising job produces a
    :class:`JobFailed` event and the queue moves on. There is no retry.
    """

    def __init__(self, *, max_concurrent: int = 1) -> None:
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be at least 1")
        self._max_concurrent = max_concurrent
        self._pending: deque[Job] = deque()
        self._running: dict[asyncio.Task[None], Job] = {}
        self._subscribers: list[JobSubscription] = []
        self._closed = False
        self._idle = asyncio.Event()
        self._idle.set()

    @property
    def max_concurrent(self) -> int:
        return self._max_concurrent

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def running_count(self) -> int:
        return len(self._running)

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self) -> JobSubscription:
        subscription = JobSubscription(self)
        if self._closed:
            subscription.close()
        else:
            self._subscribers.append(subscription)
        return subscription

    def _unsubscribe(self, subscription: JobSubscription) -> None:
        if subscription in self._subscribers:
            self._subscribers.remove(subscription)

    def _emit(self, event: JobEvent) -> None:
        for subscription in list(self._subscribers):
            subscription._push(event)

    def enqueue(self, job: Job) -> None:
        """Append ``job`` and start it when capacity allows. Never blocks."""

        if self._closed:
            raise QueueClosedError(f"Job queue is shut down; rejected {job!r}")
        self._pending.append(job)
        self._idle.clear()
        self._emit(JobEnqueued(job))
        self._process_next()

    def _process_next(self) -> None:
        while self._pending and len(self._running) < self._max_concurrent:
            job = self._pending.popleft()
            task = asyncio.get_running_loop().create_task(
                self._run(job), name=f"job-{job.type}-{job.id}"
            )
            self._running[task] = job
            task.add_done_callback(self._on_task_done)
        if not self._pending and not self._running:
            self._idle.set()

    async def _run(self, job: Job) -> None:
        self._emit(JobStarted(job))
        try:
            await job.execute()
        except asyncio.CancelledError:
            raise
        except Exception as exc:  # noqa: BLE001
            self._emit(JobFailed(job, exc))
            return
        self._emit(JobCompleted(job))

    def _on_task_done(self, task: asyncio.Task[None]) -> None:
        self._running.pop(task, None)
        if self._closed:
            if not self._running:
                self._idle.set()
            return
        self._process_next()

    async def join(self) -> None:
        """Wait until no job is pending or running."""

        await self._idle.wait()

    async def shutdown(self) -> None:
        """Discard pending jobs and close every subscription.

        Running jobs are left to finish on their own.
        """

        if self._closed:
            return
        self._closed = True
        discarded = len(self._pending)
        self._pending.clear()
        if discarded:
            LOGGER.info("Job queue shut down; discarded %d pending job(s)", discarded)
        for subscription in list(self._subscribers):
            subscription.close()
        if not self._running:
            self._idle.set()


async def log_job_events(subscription: JobSubscription) -> None:
    """Log every event of ``subscription`` until it closes."""

    async for event in subscription:
        if isinstance(event, JobFailed):
            LOGGER.error(
                "Job %s failed: %s",
                event.job,
                event.error,
                exc_info=(type(event.error), event.error, event.error.__traceback__),
            )
        elif isinstance(event, JobStarted):
            LOGGER.info("Job %s started", event.job)
        elif isinstance(event, JobCompleted):
            LOGGER.info("Job %s completed", event.job)
        else:
            LOGGER.info("Job %s enqueued", event.job)


__all__ = [
    "Job",
    "JobCompleted",
    "JobEnqueued",
    "JobEvent",
    "JobFailed",
    "JobQueue",
    "JobStarted",
    "JobSubscription",
    "QueueClosedError",
    "log_job_events",
]
