"""
Worker process for executing jobs.

The worker polls its queues in priority order, executes one job at a time,
records the outcome, and keeps its entry in the worker directory current so
other processes can see what it is doing.
"""

import asyncio
import inspect
import logging
import os
import signal
import time
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import Any, Protocol

from jobqueue.config import get_hostname, get_settings
from jobqueue.constants import (
    PROCLINE_PREFIX,
    SPAN_PROCESS_JOB,
    SPAN_RESERVE_JOB,
    JobOutcome,
    WorkerState,
)
from jobqueue.observability.logging import bind_context, setup_logging, unbind_context
from jobqueue.observability.metrics import get_metrics
from jobqueue.observability.tracing import get_tracer
from jobqueue.queue.failures import FailureLog
from jobqueue.queue.registry import QueueRegistry
from jobqueue.reaper.main import ProcessOracle, Reaper
from jobqueue.store.base import StoreClient
from jobqueue.store.connection import close_store, get_store, init_store
from jobqueue.store.keys import Keys
from jobqueue.types.job import FailedEntry, JobContext, JobResult, Task
from jobqueue.types.worker import WorkerIdentity
from jobqueue.worker.directory import WorkerDirectory
from jobqueue.worker.handlers import get_registry

logger = logging.getLogger(__name__)

# Called with the task after it ran and before the status is cleared
ProcessCallback = Callable[[Task], Awaitable[Any] | Any]


class NoQueueError(ValueError):
    """Raised when a worker is created without any queue to work on."""


class TaskRunner(Protocol):
    """Executes a job and reports the outcome; never raises for job errors."""

    async def run(self, context: JobContext) -> JobResult:
        ...


class Worker:
    """
    Job worker that polls for and executes jobs.

    Features:
    - Strict queue priority, re-evaluated on every reservation
    - Status published while a job runs, cleared when it finishes
    - Per-worker processed/failed counters and a shared failure log
    - Pruning of crashed workers from this host on startup
    - Cooperative shutdown between jobs
    """

    def __init__(
        self,
        *queues: str,
        store: StoreClient | None = None,
        keys: Keys | None = None,
        runner: TaskRunner | None = None,
        oracle: ProcessOracle | None = None,
        hostname: str | None = None,
        pid: int | None = None,
        poll_interval: float | None = None,
    ):
        """
        Initialize the worker.

        Args:
            *queues: Queue names, highest priority first.
            store: Store client. Defaults to the process-wide store.
            keys: Key layout. Defaults to the configured namespace.
            runner: Task runner. Defaults to the default handler registry.
            oracle: Process-existence check used for crash recovery.
            hostname: Host name for the identity. Defaults to the local host.
            pid: Process id for the identity. Defaults to the current process.
            poll_interval: Seconds between polls when every queue is empty.

        Raises:
            NoQueueError: If no queue name is given.
        """
        if not queues or not all(queues):
            raise NoQueueError("Please give each worker at least one queue.")

        settings = get_settings()

        self.queues = tuple(queues)
        self.identity = WorkerIdentity(
            hostname=hostname or get_hostname(),
            pid=os.getpid() if pid is None else pid,
            queues=self.queues,
        )
        self.poll_interval = (
            settings.worker_poll_interval_seconds if poll_interval is None else poll_interval
        )
        self.procline: str | None = None

        self._store = store if store is not None else get_store()
        self._queues = QueueRegistry(self._store, keys)
        self._failures = FailureLog(self._store, keys)
        self._directory = WorkerDirectory(self._store, keys)
        self._runner = runner or get_registry()
        self._oracle = oracle
        self._state = WorkerState.IDLE
        self._shutdown = asyncio.Event()
        self._metrics = get_metrics()

    def __str__(self) -> str:
        return str(self.identity)

    def __repr__(self) -> str:
        return f"<Worker {self.identity}>"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Worker):
            return str(self) == str(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(str(self))

    @property
    def state(self) -> WorkerState:
        """Current position in the worker state machine."""
        return self._state

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def startup(self) -> None:
        """Prune crashed workers from this host, then register."""
        await self.prune_dead_workers()
        await self.register_worker()

    async def prune_dead_workers(self) -> list[str]:
        """Remove directory entries of local workers whose process is gone."""
        reaper = Reaper(
            directory=self._directory,
            hostname=self.identity.hostname,
            oracle=self._oracle,
        )
        return await reaper.run_once()

    async def register_worker(self) -> None:
        """Add this worker to the directory. Safe to repeat."""
        await self._directory.register(self.identity, datetime.now(timezone.utc))
        bind_context(worker=str(self))
        logger.info("Worker registered", extra={"worker": str(self)})

    async def unregister_worker(self) -> None:
        """Remove this worker, its status and its counters from the directory."""
        await self._directory.unregister(self.identity)
        self._state = WorkerState.DEREGISTERED
        logger.info("Worker unregistered", extra={"worker": str(self)})
        unbind_context("worker")

    def shutdown(self) -> None:
        """
        Ask the work loop to stop.

        Observed between jobs; a job already running is allowed to finish.
        """
        logger.info("Worker stopping", extra={"worker": str(self)})
        self._shutdown.set()

    @property
    def shutdown_requested(self) -> bool:
        return self._shutdown.is_set()

    def set_procline(self, line: str) -> None:
        """Record the human-readable description of what this process is doing."""
        self.procline = line
        logger.debug(line)

    # ------------------------------------------------------------------
    # Work loop
    # ------------------------------------------------------------------

    async def work(
        self,
        interval: float | None = None,
        callback: ProcessCallback | None = None,
    ) -> None:
        """
        Register, then process jobs until shutdown is requested.

        Args:
            interval: Seconds to wait when every queue is empty. Zero means
                drain the queues and return instead of waiting.
            callback: Invoked with each task after it ran, while the task is
                still published as this worker's status.
        """
        interval = self.poll_interval if interval is None else interval

        await self.startup()
        logger.info(
            "Worker starting",
            extra={"worker": str(self), "queues": list(self.queues), "interval": interval},
        )

        try:
            while not self.shutdown_requested:
                task = await self.reserve()

                if task is None:
                    if interval == 0:
                        break
                    self.set_procline(f"{PROCLINE_PREFIX}: Waiting for {','.join(self.queues)}")
                    try:
                        await asyncio.wait_for(self._shutdown.wait(), timeout=interval)
                    except asyncio.TimeoutError:
                        pass
                    continue

                await self.process(task, callback)
        finally:
            self._state = WorkerState.SHUTTING_DOWN
            await self.unregister_worker()
            logger.info("Worker stopped", extra={"worker": str(self)})

    async def reserve(self) -> Task | None:
        """
        Pop the next job from this worker's queues, in priority order.

        Returns:
            The reserved task, or None when every queue is empty.
        """
        self._state = WorkerState.RESERVING

        with get_tracer().start_as_current_span(SPAN_RESERVE_JOB):
            reserved = await self._queues.reserve(self.queues)

        if reserved is None:
            self._state = WorkerState.IDLE
            return None

        queue, payload = reserved
        self._metrics.record_reservation(queue)

        return Task(queue=queue, run_at=datetime.now(timezone.utc), payload=payload)

    async def work_one(self, callback: ProcessCallback | None = None) -> Task | None:
        """Reserve and process a single job, if one is available."""
        task = await self.reserve()
        await self.process(task, callback)
        return task

    async def process(
        self,
        task: Task | None,
        callback: ProcessCallback | None = None,
    ) -> JobResult | None:
        """
        Execute a reserved task and record its outcome.

        The status is published before the handler runs and always cleared
        afterwards, whether the job succeeded or failed.

        Args:
            task: The task to run. None is a no-op.
            callback: Invoked with the task before the status is cleared.

        Returns:
            The job result, or None when there was no task.
        """
        if task is None:
            return None

        self._state = WorkerState.PROCESSING
        started = time.perf_counter()

        await self._directory.set_status(self.identity, task)
        self.set_procline(f"{PROCLINE_PREFIX}: Processing {task.queue} since {int(time.time())}")

        try:
            context = JobContext(
                class_name=task.payload.class_name,
                args=list(task.payload.args),
                queue=task.queue,
                worker=str(self),
                run_at=task.run_at,
            )

            with get_tracer().start_as_current_span(SPAN_PROCESS_JOB) as span:
                span.set_attribute("queue", task.queue)
                span.set_attribute("job_class", task.payload.class_name)
                span.set_attribute("worker", str(self))

                result = await self._runner.run(context)

                span.set_attribute("success", result.success)

            if result.success:
                outcome = JobOutcome.PROCESSED
                await self._directory.increment(outcome, self.identity)
            else:
                outcome = JobOutcome.FAILED
                await self._record_failure(task, result)

            self._metrics.record_job_completed(
                queue=task.queue,
                outcome=outcome,
                duration_seconds=time.perf_counter() - started,
            )

            if callback is not None:
                returned = callback(task)
                if inspect.isawaitable(returned):
                    await returned

            return result
        finally:
            await self._directory.clear_status(self.identity)
            self.set_procline(f"{PROCLINE_PREFIX}: Waiting for {','.join(self.queues)}")
            if self._state is WorkerState.PROCESSING:
                self._state = WorkerState.IDLE

    async def _record_failure(self, task: Task, result: JobResult) -> None:
        entry = FailedEntry(
            failed_at=datetime.now(timezone.utc),
            payload=task.payload,
            worker=str(self),
            queue=task.queue,
            exception=result.exception or "JobFailure",
            error=result.error or "Unknown error",
            backtrace=result.backtrace or [],
        )
        await self._failures.append(entry)
        await self._directory.increment(JobOutcome.FAILED, self.identity)

        logger.warning(
            "Job failed",
            extra={
                "queue": task.queue,
                "job_class": task.payload.class_name,
                "exception": entry.exception,
                "error": entry.error,
            },
        )

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    async def task(self) -> Task | None:
        """The task this worker is processing, or None when idle."""
        return await self._directory.status(self.identity)

    async def is_working(self) -> bool:
        return await self.task() is not None

    async def is_idle(self) -> bool:
        return not await self.is_working()

    async def processed(self) -> int:
        """Jobs this worker completed successfully since it registered."""
        return await self._directory.stat(JobOutcome.PROCESSED, self.identity)

    async def failed(self) -> int:
        """Jobs that failed on this worker since it registered."""
        return await self._directory.stat(JobOutcome.FAILED, self.identity)

    async def started(self) -> datetime | None:
        """When this worker registered, or None when it is not registered."""
        return await self._directory.started(self.identity)

    # ------------------------------------------------------------------
    # Directory queries
    # ------------------------------------------------------------------

    @classmethod
    async def exists(
        cls,
        identity: "Worker | WorkerIdentity | str",
        store: StoreClient | None = None,
        keys: Keys | None = None,
    ) -> bool:
        """Check whether an identity is registered."""
        directory = WorkerDirectory(store if store is not None else get_store(), keys)
        return await directory.exists(str(identity))

    @classmethod
    async def find(
        cls,
        identity: "WorkerIdentity | str",
        store: StoreClient | None = None,
        keys: Keys | None = None,
    ) -> "Worker | None":
        """
        Rebuild a handle for a registered worker.

        The handle reads status and counters from the same key layout the
        lookup used.

        Returns:
            The worker handle, or None when the identity is not registered.
        """
        store = store if store is not None else get_store()
        if not await WorkerDirectory(store, keys).exists(str(identity)):
            return None

        try:
            parsed = WorkerIdentity.parse(str(identity))
            return cls(
                *parsed.queues,
                store=store,
                keys=keys,
                hostname=parsed.hostname,
                pid=parsed.pid,
            )
        except ValueError:
            logger.debug("Registered worker entry is not an identity", extra={"worker": str(identity)})
            return None

    @classmethod
    async def all(cls, store: StoreClient | None = None, keys: Keys | None = None) -> list["Worker"]:
        """Handles for every registered worker."""
        store = store if store is not None else get_store()
        workers = []
        for identity in await WorkerDirectory(store, keys).identities():
            worker = await cls.find(identity, store=store, keys=keys)
            if worker is not None:
                workers.append(worker)
        return workers

    @classmethod
    async def working(cls, store: StoreClient | None = None, keys: Keys | None = None) -> list["Worker"]:
        """Handles for registered workers that are processing a job."""
        store = store if store is not None else get_store()
        workers = []
        for identity in await WorkerDirectory(store, keys).working():
            worker = await cls.find(identity, store=store, keys=keys)
            if worker is not None:
                workers.append(worker)
        return workers


async def run_async() -> None:
    """Run the worker asynchronously."""
    setup_logging()
    init_store()

    settings = get_settings()
    worker = Worker(*settings.queue_names)

    # Handle shutdown signals
    loop = asyncio.get_running_loop()

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, worker.shutdown)

    try:
        await worker.work(settings.worker_poll_interval_seconds)
    finally:
        await close_store()


def run() -> None:
    """Run the worker."""
    asyncio.run(run_async())


if __name__ == "__main__":
    run()
