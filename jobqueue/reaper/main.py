"""
Crash recovery for the worker directory.

Workers can die without deregistering (SIGKILL, OOM, host reboot), leaving
their identity, status, start time and counters behind. The reaper removes
entries that claim to run on this host but whose process no longer exists.
Every worker runs it once on startup; it can also run on its own interval.
"""

import asyncio
import logging
import signal
from typing import Protocol

import psutil

from jobqueue.config import get_hostname, get_settings
from jobqueue.constants import SPAN_PRUNE_WORKERS
from jobqueue.observability.logging import setup_logging
from jobqueue.observability.metrics import get_metrics
from jobqueue.observability.tracing import get_tracer
from jobqueue.store.connection import close_store, get_store, init_store
from jobqueue.types.worker import WorkerIdentity
from jobqueue.worker.directory import WorkerDirectory

logger = logging.getLogger(__name__)


class ProcessOracle(Protocol):
    """Answers whether a process id is alive on the local host."""

    def exists(self, pid: int) -> bool:
        ...


class PsutilProcessOracle:
    """Process oracle backed by the operating system's process table."""

    def exists(self, pid: int) -> bool:
        return psutil.pid_exists(pid)


class Reaper:
    """
    Prunes crashed workers registered from the local host.

    Identities from other hosts, and entries that do not parse as identities,
    are never touched: their liveness cannot be checked from here.
    """

    def __init__(
        self,
        directory: WorkerDirectory | None = None,
        hostname: str | None = None,
        oracle: ProcessOracle | None = None,
        interval_seconds: int | None = None,
    ):
        """
        Initialize the reaper.

        Args:
            directory: Worker directory to prune. Defaults to the global store.
            hostname: Local host name. Defaults to the configured host.
            oracle: Process-existence check. Defaults to psutil.
            interval_seconds: Seconds between runs when started as a loop.
        """
        settings = get_settings()
        self.directory = directory or WorkerDirectory(get_store())
        self.hostname = hostname or get_hostname()
        self.oracle = oracle or PsutilProcessOracle()
        self.interval = interval_seconds or settings.reaper_interval_seconds
        self._stopped = asyncio.Event()
        self._metrics = get_metrics()

    async def start(self) -> None:
        """Start the reaper loop."""
        logger.info(f"Reaper starting with interval {self.interval}s")
        self._stopped.clear()

        while not self._stopped.is_set():
            try:
                await self.run_once()
            except Exception as e:
                logger.exception(f"Error in reaper loop: {e}")

            try:
                await asyncio.wait_for(self._stopped.wait(), timeout=self.interval)
            except asyncio.TimeoutError:
                pass

        logger.info("Reaper stopped")

    async def stop(self) -> None:
        """Stop the reaper."""
        logger.info("Reaper stopping")
        self._stopped.set()

    async def run_once(self) -> list[str]:
        """
        Remove every local identity whose process is gone.

        Returns:
            The identities that were pruned.
        """
        pruned = []

        with get_tracer().start_as_current_span(SPAN_PRUNE_WORKERS) as span:
            span.set_attribute("hostname", self.hostname)

            for raw in await self.directory.identities():
                try:
                    identity = WorkerIdentity.parse(raw)
                except ValueError:
                    logger.debug("Skipping unparseable worker entry", extra={"worker": raw})
                    continue

                if not identity.is_local_to(self.hostname):
                    continue
                if self.oracle.exists(identity.pid):
                    continue

                await self.directory.unregister(raw)
                pruned.append(raw)
                logger.info("Pruned dead worker", extra={"worker": raw})

            span.set_attribute("pruned", len(pruned))

        if pruned:
            self._metrics.record_workers_pruned(len(pruned))

        return pruned


async def run_async() -> None:
    """Run the reaper asynchronously."""
    setup_logging()
    init_store()

    reaper = Reaper()

    # Handle shutdown signals
    loop = asyncio.get_running_loop()

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(
            sig,
            lambda: asyncio.create_task(reaper.stop())
        )

    try:
        await reaper.start()
    finally:
        await close_store()


def run() -> None:
    """Run the reaper."""
    asyncio.run(run_async())


if __name__ == "__main__":
    run()
