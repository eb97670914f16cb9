"""
Pytest configuration and shared fixtures.
"""

import os
from collections.abc import AsyncGenerator, Callable

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from jobqueue.api.main import create_app
from jobqueue.config import Settings
from jobqueue.queue.failures import FailureLog
from jobqueue.queue.registry import QueueRegistry
from jobqueue.store.connection import get_store
from jobqueue.store.keys import Keys
from jobqueue.store.memory import MemoryStore
from jobqueue.types.job import JobContext, JobPayload
from jobqueue.worker.directory import WorkerDirectory
from jobqueue.worker.handlers import HandlerRegistry
from jobqueue.worker.main import Worker

TEST_HOSTNAME = "test-host"


class FakeProcessOracle:
    """Process oracle that reports only the given pids as alive."""

    def __init__(self, alive: set[int] | None = None):
        self.alive = set(alive) if alive is not None else {os.getpid()}
        self.checked: list[int] = []

    def exists(self, pid: int) -> bool:
        self.checked.append(pid)
        return pid in self.alive


@pytest.fixture
def store() -> MemoryStore:
    """Create an empty in-memory store."""
    return MemoryStore()


@pytest.fixture
def keys() -> Keys:
    return Keys(namespace="jobqueue")


@pytest.fixture
def queues(store: MemoryStore, keys: Keys) -> QueueRegistry:
    return QueueRegistry(store, keys)


@pytest.fixture
def failures(store: MemoryStore, keys: Keys) -> FailureLog:
    return FailureLog(store, keys)


@pytest.fixture
def directory(store: MemoryStore, keys: Keys) -> WorkerDirectory:
    return WorkerDirectory(store, keys)


@pytest.fixture
def oracle() -> FakeProcessOracle:
    """Only the test process itself is alive."""
    return FakeProcessOracle()


@pytest.fixture
def runner() -> HandlerRegistry:
    """Handler registry with the job classes used throughout the tests."""
    registry = HandlerRegistry()

    @registry.register("SomeJob")
    async def some_job(context: JobContext) -> None:
        return None

    @registry.register("GoodJob")
    async def good_job(context: JobContext) -> None:
        return None

    @registry.register("BadJob")
    async def bad_job(context: JobContext) -> None:
        raise RuntimeError("Bad job!")

    return registry


@pytest.fixture
def make_worker(
    store: MemoryStore,
    runner: HandlerRegistry,
    oracle: FakeProcessOracle,
) -> Callable[..., Worker]:
    """Factory for workers wired to the test store, runner and oracle."""

    def factory(*queue_names: str, **kwargs) -> Worker:
        kwargs.setdefault("store", store)
        kwargs.setdefault("runner", runner)
        kwargs.setdefault("oracle", oracle)
        kwargs.setdefault("hostname", TEST_HOSTNAME)
        return Worker(*queue_names, **kwargs)

    return factory


@pytest.fixture
def job_payload() -> JobPayload:
    """Create a sample job payload."""
    return JobPayload(class_name="SomeJob", args=[20, "/tmp"])


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings."""
    return Settings(
        redis_namespace="jobqueue-test",
        log_level="DEBUG",
        log_format="console",
        worker_queues="critical, high,low",
        worker_poll_interval_seconds=0.1,
        reaper_interval_seconds=1,
    )


@pytest.fixture
def app(store: MemoryStore) -> FastAPI:
    """Create a FastAPI app reading from the test store."""
    app = create_app()
    app.dependency_overrides[get_store] = lambda: store
    return app


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Create an async HTTP client for testing."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
