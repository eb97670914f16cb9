"""
Integration tests for the monitoring API endpoints.
"""

from datetime import datetime, timezone

import pytest
from httpx import AsyncClient

from jobqueue.queue.failures import FailureLog
from jobqueue.queue.registry import QueueRegistry
from jobqueue.store.memory import MemoryStore
from jobqueue.types.job import FailedEntry, JobPayload, Task
from jobqueue.worker.main import Worker


class TestHealthAPI:
    """Tests for health endpoints."""

    @pytest.mark.asyncio
    async def test_health_check(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["store"] == "healthy"

    @pytest.mark.asyncio
    async def test_health_degrades_when_store_is_down(
        self,
        client: AsyncClient,
        store: MemoryStore,
        monkeypatch: pytest.MonkeyPatch,
    ):
        async def broken_ping() -> bool:
            raise ConnectionError("store unreachable")

        monkeypatch.setattr(store, "ping", broken_ping)

        response = await client.get("/health")

        assert response.json()["status"] == "degraded"
        assert (await client.get("/ready")).json() == {"ready": False}

    @pytest.mark.asyncio
    async def test_liveness(self, client: AsyncClient):
        response = await client.get("/live")

        assert response.json() == {"alive": True}

    @pytest.mark.asyncio
    async def test_metrics(self, client: AsyncClient, queues: QueueRegistry):
        await queues.enqueue("jobs", JobPayload(class_name="GoodJob"))
        await client.get("/v1/queues")

        response = await client.get("/metrics")

        assert response.status_code == 200
        assert "job_queue_depth" in response.text


class TestWorkersAPI:
    """Tests for worker directory endpoints."""

    @pytest.mark.asyncio
    async def test_list_workers_empty(self, client: AsyncClient):
        response = await client.get("/v1/workers")

        assert response.status_code == 200
        assert response.json() == {"workers": [], "total": 0, "working": 0}

    @pytest.mark.asyncio
    async def test_list_and_get_working_worker(
        self,
        client: AsyncClient,
        make_worker,
        queues: QueueRegistry,
    ):
        worker = make_worker("critical", "jobs")
        await queues.enqueue("jobs", JobPayload(class_name="SomeJob", args=[20, "/tmp"]))
        seen = []

        async def check(task: Task) -> None:
            listing = (await client.get("/v1/workers")).json()
            detail = (await client.get(f"/v1/workers/{worker}")).json()
            seen.append((listing, detail))

        await worker.work(0, check)

        [(listing, detail)] = seen
        assert listing["total"] == 1
        assert listing["working"] == 1
        assert detail["id"] == str(worker)
        assert detail["queues"] == ["critical", "jobs"]
        assert detail["state"] == "processing"
        assert detail["task"]["queue"] == "jobs"
        assert detail["task"]["payload"] == {"class": "SomeJob", "args": [20, "/tmp"]}
        assert detail["processed"] == 1
        assert detail["failed"] == 0
        assert detail["started"] is not None

    @pytest.mark.asyncio
    async def test_idle_worker(self, client: AsyncClient, make_worker):
        worker = make_worker("jobs")
        await worker.register_worker()

        detail = (await client.get(f"/v1/workers/{worker}")).json()

        assert detail["state"] == "idle"
        assert detail["task"] is None

    @pytest.mark.asyncio
    async def test_get_unknown_worker(self, client: AsyncClient):
        response = await client.get("/v1/workers/blah-blah")

        assert response.status_code == 404


class TestQueuesAPI:
    """Tests for queue, failure and stats endpoints."""

    @pytest.mark.asyncio
    async def test_list_queues(self, client: AsyncClient, queues: QueueRegistry):
        await queues.enqueue("high", JobPayload(class_name="GoodJob"))
        await queues.enqueue("low", JobPayload(class_name="GoodJob"))
        await queues.enqueue("low", JobPayload(class_name="GoodJob"))

        response = await client.get("/v1/queues")

        assert response.json() == {
            "queues": [{"name": "high", "size": 1}, {"name": "low", "size": 2}]
        }

    @pytest.mark.asyncio
    async def test_peek_queue(self, client: AsyncClient, queues: QueueRegistry):
        for i in range(3):
            await queues.enqueue("jobs", JobPayload(class_name="GoodJob", args=[i]))

        response = await client.get("/v1/queues/jobs/jobs", params={"start": 1, "count": 5})

        data = response.json()
        assert data["size"] == 3
        assert [job["args"] for job in data["jobs"]] == [[1], [2]]
        assert await queues.size("jobs") == 3

    @pytest.mark.asyncio
    async def test_list_failed(self, client: AsyncClient, failures: FailureLog):
        for i in range(3):
            await failures.append(
                FailedEntry(
                    failed_at=datetime.now(timezone.utc),
                    payload=JobPayload(class_name="BadJob", args=[i]),
                    worker="test-host:1:jobs",
                    queue="jobs",
                    exception="RuntimeError",
                    error="Bad job!",
                )
            )

        response = await client.get("/v1/failed", params={"offset": 1, "limit": 1})

        data = response.json()
        assert data["total"] == 3
        assert len(data["failed"]) == 1
        assert data["failed"][0]["payload"] == {"class": "BadJob", "args": [1]}

    @pytest.mark.asyncio
    async def test_list_failed_rejects_negative_offset(self, client: AsyncClient):
        response = await client.get("/v1/failed", params={"offset": -1})

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_stats(
        self,
        client: AsyncClient,
        make_worker,
        queues: QueueRegistry,
        store: MemoryStore,
    ):
        await queues.enqueue("jobs", JobPayload(class_name="GoodJob"))
        await queues.enqueue("jobs", JobPayload(class_name="BadJob"))
        await make_worker("jobs").work(0)
        await queues.enqueue("other", JobPayload(class_name="GoodJob"))
        await Worker("other", store=store, hostname="other-host", pid=7).register_worker()

        data = (await client.get("/v1/stats")).json()

        assert data == {
            "pending": 1,
            "processed": 1,
            "failed": 1,
            "queues": 2,
            "workers": 1,
            "working": 0,
        }
