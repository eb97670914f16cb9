"""
Unit tests for the in-memory store, key layout, connection management and settings.
"""

import pytest

from jobqueue.config import Settings
from jobqueue.store import StoreClient
from jobqueue.store import connection
from jobqueue.store.keys import Keys
from jobqueue.store.memory import MemoryStore


class TestMemoryStore:
    """Tests for MemoryStore."""

    def test_satisfies_store_contract(self, store: MemoryStore):
        assert isinstance(store, StoreClient)

    async def test_list_operations(self, store: MemoryStore):
        await store.list_push("l", "a")
        await store.list_push("l", "b")
        await store.list_push("l", "c")

        assert await store.list_length("l") == 3
        assert await store.list_range("l", 0, -1) == ["a", "b", "c"]
        assert await store.list_range("l", 1, 1) == ["b"]
        assert await store.list_range("l", 5, 9) == []
        assert await store.list_pop_front("l") == "a"
        assert await store.list_length("l") == 2

    async def test_pop_from_missing_list(self, store: MemoryStore):
        assert await store.list_pop_front("missing") is None
        assert await store.list_length("missing") == 0

    async def test_set_operations(self, store: MemoryStore):
        await store.set_add("s", "x")
        await store.set_add("s", "x")
        await store.set_add("s", "y")
        await store.set_remove("s", "y")
        await store.set_remove("missing", "y")

        assert await store.set_members("s") == {"x"}

    async def test_values_and_counters(self, store: MemoryStore):
        await store.set("k", "v")
        assert await store.get("k") == "v"

        assert await store.incr("c") == 1
        assert await store.incr("c") == 2
        assert await store.get("c") == "2"

        await store.delete("k", "c", "missing")
        assert await store.get("k") is None
        assert await store.get("c") is None

    async def test_flush(self, store: MemoryStore):
        await store.list_push("l", "a")
        await store.set_add("s", "x")
        await store.set("k", "v")

        store.flush()

        assert await store.list_length("l") == 0
        assert await store.set_members("s") == set()
        assert await store.get("k") is None


class TestKeys:
    """Tests for the key layout."""

    def test_namespaced_keys(self):
        keys = Keys(namespace="ns")

        assert keys.queue("jobs") == "ns:queue:jobs"
        assert keys.queues() == "ns:queues"
        assert keys.workers() == "ns:workers"
        assert keys.worker_status("box:1:jobs") == "ns:worker:box:1:jobs"
        assert keys.worker_started("box:1:jobs") == "ns:worker_started:box:1:jobs"
        assert keys.stat("processed") == "ns:stat:processed"
        assert keys.worker_stat("failed", "box:1:jobs") == "ns:stat:failed:box:1:jobs"
        assert keys.failed() == "ns:failed"

    def test_status_and_started_keys_never_collide(self):
        keys = Keys(namespace="ns")

        # A queue literally named "started" must not alias another worker's start time
        assert keys.worker_status("box:1:jobs:started") != keys.worker_started("box:1:jobs")
        assert keys.worker_started("box:1:jobs:started") != keys.worker_status("box:1:jobs")


class TestConnection:
    """Tests for process-wide store management."""

    async def test_init_get_close(self):
        store = MemoryStore()

        assert connection.init_store(store) is store
        assert connection.get_store() is store

        await connection.close_store()

        with pytest.raises(RuntimeError):
            connection.get_store()


class TestSettings:
    """Tests for Settings."""

    def test_queue_names_keep_priority_order(self, test_settings: Settings):
        assert test_settings.queue_names == ["critical", "high", "low"]

    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.queue_names == ["default"]
        assert settings.redis_namespace == "jobqueue"
