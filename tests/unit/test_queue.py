"""
Unit tests for the queue registry and the failure log.
"""

from datetime import datetime, timezone

import pytest

from jobqueue.queue.failures import FailureLog
from jobqueue.queue.registry import QueueRegistry
from jobqueue.types.job import FailedEntry, JobPayload


def payload(*args) -> JobPayload:
    return JobPayload(class_name="GoodJob", args=list(args))


def failed_entry(index: int) -> FailedEntry:
    return FailedEntry(
        failed_at=datetime.now(timezone.utc),
        payload=payload(index),
        worker="test-host:1:jobs",
        queue="jobs",
        exception="RuntimeError",
        error=f"failure {index}",
        backtrace=["line 1", "line 2"],
    )


class TestQueueRegistry:
    """Tests for QueueRegistry."""

    async def test_enqueue_appends_to_tail(self, queues: QueueRegistry):
        assert await queues.enqueue("jobs", payload(1)) == 1
        assert await queues.enqueue("jobs", payload(2)) == 2

        assert await queues.size("jobs") == 2
        assert await queues.peek("jobs", 0, 2) == [payload(1), payload(2)]

    async def test_reserve_pops_from_head(self, queues: QueueRegistry):
        await queues.enqueue("jobs", payload(1))
        await queues.enqueue("jobs", payload(2))

        assert await queues.reserve(["jobs"]) == ("jobs", payload(1))
        assert await queues.size("jobs") == 1

    async def test_reserve_returns_none_when_empty(self, queues: QueueRegistry):
        assert await queues.reserve(["jobs", "other"]) is None

    async def test_reserve_follows_given_priority(self, queues: QueueRegistry):
        await queues.enqueue("low", payload("low"))
        await queues.enqueue("high", payload("high"))

        assert await queues.reserve(["high", "low"]) == ("high", payload("high"))
        assert await queues.reserve(["high", "low"]) == ("low", payload("low"))

    async def test_each_payload_is_reserved_once(self, queues: QueueRegistry):
        await queues.enqueue("jobs", payload(1))

        first = await queues.reserve(["jobs"])
        second = await queues.reserve(["jobs"])

        assert first is not None
        assert second is None

    async def test_known_queues(self, queues: QueueRegistry):
        await queues.enqueue("b", payload())
        await queues.enqueue("a", payload())
        await queues.enqueue("a", payload())

        assert await queues.queues() == ["a", "b"]

    async def test_peek_does_not_remove(self, queues: QueueRegistry):
        await queues.enqueue("jobs", payload(1))

        assert await queues.peek("jobs") == [payload(1)]
        assert await queues.size("jobs") == 1

    @pytest.mark.parametrize("start,count", [(5, 1), (-1, 1), (0, 0)])
    async def test_peek_out_of_range(self, queues: QueueRegistry, start: int, count: int):
        await queues.enqueue("jobs", payload(1))

        assert await queues.peek("jobs", start, count) == []

    async def test_remove_queue(self, queues: QueueRegistry):
        await queues.enqueue("jobs", payload(1))

        await queues.remove_queue("jobs")

        assert await queues.queues() == []
        assert await queues.size("jobs") == 0


class TestFailureLog:
    """Tests for FailureLog."""

    async def test_append_and_size(self, failures: FailureLog):
        for i in range(10):
            await failures.append(failed_entry(i))

        assert await failures.size() == 10

    async def test_range_returns_insertion_order(self, failures: FailureLog):
        for i in range(10):
            await failures.append(failed_entry(i))

        entries = await failures.range(0, 20)

        assert len(entries) == 10
        assert [entry.error for entry in entries] == [f"failure {i}" for i in range(10)]

    async def test_range_window(self, failures: FailureLog):
        for i in range(10):
            await failures.append(failed_entry(i))

        entries = await failures.range(3, 2)

        assert [entry.payload.args for entry in entries] == [[3], [4]]

    @pytest.mark.parametrize("offset,limit", [(10, 5), (100, 1), (-1, 5), (0, 0)])
    async def test_range_out_of_bounds_is_empty(
        self,
        failures: FailureLog,
        offset: int,
        limit: int,
    ):
        for i in range(10):
            await failures.append(failed_entry(i))

        assert await failures.range(offset, limit) == []

    async def test_entries_round_trip_all_fields(self, failures: FailureLog):
        entry = failed_entry(7)
        await failures.append(entry)

        assert await failures.range(0, 1) == [entry]

    async def test_clear(self, failures: FailureLog):
        await failures.append(failed_entry(1))

        await failures.clear()

        assert await failures.size() == 0
