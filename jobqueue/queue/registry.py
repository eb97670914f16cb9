"""
Queue registry.
Named FIFO queues of job payloads with priority reservation across queues.
"""

import logging
from collections.abc import Sequence

from jobqueue.store.base import StoreClient
from jobqueue.store.connection import get_keys
from jobqueue.store.keys import Keys
from jobqueue.types.job import JobPayload

logger = logging.getLogger(__name__)


class QueueRegistry:
    """
    Repository for queue operations.

    Implements:
    - Enqueue to the tail of a named queue
    - Reservation by atomic pop from the head, across queues in priority order
    - Size and non-destructive peeks for monitoring
    """

    def __init__(self, store: StoreClient, keys: Keys | None = None):
        """
        Initialize the registry.

        Args:
            store: The store client.
            keys: Key layout. Defaults to the configured namespace.
        """
        self._store = store
        self._keys = keys or get_keys()

    async def enqueue(self, queue: str, payload: JobPayload) -> int:
        """
        Append a payload to the tail of a queue.

        Args:
            queue: Queue name.
            payload: The job payload.

        Returns:
            The queue length after the push.
        """
        await self._store.set_add(self._keys.queues(), queue)
        length = await self._store.list_push(self._keys.queue(queue), payload.to_json())

        logger.debug(
            "Job enqueued",
            extra={"queue": queue, "job_class": payload.class_name, "size": length},
        )
        return length

    async def reserve(self, queues: Sequence[str]) -> tuple[str, JobPayload] | None:
        """
        Pop the first available payload, trying queues in the given order.

        Priority is evaluated from the first queue on every call, so a busy
        low-priority queue never starves a higher one.

        Args:
            queues: Queue names, highest priority first.

        Returns:
            Tuple of (queue, payload), or None when every queue is empty.
        """
        for queue in queues:
            raw = await self._store.list_pop_front(self._keys.queue(queue))
            if raw is not None:
                return queue, JobPayload.from_json(raw)
        return None

    async def size(self, queue: str) -> int:
        """Number of payloads waiting on a queue."""
        return await self._store.list_length(self._keys.queue(queue))

    async def queues(self) -> list[str]:
        """Names of every queue that has been enqueued to, sorted."""
        return sorted(await self._store.set_members(self._keys.queues()))

    async def peek(self, queue: str, start: int = 0, count: int = 1) -> list[JobPayload]:
        """
        Read pending payloads without removing them.

        Args:
            queue: Queue name.
            start: Offset from the head.
            count: Maximum number of payloads.

        Returns:
            Payloads in queue order; empty when out of range.
        """
        if start < 0 or count <= 0:
            return []
        raw = await self._store.list_range(self._keys.queue(queue), start, start + count - 1)
        return [JobPayload.from_json(item) for item in raw]

    async def remove_queue(self, queue: str) -> None:
        """Drop a queue and all of its pending payloads."""
        await self._store.set_remove(self._keys.queues(), queue)
        await self._store.delete(self._keys.queue(queue))
        logger.info("Queue removed", extra={"queue": queue})
