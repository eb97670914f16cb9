"""
Failure log.
Append-only record of failed jobs.
"""

import logging

from jobqueue.store.base import StoreClient
from jobqueue.store.connection import get_keys
from jobqueue.store.keys import Keys
from jobqueue.types.job import FailedEntry

logger = logging.getLogger(__name__)


class FailureLog:
    """Unbounded, insertion-ordered log of failed jobs."""

    def __init__(self, store: StoreClient, keys: Keys | None = None):
        self._store = store
        self._keys = keys or get_keys()

    async def append(self, entry: FailedEntry) -> int:
        """
        Append a failure entry.

        Returns:
            The log size after the append.
        """
        return await self._store.list_push(self._keys.failed(), entry.to_json())

    async def size(self) -> int:
        """Total number of entries ever appended and not cleared."""
        return await self._store.list_length(self._keys.failed())

    async def range(self, offset: int = 0, limit: int = 1) -> list[FailedEntry]:
        """
        Read entries [offset, offset + limit) in insertion order.

        Out-of-range or negative arguments yield an empty list.
        """
        if offset < 0 or limit <= 0:
            return []
        raw = await self._store.list_range(self._keys.failed(), offset, offset + limit - 1)
        return [FailedEntry.from_json(item) for item in raw]

    async def clear(self) -> None:
        """Drop every entry."""
        await self._store.delete(self._keys.failed())
        logger.info("Failure log cleared")
