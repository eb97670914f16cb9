"""
Worker directory.

The shared record of which workers are registered, what each is working on,
when it started, and how many jobs it has processed or failed. Readable by
any process with store access; each worker writes only its own entries.
"""

import logging
from datetime import datetime

from jobqueue.constants import JobOutcome
from jobqueue.store.base import StoreClient
from jobqueue.store.connection import get_keys
from jobqueue.store.keys import Keys
from jobqueue.types.job import Task
from jobqueue.types.worker import WorkerIdentity

logger = logging.getLogger(__name__)

Identity = WorkerIdentity | str


class WorkerDirectory:
    """
    Repository for worker registration, status and counters.

    Status without membership can be left behind by a crash; readers
    tolerate it and crash recovery removes it.
    """

    def __init__(self, store: StoreClient, keys: Keys | None = None):
        self._store = store
        self._keys = keys or get_keys()

    async def register(self, identity: Identity, started_at: datetime) -> None:
        """
        Add a worker to the membership set and record its start time.

        Status and counters left under the same identity by an earlier
        process (a reused pid after a crash) are reset first.
        """
        await self._store.delete(
            self._keys.worker_status(identity),
            *(self._keys.worker_stat(outcome, identity) for outcome in JobOutcome),
        )
        await self._store.set_add(self._keys.workers(), str(identity))
        await self._store.set(self._keys.worker_started(identity), started_at.isoformat())

    async def unregister(self, identity: Identity) -> None:
        """
        Remove a worker and every key it owns.

        Counters are deleted too, so a worker registering again under the
        same identity starts from zero.
        """
        await self._store.set_remove(self._keys.workers(), str(identity))
        await self._store.delete(
            self._keys.worker_status(identity),
            self._keys.worker_started(identity),
            *(self._keys.worker_stat(outcome, identity) for outcome in JobOutcome),
        )

    async def identities(self) -> list[str]:
        """Registered identities, sorted."""
        return sorted(await self._store.set_members(self._keys.workers()))

    async def exists(self, identity: Identity) -> bool:
        return str(identity) in await self._store.set_members(self._keys.workers())

    async def set_status(self, identity: Identity, task: Task) -> None:
        await self._store.set(self._keys.worker_status(identity), task.to_json())

    async def clear_status(self, identity: Identity) -> None:
        await self._store.delete(self._keys.worker_status(identity))

    async def status(self, identity: Identity) -> Task | None:
        """The task a worker is processing, or None when idle."""
        raw = await self._store.get(self._keys.worker_status(identity))
        if not raw:
            return None
        return Task.from_json(raw)

    async def started(self, identity: Identity) -> datetime | None:
        raw = await self._store.get(self._keys.worker_started(identity))
        if raw is None:
            return None
        return datetime.fromisoformat(raw)

    async def increment(self, outcome: JobOutcome, identity: Identity) -> int:
        """
        Count an outcome for a worker and in the global totals.

        Returns:
            The worker's counter after the increment.
        """
        await self._store.incr(self._keys.stat(outcome))
        return await self._store.incr(self._keys.worker_stat(outcome, identity))

    async def stat(self, outcome: JobOutcome, identity: Identity | None = None) -> int:
        """A worker's counter, or the global total when no identity is given."""
        if identity is None:
            key = self._keys.stat(outcome)
        else:
            key = self._keys.worker_stat(outcome, identity)
        raw = await self._store.get(key)
        return int(raw) if raw is not None else 0

    async def working(self) -> list[str]:
        """Registered identities that currently publish a task."""
        busy = []
        for identity in await self.identities():
            if await self._store.get(self._keys.worker_status(identity)):
                busy.append(identity)
        return busy
