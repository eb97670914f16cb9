"""
Centralized store key names.

Single source of truth for every structure the processor keeps in the store.
"""

from dataclasses import dataclass

from jobqueue.constants import (
    KEY_FAILED,
    KEY_QUEUE,
    KEY_QUEUES,
    KEY_STAT,
    KEY_WORKER_STARTED,
    KEY_WORKER_STAT,
    KEY_WORKER_STATUS,
    KEY_WORKERS,
)


@dataclass(frozen=True)
class Keys:
    """Builds namespaced keys."""

    namespace: str = "jobqueue"

    def _key(self, suffix: str) -> str:
        return f"{self.namespace}:{suffix}"

    def queue(self, name: str) -> str:
        """LIST of JSON payloads waiting on a queue."""
        return self._key(KEY_QUEUE.format(name=name))

    def queues(self) -> str:
        """SET of every queue name that has been enqueued to."""
        return self._key(KEY_QUEUES)

    def workers(self) -> str:
        """SET of registered worker identities."""
        return self._key(KEY_WORKERS)

    def worker_status(self, identity: object) -> str:
        """STRING holding the task a worker is processing."""
        return self._key(KEY_WORKER_STATUS.format(identity=identity))

    def worker_started(self, identity: object) -> str:
        return self._key(KEY_WORKER_STARTED.format(identity=identity))

    def stat(self, stat: str) -> str:
        """Global counter."""
        return self._key(KEY_STAT.format(stat=stat))

    def worker_stat(self, stat: str, identity: object) -> str:
        """Per-worker counter."""
        return self._key(KEY_WORKER_STAT.format(stat=stat, identity=identity))

    def failed(self) -> str:
        """LIST of JSON failure entries."""
        return self._key(KEY_FAILED)
