"""
Worker identity value object.
"""

from dataclasses import dataclass

from jobqueue.constants import IDENTITY_SEPARATOR, QUEUE_SEPARATOR


@dataclass(frozen=True)
class WorkerIdentity:
    """
    Identity of a worker process: ``hostname:pid:queue1,queue2``.

    Computed once when the worker is constructed and used as the only key into
    the worker directory. Queue order is the worker's priority order.
    """

    hostname: str
    pid: int
    queues: tuple[str, ...]

    def __str__(self) -> str:
        return IDENTITY_SEPARATOR.join(
            [self.hostname, str(self.pid), QUEUE_SEPARATOR.join(self.queues)]
        )

    @classmethod
    def parse(cls, value: str) -> "WorkerIdentity":
        """
        Parse an identity string, splitting on the first two separators only.

        Raises:
            ValueError: If the value is not a well-formed identity.
        """
        parts = value.split(IDENTITY_SEPARATOR, 2)
        if len(parts) != 3 or not parts[0]:
            raise ValueError(f"Malformed worker identity: {value!r}")

        hostname, pid, queues = parts
        return cls(
            hostname=hostname,
            pid=int(pid),
            queues=tuple(name for name in queues.split(QUEUE_SEPARATOR) if name),
        )

    def is_local_to(self, hostname: str) -> bool:
        """Check whether this identity claims to run on the given host."""
        return self.hostname == hostname
