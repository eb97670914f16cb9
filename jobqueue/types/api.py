"""
API response type definitions.
"""

from datetime import datetime

from pydantic import BaseModel

from jobqueue.constants import WorkerState
from jobqueue.types.job import FailedEntry, JobPayload, Task


class WorkerResponse(BaseModel):
    """A registered worker and what it is doing."""

    id: str
    hostname: str
    pid: int
    queues: list[str]
    state: WorkerState
    task: Task | None = None
    processed: int
    failed: int
    started: datetime | None = None


class WorkerListResponse(BaseModel):
    """All registered workers."""

    workers: list[WorkerResponse]
    total: int
    working: int


class QueueResponse(BaseModel):
    """A known queue and its pending count."""

    name: str
    size: int


class QueueListResponse(BaseModel):
    """All known queues."""

    queues: list[QueueResponse]


class QueueJobsResponse(BaseModel):
    """Pending payloads of a queue, without removing them."""

    queue: str
    size: int
    start: int
    jobs: list[JobPayload]


class FailedListResponse(BaseModel):
    """A page of the failure log."""

    failed: list[FailedEntry]
    total: int
    offset: int
    limit: int


class StatsResponse(BaseModel):
    """Global counters across all queues and workers."""

    pending: int
    processed: int
    failed: int
    queues: int
    workers: int
    working: int


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    store: str
    timestamp: datetime
