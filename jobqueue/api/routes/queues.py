"""
Queue, failure log and statistics routes.
"""

from fastapi import APIRouter, Depends, Query

from jobqueue.constants import API_V1_PREFIX, JobOutcome
from jobqueue.observability.metrics import get_metrics
from jobqueue.queue.failures import FailureLog
from jobqueue.queue.registry import QueueRegistry
from jobqueue.store.base import StoreClient
from jobqueue.store.connection import get_store
from jobqueue.types.api import (
    FailedListResponse,
    QueueJobsResponse,
    QueueListResponse,
    QueueResponse,
    StatsResponse,
)
from jobqueue.worker.directory import WorkerDirectory

router = APIRouter(prefix=API_V1_PREFIX, tags=["Queues"])


@router.get(
    "/queues",
    response_model=QueueListResponse,
    summary="List queues",
    description="List every known queue with its pending count.",
)
async def list_queues(
    store: StoreClient = Depends(get_store),
) -> QueueListResponse:
    registry = QueueRegistry(store)
    metrics = get_metrics()

    queues = []
    for name in await registry.queues():
        size = await registry.size(name)
        metrics.update_queue_depth(name, size)
        queues.append(QueueResponse(name=name, size=size))

    return QueueListResponse(queues=queues)


@router.get(
    "/queues/{name}/jobs",
    response_model=QueueJobsResponse,
    summary="Peek at a queue",
    description="Read pending jobs without reserving them.",
)
async def peek_queue(
    name: str,
    start: int = Query(default=0, ge=0),
    count: int = Query(default=20, ge=1, le=500),
    store: StoreClient = Depends(get_store),
) -> QueueJobsResponse:
    registry = QueueRegistry(store)

    return QueueJobsResponse(
        queue=name,
        size=await registry.size(name),
        start=start,
        jobs=await registry.peek(name, start=start, count=count),
    )


@router.get(
    "/failed",
    response_model=FailedListResponse,
    summary="List failed jobs",
    description="Read a page of the failure log in insertion order.",
)
async def list_failed(
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=20, ge=1, le=500),
    store: StoreClient = Depends(get_store),
) -> FailedListResponse:
    failures = FailureLog(store)

    return FailedListResponse(
        failed=await failures.range(offset, limit),
        total=await failures.size(),
        offset=offset,
        limit=limit,
    )


@router.get(
    "/stats",
    response_model=StatsResponse,
    summary="Global statistics",
    description="Totals across every queue and worker.",
)
async def get_stats(
    store: StoreClient = Depends(get_store),
) -> StatsResponse:
    registry = QueueRegistry(store)
    directory = WorkerDirectory(store)

    queues = await registry.queues()
    pending = 0
    for name in queues:
        pending += await registry.size(name)

    return StatsResponse(
        pending=pending,
        processed=await directory.stat(JobOutcome.PROCESSED),
        failed=await directory.stat(JobOutcome.FAILED),
        queues=len(queues),
        workers=len(await directory.identities()),
        working=len(await directory.working()),
    )
