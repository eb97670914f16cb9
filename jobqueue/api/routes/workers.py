"""
Worker directory routes.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from jobqueue.constants import API_V1_PREFIX, WorkerState
from jobqueue.store.base import StoreClient
from jobqueue.store.connection import get_store
from jobqueue.types.api import WorkerListResponse, WorkerResponse
from jobqueue.worker.main import Worker

router = APIRouter(prefix=f"{API_V1_PREFIX}/workers", tags=["Workers"])


async def _worker_to_response(worker: Worker) -> WorkerResponse:
    """Convert a worker handle to a WorkerResponse."""
    task = await worker.task()
    return WorkerResponse(
        id=str(worker),
        hostname=worker.identity.hostname,
        pid=worker.identity.pid,
        queues=list(worker.queues),
        state=WorkerState.PROCESSING if task is not None else WorkerState.IDLE,
        task=task,
        processed=await worker.processed(),
        failed=await worker.failed(),
        started=await worker.started(),
    )


@router.get(
    "",
    response_model=WorkerListResponse,
    summary="List workers",
    description="List every registered worker with its current task and counters.",
)
async def list_workers(
    store: StoreClient = Depends(get_store),
) -> WorkerListResponse:
    workers = [await _worker_to_response(worker) for worker in await Worker.all(store=store)]

    return WorkerListResponse(
        workers=workers,
        total=len(workers),
        working=sum(1 for worker in workers if worker.task is not None),
    )


@router.get(
    "/{worker_id}",
    response_model=WorkerResponse,
    summary="Get worker",
    description="Get a registered worker by identity (hostname:pid:queues).",
)
async def get_worker(
    worker_id: str,
    store: StoreClient = Depends(get_store),
) -> WorkerResponse:
    """
    Look up a single worker.

    Raises:
        HTTPException: 404 if the identity is not registered.
    """
    worker = await Worker.find(worker_id, store=store)

    if worker is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Worker {worker_id} not found",
        )

    return await _worker_to_response(worker)
