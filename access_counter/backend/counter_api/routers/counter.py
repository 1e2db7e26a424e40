# backend/counter_api/routers/counter.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ..schemas import ReadingOut
from ..services.counter_service import CounterService, get_counter_service
from ..services.storage_errors import StorageError, StorageUnavailable

router = APIRouter(prefix="/counter", tags=["counter"])


def _http_error(e: StorageError) -> HTTPException:
    status = 503 if isinstance(e, StorageUnavailable) else 409
    return HTTPException(status_code=status, detail=f"{e.kind}:{e.backend}")


# Sync handlers: FastAPI runs them on its worker thread pool.
@router.get("", response_model=ReadingOut)
def ascending(service: CounterService = Depends(get_counter_service)):
    try:
        return service.increment_and_persist_a()
    except StorageError as e:
        raise _http_error(e) from e


@router.get("/descending", response_model=ReadingOut)
def descending(service: CounterService = Depends(get_counter_service)):
    try:
        return service.decrement_and_persist_b()
    except StorageError as e:
        raise _http_error(e) from e


@router.get("/redis", response_model=ReadingOut)
def distributed(service: CounterService = Depends(get_counter_service)):
    try:
        return service.distributed_increment()
    except StorageError as e:
        raise _http_error(e) from e
