# backend/counter_api/routers/health.py
from __future__ import annotations

from fastapi import APIRouter

from ..config import settings
from ..observability.tracing import is_tracing_enabled
from ..schemas import HealthOut

router = APIRouter(tags=["ops"])


@router.get("/health", response_model=HealthOut)
def health():
    # liveness only: stores are not probed here
    return HealthOut(
        status="ok",
        service=settings.service_name,
        version=settings.service_version,
        tracing=is_tracing_enabled(),
    )
