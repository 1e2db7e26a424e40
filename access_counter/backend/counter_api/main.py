# backend/counter_api/main.py
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .db import MySqlSessionLocal, PostgresSessionLocal, create_tables, mysql_engine, postgres_engine
from .domain.counter import CounterEngine
from .logging_config import configure_logging
from .middleware.request_id import RequestIdMiddleware
from .middleware.structured_logging import StructuredLoggingMiddleware
from .observability.tracing import init_tracing, instrument_libraries, shutdown_tracing
from .routers.counter import router as counter_router
from .routers.health import router as health_router
from .routers.metrics import router as metrics_router
from .services.counter_service import CounterService
from .services.distributed_counter import RedisDistributedCounter, build_redis_client
from .services.persistence import MySqlReadingRepository, PostgresReadingRepository

API_PREFIX = "/api"

log = logging.getLogger("counter_api")


def _cors_origins() -> list[str]:
    val = getattr(settings, "cors_allow_origins", ["*"])
    if isinstance(val, str):
        v = val.strip()
        return ["*"] if v == "*" else [x.strip() for x in v.split(",") if x.strip()]
    if isinstance(val, list) and val:
        return val
    return ["*"]


def build_counter_service() -> CounterService:
    """Backends are picked here, from configuration, once per process."""
    return CounterService(
        counter=CounterEngine(
            location=settings.counter_location,
            kernel=settings.counter_kernel,
            framework=settings.counter_framework,
        ),
        ascending_repository=PostgresReadingRepository(PostgresSessionLocal),
        descending_repository=MySqlReadingRepository(MySqlSessionLocal),
        distributed_counter=RedisDistributedCounter(build_redis_client()),
        distributed_key=settings.redis_counter_key,
        clock_offset_hours=settings.clock_utc_offset_hours,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.auto_create_tables:
        create_tables(postgres_engine, mysql_engine)
    log.info("counter_api_started")
    try:
        yield
    finally:
        shutdown_tracing()


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(
        title="Access Counter API",
        version=settings.service_version,
        lifespan=lifespan,
    )
    app.state.counter_service = build_counter_service()

    # CORS wide open unless configured otherwise
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(StructuredLoggingMiddleware)
    app.add_middleware(RequestIdMiddleware)

    app.include_router(health_router, prefix=API_PREFIX)
    app.include_router(metrics_router, prefix=API_PREFIX)
    app.include_router(counter_router, prefix=API_PREFIX)

    # middleware can't be added once the app has started, so tracing is wired here
    tracing_on = init_tracing(
        settings.service_name,
        settings.service_version,
        endpoint=settings.otlp_endpoint,
        console=settings.otlp_console_exporter,
        enabled=settings.tracing_enabled,
    )
    if tracing_on and settings.tracing_instrument_libraries:
        instrument_libraries(app, engines=(postgres_engine, mysql_engine))

    return app


app = create_app()
