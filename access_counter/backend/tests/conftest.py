# backend/tests/conftest.py
from __future__ import annotations

import os
import tempfile
import threading

import pytest

# Settings are read at import time; point both stores at throwaway sqlite files
# before anything imports counter_api.
_TMP = tempfile.mkdtemp(prefix="counter_api_tests_")
os.environ.setdefault("POSTGRES_DATABASE_URL", f"sqlite:///{_TMP}/postgres.db")
os.environ.setdefault("MYSQL_DATABASE_URL", f"sqlite:///{_TMP}/mysql.db")
os.environ.setdefault("REDIS_URL", "redis://127.0.0.1:1/0")
os.environ.setdefault("TRACING_ENABLED", "false")
os.environ.setdefault("COUNTER_LOCATION", "test-host")
os.environ.setdefault("COUNTER_KERNEL", "test-kernel")
os.environ.setdefault("COUNTER_FRAMEWORK", "test-framework")

from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from counter_api.db import Base, build_session_factory  # noqa: E402
from counter_api import models  # noqa: E402,F401
from counter_api.observability import tracing  # noqa: E402


class FakeRedis:
    """In-process stand-in for redis.Redis: INCR under a lock, call log kept."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.values: dict[str, int] = {}
        self.calls: list[str] = []

    def incr(self, key: str, amount: int = 1) -> int:
        with self._lock:
            self.calls.append(key)
            self.values[key] = self.values.get(key, 0) + amount
            return self.values[key]


@pytest.fixture()
def fake_redis() -> FakeRedis:
    return FakeRedis()


def _memory_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture()
def postgres_store():
    engine = _memory_engine()
    try:
        yield engine, build_session_factory(engine)
    finally:
        engine.dispose()


@pytest.fixture()
def mysql_store():
    engine = _memory_engine()
    try:
        yield engine, build_session_factory(engine)
    finally:
        engine.dispose()


@pytest.fixture()
def span_exporter():
    from opentelemetry.sdk.trace.export import SimpleSpanProcessor
    from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

    exporter = InMemorySpanExporter()
    tracing.init_tracing("APIContagem-test", "0.0.0", processors=[SimpleSpanProcessor(exporter)])
    try:
        yield exporter
    finally:
        tracing.shutdown_tracing()
