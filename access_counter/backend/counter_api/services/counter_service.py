# backend/counter_api/services/counter_service.py
from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import Request

from ..domain.counter import CounterEngine
from ..domain.reading import MESSAGE_MYSQL, MESSAGE_POSTGRES, MESSAGE_REDIS, ReadingRecord, build_reading
from ..observability.tracing import local_clock, trace_span
from .distributed_counter import DistributedCounter
from .persistence import ReadingRepository
from .runtime_metrics import METRICS
from .storage_errors import StorageError

log = logging.getLogger("counter_api.counter")


@dataclass(frozen=True)
class _PersistedPath:
    generate_span: str
    record_span: str
    value_tag: str
    message: str
    metric: str


ASCENDING = _PersistedPath(
    generate_span="GenerateCounterValue",
    record_span="RecordCounterValue",
    value_tag="current_value",
    message=MESSAGE_POSTGRES,
    metric="counter_ascending",
)

DESCENDING = _PersistedPath(
    generate_span="GenerateDescendingCounterValue",
    record_span="RecordDescendingCounterValue",
    value_tag="current_value_descending",
    message=MESSAGE_MYSQL,
    metric="counter_descending",
)


class CounterService:
    """
    Composes the counter engine, the two relational repositories and the
    distributed counter into the three request operations.

    NOTE:
    - The engine lock is held only inside increment()/decrement(); repository
      I/O always happens after it is released.
    - A persistence failure never rolls the in-process counter back.
    """

    def __init__(
        self,
        *,
        counter: CounterEngine,
        ascending_repository: ReadingRepository,
        descending_repository: ReadingRepository,
        distributed_counter: DistributedCounter,
        distributed_key: str = "APIContagem",
        clock_offset_hours: int = -3,
    ) -> None:
        self.counter = counter
        self.ascending_repository = ascending_repository
        self.descending_repository = descending_repository
        self.distributed_counter = distributed_counter
        self.distributed_key = distributed_key
        self.clock_offset_hours = int(clock_offset_hours)

    def _clock(self) -> str:
        return local_clock(self.clock_offset_hours)

    def _persist(self, path: _PersistedPath, repository: ReadingRepository, reading: ReadingRecord) -> int:
        with trace_span(path.record_span) as span:
            try:
                record_id = repository.record(reading)
            except StorageError as e:
                METRICS.inc(f"{e.kind}_total")
                log.warning(
                    f"{path.metric}_persist_failed",
                    extra={"backend": e.backend, "current_value": reading.current_value},
                )
                raise
            finally:
                span.set_tag(path.value_tag, reading.current_value)
                span.set_tag("clock", self._clock())

        METRICS.inc(f"{path.metric}_records_total")
        log.info(
            f"{path.metric}_recorded",
            extra={"backend": repository.backend, "current_value": reading.current_value, "record_id": record_id},
        )
        return record_id

    def increment_and_persist_a(self) -> ReadingRecord:
        with trace_span(ASCENDING.generate_span) as span:
            value = self.counter.increment()
            span.set_tag(ASCENDING.value_tag, value)
            span.set_tag("clock", self._clock())
            log.info("counter_ascending_value", extra={"current_value": value})
            METRICS.set_gauge("counter_ascending_value", value)

            reading = build_reading(self.counter, current_value=value, message=ASCENDING.message)

        self._persist(ASCENDING, self.ascending_repository, reading)
        return reading

    def decrement_and_persist_b(self) -> ReadingRecord:
        with trace_span(DESCENDING.generate_span) as span:
            value = self.counter.decrement()
            span.set_tag(DESCENDING.value_tag, value)
            span.set_tag("clock", self._clock())
            log.info("counter_descending_value", extra={"current_value": value})
            METRICS.set_gauge("counter_descending_value", value)

            reading = build_reading(self.counter, current_value=value, message=DESCENDING.message)

        self._persist(DESCENDING, self.descending_repository, reading)
        return reading

    def distributed_increment(self) -> ReadingRecord:
        with trace_span("GenerateRedisCounterValue") as span:
            try:
                value = self.distributed_counter.atomic_increment(self.distributed_key)
            except StorageError as e:
                METRICS.inc(f"{e.kind}_total")
                log.warning("counter_redis_failed", extra={"backend": e.backend, "counter_key": self.distributed_key})
                raise
            span.set_tag("current_value_redis", value)
            span.set_tag("clock", self._clock())
            log.info("counter_redis_value", extra={"current_value": value, "counter_key": self.distributed_key})
            METRICS.inc("counter_redis_total")

            return build_reading(self.counter, current_value=value, message=MESSAGE_REDIS)


def get_counter_service(request: Request) -> CounterService:
    """FastAPI dependency: the process-wide service built in create_app()."""
    return request.app.state.counter_service
