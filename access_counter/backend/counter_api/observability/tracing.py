"""OpenTelemetry tracing for the counter paths.

Usage:
    # at startup
    init_tracing(service_name="APIContagem", service_version="1.0.0", endpoint="http://localhost:4317")

    # around a unit of work
    with trace_span("GenerateCounterValue") as span:
        value = counter.increment()
        span.set_tag("current_value", value)

Tracing is best-effort: a span that fails to start, tag or end is logged and
dropped, never surfaced to the caller. Errors raised by the wrapped work are
recorded on the span and re-raised unchanged.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Any

from opentelemetry import context as otel_context
from opentelemetry import trace as otel_trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.redis import RedisInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import SpanProcessor, TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter, SimpleSpanProcessor
from opentelemetry.trace import Status, StatusCode

log = logging.getLogger("counter_api.tracing")

# Module-level state
_provider: TracerProvider | None = None
_tracer: Any | None = None
_tracing_enabled: bool = False


def init_tracing(
    service_name: str = "APIContagem",
    service_version: str = "1.0.0",
    *,
    endpoint: str | None = None,
    console: bool = False,
    enabled: bool = True,
    processors: Iterable[SpanProcessor] = (),
) -> bool:
    """Initialize (or reconfigure) the tracer.

    Args:
        service_name: ``service.name`` resource attribute.
        service_version: ``service.version`` resource attribute.
        endpoint: OTLP gRPC endpoint. If None, no OTLP exporter is attached.
        console: Also print finished spans to stdout.
        enabled: If False, trace_span yields a no-op handle.
        processors: Extra span processors (tests attach an in-memory exporter here).

    Returns:
        True if tracing is active afterwards.
    """
    global _provider, _tracer, _tracing_enabled

    shutdown_tracing()

    if not enabled:
        log.info("tracing_disabled")
        return False

    try:
        resource = Resource.create({"service.name": service_name, "service.version": service_version})
        provider = TracerProvider(resource=resource)

        if endpoint:
            provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint, insecure=True)))
        if console:
            provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))
        for p in processors:
            provider.add_span_processor(p)

        # The global provider can only be set once per process; our own tracer
        # always comes from this provider so reconfiguration still works.
        if not isinstance(otel_trace.get_tracer_provider(), TracerProvider):
            otel_trace.set_tracer_provider(provider)

        _provider = provider
        _tracer = provider.get_tracer(service_name, service_version)
        _tracing_enabled = True
    except Exception:
        log.warning("tracing_init_failed", exc_info=True)
        _provider = None
        _tracer = None
        _tracing_enabled = False
        return False

    log.info("tracing_initialized", extra={"otlp_endpoint": endpoint or ""})
    return True


def shutdown_tracing() -> None:
    """Flush and drop the current provider. Safe to call when tracing is off."""
    global _provider, _tracer, _tracing_enabled

    provider = _provider
    _provider = None
    _tracer = None
    _tracing_enabled = False

    if provider is not None:
        try:
            provider.shutdown()
        except Exception:
            log.warning("tracing_shutdown_failed", exc_info=True)


def is_tracing_enabled() -> bool:
    return _tracing_enabled and _tracer is not None


def local_clock(offset_hours: int = -3, *, now: datetime | None = None) -> str:
    """Wall-clock time HH:MM:SS at a fixed UTC offset."""
    utc_now = now or datetime.now(timezone.utc)
    return (utc_now.astimezone(timezone.utc) + timedelta(hours=offset_hours)).strftime("%H:%M:%S")


class SpanHandle:
    """Wraps an OTel span; every call is best-effort."""

    def __init__(self, name: str, span: Any | None = None, token: object | None = None) -> None:
        self.name = name
        self._span = span
        self._token = token
        self._stopped = False

    @property
    def recording(self) -> bool:
        return self._span is not None

    def set_tag(self, key: str, value: Any) -> None:
        if self._span is None or self._stopped:
            return
        if not isinstance(value, (str, int, float, bool)):
            value = str(value)
        try:
            self._span.set_attribute(key, value)
        except Exception:
            log.warning("span_set_tag_failed", extra={"span": self.name}, exc_info=True)

    def record_error(self, exc: BaseException) -> None:
        if self._span is None or self._stopped:
            return
        try:
            self._span.record_exception(exc)
            self._span.set_status(Status(StatusCode.ERROR, str(exc)))
        except Exception:
            log.warning("span_record_error_failed", extra={"span": self.name}, exc_info=True)

    def stop(self) -> None:
        if self._stopped:
            return
        self._stopped = True

        if self._token is not None:
            try:
                otel_context.detach(self._token)
            except Exception:
                log.warning("span_detach_failed", extra={"span": self.name}, exc_info=True)
        if self._span is not None:
            try:
                self._span.end()
            except Exception:
                log.warning("span_end_failed", extra={"span": self.name}, exc_info=True)


def _start_span(name: str) -> SpanHandle:
    if not _tracing_enabled or _tracer is None:
        return SpanHandle(name)
    try:
        span = _tracer.start_span(name)
    except Exception:
        log.warning("span_start_failed", extra={"span": name}, exc_info=True)
        return SpanHandle(name)

    try:
        token = otel_context.attach(otel_trace.set_span_in_context(span))
    except Exception:
        log.warning("span_attach_failed", extra={"span": name}, exc_info=True)
        token = None
    return SpanHandle(name, span, token)


@contextmanager
def trace_span(name: str) -> Iterator[SpanHandle]:
    """Scoped span: started on entry, stopped on every exit path."""
    handle = _start_span(name)
    try:
        yield handle
    except BaseException as exc:
        handle.record_error(exc)
        raise
    finally:
        handle.stop()


def instrument_libraries(app: Any, engines: Iterable[Any] = ()) -> None:
    """HTTP server spans plus SQLAlchemy and Redis client spans."""
    try:
        FastAPIInstrumentor.instrument_app(app, tracer_provider=_provider)
        engines = list(engines)
        if engines and not SQLAlchemyInstrumentor().is_instrumented_by_opentelemetry:
            SQLAlchemyInstrumentor().instrument(engines=engines, tracer_provider=_provider)
        if not RedisInstrumentor().is_instrumented_by_opentelemetry:
            RedisInstrumentor().instrument(tracer_provider=_provider)
    except Exception:
        log.warning("library_instrumentation_failed", exc_info=True)
