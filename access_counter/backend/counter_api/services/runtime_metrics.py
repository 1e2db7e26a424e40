# backend/counter_api/services/runtime_metrics.py
from __future__ import annotations

import threading


class _Metrics:
    """Process-local counters and last-value gauges, rendered at /api/metrics."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counters: dict[str, int] = {}
        self._gauges: dict[str, int] = {}

    def inc(self, name: str, n: int = 1) -> None:
        with self._lock:
            self._counters[name] = int(self._counters.get(name, 0)) + int(n)

    def set_gauge(self, name: str, value: int) -> None:
        with self._lock:
            self._gauges[name] = int(value)

    def snapshot(self) -> dict[str, int]:
        with self._lock:
            out = dict(self._counters)
            out.update(self._gauges)
            return out

    def render_text(self) -> str:
        with self._lock:
            counters = sorted(self._counters.items())
            gauges = sorted(self._gauges.items())

        lines: list[str] = []
        for k, v in counters:
            lines.append(f"# TYPE {k} counter")
            lines.append(f"{k} {v}")
        for k, v in gauges:
            lines.append(f"# TYPE {k} gauge")
            lines.append(f"{k} {v}")
        return "\n".join(lines) + "\n"


METRICS = _Metrics()
