# backend/counter_api/domain/counter.py
from __future__ import annotations

import platform
import socket
import threading
from typing import Optional


def _default_location() -> str:
    return socket.gethostname()


def _default_kernel() -> str:
    return platform.platform()


def _default_framework() -> str:
    return f"{platform.python_implementation()} {platform.python_version()}"


class CounterEngine:
    """
    Process-wide counter state.

    Two independent counters share one lock:
      - ascending_value only goes up (starts at 0)
      - descending_value only goes down (starts at 0)

    The lock covers mutate-and-read only. Callers must never hold it across I/O,
    which is why there is no public access to it.
    """

    def __init__(
        self,
        *,
        location: Optional[str] = None,
        kernel: Optional[str] = None,
        framework: Optional[str] = None,
    ) -> None:
        self._lock = threading.Lock()
        self._ascending = 0
        self._descending = 0

        self._location = location or _default_location()
        self._kernel = kernel or _default_kernel()
        self._framework = framework or _default_framework()

    # ---- transitions ----
    def increment(self) -> int:
        with self._lock:
            self._ascending += 1
            return self._ascending

    def decrement(self) -> int:
        with self._lock:
            self._descending -= 1
            return self._descending

    # ---- read-only accessors ----
    @property
    def ascending_value(self) -> int:
        with self._lock:
            return self._ascending

    @property
    def descending_value(self) -> int:
        with self._lock:
            return self._descending

    @property
    def location(self) -> str:
        return self._location

    @property
    def kernel(self) -> str:
        return self._kernel

    @property
    def framework(self) -> str:
        return self._framework
