# backend/counter_api/domain/reading.py
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from .counter import CounterEngine

MESSAGE_POSTGRES = "APIContagem - testes com PostgreSQL"
MESSAGE_MYSQL = "APIContagem - testes com MySQL"
MESSAGE_REDIS = "APIContagem - testes com Redis"


@dataclass(frozen=True)
class ReadingRecord:
    current_value: int
    location: str
    kernel: str
    framework: str
    message: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def build_reading(counter: CounterEngine, *, current_value: int, message: str) -> ReadingRecord:
    """Snapshot value + the engine's static metadata."""
    return ReadingRecord(
        current_value=int(current_value),
        location=counter.location,
        kernel=counter.kernel,
        framework=counter.framework,
        message=message,
    )
