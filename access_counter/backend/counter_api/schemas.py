# backend/counter_api/schemas.py
from __future__ import annotations

from pydantic import BaseModel, ConfigDict


# -------------------- Counter readings --------------------

class ReadingOut(BaseModel):
    current_value: int
    location: str
    kernel: str
    framework: str
    message: str
    model_config = ConfigDict(from_attributes=True)


# -------------------- Ops --------------------

class HealthOut(BaseModel):
    status: str
    service: str
    version: str
    tracing: bool
