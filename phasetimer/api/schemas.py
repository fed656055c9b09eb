from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import BaseModel, Field


class TimerStateOut(BaseModel):
    phase: str
    remaining: int
    running: bool
    completed_work_sessions: int
    duration: int
    elapsed_fraction: float
    minutes: int
    seconds: int
    display: str
    title: str
    last_event: dict[str, Any] = Field(default_factory=dict)


class DailyCountOut(BaseModel):
    day: date
    count: int


class StatsOut(BaseModel):
    today: int
    total: int
    days: list[DailyCountOut]


class HealthOut(BaseModel):
    status: str = Field(default="ok")


class MetaOut(BaseModel):
    app: str
    version: str
    db_path: str
    platform: str
    work_seconds: int
    break_seconds: int
