from __future__ import annotations

from pathlib import Path

from fastapi import Request

from ..db import SessionHistory
from .timer_service import TimerService


def get_history(request: Request) -> SessionHistory:
    db_path = Path(request.app.state.db_path)
    return SessionHistory(db_path)


def get_timer_service(request: Request) -> TimerService:
    return request.app.state.timer_service
