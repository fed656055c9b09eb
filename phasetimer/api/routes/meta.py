from __future__ import annotations

import platform
from pathlib import Path

from fastapi import APIRouter, Depends, Request

from ... import __version__
from ..deps import get_timer_service
from ..schemas import MetaOut
from ..timer_service import TimerService

router = APIRouter(prefix="/api/v1", tags=["system"])


@router.get("/meta", response_model=MetaOut)
def meta(request: Request, service: TimerService = Depends(get_timer_service)) -> MetaOut:
    return MetaOut(
        app="PhaseTimer",
        version=__version__,
        db_path=str(Path(request.app.state.db_path)),
        platform=platform.platform(),
        work_seconds=service.settings.work_seconds,
        break_seconds=service.settings.break_seconds,
    )
