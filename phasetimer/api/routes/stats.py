from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from ...db import SessionHistory
from ..deps import get_history
from ..schemas import DailyCountOut, StatsOut

router = APIRouter(prefix="/api/v1", tags=["stats"])


@router.get("/stats", response_model=StatsOut)
def get_stats(
    days: int = Query(default=7, ge=1, le=366),
    history: SessionHistory = Depends(get_history),
) -> StatsOut:
    items = history.recent_days(days)
    return StatsOut(
        today=items[-1].count,
        total=history.total(),
        days=[DailyCountOut(day=item.day, count=item.count) for item in items],
    )
