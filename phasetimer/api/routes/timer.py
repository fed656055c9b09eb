from __future__ import annotations

import json
import queue
from typing import Iterator

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from ..deps import get_timer_service
from ..schemas import TimerStateOut
from ..timer_service import TimerService

router = APIRouter(prefix="/api/v1", tags=["timer"])


@router.get("/timer/state", response_model=TimerStateOut)
def timer_state(service: TimerService = Depends(get_timer_service)) -> TimerStateOut:
    return TimerStateOut(**service.state())


@router.post("/timer/start", response_model=TimerStateOut)
def start_timer(service: TimerService = Depends(get_timer_service)) -> TimerStateOut:
    return TimerStateOut(**service.start())


@router.post("/timer/pause", response_model=TimerStateOut)
def pause_timer(service: TimerService = Depends(get_timer_service)) -> TimerStateOut:
    return TimerStateOut(**service.pause())


@router.post("/timer/reset", response_model=TimerStateOut)
def reset_timer(service: TimerService = Depends(get_timer_service)) -> TimerStateOut:
    return TimerStateOut(**service.reset())


@router.get("/timer/stream")
def timer_stream(service: TimerService = Depends(get_timer_service)) -> StreamingResponse:
    subscriber = service.subscribe()

    def event_iter() -> Iterator[str]:
        try:
            yield f"data: {json.dumps({'event': 'state', **service.state()}, ensure_ascii=False, default=str)}\n\n"
            while True:
                try:
                    event = subscriber.get(timeout=10)
                    yield f"data: {json.dumps(event, ensure_ascii=False, default=str)}\n\n"
                except queue.Empty:
                    yield ": keepalive\n\n"
        finally:
            service.unsubscribe(subscriber)

    return StreamingResponse(event_iter(), media_type="text/event-stream")
