from fastapi import APIRouter, Depends

from ..deps import get_timer
from ..models.timer import TimerResponse
from ..timer import FocusTimer

router = APIRouter(tags=["timer"])


def _snapshot(timer: FocusTimer) -> TimerResponse:
    return TimerResponse(
        running=timer.running,
        finished=timer.finished,
        remaining_seconds=timer.remaining_seconds(),
        display=timer.display(),
    )


@router.get("", response_model=TimerResponse, summary="集中タイマーの状態")
def timer_state(timer: FocusTimer = Depends(get_timer)) -> TimerResponse:
    return _snapshot(timer)


@router.post("/toggle", response_model=TimerResponse, summary="開始/一時停止")
def timer_toggle(timer: FocusTimer = Depends(get_timer)) -> TimerResponse:
    timer.toggle()
    return _snapshot(timer)


@router.post("/reset", response_model=TimerResponse, summary="リセット")
def timer_reset(timer: FocusTimer = Depends(get_timer)) -> TimerResponse:
    timer.reset()
    return _snapshot(timer)
