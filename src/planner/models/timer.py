from pydantic import BaseModel


class TimerResponse(BaseModel):
    """集中タイマーの現在状態（display は MM:SS）。"""

    running: bool
    finished: bool
    remaining_seconds: int
    display: str
