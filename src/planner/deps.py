"""FastAPI dependencies resolving the services stored on ``app.state``."""

from fastapi import Request

from .plan import DailyPlanner
from .srs import ReviewScheduler
from .timer import FocusTimer


def get_scheduler(request: Request) -> ReviewScheduler:
    return request.app.state.scheduler


def get_planner(request: Request) -> DailyPlanner:
    return request.app.state.planner


def get_timer(request: Request) -> FocusTimer:
    return request.app.state.timer


def get_task_count(request: Request) -> int:
    return request.app.state.task_count
