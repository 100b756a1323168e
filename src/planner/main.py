from __future__ import annotations

import random
import time
from typing import Callable

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.cors import CORSMiddleware

from .clock import Clock, SystemClock
from .config import Settings, settings
from .errors import NotFoundError, ValidationError
from .logging import configure_logging, logger
from .middleware import AccessLogMiddleware, RequestIDMiddleware
from .plan import DailyPlanner
from .routers import dashboard, health, plan, practice, review, timer
from .srs import ReviewScheduler
from .store import KeyValueStore, SQLiteKeyValueStore
from .timer import FocusTimer


def _not_found_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


def _validation_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.info("request_rejected", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=422, content={"detail": str(exc)})


def create_app(
    config: Settings | None = None,
    kv: KeyValueStore | None = None,
    clock: Clock | None = None,
    rng: random.Random | None = None,
    timer_clock: Callable[[], float] = time.monotonic,
) -> FastAPI:
    """Build the API with its services wired to one key-value store.

    テストでは kv/clock/rng を差し替えて決定的に動かす。
    """
    config = config or settings
    kv = kv or SQLiteKeyValueStore(config.storage_db_path)
    clock = clock or SystemClock(config.timezone)

    app = FastAPI(title="Exam Planner API", version="0.1.0")
    app.state.scheduler = ReviewScheduler(
        kv, clock, intervals=config.leitner_intervals, key=config.cards_key
    )
    app.state.planner = DailyPlanner(
        kv,
        clock,
        rng=rng,
        tasks_key=config.tasks_key,
        history_key=config.history_key,
        goals_key=config.goals_key,
    )
    app.state.timer = FocusTimer(minutes=config.focus_minutes, clock=timer_clock)
    app.state.task_count = config.plan_task_count

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    # 後から追加したものが外側になる: RequestID → AccessLog の順に通す
    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.add_exception_handler(NotFoundError, _not_found_handler)
    app.add_exception_handler(ValidationError, _validation_handler)

    app.include_router(health.router)  # ヘルスチェック
    app.include_router(review.router, prefix="/api/review")
    app.include_router(plan.router, prefix="/api/plan")
    app.include_router(practice.router, prefix="/api/practice")
    app.include_router(timer.router, prefix="/api/timer")
    app.include_router(dashboard.router, prefix="/api/dashboard")

    logger.info(
        "app_created",
        environment=config.environment,
        cards=len(app.state.scheduler.cards()),
        intervals=list(config.leitner_intervals),
        timezone=config.timezone,
    )
    return app


configure_logging()
app = create_app()
