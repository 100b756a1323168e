from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from .plan import DEFAULT_TASK_COUNT, DailyPlanner
from .srs import ReviewScheduler


@dataclass(frozen=True)
class DashboardSummary:
    date: date
    tasks_done: int
    tasks_total: int
    cards_due: int
    streak_days: int
    open_goals: int


def build_summary(
    scheduler: ReviewScheduler,
    planner: DailyPlanner,
    day: date | None = None,
    task_count: int = DEFAULT_TASK_COUNT,
) -> DashboardSummary:
    """Collect the headline numbers for one day.

    streak_days は連続日数ではなく「1件以上完了した日」の累計。
    """
    day = day or scheduler.clock.today()
    done, total = planner.completed(day, task_count)
    return DashboardSummary(
        date=day,
        tasks_done=done,
        tasks_total=total,
        cards_due=scheduler.due_count(day),
        streak_days=planner.active_days(),
        open_goals=len(planner.open_goals()),
    )
