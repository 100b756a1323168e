from fastapi import APIRouter, Depends

from ..dashboard import build_summary
from ..deps import get_planner, get_scheduler, get_task_count
from ..models.plan import DashboardResponse
from ..plan import DailyPlanner
from ..srs import ReviewScheduler

router = APIRouter(tags=["dashboard"])


@router.get("", response_model=DashboardResponse, summary="今日のサマリー（タスク/復習/継続日数/目標）")
def dashboard(
    scheduler: ReviewScheduler = Depends(get_scheduler),
    planner: DailyPlanner = Depends(get_planner),
    task_count: int = Depends(get_task_count),
) -> DashboardResponse:
    summary = build_summary(scheduler, planner, task_count=task_count)
    return DashboardResponse(
        date=summary.date,
        tasks_done=summary.tasks_done,
        tasks_total=summary.tasks_total,
        cards_due=summary.cards_due,
        streak_days=summary.streak_days,
        open_goals=summary.open_goals,
    )
