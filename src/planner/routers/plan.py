from datetime import date

from fastapi import APIRouter, Depends, Query, status

from ..deps import get_planner, get_task_count
from ..models.plan import (
    GoalCreateRequest,
    GoalItem,
    GoalsResponse,
    HistoryItem,
    HistoryResponse,
    PlanResponse,
    TaskItem,
)
from ..plan import MAX_TASK_COUNT, MIN_TASK_COUNT, DailyPlanner

router = APIRouter(tags=["plan"])


@router.get("/today", response_model=PlanResponse, summary="指定日の学習計画（未作成なら生成）")
def plan_today(
    day: date | None = Query(default=None, alias="date"),
    count: int | None = Query(default=None, ge=MIN_TASK_COUNT, le=MAX_TASK_COUNT),
    planner: DailyPlanner = Depends(get_planner),
    default_count: int = Depends(get_task_count),
) -> PlanResponse:
    """Return the day's plan, generating two topics per subject on first access."""
    day = day or planner.clock.today()
    planner.ensure_plan(day)
    tasks = planner.tasks_for(day, count or default_count)
    return PlanResponse(
        date=day,
        completed=sum(1 for task in tasks if task.done),
        items=[TaskItem.from_task(task) for task in tasks],
    )


@router.post("/tasks/{task_id}/toggle", response_model=TaskItem, summary="タスクの完了状態を切り替え")
def plan_toggle_task(task_id: str, planner: DailyPlanner = Depends(get_planner)) -> TaskItem:
    return TaskItem.from_task(planner.toggle_task(task_id))


@router.get("/history", response_model=HistoryResponse, summary="日別の完了数（直近 limit 件）")
def plan_history(
    limit: int = Query(default=30, ge=1, le=365),
    planner: DailyPlanner = Depends(get_planner),
) -> HistoryResponse:
    return HistoryResponse(
        items=[HistoryItem.from_entry(entry) for entry in planner.recent_history(limit)],
        active_days=planner.active_days(),
    )


@router.get("/goals", response_model=GoalsResponse, summary="目標一覧")
def plan_goals(planner: DailyPlanner = Depends(get_planner)) -> GoalsResponse:
    return GoalsResponse(
        items=[GoalItem.from_goal(goal) for goal in planner.goals()],
        open=len(planner.open_goals()),
    )


@router.post("/goals", response_model=GoalItem, status_code=status.HTTP_201_CREATED, summary="目標を追加")
def plan_add_goal(req: GoalCreateRequest, planner: DailyPlanner = Depends(get_planner)) -> GoalItem:
    return GoalItem.from_goal(planner.add_goal(req.text))


@router.post("/goals/{goal_id}/toggle", response_model=GoalItem, summary="目標の達成状態を切り替え")
def plan_toggle_goal(goal_id: str, planner: DailyPlanner = Depends(get_planner)) -> GoalItem:
    return GoalItem.from_goal(planner.toggle_goal(goal_id))
