from datetime import date

from pydantic import BaseModel, Field

from ..plan import Goal, HistoryEntry, Task


class TaskItem(BaseModel):
    id: str
    title: str
    subject: str
    subject_name: str
    topic: str
    date: date
    done: bool

    @classmethod
    def from_task(cls, task: Task) -> "TaskItem":
        return cls(
            id=task.id,
            title=task.title,
            subject=task.subject,
            subject_name=task.subject_name,
            topic=task.topic,
            date=task.date,
            done=task.done,
        )


class PlanResponse(BaseModel):
    """Response model for one day's plan.

    - completed: items のうち完了済みの件数
    """

    date: date
    completed: int
    items: list[TaskItem]


class HistoryItem(BaseModel):
    date: date
    tasks: int

    @classmethod
    def from_entry(cls, entry: HistoryEntry) -> "HistoryItem":
        return cls(date=entry.date, tasks=entry.tasks)


class HistoryResponse(BaseModel):
    items: list[HistoryItem]
    active_days: int


class GoalItem(BaseModel):
    id: str
    text: str
    done: bool

    @classmethod
    def from_goal(cls, goal: Goal) -> "GoalItem":
        return cls(id=goal.id, text=goal.text, done=goal.done)


class GoalCreateRequest(BaseModel):
    text: str = Field(min_length=1, max_length=200)


class GoalsResponse(BaseModel):
    items: list[GoalItem]
    open: int


class DashboardResponse(BaseModel):
    """Headline numbers shown above the plan.

    streak_days は「1件以上タスクを完了した日」の累計（連続日数ではない）。
    """

    date: date
    tasks_done: int
    tasks_total: int
    cards_due: int
    streak_days: int
    open_goals: int
