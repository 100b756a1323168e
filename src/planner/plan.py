from __future__ import annotations

import json
import random
import threading
from dataclasses import asdict, dataclass, replace
from datetime import date
from typing import Any, Callable, TypeVar

from .clock import Clock
from .errors import NotFoundError, PersistenceError, ValidationError
from .id_factory import generate_goal_id, generate_task_id
from .logging import logger
from .store import KeyValueStore

MIN_TASK_COUNT = 3
MAX_TASK_COUNT = 12
DEFAULT_TASK_COUNT = 6
TASKS_PER_SUBJECT = 2

SUBJECTS: tuple[tuple[str, str], ...] = (
    ("phy", "Physics"),
    ("chem", "Chemistry"),
    ("math", "Maths"),
)

DEFAULT_TOPICS: dict[str, tuple[str, ...]] = {
    "phy": (
        "Kinematics", "NLM", "Work-Energy-Power", "Rotation", "Fluids", "Thermodynamics",
        "Waves", "Optics", "Electrostatics", "Current Electricity", "Magnetism", "Modern Physics",
    ),
    "chem": (
        "Physical: Mole Concept", "Thermo & Equilibrium", "Electrochemistry", "Kinetics",
        "Inorganic: Periodic Table", "Chemical Bonding", "s/p/d/f-block", "Coordination",
        "Organic: GOC", "Hydrocarbons", "Carbonyls", "Amines & Biomolecules",
    ),
    "math": (
        "Quadratic", "Sequence & Series", "Binomial", "Complex No.", "Matrices & Determinants",
        "Limit/Continuity/DIFF", "Application of Derivatives", "Integration",
        "Differential Equations", "Vector/3D", "Probability", "Conics",
    ),
}


@dataclass(frozen=True)
class Task:
    id: str
    title: str
    subject: str
    subject_name: str
    topic: str
    date: date
    done: bool = False

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["date"] = self.date.isoformat()
        return data

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Task:
        return cls(
            id=str(raw["id"]),
            title=str(raw["title"]),
            subject=str(raw.get("subject") or ""),
            subject_name=str(raw.get("subject_name") or ""),
            topic=str(raw.get("topic") or ""),
            date=date.fromisoformat(str(raw["date"])),
            done=bool(raw.get("done", False)),
        )


@dataclass(frozen=True)
class HistoryEntry:
    """Number of tasks ticked off on one day."""

    date: date
    tasks: int

    def to_dict(self) -> dict[str, Any]:
        return {"date": self.date.isoformat(), "tasks": self.tasks}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> HistoryEntry:
        return cls(date=date.fromisoformat(str(raw["date"])), tasks=int(raw.get("tasks") or 0))


@dataclass(frozen=True)
class Goal:
    id: str
    text: str
    done: bool = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Goal:
        return cls(id=str(raw["id"]), text=str(raw["text"]), done=bool(raw.get("done", False)))


T = TypeVar("T")


def validate_task_count(count: int) -> int:
    if not MIN_TASK_COUNT <= count <= MAX_TASK_COUNT:
        raise ValidationError(f"task count must be between {MIN_TASK_COUNT} and {MAX_TASK_COUNT}")
    return count


class DailyPlanner:
    """Daily task plan, progress history and goals.

    - タスク・履歴・目標はそれぞれ別キーに JSON 配列として保存する
    - 保存失敗は警告ログのみ（メモリ上の状態が正）
    - 履歴はタスクの完了状態が変わるたびに、その日付の完了数で上書きする（今日以前の日付のみ）
    """

    def __init__(
        self,
        kv: KeyValueStore,
        clock: Clock,
        rng: random.Random | None = None,
        tasks_key: str = "jee_tasks",
        history_key: str = "jee_history",
        goals_key: str = "jee_goals",
    ) -> None:
        self.kv = kv
        self.clock = clock
        self.rng = rng or random.Random()
        self.tasks_key = tasks_key
        self.history_key = history_key
        self.goals_key = goals_key
        self._lock = threading.Lock()
        self._tasks: list[Task] = self._load(tasks_key, Task.from_dict)
        self._history: list[HistoryEntry] = sorted(
            self._load(history_key, HistoryEntry.from_dict), key=lambda entry: entry.date
        )
        self._goals: list[Goal] = self._load(goals_key, Goal.from_dict)

    # --- low-level helpers ---
    def _load(self, key: str, decode: Callable[[dict[str, Any]], T]) -> list[T]:
        try:
            blob = self.kv.load(key)
        except PersistenceError as exc:
            logger.warning("plan_load_failed", key=key, error=str(exc))
            return []
        if blob is None:
            return []
        try:
            raw = json.loads(blob)
        except json.JSONDecodeError as exc:
            logger.warning("plan_load_failed", key=key, error=str(exc))
            return []
        if not isinstance(raw, list):
            logger.warning("plan_load_failed", key=key, error="stored value is not a JSON array")
            return []
        items: list[T] = []
        for entry in raw:
            try:
                items.append(decode(entry))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("plan_entry_skipped", key=key, error=repr(exc))
        return items

    def _save(self, key: str, items: list[Any]) -> bool:
        blob = json.dumps([item.to_dict() for item in items], ensure_ascii=False)
        try:
            self.kv.save(key, blob)
        except PersistenceError as exc:
            logger.warning("plan_persist_failed", key=key, error=str(exc))
            return False
        return True

    def _record_history(self, day: date) -> HistoryEntry | None:
        # 未来日の計画は履歴に残さない（履歴は今日までの実績のみ）
        if day > self.clock.today():
            return None
        done = sum(1 for task in self._tasks if task.date == day and task.done)
        entry = HistoryEntry(date=day, tasks=done)
        for idx, existing in enumerate(self._history):
            if existing.date == day:
                self._history[idx] = entry
                break
        else:
            self._history.append(entry)
            self._history.sort(key=lambda item: item.date)
        self._save(self.history_key, self._history)
        return entry

    def _generate(self, day: date) -> list[Task]:
        picks: list[Task] = []
        for key, name in SUBJECTS:
            topics = DEFAULT_TOPICS[key]
            for _ in range(TASKS_PER_SUBJECT):
                topic = self.rng.choice(topics)
                picks.append(
                    Task(
                        id=generate_task_id(),
                        title=f"{name}: {topic}",
                        subject=key,
                        subject_name=name,
                        topic=topic,
                        date=day,
                    )
                )
        return picks

    # --- tasks ---
    def ensure_plan(self, day: date | None = None) -> list[Task]:
        """Generate the day's plan unless one already exists; return all of that day's tasks."""
        day = day or self.clock.today()
        with self._lock:
            existing = [task for task in self._tasks if task.date == day]
            if existing:
                return existing
            picks = self._generate(day)
            self._tasks.extend(picks)
            self._save(self.tasks_key, self._tasks)
            self._record_history(day)
        logger.info("plan_generated", date=day.isoformat(), tasks=len(picks))
        return picks

    def tasks_for(self, day: date | None = None, count: int = DEFAULT_TASK_COUNT) -> list[Task]:
        day = day or self.clock.today()
        validate_task_count(count)
        return [task for task in self._tasks if task.date == day][:count]

    def toggle_task(self, task_id: str) -> Task:
        with self._lock:
            for idx, task in enumerate(self._tasks):
                if task.id == task_id:
                    updated = replace(task, done=not task.done)
                    self._tasks[idx] = updated
                    break
            else:
                raise NotFoundError(f"task not found: {task_id}")
            self._save(self.tasks_key, self._tasks)
            self._record_history(updated.date)
        logger.info("task_toggled", task_id=task_id, done=updated.done, date=updated.date.isoformat())
        return updated

    def completed(self, day: date | None = None, count: int = DEFAULT_TASK_COUNT) -> tuple[int, int]:
        """Return ``(done, total)`` for the visible part of the day's plan."""
        tasks = self.tasks_for(day, count)
        return sum(1 for task in tasks if task.done), len(tasks)

    # --- history ---
    def history(self) -> list[HistoryEntry]:
        return list(self._history)

    def recent_history(self, limit: int = 30) -> list[HistoryEntry]:
        if limit <= 0:
            return []
        return self._history[-limit:]

    def active_days(self) -> int:
        """Days with at least one finished task (shown as the streak)."""
        return sum(1 for entry in self._history if entry.tasks > 0)

    # --- goals ---
    def goals(self) -> list[Goal]:
        return list(self._goals)

    def open_goals(self) -> list[Goal]:
        return [goal for goal in self._goals if not goal.done]

    def add_goal(self, text: str) -> Goal:
        cleaned = (text or "").strip()
        if not cleaned:
            raise ValidationError("goal text must not be empty")
        goal = Goal(id=generate_goal_id(), text=cleaned)
        with self._lock:
            self._goals.insert(0, goal)
            self._save(self.goals_key, self._goals)
        logger.info("goal_added", goal_id=goal.id)
        return goal

    def toggle_goal(self, goal_id: str) -> Goal:
        with self._lock:
            for idx, goal in enumerate(self._goals):
                if goal.id == goal_id:
                    updated = replace(goal, done=not goal.done)
                    self._goals[idx] = updated
                    break
            else:
                raise NotFoundError(f"goal not found: {goal_id}")
            self._save(self.goals_key, self._goals)
        return updated
