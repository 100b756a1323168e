import json
import random
from datetime import date

import pytest
from structlog.testing import capture_logs

from planner.errors import NotFoundError, ValidationError
from planner.plan import SUBJECTS, TASKS_PER_SUBJECT, DailyPlanner


def _planner(kv, clock, seed: int = 0) -> DailyPlanner:
    return DailyPlanner(kv, clock, rng=random.Random(seed))


def test_plan_is_generated_once_per_day_with_two_topics_per_subject(kv, clock):
    planner = _planner(kv, clock)

    tasks = planner.ensure_plan()
    again = planner.ensure_plan()

    assert len(tasks) == len(SUBJECTS) * TASKS_PER_SUBJECT
    assert [task.id for task in again] == [task.id for task in tasks]
    assert [task.subject for task in tasks] == ["phy", "phy", "chem", "chem", "math", "math"]
    assert all(task.date == date(2024, 1, 1) and not task.done for task in tasks)
    assert tasks[0].title == f"Physics: {tasks[0].topic}"


def test_new_day_gets_its_own_plan(kv, clock):
    planner = _planner(kv, clock)
    planner.ensure_plan()
    clock.set(date(2024, 1, 2))

    tomorrow = planner.ensure_plan()

    assert {task.date for task in tomorrow} == {date(2024, 1, 2)}
    assert len(planner.tasks_for(date(2024, 1, 1))) == 6


def test_tasks_for_limits_visible_count(kv, clock):
    planner = _planner(kv, clock)
    planner.ensure_plan()

    assert len(planner.tasks_for(count=3)) == 3
    assert len(planner.tasks_for(count=12)) == 6
    with pytest.raises(ValidationError):
        planner.tasks_for(count=2)


def test_toggle_updates_history_for_that_day(kv, clock):
    planner = _planner(kv, clock)
    first, second = planner.ensure_plan()[:2]

    planner.toggle_task(first.id)
    planner.toggle_task(second.id)

    assert planner.completed() == (2, 6)
    assert [(entry.date, entry.tasks) for entry in planner.history()] == [(date(2024, 1, 1), 2)]

    planner.toggle_task(second.id)

    assert planner.history()[0].tasks == 1


def test_toggle_unknown_task_raises(kv, clock):
    planner = _planner(kv, clock)

    with pytest.raises(NotFoundError):
        planner.toggle_task("t:missing")


def test_active_days_counts_days_with_any_completed_task(kv, clock):
    planner = _planner(kv, clock)
    for day in (date(2024, 1, 1), date(2024, 1, 2), date(2024, 1, 5)):
        clock.set(day)
        tasks = planner.ensure_plan()
        if day != date(2024, 1, 2):
            planner.toggle_task(tasks[0].id)

    assert planner.active_days() == 2
    assert [entry.date for entry in planner.recent_history(2)] == [date(2024, 1, 2), date(2024, 1, 5)]
    assert planner.recent_history(0) == []


def test_goals_are_trimmed_prepended_and_toggled(kv, clock):
    planner = _planner(kv, clock)
    older = planner.add_goal("Finish NLM sheet")
    newer = planner.add_goal("  Revise conics  ")

    assert [goal.text for goal in planner.goals()] == ["Revise conics", "Finish NLM sheet"]

    planner.toggle_goal(older.id)

    assert [goal.id for goal in planner.open_goals()] == [newer.id]
    with pytest.raises(ValidationError):
        planner.add_goal("   ")
    with pytest.raises(NotFoundError):
        planner.toggle_goal("g:missing")


def test_state_is_reloaded_from_the_store(kv, clock):
    planner = _planner(kv, clock)
    task = planner.ensure_plan()[0]
    planner.toggle_task(task.id)
    planner.add_goal("Mock test on Sunday")

    reloaded = DailyPlanner(kv, clock)

    assert reloaded.tasks_for() == planner.tasks_for()
    assert reloaded.history() == planner.history()
    assert reloaded.goals() == planner.goals()


def test_unreadable_entries_are_skipped(kv, clock):
    kv.save("jee_goals", json.dumps([{"id": "g:1", "text": "ok"}, {"text": "no id"}]))
    kv.save("jee_history", "not json")

    with capture_logs() as logs:
        planner = DailyPlanner(kv, clock)

    assert [goal.id for goal in planner.goals()] == ["g:1"]
    assert planner.history() == []
    events = {entry["event"] for entry in logs}
    assert {"plan_entry_skipped", "plan_load_failed"} <= events


def test_save_failure_keeps_in_memory_state(kv, clock):
    planner = _planner(kv, clock)
    kv.fail_writes = True

    with capture_logs() as logs:
        goal = planner.add_goal("Keep going")

    assert planner.goals() == [goal]
    assert any(entry["event"] == "plan_persist_failed" for entry in logs)


def test_future_plan_does_not_add_history(kv, clock):
    planner = _planner(kv, clock)
    today_task = planner.ensure_plan()[0]
    planner.toggle_task(today_task.id)

    future = planner.ensure_plan(date(2024, 3, 1))
    planner.toggle_task(future[0].id)

    assert [(entry.date, entry.tasks) for entry in planner.history()] == [(date(2024, 1, 1), 1)]
    assert [entry.date for entry in planner.recent_history(1)] == [date(2024, 1, 1)]
    assert planner.tasks_for(date(2024, 3, 1))[0].done is True
