from __future__ import annotations

from dayplanner.domain.entities import (
    Schedule,
    SchedulePreferences,
    ScheduleRequest,
    Task,
    TaskCategory,
    TimeRange,
)


def _task(task_id: str, start: str, end: str, **kwargs) -> Task:
    return Task(id=task_id, title=task_id, start_time=start, end_time=end, date="2024-01-15", **kwargs)


def test_time_range_totals() -> None:
    time_range = TimeRange("09:00", "18:30")

    assert time_range.total_minutes() == 570
    assert time_range.total_hours() == 9.5
    assert time_range.is_valid()


def test_time_range_is_valid_never_raises() -> None:
    assert not TimeRange("garbage", "18:00").is_valid()
    assert not TimeRange("18:00", "09:00").is_valid()
    assert not TimeRange("09:00", "09:00").is_valid()


def test_time_range_contains_is_inclusive() -> None:
    assert TimeRange.WORK_DAY.contains("09:00")
    assert TimeRange.WORK_DAY.contains("18:00")
    assert not TimeRange.WORK_DAY.contains("18:01")
    assert not TimeRange.WORK_DAY.contains("nope")


def test_overlap_is_symmetric_and_half_open() -> None:
    first = _task("a", "09:00", "10:00")
    second = _task("b", "09:30", "10:30")
    adjacent = _task("c", "10:00", "11:00")

    assert first.overlaps_with(second) and second.overlaps_with(first)
    assert not first.overlaps_with(adjacent) and not adjacent.overlaps_with(first)
    assert first.overlaps_with(first)


def test_schedule_reports_conflicts_and_validity() -> None:
    tasks = [_task("late", "10:30", "11:30"), _task("early", "09:00", "11:00")]
    schedule = Schedule(id="s1", date="2024-01-15", tasks=tasks, time_range=TimeRange.WORK_DAY)

    conflicts = schedule.conflicting_tasks()

    assert [(a.id, b.id) for a, b in conflicts] == [("early", "late")]
    assert not schedule.is_valid()


def test_schedule_metrics() -> None:
    tasks = [
        _task("a", "09:00", "10:00", is_completed=True),
        _task("b", "10:00", "11:00", category=TaskCategory.WORK),
    ]
    schedule = Schedule(id="s1", date="2024-01-15", tasks=tasks, time_range=TimeRange("09:00", "13:00"))

    assert schedule.completion_rate() == 0.5
    assert schedule.total_duration() == 120
    assert [task.id for task in schedule.pending_tasks()] == ["b"]
    assert set(schedule.tasks_by_category()) == {TaskCategory.GENERAL, TaskCategory.WORK}
    # 0.5 * 40 + 0.5 * 30 + 1.0 * 20
    assert schedule.efficiency_score() == 55
    assert schedule.is_valid()


def test_preferences_bounds() -> None:
    assert SchedulePreferences().is_valid()
    assert not SchedulePreferences(break_duration=4).is_valid()
    assert not SchedulePreferences(max_task_duration=301).is_valid()


def test_request_validity_requires_iso_date() -> None:
    request = ScheduleRequest(tasks=["Write report"], time_range=TimeRange.WORK_DAY, date="2024-01-15")

    assert request.is_valid()
    assert request.average_task_duration() == 540
    assert not ScheduleRequest(tasks=["Write"], time_range=TimeRange.WORK_DAY, date="15/01/2024").is_valid()
