from __future__ import annotations

from dayplanner.services.fallback_scheduler import FALLBACK_TASK_DESCRIPTION, create_fallback_schedule

DATE = "2024-05-01"


def _slots(tasks):
    return [(task.title, task.start_time, task.end_time) for task in tasks]


def test_daytime_slots_are_ninety_minutes_and_clamped() -> None:
    tasks = create_fallback_schedule(["A", "B", "C"], DATE, "09:00", "11:00")

    assert _slots(tasks) == [("A", "09:00", "10:30"), ("B", "10:30", "11:00")]
    assert [task.id for task in tasks] == [f"{DATE}_default_0", f"{DATE}_default_1"]
    assert all(task.description == FALLBACK_TASK_DESCRIPTION for task in tasks)


def test_evening_slots_are_one_hour() -> None:
    tasks = create_fallback_schedule(["Read", " Stretch "], DATE, "19:00", "22:00")

    assert _slots(tasks) == [("Read", "19:00", "20:00"), ("Stretch", "20:00", "21:00")]


def test_everything_fits_in_a_long_window() -> None:
    tasks = create_fallback_schedule(["A", "B", "C"], DATE, "08:00", "18:00")

    assert _slots(tasks)[-1] == ("C", "11:00", "12:30")
    assert not any(a.overlaps_with(b) for a in tasks for b in tasks if a is not b)


def test_empty_input_gives_empty_schedule() -> None:
    assert create_fallback_schedule([], DATE, "09:00", "18:00") == []
