"""Persistence of generated schedules (save, load, edit, delete)."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple
from uuid import uuid4

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from dayplanner.db.models.saved_schedule import SavedSchedule, SavedTask
from dayplanner.domain.entities import Task
from dayplanner.domain.errors import validation_error
from dayplanner.domain.timeutils import normalize_time, time_to_minutes

logger = logging.getLogger(__name__)


class ScheduleNotFoundError(LookupError):
    """Raised when a saved schedule or task id does not exist."""


@dataclass
class SavedScheduleSummary:
    id: str
    title: str
    date: str
    start_time: str
    end_time: str
    total_tasks: int
    completed_tasks: int
    created_at: datetime


def _now() -> datetime:
    return datetime.now(timezone.utc)


def save_schedule(
    db: Session,
    tasks: List[Task],
    title: str,
    date: str,
    start_time: str,
    end_time: str,
    metadata: Optional[Dict[str, Any]] = None,
) -> str:
    """Persist a schedule snapshot and return its id.

    Times are normalised before writing; a task or window that does not end
    after it starts is rejected with a validation error.
    """
    start_time, end_time = _checked_times(start_time, end_time)
    blocks = [_checked_times(task.start_time, task.end_time) for task in tasks]
    schedule_id = f"schedule_{uuid4().hex}"
    now = _now()
    schedule = SavedSchedule(
        id=schedule_id,
        title=title,
        date=date,
        start_time=start_time,
        end_time=end_time,
        total_tasks=len(tasks),
        completed_tasks=sum(1 for task in tasks if task.is_completed),
        metadata_json=metadata,
        created_at=now,
        last_modified=now,
    )
    schedule.tasks = [
        SavedTask(
            id=f"task_{schedule_id}_{index}",
            title=task.title,
            description=task.description,
            start_time=block_start,
            end_time=block_end,
            is_completed=task.is_completed,
            sort_order=index,
        )
        for index, (task, (block_start, block_end)) in enumerate(zip(tasks, blocks))
    ]
    db.add(schedule)
    _commit(db, "save schedule")
    logger.info("Saved schedule %s (%d tasks) for %s", schedule_id, len(tasks), date)
    return schedule_id


def load_schedule_by_date(db: Session, date: str) -> Optional[List[Task]]:
    """Tasks of the most recently saved schedule for ``date``, or None."""
    schedule = (
        db.query(SavedSchedule)
        .filter(SavedSchedule.date == date)
        .order_by(SavedSchedule.created_at.desc())
        .first()
    )
    return _to_tasks(schedule) if schedule else None


def load_schedule_by_id(db: Session, schedule_id: str) -> Optional[List[Task]]:
    schedule = db.get(SavedSchedule, schedule_id)
    return _to_tasks(schedule) if schedule else None


def list_schedules_by_date_range(db: Session, start_date: str, end_date: str) -> List[SavedScheduleSummary]:
    rows = (
        db.query(SavedSchedule)
        .filter(SavedSchedule.date >= start_date, SavedSchedule.date <= end_date)
        .order_by(SavedSchedule.date.desc(), SavedSchedule.created_at.desc())
        .all()
    )
    return [
        SavedScheduleSummary(
            id=row.id,
            title=row.title,
            date=row.date,
            start_time=row.start_time,
            end_time=row.end_time,
            total_tasks=row.total_tasks,
            completed_tasks=row.completed_tasks,
            created_at=row.created_at,
        )
        for row in rows
    ]


def update_task_time(db: Session, task_id: str, start_time: str, end_time: str) -> Task:
    """Move a saved task; the new block must still end after it starts."""
    start_time, end_time = _checked_times(start_time, end_time)
    task = _get_task(db, task_id)
    task.start_time = start_time
    task.end_time = end_time
    task.schedule.last_modified = _now()
    _commit(db, "update task time")
    return _to_task(task, task.schedule.date)


def update_task_completion(db: Session, task_id: str, is_completed: bool) -> Task:
    task = _get_task(db, task_id)
    task.is_completed = is_completed
    db.flush()
    _refresh_completion_count(db, task.schedule)
    _commit(db, "update task completion")
    return _to_task(task, task.schedule.date)


def update_multiple_tasks(db: Session, tasks: List[Task]) -> int:
    """Apply time edits for tasks that belong to saved schedules; unknown ids are skipped.

    All times are checked before any row is touched.
    """
    blocks = [_checked_times(task.start_time, task.end_time) for task in tasks]
    updated = 0
    touched: Dict[str, SavedSchedule] = {}
    for task, (start_time, end_time) in zip(tasks, blocks):
        row = db.get(SavedTask, task.id)
        if row is None:
            continue
        row.start_time = start_time
        row.end_time = end_time
        touched[row.schedule_id] = row.schedule
        updated += 1

    for schedule in touched.values():
        schedule.last_modified = _now()
    _commit(db, "update tasks")
    return updated


def delete_schedule(db: Session, schedule_id: str) -> None:
    schedule = db.get(SavedSchedule, schedule_id)
    if schedule is None:
        raise ScheduleNotFoundError(f"Schedule {schedule_id} not found")
    db.delete(schedule)
    _commit(db, "delete schedule")
    logger.info("Deleted schedule %s", schedule_id)


def _checked_times(start_time: str, end_time: str) -> Tuple[str, str]:
    start_time = normalize_time(start_time)
    end_time = normalize_time(end_time)
    if time_to_minutes(end_time) <= time_to_minutes(start_time):
        raise validation_error(f"End time ({end_time}) must be later than start time ({start_time}).")
    return start_time, end_time


def _get_task(db: Session, task_id: str) -> SavedTask:
    task = db.get(SavedTask, task_id)
    if task is None:
        raise ScheduleNotFoundError(f"Task {task_id} not found")
    return task


def _refresh_completion_count(db: Session, schedule: SavedSchedule) -> None:
    completed = (
        db.query(func.count(SavedTask.id))
        .filter(SavedTask.schedule_id == schedule.id, SavedTask.is_completed.is_(True))
        .scalar()
    )
    schedule.completed_tasks = completed or 0
    schedule.last_modified = _now()


def _to_tasks(schedule: SavedSchedule) -> List[Task]:
    tasks = [_to_task(row, schedule.date) for row in schedule.tasks]
    return sorted(tasks, key=lambda task: time_to_minutes(task.start_time))


def _to_task(row: SavedTask, date: str) -> Task:
    return Task(
        id=row.id,
        title=row.title,
        description=row.description or "",
        start_time=row.start_time,
        end_time=row.end_time,
        date=date,
        is_completed=bool(row.is_completed),
    )


def _commit(db: Session, action: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to %s", action)
        raise
