"""Deterministic schedule used when the completion is missing or unreadable."""
from __future__ import annotations

import logging
from typing import List

from dayplanner.domain.entities import Task
from dayplanner.domain.timeutils import minutes_to_time, time_to_minutes

logger = logging.getLogger(__name__)

EVENING_START_HOUR = 18
EVENING_TASK_MINUTES = 60
DEFAULT_TASK_MINUTES = 90

FALLBACK_TASK_DESCRIPTION = "Created by the default scheduler"


def create_fallback_schedule(tasks: List[str], date: str, start_time: str, end_time: str) -> List[Task]:
    """Walk the window in fixed-size slots, one per task, in input order.

    Tasks that would start at or after the window end are dropped rather than
    compressed; the last placed task is clamped to the window end.
    """
    cursor = time_to_minutes(start_time)
    window_end = time_to_minutes(end_time)
    slot = EVENING_TASK_MINUTES if cursor // 60 >= EVENING_START_HOUR else DEFAULT_TASK_MINUTES

    scheduled: List[Task] = []
    for index, title in enumerate(tasks):
        if cursor >= window_end:
            logger.warning("Window exhausted, dropping %d of %d tasks", len(tasks) - index, len(tasks))
            break
        slot_end = min(cursor + slot, window_end)
        scheduled.append(
            Task(
                id=f"{date}_default_{index}",
                title=title.strip(),
                description=FALLBACK_TASK_DESCRIPTION,
                start_time=minutes_to_time(cursor),
                end_time=minutes_to_time(slot_end),
                date=date,
            )
        )
        cursor = slot_end

    return sorted(scheduled, key=lambda task: time_to_minutes(task.start_time))
