"""Extract time-blocked tasks from free-form completion text."""
from __future__ import annotations

import logging
import re
from typing import List

from dayplanner.domain.entities import Task
from dayplanner.domain.errors import SchedulerError, parse_error
from dayplanner.domain.timeutils import normalize_time, time_to_minutes

logger = logging.getLogger(__name__)

AI_TASK_DESCRIPTION = "Generated by AI"

ENTRY_FILTER_RE = re.compile(r"^\d{1,2}:\d{2}-\d{1,2}:\d{2}:.*")
ENTRY_CAPTURE_RE = re.compile(r"(\d{1,2}:\d{2})-(\d{1,2}:\d{2}):\s*(.+)")
ENUMERATION_PREFIX_RE = re.compile(r"^\d+\.\s*")
# Bullets and list numbers the model copies from the task list in the prompt.
LIST_MARKER_RE = re.compile(r"^(?:[-•]\s*|\d+[.)]\s+)")


def parse_schedule_response(text: str, date: str) -> List[Task]:
    """Turn "HH:MM-HH:MM: label" lines into tasks.

    Fragments that do not look like an entry are dropped without error. An
    empty result means the caller has to fall back to the default scheduler.
    """
    if not isinstance(text, str):
        raise parse_error(f"Completion text must be a string, got {type(text).__name__}.")

    fragments = [_clean(fragment) for fragment in _split_fragments(text)]
    entries = [fragment for fragment in fragments if ENTRY_FILTER_RE.match(fragment)]

    tasks: List[Task] = []
    for index, entry in enumerate(entries):
        match = ENTRY_CAPTURE_RE.search(entry)
        if not match:
            continue
        start_raw, end_raw, label = match.groups()
        title = _clean_label(label)
        if not title:
            continue
        try:
            start_time = normalize_time(start_raw)
            end_time = normalize_time(end_raw)
        except SchedulerError:
            logger.warning("Dropping entry with unreadable times: %s", entry)
            continue
        if time_to_minutes(end_time) <= time_to_minutes(start_time):
            logger.warning("Dropping entry that ends before it starts: %s", entry)
            continue

        tasks.append(
            Task(
                id=f"{date}_ai_{index}",
                title=title,
                description=AI_TASK_DESCRIPTION,
                start_time=start_time,
                end_time=end_time,
                date=date,
            )
        )

    logger.debug("Parsed %d tasks from %d candidate entries", len(tasks), len(entries))
    return tasks


def _split_fragments(text: str) -> List[str]:
    fragments: List[str] = []
    for line in text.splitlines():
        if line.strip():
            fragments.extend(line.split(","))
    return fragments


def _clean(fragment: str) -> str:
    fragment = fragment.strip().replace("*", "").strip()
    return LIST_MARKER_RE.sub("", fragment)


def _clean_label(label: str) -> str:
    label = ENUMERATION_PREFIX_RE.sub("", label.strip())
    return label.split("(")[0].strip()
