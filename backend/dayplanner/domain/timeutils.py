"""Helpers for "HH:MM" wall-clock strings."""
from __future__ import annotations

import re

from dayplanner.domain.errors import validation_error

MINUTES_PER_DAY = 24 * 60

TIME_FORMAT_RE = re.compile(r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$")


def time_to_minutes(value: str) -> int:
    """Convert "H:MM" / "HH:MM" to minutes after midnight."""
    parts = value.split(":") if isinstance(value, str) else []
    if len(parts) != 2:
        raise validation_error(f"Invalid time format: {value!r} (expected HH:MM)")
    try:
        hour = int(parts[0])
        minute = int(parts[1])
    except ValueError as exc:
        raise validation_error(f"Invalid time format: {value!r} (expected HH:MM)") from exc

    if not 0 <= hour <= 23:
        raise validation_error(f"Invalid hour: {hour}")
    if not 0 <= minute <= 59:
        raise validation_error(f"Invalid minute: {minute}")
    return hour * 60 + minute


def minutes_to_time(total_minutes: int) -> str:
    hours, minutes = divmod(total_minutes, 60)
    return f"{hours:02d}:{minutes:02d}"


def is_valid_time_format(value: str) -> bool:
    return isinstance(value, str) and bool(TIME_FORMAT_RE.match(value))


def normalize_time(value: str) -> str:
    """Return the zero-padded form of a parseable time string."""
    return minutes_to_time(time_to_minutes(value))
