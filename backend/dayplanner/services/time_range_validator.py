"""Validation and quality analysis of the scheduling window."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List

from dayplanner.domain.entities import TimeRange
from dayplanner.domain.errors import time_range_error, validation_error
from dayplanner.domain.timeutils import MINUTES_PER_DAY, is_valid_time_format, time_to_minutes

MIN_DURATION_HOURS = 1
MAX_DURATION_HOURS = 16
RECOMMENDED_MIN_HOURS = 2
RECOMMENDED_MAX_HOURS = 12

EARLIEST_START_HOUR = 5
LATEST_END_HOUR = 23

PRODUCTIVE_HOURS = (9, 10, 11, 14, 15, 16)


class TimeQuality(str, Enum):
    EXCELLENT = "EXCELLENT"
    GOOD = "GOOD"
    ACCEPTABLE = "ACCEPTABLE"
    POOR = "POOR"


class TimeType(str, Enum):
    MORNING = "MORNING"
    EVENING = "EVENING"
    FULL_DAY = "FULL_DAY"
    PARTIAL_DAY = "PARTIAL_DAY"


@dataclass
class TimeRangeAnalysis:
    quality: TimeQuality
    time_type: TimeType
    productivity: float
    recommendations: List[str] = field(default_factory=list)
    optimal_breaks: int = 1


def validate_time_range(time_range: TimeRange) -> None:
    """Raise for the first format, logic, duration, or policy rule the window breaks."""
    _validate_format(time_range)

    start = time_to_minutes(time_range.start_time)
    end = time_to_minutes(time_range.end_time)
    if end <= start:
        raise time_range_error(
            f"End time ({time_range.end_time}) must be later than start time ({time_range.start_time}).",
        )
    if start < 0 or end > MINUTES_PER_DAY:
        raise time_range_error("Times must fall between 00:00 and 24:00.")

    total = end - start
    if total < MIN_DURATION_HOURS * 60:
        raise time_range_error(
            f"The window must be at least {MIN_DURATION_HOURS} hour long (got {total / 60:.1f}h).",
            total_minutes=total,
        )
    if total > MAX_DURATION_HOURS * 60:
        raise time_range_error(
            f"Schedules longer than {MAX_DURATION_HOURS} hours are not supported (got {total / 60:.1f}h).",
            total_minutes=total,
        )

    start_hour = start // 60
    end_hour = end // 60
    if start_hour < EARLIEST_START_HOUR:
        raise time_range_error("Starting before 05:00 is not supported. Get some sleep first.")
    if end_hour > LATEST_END_HOUR:
        raise time_range_error("Ending after 23:00 is not supported. Mind your sleep pattern.")
    if start_hour > 12 and end_hour < 18:
        raise time_range_error("An afternoon-only window that ends before the evening is too short.")


def _validate_format(time_range: TimeRange) -> None:
    if not is_valid_time_format(time_range.start_time):
        raise validation_error(f"Invalid start time: {time_range.start_time!r} (expected HH:MM).")
    if not is_valid_time_format(time_range.end_time):
        raise validation_error(f"Invalid end time: {time_range.end_time!r} (expected HH:MM).")


def analyze_time_range_quality(time_range: TimeRange) -> TimeRangeAnalysis:
    start = time_to_minutes(time_range.start_time)
    end = time_to_minutes(time_range.end_time)
    total_hours = (end - start) / 60
    start_hour = start // 60
    end_hour = end // 60

    return TimeRangeAnalysis(
        quality=_quality(total_hours, start_hour, end_hour),
        time_type=determine_time_type(start_hour, end_hour),
        productivity=productivity_score(start, end),
        recommendations=_recommendations(total_hours, start_hour, end_hour),
        optimal_breaks=optimal_breaks(int(total_hours)),
    )


def _quality(total_hours: float, start_hour: int, end_hour: int) -> TimeQuality:
    if (
        RECOMMENDED_MIN_HOURS <= total_hours <= RECOMMENDED_MAX_HOURS
        and 7 <= start_hour <= 10
        and 17 <= end_hour <= 20
    ):
        return TimeQuality.EXCELLENT
    if (
        RECOMMENDED_MIN_HOURS - 1 <= total_hours <= RECOMMENDED_MAX_HOURS + 2
        and 6 <= start_hour <= 11
        and 16 <= end_hour <= 21
    ):
        return TimeQuality.GOOD
    if MIN_DURATION_HOURS <= total_hours <= MAX_DURATION_HOURS:
        return TimeQuality.ACCEPTABLE
    return TimeQuality.POOR


def _recommendations(total_hours: float, start_hour: int, end_hour: int) -> List[str]:
    recommendations: List[str] = []

    if total_hours < RECOMMENDED_MIN_HOURS:
        recommendations.append(f"A window of {RECOMMENDED_MIN_HOURS}+ hours produces a more useful schedule.")
    elif total_hours > RECOMMENDED_MAX_HOURS:
        recommendations.append(f"Keeping the window under {RECOMMENDED_MAX_HOURS} hours helps avoid fatigue.")

    if start_hour < 7:
        recommendations.append("Starting after 07:00 suits most circadian rhythms better.")
    elif start_hour > 10:
        recommendations.append("Starting in the morning makes better use of the day.")

    if end_hour > 20:
        recommendations.append("Finishing before 20:00 leaves room for personal time.")
    elif end_hour < 17:
        recommendations.append("Extending past 17:00 lets you get through more tasks.")

    return recommendations


def determine_time_type(start_hour: int, end_hour: int) -> TimeType:
    if end_hour <= 12:
        return TimeType.MORNING
    if start_hour >= 18:
        return TimeType.EVENING
    if start_hour <= 9 and end_hour >= 17:
        return TimeType.FULL_DAY
    return TimeType.PARTIAL_DAY


def productivity_score(start_minutes: int, end_minutes: int) -> float:
    """Fraction of the window that falls inside the productive hours."""
    total = end_minutes - start_minutes
    if total <= 0:
        return 0.0
    overlap = 0
    for hour in PRODUCTIVE_HOURS:
        block_start, block_end = hour * 60, (hour + 1) * 60
        overlap += max(0, min(end_minutes, block_end) - max(start_minutes, block_start))
    return overlap / total


def optimal_breaks(total_hours: int) -> int:
    if total_hours <= 3:
        return 1
    if total_hours <= 6:
        return 2
    if total_hours <= 9:
        return 3
    return 4
