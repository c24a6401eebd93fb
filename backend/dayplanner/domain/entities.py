"""Value objects for time windows, tasks, and generated schedules."""
from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import ClassVar, Dict, List, Optional, Tuple

from dayplanner.domain.errors import SchedulerError, validation_error
from dayplanner.domain.timeutils import MINUTES_PER_DAY, time_to_minutes

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TaskPriority(str, Enum):
    LOW = "LOW"
    NORMAL = "NORMAL"
    HIGH = "HIGH"
    URGENT = "URGENT"


class TaskCategory(str, Enum):
    WORK = "WORK"
    PERSONAL = "PERSONAL"
    HEALTH = "HEALTH"
    LEARNING = "LEARNING"
    GENERAL = "GENERAL"


class OptimizationType(str, Enum):
    PRODUCTIVITY = "PRODUCTIVITY"
    BALANCED = "BALANCED"
    ENERGY = "ENERGY"
    FLEXIBLE = "FLEXIBLE"


@dataclass(frozen=True)
class TimeRange:
    start_time: str
    end_time: str

    WORK_DAY: ClassVar["TimeRange"]
    FULL_DAY: ClassVar["TimeRange"]
    EVENING: ClassVar["TimeRange"]
    MORNING: ClassVar["TimeRange"]

    @property
    def start_minutes(self) -> int:
        return time_to_minutes(self.start_time)

    @property
    def end_minutes(self) -> int:
        return time_to_minutes(self.end_time)

    def total_minutes(self) -> int:
        return self.end_minutes - self.start_minutes

    def total_hours(self) -> float:
        return self.total_minutes() / 60

    def is_valid(self) -> bool:
        try:
            start = self.start_minutes
            end = self.end_minutes
        except SchedulerError:
            return False
        return end > start and start >= 0 and end <= MINUTES_PER_DAY

    def contains(self, time: str) -> bool:
        try:
            return self.start_minutes <= time_to_minutes(time) <= self.end_minutes
        except SchedulerError:
            return False

    def to_display_string(self) -> str:
        return f"{self.start_time} ~ {self.end_time} ({self.total_hours():.1f}h)"

    @classmethod
    def from_strings(cls, start_time: str, end_time: str) -> "TimeRange":
        time_range = cls(start_time, end_time)
        if not time_range.is_valid():
            raise validation_error(f"Invalid time range: {start_time} - {end_time}")
        return time_range


TimeRange.WORK_DAY = TimeRange("09:00", "18:00")
TimeRange.FULL_DAY = TimeRange("09:00", "22:00")
TimeRange.EVENING = TimeRange("19:00", "22:00")
TimeRange.MORNING = TimeRange("06:00", "12:00")


@dataclass
class Task:
    id: str
    title: str
    start_time: str
    end_time: str
    date: str
    description: str = ""
    is_completed: bool = False
    priority: TaskPriority = TaskPriority.NORMAL
    category: TaskCategory = TaskCategory.GENERAL

    @property
    def start_minutes(self) -> int:
        return time_to_minutes(self.start_time)

    @property
    def end_minutes(self) -> int:
        return time_to_minutes(self.end_time)

    def duration_minutes(self) -> int:
        return self.end_minutes - self.start_minutes

    def overlaps_with(self, other: "Task") -> bool:
        """Half-open interval intersection: [start, end) against [start, end)."""
        return self.start_minutes < other.end_minutes and self.end_minutes > other.start_minutes


@dataclass
class ScheduleMetadata:
    total_tasks: int = 0
    completed_tasks: int = 0
    total_duration: int = 0
    efficiency: float = 0.0
    conflicts: List[str] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)
    quality_issues: List[str] = field(default_factory=list)
    source: str = "ai"
    under_utilized: bool = False

    def is_valid(self) -> bool:
        return (
            self.total_tasks >= 0
            and 0 <= self.completed_tasks <= self.total_tasks
            and self.total_duration >= 0
            and 0.0 <= self.efficiency <= 1.0
        )

    def summary(self) -> str:
        return (
            f"{self.completed_tasks}/{self.total_tasks} tasks done, "
            f"efficiency {int(self.efficiency * 100)}%, {len(self.conflicts)} conflicts"
        )


@dataclass
class Schedule:
    id: str
    date: str
    tasks: List[Task]
    time_range: TimeRange
    created_at: datetime = field(default_factory=_utcnow)
    last_modified: datetime = field(default_factory=_utcnow)
    metadata: ScheduleMetadata = field(default_factory=ScheduleMetadata)

    def completion_rate(self) -> float:
        if not self.tasks:
            return 0.0
        return sum(1 for task in self.tasks if task.is_completed) / len(self.tasks)

    def total_duration(self) -> int:
        return sum(task.duration_minutes() for task in self.tasks)

    def completed_tasks(self) -> List[Task]:
        return [task for task in self.tasks if task.is_completed]

    def pending_tasks(self) -> List[Task]:
        return [task for task in self.tasks if not task.is_completed]

    def conflicting_tasks(self) -> List[Tuple[Task, Task]]:
        ordered = sorted(self.tasks, key=lambda task: task.start_minutes)
        conflicts: List[Tuple[Task, Task]] = []
        for i, first in enumerate(ordered):
            for second in ordered[i + 1:]:
                if first.overlaps_with(second):
                    conflicts.append((first, second))
        return conflicts

    def tasks_by_category(self) -> Dict[TaskCategory, List[Task]]:
        grouped: Dict[TaskCategory, List[Task]] = {}
        for task in self.tasks:
            grouped.setdefault(task.category, []).append(task)
        return grouped

    def tasks_by_priority(self) -> Dict[TaskPriority, List[Task]]:
        grouped: Dict[TaskPriority, List[Task]] = {}
        for task in self.tasks:
            grouped.setdefault(task.priority, []).append(task)
        return grouped

    def is_valid(self) -> bool:
        return (
            bool(self.id.strip())
            and bool(self.date.strip())
            and self.time_range.is_valid()
            and bool(self.tasks)
            and not self.conflicting_tasks()
        )

    def efficiency_score(self) -> int:
        """Score 0-100 from completion (40), utilization (30), balance (20), minus 5 per conflict."""
        window = self.time_range.total_minutes()
        utilization = self.total_duration() / window if window > 0 else 0.0
        score = (
            self.completion_rate() * 40
            + utilization * 30
            + self._balance_score() * 20
            - len(self.conflicting_tasks()) * 5
        )
        return int(min(max(score, 0.0), 100.0))

    def summary(self) -> str:
        return (
            f"{self.date}: {len(self.tasks)} tasks, {self.total_duration() / 60:.1f}h, "
            f"{int(self.completion_rate() * 100)}% complete"
        )

    def _balance_score(self) -> float:
        if not self.tasks:
            return 0.0
        durations = [task.duration_minutes() for task in self.tasks]
        average = sum(durations) / len(durations)
        variance = sum((d - average) ** 2 for d in durations) / len(durations)
        return (100 - min(math.sqrt(variance), 100.0)) / 100


@dataclass
class SchedulePreferences:
    optimization_type: OptimizationType = OptimizationType.BALANCED
    break_duration: int = 15
    max_task_duration: int = 120
    allow_overtime: bool = False
    prioritize_morning: bool = True
    include_breaks: bool = True

    def is_valid(self) -> bool:
        return 5 <= self.break_duration <= 60 and 30 <= self.max_task_duration <= 300

    def description(self) -> str:
        label = {
            OptimizationType.PRODUCTIVITY: "Productivity-first",
            OptimizationType.BALANCED: "Balanced",
            OptimizationType.ENERGY: "Energy-aware",
            OptimizationType.FLEXIBLE: "Flexible",
        }[self.optimization_type]
        return f"{label} schedule, {self.break_duration} min breaks, tasks up to {self.max_task_duration} min"


@dataclass
class ScheduleRequest:
    tasks: List[str]
    time_range: TimeRange
    date: str
    preferences: SchedulePreferences = field(default_factory=SchedulePreferences)

    def is_valid(self) -> bool:
        return bool(self.tasks) and self.time_range.is_valid() and is_valid_date(self.date)

    def average_task_duration(self) -> int:
        if not self.tasks:
            return 0
        return self.time_range.total_minutes() // len(self.tasks)

    def summary(self) -> str:
        return f"{len(self.tasks)} tasks, {self.time_range.start_time}-{self.time_range.end_time}, {self.date}"


def is_valid_date(value: Optional[str]) -> bool:
    return isinstance(value, str) and bool(DATE_RE.match(value))
