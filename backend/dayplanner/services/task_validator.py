"""Validation and light-weight analysis of raw task lists."""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import List

from dayplanner.domain.errors import validation_error

MIN_TASKS = 1
MAX_TASKS = 20
MIN_TASK_LENGTH = 2
MAX_TASK_LENGTH = 100

FORBIDDEN_CHARACTERS = ("<", ">", "|", '"', "*", "?", ":", "\\")


@dataclass
class TaskComplexityAnalysis:
    simple_count: int
    medium_count: int
    complex_count: int
    average_length: int
    recommendations: List[str] = field(default_factory=list)

    @property
    def total_tasks(self) -> int:
        return self.simple_count + self.medium_count + self.complex_count

    def complexity_ratio(self) -> str:
        if not self.total_tasks:
            return "no tasks"
        return f"simple:{self.simple_count} medium:{self.medium_count} complex:{self.complex_count}"


def validate_tasks(tasks: List[str]) -> None:
    """Raise a validation error for the first rule the task list breaks."""
    _validate_count(tasks)
    _validate_content(tasks)
    _validate_uniqueness(tasks)


def _validate_count(tasks: List[str]) -> None:
    if not tasks:
        raise validation_error("The task list is empty.")
    if len(tasks) < MIN_TASKS:
        raise validation_error(f"At least {MIN_TASKS} task is required.")
    if len(tasks) > MAX_TASKS:
        raise validation_error(f"At most {MAX_TASKS} tasks are allowed.", count=len(tasks))


def _validate_content(tasks: List[str]) -> None:
    for index, task in enumerate(tasks, start=1):
        if not isinstance(task, str) or not task.strip():
            raise validation_error(f"Task #{index} is empty.", index=index)
        if len(task.strip()) < MIN_TASK_LENGTH:
            raise validation_error(f"Task titles must be at least {MIN_TASK_LENGTH} characters long.", index=index)
        if len(task) > MAX_TASK_LENGTH:
            raise validation_error(
                f"Task titles cannot exceed {MAX_TASK_LENGTH} characters (got {len(task)}).",
                index=index,
                length=len(task),
            )
        if _contains_forbidden_characters(task):
            raise validation_error("Task titles contain characters that are not allowed.", index=index)


def _validate_uniqueness(tasks: List[str]) -> None:
    counts = Counter(task.strip().lower() for task in tasks)
    duplicates = [key for key, count in counts.items() if count > 1]
    if duplicates:
        raise validation_error(f"Duplicate tasks: {', '.join(duplicates)}", duplicates=duplicates)


def _contains_forbidden_characters(task: str) -> bool:
    return any(char in task for char in FORBIDDEN_CHARACTERS)


def estimate_task_minutes(task: str) -> int:
    length = len(task)
    if length < 10:
        return 30
    if length < 30:
        return 60
    if length < 50:
        return 90
    return 120


def estimate_total_duration(tasks: List[str]) -> int:
    """Rough minutes needed for the list, bucketed by title length."""
    return sum(estimate_task_minutes(task) for task in tasks)


def analyze_complexity(tasks: List[str]) -> TaskComplexityAnalysis:
    lengths = [len(task) for task in tasks]
    simple = sum(1 for length in lengths if length < 20)
    medium = sum(1 for length in lengths if 20 <= length <= 40)
    complex_ = sum(1 for length in lengths if length > 40)
    average = int(sum(lengths) / len(lengths)) if lengths else 0

    return TaskComplexityAnalysis(
        simple_count=simple,
        medium_count=medium,
        complex_count=complex_,
        average_length=average,
        recommendations=_complexity_recommendations(simple, medium, complex_),
    )


def _complexity_recommendations(simple: int, medium: int, complex_: int) -> List[str]:
    if complex_ > simple + medium:
        return ["Many tasks look complex. Consider breaking them into smaller steps."]
    if simple > medium + complex_:
        return ["Several tasks are small. Batching them together can save time."]
    if medium == 0 and (simple > 0 or complex_ > 0):
        return ["Task difficulty is polarised. Consider adding intermediate steps."]
    return []
