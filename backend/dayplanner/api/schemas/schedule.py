"""Pydantic schemas for schedule generation and saved schedules."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from dayplanner.domain.entities import (
    OptimizationType,
    Schedule,
    SchedulePreferences,
    ScheduleRequest,
    Task,
    TaskCategory,
    TaskPriority,
    TimeRange,
)

TIME_PATTERN = r"^\d{1,2}:\d{2}$"


class PreferencesPayload(BaseModel):
    optimization_type: OptimizationType = OptimizationType.BALANCED
    break_duration: int = 15
    max_task_duration: int = 120
    allow_overtime: bool = False
    prioritize_morning: bool = True
    include_breaks: bool = True


class GenerateScheduleRequest(BaseModel):
    # Content rules (count, length, characters) are enforced by the task validator.
    tasks: List[str] = Field(default_factory=list)
    date: str = Field(..., description="Day to plan, YYYY-MM-DD.")
    start_time: str = Field("09:00", description="Window start, HH:MM.")
    end_time: str = Field("18:00", description="Window end, HH:MM.")
    preferences: PreferencesPayload = Field(default_factory=PreferencesPayload)

    def to_domain(self) -> ScheduleRequest:
        return ScheduleRequest(
            tasks=list(self.tasks),
            time_range=TimeRange(self.start_time, self.end_time),
            date=self.date,
            preferences=SchedulePreferences(**self.preferences.model_dump()),
        )


class TaskPayload(BaseModel):
    id: str
    title: str
    description: str = ""
    start_time: str = Field(..., pattern=TIME_PATTERN)
    end_time: str = Field(..., pattern=TIME_PATTERN)
    date: str
    is_completed: bool = False
    priority: TaskPriority = TaskPriority.NORMAL
    category: TaskCategory = TaskCategory.GENERAL

    @classmethod
    def from_domain(cls, task: Task) -> "TaskPayload":
        return cls(
            id=task.id,
            title=task.title,
            description=task.description,
            start_time=task.start_time,
            end_time=task.end_time,
            date=task.date,
            is_completed=task.is_completed,
            priority=task.priority,
            category=task.category,
        )

    def to_domain(self) -> Task:
        return Task(**self.model_dump())


class ScheduleMetadataPayload(BaseModel):
    total_tasks: int
    completed_tasks: int
    total_duration: int
    efficiency: float
    conflicts: List[str]
    suggestions: List[str]
    quality_issues: List[str]
    source: str
    under_utilized: bool


class ScheduleResponse(BaseModel):
    id: str
    date: str
    start_time: str
    end_time: str
    tasks: List[TaskPayload]
    created_at: datetime
    efficiency_score: int
    is_valid: bool
    metadata: ScheduleMetadataPayload
    request_id: Optional[str] = None

    @classmethod
    def from_domain(cls, schedule: Schedule, request_id: Optional[str] = None) -> "ScheduleResponse":
        meta = schedule.metadata
        return cls(
            id=schedule.id,
            date=schedule.date,
            start_time=schedule.time_range.start_time,
            end_time=schedule.time_range.end_time,
            tasks=[TaskPayload.from_domain(task) for task in schedule.tasks],
            created_at=schedule.created_at,
            efficiency_score=schedule.efficiency_score(),
            is_valid=schedule.is_valid(),
            metadata=ScheduleMetadataPayload(
                total_tasks=meta.total_tasks,
                completed_tasks=meta.completed_tasks,
                total_duration=meta.total_duration,
                efficiency=meta.efficiency,
                conflicts=meta.conflicts,
                suggestions=meta.suggestions,
                quality_issues=meta.quality_issues,
                source=meta.source,
                under_utilized=meta.under_utilized,
            ),
            request_id=request_id,
        )


class ScheduleErrorResponse(BaseModel):
    kind: str
    message: str
    code: Optional[int] = None
    context: Dict[str, Any] = Field(default_factory=dict)


class SaveScheduleRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    date: str
    start_time: str = Field(..., pattern=TIME_PATTERN)
    end_time: str = Field(..., pattern=TIME_PATTERN)
    tasks: List[TaskPayload] = Field(..., min_length=1)
    metadata: Optional[Dict[str, Any]] = None


class SaveScheduleResponse(BaseModel):
    id: str
    request_id: Optional[str] = None


class SavedScheduleItem(BaseModel):
    id: str
    title: str
    date: str
    start_time: str
    end_time: str
    total_tasks: int
    completed_tasks: int
    created_at: datetime


class TaskTimeUpdateRequest(BaseModel):
    start_time: str = Field(..., pattern=TIME_PATTERN)
    end_time: str = Field(..., pattern=TIME_PATTERN)


class TaskCompletionUpdateRequest(BaseModel):
    is_completed: bool
