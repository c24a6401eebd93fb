"""Generate-schedule use case: validate, analyse, complete, parse, and check."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple
from uuid import uuid4

from dayplanner.core.config import settings
from dayplanner.core.context import request_id_scope
from dayplanner.domain.entities import (
    Schedule,
    ScheduleMetadata,
    SchedulePreferences,
    ScheduleRequest,
    Task,
    TimeRange,
    is_valid_date,
)
from dayplanner.domain.errors import ErrorKind, SchedulerError, as_scheduler_error, capacity_error, parse_error, validation_error
from dayplanner.domain.result import Error, Result, Success
from dayplanner.observability.metrics import log_metric
from dayplanner.observability.tracing import annotate, trace
from dayplanner.services.completion_client import CompletionClient
from dayplanner.services.fallback_scheduler import create_fallback_schedule
from dayplanner.services.prompt_builder import build_prompts
from dayplanner.services.response_parser import parse_schedule_response
from dayplanner.services.retry import Sleep, retry_with_backoff
from dayplanner.services.task_validator import (
    TaskComplexityAnalysis,
    analyze_complexity,
    estimate_total_duration,
    validate_tasks,
)
from dayplanner.services.time_range_validator import (
    TimeRangeAnalysis,
    analyze_time_range_quality,
    validate_time_range,
)

logger = logging.getLogger(__name__)

TRANSITION_MINUTES = 5
OVERLOAD_FACTOR = 1.2
UNDERLOAD_FACTOR = 0.3
LOW_UTILIZATION = 0.3
HIGH_UTILIZATION = 0.9
DURATION_SKEW_FACTOR = 3

SOURCE_AI = "ai"
SOURCE_FALLBACK = "fallback"


@dataclass
class FeasibilityReport:
    estimated_minutes: int
    buffer_minutes: int
    available_minutes: int
    under_utilized: bool = False

    @property
    def required_minutes(self) -> int:
        return self.estimated_minutes + self.buffer_minutes


def check_feasibility(
    request: ScheduleRequest,
    complexity: TaskComplexityAnalysis,
    estimated_minutes: int,
    time_analysis: TimeRangeAnalysis,
) -> FeasibilityReport:
    """Raise a capacity error when the tasks plainly cannot fit the window."""
    preferences = request.preferences
    break_minutes = time_analysis.optimal_breaks * preferences.break_duration if preferences.include_breaks else 0
    transition_minutes = max(len(request.tasks) - 1, 0) * TRANSITION_MINUTES
    report = FeasibilityReport(
        estimated_minutes=estimated_minutes,
        buffer_minutes=break_minutes + transition_minutes,
        available_minutes=request.time_range.total_minutes(),
    )
    required = report.required_minutes
    available = report.available_minutes
    logger.debug("Feasibility: required %d min, available %d min", required, available)

    if required > available * OVERLOAD_FACTOR:
        excess_hours = (required - available) / 60
        reduction = max(1, complexity.total_tasks - available // 60)
        raise capacity_error(
            f"Not enough time: about {excess_hours:.1f} more hours are needed, "
            f"or remove {reduction} tasks.",
            required_minutes=required,
            available_minutes=available,
            excess_hours=round(excess_hours, 1),
            suggested_task_reduction=reduction,
        )
    if required < available * UNDERLOAD_FACTOR:
        logger.warning("Plenty of spare time in the window; consider adding tasks.")
        report.under_utilized = True

    if complexity.complex_count > complexity.simple_count + complexity.medium_count:
        logger.warning("Most tasks look complex; the schedule may be tight.")
    return report


def check_schedule_quality(schedule: Schedule) -> List[str]:
    """Advisory issues for a generated schedule; never raises for quality reasons."""
    issues: List[str] = []

    conflicts = schedule.conflicting_tasks()
    if conflicts:
        issues.append(f"{len(conflicts)} time conflicts")

    window = schedule.time_range.total_minutes()
    utilization = schedule.total_duration() / window if window > 0 else 0.0
    if utilization < LOW_UTILIZATION:
        issues.append(f"Low time utilization ({int(utilization * 100)}%)")
    elif utilization > HIGH_UTILIZATION:
        issues.append(f"Very high time utilization ({int(utilization * 100)}%)")

    durations = [task.duration_minutes() for task in schedule.tasks]
    if durations and max(durations) > min(durations) * DURATION_SKEW_FACTOR:
        issues.append("Task durations vary widely")

    return issues


class ScheduleGenerator:
    """Runs one schedule request through the full pipeline and returns a Result."""

    def __init__(
        self,
        completion_client: Optional[CompletionClient],
        *,
        attempts: Optional[int] = None,
        base_delay: Optional[float] = None,
        sleep: Sleep = asyncio.sleep,
        language: Optional[str] = None,
    ) -> None:
        self.completion_client = completion_client
        self.attempts = attempts if attempts is not None else settings.retry_attempts
        self.base_delay = base_delay if base_delay is not None else settings.retry_base_delay_seconds
        self.sleep = sleep
        self.language = language or settings.schedule_output_language

    async def generate(self, request: ScheduleRequest) -> Result[Schedule]:
        with request_id_scope():
            task_count = len(request.tasks) if isinstance(request.tasks, list) else 0
            metadata = {"task_count": task_count, "date": request.date}
            with trace("schedule.generate", metadata=metadata) as span:
                try:
                    schedule = await self._run(request)
                except SchedulerError as exc:
                    logger.warning(
                        "Schedule generation failed (%s, retryable=%s): %s", exc.kind.value, exc.retryable, exc.message
                    )
                    log_metric("schedule.generate.error", 1, {"kind": exc.kind.value, "retryable": exc.retryable})
                    annotate(span, error_kind=exc.kind.value, retryable=exc.retryable)
                    return Error(exc)
                except Exception as exc:
                    logger.exception("Unexpected failure while generating schedule")
                    error = as_scheduler_error(exc)
                    log_metric("schedule.generate.error", 1, {"kind": error.kind.value, "retryable": error.retryable})
                    return Error(error)

                annotate(span, source=schedule.metadata.source, tasks=len(schedule.tasks))
                log_metric("schedule.generate.success", 1, {"source": schedule.metadata.source})
                return Success(schedule)

    async def _run(self, request: ScheduleRequest) -> Schedule:
        self._validate_request(request)
        logger.info("Generating schedule: %s", request.summary())

        complexity = analyze_complexity(request.tasks)
        estimated = estimate_total_duration(request.tasks)
        logger.debug("Task analysis: %s, estimated %d min", complexity.complexity_ratio(), estimated)

        time_analysis = analyze_time_range_quality(request.time_range)
        logger.debug(
            "Time range analysis: %s, productivity %d%%",
            time_analysis.quality.value,
            int(time_analysis.productivity * 100),
        )

        feasibility = check_feasibility(request, complexity, estimated, time_analysis)

        tasks, source = await self._generate_tasks(request)
        schedule = Schedule(
            id=str(uuid4()),
            date=request.date,
            tasks=tasks,
            time_range=request.time_range,
        )

        issues = check_schedule_quality(schedule)
        if issues:
            logger.warning("Schedule quality issues: %s", ", ".join(issues))

        suggestions = complexity.recommendations + time_analysis.recommendations
        if feasibility.under_utilized:
            suggestions.append("There is plenty of spare time; consider adding more tasks.")

        schedule.metadata = ScheduleMetadata(
            total_tasks=len(tasks),
            completed_tasks=len(schedule.completed_tasks()),
            total_duration=schedule.total_duration(),
            efficiency=schedule.efficiency_score() / 100,
            conflicts=[f"{first.title} overlaps {second.title}" for first, second in schedule.conflicting_tasks()],
            suggestions=suggestions,
            quality_issues=issues,
            source=source,
            under_utilized=feasibility.under_utilized,
        )
        logger.info("Schedule generated: %s", schedule.summary())
        return schedule

    def _validate_request(self, request: ScheduleRequest) -> None:
        if not isinstance(request.tasks, list):
            raise validation_error("Tasks must be given as a list of titles.")
        if not isinstance(request.time_range, TimeRange):
            raise validation_error("A start and end time are required.")
        if not isinstance(request.preferences, SchedulePreferences):
            raise validation_error("Invalid schedule preferences.")
        if not is_valid_date(request.date):
            raise validation_error(f"Invalid date: {request.date!r} (expected YYYY-MM-DD).")
        if not request.preferences.is_valid():
            raise validation_error("Invalid schedule preferences.")
        validate_tasks(request.tasks)
        validate_time_range(request.time_range)

    async def _generate_tasks(self, request: ScheduleRequest) -> Tuple[List[Task], str]:
        time_range: TimeRange = request.time_range
        if self.completion_client is None:
            return self._fallback(request), SOURCE_FALLBACK

        system_prompt, user_prompt = build_prompts(
            request.tasks,
            request.date,
            time_range.start_time,
            time_range.end_time,
            language=self.language,
        )
        client = self.completion_client
        with trace("schedule.completion", metadata={"attempts": self.attempts}):
            text = await retry_with_backoff(
                lambda: client.complete(system_prompt, user_prompt),
                attempts=self.attempts,
                base_delay=self.base_delay,
                sleep=self.sleep,
            )

        try:
            tasks = parse_schedule_response(text, request.date)
        except SchedulerError as exc:
            if exc.kind is not ErrorKind.PARSE:
                raise
            logger.warning("Completion could not be parsed: %s", exc.message)
            tasks = []

        if tasks:
            return tasks, SOURCE_AI

        logger.warning("No tasks parsed from completion; using default schedule")
        return self._fallback(request), SOURCE_FALLBACK

    def _fallback(self, request: ScheduleRequest) -> List[Task]:
        log_metric("schedule.fallback.used", 1, {"task_count": len(request.tasks)})
        tasks = create_fallback_schedule(
            request.tasks,
            request.date,
            request.time_range.start_time,
            request.time_range.end_time,
        )
        if not tasks:
            raise parse_error("The default scheduler could not place any tasks.")
        return tasks
