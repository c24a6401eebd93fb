from __future__ import annotations

import asyncio
from typing import List, Optional

import pytest

from dayplanner.domain.entities import Schedule, ScheduleRequest, SchedulePreferences, Task, TimeRange
from dayplanner.domain.errors import ErrorKind, SchedulerError
from dayplanner.domain.result import Error, Success
from dayplanner.services import schedule_generator
from dayplanner.services.completion_client import CompletionClient
from dayplanner.services.schedule_generator import (
    SOURCE_AI,
    SOURCE_FALLBACK,
    ScheduleGenerator,
    check_schedule_quality,
)

DATE = "2024-05-01"


class _ScriptedClient(CompletionClient):
    """Returns queued responses in order; exceptions in the queue are raised."""

    def __init__(self, *responses) -> None:
        self.responses = list(responses)
        self.calls: List[tuple[str, str]] = []

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        self.calls.append((system_prompt, user_prompt))
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, BaseException):
            raise response
        return response


class _RecordingSleep:
    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def _request(tasks: List[str], start: str = "09:00", end: str = "18:00", date: str = DATE) -> ScheduleRequest:
    return ScheduleRequest(tasks=tasks, time_range=TimeRange(start, end), date=date)


def _generator(client: Optional[CompletionClient], sleep: Optional[_RecordingSleep] = None) -> ScheduleGenerator:
    return ScheduleGenerator(client, attempts=3, base_delay=1.0, sleep=sleep or _RecordingSleep(), language="English")


def _error_of(result) -> SchedulerError:
    assert isinstance(result, Error)
    return result.error


@pytest.mark.asyncio
async def test_empty_task_list_fails_before_any_remote_call() -> None:
    client = _ScriptedClient("09:00-10:00: Anything")

    error = _error_of(await _generator(client).generate(_request([])))

    assert error.kind is ErrorKind.VALIDATION
    assert client.calls == []


@pytest.mark.asyncio
async def test_invalid_date_and_preferences_are_validation_errors() -> None:
    client = _ScriptedClient("09:00-10:00: Anything")

    bad_date = _error_of(await _generator(client).generate(_request(["Write report"], date="01/05/2024")))
    request = _request(["Write report"])
    request.preferences = SchedulePreferences(break_duration=90)
    bad_preferences = _error_of(await _generator(client).generate(request))

    assert bad_date.kind is ErrorKind.VALIDATION
    assert bad_preferences.kind is ErrorKind.VALIDATION
    assert client.calls == []


@pytest.mark.asyncio
async def test_bad_window_is_a_time_range_error() -> None:
    client = _ScriptedClient("09:00-10:00: Anything")

    error = _error_of(await _generator(client).generate(_request(["Write report"], "23:30", "00:30")))

    assert error.kind is ErrorKind.TIME_RANGE
    assert client.calls == []


@pytest.mark.asyncio
async def test_overloaded_window_is_a_capacity_error() -> None:
    tasks = [f"Prepare quarterly planning document number {index:02d}" for index in range(10)]
    client = _ScriptedClient("09:00-10:00: Anything")

    error = _error_of(await _generator(client).generate(_request(tasks, "09:00", "12:00")))

    assert error.kind is ErrorKind.CAPACITY
    assert error.context["excess_hours"] > 0
    assert error.context["available_minutes"] == 180
    assert error.context["suggested_task_reduction"] == 7
    assert error.user_message.startswith("Not enough time")
    assert client.calls == []


@pytest.mark.asyncio
async def test_parsed_completion_becomes_schedule() -> None:
    client = _ScriptedClient("09:00-10:30: Write report\n10:30-11:00: Call the bank")

    result = await _generator(client).generate(_request(["Write report", "Call the bank"]))

    assert isinstance(result, Success)
    schedule: Schedule = result.value
    assert [(task.title, task.start_time, task.end_time) for task in schedule.tasks] == [
        ("Write report", "09:00", "10:30"),
        ("Call the bank", "10:30", "11:00"),
    ]
    assert schedule.metadata.source == SOURCE_AI
    assert schedule.metadata.total_tasks == 2
    assert schedule.metadata.total_duration == 120
    assert schedule.metadata.quality_issues == ["Low time utilization (22%)"]
    assert schedule.metadata.is_valid()
    assert len(client.calls) == 1
    system_prompt, user_prompt = client.calls[0]
    assert "written in English" in system_prompt
    assert "- Write report\n- Call the bank" in user_prompt


@pytest.mark.asyncio
async def test_unparseable_completion_falls_back_to_default_schedule() -> None:
    client = _ScriptedClient("I would rather not.")

    result = await _generator(client).generate(_request(["Write report", "Call the bank"]))

    assert isinstance(result, Success)
    schedule = result.value
    assert schedule.metadata.source == SOURCE_FALLBACK
    assert [(task.start_time, task.end_time) for task in schedule.tasks] == [("09:00", "10:30"), ("10:30", "12:00")]
    assert len(client.calls) == 1


@pytest.mark.asyncio
async def test_missing_client_uses_default_schedule() -> None:
    result = await _generator(None).generate(_request(["Gym"], "19:00", "22:00"))

    assert isinstance(result, Success)
    schedule = result.value
    assert schedule.metadata.source == SOURCE_FALLBACK
    assert [(task.title, task.start_time, task.end_time) for task in schedule.tasks] == [("Gym", "19:00", "20:00")]


@pytest.mark.asyncio
async def test_under_utilized_window_is_flagged() -> None:
    result = await _generator(None).generate(_request(["Gym"]))

    assert isinstance(result, Success)
    metadata = result.value.metadata
    assert metadata.under_utilized is True
    assert "There is plenty of spare time; consider adding more tasks." in metadata.suggestions


@pytest.mark.asyncio
async def test_transient_failures_are_retried_then_succeed() -> None:
    sleep = _RecordingSleep()
    client = _ScriptedClient(
        SchedulerError(ErrorKind.TIMEOUT, "slow"),
        "09:00-10:00: Write report",
    )

    result = await _generator(client, sleep).generate(_request(["Write report"]))

    assert isinstance(result, Success)
    assert len(client.calls) == 2
    assert sleep.delays == [1.0]


@pytest.mark.asyncio
async def test_exhausted_retries_return_the_last_error() -> None:
    sleep = _RecordingSleep()
    client = _ScriptedClient(SchedulerError(ErrorKind.NETWORK, "offline"))

    error = _error_of(await _generator(client, sleep).generate(_request(["Write report"])))

    assert error.kind is ErrorKind.NETWORK
    assert len(client.calls) == 3
    assert sleep.delays == [1.0, 2.0]


@pytest.mark.asyncio
async def test_unexpected_exception_is_reported_as_network_error() -> None:
    client = _ScriptedClient(RuntimeError("socket exploded"))

    error = _error_of(await _generator(client).generate(_request(["Write report"])))

    assert error.kind is ErrorKind.NETWORK
    assert error.message == "Unexpected error: socket exploded"
    assert error.user_message == "Please check your internet connection."


@pytest.mark.asyncio
async def test_cancellation_propagates_from_the_remote_call() -> None:
    started = asyncio.Event()

    class _HangingClient(CompletionClient):
        async def complete(self, system_prompt: str, user_prompt: str) -> str:
            started.set()
            await asyncio.Event().wait()
            return ""

    task = asyncio.create_task(_generator(_HangingClient()).generate(_request(["Write report"])))
    await started.wait()
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task


def test_quality_check_reports_conflicts_and_high_utilization() -> None:
    schedule = Schedule(
        id="s1",
        date=DATE,
        time_range=TimeRange("09:00", "11:00"),
        tasks=[
            Task(id="a", title="A", start_time="09:00", end_time="10:00", date=DATE),
            Task(id="b", title="B", start_time="09:30", end_time="10:30", date=DATE),
        ],
    )

    assert check_schedule_quality(schedule) == ["1 time conflicts", "Very high time utilization (100%)"]


def test_quality_check_flags_skewed_durations() -> None:
    schedule = Schedule(
        id="s1",
        date=DATE,
        time_range=TimeRange("09:00", "12:00"),
        tasks=[
            Task(id="a", title="A", start_time="09:00", end_time="09:15", date=DATE),
            Task(id="b", title="B", start_time="09:15", end_time="11:15", date=DATE),
        ],
    )

    assert check_schedule_quality(schedule) == ["Task durations vary widely"]


@pytest.mark.asyncio
async def test_malformed_request_shape_is_a_validation_error() -> None:
    client = _ScriptedClient("09:00-10:00: Anything")
    missing_tasks = ScheduleRequest(tasks=None, time_range=TimeRange("09:00", "18:00"), date=DATE)  # type: ignore[arg-type]
    missing_window = ScheduleRequest(tasks=["Write report"], time_range=None, date=DATE)  # type: ignore[arg-type]

    for request in (missing_tasks, missing_window):
        error = _error_of(await _generator(client).generate(request))
        assert error.kind is ErrorKind.VALIDATION
        assert error.user_message != "Please check your internet connection."

    assert client.calls == []


@pytest.mark.asyncio
async def test_error_metric_reports_whether_the_failure_is_retryable(monkeypatch) -> None:
    recorded = []
    monkeypatch.setattr(
        schedule_generator, "log_metric", lambda name, value, metadata=None: recorded.append((name, metadata))
    )

    await _generator(_ScriptedClient(SchedulerError(ErrorKind.NETWORK, "offline"))).generate(_request(["Write report"]))
    await _generator(None).generate(_request([]))

    errors = [metadata for name, metadata in recorded if name == "schedule.generate.error"]
    assert errors == [
        {"kind": "network", "retryable": True},
        {"kind": "validation", "retryable": False},
    ]
