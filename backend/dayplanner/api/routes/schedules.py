"""Schedule generation and saved-schedule API routes."""
from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from dayplanner.api.schemas.schedule import (
    GenerateScheduleRequest,
    SavedScheduleItem,
    SaveScheduleRequest,
    SaveScheduleResponse,
    ScheduleErrorResponse,
    ScheduleResponse,
    TaskCompletionUpdateRequest,
    TaskPayload,
    TaskTimeUpdateRequest,
)
from dayplanner.db.deps import get_db
from dayplanner.domain.entities import is_valid_date
from dayplanner.domain.errors import ErrorKind, SchedulerError
from dayplanner.domain.result import Success
from dayplanner.observability.metrics import log_metric
from dayplanner.observability.tracing import trace
from dayplanner.services import schedule_store
from dayplanner.services.completion_client import get_completion_client
from dayplanner.services.schedule_generator import ScheduleGenerator

router = APIRouter()

ERROR_STATUS = {
    ErrorKind.VALIDATION: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.TIME_RANGE: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.CAPACITY: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.TIMEOUT: status.HTTP_504_GATEWAY_TIMEOUT,
    ErrorKind.NETWORK: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.API: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.PARSE: status.HTTP_502_BAD_GATEWAY,
}


def get_schedule_generator() -> ScheduleGenerator:
    return ScheduleGenerator(get_completion_client())


@router.post(
    "/schedules/generate",
    response_model=ScheduleResponse,
    responses={422: {"model": ScheduleErrorResponse}, 502: {"model": ScheduleErrorResponse}},
    tags=["schedules"],
)
async def generate_schedule(
    payload: GenerateScheduleRequest,
    http_request: Request,
    generator: ScheduleGenerator = Depends(get_schedule_generator),
):
    """Generate a time-blocked schedule; nothing is persisted."""
    request_id = getattr(http_request.state, "request_id", None)
    result = await generator.generate(payload.to_domain())

    if isinstance(result, Success):
        return ScheduleResponse.from_domain(result.value, request_id=request_id)

    error: SchedulerError = result.error
    return JSONResponse(
        status_code=ERROR_STATUS.get(error.kind, status.HTTP_500_INTERNAL_SERVER_ERROR),
        content=error.to_dict(),
    )


@router.post("/schedules", response_model=SaveScheduleResponse, status_code=status.HTTP_201_CREATED, tags=["schedules"])
def save_schedule(
    payload: SaveScheduleRequest,
    http_request: Request,
    db: Session = Depends(get_db),
) -> SaveScheduleResponse:
    """Persist a generated (and possibly edited) schedule."""
    _require_date(payload.date)
    request_id = getattr(http_request.state, "request_id", None)
    metadata: Dict[str, Any] = {"route": "/schedules", "date": payload.date, "task_count": len(payload.tasks)}

    with trace("schedule.save", metadata=metadata, request_id=request_id):
        try:
            schedule_id = schedule_store.save_schedule(
                db,
                [task.to_domain() for task in payload.tasks],
                payload.title,
                payload.date,
                payload.start_time,
                payload.end_time,
                metadata=payload.metadata,
            )
        except SchedulerError as exc:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=exc.user_message) from exc

    log_metric("schedule.save.success", 1, metadata={"task_count": len(payload.tasks)})
    return SaveScheduleResponse(id=schedule_id, request_id=request_id)


@router.get("/schedules", response_model=List[SavedScheduleItem], tags=["schedules"])
def list_schedules(
    start: str = Query(..., description="First date, YYYY-MM-DD"),
    end: str = Query(..., description="Last date, YYYY-MM-DD"),
    db: Session = Depends(get_db),
) -> List[SavedScheduleItem]:
    _require_date(start)
    _require_date(end)
    summaries = schedule_store.list_schedules_by_date_range(db, start, end)
    return [SavedScheduleItem(**asdict(summary)) for summary in summaries]


@router.get("/schedules/by-date/{date}", response_model=List[TaskPayload], tags=["schedules"])
def get_schedule_by_date(date: str, db: Session = Depends(get_db)) -> List[TaskPayload]:
    _require_date(date)
    tasks = schedule_store.load_schedule_by_date(db, date)
    if tasks is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No schedule saved for this date")
    return [TaskPayload.from_domain(task) for task in tasks]


@router.get("/schedules/{schedule_id}", response_model=List[TaskPayload], tags=["schedules"])
def get_schedule(schedule_id: str, db: Session = Depends(get_db)) -> List[TaskPayload]:
    tasks = schedule_store.load_schedule_by_id(db, schedule_id)
    if tasks is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Schedule not found")
    return [TaskPayload.from_domain(task) for task in tasks]


@router.patch("/schedules/tasks/{task_id}/time", response_model=TaskPayload, tags=["schedules"])
def update_task_time(
    task_id: str,
    payload: TaskTimeUpdateRequest,
    db: Session = Depends(get_db),
) -> TaskPayload:
    try:
        task = schedule_store.update_task_time(db, task_id, payload.start_time, payload.end_time)
    except schedule_store.ScheduleNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except SchedulerError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=exc.user_message) from exc
    return TaskPayload.from_domain(task)


@router.patch("/schedules/tasks/{task_id}/completion", response_model=TaskPayload, tags=["schedules"])
def update_task_completion(
    task_id: str,
    payload: TaskCompletionUpdateRequest,
    db: Session = Depends(get_db),
) -> TaskPayload:
    try:
        task = schedule_store.update_task_completion(db, task_id, payload.is_completed)
    except schedule_store.ScheduleNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    log_metric("schedule.task.completion", 1 if payload.is_completed else 0)
    return TaskPayload.from_domain(task)


@router.delete("/schedules/{schedule_id}", status_code=status.HTTP_204_NO_CONTENT, tags=["schedules"])
def delete_schedule(schedule_id: str, db: Session = Depends(get_db)) -> Response:
    try:
        schedule_store.delete_schedule(db, schedule_id)
    except schedule_store.ScheduleNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


def _require_date(value: str) -> None:
    if not is_valid_date(value):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Invalid date: {value!r} (expected YYYY-MM-DD)",
        )
