from __future__ import annotations

from typing import List

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from dayplanner.api.routes.schedules import get_schedule_generator
from dayplanner.db.deps import get_db
from dayplanner.db.models.saved_schedule import SavedSchedule, SavedTask
from dayplanner.domain.errors import ErrorKind, SchedulerError
from dayplanner.main import app
from dayplanner.services.completion_client import CompletionClient
from dayplanner.services.schedule_generator import ScheduleGenerator

DATE = "2024-05-01"


class _FixedClient(CompletionClient):
    def __init__(self, text: str) -> None:
        self.text = text
        self.calls: List[str] = []

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        self.calls.append(user_prompt)
        return self.text


async def _no_sleep(delay: float) -> None:
    return None


@pytest.fixture()
def completion():
    return _FixedClient("09:00-10:30: Write report\n10:30-11:00: Call the bank")


@pytest.fixture()
def client(completion):
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):  # pragma: no cover - sqlite setup
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    SavedSchedule.__table__.create(bind=engine)
    SavedTask.__table__.create(bind=engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_schedule_generator] = lambda: ScheduleGenerator(
        completion, attempts=2, base_delay=0.0, sleep=_no_sleep
    )
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _generate(client: TestClient, **overrides):
    payload = {"tasks": ["Write report", "Call the bank"], "date": DATE, "start_time": "09:00", "end_time": "18:00"}
    payload.update(overrides)
    return client.post("/schedules/generate", json=payload)


def _save(client: TestClient, tasks: list, title: str = "Tuesday", date: str = DATE):
    return client.post(
        "/schedules",
        json={"title": title, "date": date, "start_time": "09:00", "end_time": "18:00", "tasks": tasks},
    )


def test_generate_returns_schedule(client, completion) -> None:
    response = _generate(client)

    assert response.status_code == 200
    body = response.json()
    assert [task["title"] for task in body["tasks"]] == ["Write report", "Call the bank"]
    assert body["metadata"]["source"] == "ai"
    assert body["metadata"]["total_tasks"] == 2
    assert body["is_valid"] is True
    assert 0 <= body["efficiency_score"] <= 100
    assert body["request_id"] == response.headers["X-Request-Id"]
    assert len(completion.calls) == 1


def test_generate_validation_failure_is_422_without_remote_call(client, completion) -> None:
    response = _generate(client, tasks=[])

    assert response.status_code == 422
    assert response.json() == {
        "kind": "validation",
        "message": "The task list is empty.",
        "code": None,
        "context": {},
    }
    assert completion.calls == []


def test_generate_time_range_failure_is_422(client) -> None:
    response = _generate(client, start_time="23:30", end_time="00:30")

    assert response.status_code == 422
    assert response.json()["kind"] == "time_range"


def test_generate_remote_failure_is_502(client, completion) -> None:
    async def failing(system_prompt: str, user_prompt: str) -> str:
        completion.calls.append(user_prompt)
        raise SchedulerError(ErrorKind.API, "boom", code=500)

    completion.complete = failing

    response = _generate(client)

    assert response.status_code == 502
    assert response.json()["message"] == "The scheduling service ran into a problem."
    assert response.json()["code"] == 500
    assert len(completion.calls) == 2


def test_save_load_and_edit_schedule(client) -> None:
    generated = _generate(client).json()

    saved = _save(client, generated["tasks"])
    assert saved.status_code == 201
    schedule_id = saved.json()["id"]

    by_id = client.get(f"/schedules/{schedule_id}")
    assert by_id.status_code == 200
    tasks = by_id.json()
    assert [task["title"] for task in tasks] == ["Write report", "Call the bank"]

    by_date = client.get(f"/schedules/by-date/{DATE}")
    assert by_date.json() == tasks

    moved = client.patch(f"/schedules/tasks/{tasks[1]['id']}/time", json={"start_time": "13:00", "end_time": "13:30"})
    assert moved.status_code == 200
    assert moved.json()["start_time"] == "13:00"

    done = client.patch(f"/schedules/tasks/{tasks[0]['id']}/completion", json={"is_completed": True})
    assert done.status_code == 200
    assert done.json()["is_completed"] is True

    listing = client.get("/schedules", params={"start": "2024-04-01", "end": "2024-05-31"})
    assert listing.status_code == 200
    assert listing.json()[0]["id"] == schedule_id
    assert listing.json()[0]["completed_tasks"] == 1


def test_invalid_task_time_edit_is_422(client) -> None:
    generated = _generate(client).json()
    schedule_id = _save(client, generated["tasks"]).json()["id"]
    task_id = client.get(f"/schedules/{schedule_id}").json()[0]["id"]

    response = client.patch(f"/schedules/tasks/{task_id}/time", json={"start_time": "11:00", "end_time": "10:00"})

    assert response.status_code == 422


def test_missing_resources_are_404(client) -> None:
    assert client.get("/schedules/schedule_missing").status_code == 404
    assert client.get(f"/schedules/by-date/{DATE}").status_code == 404
    assert client.delete("/schedules/schedule_missing").status_code == 404
    response = client.patch("/schedules/tasks/task_missing/completion", json={"is_completed": True})
    assert response.status_code == 404


def test_bad_dates_are_rejected(client) -> None:
    assert client.get("/schedules/by-date/May-1").status_code == 422
    assert client.get("/schedules", params={"start": "2024-05-01", "end": "soon"}).status_code == 422


def test_delete_schedule(client) -> None:
    generated = _generate(client).json()
    schedule_id = _save(client, generated["tasks"]).json()["id"]

    response = client.delete(f"/schedules/{schedule_id}")

    assert response.status_code == 204
    assert client.get(f"/schedules/{schedule_id}").status_code == 404


@pytest.mark.parametrize("start,end", [("25:00", "26:00"), ("11:00", "10:00")])
def test_save_with_bad_task_times_is_422_and_nothing_is_stored(client, start: str, end: str) -> None:
    task = {"id": "t1", "title": "Broken", "start_time": start, "end_time": end, "date": DATE}

    response = _save(client, [task])

    assert response.status_code == 422
    assert client.get(f"/schedules/by-date/{DATE}").status_code == 404
    assert client.get("/schedules", params={"start": DATE, "end": DATE}).json() == []
