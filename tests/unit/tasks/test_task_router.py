from datetime import datetime, timedelta, timezone
import logging
from typing import Generator
import pytest
from fastapi.testclient import TestClient
from pytest_mock import MockerFixture

from task_api.common.exceptions import TaskStoreException
from task_api.main import app
from task_api.tasks.dependencies import get_task_store
from tests.fakes import InMemoryTaskStore

BASE_TIME = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def task_store() -> InMemoryTaskStore:
    return InMemoryTaskStore()


@pytest.fixture
def test_client(task_store: InMemoryTaskStore) -> Generator[TestClient, None, None]:
    app.dependency_overrides[get_task_store] = lambda: task_store
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


def create_task(test_client: TestClient, **payload) -> dict:
    response = test_client.post("/api/tasks", json=payload)
    assert response.status_code == 201
    return response.json()


def test_create_task_applies_defaults(test_client: TestClient) -> None:
    response = test_client.post("/api/tasks", json={"title": "Buy milk"})

    assert response.status_code == 201
    body = response.json()
    assert body["id"]
    assert body["title"] == "Buy milk"
    assert body["priority"] == "mid"
    assert body["completed"] is False
    assert body["deleted"] is False
    assert body["deletedAt"] is None
    assert body["createdAt"] == body["updatedAt"]


def test_create_task_with_all_fields(test_client: TestClient) -> None:
    body = create_task(
        test_client,
        title="File taxes",
        description="Before the deadline",
        priority="high",
        dueDateString="April 15",
        dueDate="2024-04-15T09:00:00Z",
    )

    assert body["description"] == "Before the deadline"
    assert body["priority"] == "high"
    assert body["dueDateString"] == "April 15"
    assert body["dueDate"].startswith("2024-04-15T09:00:00")


def test_create_task_blank_due_date_is_unset(test_client: TestClient) -> None:
    response = test_client.post("/api/tasks", json={"title": "x", "dueDate": ""})

    assert response.status_code == 201
    assert response.json()["dueDate"] is None


@pytest.mark.parametrize(
    "payload",
    [{}, {"title": ""}, {"title": "Ok", "priority": "urgent"}],
)
def test_create_task_validation_error(
    test_client: TestClient, task_store: InMemoryTaskStore, payload: dict
) -> None:
    response = test_client.post("/api/tasks", json=payload)

    assert response.status_code == 400
    body = response.json()
    assert body["message"].startswith("Task validation failed")
    assert body["errors"]
    assert task_store.tasks == {}


def test_create_task_missing_title_message(test_client: TestClient) -> None:
    response = test_client.post("/api/tasks", json={"description": "no title"})

    assert response.status_code == 400
    assert response.json()["message"] == "Task validation failed: title: Field required"
    assert response.json()["errors"][0]["loc"] == "body.title"


def test_create_task_malformed_json(test_client: TestClient) -> None:
    response = test_client.post(
        "/api/tasks",
        content=b"{not json",
        headers={"content-type": "application/json"},
    )

    assert response.status_code == 400


def test_list_tasks_returns_created_tasks(test_client: TestClient) -> None:
    assert test_client.get("/api/tasks").json() == []

    first = create_task(test_client, title="One")
    second = create_task(test_client, title="Two")

    response = test_client.get("/api/tasks")

    assert response.status_code == 200
    assert {task["id"] for task in response.json()} == {first["id"], second["id"]}


def test_soft_delete_hides_task_from_list(
    test_client: TestClient, task_store: InMemoryTaskStore
) -> None:
    task = create_task(test_client, title="Buy milk")

    response = test_client.delete(f"/api/tasks/{task['id']}")

    assert response.status_code == 200
    assert response.json() == {"message": "Task deleted successfully"}
    assert test_client.get("/api/tasks").json() == []

    stored = task_store.get_task(task["id"])
    assert stored.deleted is True
    assert stored.deleted_at is not None


def test_restore_brings_task_back(test_client: TestClient) -> None:
    task = create_task(test_client, title="Buy milk")
    test_client.delete(f"/api/tasks/{task['id']}")

    response = test_client.post(f"/api/tasks/{task['id']}/restore")

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Task restored successfully"
    assert body["task"]["deleted"] is False
    assert body["task"]["deletedAt"] is None
    assert [t["id"] for t in test_client.get("/api/tasks").json()] == [task["id"]]


def test_update_task_clears_delete_flag_and_ignores_body(
    test_client: TestClient,
) -> None:
    task = create_task(test_client, title="Buy milk")
    test_client.delete(f"/api/tasks/{task['id']}")

    response = test_client.put(
        f"/api/tasks/{task['id']}", json={"title": "Buy oat milk", "priority": "low"}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["id"] == task["id"]
    assert body["deleted"] is False
    assert body["deletedAt"] is None
    assert body["title"] == "Buy milk"
    assert body["priority"] == "mid"


def test_complete_task(test_client: TestClient) -> None:
    task = create_task(test_client, title="Buy milk")
    test_client.delete(f"/api/tasks/{task['id']}")

    response = test_client.patch(f"/api/tasks/{task['id']}/complete")

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Task marked as completed"
    assert body["task"]["completed"] is True
    assert body["task"]["deleted"] is True
    assert body["task"]["deletedAt"] is not None


def test_mutations_refresh_updated_at(
    test_client: TestClient, mocker: MockerFixture
) -> None:
    mocker.patch(
        "task_api.tasks.store.base.get_current_datetime",
        side_effect=[BASE_TIME, BASE_TIME + timedelta(minutes=5)],
    )
    task = create_task(test_client, title="Buy milk")

    body = test_client.patch(f"/api/tasks/{task['id']}/complete").json()["task"]

    assert body["createdAt"] == task["createdAt"]
    assert body["updatedAt"] > body["createdAt"]


@pytest.mark.parametrize(
    "method, path",
    [
        ("put", "/api/tasks/missing-id"),
        ("delete", "/api/tasks/missing-id"),
        ("post", "/api/tasks/missing-id/restore"),
        ("patch", "/api/tasks/missing-id/complete"),
    ],
)
def test_unknown_task_returns_not_found(
    test_client: TestClient, task_store: InMemoryTaskStore, method: str, path: str
) -> None:
    existing = create_task(test_client, title="Buy milk")
    before = task_store.get_task(existing["id"])

    response = test_client.request(method.upper(), path)

    assert response.status_code == 404
    assert response.json() == {"message": "Task not found"}
    assert list(task_store.tasks) == [existing["id"]]
    assert task_store.get_task(existing["id"]) == before


def test_list_tasks_sorted_by_priority(test_client: TestClient) -> None:
    for priority in ["low", "high", "mid"]:
        create_task(test_client, title=f"{priority} task", priority=priority)

    response = test_client.get("/api/tasks", params={"sort": "priority"})

    assert [task["priority"] for task in response.json()] == ["high", "mid", "low"]


def test_list_tasks_sorted_by_date_added(
    test_client: TestClient, mocker: MockerFixture
) -> None:
    mocker.patch(
        "task_api.tasks.store.base.get_current_datetime",
        side_effect=[BASE_TIME + timedelta(minutes=i) for i in range(3)],
    )
    for title in ["first", "second", "third"]:
        create_task(test_client, title=title)

    response = test_client.get("/api/tasks", params={"sort": "dateAdded"})

    assert [task["title"] for task in response.json()] == ["third", "second", "first"]


def test_list_tasks_sorted_by_due_date(test_client: TestClient) -> None:
    create_task(test_client, title="later", dueDate="2024-03-01T00:00:00Z")
    create_task(test_client, title="sooner", dueDate="2024-02-01T00:00:00Z")

    response = test_client.get("/api/tasks", params={"sort": "dueDate"})

    assert [task["title"] for task in response.json()] == ["sooner", "later"]


def test_list_tasks_unknown_sort_is_ignored(test_client: TestClient) -> None:
    create_task(test_client, title="Buy milk")

    response = test_client.get("/api/tasks", params={"sort": "title"})

    assert response.status_code == 200
    assert len(response.json()) == 1


def test_store_failure_returns_server_error(
    test_client: TestClient, task_store: InMemoryTaskStore, mocker: MockerFixture
) -> None:
    mocker.patch.object(
        task_store, "list_tasks", side_effect=TaskStoreException("Connection refused")
    )

    response = test_client.get("/api/tasks")

    assert response.status_code == 500
    assert response.json() == {"message": "Connection refused"}


def test_unexpected_error_is_logged_with_request_details(
    test_client: TestClient,
    task_store: InMemoryTaskStore,
    mocker: MockerFixture,
    caplog: pytest.LogCaptureFixture,
) -> None:
    mocker.patch.object(task_store, "_insert_task", side_effect=RuntimeError("boom"))

    response = test_client.post("/api/tasks", json={"title": "Buy milk"})

    assert response.status_code == 500
    assert response.json() == {"message": "Internal server error"}

    record = next(
        r
        for r in caplog.records
        if r.name == "task_api.common.exceptions" and r.levelno == logging.ERROR
    )
    assert record.getMessage() == "boom"
    assert record.exc_info is not None
    assert record.method == "POST"
    assert record.path == "/api/tasks"
    assert record.body == {"title": "Buy milk"}


def test_access_log_entry(
    test_client: TestClient, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.INFO, logger="task_api.common.access_log"):
        test_client.post("/api/tasks", json={"title": "Buy milk"})
        test_client.get("/api/tasks", params={"sort": "priority"})

    post_record, get_record = [
        r for r in caplog.records if r.name == "task_api.common.access_log"
    ]

    assert post_record.getMessage().startswith("POST /api/tasks 201 ")
    assert post_record.status == 201
    assert post_record.body == {"title": "Buy milk"}
    assert post_record.duration_ms >= 0

    assert get_record.getMessage().startswith("GET /api/tasks?sort=priority 200 ")
    assert get_record.query == {"sort": "priority"}
    assert not hasattr(get_record, "body")
