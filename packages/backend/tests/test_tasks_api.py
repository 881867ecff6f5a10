"""Task API tests — CRUD, ownership, filters, paging, statistics.

Learn: These tests verify the ownership policy, which is the most
important business logic in the system. We test:
1. Task CRUD with defaults and partial updates
2. Ownership: another user's task is a 404, never a 403
3. Admins see and modify every task
4. Filtering and paging (newest first)
5. Statistics, including the overdue count

Pattern: Build up test data using the API (sign up → create tasks).
"""

import uuid

import pytest

from conftest import register

PAST = "2020-01-01T00:00:00Z"
FUTURE = "2999-01-01T00:00:00Z"


async def create(client, account, **body):
    body.setdefault("title", "A task")
    r = await client.post("/api/v1/tasks", json=body, headers=account["headers"])
    assert r.status_code == 201, r.text
    return r.json()["data"]["task"]


# ═══════════════════════════════════════════════════════════
# Task CRUD
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_create_task_defaults(client, alice):
    """POST /tasks creates a PENDING/MEDIUM task owned by the caller."""
    r = await client.post(
        "/api/v1/tasks", json={"title": "  Write report  "}, headers=alice["headers"]
    )
    assert r.status_code == 201
    body = r.json()
    assert body["message"] == "Task created successfully"
    task = body["data"]["task"]
    assert task["title"] == "Write report"
    assert task["status"] == "PENDING"
    assert task["priority"] == "MEDIUM"
    assert task["description"] is None
    assert task["dueDate"] is None
    assert task["userId"] == alice["user"]["id"]
    assert task["createdAt"] and task["updatedAt"]


@pytest.mark.asyncio
async def test_create_task_with_all_fields(client, alice):
    task = await create(
        client,
        alice,
        title="Ship it",
        description="  before Friday ",
        status="IN_PROGRESS",
        priority="URGENT",
        dueDate=FUTURE,
    )
    assert task["description"] == "before Friday"
    assert task["status"] == "IN_PROGRESS"
    assert task["priority"] == "URGENT"
    assert task["dueDate"].startswith("2999-01-01")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body, field",
    [
        ({}, "title"),
        ({"title": "   "}, "title"),
        ({"title": "x" * 201}, "title"),
        ({"title": "ok", "status": "DONE"}, "status"),
        ({"title": "ok", "priority": "CRITICAL"}, "priority"),
        ({"title": "ok", "dueDate": "not-a-date"}, "dueDate"),
    ],
)
async def test_create_task_validation(client, alice, body, field):
    r = await client.post("/api/v1/tasks", json=body, headers=alice["headers"])
    assert r.status_code == 400
    errors = r.json()["errors"]
    assert any(e["field"] == field for e in errors), errors


@pytest.mark.asyncio
async def test_title_messages(client, alice):
    r = await client.post("/api/v1/tasks", json={"title": " "}, headers=alice["headers"])
    assert {"field": "title", "message": "Title is required"} in r.json()["errors"]

    r = await client.post(
        "/api/v1/tasks", json={"title": "x" * 201}, headers=alice["headers"]
    )
    assert {
        "field": "title",
        "message": "Title must not exceed 200 characters",
    } in r.json()["errors"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body, field, message",
    [
        ({"status": "DONE"}, "status", "Invalid status value"),
        ({"priority": "CRITICAL"}, "priority", "Invalid priority value"),
        ({"dueDate": "not-a-date"}, "dueDate", "Invalid date format"),
    ],
)
async def test_enum_and_date_messages(client, alice, body, field, message):
    r = await client.post(
        "/api/v1/tasks", json={"title": "ok", **body}, headers=alice["headers"]
    )
    assert {"field": field, "message": message} in r.json()["errors"]

    task = await create(client, alice)
    r = await client.put(
        f"/api/v1/tasks/{task['id']}", json=body, headers=alice["headers"]
    )
    assert r.status_code == 400
    assert {"field": field, "message": message} in r.json()["errors"]


@pytest.mark.asyncio
async def test_get_task(client, alice):
    task = await create(client, alice, title="Readable")
    r = await client.get(f"/api/v1/tasks/{task['id']}", headers=alice["headers"])
    assert r.status_code == 200
    assert r.json()["message"] == "Task retrieved successfully"
    assert r.json()["data"]["task"]["title"] == "Readable"


@pytest.mark.asyncio
async def test_get_missing_task(client, alice):
    r = await client.get(f"/api/v1/tasks/{uuid.uuid4()}", headers=alice["headers"])
    assert r.status_code == 404
    assert r.json()["data"] == "Task not found"


@pytest.mark.asyncio
async def test_malformed_task_id_is_not_found(client, alice):
    r = await client.get("/api/v1/tasks/not-a-uuid", headers=alice["headers"])
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_partial_update_only_touches_sent_fields(client, alice):
    task = await create(
        client, alice, title="Original", description="keep me", priority="HIGH"
    )
    r = await client.put(
        f"/api/v1/tasks/{task['id']}",
        json={"status": "COMPLETED"},
        headers=alice["headers"],
    )
    assert r.status_code == 200
    assert r.json()["message"] == "Task updated successfully"
    updated = r.json()["data"]["task"]
    assert updated["status"] == "COMPLETED"
    assert updated["title"] == "Original"
    assert updated["description"] == "keep me"
    assert updated["priority"] == "HIGH"
    assert updated["id"] == task["id"]
    assert updated["userId"] == alice["user"]["id"]


@pytest.mark.asyncio
async def test_update_clears_due_date_with_null(client, alice):
    task = await create(client, alice, dueDate=FUTURE)
    r = await client.put(
        f"/api/v1/tasks/{task['id']}", json={"dueDate": None}, headers=alice["headers"]
    )
    assert r.status_code == 200
    assert r.json()["data"]["task"]["dueDate"] is None


@pytest.mark.asyncio
async def test_update_null_title_is_ignored(client, alice):
    task = await create(client, alice, title="Stays")
    r = await client.put(
        f"/api/v1/tasks/{task['id']}", json={"title": None}, headers=alice["headers"]
    )
    assert r.status_code == 200
    assert r.json()["data"]["task"]["title"] == "Stays"


@pytest.mark.asyncio
async def test_update_rejects_invalid_status(client, alice):
    task = await create(client, alice)
    r = await client.put(
        f"/api/v1/tasks/{task['id']}", json={"status": "DONE"}, headers=alice["headers"]
    )
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_update_missing_task(client, alice):
    r = await client.put(
        f"/api/v1/tasks/{uuid.uuid4()}", json={"title": "x"}, headers=alice["headers"]
    )
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_delete_task(client, alice):
    task = await create(client, alice)
    r = await client.delete(f"/api/v1/tasks/{task['id']}", headers=alice["headers"])
    assert r.status_code == 200
    assert r.json()["data"] is None
    assert r.json()["message"] == "Task deleted successfully"

    r = await client.get(f"/api/v1/tasks/{task['id']}", headers=alice["headers"])
    assert r.status_code == 404

    r = await client.delete(f"/api/v1/tasks/{task['id']}", headers=alice["headers"])
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_tasks_require_authentication(client):
    r = await client.get("/api/v1/tasks")
    assert r.status_code == 401
    r = await client.post("/api/v1/tasks", json={"title": "x"})
    assert r.status_code == 401


# ═══════════════════════════════════════════════════════════
# Ownership
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_other_users_task_is_not_found(client, alice, bob):
    """Bob can't tell Alice's task apart from one that doesn't exist."""
    task = await create(client, alice, title="Private")
    url = f"/api/v1/tasks/{task['id']}"

    get = await client.get(url, headers=bob["headers"])
    put = await client.put(url, json={"title": "mine now"}, headers=bob["headers"])
    delete = await client.delete(url, headers=bob["headers"])
    missing = await client.get(f"/api/v1/tasks/{uuid.uuid4()}", headers=bob["headers"])

    for r in (get, put, delete):
        assert r.status_code == 404
        assert r.json() == missing.json()

    # Untouched
    r = await client.get(url, headers=alice["headers"])
    assert r.json()["data"]["task"]["title"] == "Private"


@pytest.mark.asyncio
async def test_list_only_shows_own_tasks(client, alice, bob):
    await create(client, alice, title="alice-1")
    await create(client, alice, title="alice-2")
    await create(client, bob, title="bob-1")

    r = await client.get("/api/v1/tasks", headers=bob["headers"])
    titles = [t["title"] for t in r.json()["data"]["tasks"]]
    assert titles == ["bob-1"]
    assert r.json()["data"]["pagination"]["totalTasks"] == 1


@pytest.mark.asyncio
async def test_admin_sees_and_edits_all_tasks(client, alice, bob, admin):
    a = await create(client, alice, title="alice-task")
    await create(client, bob, title="bob-task")

    r = await client.get("/api/v1/tasks", headers=admin["headers"])
    assert r.json()["data"]["pagination"]["totalTasks"] == 2

    r = await client.put(
        f"/api/v1/tasks/{a['id']}", json={"priority": "LOW"}, headers=admin["headers"]
    )
    assert r.status_code == 200
    # Ownership doesn't move to the admin
    assert r.json()["data"]["task"]["userId"] == alice["user"]["id"]

    r = await client.delete(f"/api/v1/tasks/{a['id']}", headers=admin["headers"])
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_admin_creates_tasks_for_themselves(client, admin):
    task = await create(client, admin, title="admin-own")
    assert task["userId"] == admin["user"]["id"]


# ═══════════════════════════════════════════════════════════
# Filtering and paging
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_list_newest_first(client, alice):
    for i in range(3):
        await create(client, alice, title=f"t{i}")
    r = await client.get("/api/v1/tasks", headers=alice["headers"])
    assert r.json()["message"] == "Tasks retrieved successfully"
    assert [t["title"] for t in r.json()["data"]["tasks"]] == ["t2", "t1", "t0"]


@pytest.mark.asyncio
async def test_filter_by_status_and_priority(client, alice):
    await create(client, alice, title="a", status="COMPLETED", priority="HIGH")
    await create(client, alice, title="b", status="COMPLETED", priority="LOW")
    await create(client, alice, title="c", status="PENDING", priority="HIGH")

    r = await client.get(
        "/api/v1/tasks", params={"status": "COMPLETED"}, headers=alice["headers"]
    )
    assert {t["title"] for t in r.json()["data"]["tasks"]} == {"a", "b"}

    r = await client.get(
        "/api/v1/tasks",
        params={"status": "COMPLETED", "priority": "HIGH"},
        headers=alice["headers"],
    )
    assert [t["title"] for t in r.json()["data"]["tasks"]] == ["a"]
    assert r.json()["data"]["pagination"]["totalTasks"] == 1


@pytest.mark.asyncio
async def test_invalid_filter_value(client, alice):
    r = await client.get(
        "/api/v1/tasks", params={"status": "DONE"}, headers=alice["headers"]
    )
    assert r.status_code == 400
    assert r.json()["data"] == "Validation failed"


@pytest.mark.asyncio
async def test_pagination(client, alice):
    for i in range(5):
        await create(client, alice, title=f"t{i}")

    r = await client.get(
        "/api/v1/tasks", params={"page": 2, "limit": 2}, headers=alice["headers"]
    )
    data = r.json()["data"]
    assert [t["title"] for t in data["tasks"]] == ["t2", "t1"]
    assert data["pagination"] == {
        "currentPage": 2,
        "totalPages": 3,
        "totalTasks": 5,
        "limit": 2,
    }

    r = await client.get(
        "/api/v1/tasks", params={"page": 9, "limit": 2}, headers=alice["headers"]
    )
    assert r.json()["data"]["tasks"] == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "params",
    [{"page": 0}, {"page": 99999999999999999999}, {"limit": 0}, {"limit": 101}],
)
async def test_pagination_bounds(client, alice, params):
    r = await client.get("/api/v1/tasks", params=params, headers=alice["headers"])
    assert r.status_code == 400


# ═══════════════════════════════════════════════════════════
# Statistics
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_stats_empty(client, alice):
    r = await client.get("/api/v1/tasks/stats", headers=alice["headers"])
    assert r.status_code == 200
    assert r.json()["message"] == "Task statistics retrieved successfully"
    assert r.json()["data"]["stats"] == {
        "total_tasks": "0",
        "pending": "0",
        "in_progress": "0",
        "completed": "0",
        "cancelled": "0",
        "urgent_tasks": "0",
        "overdue": "0",
    }


@pytest.mark.asyncio
async def test_stats_counts(client, alice, bob):
    await create(client, alice, status="PENDING", priority="URGENT", dueDate=PAST)
    await create(client, alice, status="IN_PROGRESS", dueDate=FUTURE)
    await create(client, alice, status="COMPLETED", dueDate=PAST)
    await create(client, alice, status="CANCELLED", priority="URGENT")
    await create(client, bob, status="PENDING", dueDate=PAST)

    r = await client.get("/api/v1/tasks/stats", headers=alice["headers"])
    assert r.json()["data"]["stats"] == {
        "total_tasks": "4",
        "pending": "1",
        "in_progress": "1",
        "completed": "1",
        "cancelled": "1",
        "urgent_tasks": "2",
        # Completed tasks are never overdue
        "overdue": "1",
    }


@pytest.mark.asyncio
async def test_completing_a_task_drops_overdue(client, alice):
    task = await create(client, alice, dueDate=PAST)
    r = await client.get("/api/v1/tasks/stats", headers=alice["headers"])
    assert r.json()["data"]["stats"]["overdue"] == "1"

    await client.put(
        f"/api/v1/tasks/{task['id']}",
        json={"status": "COMPLETED"},
        headers=alice["headers"],
    )
    r = await client.get("/api/v1/tasks/stats", headers=alice["headers"])
    assert r.json()["data"]["stats"]["overdue"] == "0"


@pytest.mark.asyncio
async def test_admin_stats_cover_all_tasks(client, alice, bob, admin):
    await create(client, alice)
    await create(client, bob)
    r = await client.get("/api/v1/tasks/stats", headers=admin["headers"])
    assert r.json()["data"]["stats"]["total_tasks"] == "2"


@pytest.mark.asyncio
async def test_new_user_starts_empty(client):
    carol = await register(client, username="carol")
    r = await client.get("/api/v1/tasks", headers=carol["headers"])
    assert r.json()["data"]["tasks"] == []
    assert r.json()["data"]["pagination"]["totalPages"] == 0
