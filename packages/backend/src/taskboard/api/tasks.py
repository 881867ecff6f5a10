"""Task API routes.

Learn: These routes are the HTTP interface to TaskService. The router is
mounted behind the authenticate gate, so every handler can read the
caller's identity. Ownership scoping happens in the service; a task that
exists but belongs to someone else is reported exactly like a task that
doesn't exist (404).

Key patterns:
- POST for creation, PUT for partial update (only sent fields change)
- Query params for filtering (status, priority) and paging (page, limit)
- /tasks/stats is declared before /tasks/{task_id} so it isn't taken as an id
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.auth.dependencies import CurrentIdentity, current_identity
from taskboard.db.engine import get_db
from taskboard.db.models import TaskPriority, TaskStatus
from taskboard.errors import NotFound
from taskboard.schemas.common import MAX_PAGE, envelope, pagination
from taskboard.schemas.task import TaskCreate, TaskRead, TaskStats, TaskUpdate
from taskboard.services.task_service import TaskService

router = APIRouter(prefix="/tasks")

TASK_NOT_FOUND = "Task not found"


def _task_svc(db: AsyncSession = Depends(get_db)) -> TaskService:
    return TaskService(db)


@router.get("/stats")
async def get_task_stats(
    identity: CurrentIdentity = Depends(current_identity),
    svc: TaskService = Depends(_task_svc),
):
    """Status/priority/overdue counts over the caller's visible tasks."""
    stats = TaskStats(**await svc.stats(identity))
    return envelope(200, {"stats": stats}, "Task statistics retrieved successfully")


@router.get("")
async def list_tasks(
    status: Optional[TaskStatus] = Query(None, description="Filter by status"),
    priority: Optional[TaskPriority] = Query(None, description="Filter by priority"),
    page: int = Query(1, ge=1, le=MAX_PAGE),
    limit: int = Query(10, ge=1, le=100),
    identity: CurrentIdentity = Depends(current_identity),
    svc: TaskService = Depends(_task_svc),
):
    """List visible tasks, newest first, with optional filters."""
    tasks, total = await svc.list_tasks(
        identity, status=status, priority=priority, page=page, limit=limit
    )
    return envelope(
        200,
        {
            "tasks": [TaskRead.model_validate(t) for t in tasks],
            "pagination": pagination(page, limit, total, "totalTasks"),
        },
        "Tasks retrieved successfully",
    )


@router.post("", status_code=201)
async def create_task(
    body: TaskCreate,
    identity: CurrentIdentity = Depends(current_identity),
    svc: TaskService = Depends(_task_svc),
):
    """Create a task owned by the caller."""
    task = await svc.create_task(
        identity,
        title=body.title,
        description=body.description,
        status=body.status,
        priority=body.priority,
        due_date=body.due_date,
    )
    return envelope(201, {"task": TaskRead.model_validate(task)}, "Task created successfully")


@router.get("/{task_id}")
async def get_task(
    task_id: str,
    identity: CurrentIdentity = Depends(current_identity),
    svc: TaskService = Depends(_task_svc),
):
    task = await svc.get_task(identity, task_id)
    if not task:
        raise NotFound(TASK_NOT_FOUND)
    return envelope(200, {"task": TaskRead.model_validate(task)}, "Task retrieved successfully")


@router.put("/{task_id}")
async def update_task(
    task_id: str,
    body: TaskUpdate,
    identity: CurrentIdentity = Depends(current_identity),
    svc: TaskService = Depends(_task_svc),
):
    """Partially update a task (title, description, status, priority, dueDate)."""
    task = await svc.update_task(identity, task_id, body.changes())
    if not task:
        raise NotFound(TASK_NOT_FOUND)
    return envelope(200, {"task": TaskRead.model_validate(task)}, "Task updated successfully")


@router.delete("/{task_id}")
async def delete_task(
    task_id: str,
    identity: CurrentIdentity = Depends(current_identity),
    svc: TaskService = Depends(_task_svc),
):
    if not await svc.delete_task(identity, task_id):
        raise NotFound(TASK_NOT_FOUND)
    return envelope(200, None, "Task deleted successfully")
