"""Task service — business logic for task CRUD and statistics.

Learn: Every read and write goes through the ownership policy
(taskboard.auth.policy.scope_tasks). The service never decides on its own
who can see a row, and it never distinguishes "hidden" from "missing":
both come back as None from the lookup and the route turns that into 404.

Statistics are a point-in-time snapshot: load the visible tasks, count in
memory. No caching, nothing maintained incrementally.
"""

from datetime import datetime, timezone
from typing import Any, Optional

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.auth.dependencies import CurrentIdentity
from taskboard.auth.policy import scope_tasks
from taskboard.db.models import Task, TaskPriority, TaskStatus, parse_uuid

logger = structlog.get_logger()


class TaskService:
    """Business logic for task CRUD, scoped to a caller."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Create ──────────────────────────────────────────

    async def create_task(
        self,
        identity: CurrentIdentity,
        title: str,
        description: Optional[str] = None,
        status: TaskStatus = TaskStatus.PENDING,
        priority: TaskPriority = TaskPriority.MEDIUM,
        due_date: Optional[datetime] = None,
    ) -> Task:
        """Create a task owned by the caller."""
        task = Task(
            title=title,
            description=description,
            status=status,
            priority=priority,
            due_date=due_date,
            user_id=identity.user_id,
        )
        self.db.add(task)
        await self.db.commit()
        await self.db.refresh(task)
        logger.info("tasks.created", task_id=str(task.id), user_id=identity.id)
        return task

    # ─── Read ────────────────────────────────────────────

    async def get_task(self, identity: CurrentIdentity, task_id: Any) -> Optional[Task]:
        """A task the caller may see, or None (missing or not theirs)."""
        tid = parse_uuid(task_id)
        if tid is None:
            return None
        query = scope_tasks(select(Task).where(Task.id == tid), identity)
        result = await self.db.execute(query)
        return result.scalars().first()

    async def list_tasks(
        self,
        identity: CurrentIdentity,
        status: Optional[TaskStatus] = None,
        priority: Optional[TaskPriority] = None,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[Task], int]:
        """One page of visible tasks (newest first) plus the total match count.

        Learn: Query filters are applied conditionally — only when the
        caller provides them. The count uses the same filters.
        """
        query = scope_tasks(select(Task), identity)
        if status:
            query = query.where(Task.status == status)
        if priority:
            query = query.where(Task.priority == priority)

        total = await self.db.scalar(
            select(func.count()).select_from(query.subquery())
        )
        result = await self.db.execute(
            query.order_by(Task.created_at.desc(), Task.id)
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(result.scalars().all()), total or 0

    # ─── Update ──────────────────────────────────────────

    async def update_task(
        self,
        identity: CurrentIdentity,
        task_id: Any,
        changes: dict[str, Any],
    ) -> Optional[Task]:
        """Apply a partial update. Owner and id never change."""
        task = await self.get_task(identity, task_id)
        if not task:
            return None

        for field in ("title", "description", "status", "priority", "due_date"):
            if field in changes:
                setattr(task, field, changes[field])

        await self.db.commit()
        await self.db.refresh(task)
        logger.info(
            "tasks.updated",
            task_id=str(task.id),
            user_id=identity.id,
            fields=sorted(changes),
        )
        return task

    # ─── Delete ──────────────────────────────────────────

    async def delete_task(self, identity: CurrentIdentity, task_id: Any) -> bool:
        task = await self.get_task(identity, task_id)
        if not task:
            return False
        await self.db.delete(task)
        await self.db.commit()
        logger.info("tasks.deleted", task_id=str(task.id), user_id=identity.id)
        return True

    # ─── Statistics ──────────────────────────────────────

    async def stats(
        self, identity: CurrentIdentity, now: Optional[datetime] = None
    ) -> dict[str, str]:
        """Counts by status and priority, plus overdue, over visible tasks."""
        now = now or datetime.now(timezone.utc)
        result = await self.db.execute(scope_tasks(select(Task), identity))
        tasks = list(result.scalars().all())

        def count(pred) -> str:
            return str(sum(1 for t in tasks if pred(t)))

        return {
            "total_tasks": str(len(tasks)),
            "pending": count(lambda t: t.status == TaskStatus.PENDING),
            "in_progress": count(lambda t: t.status == TaskStatus.IN_PROGRESS),
            "completed": count(lambda t: t.status == TaskStatus.COMPLETED),
            "cancelled": count(lambda t: t.status == TaskStatus.CANCELLED),
            "urgent_tasks": count(lambda t: t.priority == TaskPriority.URGENT),
            "overdue": count(lambda t: t.is_overdue(now)),
        }

