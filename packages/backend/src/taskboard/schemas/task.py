"""Pydantic schemas for tasks.

Learn: Separate schemas for create/update/read keeps the API clean.
- TaskCreate: what you POST to create a task (status/priority default
  to PENDING/MEDIUM)
- TaskUpdate: what you PUT to modify a task. Only fields present in the
  body are applied; "dueDate": null clears the due date
- TaskRead: what the API returns
- TaskStats: per-status/priority counts for the caller's visible tasks
"""

import uuid
from datetime import datetime
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    ValidationError,
    ValidationInfo,
    ValidatorFunctionWrapHandler,
    field_validator,
)
from pydantic.alias_generators import to_camel

from taskboard.db.models import TaskPriority, TaskStatus
from taskboard.schemas.common import CamelModel

TITLE_MAX_LENGTH = 200

_INVALID = {
    "status": "Invalid status value",
    "priority": "Invalid priority value",
    "due_date": "Invalid date format",
}


def _check_title(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Title is required")
    if len(v) > TITLE_MAX_LENGTH:
        raise ValueError(f"Title must not exceed {TITLE_MAX_LENGTH} characters")
    return v


class _TaskBody(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @field_validator("description", check_fields=False)
    @classmethod
    def strip_description(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if isinstance(v, str) else v

    @field_validator("status", "priority", "due_date", mode="wrap", check_fields=False)
    @classmethod
    def plain_messages(
        cls, v: Any, handler: ValidatorFunctionWrapHandler, info: ValidationInfo
    ) -> Any:
        try:
            return handler(v)
        except ValidationError:
            raise ValueError(_INVALID[info.field_name])


class TaskCreate(_TaskBody):
    title: str
    description: Optional[str] = None
    status: TaskStatus = TaskStatus.PENDING
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: Optional[datetime] = None

    @field_validator("title")
    @classmethod
    def check_title(cls, v: str) -> str:
        return _check_title(v)


class TaskUpdate(_TaskBody):
    """Partial update — see changes() for which fields apply."""

    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = None

    @field_validator("title")
    @classmethod
    def check_title(cls, v: Optional[str]) -> Optional[str]:
        return _check_title(v) if v is not None else v

    def changes(self) -> dict:
        """Fields the client actually sent.

        title/status/priority can't be cleared, so an explicit null for
        them is ignored. description and due_date accept null.
        """
        sent = self.model_dump(exclude_unset=True)
        return {
            k: v for k, v in sent.items()
            if v is not None or k in ("description", "due_date")
        }


class TaskRead(CamelModel):
    id: uuid.UUID
    title: str
    description: Optional[str]
    status: TaskStatus
    priority: TaskPriority
    due_date: Optional[datetime]
    user_id: uuid.UUID
    created_at: datetime
    updated_at: datetime


class TaskStats(BaseModel):
    """Counts are strings on the wire, matching what clients already parse."""

    total_tasks: str
    pending: str
    in_progress: str
    completed: str
    cancelled: str
    urgent_tasks: str
    overdue: str

