"""User administration service (admin-only routes).

Learn: Deleting a user also deletes their tasks. Postgres does this via
ON DELETE CASCADE; we also issue the delete explicitly so SQLite (which
doesn't enforce foreign keys by default) ends up in the same state.
"""

from typing import Any, Optional

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.auth.dependencies import CurrentIdentity
from taskboard.db.models import Task, User, parse_uuid
from taskboard.errors import BadRequest

logger = structlog.get_logger()


class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_users(self, page: int = 1, limit: int = 10) -> tuple[list[User], int]:
        total = await self.db.scalar(select(func.count()).select_from(User))
        result = await self.db.execute(
            select(User)
            .order_by(User.created_at.desc(), User.id)
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(result.scalars().all()), total or 0

    async def get_user(self, user_id: Any) -> Optional[User]:
        uid = parse_uuid(user_id)
        if uid is None:
            return None
        return await self.db.get(User, uid)

    async def delete_user(self, actor: CurrentIdentity, user_id: Any) -> bool:
        """Delete an account and its tasks. Nobody may delete themselves."""
        uid = parse_uuid(user_id)
        if uid is not None and uid == actor.user_id:
            raise BadRequest("You cannot delete your own account")

        user = await self.get_user(uid)
        if not user:
            return False

        await self.db.execute(delete(Task).where(Task.user_id == user.id))
        await self.db.delete(user)
        await self.db.commit()
        logger.info("users.deleted", user_id=str(user.id), actor_id=actor.id)
        return True

