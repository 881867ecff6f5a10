"""User administration API — admin only.

Learn: Mounted behind [authenticate, require_admin]. Handlers never see
a non-admin caller.
- GET    /users      → paginated user list, newest first
- GET    /users/:id  → one user
- DELETE /users/:id  → delete a user and their tasks (not yourself)
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.auth.dependencies import CurrentIdentity, current_identity
from taskboard.db.engine import get_db
from taskboard.errors import NotFound
from taskboard.schemas.common import MAX_PAGE, envelope, pagination
from taskboard.schemas.user import UserPublic
from taskboard.services.user_service import UserService

router = APIRouter(prefix="/users")

USER_NOT_FOUND = "User not found"


def _user_svc(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


@router.get("")
async def list_users(
    page: int = Query(1, ge=1, le=MAX_PAGE),
    limit: int = Query(10, ge=1, le=100),
    svc: UserService = Depends(_user_svc),
):
    users, total = await svc.list_users(page=page, limit=limit)
    return envelope(
        200,
        {
            "users": [UserPublic.model_validate(u) for u in users],
            "pagination": pagination(page, limit, total, "totalUsers"),
        },
        "Users retrieved successfully",
    )


@router.get("/{user_id}")
async def get_user(user_id: str, svc: UserService = Depends(_user_svc)):
    user = await svc.get_user(user_id)
    if not user:
        raise NotFound(USER_NOT_FOUND)
    return envelope(200, {"user": UserPublic.model_validate(user)}, "User retrieved successfully")


@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    identity: CurrentIdentity = Depends(current_identity),
    svc: UserService = Depends(_user_svc),
):
    """Delete a user. Deleting your own account is refused (400)."""
    if not await svc.delete_user(identity, user_id):
        raise NotFound(USER_NOT_FOUND)
    return envelope(200, None, "User deleted successfully")
