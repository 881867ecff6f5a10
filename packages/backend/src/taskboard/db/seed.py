"""Demo data: one admin, one regular user, a few tasks.

Learn: Idempotent — accounts are looked up by email first and only
created when missing; sample tasks are only added for a user who has
none. Safe to run against a database that's already in use.
"""

from datetime import datetime, timezone

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.auth.password import hash_password
from taskboard.config import Settings
from taskboard.db.engine import Database
from taskboard.db.models import Role, Task, TaskPriority, TaskStatus, User

logger = structlog.get_logger()

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin123"
USER_EMAIL = "user@example.com"
USER_PASSWORD = "user123"

SAMPLE_TASKS = [
    {
        "title": "Complete project documentation",
        "description": "Write comprehensive documentation for the API",
        "status": TaskStatus.IN_PROGRESS,
        "priority": TaskPriority.HIGH,
        "due_date": datetime(2024, 12, 31, tzinfo=timezone.utc),
    },
    {
        "title": "Review pull requests",
        "description": "Review and merge pending pull requests",
        "status": TaskStatus.PENDING,
        "priority": TaskPriority.MEDIUM,
    },
    {
        "title": "Update dependencies",
        "description": "Update all packages to latest versions",
        "status": TaskStatus.COMPLETED,
        "priority": TaskPriority.LOW,
    },
]


async def _ensure_user(
    session: AsyncSession,
    settings: Settings,
    username: str,
    email: str,
    password: str,
    role: Role,
) -> tuple[User, bool]:
    result = await session.execute(select(User).where(User.email == email))
    user = result.scalars().first()
    if user:
        return user, False
    user = User(
        username=username,
        email=email,
        password_hash=hash_password(password, settings.bcrypt_rounds),
        role=role,
    )
    session.add(user)
    await session.flush()
    return user, True


async def seed(db: Database, settings: Settings) -> dict[str, int]:
    """Create tables and demo rows. Returns what was created."""
    await db.create_all()
    created = {"users": 0, "tasks": 0}

    async with db.session() as session:
        _, new_admin = await _ensure_user(
            session, settings, "admin", ADMIN_EMAIL, ADMIN_PASSWORD, Role.ADMIN
        )
        user, new_user = await _ensure_user(
            session, settings, "john_doe", USER_EMAIL, USER_PASSWORD, Role.USER
        )
        created["users"] = int(new_admin) + int(new_user)

        existing = await session.scalar(
            select(func.count()).select_from(Task).where(Task.user_id == user.id)
        )
        if not existing:
            for fields in SAMPLE_TASKS:
                session.add(Task(user_id=user.id, **fields))
            created["tasks"] = len(SAMPLE_TASKS)

        await session.commit()

    logger.info("seed.completed", **created)
    return created
