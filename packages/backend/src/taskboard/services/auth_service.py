"""Auth service — signup, login, logout.

Learn: Account session lifecycle:

  Anonymous ──signup/login──▶ Authenticated ──logout──▶ Anonymous
                                   │  ▲
                                   └──┘ login again (refresh token overwritten)

Both signup and login end the same way: issue an access + refresh token,
store the refresh token on the user row (replacing any previous one), and
hand both back to the route, which places them in cookies.

Logout clears the stored refresh token only. Access tokens are stateless
and stay valid until they expire.
"""

from dataclasses import dataclass
from typing import Optional

import structlog
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.auth.dependencies import CurrentIdentity
from taskboard.auth.jwt import create_access_token, create_refresh_token
from taskboard.auth.password import (
    dummy_hash,
    hash_password,
    needs_rehash,
    verify_password,
)
from taskboard.config import Settings
from taskboard.db.models import Role, User
from taskboard.errors import Conflict, Unauthorized

logger = structlog.get_logger()

INVALID_CREDENTIALS = "Invalid credentials"


@dataclass
class AuthResult:
    user: User
    access_token: str
    refresh_token: str


class AuthService:
    """Business logic for account authentication."""

    def __init__(self, db: AsyncSession, settings: Settings):
        self.db = db
        self.settings = settings

    # ─── Signup ──────────────────────────────────────────

    async def signup(
        self,
        username: str,
        email: str,
        password: str,
        role: Role = Role.USER,
    ) -> AuthResult:
        """Create an account and log it in."""
        existing = await self.db.execute(
            select(User.id).where(or_(User.email == email, User.username == username))
        )
        if existing.first():
            raise Conflict("User with this email or username already exists")

        user = User(
            username=username,
            email=email,
            password_hash=hash_password(password, self.settings.bcrypt_rounds),
            role=role,
        )
        self.db.add(user)
        try:
            await self.db.flush()  # get the id; unique index is the final word
        except IntegrityError:
            await self.db.rollback()
            raise Conflict("User with this email or username already exists")

        result = await self._start_session(user)
        logger.info("auth.signup", user_id=str(user.id), username=username)
        return result

    # ─── Login ───────────────────────────────────────────

    async def login(self, email: str, password: str) -> AuthResult:
        """Check credentials and start a new session.

        Unknown email and wrong password raise the same error, so a client
        can't tell which emails have accounts, by body or by timing.
        """
        user = await self.get_by_email(email)
        # An unknown email still costs one bcrypt check
        stored = user.password_hash if user else dummy_hash(self.settings.bcrypt_rounds)
        if not verify_password(password, stored) or user is None:
            logger.info("auth.login_failed", email=email)
            raise Unauthorized(INVALID_CREDENTIALS)

        if needs_rehash(user.password_hash, self.settings.bcrypt_rounds):
            user.password_hash = hash_password(password, self.settings.bcrypt_rounds)
            logger.info("auth.password_rehashed", user_id=str(user.id))

        result = await self._start_session(user)
        logger.info("auth.login", user_id=str(user.id))
        return result

    # ─── Logout ──────────────────────────────────────────

    async def logout(self, identity: CurrentIdentity) -> None:
        """Forget the account's refresh token. Safe to call repeatedly."""
        user = await self.db.get(User, identity.user_id)
        if user is not None and user.refresh_token is not None:
            user.refresh_token = None
            await self.db.commit()
        logger.info("auth.logout", user_id=identity.id)

    # ─── Helpers ─────────────────────────────────────────

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalars().first()

    async def _start_session(self, user: User) -> AuthResult:
        access_token = create_access_token(
            self.settings, str(user.id), user.email, user.role.value
        )
        refresh_token = create_refresh_token(self.settings, str(user.id))

        # Only the latest refresh token is on record
        user.refresh_token = refresh_token
        await self.db.commit()
        await self.db.refresh(user)
        return AuthResult(user=user, access_token=access_token, refresh_token=refresh_token)
