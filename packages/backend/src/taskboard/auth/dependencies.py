"""FastAPI auth dependencies — the request gates.

Learn: These are used as Depends() in routers to authenticate the caller
and gate by role. Routers list them in order:

    dependencies=[Depends(authenticate), Depends(require_admin)]

Each gate either returns (request continues, identity attached to
request.state) or raises an ApiError (request short-circuits to the
error envelope). Neither gate touches the database.
"""

import uuid
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request

from taskboard.auth.jwt import TokenError, verify_access_token
from taskboard.config import Settings
from taskboard.db.models import Role
from taskboard.errors import Forbidden, Unauthorized

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"


@dataclass(frozen=True)
class CurrentIdentity:
    """The authenticated caller, as stated by their access token.

    Learn: Built from token claims only. A role or email change made after
    the token was issued is not visible here until the user logs in again.
    """

    id: str
    email: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value

    @property
    def user_id(self) -> uuid.UUID:
        return uuid.UUID(self.id)

    def to_dict(self) -> dict:
        return {"id": self.id, "email": self.email, "role": self.role}


def get_settings(request: Request) -> Settings:
    """The Settings the running app was built with."""
    return request.app.state.settings


def extract_token(request: Request) -> Optional[str]:
    """Token from the accessToken cookie, else from Authorization: Bearer."""
    token = request.cookies.get(ACCESS_COOKIE)
    if token:
        return token
    authorization = request.headers.get("Authorization")
    if authorization and authorization.startswith("Bearer "):
        return authorization[7:].strip() or None
    return None


async def authenticate(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> CurrentIdentity:
    """Gate 1: require a valid access token and attach the identity."""
    token = extract_token(request)
    if not token:
        raise Unauthorized("Unauthorized request")

    try:
        payload = verify_access_token(settings, token)
    except TokenError:
        raise Unauthorized("Invalid or expired token")

    identity = CurrentIdentity(
        id=str(payload["id"]),
        email=payload["email"],
        role=payload["role"],
    )
    request.state.identity = identity
    return identity


async def require_admin(request: Request) -> CurrentIdentity:
    """Gate 2: must run after authenticate. ADMIN role only."""
    identity: Optional[CurrentIdentity] = getattr(request.state, "identity", None)
    if identity is None:
        raise Unauthorized("Unauthorized request")
    if not identity.is_admin:
        raise Forbidden("Access forbidden. Admin only.")
    return identity


def current_identity(request: Request) -> CurrentIdentity:
    """Read the identity a gate already attached (for handlers)."""
    identity: Optional[CurrentIdentity] = getattr(request.state, "identity", None)
    if identity is None:
        raise Unauthorized("Unauthorized request")
    return identity
