"""JWT token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication.
- Access token: short-lived (1 day), carries {id, email, role}, used per request
- Refresh token: long-lived (10 days), carries {id} only, stored on the user row

The two token types are signed with DIFFERENT secrets. A leaked access
token can't be replayed as a refresh token, and each lifetime can be
tuned on its own. Verification is pure CPU — no database lookup.

Each token carries a random jti, so two logins in the same second still
produce different refresh tokens.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import jwt

from taskboard.config import Settings


class TokenError(Exception):
    """Raised when token creation/verification fails."""


def create_access_token(
    settings: Settings,
    user_id: str,
    email: str,
    role: str,
    expires_minutes: Optional[int] = None,
) -> str:
    """Create a JWT access token."""
    now = datetime.now(timezone.utc)
    expires = now + timedelta(
        minutes=expires_minutes or settings.access_token_expire_minutes
    )
    payload = {
        "id": user_id,
        "email": email,
        "role": role,
        "type": "access",
        "jti": uuid.uuid4().hex,
        "exp": expires,
        "iat": now,
    }
    return jwt.encode(
        payload, settings.access_token_secret, algorithm=settings.jwt_algorithm
    )


def create_refresh_token(
    settings: Settings,
    user_id: str,
    expires_days: Optional[int] = None,
) -> str:
    """Create a JWT refresh token."""
    now = datetime.now(timezone.utc)
    expires = now + timedelta(days=expires_days or settings.refresh_token_expire_days)
    payload = {
        "id": user_id,
        "type": "refresh",
        "jti": uuid.uuid4().hex,
        "exp": expires,
        "iat": now,
    }
    return jwt.encode(
        payload, settings.refresh_token_secret, algorithm=settings.jwt_algorithm
    )


def verify_access_token(settings: Settings, token: str) -> dict[str, Any]:
    """Verify an access token and return its claims. Raises TokenError."""
    payload = _decode(token, settings.access_token_secret, settings.jwt_algorithm)
    if payload.get("type") != "access":
        raise TokenError("Not an access token")
    if not all(payload.get(k) for k in ("id", "email", "role")):
        raise TokenError("Invalid token: missing claims")
    return payload


def verify_refresh_token(settings: Settings, token: str) -> dict[str, Any]:
    """Verify a refresh token and return its claims. Raises TokenError."""
    payload = _decode(token, settings.refresh_token_secret, settings.jwt_algorithm)
    if payload.get("type") != "refresh":
        raise TokenError("Not a refresh token")
    if not payload.get("id"):
        raise TokenError("Invalid token: missing claims")
    return payload


def _decode(token: str, secret: str, algorithm: str) -> dict[str, Any]:
    try:
        return jwt.decode(
            token,
            secret,
            algorithms=[algorithm],
            options={"require": ["exp", "iat"]},
        )
    except jwt.ExpiredSignatureError:
        raise TokenError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise TokenError(f"Invalid token: {e}")
