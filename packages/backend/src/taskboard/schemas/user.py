"""Pydantic schemas for accounts and auth.

Learn: Validation rules mirror the signup/login forms:
- username: 3-50 chars, letters/digits/underscore
- email: trimmed, lower-cased, then checked by EmailStr (email-validator)
- password: at least 6 chars on signup, non-empty on login

Failures surface as 400 "Validation failed" with per-field messages.
"""

import re
import uuid
from datetime import datetime
from typing import Any

from pydantic import (
    BaseModel,
    EmailStr,
    ValidationError,
    ValidatorFunctionWrapHandler,
    field_validator,
)

from taskboard.db.models import Role
from taskboard.schemas.common import CamelModel

_USERNAME_RE = re.compile(r"^[a-zA-Z0-9_]+$")
INVALID_EMAIL = "Please provide a valid email address"


def _validate_email(value: Any, handler: ValidatorFunctionWrapHandler) -> str:
    """Trim and lower-case, then let EmailStr (email-validator) judge it."""
    if isinstance(value, str):
        value = value.strip().lower()
    try:
        return handler(value)
    except ValidationError:
        raise ValueError(INVALID_EMAIL)


# ─── Requests ────────────────────────────────────────────


class SignupRequest(BaseModel):
    username: str
    email: EmailStr
    password: str

    @field_validator("username")
    @classmethod
    def check_username(cls, v: str) -> str:
        v = v.strip()
        if not 3 <= len(v) <= 50:
            raise ValueError("Username must be between 3 and 50 characters")
        if not _USERNAME_RE.match(v):
            raise ValueError("Username can only contain letters, numbers, and underscores")
        return v

    @field_validator("email", mode="wrap")
    @classmethod
    def check_email(cls, v: Any, handler: ValidatorFunctionWrapHandler) -> str:
        return _validate_email(v, handler)

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters long")
        return v


class LoginRequest(BaseModel):
    email: EmailStr
    password: str

    @field_validator("email", mode="wrap")
    @classmethod
    def check_email(cls, v: Any, handler: ValidatorFunctionWrapHandler) -> str:
        return _validate_email(v, handler)

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        if not v:
            raise ValueError("Password is required")
        return v


# ─── Responses ───────────────────────────────────────────


class UserPublic(CamelModel):
    """A user as clients see it — never includes the hash or refresh token."""

    id: uuid.UUID
    username: str
    email: EmailStr
    role: Role
    created_at: datetime
    updated_at: datetime
