"""Auth API — signup, login, current identity, logout.

Learn: Routes for the account session lifecycle:
- POST /auth/signup → create account, set cookies, return user + access token
- POST /auth/login  → email/password → set cookies, return user + access token
- GET  /auth/me     → identity from the access token (no DB lookup)
- POST /auth/logout → clear the stored refresh token and both cookies

Both tokens go into http-only cookies. The access token is also returned
in the body so non-browser clients can send it as a Bearer header.
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.auth.dependencies import (
    ACCESS_COOKIE,
    REFRESH_COOKIE,
    CurrentIdentity,
    authenticate,
    get_settings,
)
from taskboard.config import Settings
from taskboard.db.engine import get_db
from taskboard.schemas.common import envelope
from taskboard.schemas.user import LoginRequest, SignupRequest, UserPublic
from taskboard.services.auth_service import AuthResult, AuthService

router = APIRouter(prefix="/auth")


def _auth_svc(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> AuthService:
    return AuthService(db, settings)


def _cookie_options(settings: Settings) -> dict:
    return {
        "httponly": True,
        "secure": settings.cookie_secure,
        "samesite": settings.cookie_samesite,
        "path": "/",
    }


def _set_session_cookies(response: Response, result: AuthResult, settings: Settings) -> None:
    opts = _cookie_options(settings)
    response.set_cookie(
        REFRESH_COOKIE,
        result.refresh_token,
        max_age=settings.refresh_token_expire_days * 24 * 60 * 60,
        **opts,
    )
    response.set_cookie(
        ACCESS_COOKIE,
        result.access_token,
        max_age=settings.access_token_expire_minutes * 60,
        **opts,
    )


def _session_payload(result: AuthResult) -> dict:
    return {
        "user": UserPublic.model_validate(result.user),
        "token": result.access_token,
    }


# ─── Signup ──────────────────────────────────────────────


@router.post("/signup", status_code=201)
async def signup(
    body: SignupRequest,
    response: Response,
    svc: AuthService = Depends(_auth_svc),
):
    """Create a new USER account and log it in."""
    result = await svc.signup(body.username, body.email, body.password)
    _set_session_cookies(response, result, svc.settings)
    return envelope(201, _session_payload(result), "User registered successfully")


# ─── Login ───────────────────────────────────────────────


@router.post("/login")
async def login(
    body: LoginRequest,
    response: Response,
    svc: AuthService = Depends(_auth_svc),
):
    """Login with email and password."""
    result = await svc.login(body.email, body.password)
    _set_session_cookies(response, result, svc.settings)
    return envelope(200, _session_payload(result), "Login successful")


# ─── Current identity ───────────────────────────────────


@router.get("/me")
async def get_me(identity: CurrentIdentity = Depends(authenticate)):
    """Who the access token says the caller is.

    Learn: Answered from the token claims alone. An email or role change
    made since the token was issued shows up after the next login.
    """
    return envelope(
        200, {"user": identity.to_dict()}, "User profile retrieved successfully"
    )


# ─── Logout ──────────────────────────────────────────────


@router.post("/logout")
async def logout(
    response: Response,
    identity: CurrentIdentity = Depends(authenticate),
    svc: AuthService = Depends(_auth_svc),
):
    """End the session: forget the refresh token, clear both cookies.

    Learn: An access token that was already issued keeps working until it
    expires. Access tokens are never checked against stored state.
    """
    await svc.logout(identity)
    opts = _cookie_options(svc.settings)
    response.delete_cookie(ACCESS_COOKIE, **opts)
    response.delete_cookie(REFRESH_COOKIE, **opts)
    return envelope(200, None, "Logged out successfully")
