"""Test fixtures — a fresh app and database per test.

Learn: Testing pattern for async SQLAlchemy + FastAPI:

1. Each test builds its own app via create_app(settings), pointed at a
   SQLite file in pytest's tmp_path (aiosqlite driver). No Postgres needed.
2. ASGITransport doesn't run the lifespan, so the fixture creates tables
   itself and disposes the engine afterwards.
3. Redis is left unconfigured, so rate limiting is skipped.

The client talks to https://test: auth cookies are marked Secure, and
httpx only sends Secure cookies over https.

Unlike a mocked-identity setup, every protected route in these tests runs
the real gates: tests sign up (and log in) through the API and send the
returned access token.
"""

import uuid
from typing import Optional

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import update

from taskboard.config import Settings
from taskboard.db.models import Role, User
from taskboard.main import create_app

PASSWORD = "password_123"


@pytest_asyncio.fixture()
async def settings(tmp_path):
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        redis_url="",
        environment="development",
        access_token_secret="test-access-secret",
        refresh_token_secret="test-refresh-secret",
    )


@pytest_asyncio.fixture()
async def app(settings):
    application = create_app(settings)
    await application.state.db.create_all()
    try:
        yield application
    finally:
        await application.state.db.dispose()


@pytest_asyncio.fixture()
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="https://test") as ac:
        yield ac


@pytest_asyncio.fixture()
async def db_session(app):
    """Direct session on the app's database, for arranging/inspecting rows."""
    async with app.state.db.session() as session:
        yield session


# ─── Account helpers ─────────────────────────────────────


async def register(
    client: AsyncClient,
    username: Optional[str] = None,
    email: Optional[str] = None,
    password: str = PASSWORD,
) -> dict:
    """Sign up through the API; returns {"user", "token", "headers"}.

    The client's cookie jar is cleared afterwards so the next account a
    test creates doesn't ride on this one's cookies (cookies win over the
    Authorization header).
    """
    suffix = uuid.uuid4().hex[:8]
    username = username or f"user_{suffix}"
    email = email or f"{username}@example.com"
    r = await client.post(
        "/api/v1/auth/signup",
        json={"username": username, "email": email, "password": password},
    )
    assert r.status_code == 201, r.text
    data = r.json()["data"]
    client.cookies.clear()
    return {
        "user": data["user"],
        "token": data["token"],
        "headers": {"Authorization": f"Bearer {data['token']}"},
        "password": password,
    }


async def login(client: AsyncClient, email: str, password: str = PASSWORD) -> dict:
    r = await client.post("/api/v1/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    data = r.json()["data"]
    client.cookies.clear()
    return {
        "user": data["user"],
        "token": data["token"],
        "headers": {"Authorization": f"Bearer {data['token']}"},
    }


async def promote_to_admin(app, user_id: str) -> None:
    """There's no promotion endpoint; flip the role directly in the store."""
    async with app.state.db.session() as session:
        await session.execute(
            update(User).where(User.id == uuid.UUID(user_id)).values(role=Role.ADMIN)
        )
        await session.commit()


@pytest_asyncio.fixture()
async def alice(client):
    return await register(client, username="alice")


@pytest_asyncio.fixture()
async def bob(client):
    return await register(client, username="bob")


@pytest_asyncio.fixture()
async def admin(app, client):
    """An ADMIN account, logged in after promotion so the token says ADMIN."""
    account = await register(client, username="root_admin")
    await promote_to_admin(app, account["user"]["id"])
    return await login(client, account["user"]["email"])
