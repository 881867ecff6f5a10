"""Async API client with a cached login session.

Learn: The client-side mirror of the auth flow. After signup/login it
keeps the returned user and access token; `is_authenticated` and
`is_admin` answer from that cache without a round-trip. The token is
sent as a Bearer header (the server also sets cookies, which httpx keeps
in its jar).

The cache is cleared on logout — even if the logout call itself fails —
and whenever the server answers 401, since the session is no longer
usable at that point.
"""

from typing import Any, Optional

import httpx

DEFAULT_API_URL = "http://localhost:5000"


class ClientError(Exception):
    """An API call failed. Carries the status code and server message."""

    def __init__(self, status_code: int, message: str, errors: Optional[list] = None):
        self.status_code = status_code
        self.message = message
        self.errors = errors or []
        super().__init__(f"{status_code}: {message}")


class TaskboardClient:
    """Thin async wrapper over the Taskboard REST API."""

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        token: Optional[str] = None,
        user: Optional[dict] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0,
    ):
        self.token = token
        self.user = user
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            transport=transport,
            timeout=timeout,
        )

    async def __aenter__(self) -> "TaskboardClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ─── Session state ───────────────────────────────────

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def is_admin(self) -> bool:
        return bool(self.user) and self.user.get("role") == "ADMIN"

    def clear_session(self) -> None:
        self.token = None
        self.user = None
        self._http.cookies.clear()

    # ─── Auth ────────────────────────────────────────────

    async def signup(self, username: str, email: str, password: str) -> dict:
        data = await self._request(
            "POST",
            "/api/v1/auth/signup",
            json={"username": username, "email": email, "password": password},
        )
        self._remember(data)
        return data

    async def login(self, email: str, password: str) -> dict:
        data = await self._request(
            "POST", "/api/v1/auth/login", json={"email": email, "password": password}
        )
        self._remember(data)
        return data

    async def logout(self) -> None:
        try:
            await self._request("POST", "/api/v1/auth/logout")
        finally:
            self.clear_session()

    async def me(self) -> dict:
        data = await self._request("GET", "/api/v1/auth/me")
        return data["user"]

    # ─── Tasks ───────────────────────────────────────────

    async def list_tasks(
        self,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> dict:
        params: dict[str, Any] = {"page": page, "limit": limit}
        if status:
            params["status"] = status
        if priority:
            params["priority"] = priority
        return await self._request("GET", "/api/v1/tasks", params=params)

    async def get_task(self, task_id: str) -> dict:
        data = await self._request("GET", f"/api/v1/tasks/{task_id}")
        return data["task"]

    async def create_task(self, title: str, **fields: Any) -> dict:
        data = await self._request("POST", "/api/v1/tasks", json={"title": title, **fields})
        return data["task"]

    async def update_task(self, task_id: str, **fields: Any) -> dict:
        data = await self._request("PUT", f"/api/v1/tasks/{task_id}", json=fields)
        return data["task"]

    async def delete_task(self, task_id: str) -> None:
        await self._request("DELETE", f"/api/v1/tasks/{task_id}")

    async def stats(self) -> dict:
        data = await self._request("GET", "/api/v1/tasks/stats")
        return data["stats"]

    # ─── Plumbing ────────────────────────────────────────

    def _remember(self, data: dict) -> None:
        self.user = data["user"]
        self.token = data["token"]

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        headers = kwargs.pop("headers", {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        r = await self._http.request(method, path, headers=headers, **kwargs)
        try:
            body = r.json()
        except ValueError:
            body = {}

        if r.status_code == 401:
            self.clear_session()
        if r.status_code >= 400:
            raise ClientError(
                r.status_code,
                body.get("data") or body.get("message") or r.reason_phrase,
                body.get("errors"),
            )
        return body.get("data")
