"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Auth is applied at the include_router level using FastAPI's
dependencies parameter — an ordered list of gates that run before any
handler in the router. A gate either lets the request through (and
attaches the caller's identity) or raises, which short-circuits to the
error envelope. The auth router is open; its /me and /logout routes
declare the authenticate gate themselves.
"""

from fastapi import APIRouter, Depends

from taskboard.api.auth import router as auth_router
from taskboard.api.tasks import router as tasks_router
from taskboard.api.users import router as users_router
from taskboard.auth.dependencies import authenticate, require_admin

# Gate chains, run in order
_authenticated = [Depends(authenticate)]
_admin_only = [Depends(authenticate), Depends(require_admin)]

api_router = APIRouter(prefix="/api/v1")

# Open routes — no auth required
api_router.include_router(auth_router, tags=["auth"])

# Protected routes
api_router.include_router(tasks_router, tags=["tasks"], dependencies=_authenticated)
api_router.include_router(users_router, tags=["users"], dependencies=_admin_only)
