"""Health check endpoint.

Learn: Simple GET endpoint that verifies the server is running and the
database is reachable. Mounted at /health, outside the /api/v1 prefix,
and never rate limited or authenticated.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """Check server health and database connectivity."""
    try:
        await request.app.state.db.ping()
        database = "ok"
    except Exception as e:
        database = f"error: {e}"

    return {
        "success": True,
        "message": "Server is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": database,
    }
