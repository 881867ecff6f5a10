"""Rate limiting middleware — Redis-based fixed window.

Learn: Each client address gets one counter per window, stored in Redis
under "taskboard:rl:{ip}:{window}". The default is 100 requests per
15 minutes. The first hit in a window sets the key's TTL to the window
length, so counters clean themselves up.

The Redis client lives on app.state.redis (set up in the lifespan).
When it's missing (no Redis configured, or in tests) or errors out,
requests pass through unthrottled.
"""

import time
from typing import Optional

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from taskboard.errors import TooManyRequests, error_response

logger = structlog.get_logger()


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Fixed-window request limit per client address."""

    def __init__(
        self,
        app: ASGIApp,
        max_requests: int = 100,
        window_seconds: int = 15 * 60,
        exempt_paths: tuple[str, ...] = ("/health",),
    ):
        super().__init__(app)
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.exempt_paths = exempt_paths

    async def dispatch(self, request: Request, call_next) -> Response:
        redis = getattr(request.app.state, "redis", None)
        if redis is None or request.url.path in self.exempt_paths:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        window = int(time.time() // self.window_seconds)
        key = f"taskboard:rl:{client_ip}:{window}"

        count = await self._hit(redis, key)
        if count is None:
            # Redis error — don't block the request
            return await call_next(request)

        if count > self.max_requests:
            retry_after = self.window_seconds - int(time.time()) % self.window_seconds
            logger.warning("ratelimit.exceeded", client_ip=client_ip, count=count)
            return error_response(
                TooManyRequests.status_code,
                TooManyRequests.default_message,
                headers={"Retry-After": str(retry_after)},
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(self.max_requests)
        response.headers["X-RateLimit-Remaining"] = str(max(0, self.max_requests - count))
        return response

    async def _hit(self, redis, key: str) -> Optional[int]:
        try:
            count = await redis.incr(key)
            if count == 1:
                await redis.expire(key, self.window_seconds)
            return count
        except Exception as e:
            logger.warning("ratelimit.redis_error", error=str(e))
            return None
