"""Redis connection pool for the rate limiter.

Learn: Redis is optional. The lifespan tries to connect once at startup;
if that fails the app runs without rate limiting rather than refusing
to start. The client is kept on app.state.redis, never in a global.
"""

from typing import Optional

import redis.asyncio as aioredis
import structlog

logger = structlog.get_logger()


async def connect_redis(url: str) -> Optional[aioredis.Redis]:
    """Open a pool and ping it. None if Redis isn't reachable."""
    client = aioredis.from_url(url, encoding="utf-8", decode_responses=True)
    try:
        await client.ping()
    except Exception as e:
        logger.warning("taskboard.redis_unavailable", url=url, error=str(e))
        await client.aclose()
        return None
    logger.info("taskboard.redis_connected", url=url)
    return client


async def close_redis(client: Optional[aioredis.Redis]) -> None:
    if client is not None:
        await client.aclose()
