"""Shared Redis connection pool for the notification transport.

The dispatcher publishes through it and every open WebSocket relay holds one
pub/sub connection from it. Redis holds no order or stock state.
"""

import redis.asyncio as aioredis

from config.settings import settings

_redis_pool: aioredis.Redis | None = None


async def get_redis() -> aioredis.Redis:
    global _redis_pool  # noqa: PLW0603
    if _redis_pool is None:
        # Relay subscriptions can sit idle for hours; the health check notices
        # a dead connection before the next publish is lost on it.
        _redis_pool = aioredis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            health_check_interval=settings.REDIS_HEALTH_CHECK_SECONDS,
            socket_keepalive=True,
        )
    return _redis_pool


async def close_redis() -> None:
    """Drop the pool on shutdown; the next get_redis() builds a fresh one."""
    global _redis_pool  # noqa: PLW0603
    if _redis_pool is not None:
        await _redis_pool.aclose()
        _redis_pool = None
