"""Redis client factory — backs the per-customer NWC credential cache.

A BlockingConnectionPool is used so that pool exhaustion makes callers wait
up to CACHE_TIMEOUT_SECONDS for a free connection instead of failing outright.
"""

import redis.asyncio as aioredis

from config.settings import settings

_redis_client: aioredis.Redis | None = None


async def get_redis() -> aioredis.Redis:
    """Get or create the Redis client (FastAPI dependency)."""
    global _redis_client  # noqa: PLW0603
    if _redis_client is None:
        pool = aioredis.BlockingConnectionPool.from_url(
            settings.REDIS_URL,
            max_connections=settings.REDIS_MAX_CONNECTIONS,
            timeout=settings.CACHE_TIMEOUT_SECONDS,
            socket_timeout=settings.CACHE_TIMEOUT_SECONDS,
            socket_connect_timeout=settings.CACHE_TIMEOUT_SECONDS,
            decode_responses=True,
        )
        _redis_client = aioredis.Redis.from_pool(pool)
    return _redis_client


async def close_redis() -> None:
    """Close the Redis client and its connection pool."""
    global _redis_client  # noqa: PLW0603
    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None
