"""Shared redis.asyncio pool for the rate limiter.

Balances, holders and shields never live in Redis; PostgreSQL is the only
store of record.
"""

import logging

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from config.settings import settings

logger = logging.getLogger("ap.request")

_redis_pool: aioredis.Redis | None = None


async def get_redis() -> aioredis.Redis:
    global _redis_pool  # noqa: PLW0603
    if _redis_pool is None:
        _redis_pool = aioredis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
        )
    return _redis_pool


async def ping_redis() -> bool:
    """True when Redis answers. The app still starts without it (rate limits fail open)."""
    try:
        return bool(await (await get_redis()).ping())
    except RedisError as exc:
        logger.warning("redis unavailable at startup: %s", exc)
        return False


async def close_redis() -> None:
    global _redis_pool  # noqa: PLW0603
    if _redis_pool is not None:
        await _redis_pool.aclose()
        _redis_pool = None
