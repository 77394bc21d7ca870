"""
Redis infrastructure

Connection pool for the session store.
"""

from typing import AsyncGenerator, Optional

from redis import asyncio as aioredis
from redis.asyncio import Redis

from matchchats.core.config import settings
from matchchats.core.logging import get_logger

logger = get_logger(__name__)

# Shared by every request; created on startup or on first use
pool: Optional[aioredis.ConnectionPool] = None


async def init_redis_pool() -> aioredis.ConnectionPool:
    global pool
    if pool is None:
        pool = aioredis.ConnectionPool.from_url(
            settings.redis_url,
            db=settings.redis_db,
            encoding="utf-8",
            decode_responses=True,
        )
    return pool


async def close_redis_pool() -> None:
    global pool
    if pool is not None:
        await pool.disconnect()
        pool = None


async def get_redis() -> AsyncGenerator[Redis, None]:
    """Dependency yielding a pooled client, closed after the request"""
    client = aioredis.Redis(connection_pool=await init_redis_pool())
    try:
        yield client
    finally:
        await client.aclose()


async def check_redis(redis: Redis) -> str:
    """Return "ok" if the server answers PING, "error" otherwise"""
    try:
        await redis.ping()
    except Exception as e:
        logger.warning(f"Redis health check failed: {e}")
        return "error"
    return "ok"
