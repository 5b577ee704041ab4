# app/config/redis.py
"""Redis configuration and connection setup"""
import redis
import redis.asyncio as aioredis
from typing import Optional

from app.config.settings import get_settings

settings = get_settings()

# Redis connection pools
_redis_pool: Optional[aioredis.ConnectionPool] = None
_sync_redis_pool: Optional[redis.ConnectionPool] = None


def get_redis_pool() -> aioredis.ConnectionPool:
    """Get or create async Redis connection pool"""
    global _redis_pool
    if _redis_pool is None:
        _redis_pool = aioredis.ConnectionPool.from_url(
            settings.REDIS_URL,
            max_connections=settings.REDIS_MAX_CONNECTIONS,
            retry_on_timeout=True,
        )
    return _redis_pool


async def get_redis() -> aioredis.Redis:
    """Get async Redis client from pool (API process)"""
    pool = get_redis_pool()
    return aioredis.Redis(connection_pool=pool)


def get_sync_redis() -> redis.Redis:
    """Get blocking Redis client (Celery worker process)"""
    global _sync_redis_pool
    if _sync_redis_pool is None:
        _sync_redis_pool = redis.ConnectionPool.from_url(
            settings.REDIS_URL,
            max_connections=settings.REDIS_MAX_CONNECTIONS,
            retry_on_timeout=True,
        )
    return redis.Redis(connection_pool=_sync_redis_pool)


# Redis key patterns for different data types
class RedisKeys:
    """Redis key patterns for consistent naming"""

    # Single-flight locks for periodic jobs
    SWEEP_LOCK = "lock:sweep:auto-complete"
    REMINDER_LOCK = "lock:sweep:reminders"
