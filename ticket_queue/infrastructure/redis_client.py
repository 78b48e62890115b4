"""
Redis connection for the catalog cache.
Separated from business logic for clean architecture.

The client is created once. When a ping or a cache command fails, Redis is
considered unavailable for REDIS_RETRY_BACKOFF seconds and get_client() returns
None without touching the network, so lookups go straight to the database.
"""

import time
from typing import Optional

import redis.asyncio as redis

from ticket_queue.core.config import get_settings
from ticket_queue.core.logging import get_logger

logger = get_logger(__name__)


class RedisClient:
    """Process-wide async Redis client with connection pooling."""

    _instance: Optional[redis.Redis] = None
    _healthy: bool = False
    _retry_at: float = 0.0

    @classmethod
    async def get_client(cls) -> Optional[redis.Redis]:
        """Get the client. Returns None if Redis is disabled or backing off after a failure."""
        settings = get_settings()
        if not settings.REDIS_ENABLED:
            return None

        if cls._instance is None:
            cls._instance = redis.from_url(
                settings.REDIS_URL,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=settings.REDIS_CONNECT_TIMEOUT,
                socket_timeout=settings.REDIS_CONNECT_TIMEOUT,
                health_check_interval=30,
            )

        if not cls._healthy:
            if time.monotonic() < cls._retry_at:
                return None
            try:
                await cls._instance.ping()
            except redis.RedisError as e:
                cls.mark_unavailable(e)
                return None
            cls._healthy = True
            logger.info("redis_connected", url=settings.REDIS_URL)

        return cls._instance

    @classmethod
    def mark_unavailable(cls, error: Exception) -> None:
        backoff = get_settings().REDIS_RETRY_BACKOFF
        cls._healthy = False
        cls._retry_at = time.monotonic() + backoff
        logger.error("redis_unavailable", error=str(error), retry_in_seconds=backoff)

    @classmethod
    async def close(cls) -> None:
        if cls._instance is not None:
            await cls._instance.aclose()
        cls._instance = None
        cls._healthy = False
        cls._retry_at = 0.0


async def get_redis() -> Optional[redis.Redis]:
    """Get the shared Redis client, or None when caching is off or Redis is down."""
    return await RedisClient.get_client()


def mark_redis_unavailable(error: Exception) -> None:
    RedisClient.mark_unavailable(error)


async def close_redis() -> None:
    await RedisClient.close()
