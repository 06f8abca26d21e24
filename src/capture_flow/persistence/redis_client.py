"""
Redis client with connection pooling for the artifact cache.

Uses redis-py's asyncio client. Responses are not decoded: cached artifacts
are binary.
"""

from typing import Optional

import structlog
from redis.asyncio import ConnectionPool as AsyncConnectionPool
from redis.asyncio import Redis as AsyncRedis

from capture_flow.config import Settings

logger = structlog.get_logger(__name__)


class RedisClient:
    """
    Async Redis client factory sharing one connection pool per process.
    """

    _async_pool: Optional[AsyncConnectionPool] = None

    @classmethod
    def get_async_client(cls, settings: Settings) -> AsyncRedis:
        """
        Get asynchronous Redis client with connection pooling.

        Args:
            settings: Application settings

        Returns:
            AsyncRedis client instance
        """
        if cls._async_pool is None:
            cls._async_pool = AsyncConnectionPool.from_url(
                settings.REDIS_URL,
                max_connections=settings.REDIS_MAX_CONNECTIONS,
                decode_responses=False,  # artifacts are raw bytes
                socket_timeout=5,
                socket_connect_timeout=5,
                retry_on_timeout=True,
            )
            logger.info("Initialized Redis async connection pool", redis_url=settings.REDIS_URL)

        return AsyncRedis(connection_pool=cls._async_pool)

    @classmethod
    async def close_async_pool(cls) -> None:
        """Close async connection pool (cleanup on shutdown)."""
        if cls._async_pool is not None:
            await cls._async_pool.disconnect()
            cls._async_pool = None
            logger.info("Closed Redis async connection pool")


async def get_async_redis_client(settings: Settings) -> AsyncRedis:
    """
    Dependency injection helper for async Redis client.

    Args:
        settings: Application settings

    Returns:
        AsyncRedis client instance
    """
    return RedisClient.get_async_client(settings)
