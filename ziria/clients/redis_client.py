# ziria/clients/redis_client.py
"""Redis client module for cache operations."""

from collections.abc import Awaitable
from logging import getLogger
from typing import Any

from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError

from ziria.configs import file_logger, pool_kwargs

logger = file_logger(getLogger(__name__))


class RedisClient:
    """
    Async Redis client wrapper with connection pooling.

    One instance is shared by every in-flight request. Each operation is a
    single Redis command, so no locking is needed around it.
    """

    def __init__(self, config: dict[str, Any] | None = None) -> None:
        """Initialize Redis client."""
        self.config = config if config is not None else pool_kwargs
        self._pool: ConnectionPool | None = None
        self._redis: Redis | None = None

    async def connect(self) -> None:
        """Establish Redis connection pool."""
        try:
            self._pool = ConnectionPool(**self.config)
            self._redis = Redis(connection_pool=self._pool)
            ping_result = self._redis.ping()
            if isinstance(ping_result, Awaitable):
                result = await ping_result
            else:
                result = ping_result
            if not result:
                mssg = "Redis ping returned False"
                raise RedisConnectionError(mssg)
            logger.info("Redis connection successful. Cache is using Redis.")
        except (ConnectionError, RedisTimeoutError, RedisError) as e:
            logger.exception("Failed to connect to Redis")
            mssg = f"Cannot connect to Redis at {self.config.get('host')}:{self.config.get('port')}"
            raise RedisConnectionError(mssg) from e

    async def disconnect(self) -> None:
        """Close Redis connection pool."""
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None
            logger.info("Redis connection closed.")

    @property
    def client(self) -> Redis:
        """Get Redis client instance."""
        if self._redis is None:
            mssg = "Redis client not initialized. Call connect() first."
            raise RuntimeError(mssg)
        return self._redis

    async def get(self, key: str) -> bytes | None:
        """Get value from cache."""
        try:
            return await self.client.get(key)
        except RedisError as e:
            logger.exception(f"Failed to get key {key}")
            mssg = f"Cache get operation failed for key {key}: {e}"
            raise RedisConnectionError(mssg) from e

    async def set(self, key: str, value: bytes) -> bool:
        """Set value in cache. Entries never expire."""
        try:
            return bool(await self.client.set(key, value))
        except RedisError as e:
            logger.exception(f"Failed to set key {key}")
            mssg = f"Cache set operation failed for key {key}: {e}"
            raise RedisConnectionError(mssg) from e

    async def flush_all(self) -> bool:
        """Wipe every key on the server (FLUSHALL)."""
        try:
            return bool(await self.client.flushall())
        except RedisError as e:
            logger.exception("Failed to flush Redis")
            mssg = f"Cache flush_all operation failed: {e}"
            raise RedisConnectionError(mssg) from e

    async def ping(self) -> bool:
        """Ping Redis server."""
        try:
            ping_result = self.client.ping()
            if isinstance(ping_result, Awaitable):
                return bool(await ping_result)
        except RedisError as e:
            logger.exception("Failed to ping Redis")
            mssg = f"Cache ping operation failed: {e}"
            raise RedisConnectionError(mssg) from e
        return bool(ping_result)

    async def info(self) -> dict[str, Any]:
        """Get a summary of Redis server info."""
        try:
            info = await self.client.info()
        except RedisError as e:
            logger.exception("Failed to get server info")
            mssg = f"Cache info operation failed: {e}"
            raise RedisConnectionError(mssg) from e
        if not isinstance(info, dict):
            return {}
        return {
            "server": "Redis",
            "redis_version": info.get("redis_version"),
            "connected_clients": info.get("connected_clients"),
            "used_memory_human": info.get("used_memory_human"),
            "uptime_seconds": info.get("uptime_in_seconds"),
        }
