# ziria/managers/cache_store.py
"""Cache store for compact image payloads, backed by Redis or memory."""

from asyncio import Lock as AsyncLock
from collections import OrderedDict
from logging import DEBUG, getLogger
from threading import Lock as ThreadLock
from typing import Any

from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError

from ziria.clients.memory_client import MemoryClient
from ziria.clients.protocols import CacheClientProtocol
from ziria.clients.redis_client import RedisClient
from ziria.configs import CacheConfig, file_logger, settings
from ziria.data import CacheStatistics
from ziria.errors import BASE_EXCEPTION, CacheStoreError

logger = file_logger(getLogger(__name__))

STORE_EXCEPTIONS = (RedisError, *BASE_EXCEPTION)


class CacheStore:
    """
    Async get/set/flush over a shared key-value backend.

    Features:
        - Values are opaque compact payloads and never expire
        - Namespaced keys (``<prefix>:<namespace>:<key>``)
        - Automatic fallback to in-memory storage when Redis is unreachable
        - Per-key locks for request coalescing, LRU-bounded
        - Statistics tracking
    """

    def __init__(
        self,
        redis_client: RedisClient | None = None,
        memory_client: MemoryClient | None = None,
    ) -> None:
        """Initialize cache store."""
        self.redis_client = redis_client or RedisClient()
        self.memory_client = memory_client or MemoryClient()
        self._client: CacheClientProtocol = self.memory_client
        self.is_redis_available = False
        self.cache_config = CacheConfig()
        self.statistics = CacheStatistics()

        # Locks for request coalescing, OrderedDict for LRU eviction
        self._locks: OrderedDict[str, AsyncLock] = OrderedDict()
        self._locks_lock = ThreadLock()

    @property
    def backend(self) -> str:
        return "redis" if self.is_redis_available else "in-memory"

    async def initialize(self) -> None:
        """
        Connect to Redis when enabled.

        If the Redis connection fails, it falls back to an in-memory cache.
        """
        if not settings.REDIS_ENABLED:
            logger.info("Redis disabled. Using in-memory cache.")
            self._client = self.memory_client
            self.is_redis_available = False
            return
        try:
            await self.redis_client.connect()
            self._client = self.redis_client
            self.is_redis_available = True
        except RedisConnectionError as e:
            logger.warning(f"Redis connection failed: {e}. Falling back to in-memory cache.")
            self._client = self.memory_client
            self.is_redis_available = False
        logger.info("Cache store initialized with %s backend.", self.backend)

    async def shutdown(self) -> None:
        """Close the backend connection."""
        if self.is_redis_available:
            await self.redis_client.disconnect()
        await self.memory_client.close()
        logger.info("Cache store shutdown successfully.")

    def build_key(self, key: str, namespace: str | None = None) -> str:
        """Build full cache key with prefix and namespace."""
        prefix = self.cache_config.key_prefix
        return f"{prefix}:{namespace}:{key}" if namespace else f"{prefix}:{key}"

    async def get(self, key: str, namespace: str | None = None) -> bytes | None:
        """
        Get a payload; a missing key is a miss, not an error.

        Raises:
            CacheStoreError: If the backend command fails.
        """
        full_key = self.build_key(key, namespace)
        if logger.isEnabledFor(DEBUG):
            logger.debug("Getting from cache: %s", full_key)
        try:
            value = await self._client.get(full_key)
        except STORE_EXCEPTIONS as e:
            self.statistics.record_error()
            mssg = f"Cache get failed for key {full_key}: {e}"
            raise CacheStoreError(mssg) from e

        if value is None:
            self.statistics.record_miss()
            return None

        self.statistics.record_hit(len(value))
        return value

    async def set(self, key: str, value: bytes, namespace: str | None = None) -> bool:
        """
        Store a payload without expiry.

        Raises:
            CacheStoreError: If the backend command fails.
        """
        full_key = self.build_key(key, namespace)
        try:
            success = await self._client.set(full_key, value)
        except STORE_EXCEPTIONS as e:
            self.statistics.record_error()
            mssg = f"Cache set failed for key {full_key}: {e}"
            raise CacheStoreError(mssg) from e
        self.statistics.record_set(len(value))
        return success

    async def flush_all(self) -> bool:
        """
        Wipe the entire store. This is the only eviction there is.

        Raises:
            CacheStoreError: If the backend command fails.
        """
        try:
            result = await self._client.flush_all()
        except STORE_EXCEPTIONS as e:
            logger.exception("Cache flush failed")
            self.statistics.record_error()
            mssg = "Cache flush failed"
            raise CacheStoreError(mssg) from e
        logger.info("Cache flushed (%s backend).", self.backend)
        return result

    def lock_for(self, key: str, namespace: str | None = None) -> AsyncLock:
        """
        Get or create the coalescing lock for a key in a thread-safe manner.

        Uses LRU eviction of idle locks to bound the lock table.
        """
        full_key = self.build_key(key, namespace)
        with self._locks_lock:
            if full_key in self._locks:
                self._locks.move_to_end(full_key)
                return self._locks[full_key]

            self._evict_idle_locks()

            lock = AsyncLock()
            self._locks[full_key] = lock
            return lock

    def _evict_idle_locks(self) -> None:
        """
        Drop least recently used locks until there is room for one more.

        Held locks are never evicted, so a key being built keeps coalescing;
        while every lock is held the table may exceed ``max_locks``.
        """
        excess = len(self._locks) - self.cache_config.max_locks + 1
        if excess <= 0:
            return
        idle = [key for key, lock in self._locks.items() if not lock.locked()]
        for key in idle[:excess]:
            del self._locks[key]

    async def ping(self) -> bool:
        """Ping the cache server."""
        try:
            return await self._client.ping()
        except STORE_EXCEPTIONS:
            logger.exception("Cache ping failed")
            return False

    async def health_check(self) -> dict[str, Any]:
        """
        Perform a health check.

        Returns:
            Dictionary with health status and details.
        """
        result: dict[str, Any] = {
            "backend": self.backend,
            "statistics": self.get_statistics(),
        }
        try:
            result["status"] = "healthy" if await self._client.ping() else "unhealthy"
            result["info"] = await self._client.info()
        except STORE_EXCEPTIONS as e:
            result["status"] = "unhealthy"
            result["error"] = str(e)
        return result

    def get_statistics(self) -> dict[str, int | str]:
        """Get cache statistics."""
        return self.statistics.to_dict()
