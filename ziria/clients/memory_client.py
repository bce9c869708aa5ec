"""In-memory cache client for fallback when Redis is not available."""

from asyncio import Lock
from logging import getLogger
from typing import Any

from ziria.configs import file_logger

logger = file_logger(getLogger(__name__))


class MemoryClient:
    """
    An asynchronous in-memory cache client that mimics RedisClient.

    Like the Redis store it replaces, entries never expire and are never
    evicted; ``flush_all`` is the only way to drop them. Meant for local
    development and tests rather than long-running deployments.
    """

    def __init__(self) -> None:
        """Initialize an empty store."""
        self._cache: dict[str, bytes] = {}
        self._current_memory: int = 0
        self.is_connected: bool = True
        self._lock = Lock()

    async def get(self, key: str) -> bytes | None:
        """Get a value from the cache."""
        async with self._lock:
            return self._cache.get(key)

    async def set(self, key: str, value: bytes) -> bool:
        """Set a value in the cache."""
        async with self._lock:
            if (old := self._cache.get(key)) is not None:
                self._current_memory -= len(old)
            self._cache[key] = bytes(value)
            self._current_memory += len(value)
            return True

    async def flush_all(self) -> bool:
        """Clear the entire cache."""
        async with self._lock:
            self._cache.clear()
            self._current_memory = 0
            return True

    async def ping(self) -> bool:
        """Check if the cache is alive."""
        return self.is_connected

    async def info(self) -> dict[str, Any]:
        """Get information about the in-memory cache."""
        async with self._lock:
            return {
                "server": "In-Memory Cache",
                "connected_clients": 1,
                "used_memory_bytes": self._current_memory,
                "used_memory_human": f"{self._current_memory / 1024 / 1024:.2f}MB",
                "total_keys": len(self._cache),
            }

    async def close(self) -> None:
        """Mark the client as disconnected."""
        async with self._lock:
            self.is_connected = False
            logger.info("In-memory cache closed.")
