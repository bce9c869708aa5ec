# tests/cache/test_cache_store.py
"""Tests for the cache store."""

from unittest.mock import AsyncMock, patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from ziria.clients.memory_client import MemoryClient
from ziria.clients.redis_client import RedisClient
from ziria.configs import settings
from ziria.errors import CacheStoreError
from ziria.managers.cache_store import CacheStore


@pytest.mark.asyncio
async def test_cache_store_defaults_to_memory(store: CacheStore) -> None:
    """Test the store starts on the in-memory backend."""
    assert store.backend == "in-memory"
    assert store.is_redis_available is False


@pytest.mark.asyncio
async def test_cache_set_and_get(store: CacheStore) -> None:
    """Test cache set and get operations."""
    assert await store.set("abc0", b"\x01payload", "avatar") is True
    assert await store.get("abc0", "avatar") == b"\x01payload"


@pytest.mark.asyncio
async def test_missing_key_is_a_miss(store: CacheStore) -> None:
    """Test a missing key returns None rather than raising."""
    assert await store.get("nothing", "avatar") is None
    assert store.statistics.misses == 1


@pytest.mark.asyncio
async def test_cache_with_namespace(store: CacheStore, memory_client: MemoryClient) -> None:
    """Test namespaces keep avatar and skin entries apart."""
    await store.set("abc0", b"avatar", "avatar")
    await store.set("abc0", b"skin", "skin")

    assert await store.get("abc0", "avatar") == b"avatar"
    assert await store.get("abc0", "skin") == b"skin"
    assert await memory_client.get("ziria:avatar:abc0") == b"avatar"


def test_build_key(store: CacheStore) -> None:
    """Test full key layout."""
    assert store.build_key("abc1", "avatar") == "ziria:avatar:abc1"
    assert store.build_key("abc1") == "ziria:abc1"


@pytest.mark.asyncio
async def test_cache_statistics(store: CacheStore) -> None:
    """Test cache statistics."""
    await store.set("key1", b"12345")
    await store.get("key1")  # Hit
    await store.get("key2")  # Miss

    stats = store.get_statistics()
    assert stats["hits"] == 1
    assert stats["misses"] == 1
    assert stats["sets"] == 1
    assert stats["total_bytes_written"] == 5
    assert stats["total_bytes_read"] == 5
    assert stats["hit_rate"] == "50.00%"


@pytest.mark.asyncio
async def test_flush_all(store: CacheStore) -> None:
    """Test flushing drops every namespace."""
    await store.set("key1", b"a", "avatar")
    await store.set("key2", b"b", "skin")

    assert await store.flush_all() is True
    assert await store.get("key1", "avatar") is None
    assert await store.get("key2", "skin") is None


@pytest.mark.asyncio
async def test_backend_failures_raise_store_error(store: CacheStore, memory_client: MemoryClient) -> None:
    """Test backend errors surface as CacheStoreError."""
    with patch.object(memory_client, "get", AsyncMock(side_effect=ConnectionError("gone"))):
        with pytest.raises(CacheStoreError):
            await store.get("key")
    with patch.object(memory_client, "set", AsyncMock(side_effect=RedisConnectionError("gone"))):
        with pytest.raises(CacheStoreError):
            await store.set("key", b"x")
    with patch.object(memory_client, "flush_all", AsyncMock(side_effect=TimeoutError)):
        with pytest.raises(CacheStoreError):
            await store.flush_all()
    assert store.statistics.errors == 3


def test_lock_for_same_key(store: CacheStore) -> None:
    """Test one key always maps to one lock."""
    assert store.lock_for("abc0", "avatar") is store.lock_for("abc0", "avatar")
    assert store.lock_for("abc0", "avatar") is not store.lock_for("abc0", "skin")


def test_lock_eviction(store: CacheStore) -> None:
    """Test the lock table is LRU-bounded."""
    store.cache_config.max_locks = 2
    first = store.lock_for("a")
    store.lock_for("b")
    store.lock_for("c")
    assert len(store._locks) == 2
    assert store.lock_for("a") is not first


@pytest.mark.asyncio
async def test_lock_eviction_skips_held_locks(store: CacheStore) -> None:
    """Test a lock still held by a build survives eviction."""
    store.cache_config.max_locks = 2
    held = store.lock_for("a")
    await held.acquire()
    try:
        store.lock_for("b")
        store.lock_for("c")
        assert store.lock_for("a") is held
        assert len(store._locks) == 2
    finally:
        held.release()


@pytest.mark.asyncio
async def test_lock_table_grows_while_every_lock_is_held(store: CacheStore) -> None:
    """Test the bound yields rather than evicting a held lock."""
    store.cache_config.max_locks = 1
    held = store.lock_for("a")
    await held.acquire()
    try:
        store.lock_for("b")
        assert len(store._locks) == 2
        assert store.lock_for("a") is held
    finally:
        held.release()


@pytest.mark.asyncio
async def test_cache_ping(store: CacheStore) -> None:
    """Test cache ping."""
    assert await store.ping() is True


@pytest.mark.asyncio
async def test_health_check(store: CacheStore) -> None:
    """Test health check payload."""
    health = await store.health_check()
    assert health["backend"] == "in-memory"
    assert health["status"] == "healthy"
    assert health["info"]["server"] == "In-Memory Cache"
    assert "hits" in health["statistics"]


@pytest.mark.asyncio
async def test_initialize_without_redis(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test Redis is not contacted when disabled."""
    monkeypatch.setattr(settings, "REDIS_ENABLED", False)
    redis_client = RedisClient()
    redis_client.connect = AsyncMock()
    store = CacheStore(redis_client=redis_client)

    await store.initialize()

    redis_client.connect.assert_not_awaited()
    assert store.backend == "in-memory"


@pytest.mark.asyncio
async def test_initialize_falls_back_to_memory(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test an unreachable Redis falls back to the in-memory backend."""
    monkeypatch.setattr(settings, "REDIS_ENABLED", True)
    redis_client = RedisClient()
    redis_client.connect = AsyncMock(side_effect=RedisConnectionError("refused"))
    store = CacheStore(redis_client=redis_client)

    await store.initialize()

    assert store.is_redis_available is False
    assert await store.set("key", b"v") is True


@pytest.mark.asyncio
async def test_initialize_with_redis(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test a reachable Redis becomes the backend."""
    monkeypatch.setattr(settings, "REDIS_ENABLED", True)
    redis_client = RedisClient()
    redis_client.connect = AsyncMock()
    redis_client.disconnect = AsyncMock()
    redis_client.get = AsyncMock(return_value=b"\x02data")
    store = CacheStore(redis_client=redis_client)

    await store.initialize()
    assert store.backend == "redis"
    assert await store.get("abc0", "skin") == b"\x02data"
    redis_client.get.assert_awaited_once_with("ziria:skin:abc0")

    await store.shutdown()
    redis_client.disconnect.assert_awaited_once()
