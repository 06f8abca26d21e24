"""
Unit tests for the Redis and in-memory cache stores.
"""

import json

import pytest

from capture_flow.persistence.cache_store import (
    CachedArtifact,
    MemoryCacheStore,
    RedisCacheStore,
)

HEADERS = {"Content-Type": "image/png", "Cache-Control": "public, max-age=86400"}


# ============================================================================
# RedisCacheStore
# ============================================================================


@pytest.mark.asyncio
async def test_open_pings_redis(mock_async_redis):
    store = RedisCacheStore(mock_async_redis, ttl_seconds=60)

    handle = await store.open("assistant-cache")

    mock_async_redis.ping.assert_awaited_once()
    assert handle.namespace == "assistant-cache"
    assert handle.ttl_seconds == 60


@pytest.mark.asyncio
async def test_open_propagates_connection_errors(mock_async_redis):
    mock_async_redis.ping.side_effect = ConnectionError("Connection refused")
    store = RedisCacheStore(mock_async_redis)

    with pytest.raises(ConnectionError):
        await store.open("assistant-cache")


@pytest.mark.asyncio
async def test_put_writes_hash_and_ttl(mock_async_redis, sample_artifact):
    handle = await RedisCacheStore(mock_async_redis, ttl_seconds=3600).open("ns")

    await handle.put("/capture-1-1", sample_artifact, HEADERS)

    name, = mock_async_redis.hset.await_args.args
    mapping = mock_async_redis.hset.await_args.kwargs["mapping"]
    assert name == "ns:/capture-1-1"
    assert mapping["body"] == sample_artifact
    assert json.loads(mapping["headers"]) == HEADERS
    mock_async_redis.expire.assert_awaited_once_with("ns:/capture-1-1", 3600)


@pytest.mark.asyncio
async def test_put_without_ttl_skips_expire(mock_async_redis, sample_artifact):
    handle = await RedisCacheStore(mock_async_redis, ttl_seconds=0).open("ns")

    await handle.put("key", sample_artifact, HEADERS)

    mock_async_redis.expire.assert_not_awaited()


@pytest.mark.asyncio
async def test_get_decodes_stored_hash(mock_async_redis, sample_artifact):
    mock_async_redis.hgetall.return_value = {
        b"body": sample_artifact,
        b"headers": json.dumps(HEADERS).encode(),
    }
    handle = await RedisCacheStore(mock_async_redis).open("ns")

    cached = await handle.get("key")

    mock_async_redis.hgetall.assert_awaited_once_with("ns:key")
    assert cached == CachedArtifact(payload=sample_artifact, headers=HEADERS)


@pytest.mark.asyncio
async def test_get_missing_key_returns_none(mock_async_redis):
    handle = await RedisCacheStore(mock_async_redis).open("ns")

    assert await handle.get("missing") is None


@pytest.mark.asyncio
async def test_delete(mock_async_redis):
    handle = await RedisCacheStore(mock_async_redis).open("ns")

    assert await handle.delete("key") is True
    mock_async_redis.delete.assert_awaited_once_with("ns:key")

    mock_async_redis.delete.return_value = 0
    assert await handle.delete("key") is False


# ============================================================================
# MemoryCacheStore
# ============================================================================


@pytest.mark.asyncio
async def test_memory_store_round_trip(sample_artifact):
    store = MemoryCacheStore()
    handle = await store.open("ns")

    await handle.put("key", sample_artifact, HEADERS)
    cached = await handle.get("key")

    assert cached.payload == sample_artifact
    assert cached.headers == HEADERS
    assert handle.keys() == ["key"]


@pytest.mark.asyncio
async def test_memory_namespaces_persist_and_are_isolated(sample_artifact):
    store = MemoryCacheStore()
    first = await store.open("a")
    await first.put("key", sample_artifact, HEADERS)

    reopened = await store.open("a")
    other = await store.open("b")

    assert await reopened.get("key") is not None
    assert await other.get("key") is None


@pytest.mark.asyncio
async def test_memory_delete(sample_artifact):
    handle = await MemoryCacheStore().open("ns")
    await handle.put("key", sample_artifact, HEADERS)

    assert await handle.delete("key") is True
    assert await handle.delete("key") is False
    assert handle.keys() == []
