"""
Cache store implementations.

Storage Strategy (Redis):
- One hash per cached artifact, key = "{namespace}:{cache_key}"
- Fields: "body" (raw bytes), "headers" (JSON object)
- TTL: CACHE_TTL_SECONDS, applied on every write

MemoryCacheStore keeps the same shape in a process-local dict; it is meant
for local runs and tests.
"""

import json
from dataclasses import dataclass, field
from typing import Mapping, Optional

import structlog
from redis.asyncio import Redis as AsyncRedis

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CachedArtifact:
    """A cached payload and the headers it was stored with."""

    payload: bytes
    headers: dict[str, str] = field(default_factory=dict)


class RedisCacheHandle:
    """Cache namespace backed by Redis hashes."""

    BODY_FIELD = "body"
    HEADERS_FIELD = "headers"

    def __init__(self, redis: AsyncRedis, namespace: str, ttl_seconds: int):
        self.redis = redis
        self.namespace = namespace
        self.ttl_seconds = ttl_seconds

    def _name(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    async def put(self, key: str, payload: bytes, headers: Mapping[str, str]) -> None:
        """
        Store payload and headers under ``key``, replacing any previous entry.

        Raises:
            redis.exceptions.RedisError: On connection or command failure
        """
        name = self._name(key)
        await self.redis.hset(
            name,
            mapping={
                self.BODY_FIELD: payload,
                self.HEADERS_FIELD: json.dumps(dict(headers)),
            },
        )
        if self.ttl_seconds > 0:
            await self.redis.expire(name, self.ttl_seconds)

        logger.debug("Cached artifact in Redis", key=name, size_bytes=len(payload), ttl=self.ttl_seconds)

    async def get(self, key: str) -> Optional[CachedArtifact]:
        """Read back a cached artifact, or None if absent or expired."""
        raw = await self.redis.hgetall(self._name(key))
        if not raw:
            return None

        # Undecoded client: field names come back as bytes
        body = raw.get(self.BODY_FIELD.encode())
        headers_raw = raw.get(self.HEADERS_FIELD.encode())
        if body is None:
            return None

        headers = json.loads(headers_raw) if headers_raw else {}
        return CachedArtifact(payload=body, headers=headers)

    async def delete(self, key: str) -> bool:
        deleted = await self.redis.delete(self._name(key))
        return bool(deleted)


class RedisCacheStore:
    """
    Cache store backed by Redis.

    ``open`` pings the server so an unreachable Redis surfaces at open time
    instead of on the first write.
    """

    def __init__(self, redis: AsyncRedis, ttl_seconds: int = 86400):
        self.redis = redis
        self.ttl_seconds = ttl_seconds

    async def open(self, namespace: str) -> RedisCacheHandle:
        await self.redis.ping()
        logger.debug("Opened Redis cache namespace", namespace=namespace)
        return RedisCacheHandle(self.redis, namespace, self.ttl_seconds)


class MemoryCacheHandle:
    """Cache namespace backed by a dict."""

    def __init__(self, namespace: str, entries: dict[str, CachedArtifact]):
        self.namespace = namespace
        self._entries = entries

    async def put(self, key: str, payload: bytes, headers: Mapping[str, str]) -> None:
        self._entries[key] = CachedArtifact(payload=bytes(payload), headers=dict(headers))

    async def get(self, key: str) -> Optional[CachedArtifact]:
        return self._entries.get(key)

    async def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def keys(self) -> list[str]:
        return list(self._entries)


class MemoryCacheStore:
    """Process-local cache store; namespaces persist for the store's lifetime."""

    def __init__(self) -> None:
        self._namespaces: dict[str, dict[str, CachedArtifact]] = {}

    async def open(self, namespace: str) -> MemoryCacheHandle:
        entries = self._namespaces.setdefault(namespace, {})
        return MemoryCacheHandle(namespace, entries)
