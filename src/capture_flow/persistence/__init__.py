"""
Artifact cache persistence.

- redis_client.py: Redis connection pooling (asyncio, binary-safe)
- cache_store.py: Redis-backed and in-memory cache stores
- cache_adapter.py: best-effort adapter used by the orchestrator

Storage Strategy:
- Artifacts stored as Redis hashes (body + JSON headers) with TTL (default 24h)
- Namespace prefix per cache ("assistant-cache" by default)
"""

from capture_flow.persistence.cache_adapter import CacheSideEffectAdapter
from capture_flow.persistence.cache_store import (
    CachedArtifact,
    MemoryCacheStore,
    RedisCacheStore,
)
from capture_flow.persistence.redis_client import RedisClient, get_async_redis_client

__all__ = [
    "CacheSideEffectAdapter",
    "CachedArtifact",
    "MemoryCacheStore",
    "RedisCacheStore",
    "RedisClient",
    "get_async_redis_client",
]
