"""
Best-effort artifact caching.

The adapter is the only caller of the cache store. It never raises: a missing
store or a failing write is logged and reported as a status, and the only
observable consequence is that nothing is cached under the key.
"""

from datetime import datetime, timezone
from typing import Optional

import structlog

from capture_flow.models.enums import CacheWriteStatus
from capture_flow.providers.base import CacheHandle, CacheStore

logger = structlog.get_logger(__name__)


class CacheSideEffectAdapter:
    """
    Wraps a CacheStore so that caching can never fail a workflow.

    The namespace handle is opened lazily on first write and reused; a failed
    open is retried on the next write.
    """

    def __init__(
        self,
        store: Optional[CacheStore],
        namespace: str = "assistant-cache",
        cache_control: str = "public, max-age=86400",
    ):
        self.cache_store = store
        self.namespace = namespace
        self.cache_control = cache_control
        self._handle: Optional[CacheHandle] = None

    @property
    def available(self) -> bool:
        return self.cache_store is not None

    def build_headers(self, content_type: str) -> dict[str, str]:
        return {
            "Content-Type": content_type,
            "X-Cached-At": datetime.now(timezone.utc).isoformat(),
            "Cache-Control": self.cache_control,
        }

    async def store(
        self, key: str, artifact: bytes, content_type: str = "image/png"
    ) -> CacheWriteStatus:
        """
        Persist an artifact under ``key``.

        Returns:
            STORED on success, UNAVAILABLE without a store, FAILED on any error
        """
        if self.cache_store is None:
            logger.warning("Cache store not available - skipping cache", key=key)
            return CacheWriteStatus.UNAVAILABLE

        try:
            if self._handle is None:
                self._handle = await self.cache_store.open(self.namespace)
            await self._handle.put(key, artifact, self.build_headers(content_type))
        except Exception as e:
            logger.error(
                "Cache error (non-fatal)",
                key=key,
                namespace=self.namespace,
                error=str(e),
                error_type=type(e).__name__,
                exc_info=True,
            )
            return CacheWriteStatus.FAILED

        logger.info("Cached artifact", key=key, namespace=self.namespace, size_bytes=len(artifact))
        return CacheWriteStatus.STORED
