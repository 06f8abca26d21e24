"""
Wiring helpers for building an orchestrator from settings.

Every call builds fresh objects: callers own the orchestrator they create
and pass it where it is needed. Only the Redis connection pool is shared
process-wide.
"""

from typing import Optional

import structlog

from capture_flow.config import Settings, settings as default_settings
from capture_flow.logging_config import configure_logging_from_settings
from capture_flow.persistence.cache_adapter import CacheSideEffectAdapter
from capture_flow.persistence.cache_store import RedisCacheStore
from capture_flow.persistence.redis_client import RedisClient
from capture_flow.providers.base import CacheStore, CaptureProvider, StreamProvider
from capture_flow.providers.http_capture import HttpCaptureProvider
from capture_flow.retry.classifier import SubstringErrorClassifier, TypedErrorClassifier
from capture_flow.retry.engine import FlowOrchestrator
from capture_flow.retry.history import ExecutionHistory

logger = structlog.get_logger(__name__)


def create_cache_store(settings: Settings) -> Optional[CacheStore]:
    """
    Build the Redis-backed cache store, or None when caching is disabled.
    """
    if not settings.CACHE_ENABLED:
        logger.info("Artifact cache disabled")
        return None
    redis = RedisClient.get_async_client(settings)
    return RedisCacheStore(redis, ttl_seconds=settings.CACHE_TTL_SECONDS)


def create_capture_provider(settings: Settings) -> HttpCaptureProvider:
    return HttpCaptureProvider(
        base_url=settings.CAPTURE_BASE_URL,
        capture_path=settings.CAPTURE_PATH,
        timeout=settings.CAPTURE_TIMEOUT,
    )


def create_orchestrator(
    stream_provider: StreamProvider,
    capture_provider: Optional[CaptureProvider] = None,
    settings: Optional[Settings] = None,
    cache_store: Optional[CacheStore] = None,
    history: Optional[ExecutionHistory] = None,
) -> FlowOrchestrator:
    """
    Build a fully wired orchestrator.

    Args:
        stream_provider: Stream acquire/clone collaborator (no default exists)
        capture_provider: Capture collaborator (default: HTTP provider from settings)
        settings: Application settings (default: global settings)
        cache_store: Cache store (default: Redis when CACHE_ENABLED)
        history: Ledger to share between orchestrators (default: fresh)

    Returns:
        FlowOrchestrator instance
    """
    settings = settings or default_settings
    if capture_provider is None:
        capture_provider = create_capture_provider(settings)
    if cache_store is None:
        cache_store = create_cache_store(settings)

    cache_adapter = CacheSideEffectAdapter(
        cache_store,
        namespace=settings.CACHE_NAMESPACE,
        cache_control=settings.CACHE_CONTROL,
    )
    classifier = TypedErrorClassifier(
        fallback=SubstringErrorClassifier(settings.RETRYABLE_ERROR_MARKERS)
    )

    return FlowOrchestrator(
        capture_provider=capture_provider,
        stream_provider=stream_provider,
        settings=settings,
        cache_adapter=cache_adapter,
        classifier=classifier,
        history=history,
    )


def bootstrap(settings: Optional[Settings] = None) -> Settings:
    """
    Process startup: configure logging from settings and log the runtime setup.

    Call once, before building orchestrators.

    Returns:
        The settings in effect
    """
    settings = settings or default_settings
    configure_logging_from_settings(settings)
    logger.info(
        "Application startup",
        app_name=settings.APP_NAME,
        environment=settings.ENVIRONMENT,
        capture_base_url=settings.CAPTURE_BASE_URL,
        cache_enabled=settings.CACHE_ENABLED,
        metrics_enabled=settings.PROMETHEUS_ENABLED,
    )
    return settings
