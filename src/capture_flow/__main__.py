"""
Command line entry point: ``python -m capture_flow`` (or ``capture-flow``).

Configures logging from settings and checks the collaborators an
orchestrator depends on: the capture backend and, when caching is enabled,
the Redis cache. Exits 0 when every checked service is reachable, 1 otherwise.
"""

import asyncio
import sys
from typing import Optional

import structlog

from capture_flow.config import Settings
from capture_flow.factory import bootstrap, create_cache_store, create_capture_provider
from capture_flow.persistence.redis_client import RedisClient

logger = structlog.get_logger(__name__)


async def check_services(settings: Settings) -> dict[str, bool]:
    """Check each configured collaborator and report whether it is reachable."""
    results: dict[str, bool] = {}

    provider = create_capture_provider(settings)
    try:
        results["capture"] = await provider.health_check()
    finally:
        await provider.close()

    store = create_cache_store(settings)
    if store is not None:
        try:
            await store.open(settings.CACHE_NAMESPACE)
            results["cache"] = True
        except Exception as e:
            logger.error("Cache store unreachable", redis_url=settings.REDIS_URL, error=str(e))
            results["cache"] = False
        finally:
            await RedisClient.close_async_pool()

    return results


def main(settings: Optional[Settings] = None) -> int:
    settings = bootstrap(settings)
    results = asyncio.run(check_services(settings))

    for service, healthy in results.items():
        if healthy:
            logger.info("Service check passed", service=service)
        else:
            logger.warning("Service check failed", service=service)

    return 0 if all(results.values()) else 1


if __name__ == "__main__":
    sys.exit(main())
