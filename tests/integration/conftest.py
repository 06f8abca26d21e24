"""Integration test fixtures (service checks and in-process collaborators).

Provides fixtures for checking if external services are available.
Redis-backed tests are skipped if Redis is not running.
"""

import pytest
import pytest_asyncio
from redis.asyncio import Redis as AsyncRedis

from capture_flow.providers.base import CaptureResult

TEST_REDIS_URL = "redis://localhost:6379/15"  # test database


class ScriptedCaptureProvider:
    """Capture provider that replays a script of outcomes.

    Each entry is either bytes (captured artifact), None (empty capture) or an
    exception instance to raise. The last entry repeats once the script runs out.
    """

    def __init__(self, script):
        self.script = list(script)
        self.calls = 0

    async def capture(self) -> CaptureResult:
        outcome = self.script[min(self.calls, len(self.script) - 1)]
        self.calls += 1
        if isinstance(outcome, Exception):
            raise outcome
        return CaptureResult(
            artifact=outcome,
            steps=[
                "Step 1: Request screen capture permission",
                "Step 2: Grab frame from video track",
            ],
        )


class FakeStreamProvider:
    """Stream provider returning string handles and remembering clones."""

    def __init__(self):
        self.clones: list[str] = []

    async def acquire(self):
        return "display-stream"

    async def clone(self, stream):
        cloned = f"{stream}-clone-{len(self.clones) + 1}"
        self.clones.append(cloned)
        return cloned


@pytest.fixture
def scripted_capture():
    """Factory for ScriptedCaptureProvider."""
    return ScriptedCaptureProvider


@pytest.fixture
def stream_provider():
    return FakeStreamProvider()


@pytest_asyncio.fixture
async def real_async_redis_client():
    """Real AsyncRedis client instance for integration tests.

    Skips the test if Redis is not reachable. Uses database 15 (test database),
    flushed before and after each test.
    """
    client = AsyncRedis.from_url(TEST_REDIS_URL)
    try:
        await client.ping()
    except Exception as e:
        await client.aclose()
        pytest.skip(f"Redis not available: {e}")

    await client.flushdb()

    yield client

    await client.flushdb()
    await client.aclose()


@pytest.fixture
def integration_settings(test_settings):
    """Settings for integration tests with real services."""
    test_settings.REDIS_URL = TEST_REDIS_URL
    test_settings.CACHE_ENABLED = True
    test_settings.PROMETHEUS_ENABLED = False

    return test_settings
