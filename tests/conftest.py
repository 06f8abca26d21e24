"""Shared test fixtures and configuration for all tests.

This conftest.py provides common fixtures used across unit and integration tests.
"""

import pytest

from capture_flow.config import Settings
from capture_flow.providers.base import CaptureResult

# Smallest valid PNG signature + IHDR chunk start; content is never decoded
PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR" + b"\x00" * 16


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with fast, deterministic defaults.

    Override specific settings in individual tests as needed:
        def test_something(test_settings):
            test_settings.OPERATION_TIMEOUT_MS = 50
    """
    return Settings(
        # === Application ===
        APP_NAME="Capture Flow (Test)",
        DEBUG=True,
        LOG_LEVEL="DEBUG",
        ENVIRONMENT="development",

        # === Retry ===
        RETRY_MAX_ATTEMPTS=3,
        RETRY_INITIAL_DELAY_MS=500.0,
        RETRY_MAX_DELAY_MS=5000.0,
        RETRY_BACKOFF_MULTIPLIER=2.0,
        RETRY_JITTER_FRACTION=0.0,  # deterministic delays unless a test opts in

        # === Timeouts ===
        OPERATION_TIMEOUT_MS=1000.0,
        CANCEL_ON_TIMEOUT=True,

        # === Cache ===
        CACHE_ENABLED=False,
        CACHE_NAMESPACE="test-cache",
        CACHE_KEY_PREFIX="/capture",

        # === Redis ===
        REDIS_URL="redis://localhost:6379/0",
        REDIS_MAX_CONNECTIONS=5,

        # === Monitoring ===
        PROMETHEUS_ENABLED=False,  # Disable metrics in tests unless explicitly needed
    )


@pytest.fixture
def sample_artifact() -> bytes:
    """Fake PNG artifact bytes."""
    return PNG_BYTES


@pytest.fixture
def create_capture_result():
    """Factory fixture to create CaptureResult with custom values.

    Usage:
        def test_something(create_capture_result):
            result = create_capture_result(artifact=None)
    """
    def _create(
        artifact: bytes | None = PNG_BYTES,
        steps: list[str] | None = None,
        content_type: str = "image/png",
    ) -> CaptureResult:
        if steps is None:
            steps = [
                "Step 1: Request screen capture permission",
                "Step 2: Grab frame from video track",
            ]
        return CaptureResult(artifact=artifact, steps=list(steps), content_type=content_type)

    return _create
