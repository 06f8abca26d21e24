"""Unit test fixtures (mocks and stubs).

Provides mock collaborators for testing the orchestrator without real
capture backends, media streams or Redis.
"""

import asyncio
from unittest.mock import AsyncMock, Mock, patch

import pytest


@pytest.fixture
def mock_capture_provider(create_capture_result):
    """Capture provider that always produces an artifact."""
    mock = Mock()
    mock.capture = AsyncMock(return_value=create_capture_result())
    return mock


@pytest.fixture
def mock_stream_provider():
    """Stream provider whose acquire/clone always succeed."""
    mock = Mock()
    mock.acquire = AsyncMock(return_value="display-stream")
    mock.clone = AsyncMock(return_value="cloned-stream")
    return mock


@pytest.fixture
def mock_cache_handle():
    """Opened cache namespace that accepts every write."""
    mock = Mock()
    mock.put = AsyncMock(return_value=None)
    return mock


@pytest.fixture
def mock_cache_store(mock_cache_handle):
    """Cache store whose open() returns mock_cache_handle."""
    mock = Mock()
    mock.open = AsyncMock(return_value=mock_cache_handle)
    return mock


@pytest.fixture
def failing_cache_store():
    """Cache store whose writes always raise."""
    handle = Mock()
    handle.put = AsyncMock(side_effect=OSError("disk quota exceeded"))
    mock = Mock()
    mock.open = AsyncMock(return_value=handle)
    return mock


@pytest.fixture
def mock_async_redis():
    """Mock AsyncRedis client for unit tests."""
    mock = AsyncMock()
    mock.ping = AsyncMock(return_value=True)
    mock.hset = AsyncMock(return_value=2)
    mock.expire = AsyncMock(return_value=True)
    mock.hgetall = AsyncMock(return_value={})
    mock.delete = AsyncMock(return_value=1)
    return mock


@pytest.fixture
def no_sleep():
    """Patch asyncio.sleep so retry waits return immediately.

    Yields the AsyncMock so tests can inspect the requested delays (seconds).
    """
    with patch("capture_flow.retry.engine.asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
        yield mock_sleep


@pytest.fixture
def hanging_operation():
    """Factory for coroutines that never finish on their own (only cancellation ends them)."""
    def _create():
        return asyncio.Event().wait()

    return _create


@pytest.fixture
def stalled_cache_store():
    """Cache store whose writes never complete."""
    async def never_returns(*args, **kwargs):
        await asyncio.Event().wait()

    handle = Mock()
    handle.put = AsyncMock(side_effect=never_returns)
    mock = Mock()
    mock.open = AsyncMock(return_value=handle)
    return mock
