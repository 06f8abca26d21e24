"""
Unit tests for orchestrator wiring.
"""

from unittest.mock import patch

import pytest

from capture_flow.factory import create_cache_store, create_capture_provider, create_orchestrator
from capture_flow.persistence.cache_store import MemoryCacheStore, RedisCacheStore
from capture_flow.providers.http_capture import HttpCaptureProvider
from capture_flow.retry.classifier import TypedErrorClassifier
from capture_flow.retry.history import ExecutionHistory


def test_cache_store_disabled(test_settings):
    test_settings.CACHE_ENABLED = False

    assert create_cache_store(test_settings) is None


def test_cache_store_uses_redis_pool(test_settings, mock_async_redis):
    test_settings.CACHE_ENABLED = True
    test_settings.CACHE_TTL_SECONDS = 120

    with patch(
        "capture_flow.factory.RedisClient.get_async_client", return_value=mock_async_redis
    ) as mock_get:
        store = create_cache_store(test_settings)

    mock_get.assert_called_once_with(test_settings)
    assert isinstance(store, RedisCacheStore)
    assert store.redis is mock_async_redis
    assert store.ttl_seconds == 120


def test_capture_provider_from_settings(test_settings):
    test_settings.CAPTURE_BASE_URL = "http://capture.test:9000/"
    test_settings.CAPTURE_PATH = "/snap"

    provider = create_capture_provider(test_settings)

    assert isinstance(provider, HttpCaptureProvider)
    assert provider.base_url == "http://capture.test:9000"
    assert provider.capture_path == "/snap"


def test_create_orchestrator_wires_collaborators(
    test_settings, mock_capture_provider, mock_stream_provider
):
    store = MemoryCacheStore()
    history = ExecutionHistory()

    orchestrator = create_orchestrator(
        mock_stream_provider,
        capture_provider=mock_capture_provider,
        settings=test_settings,
        cache_store=store,
        history=history,
    )

    assert orchestrator.capture_provider is mock_capture_provider
    assert orchestrator.stream_provider is mock_stream_provider
    assert orchestrator.cache_adapter.cache_store is store
    assert orchestrator.cache_adapter.namespace == "test-cache"
    assert orchestrator.history is history
    assert isinstance(orchestrator.classifier, TypedErrorClassifier)
    assert orchestrator.policy.max_attempts == test_settings.RETRY_MAX_ATTEMPTS


def test_create_orchestrator_defaults(test_settings, mock_stream_provider):
    orchestrator = create_orchestrator(mock_stream_provider, settings=test_settings)

    assert isinstance(orchestrator.capture_provider, HttpCaptureProvider)
    assert orchestrator.cache_adapter.available is False


@pytest.mark.asyncio
async def test_orchestrators_do_not_share_history(
    test_settings, mock_capture_provider, mock_stream_provider
):
    first = create_orchestrator(mock_stream_provider, mock_capture_provider, test_settings)
    second = create_orchestrator(mock_stream_provider, mock_capture_provider, test_settings)

    await first.run_flow()

    assert len(first.get_history()) == 1
    assert second.get_history() == ()
