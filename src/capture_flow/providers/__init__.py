"""
Collaborators driven by the orchestrator.

- base.py: protocols (capture, stream, cache store) and CaptureResult
- http_capture.py: capture provider backed by an HTTP endpoint (httpx)
"""

from capture_flow.providers.base import (
    CacheHandle,
    CacheStore,
    CaptureProvider,
    CaptureResult,
    StreamProvider,
)
from capture_flow.providers.http_capture import HttpCaptureProvider

__all__ = [
    "CacheHandle",
    "CacheStore",
    "CaptureProvider",
    "CaptureResult",
    "HttpCaptureProvider",
    "StreamProvider",
]
