"""
Collaborator interfaces for the orchestrator.

The orchestrator only sequences these calls; it never interprets what they do.
Every method is asynchronous and may fail. Implementations should raise
``capture_flow.retry.exceptions`` types where they can so the classifier can
skip string matching.
"""

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Protocol


@dataclass
class CaptureResult:
    """
    Output of a capture.

    Attributes:
        artifact: Captured bytes, or None when the provider produced nothing
        steps: Human-readable trace of what the provider did
        content_type: MIME type of the artifact
    """

    artifact: Optional[bytes]
    steps: list[str] = field(default_factory=list)
    content_type: str = "image/png"


class CaptureProvider(Protocol):
    """Produces a binary artifact plus a trace of the steps it took."""

    async def capture(self) -> CaptureResult:
        ...


class StreamProvider(Protocol):
    """
    Acquires a live media handle and duplicates it.

    ``clone`` may attach interaction listeners to the duplicate as a side
    effect; the orchestrator treats the returned handle as opaque.
    """

    async def acquire(self) -> Any:
        ...

    async def clone(self, stream: Any) -> Any:
        ...


class CacheHandle(Protocol):
    """An opened cache namespace."""

    async def put(self, key: str, payload: bytes, headers: Mapping[str, str]) -> None:
        ...


class CacheStore(Protocol):
    """Key -> response store, opened per namespace."""

    async def open(self, namespace: str) -> CacheHandle:
        ...
