"""
Failure taxonomy for the orchestrator and its collaborators.

Every exception carries a ``retryable`` class attribute that the typed
classifier reads directly:
- True: retried with backoff until the attempt budget is exhausted
- False: aborts the run immediately
- None: undecided, the substring marker policy decides

Cache failures have no exception here on purpose: they are absorbed inside
the cache adapter and never reach the orchestrator.
"""

from typing import Any, Optional


class CaptureFlowError(Exception):
    """
    Base exception for all capture flow errors.

    Attributes:
        message: Human-readable error description
        details: Structured error data for logging/metrics
    """

    retryable: Optional[bool] = None

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class OperationTimeoutError(CaptureFlowError):
    """
    Raised by the timeout guard when a guarded step exceeds its deadline.

    Attributes:
        operation: Name of the guarded step (e.g. "capture")
        timeout_ms: Configured deadline that elapsed
    """

    retryable = True

    def __init__(self, operation: str, timeout_ms: float):
        self.operation = operation
        self.timeout_ms = timeout_ms
        super().__init__(
            f"{operation} timeout after {timeout_ms:.0f}ms",
            details={"operation": operation, "timeout_ms": timeout_ms},
        )


class EmptyArtifactError(CaptureFlowError):
    """Capture completed without throwing but produced no artifact."""

    retryable = True

    def __init__(self, message: str = "capture failed - empty artifact"):
        super().__init__(message)


class StreamUnavailableError(CaptureFlowError):
    """Stream acquisition returned no handle."""

    def __init__(self, message: str = "Failed to acquire media stream"):
        super().__init__(message)


class RunCancelledError(CaptureFlowError):
    """The caller's cancellation signal fired while a step was in flight."""

    retryable = False

    def __init__(self, operation: str | None = None):
        self.operation = operation
        message = f"run cancelled during {operation}" if operation else "run cancelled"
        super().__init__(message, details={"operation": operation})


class CaptureError(CaptureFlowError):
    """Base exception for capture provider failures."""


class CaptureConnectionError(CaptureError):
    """
    Unable to reach the capture backend.

    Includes DNS failures, refused connections and dropped sockets.
    """

    retryable = True


class CaptureTimeoutError(CaptureError):
    """The capture backend did not answer within the HTTP client timeout."""

    retryable = True


class CaptureHTTPError(CaptureError):
    """
    The capture backend answered with an error status.

    Request timeouts, rate limiting and server-side errors are retryable;
    any other status (bad request, permission denied, not found) is fatal.
    """

    RETRYABLE_CLIENT_STATUS_CODES = frozenset({408, 425, 429})

    def __init__(self, message: str, status_code: int, details: dict[str, Any] | None = None):
        self.status_code = status_code
        super().__init__(message, details={"status_code": status_code, **(details or {})})

    @property
    def retryable(self) -> bool:  # type: ignore[override]
        return self.status_code >= 500 or self.status_code in self.RETRYABLE_CLIENT_STATUS_CODES
