"""
Resilient execution core.

Drives the capture workflow with bounded retries:

1. **Backoff**: exponential delay with symmetric jitter, capped at max_delay_ms
2. **Timeout guard**: per-step deadline with cancellation of the raced step
3. **Classification**: typed errors first, retryable substring markers as fallback
4. **History**: append-only attempt ledger with derived metrics

Main Components:
    - FlowOrchestrator: attempt state machine (the only public entry point)
    - ExecutionHistory: ledger of AttemptRecords
    - TypedErrorClassifier / SubstringErrorClassifier: retryable vs. fatal
    - compute_delay_ms: backoff calculator
    - with_timeout: timeout guard

Usage:
    >>> from capture_flow.retry import FlowOrchestrator
    >>> orchestrator = FlowOrchestrator(capture_provider, stream_provider, settings)
    >>> ok = await orchestrator.run_flow()
"""

from capture_flow.retry.backoff import base_delay_ms, compute_delay_ms, delay_schedule_ms
from capture_flow.retry.classifier import (
    DEFAULT_RETRYABLE_MARKERS,
    ErrorClassifier,
    SubstringErrorClassifier,
    TypedErrorClassifier,
    describe_error,
)
from capture_flow.retry.engine import FlowOrchestrator
from capture_flow.retry.exceptions import (
    CaptureConnectionError,
    CaptureError,
    CaptureFlowError,
    CaptureHTTPError,
    CaptureTimeoutError,
    EmptyArtifactError,
    OperationTimeoutError,
    RunCancelledError,
    StreamUnavailableError,
)
from capture_flow.retry.history import ExecutionHistory
from capture_flow.retry.timeout import with_timeout

__all__ = [
    "DEFAULT_RETRYABLE_MARKERS",
    "CaptureConnectionError",
    "CaptureError",
    "CaptureFlowError",
    "CaptureHTTPError",
    "CaptureTimeoutError",
    "EmptyArtifactError",
    "ErrorClassifier",
    "ExecutionHistory",
    "FlowOrchestrator",
    "OperationTimeoutError",
    "RunCancelledError",
    "StreamUnavailableError",
    "SubstringErrorClassifier",
    "TypedErrorClassifier",
    "base_delay_ms",
    "compute_delay_ms",
    "delay_schedule_ms",
    "describe_error",
    "with_timeout",
]
