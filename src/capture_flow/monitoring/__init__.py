"""Monitoring and metrics instrumentation for Capture Flow.

Exports custom Prometheus metrics for operational monitoring and alerting.
"""

from capture_flow.monitoring.metrics import (
    attempt_duration_seconds,
    attempts_total,
    cache_writes_total,
    operation_timeouts_total,
    retry_delay_seconds,
    runs_total,
)

__all__ = [
    "attempts_total",
    "attempt_duration_seconds",
    "runs_total",
    "retry_delay_seconds",
    "operation_timeouts_total",
    "cache_writes_total",
]
