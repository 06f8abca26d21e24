"""Custom Prometheus metrics for Capture Flow.

Collectors live in the default registry; expose them with
``prometheus_client.start_http_server`` or any existing /metrics endpoint.
Alert rules should be configured for:
- flow_runs_total (rising exhausted / fatally_failed share)
- flow_operation_timeouts_total (capture or stream backends hanging)
- flow_cache_writes_total (cache backend degraded)
"""

from prometheus_client import Counter, Histogram

# === Attempt Metrics ===

attempts_total = Counter(
    "flow_attempts_total",
    "Total orchestrator attempts by outcome",
    ["outcome"],
)
"""
Attempts counter by outcome.

Labels:
- outcome: success, retryable_failure, fatal_failure

Alert thresholds:
- WARN: retryable_failure > 20% of attempts
- CRITICAL: fatal_failure > 5% of attempts
"""

attempt_duration_seconds = Histogram(
    "flow_attempt_duration_seconds",
    "Wall time of a single attempt in seconds",
    ["outcome"],
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0],
)
"""
Attempt duration histogram.

Buckets span quick captures (100ms) up to the default operation timeout (30s)
and beyond for multi-step attempts.
"""

# === Run Metrics ===

runs_total = Counter(
    "flow_runs_total",
    "Total orchestrator runs by terminal state",
    ["state"],
)
"""
Runs counter by terminal state.

Labels:
- state: succeeded, exhausted, fatally_failed, cancelled
"""

retry_delay_seconds = Histogram(
    "flow_retry_delay_seconds",
    "Backoff delay applied before a retry, in seconds",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0],
)

# === Timeout Metrics ===

operation_timeouts_total = Counter(
    "flow_operation_timeouts_total",
    "Guarded steps that exceeded their deadline",
    ["operation"],
)
"""
Timeout counter by guarded step.

Labels:
- operation: capture, acquire_stream, clone_stream
"""

# === Cache Metrics ===

cache_writes_total = Counter(
    "flow_cache_writes_total",
    "Artifact cache writes by status",
    ["status"],
)
"""
Cache write counter by status.

Labels:
- status: stored, unavailable (no store configured), failed (absorbed error)

A rising failed share never fails runs but means cached artifacts are missing.
"""
