"""Data models: retry policy, attempt records, metrics and enums."""

from capture_flow.models.enums import (
    AttemptOutcome,
    CacheWriteStatus,
    Classification,
    RunState,
)
from capture_flow.models.policy import RetryPolicy
from capture_flow.models.records import AttemptRecord, RunMetrics

__all__ = [
    "AttemptOutcome",
    "AttemptRecord",
    "CacheWriteStatus",
    "Classification",
    "RetryPolicy",
    "RunMetrics",
    "RunState",
]
