"""
Enumerations for Capture Flow data models.

All enums are closed taxonomies - no values outside these sets are permitted.
"""

from enum import Enum


class AttemptOutcome(str, Enum):
    """
    Outcome of a single attempt, as stored in the execution history.
    """

    SUCCESS = "success"
    RETRYABLE_FAILURE = "retryable_failure"
    FATAL_FAILURE = "fatal_failure"


class Classification(str, Enum):
    """Verdict of the error classifier for a failed attempt."""

    RETRYABLE = "retryable"
    FATAL = "fatal"


class RunState(str, Enum):
    """
    States of the attempt state machine.

    IDLE -> ATTEMPTING -> {SUCCEEDED | RETRY_WAIT | EXHAUSTED | FATALLY_FAILED | CANCELLED}
    RETRY_WAIT always transitions back to ATTEMPTING.
    """

    IDLE = "idle"
    ATTEMPTING = "attempting"
    RETRY_WAIT = "retry_wait"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"
    FATALLY_FAILED = "fatally_failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        """True for states that end a run."""
        return self in {
            RunState.SUCCEEDED,
            RunState.EXHAUSTED,
            RunState.FATALLY_FAILED,
            RunState.CANCELLED,
        }


class CacheWriteStatus(str, Enum):
    """Result of a best-effort cache write."""

    STORED = "stored"
    UNAVAILABLE = "unavailable"  # no cache store configured
    FAILED = "failed"  # store raised; error was absorbed
