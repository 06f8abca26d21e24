"""
Execution history data models.

AttemptRecord rows are appended to the ledger once per completed attempt and
never mutated afterwards. RunMetrics is a point-in-time snapshot derived from
the ledger; it does not update live.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from capture_flow.models.enums import AttemptOutcome


class AttemptRecord(BaseModel):
    """
    One row of the execution history.

    The cache key is allocated before the attempt starts, so failed attempts
    carry one too even if they never reached the caching stage.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    run_id: str = Field(..., description="Identifier of the run this attempt belongs to")
    attempt: int = Field(..., ge=1, description="1-based attempt index within the run")
    started_at: datetime = Field(..., description="UTC start timestamp")
    duration_ms: float = Field(..., ge=0.0, description="Wall time of the attempt")
    outcome: AttemptOutcome
    cache_key: str = Field(..., description="Cache key allocated for this attempt")
    steps: tuple[str, ...] = Field(default=(), description="Ordered trace of steps taken")
    result: Any = Field(default=None, description="Opaque payload of a successful attempt")
    error: Optional[str] = Field(default=None, description="Failure description")
    error_type: Optional[str] = Field(default=None, description="Exception class name")
    cached: bool = Field(default=False, description="Whether the artifact was cached")

    @model_validator(mode="after")
    def _check_outcome_payload(self) -> "AttemptRecord":
        if self.outcome is AttemptOutcome.SUCCESS and self.error is not None:
            raise ValueError("successful attempt must not carry an error")
        if self.outcome is not AttemptOutcome.SUCCESS and not self.error:
            raise ValueError("failed attempt must carry an error description")
        return self

    @property
    def succeeded(self) -> bool:
        return self.outcome is AttemptOutcome.SUCCESS


class RunMetrics(BaseModel):
    """
    Aggregate statistics over the execution history.

    Ratios are 0 for an empty history rather than undefined.
    """

    model_config = ConfigDict(frozen=True)

    total_attempts: int = Field(default=0, ge=0)
    successful_attempts: int = Field(default=0, ge=0)
    total_duration_ms: float = Field(default=0.0, ge=0.0)

    @property
    def failed_attempts(self) -> int:
        return self.total_attempts - self.successful_attempts

    @property
    def success_rate(self) -> float:
        """Successes / attempts, in [0, 1]."""
        if self.total_attempts == 0:
            return 0.0
        return self.successful_attempts / self.total_attempts

    @property
    def success_rate_percent(self) -> float:
        return self.success_rate * 100.0

    @property
    def average_duration_ms(self) -> float:
        if self.total_attempts == 0:
            return 0.0
        return self.total_duration_ms / self.total_attempts
