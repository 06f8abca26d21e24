"""
Retry policy value object.

A single immutable policy drives both the exponential backoff variant and
the simple fixed-delay variant (multiplier 1, no jitter).
"""

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

if TYPE_CHECKING:
    from capture_flow.config import Settings


class RetryPolicy(BaseModel):
    """
    Immutable retry configuration.

    Attributes:
        max_attempts: Total attempts per run, first attempt included
        initial_delay_ms: Delay before the second attempt (before jitter)
        max_delay_ms: Upper bound for any computed delay
        backoff_multiplier: Growth factor per attempt (1.0 = fixed delay)
        jitter_fraction: Symmetric random spread around the delay, in [0, 1)
    """

    model_config = ConfigDict(frozen=True)

    max_attempts: int = Field(default=3, ge=1, description="Total attempts per run")
    initial_delay_ms: float = Field(default=500.0, ge=0.0, description="Base delay in ms")
    max_delay_ms: float = Field(default=5000.0, ge=0.0, description="Delay cap in ms")
    backoff_multiplier: float = Field(default=2.0, ge=1.0, description="Exponential growth factor")
    jitter_fraction: float = Field(default=0.2, ge=0.0, lt=1.0, description="Jitter spread")

    @model_validator(mode="after")
    def _check_delay_bounds(self) -> "RetryPolicy":
        if self.max_delay_ms < self.initial_delay_ms:
            raise ValueError(
                f"max_delay_ms ({self.max_delay_ms}) must be >= initial_delay_ms "
                f"({self.initial_delay_ms})"
            )
        return self

    def merged(self, **overrides: Any) -> "RetryPolicy":
        """
        Return a new policy with the given fields replaced.

        Unknown field names raise ValueError; ``None`` values are ignored so
        callers can forward optional arguments directly.

        Raises:
            ValueError: Unknown field, or resulting policy is invalid
        """
        unknown = set(overrides) - set(type(self).model_fields)
        if unknown:
            raise ValueError(f"Unknown retry policy fields: {sorted(unknown)}")
        updates = {name: value for name, value in overrides.items() if value is not None}
        return type(self)(**{**self.model_dump(), **updates})

    @classmethod
    def fixed(cls, max_attempts: int, delay_ms: float) -> "RetryPolicy":
        """Simple variant: constant delay between attempts, no jitter."""
        return cls(
            max_attempts=max_attempts,
            initial_delay_ms=delay_ms,
            max_delay_ms=delay_ms,
            backoff_multiplier=1.0,
            jitter_fraction=0.0,
        )

    @classmethod
    def from_settings(cls, settings: "Settings") -> "RetryPolicy":
        return cls(
            max_attempts=settings.RETRY_MAX_ATTEMPTS,
            initial_delay_ms=settings.RETRY_INITIAL_DELAY_MS,
            max_delay_ms=settings.RETRY_MAX_DELAY_MS,
            backoff_multiplier=settings.RETRY_BACKOFF_MULTIPLIER,
            jitter_fraction=settings.RETRY_JITTER_FRACTION,
        )
