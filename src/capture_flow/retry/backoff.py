"""
Backoff calculator.

Maps an attempt number to the delay to wait before the next attempt:

    base  = initial_delay_ms * backoff_multiplier ** (attempt - 1), capped at max_delay_ms
    delay = base +/- base * jitter_fraction (uniform), clamped to [0, max_delay_ms]

Pure: the only source of nondeterminism is the injected random generator.
"""

import random
from typing import Optional

from capture_flow.models.policy import RetryPolicy


def base_delay_ms(attempt: int, policy: RetryPolicy) -> float:
    """
    Jitter-free delay for an attempt, capped at ``policy.max_delay_ms``.

    Raises:
        ValueError: If attempt < 1
    """
    if attempt < 1:
        raise ValueError(f"attempt must be >= 1, got {attempt}")

    try:
        growth = policy.backoff_multiplier ** (attempt - 1)
    except OverflowError:
        return policy.max_delay_ms

    return min(policy.initial_delay_ms * growth, policy.max_delay_ms)


def compute_delay_ms(
    attempt: int,
    policy: RetryPolicy,
    rng: Optional[random.Random] = None,
) -> float:
    """
    Delay in milliseconds to wait after ``attempt`` failed.

    The first attempt is jittered too; a retry is never guaranteed to start
    immediately unless the policy has no initial delay.

    Args:
        attempt: 1-based index of the attempt that just failed
        policy: Retry policy
        rng: Random source (module-level generator if omitted)

    Returns:
        Delay in [0, policy.max_delay_ms]
    """
    base = base_delay_ms(attempt, policy)
    if policy.jitter_fraction == 0 or base == 0:
        return base

    source = rng if rng is not None else random
    jitter = base * policy.jitter_fraction * source.uniform(-1.0, 1.0)
    return min(max(base + jitter, 0.0), policy.max_delay_ms)


def delay_schedule_ms(policy: RetryPolicy) -> list[float]:
    """Jitter-free delays between consecutive attempts of a full run."""
    return [base_delay_ms(attempt, policy) for attempt in range(1, policy.max_attempts)]
