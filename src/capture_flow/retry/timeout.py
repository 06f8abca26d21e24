"""
Timeout guard for a single asynchronous step.

Races the step against a deadline and, optionally, a caller-supplied
cancellation event. This is a single-shot bound; retry decisions belong to
the orchestrator.

Known leak risk: with ``cancel_on_timeout=False`` a timed-out step keeps
running in the background after the guard has given up on it. Its side
effects must be idempotent because the next attempt will repeat them.
"""

import asyncio
from typing import Awaitable, Optional, TypeVar

import structlog

from capture_flow.retry.exceptions import OperationTimeoutError, RunCancelledError

logger = structlog.get_logger(__name__)

T = TypeVar("T")


def _consume_outcome(task: "asyncio.Future[object]") -> None:
    # Retrieve the exception of an abandoned task so asyncio does not report
    # it as never retrieved.
    if not task.cancelled():
        task.exception()


async def with_timeout(
    operation: Awaitable[T],
    timeout_ms: Optional[float],
    *,
    name: str = "operation",
    cancel_event: Optional[asyncio.Event] = None,
    cancel_on_timeout: bool = True,
) -> T:
    """
    Await ``operation`` with a deadline.

    Args:
        operation: Coroutine or future to run
        timeout_ms: Deadline in milliseconds (None disables the deadline)
        name: Step name used in errors and logs
        cancel_event: Run-level cancellation signal
        cancel_on_timeout: Cancel the step when the deadline elapses
            (False leaves it detached)

    Returns:
        The step's result, unchanged

    Raises:
        OperationTimeoutError: Deadline elapsed first
        RunCancelledError: Cancellation signal fired first
        Exception: Whatever the step itself raised, unchanged
    """
    task = asyncio.ensure_future(operation)

    if cancel_event is not None and cancel_event.is_set():
        task.cancel()
        task.add_done_callback(_consume_outcome)
        raise RunCancelledError(name)

    waiters: set[asyncio.Future] = {task}
    cancel_waiter: Optional[asyncio.Future] = None
    if cancel_event is not None:
        cancel_waiter = asyncio.ensure_future(cancel_event.wait())
        waiters.add(cancel_waiter)

    timeout_s = None if timeout_ms is None else timeout_ms / 1000.0

    try:
        done, _ = await asyncio.wait(
            waiters, timeout=timeout_s, return_when=asyncio.FIRST_COMPLETED
        )
    except asyncio.CancelledError:
        # The awaiting task itself was cancelled; take the step down with it
        task.cancel()
        raise
    finally:
        if cancel_waiter is not None and not cancel_waiter.done():
            cancel_waiter.cancel()

    if task in done:
        return task.result()

    if cancel_waiter is not None and cancel_waiter in done:
        task.cancel()
        task.add_done_callback(_consume_outcome)
        logger.info("Guarded step cancelled by caller", operation=name)
        raise RunCancelledError(name)

    if cancel_on_timeout:
        task.cancel()
    else:
        logger.warning(
            "Guarded step left running after timeout",
            operation=name,
            timeout_ms=timeout_ms,
        )
    task.add_done_callback(_consume_outcome)

    logger.warning("Guarded step timed out", operation=name, timeout_ms=timeout_ms)
    raise OperationTimeoutError(name, timeout_ms)  # type: ignore[arg-type]
