"""
Flow orchestrator: the attempt state machine.

Drives the capture -> cache -> stream clone pipeline to completion with
bounded retries. Each attempt:

    1. Allocate a cache key
    2. Capture an artifact (timeout guarded)
    3. Cache it (best effort and timeout guarded, never changes the outcome)
    4. Acquire and clone the media stream (each timeout guarded)

A failed attempt is classified retryable or fatal. Retryable failures wait
out an exponential backoff with jitter and try again until the attempt
budget is exhausted; fatal failures stop the run at once.

Usage:
    orchestrator = FlowOrchestrator(capture_provider, stream_provider, settings)
    ok = await orchestrator.run_flow()
    history = orchestrator.get_history()
"""

import asyncio
import math
import random
import time
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import uuid4

import structlog

from capture_flow.config import Settings
from capture_flow.models.enums import AttemptOutcome, CacheWriteStatus, Classification, RunState
from capture_flow.models.policy import RetryPolicy
from capture_flow.models.records import AttemptRecord, RunMetrics
from capture_flow.monitoring.metrics import (
    attempt_duration_seconds,
    attempts_total,
    cache_writes_total,
    operation_timeouts_total,
    retry_delay_seconds,
    runs_total,
)
from capture_flow.persistence.cache_adapter import CacheSideEffectAdapter
from capture_flow.providers.base import CaptureProvider, StreamProvider
from capture_flow.retry.backoff import compute_delay_ms, delay_schedule_ms
from capture_flow.retry.classifier import (
    ErrorClassifier,
    SubstringErrorClassifier,
    TypedErrorClassifier,
    describe_error,
)
from capture_flow.retry.exceptions import (
    EmptyArtifactError,
    OperationTimeoutError,
    RunCancelledError,
    StreamUnavailableError,
)
from capture_flow.retry.history import ExecutionHistory
from capture_flow.retry.timeout import with_timeout

logger = structlog.get_logger(__name__)

CACHE_TRACE = {
    CacheWriteStatus.STORED: "Artifact cached at {key}",
    CacheWriteStatus.UNAVAILABLE: "Cache store unavailable - artifact not cached",
    CacheWriteStatus.FAILED: "Cache write failed (non-fatal) - artifact not cached",
}


class FlowOrchestrator:
    """
    Resilient orchestrator for the capture workflow.

    State machine:
        IDLE -> ATTEMPTING -> {SUCCEEDED | RETRY_WAIT | EXHAUSTED | FATALLY_FAILED | CANCELLED}
        RETRY_WAIT -> ATTEMPTING

    Runs never raise for workflow failures: ``run_flow`` returns a boolean and
    per-attempt detail lives in the execution history. The history belongs to
    this instance (or is injected) and accumulates across runs until
    ``clear_history()``.

    Attributes:
        capture_provider: Produces the artifact
        stream_provider: Acquires and clones the media stream
        cache_adapter: Best-effort artifact cache
        classifier: Retryable/fatal classifier
        history: Execution history ledger
        settings: Application settings
    """

    def __init__(
        self,
        capture_provider: CaptureProvider,
        stream_provider: StreamProvider,
        settings: Settings,
        cache_adapter: Optional[CacheSideEffectAdapter] = None,
        classifier: Optional[ErrorClassifier] = None,
        history: Optional[ExecutionHistory] = None,
        policy: Optional[RetryPolicy] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize orchestrator.

        Args:
            capture_provider: Capture collaborator
            stream_provider: Stream acquire/clone collaborator
            settings: Application settings (policy, timeout, markers, cache names)
            cache_adapter: Cache adapter (default: no store, caching skipped)
            classifier: Failure classifier (default: typed, falling back to markers)
            history: Ledger to record into (default: a fresh one per instance)
            policy: Retry policy (default: built from settings)
            rng: Random source for jitter
        """
        self.capture_provider = capture_provider
        self.stream_provider = stream_provider
        self.settings = settings
        self.cache_adapter = cache_adapter or CacheSideEffectAdapter(
            None,
            namespace=settings.CACHE_NAMESPACE,
            cache_control=settings.CACHE_CONTROL,
        )
        self.classifier: ErrorClassifier = classifier or TypedErrorClassifier(
            fallback=SubstringErrorClassifier(settings.RETRYABLE_ERROR_MARKERS)
        )
        self.history = history if history is not None else ExecutionHistory()

        self._policy = policy or RetryPolicy.from_settings(settings)
        self._operation_timeout_ms: float = settings.OPERATION_TIMEOUT_MS
        self._cancel_on_timeout = settings.CANCEL_ON_TIMEOUT
        self._metrics_enabled = settings.PROMETHEUS_ENABLED
        self._rng = rng
        self._state = RunState.IDLE
        self._last_run_id: Optional[str] = None

        logger.info(
            "FlowOrchestrator initialized",
            max_attempts=self._policy.max_attempts,
            initial_delay_ms=self._policy.initial_delay_ms,
            max_delay_ms=self._policy.max_delay_ms,
            backoff_multiplier=self._policy.backoff_multiplier,
            jitter_fraction=self._policy.jitter_fraction,
            operation_timeout_ms=self._operation_timeout_ms,
            cache_available=self.cache_adapter.available,
        )

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    @property
    def operation_timeout_ms(self) -> float:
        return self._operation_timeout_ms

    @property
    def state(self) -> RunState:
        """Current state; the terminal state of the last run once it finishes."""
        return self._state

    @property
    def last_run_id(self) -> Optional[str]:
        return self._last_run_id

    def set_retry_policy(self, **overrides: Any) -> RetryPolicy:
        """
        Update the retry policy with a partial set of fields.

        Takes effect for runs started afterwards.

        Raises:
            ValueError: Unknown field or invalid resulting policy
        """
        self._policy = self._policy.merged(**overrides)
        logger.info(
            "Retry policy updated",
            overrides=sorted(overrides),
            schedule_ms=delay_schedule_ms(self._policy),
        )
        return self._policy

    def set_operation_timeout(self, timeout_ms: float) -> None:
        """
        Set the per-step timeout for runs started afterwards.

        Raises:
            ValueError: If timeout_ms is not a positive finite number
        """
        if not math.isfinite(timeout_ms) or timeout_ms <= 0:
            raise ValueError(f"operation timeout must be > 0 and finite, got {timeout_ms}")
        self._operation_timeout_ms = float(timeout_ms)
        logger.info("Operation timeout updated", operation_timeout_ms=timeout_ms)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def run_flow(self, cancel_event: Optional[asyncio.Event] = None) -> bool:
        """
        Run the workflow until it succeeds, exhausts its budget, fails fatally
        or is cancelled.

        Args:
            cancel_event: Optional signal; when set, no further attempt starts,
                the retry wait ends early and in-flight steps are cancelled

        Returns:
            True if an attempt succeeded, False otherwise
        """
        # Configuration is captured once so concurrent updates only affect later runs
        policy = self._policy
        timeout_ms = self._operation_timeout_ms

        run_id = uuid4().hex
        self._last_run_id = run_id

        with structlog.contextvars.bound_contextvars(run_id=run_id):
            return await self._execute_run(run_id, policy, timeout_ms, cancel_event)

    async def _execute_run(
        self,
        run_id: str,
        policy: RetryPolicy,
        timeout_ms: float,
        cancel_event: Optional[asyncio.Event],
    ) -> bool:
        """Attempt loop of one run; ``run_id`` is already bound to the log context."""
        run_start = time.monotonic()
        logger.info(
            "Starting flow run",
            max_attempts=policy.max_attempts,
            operation_timeout_ms=timeout_ms,
        )

        attempt = 0
        final_state = RunState.EXHAUSTED

        while True:
            if cancel_event is not None and cancel_event.is_set():
                final_state = RunState.CANCELLED
                logger.info("Run cancelled before attempt", next_attempt=attempt + 1)
                break

            attempt += 1
            self._state = RunState.ATTEMPTING
            logger.info(f"Attempt {attempt}/{policy.max_attempts}", attempt=attempt)

            with structlog.contextvars.bound_contextvars(attempt=attempt):
                record, error = await self._run_attempt(run_id, attempt, timeout_ms, cancel_event)
            self.history.append(record)
            self._observe_attempt(record)

            if record.succeeded:
                final_state = RunState.SUCCEEDED
                logger.info(
                    f"Success on attempt {attempt}",
                    attempt=attempt,
                    duration_ms=round(record.duration_ms),
                    cache_key=record.cache_key,
                )
                break

            if isinstance(error, RunCancelledError):
                final_state = RunState.CANCELLED
                break

            if record.outcome is AttemptOutcome.FATAL_FAILURE:
                final_state = RunState.FATALLY_FAILED
                logger.error(
                    "Non-retryable error - giving up",
                    attempt=attempt,
                    error=record.error,
                    error_type=record.error_type,
                )
                break

            if attempt >= policy.max_attempts:
                final_state = RunState.EXHAUSTED
                break

            delay_ms = compute_delay_ms(attempt, policy, self._rng)
            self._state = RunState.RETRY_WAIT
            logger.info(
                f"Waiting {delay_ms:.0f}ms before retry",
                attempt=attempt,
                next_attempt=attempt + 1,
                delay_ms=round(delay_ms),
            )
            if self._metrics_enabled:
                retry_delay_seconds.observe(delay_ms / 1000.0)

            if not await self._wait(delay_ms, cancel_event):
                final_state = RunState.CANCELLED
                logger.info("Run cancelled during retry wait", attempt=attempt)
                break

        self._state = final_state
        elapsed_ms = (time.monotonic() - run_start) * 1000

        if self._metrics_enabled:
            runs_total.labels(state=final_state.value).inc()

        if final_state is RunState.SUCCEEDED:
            logger.info("Flow run succeeded", attempts=attempt, elapsed_ms=round(elapsed_ms))
            return True

        logger.error(
            f"Failed after {attempt}/{policy.max_attempts} attempts",
            state=final_state.value,
            attempts=attempt,
            elapsed_ms=round(elapsed_ms),
        )
        return False

    async def _run_attempt(
        self,
        run_id: str,
        attempt: int,
        timeout_ms: float,
        cancel_event: Optional[asyncio.Event],
    ) -> tuple[AttemptRecord, Optional[Exception]]:
        """Execute one pass of the pipeline and build its record."""
        cache_key = f"{self.settings.CACHE_KEY_PREFIX}-{time.monotonic_ns()}-{attempt}"
        started_at = datetime.now(timezone.utc)
        start = time.monotonic()
        steps: list[str] = []
        cached = False

        def guarded(operation: Any, name: str) -> Any:
            return with_timeout(
                operation,
                timeout_ms,
                name=name,
                cancel_event=cancel_event,
                cancel_on_timeout=self._cancel_on_timeout,
            )

        try:
            capture = await guarded(self.capture_provider.capture(), "capture")
            steps.extend(capture.steps)
            if not capture.artifact:
                raise EmptyArtifactError()

            try:
                status = await guarded(
                    self.cache_adapter.store(cache_key, capture.artifact, capture.content_type),
                    "cache",
                )
            except OperationTimeoutError as e:
                # A stalled cache only costs the cache entry, never the attempt
                logger.warning("Cache write timed out (non-fatal)", key=cache_key)
                if self._metrics_enabled:
                    operation_timeouts_total.labels(operation=e.operation).inc()
                status = CacheWriteStatus.FAILED
            cached = status is CacheWriteStatus.STORED
            steps.append(CACHE_TRACE[status].format(key=cache_key))
            if self._metrics_enabled:
                cache_writes_total.labels(status=status.value).inc()

            stream = await guarded(self.stream_provider.acquire(), "acquire_stream")
            if stream is None:
                raise StreamUnavailableError()
            steps.append("Media stream acquired")

            cloned = await guarded(self.stream_provider.clone(stream), "clone_stream")
            steps.append("Stream cloned and action listeners attached")

        except Exception as e:
            duration_ms = (time.monotonic() - start) * 1000
            description = describe_error(e)
            classification = self.classifier.classify(e)
            outcome = (
                AttemptOutcome.RETRYABLE_FAILURE
                if classification is Classification.RETRYABLE
                else AttemptOutcome.FATAL_FAILURE
            )
            steps.append(f"Error: {description}")

            if isinstance(e, OperationTimeoutError) and self._metrics_enabled:
                operation_timeouts_total.labels(operation=e.operation).inc()

            logger.warning(
                f"Attempt {attempt} failed - {description} ({duration_ms:.0f}ms)",
                error_type=type(e).__name__,
                classification=classification.value,
            )

            record = AttemptRecord(
                run_id=run_id,
                attempt=attempt,
                started_at=started_at,
                duration_ms=duration_ms,
                outcome=outcome,
                cache_key=cache_key,
                steps=tuple(steps),
                error=description,
                error_type=type(e).__name__,
                cached=cached,
            )
            return record, e

        duration_ms = (time.monotonic() - start) * 1000
        record = AttemptRecord(
            run_id=run_id,
            attempt=attempt,
            started_at=started_at,
            duration_ms=duration_ms,
            outcome=AttemptOutcome.SUCCESS,
            cache_key=cache_key,
            steps=tuple(steps),
            result=cloned,
            cached=cached,
        )
        return record, None

    async def _wait(self, delay_ms: float, cancel_event: Optional[asyncio.Event]) -> bool:
        """Sleep for the backoff delay. Returns False if cancelled meanwhile."""
        delay_s = delay_ms / 1000.0
        if cancel_event is None:
            await asyncio.sleep(delay_s)
            return True

        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=delay_s)
        except asyncio.TimeoutError:
            return True
        return False

    def _observe_attempt(self, record: AttemptRecord) -> None:
        if not self._metrics_enabled:
            return
        attempts_total.labels(outcome=record.outcome.value).inc()
        attempt_duration_seconds.labels(outcome=record.outcome.value).observe(
            record.duration_ms / 1000.0
        )

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    def get_history(self) -> tuple[AttemptRecord, ...]:
        """All recorded attempts, oldest first."""
        return self.history.all()

    def get_metrics(self) -> RunMetrics:
        return self.history.metrics_snapshot()

    def get_last_success_cache_key(self) -> Optional[str]:
        return self.history.last_success_cache_key()

    def clear_history(self) -> None:
        self.history.clear()
        self._state = RunState.IDLE
