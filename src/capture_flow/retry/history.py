"""
Execution history ledger.

Append-only record of attempts for audit trails and metrics. One ledger is
owned by each orchestrator instance (or injected by the caller for per-run
isolation); repeated runs accumulate into it until ``clear()``.
"""

import threading
from typing import Optional

import structlog

from capture_flow.models.records import AttemptRecord, RunMetrics

logger = structlog.get_logger(__name__)


class ExecutionHistory:
    """
    Ordered, append-only sequence of AttemptRecords.

    Running counters are maintained on append so that metric snapshots do not
    rescan the ledger. A lock guards mutation because several runs may share
    one ledger.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: list[AttemptRecord] = []
        self._last_attempt_by_run: dict[str, int] = {}
        self._successful = 0
        self._total_duration_ms = 0.0

    def append(self, record: AttemptRecord) -> None:
        """
        Append a completed attempt.

        Raises:
            ValueError: If the attempt index does not increase within its run
        """
        with self._lock:
            previous = self._last_attempt_by_run.get(record.run_id, 0)
            if record.attempt <= previous:
                raise ValueError(
                    f"attempt {record.attempt} of run {record.run_id} "
                    f"must be greater than {previous}"
                )
            self._records.append(record)
            self._last_attempt_by_run[record.run_id] = record.attempt
            if record.succeeded:
                self._successful += 1
            self._total_duration_ms += record.duration_ms

        logger.debug(
            "Attempt recorded",
            run_id=record.run_id,
            attempt=record.attempt,
            outcome=record.outcome.value,
            duration_ms=round(record.duration_ms, 1),
        )

    def all(self) -> tuple[AttemptRecord, ...]:
        """Snapshot of every record, oldest first."""
        with self._lock:
            return tuple(self._records)

    def last_success_cache_key(self) -> Optional[str]:
        """Cache key of the most recent successful attempt, or None."""
        with self._lock:
            for record in reversed(self._records):
                if record.succeeded:
                    return record.cache_key
        return None

    def metrics_snapshot(self) -> RunMetrics:
        with self._lock:
            return RunMetrics(
                total_attempts=len(self._records),
                successful_attempts=self._successful,
                total_duration_ms=self._total_duration_ms,
            )

    def clear(self) -> None:
        """Drop all records and reset counters."""
        with self._lock:
            dropped = len(self._records)
            self._records.clear()
            self._last_attempt_by_run.clear()
            self._successful = 0
            self._total_duration_ms = 0.0
        logger.info("Execution history cleared", records_dropped=dropped)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
