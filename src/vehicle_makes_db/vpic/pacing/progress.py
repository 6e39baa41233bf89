"""Progress tracking for long-running batch operations."""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import StrEnum

from vehicle_makes_db.logging import get_logger

logger = get_logger(__name__)


class ProgressState(StrEnum):
    """State of a tracked operation."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass
class ProgressUpdate:
    """A point-in-time view of a tracked operation."""

    total: int
    completed: int
    failed: int
    state: ProgressState
    elapsed_seconds: float = 0.0

    @property
    def remaining(self) -> int:
        """Number of items remaining."""
        return max(0, self.total - self.completed - self.failed)

    @property
    def progress_percent(self) -> float:
        """Completion percentage (0-100)."""
        if self.total == 0:
            return 100.0
        return ((self.completed + self.failed) / self.total) * 100


class ProgressTracker:
    """Counts processed items and logs progress at a fixed cadence.

    Usage:
        tracker = ProgressTracker(total=len(makes), name="Type loading", log_every=100)
        tracker.start()
        ...
        tracker.increment()          # or tracker.increment_failed()
        tracker.complete()
    """

    def __init__(self, total: int = 0, name: str = "operation", log_every: int = 100) -> None:
        self.total = total
        self._name = name
        self._log_every = max(1, log_every)
        self._completed = 0
        self._failed = 0
        self._state = ProgressState.PENDING
        self._start_time: float | None = None

    @property
    def completed(self) -> int:
        return self._completed

    @property
    def failed(self) -> int:
        return self._failed

    @property
    def state(self) -> ProgressState:
        return self._state

    @property
    def elapsed_seconds(self) -> float:
        """Elapsed time since start in seconds."""
        if self._start_time is None:
            return 0.0
        return time.monotonic() - self._start_time

    def start(self) -> None:
        self._state = ProgressState.IN_PROGRESS
        self._start_time = time.monotonic()
        logger.info("{} started ({} items)", self._name, self.total)

    def increment(self) -> None:
        self._completed += 1
        self._maybe_log()

    def increment_failed(self) -> None:
        self._failed += 1
        self._maybe_log()

    def complete(self) -> None:
        self._finish(ProgressState.COMPLETED)

    def cancel(self) -> None:
        self._finish(ProgressState.CANCELLED)

    def snapshot(self) -> ProgressUpdate:
        return ProgressUpdate(
            total=self.total,
            completed=self._completed,
            failed=self._failed,
            state=self._state,
            elapsed_seconds=self.elapsed_seconds,
        )

    def _maybe_log(self) -> None:
        processed = self._completed + self._failed
        if processed % self._log_every == 0:
            update = self.snapshot()
            logger.info(
                "{}: {}/{} processed ({:.1f}%), {} failed",
                self._name,
                processed,
                self.total,
                update.progress_percent,
                self._failed,
            )

    def _finish(self, state: ProgressState) -> None:
        self._state = state
        logger.info(
            "{} {}: {} succeeded, {} failed in {:.1f}s",
            self._name,
            state.value,
            self._completed,
            self._failed,
            self.elapsed_seconds,
        )
