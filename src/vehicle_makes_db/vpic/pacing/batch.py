"""Batch executor for paced, bounded-concurrency request groups.

Items are processed in groups of at most ``max_concurrent``. A group runs
concurrently; the next group only starts after every item of the current
one has finished and the inter-batch delay has elapsed. This keeps the
number of in-flight requests bounded and the request rate below the
remote source's ceiling.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from vehicle_makes_db.logging import get_logger

from .progress import ProgressTracker

logger = get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class BatchResult(Generic[R]):
    """Result of a batch operation.

    ``succeeded`` and ``failed`` carry the index of the originating item.
    """

    succeeded: list[tuple[int, R]] = field(default_factory=list)
    failed: list[tuple[int, Exception]] = field(default_factory=list)
    not_started: int = 0
    groups: int = 0

    @property
    def total_count(self) -> int:
        """Total number of items processed."""
        return len(self.succeeded) + len(self.failed)


class BatchExecutor(Generic[T, R]):
    """Runs an async processor over items in paced, bounded groups.

    Usage:
        executor = BatchExecutor(max_concurrent=5, batch_delay=1.0)

        async def load(make: Make) -> Make:
            ...

        result = await executor.execute(makes, load)
        print(f"Loaded {len(result.succeeded)} makes")

    A failing item never affects the rest of its group or later groups;
    its exception is collected in ``BatchResult.failed``. Setting the
    optional ``stop_event`` lets the running group finish and starts no
    further groups.
    """

    def __init__(
        self,
        max_concurrent: int = 5,
        batch_delay: float = 1.0,
        progress: ProgressTracker | None = None,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        """Initialize the batch executor.

        Args:
            max_concurrent: Maximum items in flight at once (group size)
            batch_delay: Seconds to pause between groups
            progress: Optional ProgressTracker for progress reporting
            sleep: Awaitable used for pacing (injectable for tests)
        """
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be at least 1")
        self._max_concurrent = max_concurrent
        self._batch_delay = batch_delay
        self._progress = progress
        self._sleep = sleep

    @property
    def max_concurrent(self) -> int:
        return self._max_concurrent

    async def execute(
        self,
        items: Sequence[T],
        processor: Callable[[T], Awaitable[R]],
        *,
        stop_event: asyncio.Event | None = None,
        progress: ProgressTracker | None = None,
    ) -> BatchResult[R]:
        """Execute the processor on all items.

        Args:
            items: Items to process, in processing order
            processor: Async function to process each item
            stop_event: Optional signal to stop after the current group
            progress: Tracker for this call (overrides the constructor one)

        Returns:
            BatchResult containing succeeded results and failed items
        """
        result: BatchResult[R] = BatchResult()
        if not items:
            return result

        tracker = progress or self._progress
        if tracker:
            tracker.total = len(items)
            tracker.start()

        for group_start in range(0, len(items), self._max_concurrent):
            if stop_event is not None and stop_event.is_set():
                result.not_started = len(items) - group_start
                logger.info(
                    "Stop requested, {} items left unprocessed", result.not_started
                )
                break

            if group_start and self._batch_delay > 0:
                await self._sleep(self._batch_delay)

            group = items[group_start : group_start + self._max_concurrent]
            await self._execute_group(group, processor, group_start, result, tracker)
            result.groups += 1

        if tracker:
            if result.not_started:
                tracker.cancel()
            else:
                tracker.complete()

        return result

    async def _execute_group(
        self,
        group: Sequence[T],
        processor: Callable[[T], Awaitable[R]],
        start_index: int,
        result: BatchResult[R],
        tracker: ProgressTracker | None,
    ) -> None:
        outcomes = await asyncio.gather(
            *(processor(item) for item in group),
            return_exceptions=True,
        )

        for offset, outcome in enumerate(outcomes):
            index = start_index + offset
            if isinstance(outcome, Exception):
                result.failed.append((index, outcome))
                if tracker:
                    tracker.increment_failed()
            elif isinstance(outcome, BaseException):
                # Cancellation and interpreter exits must propagate
                raise outcome
            else:
                result.succeeded.append((index, outcome))
                if tracker:
                    tracker.increment()
