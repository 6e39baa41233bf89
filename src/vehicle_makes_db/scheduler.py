"""Periodic sync scheduling with APScheduler.

One interval job runs the sync. APScheduler's ``max_instances=1`` keeps a
run from starting while the previous one is still going; the missed tick
is skipped.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Any

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from vehicle_makes_db.config import SyncConfig, get_settings
from vehicle_makes_db.logging import LogContext, get_logger
from vehicle_makes_db.sync import SyncRunResult, run_sync_cycle

logger = get_logger(__name__)

SYNC_JOB_ID = "vehicle_makes_sync"

SyncRunner = Callable[[asyncio.Event], Awaitable[SyncRunResult]]


class SyncScheduler:
    """Runs the sync every ``interval_hours``, optionally once at start.

    Usage:
        scheduler = SyncScheduler()
        scheduler.start()  # inside a running event loop
        ...
        await scheduler.shutdown()  # lets the in-flight group finish

    A failing run is logged and never propagates into the scheduler.
    """

    def __init__(
        self,
        runner: SyncRunner | None = None,
        config: SyncConfig | None = None,
    ) -> None:
        """Initialize the scheduler.

        Args:
            runner: Coroutine function performing one run (receives the stop event)
            config: Sync configuration (uses settings if not provided)
        """
        self._runner = runner or (lambda stop_event: run_sync_cycle(stop_event))
        self._config = config or get_settings().sync
        self._scheduler = AsyncIOScheduler()
        self._stop_event = asyncio.Event()
        self._current_run: asyncio.Task[None] | None = None
        self._running = False
        self.last_result: SyncRunResult | None = None
        self.last_error: Exception | None = None

    @property
    def running(self) -> bool:
        """Whether the scheduler has been started and not shut down."""
        return self._running

    @property
    def sync_in_progress(self) -> bool:
        return self._current_run is not None and not self._current_run.done()

    def start(self) -> None:
        """Register the sync job and start the scheduler.

        Must be called from within a running event loop.
        """
        job_kwargs: dict[str, Any] = {}
        if self._config.run_on_startup:
            job_kwargs["next_run_time"] = datetime.now()

        self._scheduler.add_job(
            self._run_job,
            trigger=IntervalTrigger(hours=self._config.interval_hours),
            id=SYNC_JOB_ID,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
            **job_kwargs,
        )
        self._scheduler.start()
        self._running = True
        logger.info(
            "Sync scheduled every {}h (run on startup: {})",
            self._config.interval_hours,
            self._config.run_on_startup,
        )

    async def _run_job(self) -> None:
        self._current_run = asyncio.current_task()
        with LogContext(run="scheduled"):
            try:
                self.last_result = await self._runner(self._stop_event)
                self.last_error = None
            except Exception as e:
                self.last_error = e
                logger.exception("Scheduled sync failed: {}", e)

    async def shutdown(self) -> None:
        """Stop scheduling and wait for an in-flight run to drain.

        The job is paused so no new run starts. The running run stops after
        its current group of type loads and is awaited before APScheduler
        itself shuts down; APScheduler cancels job futures still pending.
        """
        if self._running:
            self._scheduler.pause()
        self._stop_event.set()

        current = self._current_run
        if current is not None and not current.done() and current is not asyncio.current_task():
            logger.info("Waiting for the in-flight sync to finish")
            await asyncio.wait({current})

        if self._running:
            self._scheduler.shutdown(wait=False)
            self._running = False
            # AsyncIOScheduler may defer the shutdown to the event loop
            await asyncio.sleep(0)
        logger.info("Sync scheduler stopped")
