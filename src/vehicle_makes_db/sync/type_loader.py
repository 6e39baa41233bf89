"""Bounded-concurrency vehicle type loading.

Fetches the vehicle types of every make in paced groups and persists each
make as soon as its types arrive. A make that fails is logged and left as
it was; the next sync run retries it.
"""

from __future__ import annotations

import asyncio
import random
import time
from collections.abc import Sequence
from typing import TYPE_CHECKING

from vehicle_makes_db.config import PacingConfig
from vehicle_makes_db.exceptions import PersistenceError
from vehicle_makes_db.logging import bind_make, get_logger
from vehicle_makes_db.schemas import Make, MakeUpsert
from vehicle_makes_db.vpic.pacing import BatchExecutor, ProgressTracker

from .results import MakeTypeLoad, TypeLoadResult

if TYPE_CHECKING:
    from vehicle_makes_db.db.repositories import MakeRepository
    from vehicle_makes_db.vpic import VPICClient

    from .commit_manager import CommitManager

logger = get_logger(__name__)


class TypeLoader:
    """Loads and persists vehicle types for a list of makes.

    Usage:
        loader = TypeLoader(
            client=client,
            repository=MakeRepository(session, write_lock),
            commit_manager=CommitManager(session, write_lock),
        )
        makes_by_id = await loader.load_types_for_all(makes)
        print(f"{loader.last_result.failed} makes failed")
    """

    def __init__(
        self,
        client: VPICClient,
        repository: MakeRepository,
        commit_manager: CommitManager | None = None,
        *,
        pacing: PacingConfig | None = None,
        shuffle: bool = True,
        max_makes: int | None = None,
        rng: random.Random | None = None,
        executor: BatchExecutor[Make, MakeTypeLoad] | None = None,
    ) -> None:
        """Initialize the type loader.

        Args:
            client: vPIC client
            repository: Repository the loaded makes are written to
            commit_manager: Optional commit boundaries (writes are only
                flushed without it)
            pacing: Concurrency cap and inter-batch delay
            shuffle: Randomize the processing order on every call
            max_makes: Only attempt this many makes (None = all)
            rng: Random source for shuffling (seedable in tests)
            executor: Pre-built executor (overrides ``pacing``)
        """
        pacing = pacing or PacingConfig()
        self._client = client
        self._repository = repository
        self._commit_manager = commit_manager
        self._shuffle = shuffle
        self._max_makes = max_makes
        self._rng = rng or random.Random()
        self._executor = executor or BatchExecutor(
            max_concurrent=pacing.max_concurrent_requests,
            batch_delay=pacing.batch_delay_seconds,
        )
        self.last_result = TypeLoadResult()
        self._rolled_back: set[str] = set()

    async def load_types_for_all(
        self,
        makes: Sequence[Make],
        stop_event: asyncio.Event | None = None,
    ) -> dict[str, Make]:
        """Load the vehicle types of every make.

        Args:
            makes: Makes to load, carrying their currently persisted types
            stop_event: Optional signal to stop after the in-flight group

        Returns:
            Map of make id to make. Makes that failed or were not attempted
            keep the types they came in with.
        """
        start_time = time.monotonic()
        self._rolled_back = set()
        makes_by_id = {make.make_id: make for make in makes}

        order = list(makes_by_id.values())
        if self._shuffle:
            self._rng.shuffle(order)
        if self._max_makes is not None:
            order = order[: self._max_makes]

        batch = await self._executor.execute(
            order,
            self._load_one,
            stop_event=stop_event,
            progress=ProgressTracker(name="Type loading", log_every=100),
        )

        result = TypeLoadResult(attempted=batch.total_count, not_started=batch.not_started)
        loads = [load for _, load in batch.succeeded]
        # Exceptions escaping _load_one are still isolated by the executor
        loads.extend(MakeTypeLoad.from_error(order[index], error) for index, error in batch.failed)

        for load in loads:
            if load.success and load.make.make_id in self._rolled_back:
                load = MakeTypeLoad.from_error(
                    load.make, PersistenceError("Write rolled back before it was committed")
                )
            if load.success:
                makes_by_id[load.make.make_id] = load.make
                result.succeeded += 1
            else:
                result.failed += 1
                result.failed_makes.append((load.make.make_id, str(load.error)))

        if self._commit_manager is not None:
            await self._commit_manager.finalize()

        result.duration_seconds = time.monotonic() - start_time
        self.last_result = result

        logger.info(
            "Vehicle types loaded: {} succeeded, {} failed, {} not started",
            result.succeeded,
            result.failed,
            result.not_started,
        )
        return makes_by_id

    async def _load_one(self, make: Make) -> MakeTypeLoad:
        """Fetch and persist the types of one make.

        Never raises for ordinary failures; the error is logged and returned.
        """
        log = bind_make(make.make_id)
        try:
            vehicle_types = await self._client.get_vehicle_types(make.make_id)
            loaded = make.model_copy(update={"vehicle_types": vehicle_types})
            await self._repository.upsert_one(MakeUpsert.from_make(loaded))
            if self._commit_manager is not None:
                await self._commit_manager.record_success(make.make_id)
        except Exception as e:
            log.error("Failed to load vehicle types for {}: {}", make.make_name, e)
            if isinstance(e, PersistenceError) and self._commit_manager is not None:
                # The session was rolled back, taking every uncommitted write with it
                self._rolled_back.update(self._commit_manager.discard_uncommitted())
            return MakeTypeLoad.from_error(make, e)

        log.debug("{} vehicle types stored for {}", len(vehicle_types), make.make_name)
        return MakeTypeLoad(make=loaded)
