"""Sync Orchestrator - One complete make/type synchronization run.

A run is linear:

1. Fetch-Makes: read the full make list from vPIC.
2. Persist-Shells: reconcile it against the store, apply deletes and
   upserts, commit.
3. Load-Types: fetch and persist the vehicle types of every make.
4. Self-Check: compare the remote make count with the stored row count.

Steps 1 and 2 are fatal: the run aborts and the store keeps its previous
snapshot. Per-make failures in step 3 and any self-check problem are only
logged and reported in the result.
"""

from __future__ import annotations

import asyncio
import random
import time
from typing import TYPE_CHECKING

from vehicle_makes_db.config import PacingConfig, Settings, SyncConfig, get_settings
from vehicle_makes_db.db import MakeRepository, create_tables, get_session
from vehicle_makes_db.logging import get_logger
from vehicle_makes_db.schemas import Make
from vehicle_makes_db.vpic import VPICClient

from .commit_manager import CommitManager
from .reconciler import reconcile
from .results import SelfCheckResult, SyncRunResult, TypeLoadResult
from .type_loader import TypeLoader

if TYPE_CHECKING:
    from vehicle_makes_db.vpic.pacing import BatchExecutor

    from .results import MakeTypeLoad

logger = get_logger(__name__)


class SyncOrchestrator:
    """Runs the fetch, reconcile, load and check steps against one store.

    Usage:
        async with VPICClient() as client, get_session() as session:
            write_lock = asyncio.Lock()
            orchestrator = SyncOrchestrator(
                client=client,
                repository=MakeRepository(session, write_lock),
                commit_manager=CommitManager(session, write_lock),
            )
            result = await orchestrator.run_sync()
    """

    def __init__(
        self,
        client: VPICClient,
        repository: MakeRepository,
        commit_manager: CommitManager,
        *,
        pacing: PacingConfig | None = None,
        sync_config: SyncConfig | None = None,
        rng: random.Random | None = None,
        executor: BatchExecutor[Make, MakeTypeLoad] | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            client: vPIC client
            repository: Make repository (sharing the commit manager's session)
            commit_manager: Commit boundaries for the shared session
            pacing: Type-loading concurrency and delay
            sync_config: Run options (self-check, shuffle, make limit)
            rng: Random source for the type-loading order
            executor: Pre-built batch executor for type loading
        """
        self._client = client
        self._repository = repository
        self._commit_manager = commit_manager
        self._pacing = pacing or PacingConfig()
        self._sync_config = sync_config or SyncConfig()
        self._rng = rng
        self._executor = executor

    # -------------------------------------------------------------------------
    # Steps
    # -------------------------------------------------------------------------

    async def fetch_makes(self) -> list[Make]:
        """Step 1: read every make from vPIC as a shell."""
        return await self._client.get_all_makes()

    async def persist_shells(self, remote_makes: list[Make], result: SyncRunResult) -> None:
        """Step 2: reconcile the fetched makes and commit the writes.

        Rolls back on any failure, leaving the previous snapshot in place.
        """
        try:
            snapshot = await self._repository.find_all()
            plan = reconcile(remote_makes, snapshot)

            for make_id in sorted(plan.to_delete):
                if await self._repository.delete_one(make_id):
                    result.deleted += 1
            result.created = await self._repository.upsert_many(plan.to_upsert)
            result.upserted = len(plan.to_upsert)

            await self._commit_manager.commit()
        except Exception:
            await self._repository.rollback()
            raise

        logger.info(
            "Make shells persisted: {} written ({} new), {} deleted",
            result.upserted,
            result.created,
            result.deleted,
        )

    async def load_types(
        self,
        remote_makes: list[Make],
        stop_event: asyncio.Event | None = None,
        max_makes: int | None = None,
    ) -> tuple[dict[str, Make], TypeLoadResult]:
        """Step 3: load and persist the vehicle types of the fetched makes.

        The loader starts from the persisted rows, so a make whose types
        fail to load keeps what the store already held.
        """
        persisted = {
            make.make_id: make
            for make in await self._repository.find_by_make_ids(m.make_id for m in remote_makes)
        }
        makes = [persisted.get(make.make_id, make) for make in remote_makes]

        loader = TypeLoader(
            client=self._client,
            repository=self._repository,
            commit_manager=self._commit_manager,
            pacing=self._pacing,
            shuffle=self._sync_config.shuffle,
            max_makes=max_makes,
            rng=self._rng,
            executor=self._executor,
        )
        makes_by_id = await loader.load_types_for_all(makes, stop_event=stop_event)
        return makes_by_id, loader.last_result

    async def self_check(self) -> SelfCheckResult:
        """Step 4: compare the remote make count with the stored row count."""
        return await check_make_count(self._client, self._repository)

    # -------------------------------------------------------------------------
    # Run
    # -------------------------------------------------------------------------

    async def run_sync(
        self,
        stop_event: asyncio.Event | None = None,
        *,
        self_check: bool | None = None,
        max_makes: int | None = None,
    ) -> SyncRunResult:
        """Run one complete sync.

        Args:
            stop_event: Optional signal to end type loading after the
                in-flight group
            self_check: Run the self-check (defaults to the sync config)
            max_makes: Limit on makes whose types are loaded (defaults to
                the sync config)

        Returns:
            SyncRunResult with counts, failures and self-check outcome

        Raises:
            VehicleMakesError: If fetching or persisting the make list fails
        """
        start_time = time.monotonic()
        result = SyncRunResult()

        try:
            remote_makes = await self.fetch_makes()
        except Exception as e:
            logger.error("Sync aborted, could not fetch makes: {}", e)
            raise
        result.makes_fetched = len({make.make_id for make in remote_makes})

        try:
            await self.persist_shells(remote_makes, result)
        except Exception as e:
            logger.error("Sync aborted, could not persist makes: {}", e)
            raise

        limit = max_makes if max_makes is not None else self._sync_config.max_makes
        result.makes, result.type_load = await self.load_types(remote_makes, stop_event, limit)

        run_check = self._sync_config.self_check if self_check is None else self_check
        if run_check and not result.type_load.stopped:
            result.self_check = await self.self_check()

        result.duration_seconds = time.monotonic() - start_time
        logger.info(
            "Sync finished in {:.1f}s: {} makes, {} type loads failed",
            result.duration_seconds,
            result.makes_fetched,
            result.type_load.failed,
        )
        return result


async def run_sync_cycle(
    stop_event: asyncio.Event | None = None,
    settings: Settings | None = None,
    *,
    self_check: bool | None = None,
    max_makes: int | None = None,
) -> SyncRunResult:
    """Run one sync against the configured database and vPIC endpoint.

    This is the unit of work the scheduler and the CLI invoke.
    """
    settings = settings or get_settings()
    await create_tables()

    async with VPICClient(settings.vpic) as client, get_session() as session:
        write_lock = asyncio.Lock()
        orchestrator = SyncOrchestrator(
            client=client,
            repository=MakeRepository(session, write_lock),
            commit_manager=CommitManager(
                session, write_lock, batch_size=settings.sync.commit_batch_size
            ),
            pacing=settings.pacing,
            sync_config=settings.sync,
        )
        return await orchestrator.run_sync(
            stop_event, self_check=self_check, max_makes=max_makes
        )


async def check_make_count(client: VPICClient, repository: MakeRepository) -> SelfCheckResult:
    """Compare the make count reported by vPIC with the stored row count.

    Only cardinality is compared. Never raises; a check that cannot
    complete is recorded on the result.
    """
    check = SelfCheckResult()
    try:
        check.remote_count = await client.get_make_count()
        check.stored_count = await repository.count()
    except Exception as e:
        check.error = str(e)
        logger.error("Self-check could not complete: {}", e)
        return check

    if check.passed:
        logger.info("Self-check passed: {} makes stored", check.stored_count)
    else:
        logger.warning(
            "Self-check mismatch: vPIC reports {} makes, store holds {}",
            check.remote_count,
            check.stored_count,
        )
    return check
