"""Commit boundaries for the type-loading phase.

Types are persisted one make at a time; committing after every make (the
default batch size of 1) means a crash mid-run loses at most the makes
that were in flight.
"""

from __future__ import annotations

import asyncio
from contextlib import nullcontext
from typing import TYPE_CHECKING, Any

from sqlalchemy.exc import SQLAlchemyError

from vehicle_makes_db.exceptions import PersistenceError
from vehicle_makes_db.logging import get_logger

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


class CommitManager:
    """Manages commit boundaries for batch operations.

    Shares the write lock with the repositories so a commit never
    interleaves with a concurrent flush on the same session.

    Usage:
        async with get_session() as session:
            write_lock = asyncio.Lock()
            repository = MakeRepository(session, write_lock)
            commit_manager = CommitManager(session, write_lock, batch_size=1)

            await repository.upsert_one(write)
            await commit_manager.record_success()  # Auto-commits at batch_size

            await commit_manager.finalize()  # Commit remaining
    """

    def __init__(
        self,
        session: AsyncSession,
        write_lock: asyncio.Lock | None = None,
        batch_size: int = 1,
    ) -> None:
        """Initialize the commit manager.

        Args:
            session: Async SQLAlchemy session to commit on
            write_lock: Lock shared with the repositories using ``session``
            batch_size: Successful writes before an automatic commit
        """
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self._session = session
        self._write_lock = write_lock
        self._batch_size = batch_size
        self._uncommitted_count = 0
        self._uncommitted_keys: list[str] = []
        self._total_committed = 0

    @property
    def uncommitted_count(self) -> int:
        """Number of writes pending commit."""
        return self._uncommitted_count

    @property
    def total_committed(self) -> int:
        """Total writes committed across all batches."""
        return self._total_committed

    async def record_success(self, key: str | None = None) -> int:
        """Record a successful write, committing once the batch is full.

        Args:
            key: Identifies the written record if it has to be reported
                as lost by ``discard_uncommitted``

        Returns:
            Number of writes committed (0 if the batch is not full yet)
        """
        self._uncommitted_count += 1
        if key is not None:
            self._uncommitted_keys.append(key)
        if self._uncommitted_count >= self._batch_size:
            return await self.commit()
        return 0

    async def commit(self) -> int:
        """Commit the session now, whatever the pending count.

        A failed commit rolls the session back before the write lock is
        released.

        Raises:
            PersistenceError: If the commit fails

        Returns:
            Number of recorded writes the commit covered
        """
        lock: Any = self._write_lock if self._write_lock is not None else nullcontext()
        async with lock:
            try:
                await self._session.commit()
            except SQLAlchemyError as e:
                await self._session.rollback()
                raise PersistenceError(f"Commit failed: {e}") from e

        committed = self._uncommitted_count
        self._total_committed += committed
        self._uncommitted_count = 0
        self._uncommitted_keys = []

        logger.debug(
            "Committed batch of {} items (total: {})",
            committed,
            self._total_committed,
        )
        return committed

    async def finalize(self) -> int:
        """Commit any writes recorded since the last commit.

        Returns:
            Number of writes committed (0 if nothing pending)
        """
        if self._uncommitted_count == 0:
            return 0
        return await self.commit()

    def discard_uncommitted(self) -> list[str]:
        """Forget the writes lost to a rollback of the shared session.

        Returns:
            Keys recorded since the last commit
        """
        lost = self._uncommitted_keys
        if self._uncommitted_count:
            logger.warning("{} uncommitted writes rolled back", self._uncommitted_count)
        self._uncommitted_keys = []
        self._uncommitted_count = 0
        return lost
