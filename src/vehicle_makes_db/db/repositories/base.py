"""Base repository pattern implementation for async SQLAlchemy.

Provides common session handling and CRUD operations that can be
shared across all repositories.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager, nullcontext
from typing import Any, Generic, TypeVar

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from vehicle_makes_db.db.models import Base
from vehicle_makes_db.exceptions import PersistenceError

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """Base repository with common async session handling.

    Concurrency:
        When multiple coroutines share the same session (e.g., while types
        are loaded for several makes at once), pass a shared write_lock.
        Every session operation of the repository then runs under the lock,
        which also serializes it with CommitManager commits.

    Errors:
        SQLAlchemy failures surface as PersistenceError.
    """

    def __init__(
        self,
        session: AsyncSession,
        model_class: type[ModelT],
        write_lock: asyncio.Lock | None = None,
    ) -> None:
        """Initialize the repository with a session.

        Args:
            session: Async SQLAlchemy session (caller manages lifecycle)
            model_class: The SQLAlchemy model class this repository manages
            write_lock: Optional lock to serialize session use (shared across repos)
        """
        self._session = session
        self._model_class = model_class
        self._write_lock = write_lock

    @asynccontextmanager
    async def _guard(
        self, operation: str, *, rollback_on_error: bool = False
    ) -> AsyncIterator[None]:
        """Hold the write lock (if any) and translate store errors.

        With ``rollback_on_error`` a failed operation also rolls the session
        back before the lock is released, so no other coroutine sees the
        session in its failed state.
        """
        lock: Any = self._write_lock if self._write_lock is not None else nullcontext()
        async with lock:
            try:
                yield
            except SQLAlchemyError as e:
                if rollback_on_error:
                    await self._session.rollback()
                raise PersistenceError(f"{operation} failed: {e}") from e

    # -------------------------------------------------------------------------
    # Common Read Operations
    # -------------------------------------------------------------------------

    async def _get_by_field(self, field_name: str, value: object) -> ModelT | None:
        """Get an entity by a specific field value.

        Caller must already hold the guard.
        """
        stmt = select(self._model_class).where(
            getattr(self._model_class, field_name) == value
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_all(self) -> list[ModelT]:
        """Get all entities in insertion order."""
        async with self._guard(f"Reading {self._model_class.__tablename__}"):
            stmt = select(self._model_class).order_by(self._model_class.id)  # type: ignore[attr-defined]
            result = await self._session.execute(stmt)
            return list(result.scalars().all())

    async def count(self) -> int:
        """Count total entities of this type."""
        async with self._guard(f"Counting {self._model_class.__tablename__}"):
            stmt = select(func.count()).select_from(self._model_class)
            result = await self._session.execute(stmt)
            return result.scalar() or 0

    # -------------------------------------------------------------------------
    # Transaction control
    # -------------------------------------------------------------------------

    async def rollback(self) -> None:
        """Discard uncommitted changes of the shared session."""
        async with self._guard("Rollback"):
            await self._session.rollback()
