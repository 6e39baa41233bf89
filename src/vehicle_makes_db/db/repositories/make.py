"""Repository for VehicleMake CRUD operations.

Implements the store operations the sync pipeline relies on:
find_all, upsert_one, upsert_many and delete_one.
"""

import asyncio
from collections.abc import Iterable, Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from vehicle_makes_db.db.models import VehicleMake
from vehicle_makes_db.schemas import Make, MakeUpsert

from .base import BaseRepository


class MakeRepository(BaseRepository[VehicleMake]):
    """Repository for persisted makes, keyed by ``make_id``.

    Writes are flushed but not committed; commit boundaries belong to the
    caller (see CommitManager).
    """

    def __init__(
        self,
        session: AsyncSession,
        write_lock: asyncio.Lock | None = None,
    ) -> None:
        super().__init__(session, VehicleMake, write_lock)

    # -------------------------------------------------------------------------
    # Query Methods
    # -------------------------------------------------------------------------

    async def find_all(self) -> list[Make]:
        """Return the full snapshot as Make records.

        Internal columns (row id, timestamps) are not part of the result.
        """
        rows = await self.get_all()
        return Make.from_orm_list(rows)

    async def find_by_make_ids(self, make_ids: Iterable[str]) -> list[Make]:
        """Return the persisted makes whose ids are in ``make_ids``."""
        wanted = list(make_ids)
        if not wanted:
            return []
        async with self._guard("Reading makes by id"):
            stmt = (
                select(VehicleMake)
                .where(VehicleMake.make_id.in_(wanted))
                .order_by(VehicleMake.id)
            )
            result = await self._session.execute(stmt)
            rows = list(result.scalars().all())
        return Make.from_orm_list(rows)

    async def get_by_make_id(self, make_id: str) -> Make | None:
        """Get a single make by its vPIC id."""
        async with self._guard(f"Reading make {make_id}"):
            row = await self._get_by_field("make_id", make_id)
        return Make.from_orm(row) if row is not None else None

    # -------------------------------------------------------------------------
    # Write Methods
    # -------------------------------------------------------------------------

    async def upsert_one(self, make: MakeUpsert) -> bool:
        """Insert or update one make by ``make_id``.

        Fields set to None on the write are left untouched on an existing
        row (see MakeUpsert). A failed flush rolls back every uncommitted
        write of the session.

        Returns:
            True if a new row was created, False if an existing row was updated
        """
        async with self._guard(f"Upserting make {make.make_id}", rollback_on_error=True):
            created = await self._apply(make)
            await self._session.flush()
        return created

    async def upsert_many(self, makes: Sequence[MakeUpsert]) -> int:
        """Insert or update several makes keyed by ``make_id``.

        Each write is flushed before the next one is looked up, so a repeated
        id updates the row its first occurrence created.

        Returns:
            Number of rows created
        """
        created = 0
        async with self._guard(f"Upserting {len(makes)} makes"):
            for make in makes:
                if await self._apply(make):
                    created += 1
                await self._session.flush()
        return created

    async def delete_one(self, make_id: str) -> bool:
        """Delete the make with the given id.

        Returns:
            True if a row was deleted
        """
        async with self._guard(f"Deleting make {make_id}"):
            result = await self._session.execute(
                delete(VehicleMake).where(VehicleMake.make_id == make_id)
            )
        return bool(result.rowcount)

    async def _apply(self, make: MakeUpsert) -> bool:
        row = await self._get_by_field("make_id", make.make_id)
        types = (
            [vt.model_dump() for vt in make.vehicle_types]
            if make.vehicle_types is not None
            else None
        )

        if row is None:
            self._session.add(
                VehicleMake(
                    make_id=make.make_id,
                    make_name=make.make_name,
                    vehicle_types=types or [],
                )
            )
            return True

        row.make_name = make.make_name
        if types is not None:
            row.vehicle_types = types
        return False
