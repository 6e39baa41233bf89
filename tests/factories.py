"""Factory helpers for ORM rows and schema objects in tests."""

from sqlalchemy.ext.asyncio import AsyncSession

from vehicle_makes_db.db.models import VehicleMake
from vehicle_makes_db.schemas import Make, VehicleType


def vehicle_types(*pairs: tuple[str, str]) -> list[VehicleType]:
    """Build VehicleTypes from (type_id, type_name) pairs."""
    return [VehicleType(type_id=type_id, type_name=name) for type_id, name in pairs]


def make(make_id: str, make_name: str | None = None, *types: tuple[str, str]) -> Make:
    """Build a Make; the name defaults to ``MAKE <id>``."""
    return Make(
        make_id=make_id,
        make_name=make_name or f"MAKE {make_id}",
        vehicle_types=vehicle_types(*types),
    )


def add_vehicle_make(
    session: AsyncSession,
    make_id: str = "440",
    make_name: str = "ASTON MARTIN",
    types: list[VehicleType] | None = None,
) -> VehicleMake:
    """Add a VehicleMake row to the session (not flushed)."""
    row = VehicleMake(
        make_id=make_id,
        make_name=make_name,
        vehicle_types=[vt.model_dump() for vt in types or []],
    )
    session.add(row)
    return row
