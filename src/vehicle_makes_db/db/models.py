"""SQLAlchemy ORM models for Vehicle Makes DB."""

from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import JSON


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


# ------------------------------------------------------------------------------
# VehicleMake model
# ------------------------------------------------------------------------------
class VehicleMake(Base):
    """Persisted make with its vehicle types embedded as a JSON array."""

    __tablename__ = "vehicle_makes"

    # Internal key, never exposed to consumers
    id: Mapped[int] = mapped_column(primary_key=True)

    make_id: Mapped[str] = mapped_column(String(32), unique=True, index=True)
    make_name: Mapped[str] = mapped_column(String(255))

    # [{"type_id": "2", "type_name": "Passenger Car"}, ...]
    vehicle_types: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<VehicleMake(make_id='{self.make_id}', types={len(self.vehicle_types or [])})>"
