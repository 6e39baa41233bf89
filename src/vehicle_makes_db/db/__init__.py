"""Database module for Vehicle Makes DB."""

from vehicle_makes_db.db.engine import (
    create_tables,
    dispose_engine,
    get_engine,
    get_session,
    get_session_factory,
)
from vehicle_makes_db.db.models import Base, VehicleMake
from vehicle_makes_db.db.repositories import BaseRepository, MakeRepository

__all__ = [
    # Models
    "Base",
    "VehicleMake",
    # Engine
    "create_tables",
    "dispose_engine",
    "get_engine",
    "get_session",
    "get_session_factory",
    # Repositories
    "BaseRepository",
    "MakeRepository",
]
