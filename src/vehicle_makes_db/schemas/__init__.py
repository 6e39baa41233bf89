"""Pydantic schemas for Vehicle Makes DB."""

from .base import SchemaBase
from .make import Make, MakeUpsert, VehicleType

__all__ = [
    "Make",
    "MakeUpsert",
    "SchemaBase",
    "VehicleType",
]
