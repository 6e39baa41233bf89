"""Repository pattern implementation for database access."""

from .base import BaseRepository
from .make import MakeRepository

__all__ = [
    "BaseRepository",
    "MakeRepository",
]
