"""FastAPI dependencies."""

from collections.abc import AsyncIterator

from vehicle_makes_db.db import MakeRepository, get_session


async def get_make_repository() -> AsyncIterator[MakeRepository]:
    """Yield a read repository bound to a request-scoped session."""
    async with get_session() as session:
        yield MakeRepository(session)
