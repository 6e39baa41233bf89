"""Pytest configuration and shared fixtures.

Usage Guide:
- For repository/orchestrator tests: use db_session / make_repository
- For markup and client tests: import documents from tests.fixtures.vpic_responses
- For pipeline tests without HTTP: use FakeVPICClient from tests.fixtures.fakes
"""

import asyncio

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from vehicle_makes_db.db.models import Base
from vehicle_makes_db.db.repositories import MakeRepository
from vehicle_makes_db.schemas import Make, VehicleType


# -----------------------------------------------------------------------------
# Database Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
async def test_engine():
    """Create an in-memory SQLite engine for tests.

    Each test gets a fresh database with all tables created.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db_session(session_factory):
    """Create an async session with auto-rollback.

    Uncommitted changes are rolled back after each test.
    """
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def write_lock() -> asyncio.Lock:
    return asyncio.Lock()


@pytest.fixture
def make_repository(db_session, write_lock) -> MakeRepository:
    """MakeRepository on the test session, guarded by the shared write lock."""
    return MakeRepository(db_session, write_lock)


# -----------------------------------------------------------------------------
# Sample Data Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def passenger_car() -> VehicleType:
    return VehicleType(type_id="2", type_name="Passenger Car")


@pytest.fixture
def truck() -> VehicleType:
    return VehicleType(type_id="3", type_name="Truck")


@pytest.fixture
def sample_make(passenger_car) -> Make:
    """A make with one vehicle type loaded."""
    return Make(make_id="440", make_name="ASTON MARTIN", vehicle_types=[passenger_car])


@pytest.fixture
def sample_shell() -> Make:
    """A make whose vehicle types were never loaded."""
    return Make(make_id="441", make_name="TESLA")
