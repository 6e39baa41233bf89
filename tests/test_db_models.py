"""Tests for SQLAlchemy ORM models."""

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from vehicle_makes_db.db.models import VehicleMake
from vehicle_makes_db.schemas import Make
from tests.factories import add_vehicle_make, vehicle_types


class TestVehicleMakeModel:
    async def test_create_vehicle_make(self, db_session):
        add_vehicle_make(db_session, "440", "ASTON MARTIN", vehicle_types(("2", "Passenger Car")))
        await db_session.flush()

        result = await db_session.execute(select(VehicleMake).where(VehicleMake.make_id == "440"))
        fetched = result.scalar_one()

        assert fetched.make_name == "ASTON MARTIN"
        assert fetched.vehicle_types == [{"type_id": "2", "type_name": "Passenger Car"}]

    async def test_vehicle_types_default_to_empty(self, db_session):
        row = VehicleMake(make_id="441", make_name="TESLA")
        db_session.add(row)
        await db_session.flush()

        assert row.vehicle_types == []

    async def test_make_id_is_unique(self, db_session):
        add_vehicle_make(db_session, "440", "ASTON MARTIN")
        await db_session.flush()

        add_vehicle_make(db_session, "440", "ASTON MARTIN LAGONDA")

        with pytest.raises(IntegrityError):
            await db_session.flush()

    async def test_row_converts_to_schema(self, db_session):
        row = add_vehicle_make(
            db_session, "440", "ASTON MARTIN", vehicle_types(("2", "Passenger Car"), ("3", "Truck"))
        )
        await db_session.flush()

        make = Make.from_orm(row)

        assert make.make_id == "440"
        assert [vt.type_name for vt in make.vehicle_types] == ["Passenger Car", "Truck"]

    def test_repr(self):
        row = VehicleMake(make_id="440", make_name="ASTON MARTIN", vehicle_types=[])

        assert repr(row) == "<VehicleMake(make_id='440', types=0)>"
