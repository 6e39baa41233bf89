"""Tests for SyncOrchestrator against a real (in-memory) store."""

import asyncio
from unittest.mock import AsyncMock

import httpx
import pytest

from vehicle_makes_db.config import PacingConfig, SyncConfig, VPICConfig
from vehicle_makes_db.db.repositories import MakeRepository
from vehicle_makes_db.exceptions import NetworkError, PersistenceError
from vehicle_makes_db.schemas import MakeUpsert
from vehicle_makes_db.sync import CommitManager, SyncOrchestrator, check_make_count
from vehicle_makes_db.vpic import VPICClient
from tests.factories import add_vehicle_make, make, vehicle_types
from tests.fixtures import FakeVPICClient, makes_document, network_error, types_document

NO_DELAY = PacingConfig(max_concurrent_requests=5, batch_delay_seconds=0)


def build_orchestrator(client, session, write_lock, **sync_options) -> SyncOrchestrator:
    return SyncOrchestrator(
        client=client,
        repository=MakeRepository(session, write_lock),
        commit_manager=CommitManager(session, write_lock),
        pacing=NO_DELAY,
        sync_config=SyncConfig(**sync_options),
    )


async def snapshot(session_factory) -> dict[str, list[str]]:
    """Committed store content as make id -> type ids."""
    async with session_factory() as session:
        makes = await MakeRepository(session).find_all()
    return {m.make_id: [vt.type_id for vt in m.vehicle_types] for m in makes}


class TestRunSync:
    async def test_reconciles_and_loads_types(
        self, db_session, session_factory, write_lock
    ):
        # Store: A[T1], B[], D[T2]; remote: A, B, C; A's type fetch fails
        add_vehicle_make(db_session, "A", "ALPHA", vehicle_types(("T1", "Passenger Car")))
        add_vehicle_make(db_session, "B", "BRAVO")
        add_vehicle_make(db_session, "D", "DELTA", vehicle_types(("T2", "Truck")))
        await db_session.commit()

        client = FakeVPICClient(
            [make("A", "ALPHA"), make("B", "BRAVO"), make("C", "CHARLIE")],
            types={
                "A": network_error("A"),
                "B": vehicle_types(("T3", "Bus")),
                "C": vehicle_types(("T4", "Motorcycle"), ("T5", "Trailer")),
            },
        )
        orchestrator = build_orchestrator(client, db_session, write_lock)

        result = await orchestrator.run_sync()

        assert await snapshot(session_factory) == {
            "A": ["T1"],
            "B": ["T3"],
            "C": ["T4", "T5"],
        }
        assert result.makes_fetched == 3
        assert result.deleted == 1
        assert result.created == 1
        assert result.type_load.failed == 1
        assert result.type_load.failed_makes[0][0] == "A"
        assert [vt.type_id for vt in result.makes["A"].vehicle_types] == ["T1"]
        assert result.self_check is not None
        assert result.self_check.passed

    async def test_idempotent(self, db_session, session_factory, write_lock):
        client = FakeVPICClient(
            [make("1"), make("2"), make("3")],
            types={"1": vehicle_types(("2", "Car")), "3": vehicle_types(("3", "Truck"))},
        )
        orchestrator = build_orchestrator(client, db_session, write_lock)

        await orchestrator.run_sync()
        first = await snapshot(session_factory)
        second_result = await orchestrator.run_sync()

        assert await snapshot(session_factory) == first
        assert second_result.created == 0
        assert second_result.deleted == 0

    async def test_shell_write_never_clears_loaded_types(
        self, db_session, session_factory, write_lock
    ):
        add_vehicle_make(db_session, "A", "ALPHA", vehicle_types(("T1", "Car")))
        await db_session.commit()
        client = FakeVPICClient([make("A", "ALPHA")], types={"A": network_error("A")})
        orchestrator = build_orchestrator(client, db_session, write_lock)

        await orchestrator.run_sync()

        assert await snapshot(session_factory) == {"A": ["T1"]}

    async def test_fetch_failure_aborts_and_keeps_store(
        self, db_session, session_factory, write_lock
    ):
        add_vehicle_make(db_session, "A", "ALPHA")
        await db_session.commit()
        client = FakeVPICClient()
        client.get_all_makes = AsyncMock(side_effect=NetworkError("vPIC unreachable"))
        orchestrator = build_orchestrator(client, db_session, write_lock)

        with pytest.raises(NetworkError):
            await orchestrator.run_sync()

        assert await snapshot(session_factory) == {"A": []}
        assert client.type_requests == []

    async def test_persist_failure_rolls_back(
        self, db_session, session_factory, write_lock, monkeypatch
    ):
        add_vehicle_make(db_session, "A", "ALPHA")
        add_vehicle_make(db_session, "D", "DELTA")
        await db_session.commit()
        client = FakeVPICClient([make("A", "ALPHA"), make("B", "BRAVO")])
        orchestrator = build_orchestrator(client, db_session, write_lock)

        async def failing_upsert_many(_writes):
            raise PersistenceError("disk full")

        monkeypatch.setattr(orchestrator._repository, "upsert_many", failing_upsert_many)

        with pytest.raises(PersistenceError):
            await orchestrator.run_sync()

        # The delete of D was rolled back with the failed upserts
        assert await snapshot(session_factory) == {"A": [], "D": []}
        assert client.type_requests == []

    async def test_self_check_mismatch_is_not_fatal(self, db_session, write_lock):
        client = FakeVPICClient([make("1"), make("2")], make_count=5)
        orchestrator = build_orchestrator(client, db_session, write_lock)

        result = await orchestrator.run_sync()

        assert result.self_check is not None
        assert result.self_check.passed is False
        assert result.self_check.remote_count == 5
        assert result.self_check.stored_count == 2

    async def test_self_check_error_is_recorded(self, db_session, write_lock):
        client = FakeVPICClient([make("1")])
        client.get_make_count = AsyncMock(side_effect=NetworkError("timed out"))
        orchestrator = build_orchestrator(client, db_session, write_lock)

        result = await orchestrator.run_sync()

        assert result.self_check is not None
        assert result.self_check.error == "timed out"
        assert result.self_check.passed is False

    async def test_self_check_can_be_disabled(self, db_session, write_lock):
        client = FakeVPICClient([make("1")])
        orchestrator = build_orchestrator(client, db_session, write_lock, self_check=False)

        result = await orchestrator.run_sync()

        assert result.self_check is None
        result = await orchestrator.run_sync(self_check=True)
        assert result.self_check is not None

    async def test_max_makes_from_config_and_override(self, db_session, write_lock):
        makes = [make(str(i)) for i in range(6)]
        client = FakeVPICClient(makes)
        orchestrator = build_orchestrator(client, db_session, write_lock, max_makes=2)

        result = await orchestrator.run_sync()
        assert result.type_load.attempted == 2

        result = await orchestrator.run_sync(max_makes=4)
        assert result.type_load.attempted == 4

    async def test_stop_event_skips_type_loading(self, db_session, session_factory, write_lock):
        stop_event = asyncio.Event()
        stop_event.set()
        client = FakeVPICClient([make("1"), make("2")])
        orchestrator = build_orchestrator(client, db_session, write_lock)

        result = await orchestrator.run_sync(stop_event)

        # Shells are still persisted; type loading and self-check are skipped
        assert await snapshot(session_factory) == {"1": [], "2": []}
        assert result.type_load.stopped
        assert result.self_check is None

    async def test_result_to_dict(self, db_session, write_lock):
        client = FakeVPICClient([make("1")], types={"1": network_error("1")})
        orchestrator = build_orchestrator(client, db_session, write_lock)

        data = (await orchestrator.run_sync()).to_dict()

        assert data["makes_fetched"] == 1
        assert data["type_load"]["failed_makes"][0]["make_id"] == "1"
        assert data["self_check"]["passed"] is True
        assert "makes" not in data


class TestCheckMakeCount:
    async def test_counts_match(self, make_repository):
        await make_repository.upsert_one(MakeUpsert(make_id="1", make_name="A"))

        check = await check_make_count(FakeVPICClient([make("1")]), make_repository)

        assert check.passed
        assert check.to_dict() == {
            "passed": True,
            "remote_count": 1,
            "stored_count": 1,
            "error": None,
        }


class TestEndToEnd:
    """Full run through VPICClient, markup parsing and the store."""

    async def test_sync_over_http(self, db_session, session_factory, write_lock):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/getallmakes"):
                return httpx.Response(
                    200, content=makes_document([("440", "ASTON MARTIN"), ("441", "TESLA")])
                )
            make_id = request.url.path.rsplit("/", 1)[-1]
            if make_id == "440":
                return httpx.Response(200, content=types_document([("2", "Passenger Car")]))
            return httpx.Response(
                200,
                content=types_document(
                    [("2", "Passenger Car"), ("7", "Multipurpose Passenger Vehicle (MPV)")],
                    make_id="441",
                    make_name="TESLA",
                ),
            )

        client = VPICClient(
            config=VPICConfig(base_url="https://vpic.test/api/vehicles"),
            transport=httpx.MockTransport(handler),
        )
        async with client:
            orchestrator = build_orchestrator(client, db_session, write_lock)
            result = await orchestrator.run_sync()

        assert await snapshot(session_factory) == {"440": ["2"], "441": ["2", "7"]}
        assert result.self_check is not None
        assert result.self_check.passed
