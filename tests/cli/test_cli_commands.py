"""Tests for the vmakes CLI."""

import json
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from typer.testing import CliRunner

from vehicle_makes_db.cli.app import app
from vehicle_makes_db.exceptions import NetworkError
from vehicle_makes_db.logging import reset_logging
from vehicle_makes_db.sync import SelfCheckResult, SyncRunResult, TypeLoadResult
from tests.factories import make

runner = CliRunner()


@pytest.fixture(autouse=True)
def _reset_logging_state():
    yield
    reset_logging()


@pytest.fixture
def fake_session():
    """Replace get_session in CLI modules with a no-op session."""

    @asynccontextmanager
    async def session_cm():
        yield MagicMock()

    with (
        patch("vehicle_makes_db.cli.sync.get_session", session_cm),
        patch("vehicle_makes_db.cli.makes.get_session", session_cm),
        patch("vehicle_makes_db.cli.sync.create_tables", new=AsyncMock()),
        patch("vehicle_makes_db.cli.makes.create_tables", new=AsyncMock()),
    ):
        yield


@pytest.fixture
def sync_result() -> SyncRunResult:
    return SyncRunResult(
        makes_fetched=3,
        created=1,
        upserted=3,
        deleted=1,
        type_load=TypeLoadResult(
            attempted=3,
            succeeded=2,
            failed=1,
            failed_makes=[("440", "vPIC returned HTTP 503")],
        ),
        self_check=SelfCheckResult(remote_count=3, stored_count=3),
    )


class TestGlobalFlags:
    def test_help_shows_flags(self):
        result = runner.invoke(app, ["--help"])

        assert "--verbose" in result.stdout
        assert "--quiet" in result.stdout

    def test_version(self):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert "vmakes version" in result.stdout


class TestSyncRunCommand:
    def test_text_output(self, sync_result):
        with patch(
            "vehicle_makes_db.cli.sync.run_sync_cycle", new=AsyncMock(return_value=sync_result)
        ):
            result = runner.invoke(app, ["sync", "run"])

        assert result.exit_code == 0
        assert "Sync Complete" in result.stdout
        assert "440" in result.stdout
        assert "Self-check passed" in result.stdout

    def test_json_output(self, sync_result):
        with patch(
            "vehicle_makes_db.cli.sync.run_sync_cycle", new=AsyncMock(return_value=sync_result)
        ):
            result = runner.invoke(app, ["sync", "run", "--format", "json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["makes_fetched"] == 3
        assert data["type_load"]["failed"] == 1

    def test_options_are_forwarded(self, sync_result):
        run = AsyncMock(return_value=sync_result)
        with patch("vehicle_makes_db.cli.sync.run_sync_cycle", new=run):
            result = runner.invoke(app, ["sync", "run", "--max", "10", "--no-self-check"])

        assert result.exit_code == 0
        run.assert_awaited_once_with(self_check=False, max_makes=10)

    def test_failure_exits_with_error(self):
        with patch(
            "vehicle_makes_db.cli.sync.run_sync_cycle",
            new=AsyncMock(side_effect=NetworkError("vPIC returned HTTP 503")),
        ):
            result = runner.invoke(app, ["sync", "run"])

        assert result.exit_code == 1
        assert "Sync failed" in result.stdout


class TestSyncCheckCommand:
    def test_passing_check(self, fake_session):
        check = SelfCheckResult(remote_count=10, stored_count=10)
        with patch("vehicle_makes_db.cli.sync.check_make_count", new=AsyncMock(return_value=check)):
            result = runner.invoke(app, ["sync", "check"])

        assert result.exit_code == 0
        assert "10 makes stored" in result.stdout

    def test_mismatch_exits_with_error(self, fake_session):
        check = SelfCheckResult(remote_count=12, stored_count=10)
        with patch("vehicle_makes_db.cli.sync.check_make_count", new=AsyncMock(return_value=check)):
            result = runner.invoke(app, ["sync", "check", "--format", "json"])

        assert result.exit_code == 1
        assert json.loads(result.stdout)["remote_count"] == 12


class TestMakesListCommand:
    @pytest.fixture
    def repository(self, fake_session):
        repo = MagicMock()
        repo.find_all = AsyncMock(
            return_value=[make("440", "ASTON MARTIN", ("2", "Passenger Car")), make("441", "TESLA")]
        )
        with patch("vehicle_makes_db.cli.makes.MakeRepository", return_value=repo):
            yield repo

    def test_table_output(self, repository):
        result = runner.invoke(app, ["makes", "list"])

        assert result.exit_code == 0
        assert "ASTON MARTIN" in result.stdout
        assert "Passenger Car" in result.stdout
        assert "2 makes" in result.stdout

    def test_json_output(self, repository):
        result = runner.invoke(app, ["makes", "list", "--format", "json", "--limit", "1"])

        assert result.exit_code == 0
        assert json.loads(result.stdout) == [
            {
                "makeId": "440",
                "makeName": "ASTON MARTIN",
                "vehicleTypes": [{"typeId": "2", "typeName": "Passenger Car"}],
            }
        ]

    def test_empty_store(self, repository):
        repository.find_all.return_value = []

        result = runner.invoke(app, ["makes", "list"])

        assert result.exit_code == 0
        assert "No makes stored yet" in result.stdout


class TestServeCommand:
    def test_runs_uvicorn_with_overrides(self):
        with patch("vehicle_makes_db.cli.app.uvicorn.run") as run:
            result = runner.invoke(app, ["serve", "--port", "8123", "--no-scheduler"])

        assert result.exit_code == 0
        _, kwargs = run.call_args
        assert kwargs["port"] == 8123
        assert kwargs["host"] == "0.0.0.0"
