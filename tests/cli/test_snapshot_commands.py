from __future__ import annotations

import json
from datetime import date, datetime
from pathlib import Path

import duckdb
import pytest
from typer.testing import CliRunner

from shoal.cli import snapshot as snapshot_module
from shoal.cli.main import create_app
from shoal.core.data import SnapshotStore
from shoal.core.services.dashboard import DashboardService


class KeepOpenStore(SnapshotStore):
    """Store that survives the command closing its service."""

    def close(self) -> None:
        pass


@pytest.fixture()
def store(monkeypatch: pytest.MonkeyPatch, now: datetime) -> KeepOpenStore:
    snapshot_store = KeepOpenStore(duckdb.connect(":memory:"), clock=lambda: now)
    monkeypatch.setattr(
        snapshot_module,
        "get_dashboard_service",
        lambda: DashboardService(store=snapshot_store, clock=lambda: now),
    )
    return snapshot_store


def _rows(output: str) -> list[dict[str, object]]:
    return [json.loads(line) for line in output.splitlines() if line.strip()]


def test_collect_funding_twice(runner: CliRunner, store: KeepOpenStore, write_json) -> None:
    path = write_json(
        [
            {"Name": "Orbit", "Date": "$10m", "Amount Raised": "05 Aug 2025", "ClassifiedCategory": "DeFi"},
            {"Name": "Synapse", "Date": "$5m", "Amount Raised": "01 Aug 2025", "ClassifiedCategory": "AI"},
        ]
    )
    args = ["-f", "jsonl", "snapshot", "collect", "funding", "-i", str(path)]

    first = runner.invoke(create_app(), args)
    second = runner.invoke(create_app(), args)

    assert first.exit_code == 0, first.output
    assert _rows(first.stdout) == [
        {"dataset": "funding", "date": "2025-08-10", "processed": 15, "created": 15, "deleted": 0}
    ]
    assert _rows(second.stdout)[0]["created"] == 0
    assert len(store.funding_snapshots(date(2025, 8, 10), date(2025, 8, 10))) == 15


def test_collect_listings(runner: CliRunner, store: KeepOpenStore, write_json) -> None:
    path = write_json([{"ticker": "JUP", "all_exchanges": "Binance, OKX"}, {"ticker": "JUP"}])

    cli_result = runner.invoke(create_app(), ["-f", "jsonl", "snapshot", "collect", "listings", "-i", str(path)])

    assert cli_result.exit_code == 0, cli_result.output
    (row,) = _rows(cli_result.stdout)
    assert (row["dataset"], row["processed"], row["created"]) == ("listings", 1, 1)
    (snapshot,) = store.listing_snapshots(date(2025, 8, 10), date(2025, 8, 10))
    assert snapshot.exchange_count == 2


def test_collect_without_store_is_a_configuration_error(
    runner: CliRunner,
    monkeypatch: pytest.MonkeyPatch,
    write_json,
) -> None:
    monkeypatch.setattr(snapshot_module, "get_dashboard_service", lambda: DashboardService())
    path = write_json([])

    cli_result = runner.invoke(create_app(), ["snapshot", "collect", "funding", "-i", str(path)])

    assert cli_result.exit_code == 2
    assert "SHOAL_SNAPSHOT_DB" in cli_result.output


def test_unreadable_snapshot_database_is_a_system_error(
    runner: CliRunner,
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    write_json,
) -> None:
    database = tmp_path / "snapshots.duckdb"
    database.write_text("not a duckdb file", encoding="utf-8")
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("SHOAL_SNAPSHOT_DB", str(database))
    path = write_json([])

    cli_result = runner.invoke(create_app(), ["snapshot", "collect", "funding", "-i", str(path)])

    assert cli_result.exit_code == 1
    payload = json.loads(cli_result.output.strip().splitlines()[-1])
    assert payload["code"] == "SNAPSHOT_ERROR"
    assert payload["details"]["category"] == "STORAGE"
