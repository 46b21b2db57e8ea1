from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from shoal.cli import parity as parity_module
from shoal.cli.main import create_app
from shoal.core.client.samples import sample_parity_records
from shoal.core.services.dashboard import DashboardService


@pytest.fixture(autouse=True)
def offline_service(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(parity_module, "get_dashboard_service", lambda: DashboardService())


@pytest.fixture()
def parity_path(write_json):
    return str(write_json(sample_parity_records()))


def _rows(output: str) -> list[dict[str, object]]:
    return [json.loads(line) for line in output.splitlines() if line.strip()]


def test_coverage_against_base_exchange(runner: CliRunner, parity_path: str) -> None:
    cli_result = runner.invoke(
        create_app(),
        ["-f", "jsonl", "parity", "coverage", "-i", parity_path, "--base-exchange", "Binance"],
    )

    assert cli_result.exit_code == 0, cli_result.output
    rows = {row["symbol"]: row for row in _rows(cli_result.stdout)}
    assert rows["BTC"]["coverage"] == "8/8"
    assert rows["TINY"]["on_base"] is False
    assert "Binance" not in rows["JUP"]["missing"]


def test_coverage_missing_from_filter(runner: CliRunner, parity_path: str) -> None:
    cli_result = runner.invoke(
        create_app(),
        ["-f", "jsonl", "parity", "coverage", "-i", parity_path, "--missing-from", "Coinbase"],
    )

    assert cli_result.exit_code == 0, cli_result.output
    assert [row["symbol"] for row in _rows(cli_result.stdout)] == ["WIF", "TINY"]


def test_coverage_comparison_modes(runner: CliRunner, parity_path: str) -> None:
    base_args = ["-f", "jsonl", "parity", "coverage", "-i", parity_path, "--primary", "Coinbase"]

    opportunity = runner.invoke(create_app(), [*base_args, "--compare", "Binance"])
    gap = runner.invoke(create_app(), [*base_args, "--compare", "Kraken", "--mode", "gap"])

    assert opportunity.exit_code == 0, opportunity.output
    assert [row["symbol"] for row in _rows(opportunity.stdout)] == ["WIF"]
    assert gap.exit_code == 0, gap.output
    assert [row["symbol"] for row in _rows(gap.stdout)] == ["JUP"]


def test_coverage_search_and_limit(runner: CliRunner, parity_path: str) -> None:
    searched = runner.invoke(create_app(), ["-f", "jsonl", "parity", "coverage", "-i", parity_path, "-s", "jup"])
    limited = runner.invoke(create_app(), ["-f", "jsonl", "parity", "coverage", "-i", parity_path, "--limit", "2"])

    assert [row["symbol"] for row in _rows(searched.stdout)] == ["JUP"]
    assert len(_rows(limited.stdout)) == 2


def test_unknown_exchange_is_rejected(runner: CliRunner, parity_path: str) -> None:
    cli_result = runner.invoke(create_app(), ["parity", "coverage", "-i", parity_path, "--missing-from", "Nowhere"])

    assert cli_result.exit_code == 2
    assert "INVALID_EXCHANGE" in cli_result.output


def test_compare_requires_primary(runner: CliRunner, parity_path: str) -> None:
    cli_result = runner.invoke(create_app(), ["parity", "coverage", "-i", parity_path, "--compare", "Binance"])

    assert cli_result.exit_code == 2
    assert "INVALID_COMPARISON" in cli_result.output


def test_overview(runner: CliRunner, parity_path: str) -> None:
    cli_result = runner.invoke(create_app(), ["-f", "jsonl", "parity", "overview", "-i", parity_path])

    assert cli_result.exit_code == 0, cli_result.output
    (row,) = _rows(cli_result.stdout)
    assert row["base_exchange"] == "all"
    assert row["total_tokens"] == 4
    assert row["tokens_missing"] == 3
    assert row["exclusive_listings"] == 1
