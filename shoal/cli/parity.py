"""Exchange parity commands."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

import typer

from shoal.core.models.parity import ComparisonMode, ParityDashboardData
from shoal.core.services.dashboard import DashboardService
from shoal.core.services.parity import (
    filter_tokens,
    filter_tokens_by_comparison,
    resolve_exchange_key,
)

from .constants import VALIDATION_EXIT_CODE
from .utils import build_dashboard_service, emit_error, load_input_records, render_rows, run_service

parity_app = typer.Typer(help="Token coverage across exchanges.")

COVERAGE_COLUMNS = ["symbol", "name", "coverage", "percentage", "on_base", "missing"]
OVERVIEW_COLUMNS = [
    "base_exchange",
    "total_tokens",
    "tokens_missing",
    "average_coverage",
    "exclusive_listings",
    "coverage_rate",
    "top_missing",
]

InputOption = typer.Option(None, "--input", "-i", help="Raw parity JSON array to process offline.")
BaseExchangeOption = typer.Option(None, "--base-exchange", "-b", help="Exchange to measure coverage against.")


def register(app: typer.Typer) -> None:
    """Register parity commands on the root CLI application."""

    app.add_typer(parity_app, name="parity", help="Token coverage across exchanges")


def get_dashboard_service() -> DashboardService:
    """Factory hook returning a configured :class:`DashboardService`."""

    return build_dashboard_service()


def _load_dashboard(input_path: Path | None, base_exchange: str | None) -> ParityDashboardData:
    records = load_input_records(input_path)
    return run_service(
        get_dashboard_service,
        lambda service: service.parity_dashboard(records, base_exchange=base_exchange),
    )


def _validate_exchanges(names: list[str], option: str) -> None:
    unknown = [name for name in names if resolve_exchange_key(name) is None]
    if unknown:
        emit_error(
            f"Unknown exchange(s): {', '.join(unknown)}",
            "INVALID_EXCHANGE",
            details={"option": option, "exchanges": unknown},
        )
        raise typer.Exit(code=VALIDATION_EXIT_CODE)


@parity_app.command("coverage")
def coverage_command(
    ctx: typer.Context,
    input_path: Path | None = InputOption,
    base_exchange: str | None = BaseExchangeOption,
    missing_from: list[str] = typer.Option([], "--missing-from", help="Keep tokens missing from any of these exchanges."),
    primary: str | None = typer.Option(None, "--primary", help="Primary exchange for a comparison."),
    compare: list[str] = typer.Option([], "--compare", help="Exchanges to compare the primary against."),
    mode: ComparisonMode = typer.Option(ComparisonMode.OPPORTUNITY, "--mode", case_sensitive=False),
    search: str | None = typer.Option(None, "--search", "-s", help="Case-insensitive name or symbol filter."),
    limit: int = typer.Option(50, "--limit", min=1, help="Maximum rows to show."),
) -> None:
    """Per-token coverage, optionally filtered by missing or compared exchanges."""

    _validate_exchanges(missing_from, "--missing-from")
    _validate_exchanges(compare, "--compare")
    if compare and primary is None:
        emit_error("--compare requires --primary", "INVALID_COMPARISON")
        raise typer.Exit(code=VALIDATION_EXIT_CODE)
    if primary is not None:
        _validate_exchanges([primary], "--primary")

    dashboard = _load_dashboard(input_path, base_exchange)
    if primary is not None:
        tokens = filter_tokens_by_comparison(dashboard.tokens, primary, compare, search, mode)
    else:
        tokens = filter_tokens(dashboard.tokens, missing_from, search)

    rows: list[Mapping[str, object]] = [
        {
            "symbol": token.symbol,
            "name": token.name,
            "coverage": token.coverage_ratio,
            "percentage": token.coverage_percentage,
            "on_base": token.is_on_base,
            "missing": token.missing_exchanges,
        }
        for token in tokens[:limit]
    ]
    render_rows(ctx, rows, COVERAGE_COLUMNS)


@parity_app.command("overview")
def overview_command(
    ctx: typer.Context,
    input_path: Path | None = InputOption,
    base_exchange: str | None = BaseExchangeOption,
) -> None:
    """Aggregate coverage statistics."""

    dashboard = _load_dashboard(input_path, base_exchange)
    overview = dashboard.coverage_overview
    row = {
        "base_exchange": dashboard.base_exchange,
        "total_tokens": overview.total_tokens,
        "tokens_missing": overview.tokens_missing,
        "average_coverage": overview.average_coverage,
        "exclusive_listings": overview.exclusive_listings,
        "coverage_rate": overview.coverage_rate,
        "top_missing": [
            f"{item.exchange} ({item.missing_count}, {item.percentage}%)"
            for item in overview.top_missing_exchanges
        ],
    }
    render_rows(ctx, [row], OVERVIEW_COLUMNS)


__all__ = ["coverage_command", "get_dashboard_service", "overview_command", "parity_app", "register"]
