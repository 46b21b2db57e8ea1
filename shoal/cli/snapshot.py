"""Daily snapshot collection commands."""

from __future__ import annotations

from pathlib import Path

import typer

from shoal.core.models.snapshots import SnapshotResult
from shoal.core.services.dashboard import DashboardService

from .utils import build_dashboard_service, load_input_records, render_rows, run_service

snapshot_app = typer.Typer(help="Daily snapshots backing trend calculation.")
collect_app = typer.Typer(help="Collect today's snapshots.")
snapshot_app.add_typer(collect_app, name="collect")

RESULT_COLUMNS = ["dataset", "date", "processed", "created", "deleted"]

InputOption = typer.Option(None, "--input", "-i", help="Raw JSON array to snapshot instead of fetching.")


def register(app: typer.Typer) -> None:
    """Register snapshot commands on the root CLI application."""

    app.add_typer(snapshot_app, name="snapshot", help="Daily snapshots for trends")


def get_dashboard_service() -> DashboardService:
    """Factory hook returning a service with the snapshot store attached."""

    return build_dashboard_service(with_store=True)


def _render(ctx: typer.Context, dataset: str, result: SnapshotResult) -> None:
    row = {
        "dataset": dataset,
        "date": result.snapshot_date.isoformat(),
        "processed": result.processed,
        "created": result.created,
        "deleted": result.deleted,
    }
    render_rows(ctx, [row], RESULT_COLUMNS)


@collect_app.command("funding")
def collect_funding_command(ctx: typer.Context, input_path: Path | None = InputOption) -> None:
    """Store today's funding totals per sector."""

    records = load_input_records(input_path)
    result = run_service(get_dashboard_service, lambda service: service.collect_funding_snapshot(records))
    _render(ctx, "funding", result)


@collect_app.command("listings")
def collect_listings_command(ctx: typer.Context, input_path: Path | None = InputOption) -> None:
    """Store today's exchange counts per ticker."""

    records = load_input_records(input_path)
    result = run_service(get_dashboard_service, lambda service: service.collect_listing_snapshot(records))
    _render(ctx, "listings", result)


__all__ = [
    "collect_app",
    "collect_funding_command",
    "collect_listings_command",
    "get_dashboard_service",
    "register",
    "snapshot_app",
]
