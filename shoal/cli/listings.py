"""Exchange listing commands."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

import typer

from shoal.core.models.listings import ListingsDashboardData
from shoal.core.services.dashboard import DashboardService

from .utils import build_dashboard_service, load_input_records, render_rows, run_service

listings_app = typer.Typer(help="New exchange listings.")

SUMMARY_COLUMNS = ["metric", "value"]
FEED_COLUMNS = ["time", "exchange", "asset", "name", "type", "price"]
TREEMAP_COLUMNS = ["ticker", "exchanges", "size", "change", "color"]

InputOption = typer.Option(None, "--input", "-i", help="Raw listings JSON array to process offline.")


def register(app: typer.Typer) -> None:
    """Register listings commands on the root CLI application."""

    app.add_typer(listings_app, name="listings", help="New exchange listings")


def get_dashboard_service() -> DashboardService:
    """Factory hook returning a configured :class:`DashboardService`."""

    return build_dashboard_service()


def _load_dashboard(input_path: Path | None) -> ListingsDashboardData:
    records = load_input_records(input_path)
    return run_service(get_dashboard_service, lambda service: service.listings_dashboard(records))


@listings_app.command("summary")
def summary_command(ctx: typer.Context, input_path: Path | None = InputOption) -> None:
    """Adoption metric cards."""

    dashboard = _load_dashboard(input_path)
    rows: list[Mapping[str, object]] = [
        {"metric": card.title, "value": card.value} for card in dashboard.adoption_metrics
    ]
    rows.append({"metric": "Unique Tickers", "value": dashboard.total_records})
    render_rows(ctx, rows, SUMMARY_COLUMNS)


@listings_app.command("feed")
def feed_command(ctx: typer.Context, input_path: Path | None = InputOption) -> None:
    """Most recently scraped listings."""

    dashboard = _load_dashboard(input_path)
    rows: list[Mapping[str, object]] = [
        {
            "time": alert.timestamp,
            "exchange": alert.exchange,
            "asset": alert.asset,
            "name": alert.name,
            "type": alert.type,
            "price": alert.price,
        }
        for alert in dashboard.live_listings
    ]
    render_rows(ctx, rows, FEED_COLUMNS)


@listings_app.command("treemap")
def treemap_command(ctx: typer.Context, input_path: Path | None = InputOption) -> None:
    """Tokens ranked by exchange footprint."""

    dashboard = _load_dashboard(input_path)
    rows: list[Mapping[str, object]] = [
        {
            "ticker": cell.ticker,
            "exchanges": cell.exchanges_count,
            "size": cell.size,
            "change": cell.change_type.value,
            "color": cell.fill,
        }
        for cell in dashboard.treemap_data
    ]
    render_rows(ctx, rows, TREEMAP_COLUMNS)


__all__ = [
    "feed_command",
    "get_dashboard_service",
    "listings_app",
    "register",
    "summary_command",
    "treemap_command",
]
