"""Funding dashboard commands."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

import typer

from shoal.core.models.funding import FundingDashboardData
from shoal.core.services.dashboard import DashboardService

from .utils import build_dashboard_service, load_input_records, render_rows, run_service

funding_app = typer.Typer(help="Venture funding analytics.")

SUMMARY_COLUMNS = [
    "total_raised",
    "active_deals",
    "avg_round_size",
    "last_30_days_raised",
    "last_30_days_deals",
    "unparsed_amounts",
    "unparsed_dates",
]
INVESTOR_COLUMNS = ["investor", "total_invested", "deals", "recent_deals"]
CATEGORY_COLUMNS = ["category", "total", "percentage", "deals", "trend", "direction"]
MONTHLY_COLUMNS = ["month", "total", "billions"]

InputOption = typer.Option(None, "--input", "-i", help="Raw funding JSON array to process offline.")


def register(app: typer.Typer) -> None:
    """Register funding commands on the root CLI application."""

    app.add_typer(funding_app, name="funding", help="Venture funding analytics")


def get_dashboard_service() -> DashboardService:
    """Factory hook returning a configured :class:`DashboardService`."""

    return build_dashboard_service()


def _load_dashboard(input_path: Path | None) -> FundingDashboardData:
    records = load_input_records(input_path)
    return run_service(get_dashboard_service, lambda service: service.funding_dashboard(records))


@funding_app.command("summary")
def summary_command(ctx: typer.Context, input_path: Path | None = InputOption) -> None:
    """Headline totals across all rounds."""

    dashboard = _load_dashboard(input_path)
    row = {
        "total_raised": dashboard.total_raised,
        "active_deals": dashboard.active_deals,
        "avg_round_size": dashboard.avg_round_size,
        "last_30_days_raised": dashboard.last_30_days.total_raised,
        "last_30_days_deals": dashboard.last_30_days.deal_count,
        "unparsed_amounts": dashboard.data_quality.unparsed_amounts,
        "unparsed_dates": dashboard.data_quality.unparsed_dates,
    }
    render_rows(ctx, [row], SUMMARY_COLUMNS)


@funding_app.command("investors")
def investors_command(ctx: typer.Context, input_path: Path | None = InputOption) -> None:
    """Most active investors by capital deployed."""

    dashboard = _load_dashboard(input_path)
    rows: list[Mapping[str, object]] = [
        {
            "investor": investor.name,
            "total_invested": investor.total_invested_display,
            "deals": investor.deal_count,
            "recent_deals": investor.recent_deals,
        }
        for investor in dashboard.most_active_investors
    ]
    render_rows(ctx, rows, INVESTOR_COLUMNS)


@funding_app.command("categories")
def categories_command(
    ctx: typer.Context,
    input_path: Path | None = InputOption,
    recent: bool = typer.Option(False, "--recent", help="Show the last 90 days across every sector."),
) -> None:
    """Funding split by sector, with snapshot trends when available."""

    dashboard = _load_dashboard(input_path)
    categories = dashboard.last_90_days_categories if recent else dashboard.trending_categories
    rows: list[Mapping[str, object]] = [
        {
            "category": category.category,
            "total": category.total_amount_display,
            "percentage": round(category.percentage, 1),
            "deals": category.deal_count,
            "trend": category.trend_display,
            "direction": category.trend_direction.value if category.trend_direction else None,
        }
        for category in categories
    ]
    render_rows(ctx, rows, CATEGORY_COLUMNS)


@funding_app.command("monthly")
def monthly_command(ctx: typer.Context, input_path: Path | None = InputOption) -> None:
    """Capital raised per calendar month, most recent first."""

    dashboard = _load_dashboard(input_path)
    rows: list[Mapping[str, object]] = [
        {"month": month.month, "total": month.display_total, "billions": month.total}
        for month in dashboard.monthly_funding
    ]
    render_rows(ctx, rows, MONTHLY_COLUMNS)


__all__ = [
    "categories_command",
    "funding_app",
    "get_dashboard_service",
    "investors_command",
    "monthly_command",
    "register",
    "summary_command",
]
