"""Period-over-period trends computed from daily snapshots."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta

from loguru import logger

from shoal.core.models.snapshots import FundingSnapshot, ListingSnapshot
from shoal.core.models.trends import TrendDirection, TrendReading
from shoal.core.services.formatting import format_percent_change
from shoal.core.services.funding import ALL_SECTORS

SECTOR_NEUTRAL_BAND = 5.0
LISTING_NEUTRAL_BAND = 10.0
FUNDING_TREND_DAYS = 7
LISTING_TREND_DAYS = (30, 90)


@dataclass(frozen=True)
class PeriodWindow:
    """Inclusive range of snapshot days."""

    start: date
    end: date

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


@dataclass(frozen=True)
class PeriodWindows:
    current: PeriodWindow
    previous: PeriodWindow


def compute_period_windows(period_days: int, now: datetime | None = None) -> PeriodWindows:
    """Current window runs from the start of ``period_days`` ago through today.

    The previous window covers the ``period_days`` immediately before it,
    ending the day before the current window starts.
    """

    if period_days < 1:
        raise ValueError("period_days must be positive")
    today = (now or datetime.now(UTC)).astimezone(UTC).date()
    current_start = today - timedelta(days=period_days)
    previous_end = current_start - timedelta(days=1)
    previous_start = previous_end - timedelta(days=period_days)
    return PeriodWindows(
        current=PeriodWindow(current_start, today),
        previous=PeriodWindow(previous_start, previous_end),
    )


def compute_trend(current: float, previous: float, neutral_threshold: float) -> TrendReading:
    """Percent change from ``previous`` to ``current``.

    New activity from a zero baseline reads as +100 %; changes smaller than
    ``neutral_threshold`` percent are reported as neutral.
    """

    if previous > 0:
        percentage = (current - previous) / previous * 100
    elif current > 0:
        percentage = 100.0
    else:
        percentage = 0.0

    if abs(percentage) < neutral_threshold:
        direction = TrendDirection.NEUTRAL
    else:
        direction = TrendDirection.UP if percentage > 0 else TrendDirection.DOWN

    return TrendReading(
        trend_percentage=percentage,
        trend_direction=direction,
        trend_display=format_percent_change(percentage),
        previous_value=previous,
    )


def _average_by_sector(snapshots: Iterable[FundingSnapshot], window: PeriodWindow) -> dict[str, float]:
    totals: dict[str, list[float]] = {}
    for snapshot in snapshots:
        if window.contains(snapshot.snapshot_date):
            totals.setdefault(snapshot.sector, []).append(snapshot.total_amount)
    return {sector: sum(amounts) / len(amounts) for sector, amounts in totals.items()}


def calculate_sector_trends(
    snapshots: Iterable[FundingSnapshot],
    period_days: int = FUNDING_TREND_DAYS,
    *,
    now: datetime | None = None,
) -> dict[str, TrendReading]:
    """Trend of the average daily funding total for every tracked sector."""

    rows = list(snapshots)
    windows = compute_period_windows(period_days, now)
    current = _average_by_sector(rows, windows.current)
    previous = _average_by_sector(rows, windows.previous)
    logger.debug(
        "Sector trends over {} days from {} snapshots ({} current, {} previous sectors)",
        period_days,
        len(rows),
        len(current),
        len(previous),
    )
    return {
        sector: compute_trend(current.get(sector, 0.0), previous.get(sector, 0.0), SECTOR_NEUTRAL_BAND)
        for sector in ALL_SECTORS
    }


def neutral_sector_trends() -> dict[str, TrendReading]:
    """Flat readings used when no snapshot history is available."""

    return {sector: compute_trend(0.0, 0.0, SECTOR_NEUTRAL_BAND) for sector in ALL_SECTORS}


def _max_by_ticker(snapshots: Iterable[ListingSnapshot], window: PeriodWindow) -> dict[str, int]:
    counts: dict[str, int] = {}
    for snapshot in snapshots:
        if window.contains(snapshot.snapshot_date):
            counts[snapshot.ticker] = max(counts.get(snapshot.ticker, 0), snapshot.exchange_count)
    return counts


def calculate_listing_trends(
    snapshots: Iterable[ListingSnapshot],
    period_days: int,
    *,
    now: datetime | None = None,
) -> dict[str, TrendReading]:
    """Trend of the peak exchange count per ticker seen in either window."""

    rows = list(snapshots)
    windows = compute_period_windows(period_days, now)
    current = _max_by_ticker(rows, windows.current)
    previous = _max_by_ticker(rows, windows.previous)
    tickers = [*current, *(ticker for ticker in previous if ticker not in current)]
    return {
        ticker: compute_trend(current.get(ticker, 0), previous.get(ticker, 0), LISTING_NEUTRAL_BAND)
        for ticker in tickers
    }


__all__ = [
    "FUNDING_TREND_DAYS",
    "LISTING_NEUTRAL_BAND",
    "LISTING_TREND_DAYS",
    "PeriodWindow",
    "PeriodWindows",
    "SECTOR_NEUTRAL_BAND",
    "calculate_listing_trends",
    "calculate_sector_trends",
    "compute_period_windows",
    "compute_trend",
    "neutral_sector_trends",
]
