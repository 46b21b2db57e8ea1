"""Exchange listing deduplication, classification and dashboard views."""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any, Literal, Protocol, TypeVar

from loguru import logger

from shoal.core.models.base import parse_raw_records
from shoal.core.models.listings import (
    ChangeType,
    ExchangeActivity,
    FastestGrowingToken,
    ListingPeriod,
    ListingsDashboardData,
    ListingWindow,
    LiveListingAlert,
    MetricCard,
    Momentum,
    NewestListing,
    PeriodMetrics,
    ProcessedListingRecord,
    RawListingRecord,
    TokenCard,
    TreemapData,
)
from shoal.core.models.trends import TrendReading
from shoal.core.services.formatting import (
    format_calendar_date,
    format_clock_time,
    format_number,
    format_price,
    js_round,
    to_fixed,
)
from shoal.core.services.parsing import parse_date_value, parse_timestamp_value

SparklineTrend = Literal["up", "down", "neutral"]

TREEMAP_SIZE = 20
TOKEN_CARDS = 8
LIVE_FEED_SIZE = 10
FASTEST_GROWING_SIZE = 4
NEWEST_SIZE = 4
EXCHANGE_ACTIVITY_SIZE = 4
TRENDING_SIZE = 10
SPARKLINE_POINTS = 20
UNKNOWN_EXCHANGE = "Unknown"
UNKNOWN_LISTING_DATE = "Unknown"


@dataclass(frozen=True)
class MomentumReading:
    momentum: Momentum
    color: str


# Ordered from the highest threshold down; the first match wins.
_MOMENTUM_LADDER: tuple[tuple[float, MomentumReading], ...] = (
    (20, MomentumReading(Momentum.VERY_HIGH, "#10b981")),
    (10, MomentumReading(Momentum.HIGH, "#10b981")),
    (0, MomentumReading(Momentum.GROWING, "#3b82f6")),
    (-10, MomentumReading(Momentum.DECLINING, "#f59e0b")),
)
_MOMENTUM_FLOOR = MomentumReading(Momentum.LOW, "#ef4444")
_MOMENTUM_UNKNOWN = MomentumReading(Momentum.MEDIUM, "#9ca3af")


class _HasTicker(Protocol):
    ticker: str


TickerT = TypeVar("TickerT", bound=_HasTicker)


def calculate_momentum(price_change_pct: float | None) -> MomentumReading:
    """Classify a 24h percent change on the fixed momentum ladder."""

    if price_change_pct is None or math.isnan(price_change_pct):
        return _MOMENTUM_UNKNOWN
    for threshold, reading in _MOMENTUM_LADDER:
        if price_change_pct >= threshold:
            return reading
    return _MOMENTUM_FLOOR


def parse_exchanges(exchanges: str) -> list[str]:
    if not exchanges or not exchanges.strip():
        return []
    return [part.strip() for part in exchanges.split(",") if part.strip()]


def generate_sparkline_data(trend: SparklineTrend = "neutral", base_value: float = 50) -> list[float]:
    """Deterministic sparkline so repeated renders of the same token agree."""

    drift = {"up": 0.3, "down": -0.3}.get(trend, 0.0)
    data: list[float] = []
    last_value = float(base_value)
    for index in range(SPARKLINE_POINTS):
        change = ((index * 17 + 23) % 100 - 50) / 10
        last_value = max(20.0, min(80.0, last_value + change + drift))
        data.append(last_value)
    return data


def deduplicate_by_ticker(records: Iterable[TickerT]) -> list[TickerT]:
    """Keep the first record seen for every ticker; drop later ones and blanks."""

    seen: set[str] = set()
    unique: list[TickerT] = []
    for record in records:
        ticker = record.ticker
        if not ticker or ticker in seen:
            continue
        seen.add(ticker)
        unique.append(record)
    return unique


def _display_date(value: datetime | None, raw: str) -> str:
    if value is None:
        return raw
    return format_calendar_date(value)


def _sparkline_trend(price_change_pct: float | None) -> SparklineTrend:
    if price_change_pct and price_change_pct > 0:
        return "up"
    if price_change_pct and price_change_pct < -5:
        return "down"
    return "neutral"


def process_listing_record(
    raw: RawListingRecord | Mapping[str, Any],
    *,
    now: datetime | None = None,
) -> ProcessedListingRecord:
    """Enrich one upstream listing row with display fields and momentum."""

    if not isinstance(raw, RawListingRecord):
        raw = RawListingRecord.model_validate(dict(raw))
    reference = now or datetime.now(UTC)

    exchanges = parse_exchanges(raw.all_exchanges)
    reading = calculate_momentum(raw.price_change_pct_24h)

    last_updated = parse_date_value(raw.last_updated)
    scraped_at = parse_date_value(raw.scraped_at)
    listing_date = parse_timestamp_value(raw.listing_date)

    return ProcessedListingRecord(
        ticker=raw.ticker,
        id=raw.id,
        name=raw.name,
        symbol=raw.symbol,
        display_name=f"{raw.ticker} - {raw.name}",
        source_message=raw.source_message,
        price=raw.price_usd,
        price_display=format_price(raw.price_usd),
        market_cap=raw.market_cap_usd,
        market_cap_display=format_number(raw.market_cap_usd),
        volume_24h=raw.volume_24h_usd,
        volume_24h_display=format_number(raw.volume_24h_usd),
        price_change_24h=raw.price_change_24h,
        price_change_pct_24h=raw.price_change_pct_24h,
        exchanges=exchanges,
        exchanges_count=len(exchanges),
        exchanges_display=", ".join(exchanges),
        last_updated=last_updated or reference,
        last_updated_display=_display_date(last_updated, raw.last_updated),
        scraped_at=scraped_at or reference,
        scraped_at_display=_display_date(scraped_at, raw.scraped_at),
        timestamps_parsed=None not in (last_updated, scraped_at, listing_date),
        listing_date=listing_date,
        listing_date_display=format_calendar_date(listing_date) if listing_date else UNKNOWN_LISTING_DATE,
        primary_exchange=raw.exchange,
        listing_type=raw.listing_type,
        platforms=raw.platforms,
        coingecko_url=raw.coingecko_url,
        momentum=reading.momentum,
        momentum_color=reading.color,
        chart_data=generate_sparkline_data(_sparkline_trend(raw.price_change_pct_24h)),
    )


def filter_new_listings(
    listings: Iterable[ProcessedListingRecord],
    days: float,
    *,
    now: datetime | None = None,
) -> list[ProcessedListingRecord]:
    """Listings whose exchange listing date falls within the last ``days``.

    Listings without a known listing date never count as new.
    """

    cutoff = (now or datetime.now(UTC)) - timedelta(days=days)
    return [
        listing
        for listing in listings
        if listing.listing_date is not None and listing.listing_date >= cutoff
    ]


def process_listing_events_for_period(
    events: Iterable[ProcessedListingRecord],
    period_start: datetime,
) -> list[ProcessedListingRecord]:
    """Collapse listing events per ticker, counting only exchanges seen in the period.

    The latest event of each ticker represents it; its exchange list is
    replaced by the distinct primary exchanges of that ticker's events
    inside the period. Events without a listing date are ignored.
    """

    latest: dict[str, ProcessedListingRecord] = {}
    latest_dates: dict[str, datetime] = {}
    exchanges: dict[str, dict[str, None]] = {}
    for event in events:
        listed = event.listing_date
        if listed is None or listed < period_start or not event.ticker:
            continue
        if event.ticker not in latest_dates or listed > latest_dates[event.ticker]:
            latest[event.ticker] = event
            latest_dates[event.ticker] = listed
        seen = exchanges.setdefault(event.ticker, {})
        if event.primary_exchange:
            seen[event.primary_exchange] = None

    collapsed: list[ProcessedListingRecord] = []
    for ticker, event in latest.items():
        period_exchanges = list(exchanges[ticker])
        collapsed.append(
            event.model_copy(
                update={
                    "exchanges": period_exchanges,
                    "exchanges_count": len(period_exchanges),
                    "exchanges_display": ", ".join(period_exchanges),
                }
            )
        )
    return collapsed


def _by_exchange_count(listings: Iterable[ProcessedListingRecord]) -> list[ProcessedListingRecord]:
    return sorted(listings, key=lambda listing: listing.exchanges_count, reverse=True)


def _average_exchanges(listings: Sequence[ProcessedListingRecord]) -> float:
    if not listings:
        return 0.0
    return sum(listing.exchanges_count for listing in listings) / len(listings)


def generate_period_metrics(listings: Sequence[ProcessedListingRecord]) -> PeriodMetrics:
    return PeriodMetrics(
        total_new_listings=len(listings),
        avg_exchanges_per_listing=_average_exchanges(listings),
        top_new_listings=_by_exchange_count(listings)[:TRENDING_SIZE],
    )


def _period(listings: list[ProcessedListingRecord]) -> ListingPeriod:
    metrics = generate_period_metrics(listings)
    return ListingPeriod(new_listings=listings, **dict(metrics))


def cross_exchange_rate(listings: Sequence[ProcessedListingRecord]) -> int:
    """Percentage of tokens listed on more than one exchange."""

    if not listings:
        return 0
    multi = sum(1 for listing in listings if listing.exchanges_count > 1)
    return js_round(multi / len(listings) * 100)


def _change_type(price_change_pct: float | None) -> ChangeType:
    if price_change_pct and price_change_pct > 0:
        return ChangeType.POSITIVE
    if price_change_pct and price_change_pct < 0:
        return ChangeType.NEGATIVE
    return ChangeType.NEUTRAL


def build_treemap(ranked: Sequence[ProcessedListingRecord]) -> list[TreemapData]:
    return [
        TreemapData(
            name=token.ticker,
            value=token.exchanges_count,
            size=token.exchanges_count * 10,
            fill=token.momentum_color,
            change_type=_change_type(token.price_change_pct_24h),
            chart_data=token.chart_data,
            ticker=token.ticker,
            exchanges_count=token.exchanges_count,
        )
        for token in ranked[:TREEMAP_SIZE]
    ]


def _adoption_label(token: ProcessedListingRecord) -> str:
    seed = ord(token.ticker[0]) if token.ticker else 0
    if token.exchanges_count > 10:
        return f"+{seed % 3 + 1} exchanges"
    if token.exchanges_count > 5:
        return f"+{seed % 2 + 1} exchanges"
    return "NEW"


def build_token_cards(ranked: Sequence[ProcessedListingRecord]) -> list[TokenCard]:
    return [
        TokenCard(
            symbol=token.ticker,
            name=token.name,
            exchanges=token.exchanges,
            exchange_count=token.exchanges_count,
            adoption_24h=_adoption_label(token),
            momentum=token.momentum,
            momentum_color=token.momentum_color,
            listed_on=token.exchanges_display,
            last_updated=token.last_updated_display,
            price_change=token.price_change_pct_24h,
            volume=token.volume_24h_display,
            coingecko_url=token.coingecko_url,
        )
        for token in ranked[:TOKEN_CARDS]
    ]


def _primary_exchange(token: ProcessedListingRecord) -> str:
    return token.primary_exchange or (token.exchanges[0] if token.exchanges else UNKNOWN_EXCHANGE)


def _most_recently_scraped(listings: Iterable[ProcessedListingRecord]) -> list[ProcessedListingRecord]:
    return sorted(listings, key=lambda listing: listing.scraped_at, reverse=True)


def build_live_feed(listings: Sequence[ProcessedListingRecord]) -> list[LiveListingAlert]:
    """The most recently scraped listings as feed alerts."""

    return [
        LiveListingAlert(
            timestamp=format_clock_time(token.scraped_at),
            exchange=token.exchanges[0] if token.exchanges else UNKNOWN_EXCHANGE,
            asset=token.ticker,
            name=token.name,
            type="FUTURES" if "futures" in token.source_message.lower() else "SPOT",
            price=token.price_display,
            source_message=token.source_message,
            coingecko_url=token.coingecko_url,
        )
        for token in _most_recently_scraped(listings)[:LIVE_FEED_SIZE]
    ]


def build_fastest_growing(
    listings: Sequence[ProcessedListingRecord],
    *,
    now: datetime,
) -> list[FastestGrowingToken]:
    """Top movers by 24h price change among the freshest listings available.

    Candidates come from the last 24 hours, widening to 7 days, 30 days and
    finally everything when a narrower window is empty.
    """

    candidates: list[ProcessedListingRecord] = []
    timeframe = "all"
    for label, days in (("24h", 1), ("7d", 7), ("30d", 30)):
        candidates = filter_new_listings(listings, days, now=now)
        if candidates:
            timeframe = label
            break
    if not candidates:
        candidates = list(listings)

    ranked = sorted(
        candidates,
        key=lambda token: (token.price_change_pct_24h is not None, token.price_change_pct_24h or 0.0),
        reverse=True,
    )
    growing: list[FastestGrowingToken] = []
    for token in ranked[:FASTEST_GROWING_SIZE]:
        change = token.price_change_pct_24h or 0.0
        growing.append(
            FastestGrowingToken(
                symbol=token.ticker,
                exchanges=_primary_exchange(token),
                status="up" if change > 0 else "down" if change < 0 else "stable",
                timeframe=timeframe,
                price_change_pct_24h=token.price_change_pct_24h,
            )
        )
    return growing


def build_newest_listings(
    listings: Sequence[ProcessedListingRecord],
    *,
    now: datetime,
) -> list[NewestListing]:
    newest: list[NewestListing] = []
    for token in _most_recently_scraped(listings)[:NEWEST_SIZE]:
        minutes = math.floor((now - token.scraped_at).total_seconds() / 60)
        newest.append(
            NewestListing(
                symbol=token.ticker,
                exchange=f"on {_primary_exchange(token)}",
                time=f"{minutes}m ago",
            )
        )
    return newest


def build_exchange_activity(listings: Iterable[ProcessedListingRecord]) -> list[ExchangeActivity]:
    counts: dict[str, int] = {}
    for token in listings:
        for exchange in token.exchanges:
            counts[exchange] = counts.get(exchange, 0) + 1
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [ExchangeActivity(name=name, count=count) for name, count in ranked[:EXCHANGE_ACTIVITY_SIZE]]


def build_adoption_metrics(
    listings: Sequence[ProcessedListingRecord],
    ranked: Sequence[ProcessedListingRecord],
    last_24_hours: Sequence[ProcessedListingRecord],
) -> list[MetricCard]:
    most_listed = ranked[0] if ranked else None
    active_exchanges = {exchange for token in listings for exchange in token.exchanges}
    return [
        MetricCard(title="Total New Listings (24h)", value=len(last_24_hours)),
        MetricCard(
            title="Most Listed Asset",
            value=f"{most_listed.ticker} ({most_listed.exchanges_count} exchanges)" if most_listed else "N/A",
        ),
        MetricCard(title="Avg Listings/Asset", value=to_fixed(_average_exchanges(listings), 1)),
        MetricCard(title="Active Exchanges", value=len(active_exchanges)),
        MetricCard(title="Cross-Exchange Rate", value=f"{cross_exchange_rate(listings)}%"),
    ]


def process_listings_data(
    raw_records: Iterable[RawListingRecord | Mapping[str, Any]],
    *,
    now: datetime | None = None,
) -> ListingsDashboardData:
    """Build the listings dashboard from upstream listing events."""

    reference = now or datetime.now(UTC)
    raw_rows = [row for row in parse_raw_records(RawListingRecord, raw_records) if row.ticker]

    # Every event is kept for period analysis; headline views use one row per ticker.
    events = [process_listing_record(row, now=reference) for row in raw_rows]
    unique = deduplicate_by_ticker(events)
    ranked = _by_exchange_count(unique)

    if len(unique) < len(events):
        logger.debug("Dropped {} duplicate listing rows", len(events) - len(unique))
    unparsed = sum(1 for listing in unique if not listing.timestamps_parsed)
    if unparsed:
        logger.warning("Defaulted timestamps on {} listings", unparsed)

    last_24_hours = filter_new_listings(unique, 1, now=reference)
    year_start = reference.replace(month=1, day=1, hour=0, minute=0, second=0, microsecond=0)

    return ListingsDashboardData(
        processed_listings=unique,
        treemap_data=build_treemap(ranked),
        token_cards=build_token_cards(ranked),
        live_listings=build_live_feed(unique),
        adoption_metrics=build_adoption_metrics(unique, ranked, last_24_hours),
        exchange_activity=build_exchange_activity(unique),
        fastest_growing=build_fastest_growing(unique, now=reference),
        newest_listings=build_newest_listings(unique, now=reference),
        total_records=len(unique),
        cross_exchange_rate=cross_exchange_rate(unique),
        last_24_hours=ListingWindow(total_listings=len(last_24_hours), listings=last_24_hours),
        last_30_days=_period(process_listing_events_for_period(events, reference - timedelta(days=30))),
        last_90_days=_period(process_listing_events_for_period(events, reference - timedelta(days=90))),
        year_to_date=_period(process_listing_events_for_period(events, year_start)),
        trending_listings=ranked[:TRENDING_SIZE],
    )


def apply_listing_trends(
    dashboard: ListingsDashboardData,
    primary: Mapping[str, TrendReading],
    fallback: Mapping[str, TrendReading] | None = None,
) -> ListingsDashboardData:
    """Merge per-ticker trends and rank trending listings by them."""

    fallback = fallback or {}
    merged: list[ProcessedListingRecord] = []
    for listing in dashboard.processed_listings:
        trend = primary.get(listing.ticker) or fallback.get(listing.ticker)
        if trend is None:
            merged.append(listing)
            continue
        merged.append(
            listing.model_copy(
                update={
                    "previous_exchange_count": trend.previous_value,
                    "trend_percentage": trend.trend_percentage,
                    "trend_direction": trend.trend_direction,
                    "trend_display": trend.trend_display,
                }
            )
        )

    trending = sorted(
        (listing for listing in merged if listing.trend_percentage is not None),
        key=lambda listing: listing.trend_percentage or 0.0,
        reverse=True,
    )
    return dashboard.model_copy(
        update={"processed_listings": merged, "trending_listings": trending[:TRENDING_SIZE]}
    )


__all__ = [
    "MomentumReading",
    "apply_listing_trends",
    "build_adoption_metrics",
    "build_exchange_activity",
    "build_fastest_growing",
    "build_live_feed",
    "build_newest_listings",
    "build_token_cards",
    "build_treemap",
    "calculate_momentum",
    "cross_exchange_rate",
    "deduplicate_by_ticker",
    "filter_new_listings",
    "generate_period_metrics",
    "generate_sparkline_data",
    "parse_exchanges",
    "process_listing_events_for_period",
    "process_listing_record",
    "process_listings_data",
]
