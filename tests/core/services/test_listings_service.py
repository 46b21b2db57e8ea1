from __future__ import annotations

import math
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from shoal.core.models.listings import Momentum
from shoal.core.models.trends import TrendDirection, TrendReading
from shoal.core.services.listings import (
    apply_listing_trends,
    calculate_momentum,
    deduplicate_by_ticker,
    filter_new_listings,
    generate_sparkline_data,
    parse_exchanges,
    process_listing_record,
    process_listings_data,
)


def _epoch(value: datetime) -> float:
    return value.timestamp()


@pytest.fixture()
def listing_rows(now: datetime) -> list[dict[str, Any]]:
    return [
        {
            "ticker": "JUP",
            "name": "Jupiter",
            "sourceMessage": "Binance will list JUP",
            "all_exchanges": "Binance, Coinbase, OKX",
            "price_usd": 0.65,
            "volume_24h_usd": 45_000_000,
            "price_change_pct_24h": 15,
            "listingDate": _epoch(now - timedelta(hours=6)),
            "scraped_at": "2025-08-10T11:55:00Z",
            "last_updated": "2025-08-10T11:50:00Z",
            "exchange": "Binance",
        },
        {
            "ticker": "JUP",
            "name": "Jupiter",
            "all_exchanges": "Bybit",
            "listingDate": _epoch(now - timedelta(days=40)),
            "scraped_at": "2025-07-01T09:00:00Z",
            "last_updated": "2025-07-01T09:00:00Z",
            "exchange": "Bybit",
        },
        {
            "ticker": "WIF",
            "name": "dogwifhat",
            "sourceMessage": "Bybit futures launch for WIF",
            "all_exchanges": "Binance, Bybit",
            "price_change_pct_24h": -25,
            "listingDate": _epoch(now - timedelta(days=10)),
            "scraped_at": "2025-08-10T11:00:00Z",
            "last_updated": "2025-08-10T11:00:00Z",
            "exchange": "Bybit",
        },
        {
            "ticker": "BONK",
            "name": "Bonk",
            "all_exchanges": "KuCoin",
            "price_change_pct_24h": None,
            "listingDate": _epoch(now - timedelta(days=60)),
            "scraped_at": "2025-08-09T12:00:00Z",
            "last_updated": "2025-08-09T12:00:00Z",
        },
        {"ticker": "", "name": "Nameless", "all_exchanges": "Binance"},
    ]


@pytest.mark.parametrize(
    ("change", "momentum", "color"),
    [
        (25, Momentum.VERY_HIGH, "#10b981"),
        (20, Momentum.VERY_HIGH, "#10b981"),
        (15, Momentum.HIGH, "#10b981"),
        (0, Momentum.GROWING, "#3b82f6"),
        (-10, Momentum.DECLINING, "#f59e0b"),
        (-25, Momentum.LOW, "#ef4444"),
        (None, Momentum.MEDIUM, "#9ca3af"),
        (math.nan, Momentum.MEDIUM, "#9ca3af"),
    ],
)
def test_calculate_momentum(change: float | None, momentum: Momentum, color: str) -> None:
    reading = calculate_momentum(change)

    assert reading.momentum is momentum
    assert reading.color == color


def test_parse_exchanges_trims_and_drops_blanks() -> None:
    assert parse_exchanges(" Binance , ,OKX") == ["Binance", "OKX"]
    assert parse_exchanges("   ") == []


def test_generate_sparkline_data_is_bounded_and_deterministic() -> None:
    first = generate_sparkline_data("up")

    assert len(first) == 20
    assert all(20 <= point <= 80 for point in first)
    assert first == generate_sparkline_data("up")
    assert first != generate_sparkline_data("down")


def test_process_listing_record_builds_display_fields(listing_rows: list[dict[str, Any]], now: datetime) -> None:
    record = process_listing_record(listing_rows[0], now=now)

    assert record.display_name == "JUP - Jupiter"
    assert record.exchanges == ["Binance", "Coinbase", "OKX"]
    assert record.exchanges_count == 3
    assert record.exchanges_display == "Binance, Coinbase, OKX"
    assert record.price_display == "$0.6500"
    assert record.volume_24h_display == "$45M"
    assert record.market_cap_display == "$0"
    assert record.momentum is Momentum.HIGH
    assert record.scraped_at == datetime(2025, 8, 10, 11, 55, tzinfo=UTC)
    assert record.scraped_at_display == "Aug 10, 2025"
    assert record.timestamps_parsed


def test_process_listing_record_defaults_missing_timestamps(now: datetime) -> None:
    record = process_listing_record({"ticker": "ABC", "name": "Abc", "scraped_at": "sometime"}, now=now)

    assert record.scraped_at == now
    assert record.scraped_at_display == "sometime"
    assert record.listing_date is None
    assert record.listing_date_display == "Unknown"
    assert not record.timestamps_parsed
    assert record.exchanges == []


def test_deduplicate_by_ticker_keeps_first(listing_rows: list[dict[str, Any]], now: datetime) -> None:
    records = [process_listing_record(row, now=now) for row in listing_rows]

    unique = deduplicate_by_ticker(records)

    assert [record.ticker for record in unique] == ["JUP", "WIF", "BONK"]
    assert unique[0].exchanges_count == 3


def test_deduplicate_by_ticker_is_idempotent(listing_rows: list[dict[str, Any]], now: datetime) -> None:
    unique = deduplicate_by_ticker([process_listing_record(row, now=now) for row in listing_rows])

    assert deduplicate_by_ticker(unique) == unique


def test_filter_new_listings_uses_listing_date(listing_rows: list[dict[str, Any]], now: datetime) -> None:
    records = [process_listing_record(row, now=now) for row in listing_rows[:4]]

    assert [record.ticker for record in filter_new_listings(records, 1, now=now)] == ["JUP"]
    assert [record.ticker for record in filter_new_listings(records, 30, now=now)] == ["JUP", "WIF"]


def test_process_listings_data_headline_views(listing_rows: list[dict[str, Any]], now: datetime) -> None:
    dashboard = process_listings_data(listing_rows, now=now)

    assert dashboard.total_records == 3
    assert [listing.ticker for listing in dashboard.trending_listings] == ["JUP", "WIF", "BONK"]
    assert dashboard.cross_exchange_rate == 67
    assert dashboard.last_24_hours.total_listings == 1
    assert dashboard.treemap_data[0].size == 30
    assert dashboard.treemap_data[1].change_type.value == "negative"
    assert dashboard.token_cards[0].adoption_24h == "NEW"
    assert [activity.name for activity in dashboard.exchange_activity] == ["Binance", "Coinbase", "OKX", "Bybit"]
    assert dashboard.exchange_activity[0].count == 2


def test_process_listings_data_feeds(listing_rows: list[dict[str, Any]], now: datetime) -> None:
    dashboard = process_listings_data(listing_rows, now=now)

    feed = dashboard.live_listings
    assert [alert.asset for alert in feed] == ["JUP", "WIF", "BONK"]
    assert feed[0].type == "SPOT"
    assert feed[1].type == "FUTURES"
    assert feed[0].timestamp == "11:55:00"

    newest = dashboard.newest_listings
    assert [(item.symbol, item.exchange, item.time) for item in newest] == [
        ("JUP", "on Binance", "5m ago"),
        ("WIF", "on Bybit", "60m ago"),
        ("BONK", "on KuCoin", "1440m ago"),
    ]

    growing = dashboard.fastest_growing
    assert [(item.symbol, item.timeframe, item.status) for item in growing] == [("JUP", "24h", "up")]


def test_process_listings_data_adoption_metrics(listing_rows: list[dict[str, Any]], now: datetime) -> None:
    cards = {card.title: card.value for card in process_listings_data(listing_rows, now=now).adoption_metrics}

    assert cards == {
        "Total New Listings (24h)": 1,
        "Most Listed Asset": "JUP (3 exchanges)",
        "Avg Listings/Asset": "2.0",
        "Active Exchanges": 5,
        "Cross-Exchange Rate": "67%",
    }


def test_process_listings_data_periods_use_every_event(listing_rows: list[dict[str, Any]], now: datetime) -> None:
    dashboard = process_listings_data(listing_rows, now=now)

    assert dashboard.last_30_days.total_new_listings == 2
    assert dashboard.last_30_days.avg_exchanges_per_listing == pytest.approx(1.0)

    ninety = dashboard.last_90_days
    assert ninety.total_new_listings == 3
    jup = next(listing for listing in ninety.new_listings if listing.ticker == "JUP")
    assert jup.exchanges == ["Binance", "Bybit"]
    assert ninety.top_new_listings[0].ticker == "JUP"
    assert dashboard.year_to_date.total_new_listings == 3


def test_process_listings_data_empty(now: datetime) -> None:
    dashboard = process_listings_data([], now=now)

    assert dashboard.total_records == 0
    assert dashboard.cross_exchange_rate == 0
    assert dashboard.fastest_growing == []
    cards = {card.title: card.value for card in dashboard.adoption_metrics}
    assert cards["Most Listed Asset"] == "N/A"
    assert cards["Avg Listings/Asset"] == "0.0"


def test_process_listings_data_is_repeatable(listing_rows: list[dict[str, Any]], now: datetime) -> None:
    first = process_listings_data(listing_rows, now=now).to_payload()
    second = process_listings_data(listing_rows, now=now).to_payload()

    assert first == second
    assert "volume24hDisplay" in first["processedListings"][0]


def test_apply_listing_trends_prefers_primary_readings(
    listing_rows: list[dict[str, Any]],
    now: datetime,
) -> None:
    dashboard = process_listings_data(listing_rows, now=now)

    def reading(percentage: float) -> TrendReading:
        return TrendReading(
            trend_percentage=percentage,
            trend_direction=TrendDirection.UP,
            trend_display=f"+{percentage:.1f}%",
            previous_value=1,
        )

    merged = apply_listing_trends(dashboard, {"WIF": reading(50)}, {"JUP": reading(10), "WIF": reading(5)})

    assert [listing.ticker for listing in merged.trending_listings] == ["WIF", "JUP"]
    wif = next(listing for listing in merged.processed_listings if listing.ticker == "WIF")
    assert wif.trend_percentage == 50
    bonk = next(listing for listing in merged.processed_listings if listing.ticker == "BONK")
    assert bonk.trend_direction is None


def test_undated_listing_is_never_new(now: datetime) -> None:
    rows = [
        {
            "ticker": "NODATE",
            "name": "No Date",
            "all_exchanges": "Binance",
            "price_change_pct_24h": 30,
            "scraped_at": "2025-08-10T11:00:00Z",
            "last_updated": "2025-08-10T11:00:00Z",
            "exchange": "Binance",
        }
    ]

    dashboard = process_listings_data(rows, now=now)

    cards = {card.title: card.value for card in dashboard.adoption_metrics}
    assert cards["Total New Listings (24h)"] == 0
    assert dashboard.last_24_hours.total_listings == 0
    assert dashboard.last_30_days.total_new_listings == 0
    assert dashboard.last_90_days.total_new_listings == 0
    assert dashboard.year_to_date.total_new_listings == 0
    assert [(item.symbol, item.timeframe) for item in dashboard.fastest_growing] == [("NODATE", "all")]
    assert dashboard.total_records == 1


def test_undated_events_are_skipped_in_period_analysis(
    listing_rows: list[dict[str, Any]],
    now: datetime,
) -> None:
    undated = {"ticker": "JUP", "name": "Jupiter", "exchange": "Gate.io"}

    dashboard = process_listings_data([*listing_rows, undated], now=now)

    jup = next(listing for listing in dashboard.last_90_days.new_listings if listing.ticker == "JUP")
    assert jup.exchanges == ["Binance", "Bybit"]
