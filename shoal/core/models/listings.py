"""Exchange listing models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import Field, field_validator

from shoal.core.models.base import (
    DashboardModel,
    RawModel,
    coerce_optional_float,
    coerce_optional_text,
    coerce_text,
)
from shoal.core.models.trends import TrendDirection


class Momentum(str, Enum):
    """Coarse label derived from the 24h price change."""

    VERY_HIGH = "VERY HIGH"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    GROWING = "GROWING"
    DECLINING = "DECLINING"
    LOW = "LOW"


_NUMERIC_FIELDS = (
    "price_usd",
    "market_cap_usd",
    "fdv_usd",
    "volume_24h_usd",
    "high_24h_usd",
    "low_24h_usd",
    "price_change_24h",
    "price_change_pct_24h",
    "circulating_supply",
    "total_supply",
    "max_supply",
    "ath_usd",
    "atl_usd",
    "ath_change_pct_usd",
    "atl_change_pct_usd",
    "listing_date",
)

_OPTIONAL_TEXT_FIELDS = (
    "ath_date_usd",
    "atl_date_usd",
    "asset_platform_id",
    "coingecko_url",
    "category",
    "public_notice",
    "exchange",
    "listing_type",
)


class RawListingRecord(RawModel):
    """Listing event as returned upstream."""

    source_message: str = Field("", alias="sourceMessage")
    ticker: str = ""
    id: str = ""
    name: str = ""
    symbol: str = ""
    price_usd: float | None = None
    market_cap_usd: float | None = None
    fdv_usd: float | None = None
    volume_24h_usd: float | None = None
    high_24h_usd: float | None = None
    low_24h_usd: float | None = None
    price_change_24h: float | None = None
    price_change_pct_24h: float | None = None
    circulating_supply: float | None = None
    total_supply: float | None = None
    max_supply: float | None = None
    ath_usd: float | None = None
    atl_usd: float | None = None
    ath_change_pct_usd: float | None = None
    atl_change_pct_usd: float | None = None
    ath_date_usd: str | None = None
    atl_date_usd: str | None = None
    asset_platform_id: str | None = None
    platforms: dict[str, str] = Field(default_factory=dict)
    all_exchanges: str = ""
    coingecko_url: str | None = None
    category: str | None = None
    public_notice: str | None = None
    last_updated: str = ""
    scraped_at: str = ""
    listing_date: float | None = Field(None, alias="listingDate")
    exchange: str | None = None
    listing_type: str | None = Field(None, alias="type")

    @field_validator("source_message", "ticker", "id", "name", "symbol", "all_exchanges", "last_updated", "scraped_at", mode="before")
    @classmethod
    def _as_text(cls, value: Any) -> str:
        return coerce_text(value).strip()

    @field_validator(*_NUMERIC_FIELDS, mode="before")
    @classmethod
    def _as_number(cls, value: Any) -> float | None:
        return coerce_optional_float(value)

    @field_validator(*_OPTIONAL_TEXT_FIELDS, mode="before")
    @classmethod
    def _as_optional_text(cls, value: Any) -> str | None:
        return coerce_optional_text(value)

    @field_validator("platforms", mode="before")
    @classmethod
    def _as_platforms(cls, value: Any) -> dict[str, str]:
        if not isinstance(value, dict):
            return {}
        return {str(key): coerce_text(address) for key, address in value.items()}


class ProcessedListingRecord(DashboardModel):
    ticker: str
    id: str = ""
    name: str = ""
    symbol: str = ""
    display_name: str
    source_message: str = ""
    price: float | None = None
    price_display: str
    market_cap: float | None = None
    market_cap_display: str
    volume_24h: float | None = None
    volume_24h_display: str
    price_change_24h: float | None = None
    price_change_pct_24h: float | None = None
    exchanges: list[str] = Field(default_factory=list)
    exchanges_count: int = 0
    exchanges_display: str = ""
    last_updated: datetime
    last_updated_display: str
    scraped_at: datetime
    scraped_at_display: str
    timestamps_parsed: bool = True
    listing_date: datetime | None = None
    listing_date_display: str
    primary_exchange: str | None = None
    listing_type: str | None = None
    platforms: dict[str, str] = Field(default_factory=dict)
    coingecko_url: str | None = None
    momentum: Momentum
    momentum_color: str
    chart_data: list[float] = Field(default_factory=list)
    previous_exchange_count: float | None = None
    trend_percentage: float | None = None
    trend_direction: TrendDirection | None = None
    trend_display: str | None = None


class ChangeType(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class TreemapData(DashboardModel):
    name: str
    value: int
    size: int
    fill: str
    change_type: ChangeType
    chart_data: list[float]
    ticker: str
    exchanges_count: int


class TokenCard(DashboardModel):
    symbol: str
    name: str
    exchanges: list[str]
    exchange_count: int
    adoption_24h: str
    momentum: Momentum
    momentum_color: str
    listed_on: str
    last_updated: str
    price_change: float | None
    volume: str
    coingecko_url: str | None = None


class LiveListingAlert(DashboardModel):
    timestamp: str
    exchange: str
    asset: str
    name: str
    type: str
    status: str = "Live"
    price: str
    source_message: str
    coingecko_url: str | None = None


class MetricCard(DashboardModel):
    title: str
    value: str | int
    subtitle: str | None = None


class ExchangeActivity(DashboardModel):
    name: str
    count: int
    status: str = "new"


class FastestGrowingToken(DashboardModel):
    symbol: str
    exchanges: str
    status: str
    timeframe: str
    price_change_pct_24h: float | None = None


class NewestListing(DashboardModel):
    symbol: str
    exchange: str
    time: str


class ListingWindow(DashboardModel):
    total_listings: int
    listings: list[ProcessedListingRecord]


class PeriodMetrics(DashboardModel):
    total_new_listings: int
    avg_exchanges_per_listing: float
    top_new_listings: list[ProcessedListingRecord]


class ListingPeriod(PeriodMetrics):
    new_listings: list[ProcessedListingRecord]


class ListingsDashboardData(DashboardModel):
    processed_listings: list[ProcessedListingRecord]
    treemap_data: list[TreemapData]
    token_cards: list[TokenCard]
    live_listings: list[LiveListingAlert]
    adoption_metrics: list[MetricCard]
    exchange_activity: list[ExchangeActivity]
    fastest_growing: list[FastestGrowingToken]
    newest_listings: list[NewestListing]
    total_records: int
    cross_exchange_rate: int
    last_24_hours: ListingWindow
    last_30_days: ListingPeriod
    last_90_days: ListingPeriod
    year_to_date: ListingPeriod
    trending_listings: list[ProcessedListingRecord]


__all__ = [
    "ChangeType",
    "ExchangeActivity",
    "FastestGrowingToken",
    "ListingPeriod",
    "ListingWindow",
    "ListingsDashboardData",
    "LiveListingAlert",
    "MetricCard",
    "Momentum",
    "NewestListing",
    "PeriodMetrics",
    "ProcessedListingRecord",
    "RawListingRecord",
    "TokenCard",
    "TreemapData",
]
