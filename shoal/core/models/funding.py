"""Funding round models."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import Field, field_validator

from shoal.core.models.base import DashboardModel, RawModel, coerce_text
from shoal.core.models.trends import TrendDirection


class RawFundingRecord(RawModel):
    """Funding round as returned upstream.

    The upstream swaps two fields: ``Date`` carries the amount (``"$9.5m"``)
    and ``Amount Raised`` carries the date (``"07 Aug 2025"``).
    """

    name: str = Field("", alias="Name")
    date: str = Field("", alias="Date")
    amount_raised: str = Field("", alias="Amount Raised")
    round: str = Field("", alias="Round")
    category: str = Field("", alias="Category")
    classified_category: str = Field("", alias="ClassifiedCategory")
    description: str = Field("", alias="Description")
    lead_investor: str = Field("", alias="Lead Investor")
    other_investors: str = Field("", alias="Other Investors")
    link: str = Field("", alias="Link")
    valuation: str = Field("", alias="Valuation")
    chains: str = Field("", alias="Chains")

    @field_validator("*", mode="before")
    @classmethod
    def _as_text(cls, value: Any) -> str:
        return coerce_text(value)


class ProcessedFundingRecord(DashboardModel):
    name: str
    amount: float
    amount_display: str
    amount_parsed: bool = True
    date: datetime
    date_display: str
    date_parsed: bool = True
    round: str = ""
    category: str = ""
    classified_category: str = ""
    description: str = ""
    lead_investors: list[str] = Field(default_factory=list)
    other_investors: list[str] = Field(default_factory=list)
    all_investors: list[str] = Field(default_factory=list)
    link: str = ""
    valuation: str = ""
    chains: str = ""


class InvestorMetrics(DashboardModel):
    name: str
    total_invested: float
    total_invested_display: str
    deal_count: int
    recent_deals: list[str]


class CategoryMetrics(DashboardModel):
    category: str
    total_amount: float
    total_amount_display: str
    percentage: float
    deal_count: int
    color: str
    previous_amount: float | None = None
    trend_percentage: float | None = None
    trend_direction: TrendDirection | None = None
    trend_display: str | None = None


class MonthlyFunding(DashboardModel):
    month: str
    total: float  # billions
    display_total: str


class RecentFundingWindow(DashboardModel):
    total_raised: str
    deal_count: int
    avg_round_size: str
    avg_round_size_num: float


class FundingDataQuality(DashboardModel):
    """Counts of values that were defaulted because they could not be parsed."""

    unparsed_amounts: int = 0
    unparsed_dates: int = 0


class FundingDashboardData(DashboardModel):
    total_raised: str
    total_raised_num: float
    active_deals: int
    avg_round_size: str
    avg_round_size_num: float
    most_active_investors: list[InvestorMetrics]
    trending_categories: list[CategoryMetrics]
    last_90_days_categories: list[CategoryMetrics]
    latest_rounds: list[ProcessedFundingRecord]
    monthly_funding: list[MonthlyFunding]
    last_30_days: RecentFundingWindow
    data_quality: FundingDataQuality = Field(default_factory=FundingDataQuality)


__all__ = [
    "CategoryMetrics",
    "FundingDashboardData",
    "FundingDataQuality",
    "InvestorMetrics",
    "MonthlyFunding",
    "ProcessedFundingRecord",
    "RawFundingRecord",
    "RecentFundingWindow",
]
