"""Funding round normalisation and dashboard aggregation."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

from loguru import logger

from shoal.core.models.base import parse_raw_records
from shoal.core.models.funding import (
    CategoryMetrics,
    FundingDashboardData,
    FundingDataQuality,
    InvestorMetrics,
    MonthlyFunding,
    ProcessedFundingRecord,
    RawFundingRecord,
    RecentFundingWindow,
)
from shoal.core.models.trends import TrendReading
from shoal.core.services.formatting import (
    format_amount,
    format_relative_date,
    month_label,
    parse_month_label,
)
from shoal.core.services.parsing import (
    looks_like_amount,
    looks_like_date,
    parse_amount_value,
    parse_date_value,
)

FALLBACK_CATEGORY = "Others"

ALL_SECTORS: tuple[str, ...] = (
    "Infrastructure",
    "DeFi",
    "Gaming",
    "AI",
    "Trading",
    "Social",
    "Privacy",
    "Enterprise",
    "NFTs",
    "Identity",
    "Security",
    "Mining",
    "Wallets",
    "Data",
    FALLBACK_CATEGORY,
)

CATEGORY_COLORS: Mapping[str, str] = {
    "Infrastructure": "#8b5cf6",
    "DeFi": "#3b82f6",
    "Gaming": "#10b981",
    "AI": "#f97316",
    "Trading": "#ec4899",
    "Social": "#06b6d4",
    "Privacy": "#6366f1",
    "Enterprise": "#84cc16",
    "NFTs": "#a855f7",
    "Identity": "#f59e0b",
    "Security": "#ef4444",
    "Mining": "#78716c",
    "Wallets": "#14b8a6",
    "Data": "#8b5a2b",
    FALLBACK_CATEGORY: "#6b7280",
}

TOP_INVESTORS = 10
TOP_CATEGORIES = 10
TOP_MONTHS = 12
RECENT_DEALS = 3


@dataclass(frozen=True)
class InvestorSplit:
    """Investors of a round, lead investors first."""

    lead: list[str] = field(default_factory=list)
    others: list[str] = field(default_factory=list)

    @property
    def combined(self) -> list[str]:
        return [*self.lead, *self.others]


@dataclass
class _Bucket:
    total: float = 0.0
    count: int = 0
    deals: list[str] = field(default_factory=list)


def get_category_color(category: str) -> str:
    return CATEGORY_COLORS.get(category, CATEGORY_COLORS[FALLBACK_CATEGORY])


def _split_names(text: str) -> list[str]:
    if not text:
        return []
    return [part.strip() for part in text.split(",") if part.strip()]


def parse_investors(lead: str, others: str) -> InvestorSplit:
    return InvestorSplit(lead=_split_names(lead), others=_split_names(others))


def resolve_amount_and_date(raw: RawFundingRecord) -> tuple[str, str]:
    """Return ``(amount_text, date_text)`` read by content rather than by name.

    The upstream ships the amount under ``Date`` and the date under
    ``Amount Raised``. The names are only trusted when both fields clearly
    hold what they claim to; otherwise the swapped reading wins.
    """

    if looks_like_amount(raw.date) or looks_like_date(raw.amount_raised):
        return raw.date, raw.amount_raised
    if looks_like_date(raw.date) and looks_like_amount(raw.amount_raised):
        return raw.amount_raised, raw.date
    return raw.date, raw.amount_raised


def process_funding_record(
    raw: RawFundingRecord | Mapping[str, Any],
    *,
    now: datetime | None = None,
) -> ProcessedFundingRecord:
    """Normalise one upstream funding round into its display-ready form."""

    if not isinstance(raw, RawFundingRecord):
        raw = RawFundingRecord.model_validate(dict(raw))
    reference = now or datetime.now(UTC)

    amount_text, date_text = resolve_amount_and_date(raw)
    amount_value = parse_amount_value(amount_text)
    date_value = parse_date_value(date_text)
    amount = 0.0 if amount_value is None else amount_value
    date = reference if date_value is None else date_value
    investors = parse_investors(raw.lead_investor, raw.other_investors)

    return ProcessedFundingRecord(
        name=raw.name,
        amount=amount,
        amount_display=format_amount(amount),
        amount_parsed=amount_value is not None,
        date=date,
        date_display=format_relative_date(date, now=reference),
        date_parsed=date_value is not None,
        round=raw.round,
        category=raw.category,
        classified_category=raw.classified_category,
        description=raw.description,
        lead_investors=investors.lead,
        other_investors=investors.others,
        all_investors=investors.combined,
        link=raw.link,
        valuation=raw.valuation,
        chains=raw.chains,
    )


def aggregate_investors(
    records: Iterable[ProcessedFundingRecord],
    *,
    limit: int = TOP_INVESTORS,
) -> list[InvestorMetrics]:
    """Rank investors by the total size of the rounds they joined."""

    buckets: dict[str, _Bucket] = {}
    for record in records:
        for investor in record.all_investors:
            bucket = buckets.setdefault(investor, _Bucket())
            bucket.total += record.amount
            bucket.deals.append(record.name)

    metrics = [
        InvestorMetrics(
            name=name,
            total_invested=bucket.total,
            total_invested_display=format_amount(bucket.total),
            deal_count=len(bucket.deals),
            recent_deals=bucket.deals[:RECENT_DEALS],
        )
        for name, bucket in buckets.items()
    ]
    metrics.sort(key=lambda item: item.total_invested, reverse=True)
    return metrics[:limit]


def _category_metrics(buckets: Mapping[str, _Bucket], total: float) -> list[CategoryMetrics]:
    metrics = [
        CategoryMetrics(
            category=category,
            total_amount=bucket.total,
            total_amount_display=format_amount(bucket.total),
            percentage=bucket.total / (total or 1) * 100,
            deal_count=bucket.count,
            color=get_category_color(category),
        )
        for category, bucket in buckets.items()
    ]
    metrics.sort(key=lambda item: item.total_amount, reverse=True)
    return metrics


def _bucket_by_category(records: Iterable[ProcessedFundingRecord], buckets: dict[str, _Bucket]) -> None:
    for record in records:
        bucket = buckets.setdefault(record.classified_category or FALLBACK_CATEGORY, _Bucket())
        bucket.total += record.amount
        bucket.count += 1


def aggregate_categories(
    records: Sequence[ProcessedFundingRecord],
    total: float | None = None,
    *,
    limit: int = TOP_CATEGORIES,
) -> list[CategoryMetrics]:
    """Group rounds by classified category with each group's share of ``total``."""

    if total is None:
        total = sum(record.amount for record in records)
    buckets: dict[str, _Bucket] = {}
    _bucket_by_category(records, buckets)
    return _category_metrics(buckets, total)[:limit]


def aggregate_sector_totals(
    records: Sequence[ProcessedFundingRecord],
    total: float | None = None,
) -> list[CategoryMetrics]:
    """Untruncated category breakdown seeded with every known sector."""

    if total is None:
        total = sum(record.amount for record in records)
    buckets: dict[str, _Bucket] = {sector: _Bucket() for sector in ALL_SECTORS}
    _bucket_by_category(records, buckets)
    return _category_metrics(buckets, total)


def process_90_day_categories(
    records: Sequence[ProcessedFundingRecord],
    *,
    now: datetime | None = None,
) -> list[CategoryMetrics]:
    """Category breakdown of the last 90 days with every known sector present."""

    cutoff = (now or datetime.now(UTC)) - timedelta(days=90)
    return aggregate_sector_totals([record for record in records if record.date >= cutoff])


def aggregate_monthly(
    records: Iterable[ProcessedFundingRecord],
    *,
    limit: int = TOP_MONTHS,
) -> list[MonthlyFunding]:
    """Monthly totals in billions, newest month first."""

    totals: dict[str, float] = {}
    for record in records:
        label = month_label(record.date)
        totals[label] = totals.get(label, 0.0) + record.amount

    epoch = datetime.min.replace(tzinfo=UTC)
    months = sorted(totals, key=lambda label: parse_month_label(label) or epoch, reverse=True)
    return [
        MonthlyFunding(month=label, total=totals[label] / 1e9, display_total=format_amount(totals[label]))
        for label in months[:limit]
    ]


def process_funding_data(
    raw_records: Iterable[RawFundingRecord | Mapping[str, Any]],
    *,
    now: datetime | None = None,
) -> FundingDashboardData:
    """Build the complete funding dashboard payload from upstream rows."""

    reference = now or datetime.now(UTC)
    records = [
        process_funding_record(raw, now=reference)
        for raw in parse_raw_records(RawFundingRecord, raw_records)
    ]

    cutoff = reference - timedelta(days=30)
    last_30_days = [record for record in records if record.date >= cutoff]

    total_raised = sum(record.amount for record in records)
    last_30_days_total = sum(record.amount for record in last_30_days)
    avg_round_size = total_raised / (len(records) or 1)
    last_30_days_avg = last_30_days_total / (len(last_30_days) or 1)

    quality = FundingDataQuality(
        unparsed_amounts=sum(1 for record in records if not record.amount_parsed),
        unparsed_dates=sum(1 for record in records if not record.date_parsed),
    )
    if quality.unparsed_amounts or quality.unparsed_dates:
        logger.warning(
            "Defaulted {} unparseable amounts and {} unparseable dates",
            quality.unparsed_amounts,
            quality.unparsed_dates,
        )
    logger.debug("Processed {} funding rounds", len(records))

    return FundingDashboardData(
        total_raised=format_amount(total_raised),
        total_raised_num=total_raised,
        active_deals=len(records),
        avg_round_size=format_amount(avg_round_size),
        avg_round_size_num=avg_round_size,
        most_active_investors=aggregate_investors(records),
        trending_categories=aggregate_categories(records, total_raised),
        last_90_days_categories=process_90_day_categories(records, now=reference),
        latest_rounds=sorted(records, key=lambda record: record.date, reverse=True),
        monthly_funding=aggregate_monthly(records),
        last_30_days=RecentFundingWindow(
            total_raised=format_amount(last_30_days_total),
            deal_count=len(last_30_days),
            avg_round_size=format_amount(last_30_days_avg),
            avg_round_size_num=last_30_days_avg,
        ),
        data_quality=quality,
    )


def apply_category_trends(
    dashboard: FundingDashboardData,
    trends: Mapping[str, TrendReading],
) -> FundingDashboardData:
    """Return a copy of ``dashboard`` with sector trends merged into its categories."""

    merged: list[CategoryMetrics] = []
    for category in dashboard.trending_categories:
        trend = trends.get(category.category)
        if trend is None:
            merged.append(category)
            continue
        merged.append(
            category.model_copy(
                update={
                    "previous_amount": trend.previous_value,
                    "trend_percentage": trend.trend_percentage,
                    "trend_direction": trend.trend_direction,
                    "trend_display": trend.trend_display,
                }
            )
        )
    return dashboard.model_copy(update={"trending_categories": merged})


__all__ = [
    "ALL_SECTORS",
    "CATEGORY_COLORS",
    "InvestorSplit",
    "aggregate_categories",
    "aggregate_investors",
    "aggregate_monthly",
    "aggregate_sector_totals",
    "apply_category_trends",
    "get_category_color",
    "parse_investors",
    "process_90_day_categories",
    "process_funding_data",
    "process_funding_record",
    "resolve_amount_and_date",
]
