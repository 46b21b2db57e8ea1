"""Raw upstream records and display-ready dashboard models."""

from shoal.core.models.funding import (
    FundingDashboardData,
    ProcessedFundingRecord,
    RawFundingRecord,
)
from shoal.core.models.listings import (
    ListingsDashboardData,
    Momentum,
    ProcessedListingRecord,
    RawListingRecord,
)
from shoal.core.models.parity import (
    ComparisonMode,
    ExchangePresence,
    ParityDashboardData,
    ProcessedParityRecord,
    RawParityRecord,
)
from shoal.core.models.snapshots import FundingSnapshot, ListingSnapshot, SnapshotResult
from shoal.core.models.trends import TrendDirection, TrendReading

__all__ = [
    "ComparisonMode",
    "ExchangePresence",
    "FundingDashboardData",
    "FundingSnapshot",
    "ListingSnapshot",
    "ListingsDashboardData",
    "Momentum",
    "ParityDashboardData",
    "ProcessedFundingRecord",
    "ProcessedListingRecord",
    "ProcessedParityRecord",
    "RawFundingRecord",
    "RawListingRecord",
    "RawParityRecord",
    "SnapshotResult",
    "TrendDirection",
    "TrendReading",
]
