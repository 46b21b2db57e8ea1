"""Daily snapshot rows persisted for trend calculation."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime


@dataclass(frozen=True)
class FundingSnapshot:
    """Funding totals of one sector on one day."""

    snapshot_date: date
    sector: str
    total_amount: float
    deal_count: int
    percentage: float


@dataclass(frozen=True)
class ListingSnapshot:
    """Exchange footprint of one ticker on one day."""

    snapshot_date: date
    ticker: str
    symbol: str = ""
    name: str = ""
    exchanges: tuple[str, ...] = field(default_factory=tuple)
    exchange_count: int = 0
    price: float | None = None
    market_cap: float | None = None
    volume_24h: float | None = None
    scraped_at: datetime | None = None


@dataclass(frozen=True)
class SnapshotResult:
    """Outcome of one collection run."""

    snapshot_date: date
    processed: int
    created: int
    deleted: int

    def to_dict(self) -> dict[str, object]:
        return {
            "success": True,
            "date": self.snapshot_date.isoformat(),
            "processed": self.processed,
            "snapshotsCreated": self.created,
            "oldSnapshotsDeleted": self.deleted,
        }


__all__ = ["FundingSnapshot", "ListingSnapshot", "SnapshotResult"]
