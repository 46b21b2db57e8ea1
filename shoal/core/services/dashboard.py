"""Dashboard service: fetch, transform and enrich the three dashboard datasets."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import UTC, date, datetime, timedelta
from typing import Any

from loguru import logger

from shoal.core.client import BlakeClient, Dataset
from shoal.core.client.samples import (
    sample_funding_records,
    sample_listing_records,
    sample_parity_records,
)
from shoal.core.config import ShoalConfig, get_default_config
from shoal.core.data import FUNDING_SNAPSHOTS_TABLE, LISTING_SNAPSHOTS_TABLE, SnapshotStore
from shoal.core.exceptions import ConfigurationError, DataValidationError, SnapshotError, UpstreamError
from shoal.core.logging import log_context
from shoal.core.models.funding import FundingDashboardData
from shoal.core.models.listings import ListingsDashboardData
from shoal.core.models.parity import ParityDashboardData
from shoal.core.models.snapshots import SnapshotResult
from shoal.core.models.trends import TrendReading
from shoal.core.services.funding import aggregate_sector_totals, apply_category_trends, process_funding_data
from shoal.core.services.listings import apply_listing_trends, process_listings_data
from shoal.core.services.parity import process_parity_data
from shoal.core.services.trends import (
    calculate_listing_trends,
    calculate_sector_trends,
    compute_period_windows,
    neutral_sector_trends,
)

RawRecords = Sequence[dict[str, Any]]

_SAMPLES: dict[Dataset, Callable[[], list[dict[str, Any]]]] = {
    Dataset.FUNDING: sample_funding_records,
    Dataset.LISTINGS: sample_listing_records,
    Dataset.PARITY: sample_parity_records,
}


class DashboardService:
    """Orchestrates upstream fetches, the pure transformers and snapshot trends.

    Every public method accepts pre-fetched ``records``; when omitted the
    records are pulled from the upstream client. The snapshot store is
    optional: without it funding trends are neutral and listings carry no
    trend data.
    """

    def __init__(
        self,
        client: BlakeClient | None = None,
        store: SnapshotStore | None = None,
        config: ShoalConfig | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.config = config or get_default_config()
        self.client = client
        self.store = store
        self._clock = clock or (lambda: datetime.now(UTC))

    async def close(self) -> None:
        if self.client is not None:
            await self.client.close()
        if self.store is not None:
            self.store.close()

    async def _records(self, dataset: Dataset, records: RawRecords | None) -> RawRecords:
        if records is not None:
            return records
        if self.client is None:
            raise ConfigurationError(f"No upstream client configured to fetch {dataset.value}")
        try:
            return await self.client.fetch(dataset)
        except (UpstreamError, DataValidationError) as exc:
            dashboard = self.config.dashboard
            if not (dashboard.fallback_to_samples or dashboard.is_development):
                raise
            logger.warning(
                "Upstream {} fetch failed ({}), serving bundled sample data",
                dataset.value,
                exc.error_code,
            )
            return _SAMPLES[dataset]()

    def _sector_trends(self, now: datetime) -> dict[str, TrendReading]:
        if self.store is None:
            return neutral_sector_trends()
        period = self.config.dashboard.funding_trend_days
        windows = compute_period_windows(period, now)
        try:
            snapshots = self.store.funding_snapshots(windows.previous.start, windows.current.end)
        except SnapshotError as exc:
            logger.warning("Falling back to neutral sector trends: {}", exc.message)
            return neutral_sector_trends()
        return calculate_sector_trends(snapshots, period, now=now)

    def _listing_trends(self, period_days: int, now: datetime) -> dict[str, TrendReading]:
        if self.store is None:
            return {}
        windows = compute_period_windows(period_days, now)
        try:
            snapshots = self.store.listing_snapshots(windows.previous.start, windows.current.end)
        except SnapshotError as exc:
            logger.warning("Skipping {}-day listing trends: {}", period_days, exc.message)
            return {}
        return calculate_listing_trends(snapshots, period_days, now=now)

    async def funding_dashboard(self, records: RawRecords | None = None) -> FundingDashboardData:
        with log_context(dataset="funding", operation="funding_dashboard"):
            raw = await self._records(Dataset.FUNDING, records)
            now = self._clock()
            dashboard = process_funding_data(raw, now=now)
            dashboard = apply_category_trends(dashboard, self._sector_trends(now))
            logger.info("Built funding dashboard from {} rounds", dashboard.active_deals)
            return dashboard

    async def listings_dashboard(self, records: RawRecords | None = None) -> ListingsDashboardData:
        with log_context(dataset="listings", operation="listings_dashboard"):
            raw = await self._records(Dataset.LISTINGS, records)
            now = self._clock()
            dashboard = process_listings_data(raw, now=now)
            if self.store is not None:
                primary_days, fallback_days = self.config.dashboard.listing_trend_days
                dashboard = apply_listing_trends(
                    dashboard,
                    self._listing_trends(primary_days, now),
                    self._listing_trends(fallback_days, now),
                )
            logger.info("Built listings dashboard from {} tickers", dashboard.total_records)
            return dashboard

    async def parity_dashboard(
        self,
        records: RawRecords | None = None,
        *,
        base_exchange: str | None = None,
    ) -> ParityDashboardData:
        base = base_exchange or self.config.dashboard.default_base_exchange
        with log_context(dataset="parity", operation="parity_dashboard", base_exchange=base):
            raw = await self._records(Dataset.PARITY, records)
            dashboard = process_parity_data(raw, base)
            logger.info("Built parity dashboard for {} tokens", dashboard.total_records)
            return dashboard

    def _require_store(self) -> SnapshotStore:
        if self.store is None:
            raise ConfigurationError("Snapshot store is not configured", setting="SHOAL_SNAPSHOT_DB")
        return self.store

    async def collect_funding_snapshot(self, records: RawRecords | None = None) -> SnapshotResult:
        """Store today's sector totals and prune snapshots past retention."""

        store = self._require_store()
        with log_context(dataset="funding", operation="collect_funding_snapshot"):
            raw = await self._records(Dataset.FUNDING, records)
            now = self._clock()
            dashboard = process_funding_data(raw, now=now)
            sectors = aggregate_sector_totals(dashboard.latest_rounds, dashboard.total_raised_num)
            today = now.astimezone(UTC).date()
            created = store.record_funding_snapshots(sectors, today)
            deleted = store.prune(self._retention_cutoff(now), table=FUNDING_SNAPSHOTS_TABLE)
            logger.info("Collected {} funding snapshots for {}", created, today.isoformat())
            return SnapshotResult(
                snapshot_date=today,
                processed=len(sectors),
                created=created,
                deleted=deleted,
            )

    async def collect_listing_snapshot(self, records: RawRecords | None = None) -> SnapshotResult:
        """Store today's per-ticker exchange counts and prune snapshots past retention."""

        store = self._require_store()
        with log_context(dataset="listings", operation="collect_listing_snapshot"):
            raw = await self._records(Dataset.LISTINGS, records)
            now = self._clock()
            dashboard = process_listings_data(raw, now=now)
            today = now.astimezone(UTC).date()
            created = store.record_listing_snapshots(dashboard.processed_listings, today)
            deleted = store.prune(self._retention_cutoff(now), table=LISTING_SNAPSHOTS_TABLE)
            logger.info("Collected {} listing snapshots for {}", created, today.isoformat())
            return SnapshotResult(
                snapshot_date=today,
                processed=len(dashboard.processed_listings),
                created=created,
                deleted=deleted,
            )

    def _retention_cutoff(self, now: datetime) -> date:
        return (now - timedelta(days=self.config.snapshots.retention_days)).astimezone(UTC).date()


__all__ = ["DashboardService"]
