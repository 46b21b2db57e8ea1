"""DuckDB-backed store for daily funding and listing snapshots."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Sequence
from contextlib import contextmanager
from datetime import UTC, date, datetime
from typing import TYPE_CHECKING, Any

import duckdb
from loguru import logger

from shoal.core.data.schema import (
    FUNDING_SNAPSHOTS_TABLE,
    LISTING_SNAPSHOTS_TABLE,
    SNAPSHOT_TABLES,
    TableSchema,
    ensure_snapshot_schema,
)
from shoal.core.exceptions import SnapshotError
from shoal.core.models.snapshots import FundingSnapshot, ListingSnapshot

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection

    from shoal.core.models.funding import CategoryMetrics
    from shoal.core.models.listings import ProcessedListingRecord

DEFAULT_RECENT_LIMIT = 50


def _naive_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


def _aware_utc(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


class SnapshotStore:
    """Persists one snapshot row per sector or ticker per day.

    The store does not own connection creation; callers hand in a DuckDB
    connection (usually from :class:`ShoalDuckDBFactory`) and close it via
    :meth:`close` when done.
    """

    def __init__(
        self,
        conn: DuckDBPyConnection,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._conn = conn
        self._clock = clock or (lambda: datetime.now(UTC))
        with self._guard("schema"):
            ensure_snapshot_schema(conn)

    @property
    def connection(self) -> DuckDBPyConnection:
        return self._conn

    def close(self) -> None:
        self._conn.close()

    @contextmanager
    def _guard(self, table: str) -> Iterator[None]:
        try:
            yield
        except duckdb.Error as exc:
            raise SnapshotError(f"Snapshot store operation failed: {exc}", table=table) from exc

    def _existing_keys(self, table: TableSchema, key_column: str, snapshot_date: date) -> set[str]:
        rows = self._conn.execute(
            f"SELECT {key_column} FROM {table.name} WHERE snapshot_date = ?",
            [snapshot_date],
        ).fetchall()
        return {row[0] for row in rows}

    def _insert_new(
        self,
        table: TableSchema,
        key_column: str,
        snapshot_date: date,
        rows: Sequence[tuple[str, list[Any]]],
    ) -> int:
        with self._guard(table.name):
            existing = self._existing_keys(table, key_column, snapshot_date)
            fresh: list[list[Any]] = []
            for key, values in rows:
                if key in existing:
                    continue
                existing.add(key)
                fresh.append(values)
            if fresh:
                self._conn.executemany(table.insert_sql(), fresh)
        skipped = len(rows) - len(fresh)
        logger.debug(
            "Wrote {} {} rows for {} ({} already present)",
            len(fresh),
            table.name,
            snapshot_date.isoformat(),
            skipped,
        )
        return len(fresh)

    def record_funding_snapshots(self, categories: Iterable[CategoryMetrics], snapshot_date: date) -> int:
        """Store sector totals for ``snapshot_date``; sectors already stored that day are skipped."""

        created_at = _naive_utc(self._clock())
        rows = [
            (
                category.category,
                [
                    snapshot_date,
                    category.category,
                    category.total_amount,
                    category.deal_count,
                    category.percentage,
                    created_at,
                ],
            )
            for category in categories
        ]
        return self._insert_new(FUNDING_SNAPSHOTS_TABLE, "sector", snapshot_date, rows)

    def record_listing_snapshots(
        self,
        listings: Iterable[ProcessedListingRecord],
        snapshot_date: date,
    ) -> int:
        """Store ticker exchange counts for ``snapshot_date``; tickers already stored that day are skipped."""

        created_at = _naive_utc(self._clock())
        rows = [
            (
                listing.ticker,
                [
                    snapshot_date,
                    listing.ticker,
                    listing.symbol,
                    listing.name,
                    list(listing.exchanges),
                    listing.exchanges_count,
                    listing.price,
                    listing.market_cap,
                    listing.volume_24h,
                    _naive_utc(listing.scraped_at),
                    created_at,
                ],
            )
            for listing in listings
            if listing.ticker
        ]
        return self._insert_new(LISTING_SNAPSHOTS_TABLE, "ticker", snapshot_date, rows)

    def prune(self, before: date, *, table: TableSchema | None = None) -> int:
        """Delete snapshots dated strictly before ``before``; returns the number removed."""

        tables = (table,) if table is not None else SNAPSHOT_TABLES
        deleted = 0
        for schema in tables:
            with self._guard(schema.name):
                row = self._conn.execute(
                    f"SELECT COUNT(*) FROM {schema.name} WHERE snapshot_date < ?",
                    [before],
                ).fetchone()
                count = int(row[0]) if row else 0
                if count:
                    self._conn.execute(f"DELETE FROM {schema.name} WHERE snapshot_date < ?", [before])
            deleted += count
        if deleted:
            logger.info("Pruned {} snapshots older than {}", deleted, before.isoformat())
        return deleted

    def funding_snapshots(self, start: date, end: date) -> list[FundingSnapshot]:
        """Funding snapshots with ``start <= snapshot_date <= end``."""

        with self._guard(FUNDING_SNAPSHOTS_TABLE.name):
            rows = self._conn.execute(
                """
                SELECT snapshot_date, sector, total_amount, deal_count, percentage
                FROM funding_snapshots
                WHERE snapshot_date BETWEEN ? AND ?
                ORDER BY snapshot_date, sector
                """,
                [start, end],
            ).fetchall()
        return [FundingSnapshot(*row) for row in rows]

    def listing_snapshots(self, start: date, end: date) -> list[ListingSnapshot]:
        """Listing snapshots with ``start <= snapshot_date <= end``."""

        with self._guard(LISTING_SNAPSHOTS_TABLE.name):
            rows = self._conn.execute(
                """
                SELECT snapshot_date, ticker, symbol, name, exchanges, exchange_count,
                       price, market_cap, volume_24h, scraped_at
                FROM listing_snapshots
                WHERE snapshot_date BETWEEN ? AND ?
                ORDER BY snapshot_date, ticker
                """,
                [start, end],
            ).fetchall()
        return [self._listing_from_row(row) for row in rows]

    @staticmethod
    def _listing_from_row(row: Sequence[Any]) -> ListingSnapshot:
        snapshot_date, ticker, symbol, name, exchanges, count, price, market_cap, volume, scraped_at = row
        return ListingSnapshot(
            snapshot_date=snapshot_date,
            ticker=ticker,
            symbol=symbol or "",
            name=name or "",
            exchanges=tuple(exchanges or ()),
            exchange_count=count,
            price=price,
            market_cap=market_cap,
            volume_24h=volume,
            scraped_at=_aware_utc(scraped_at),
        )

    def recent_funding_snapshots(self, limit: int = DEFAULT_RECENT_LIMIT) -> dict[str, list[FundingSnapshot]]:
        """Latest funding rows grouped by ISO date, newest date first."""

        with self._guard(FUNDING_SNAPSHOTS_TABLE.name):
            rows = self._conn.execute(
                """
                SELECT snapshot_date, sector, total_amount, deal_count, percentage
                FROM funding_snapshots
                ORDER BY snapshot_date DESC, total_amount DESC
                LIMIT ?
                """,
                [limit],
            ).fetchall()
        grouped: dict[str, list[FundingSnapshot]] = {}
        for row in rows:
            snapshot = FundingSnapshot(*row)
            grouped.setdefault(snapshot.snapshot_date.isoformat(), []).append(snapshot)
        return grouped

    def recent_listing_snapshots(self, limit: int = DEFAULT_RECENT_LIMIT) -> dict[str, list[ListingSnapshot]]:
        """Latest listing rows grouped by ISO date, newest date first."""

        with self._guard(LISTING_SNAPSHOTS_TABLE.name):
            rows = self._conn.execute(
                """
                SELECT snapshot_date, ticker, symbol, name, exchanges, exchange_count,
                       price, market_cap, volume_24h, scraped_at
                FROM listing_snapshots
                ORDER BY snapshot_date DESC, exchange_count DESC
                LIMIT ?
                """,
                [limit],
            ).fetchall()
        grouped: dict[str, list[ListingSnapshot]] = {}
        for row in rows:
            snapshot = self._listing_from_row(row)
            grouped.setdefault(snapshot.snapshot_date.isoformat(), []).append(snapshot)
        return grouped


__all__ = ["DEFAULT_RECENT_LIMIT", "SnapshotStore"]
