"""Snapshot persistence on DuckDB."""

from shoal.core.data.factory import DuckDBFactoryConfig, ShoalDuckDBFactory
from shoal.core.data.schema import (
    FUNDING_SNAPSHOTS_TABLE,
    LISTING_SNAPSHOTS_TABLE,
    SNAPSHOT_TABLES,
    ColumnDef,
    TableSchema,
    ensure_snapshot_schema,
)
from shoal.core.data.store import SnapshotStore

__all__ = [
    "ColumnDef",
    "DuckDBFactoryConfig",
    "FUNDING_SNAPSHOTS_TABLE",
    "LISTING_SNAPSHOTS_TABLE",
    "SNAPSHOT_TABLES",
    "ShoalDuckDBFactory",
    "SnapshotStore",
    "TableSchema",
    "ensure_snapshot_schema",
]
