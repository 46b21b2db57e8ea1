"""DuckDB table definitions for the daily snapshot store."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection


@dataclass(frozen=True)
class ColumnDef:
    """Represents a DuckDB table column definition."""

    name: str
    data_type: str
    constraints: Sequence[str] = ()

    def render(self) -> str:
        return " ".join([self.name, self.data_type, *self.constraints])


@dataclass(frozen=True)
class TableSchema:
    """Utility wrapper describing a DuckDB table schema."""

    name: str
    columns: Sequence[ColumnDef]
    primary_key: Sequence[str] = ()

    @property
    def column_names(self) -> tuple[str, ...]:
        return tuple(column.name for column in self.columns)

    def create_ddl(self) -> str:
        column_defs = [column.render() for column in self.columns]
        if self.primary_key:
            column_defs.append(f"PRIMARY KEY ({', '.join(self.primary_key)})")
        columns_sql = ",\n                ".join(column_defs)
        return f"""
            CREATE TABLE IF NOT EXISTS {self.name} (
                {columns_sql}
            )
            """.strip()

    def insert_sql(self) -> str:
        placeholders = ", ".join("?" for _ in self.columns)
        return f"INSERT INTO {self.name} ({', '.join(self.column_names)}) VALUES ({placeholders})"

    def ensure(self, conn: DuckDBPyConnection) -> None:
        """Create the table on the provided connection if it does not exist."""

        conn.execute(self.create_ddl())


FUNDING_SNAPSHOTS_TABLE = TableSchema(
    name="funding_snapshots",
    columns=(
        ColumnDef("snapshot_date", "DATE", ("NOT NULL",)),
        ColumnDef("sector", "VARCHAR", ("NOT NULL",)),
        ColumnDef("total_amount", "DOUBLE", ("NOT NULL",)),
        ColumnDef("deal_count", "INTEGER", ("NOT NULL",)),
        ColumnDef("percentage", "DOUBLE", ("NOT NULL",)),
        ColumnDef("created_at", "TIMESTAMP", ("NOT NULL",)),
    ),
    primary_key=("snapshot_date", "sector"),
)

LISTING_SNAPSHOTS_TABLE = TableSchema(
    name="listing_snapshots",
    columns=(
        ColumnDef("snapshot_date", "DATE", ("NOT NULL",)),
        ColumnDef("ticker", "VARCHAR", ("NOT NULL",)),
        ColumnDef("symbol", "VARCHAR"),
        ColumnDef("name", "VARCHAR"),
        ColumnDef("exchanges", "VARCHAR[]"),
        ColumnDef("exchange_count", "INTEGER", ("NOT NULL",)),
        ColumnDef("price", "DOUBLE"),
        ColumnDef("market_cap", "DOUBLE"),
        ColumnDef("volume_24h", "DOUBLE"),
        ColumnDef("scraped_at", "TIMESTAMP"),
        ColumnDef("created_at", "TIMESTAMP", ("NOT NULL",)),
    ),
    primary_key=("snapshot_date", "ticker"),
)

SNAPSHOT_TABLES: tuple[TableSchema, ...] = (FUNDING_SNAPSHOTS_TABLE, LISTING_SNAPSHOTS_TABLE)


def ensure_snapshot_schema(conn: DuckDBPyConnection) -> None:
    for table in SNAPSHOT_TABLES:
        table.ensure(conn)


__all__ = [
    "ColumnDef",
    "FUNDING_SNAPSHOTS_TABLE",
    "LISTING_SNAPSHOTS_TABLE",
    "SNAPSHOT_TABLES",
    "TableSchema",
    "ensure_snapshot_schema",
]
