"""Renderers for CLI rows: a rich table for terminals, JSON Lines for pipes."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from typing import Protocol, TextIO

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

Row = Mapping[str, object]

FORMATS = ("table", "jsonl")
EMPTY_MESSAGE = "No rows to show."

# Trend directions, change types and presence flags are coloured in tables.
_CELL_STYLES = {
    "up": "green",
    "positive": "green",
    "yes": "green",
    "down": "red",
    "negative": "red",
    "no": "red",
    "neutral": "dim",
}


class OutputFormatter(Protocol):
    name: str

    def render(self, rows: Sequence[Row], *, stream: TextIO, columns: Sequence[str] | None = None) -> None: ...


def _select(rows: Sequence[Row], columns: Sequence[str] | None) -> tuple[list[str], list[dict[str, object]]]:
    keys = list(columns) if columns else (list(rows[0]) if rows else [])
    return keys, [{key: row.get(key) for key in keys} for row in rows]


def column_title(key: str) -> str:
    """``last_30_days_raised`` -> ``Last 30 Days Raised``"""

    return " ".join(part[:1].upper() + part[1:] for part in key.split("_") if part)


def _is_numeric(rows: Sequence[Mapping[str, object]], key: str) -> bool:
    values = [row[key] for row in rows if row[key] is not None]
    return bool(values) and all(isinstance(value, (int, float)) and not isinstance(value, bool) for value in values)


def _cell(value: object) -> Text:
    if value is None:
        return Text("-", style="dim")
    if isinstance(value, bool):
        rendered = "yes" if value else "no"
    elif isinstance(value, float):
        rendered = f"{value:,.2f}"
    elif isinstance(value, (list, tuple)):
        rendered = ", ".join(str(item) for item in value) or "-"
    else:
        rendered = str(value)
    return Text(rendered, style=_CELL_STYLES.get(rendered, ""))


class TableFormatter:
    """Rich table with titled headers and right-aligned numeric columns."""

    name = "table"

    def __init__(self, *, no_color: bool = False, width: int = 200) -> None:
        self.no_color = no_color
        self.width = width

    def render(self, rows: Sequence[Row], *, stream: TextIO, columns: Sequence[str] | None = None) -> None:
        console = Console(
            file=stream,
            width=self.width,
            no_color=self.no_color,
            color_system=None if self.no_color else "auto",
        )
        keys, selected = _select(rows, columns)
        if not selected:
            console.print(EMPTY_MESSAGE)
            return

        table = Table(box=box.SIMPLE_HEAD, header_style=None if self.no_color else "bold cyan")
        for key in keys:
            table.add_column(column_title(key), justify="right" if _is_numeric(selected, key) else "left", overflow="fold")
        for row in selected:
            table.add_row(*(_cell(row[key]) for key in keys))
        console.print(table)


class JSONLFormatter:
    """One JSON object per row, restricted to ``columns`` when given."""

    name = "jsonl"

    def render(self, rows: Sequence[Row], *, stream: TextIO, columns: Sequence[str] | None = None) -> None:
        selected = _select(rows, columns)[1] if columns else [dict(row) for row in rows]
        for row in selected:
            stream.write(json.dumps(row, ensure_ascii=False, default=str))
            stream.write("\n")
        stream.flush()


def create_formatter(name: str, *, no_color: bool = False) -> OutputFormatter:
    normalized = name.strip().lower()
    if normalized == "table":
        return TableFormatter(no_color=no_color)
    if normalized == "jsonl":
        return JSONLFormatter()
    raise ValueError(f"Unsupported format '{name}'. Available formats: {', '.join(FORMATS)}.")


__all__ = ["FORMATS", "JSONLFormatter", "OutputFormatter", "TableFormatter", "column_title", "create_formatter"]
