from __future__ import annotations

import io
import json

from typer.testing import CliRunner

from shoal.cli.formatters import JSONLFormatter, TableFormatter, column_title, create_formatter
from shoal.cli.main import create_app


def test_help_lists_command_groups(runner: CliRunner) -> None:
    cli_result = runner.invoke(create_app(), ["--help"])

    assert cli_result.exit_code == 0, cli_result.output
    for group in ("funding", "listings", "parity", "snapshot"):
        assert group in cli_result.output


def test_unknown_format_is_rejected(runner: CliRunner) -> None:
    cli_result = runner.invoke(create_app(), ["--format", "xml", "funding", "summary"])

    assert cli_result.exit_code == 2
    assert "Unsupported format" in cli_result.output


def test_unknown_log_level_is_rejected(runner: CliRunner) -> None:
    cli_result = runner.invoke(create_app(), ["--log-level", "chatty", "funding", "summary"])

    assert cli_result.exit_code == 2
    assert "Unsupported log level" in cli_result.output


def test_create_formatter() -> None:
    assert isinstance(create_formatter(" JSONL "), JSONLFormatter)
    assert isinstance(create_formatter("table", no_color=True), TableFormatter)


def test_jsonl_formatter_filters_columns() -> None:
    stream = io.StringIO()

    JSONLFormatter().render([{"a": 1, "b": 2}], stream=stream, columns=["b"])

    assert json.loads(stream.getvalue()) == {"b": 2}


def test_table_formatter_cells() -> None:
    stream = io.StringIO()
    rows = [{"name": "JUP", "listed": True, "ratio": 0.5, "missing": ["Kraken", "MEXC"], "trend": None}]

    TableFormatter(no_color=True).render(rows, stream=stream)

    output = stream.getvalue()
    assert "yes" in output
    assert "0.50" in output
    assert "Kraken, MEXC" in output
    assert "-" in output


def test_table_formatter_titles_columns() -> None:
    stream = io.StringIO()

    TableFormatter(no_color=True).render(
        [{"total_raised": "$1.0B", "active_deals": 3}],
        stream=stream,
        columns=["total_raised", "active_deals"],
    )

    assert column_title("last_30_days_raised") == "Last 30 Days Raised"
    assert "Total Raised" in stream.getvalue()
    assert "Active Deals" in stream.getvalue()


def test_table_formatter_reports_empty_output() -> None:
    stream = io.StringIO()

    TableFormatter(no_color=True).render([], stream=stream, columns=["symbol"])

    assert stream.getvalue().strip() == "No rows to show."
