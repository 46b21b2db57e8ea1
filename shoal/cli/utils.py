"""Utility helpers shared across CLI commands."""

from __future__ import annotations

import asyncio
import json
import sys
from collections.abc import Awaitable, Callable, Mapping, Sequence
from contextlib import ExitStack
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TextIO, TypeVar

import duckdb
import typer

from shoal.core.client import BlakeClient
from shoal.core.config import ConfigManager
from shoal.core.data import DuckDBFactoryConfig, ShoalDuckDBFactory, SnapshotStore
from shoal.core.exceptions import (
    ConfigurationError,
    DataValidationError,
    DomainError,
    ShoalError,
    SnapshotError,
    UpstreamError,
)
from shoal.core.services.dashboard import DashboardService

from .constants import DATA_QUALITY_EXIT_CODE, SYSTEM_EXIT_CODE, VALIDATION_EXIT_CODE
from .formatters import OutputFormatter, create_formatter

T = TypeVar("T")


@dataclass(slots=True)
class CLIOptions:
    """Resolved options derived from the Typer context."""

    format: str = "table"
    output_path: Path | None = None
    no_color: bool = False


def get_cli_options(ctx: typer.Context) -> CLIOptions:
    """Extract :class:`CLIOptions` from the Typer context object."""

    ctx.ensure_object(dict)
    data = ctx.obj or {}
    return CLIOptions(
        format=str(data.get("format", "table")),
        output_path=data.get("output_path"),
        no_color=bool(data.get("no_color", False)),
    )


def prepare_output(ctx: typer.Context) -> tuple[OutputFormatter, TextIO, ExitStack, CLIOptions]:
    """Resolve formatter and writable stream for the current command."""

    options = get_cli_options(ctx)
    try:
        formatter = create_formatter(options.format, no_color=options.no_color)
    except ValueError as exc:  # pragma: no cover - validated at callback
        emit_error(str(exc), "INVALID_FORMAT")
        raise typer.Exit(code=VALIDATION_EXIT_CODE) from exc

    stack = ExitStack()
    stream: TextIO
    if options.output_path is not None:
        try:
            stream = stack.enter_context(open(options.output_path, "w", encoding="utf-8"))
        except OSError as exc:
            stack.close()
            emit_error(f"Unable to open '{options.output_path}': {exc}", "OUTPUT_WRITE_ERROR")
            raise typer.Exit(code=VALIDATION_EXIT_CODE) from exc
    else:
        stream = sys.stdout

    return formatter, stream, stack, options


def render_rows(
    ctx: typer.Context,
    rows: Sequence[Mapping[str, object]],
    columns: Sequence[str] | None = None,
) -> None:
    formatter, stream, stack, _ = prepare_output(ctx)
    try:
        formatter.render(rows, stream=stream, columns=columns)
    finally:
        stack.close()


def emit_error(message: str, code: str, *, details: Mapping[str, object] | None = None) -> None:
    """Print a structured error payload to stderr."""

    payload: dict[str, object] = {"code": code, "message": message}
    if details:
        payload["details"] = _sanitize_details(details)
    typer.echo(json.dumps(payload, ensure_ascii=False, default=str), err=True)


def _sanitize_details(details: Mapping[str, object]) -> Mapping[str, object]:
    sanitized: dict[str, object] = {}
    for key, value in details.items():
        if isinstance(value, (str, int, float, bool)) or value is None:
            sanitized[key] = value
        elif isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
            sanitized[key] = [str(item) for item in value]
        else:
            sanitized[key] = str(value)
    return sanitized


def load_input_records(path: Path | None) -> list[dict[str, Any]] | None:
    """Read a raw JSON array exported from the upstream API."""

    if path is None:
        return None
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        emit_error(f"Unable to read '{path}': {exc}", "INPUT_READ_ERROR")
        raise typer.Exit(code=VALIDATION_EXIT_CODE) from exc
    except json.JSONDecodeError as exc:
        emit_error(f"'{path}' is not valid JSON: {exc.msg}", "INVALID_INPUT", details={"line": exc.lineno})
        raise typer.Exit(code=VALIDATION_EXIT_CODE) from exc
    if not isinstance(payload, list):
        emit_error(f"'{path}' must contain a JSON array of records", "INVALID_INPUT")
        raise typer.Exit(code=VALIDATION_EXIT_CODE)
    return payload


def build_dashboard_service(*, with_store: bool | None = None) -> DashboardService:
    """Assemble a :class:`DashboardService` from the user configuration."""

    config = ConfigManager().config
    enable_store = config.snapshots.enabled if with_store is None else with_store
    store = None
    if enable_store:
        factory = ShoalDuckDBFactory(DuckDBFactoryConfig(database=config.snapshots.database))
        try:
            conn = factory.create_connection()
        except (duckdb.Error, OSError) as exc:
            raise SnapshotError(
                f"Unable to open snapshot database '{config.snapshots.database}': {exc}",
                details={"database": str(config.snapshots.database)},
            ) from exc
        store = SnapshotStore(conn)
    return DashboardService(client=BlakeClient(config.api), store=store, config=config)


def run_service(
    service_factory: Callable[[], DashboardService],
    call: Callable[[DashboardService], Awaitable[T]],
) -> T:
    """Build a service and run ``call`` against it, mapping shoal errors to exit codes."""

    async def _run() -> T:
        service = service_factory()
        try:
            return await call(service)
        finally:
            await service.close()

    try:
        return asyncio.run(_run())
    except ConfigurationError as error:
        _emit_service_error(error)
        raise typer.Exit(code=VALIDATION_EXIT_CODE) from error
    except (UpstreamError, DataValidationError) as error:
        _emit_service_error(error)
        raise typer.Exit(code=DATA_QUALITY_EXIT_CODE) from error
    except ShoalError as error:
        _emit_service_error(error)
        raise typer.Exit(code=SYSTEM_EXIT_CODE) from error


def _emit_service_error(error: ShoalError) -> None:
    domain = DomainError.from_error(error, layer="cli")
    details = {**domain.context, "category": domain.code.value, "retryable": domain.retryable}
    emit_error(error.message, error.error_code, details=details)


__all__ = [
    "CLIOptions",
    "build_dashboard_service",
    "emit_error",
    "get_cli_options",
    "load_input_records",
    "prepare_output",
    "render_rows",
    "run_service",
]
