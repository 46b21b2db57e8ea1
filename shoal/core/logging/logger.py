"""JSON line logging on top of loguru, with a per-request trace id.

Every record carries ``trace_id`` plus the dashboard fields ``dataset``,
``operation``, ``base_exchange`` and ``error_code`` at the top level; any
other bound or contextual value is nested under ``context``.
"""

from __future__ import annotations

import json
import sys
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import date, datetime
from pathlib import Path
from typing import IO, Any
from uuid import uuid4

from loguru import logger

from shoal.core.logging.config import LogConfig

PROMOTED_FIELDS = ("dataset", "operation", "base_exchange", "error_code")

_trace_id: ContextVar[str | None] = ContextVar("shoal_trace_id", default=None)
_context: ContextVar[dict[str, Any]] = ContextVar("shoal_log_context", default={})


def _patch_record(record: dict[str, Any]) -> None:
    extra = record["extra"]
    for key, value in _context.get().items():
        extra.setdefault(key, value)
    if not extra.get("trace_id"):
        extra["trace_id"] = _trace_id.get() or uuid4().hex


def _encode(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def render_record(record: Mapping[str, Any]) -> str:
    """Serialise a loguru record to one JSON line."""

    extra = dict(record["extra"])
    payload: dict[str, Any] = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "message": record["message"],
        "trace_id": extra.pop("trace_id", None),
    }
    for key in PROMOTED_FIELDS:
        payload[key] = extra.pop(key, None)
    if extra:
        payload["context"] = extra
    if record["exception"] is not None:
        payload["exception"] = repr(record["exception"].value)
    return json.dumps(payload, default=_encode, ensure_ascii=False)


class JsonLineSink:
    """Writes each record as a JSON line to a stream or appends it to a file."""

    def __init__(self, *, stream: IO[str] | None = None, path: str | Path | None = None) -> None:
        if (stream is None) == (path is None):
            raise ValueError("JsonLineSink needs exactly one of stream or path")
        self._stream = stream
        self._path = Path(path).expanduser() if path is not None else None
        if self._path is not None:
            self._path.parent.mkdir(parents=True, exist_ok=True)

    def __call__(self, message: Any) -> None:
        line = render_record(message.record) + "\n"
        if self._stream is not None:
            self._stream.write(line)
            self._stream.flush()
        elif self._path is not None:
            with self._path.open("a", encoding="utf-8") as handle:
                handle.write(line)


def configure_logging(level: str = "INFO", **options: Any) -> LogConfig:
    """Replace every loguru handler with shoal's JSON sinks.

    ``options`` are :class:`LogConfig` fields, e.g. ``stream`` or ``file_path``.
    """

    config = LogConfig(level=level, **options)
    handlers: list[dict[str, Any]] = []
    if config.console:
        handlers.append({"sink": JsonLineSink(stream=config.stream or sys.stderr), "level": config.level})
    if config.file_path:
        handlers.append({"sink": JsonLineSink(path=config.file_path), "level": config.level})
    logger.configure(handlers=handlers, patcher=_patch_record)
    return config


@contextmanager
def log_context(*, trace_id: str | None = None, **fields: Any) -> Iterator[str]:
    """Attach ``fields`` and a trace id to every record logged inside the block.

    Nested blocks inherit the outer trace id unless given their own.
    """

    active = trace_id or _trace_id.get() or uuid4().hex
    trace_token = _trace_id.set(active)
    context_token = _context.set({**_context.get(), **fields})
    try:
        yield active
    finally:
        _context.reset(context_token)
        _trace_id.reset(trace_token)


configure_logging()


__all__ = ["JsonLineSink", "PROMOTED_FIELDS", "configure_logging", "log_context", "logger", "render_record"]
