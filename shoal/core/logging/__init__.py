"""Structured logging built on loguru."""

from shoal.core.logging.config import LogConfig
from shoal.core.logging.logger import (
    PROMOTED_FIELDS,
    JsonLineSink,
    configure_logging,
    log_context,
    logger,
    render_record,
)

__all__ = [
    "JsonLineSink",
    "LogConfig",
    "PROMOTED_FIELDS",
    "configure_logging",
    "log_context",
    "logger",
    "render_record",
]
