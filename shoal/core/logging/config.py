"""Settings accepted by :func:`shoal.core.logging.configure_logging`."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

_LEVELS = frozenset({"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"})


class LogConfig(BaseModel):
    """Where JSON log lines go and from which level on.

    ``stream`` defaults to stderr so that stdout stays free for command output.
    """

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    console: bool = True
    stream: Any = None
    file_path: str | None = None

    @field_validator("level", mode="before")
    @classmethod
    def _normalise_level(cls, value: Any) -> str:
        level = str(value).strip().upper()
        if level not in _LEVELS:
            raise ValueError(f"unknown log level {value!r}")
        return level


__all__ = ["LogConfig"]
