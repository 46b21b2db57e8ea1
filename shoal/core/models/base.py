"""Shared base models and lenient coercion helpers."""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from typing import Any, TypeVar

from loguru import logger
from pydantic import BaseModel, ConfigDict, ValidationError


def to_camel(name: str) -> str:
    """``volume_24h_display`` -> ``volume24hDisplay``"""

    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


class DashboardModel(BaseModel):
    """Display-ready output model serialised with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON-compatible payload handed to dashboard consumers."""

        return self.model_dump(mode="json", by_alias=True)


class RawModel(BaseModel):
    """Upstream record; keys are the external contract and kept verbatim."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


def coerce_text(value: Any) -> str:
    """Best-effort string coercion; ``None`` and containers become ``""``."""

    if value is None or isinstance(value, Mapping):
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value if item is not None)
    return str(value)


def coerce_optional_text(value: Any) -> str | None:
    text = coerce_text(value)
    return text or None


def coerce_optional_float(value: Any) -> float | None:
    """Coerce numbers and numeric strings; anything else becomes ``None``."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip().replace(",", ""))
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def coerce_flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"true", "1", "yes", "y"}
    return bool(value)


RawT = TypeVar("RawT", bound=RawModel)


def parse_raw_records(model: type[RawT], rows: Iterable[Any]) -> list[RawT]:
    """Validate upstream rows, skipping the ones that are not objects at all."""

    records: list[RawT] = []
    skipped = 0
    for row in rows:
        if isinstance(row, model):
            records.append(row)
            continue
        if not isinstance(row, Mapping):
            skipped += 1
            continue
        try:
            records.append(model.model_validate(dict(row)))
        except ValidationError as exc:
            skipped += 1
            logger.warning("Skipping malformed {} row: {}", model.__name__, exc.errors()[0]["msg"])
    if skipped:
        logger.warning("Skipped {} malformed {} rows", skipped, model.__name__)
    return records


__all__ = [
    "DashboardModel",
    "RawModel",
    "coerce_flag",
    "coerce_optional_float",
    "coerce_optional_text",
    "coerce_text",
    "parse_raw_records",
    "to_camel",
]
