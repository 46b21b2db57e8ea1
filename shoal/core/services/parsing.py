"""Lenient parsers for the loosely typed strings the upstream API returns.

Every parser comes in two flavours. The ``*_value`` variants are strict and
return ``None`` when the input cannot be understood, so callers can tell an
unparseable value from a real zero. The plain variants keep the dashboard
contract of never failing and substitute a default instead.
"""

from __future__ import annotations

import math
import re
from datetime import UTC, datetime

_AMOUNT_NOISE = re.compile(r"[^0-9.bmk]", re.IGNORECASE)
_LEADING_NUMBER = re.compile(r"\d+(?:\.\d*)?|\.\d+")
_AMOUNT_SHAPE = re.compile(
    r"^\s*(?:US)?[$€£]?\s*\d[\d,]*(?:\.\d+)?\s*(?:[bmk]|bn|mn|billion|million|thousand)?\s*$",
    re.IGNORECASE,
)
_MULTIPLIERS: tuple[tuple[str, float], ...] = (("b", 1e9), ("m", 1e6), ("k", 1e3))

_DATE_FORMATS: tuple[str, ...] = (
    "%d %b %Y",
    "%d %B %Y",
    "%b %d, %Y",
    "%B %d, %Y",
    "%b %d %Y",
    "%B %d %Y",
    "%Y/%m/%d",
    "%m/%d/%Y",
)


def parse_amount_value(text: object) -> float | None:
    """Parse strings like ``"$9.5m"``, ``"$2.5B"`` or ``"$500K"``.

    Currency symbols and other noise are stripped, the leading decimal number
    is read and scaled by the first of ``b``/``m``/``k`` found in the input.
    """

    if text is None or isinstance(text, bool):
        return None
    if isinstance(text, (int, float)):
        return float(text) if math.isfinite(text) else None

    raw = str(text)
    if not raw.strip():
        return None

    match = _LEADING_NUMBER.match(_AMOUNT_NOISE.sub("", raw))
    if match is None:
        return None
    number = float(match.group())

    lowered = raw.lower()
    for suffix, multiplier in _MULTIPLIERS:
        if suffix in lowered:
            return number * multiplier
    return number


def parse_amount(text: object) -> float:
    """Parse an amount, returning ``0`` when the input is not numeric."""

    value = parse_amount_value(text)
    return 0.0 if value is None else value


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def parse_date_value(text: object) -> datetime | None:
    """Parse an upstream date string into an aware UTC datetime."""

    if isinstance(text, datetime):
        return _as_utc(text)
    if not isinstance(text, str):
        return None

    candidate = text.strip()
    if not candidate:
        return None

    try:
        return _as_utc(datetime.fromisoformat(candidate))
    except ValueError:
        pass

    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(candidate, fmt).replace(tzinfo=UTC)
        except ValueError:
            continue
    return None


def parse_date(text: object, *, now: datetime | None = None) -> datetime:
    """Parse a date, substituting ``now`` when the input is unparseable."""

    value = parse_date_value(text)
    if value is not None:
        return value
    return now or datetime.now(UTC)


def parse_timestamp_value(seconds: float | None) -> datetime | None:
    """Convert unix seconds to an aware UTC datetime."""

    if seconds is None or not math.isfinite(seconds):
        return None
    try:
        return datetime.fromtimestamp(seconds, tz=UTC)
    except (OverflowError, OSError, ValueError):
        return None


def looks_like_amount(text: object) -> bool:
    return isinstance(text, str) and bool(_AMOUNT_SHAPE.match(text))


def looks_like_date(text: object) -> bool:
    return parse_date_value(text) is not None


__all__ = [
    "looks_like_amount",
    "looks_like_date",
    "parse_amount",
    "parse_amount_value",
    "parse_date",
    "parse_date_value",
    "parse_timestamp_value",
]
