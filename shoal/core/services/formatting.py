"""Display formatting shared by the dashboard transformers.

Rounding follows JavaScript's ``Number.prototype.toFixed`` and ``Math.round``
so the rendered strings match what dashboard consumers already display.
"""

from __future__ import annotations

import math
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Context, Decimal

_DECIMAL_CONTEXT = Context(prec=100)


def to_fixed(value: float, digits: int) -> str:
    """Format ``value`` with ``digits`` decimals, rounding half away from zero."""

    if not math.isfinite(value):
        return str(value)
    quantum = Decimal(1).scaleb(-digits)
    return str(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP, context=_DECIMAL_CONTEXT))


def js_round(value: float) -> int:
    """Round like JavaScript ``Math.round`` (halves go towards +infinity)."""

    return math.floor(value + 0.5)


def _scaled(num: float, small_digits: int) -> str:
    if num >= 1e9:
        return f"${to_fixed(num / 1e9, 1)}B"
    if num >= 1e6:
        return f"${to_fixed(num / 1e6, 0)}M"
    if num >= 1e3:
        return f"${to_fixed(num / 1e3, 0)}K"
    return f"${to_fixed(num, small_digits)}"


def format_amount(num: float) -> str:
    """Format a funding amount: ``$2.5B``, ``$10M``, ``$500K``, ``$120``."""

    return _scaled(num, 0)


def format_number(num: float | None) -> str:
    """Format a market figure; sub-thousand values keep two decimals."""

    if num is None:
        return "$0"
    return _scaled(num, 2)


def format_price(price: float | None) -> str:
    """Format a token price with precision that grows as the price shrinks."""

    if price is None:
        return "$0.00"
    if price < 0.01:
        return f"${to_fixed(price, 6)}"
    if price < 1:
        return f"${to_fixed(price, 4)}"
    return f"${to_fixed(price, 2)}"


def format_calendar_date(value: datetime) -> str:
    """``Aug 7, 2025``"""

    return f"{value.strftime('%b')} {value.day}, {value.year}"


def format_relative_date(value: datetime, *, now: datetime | None = None) -> str:
    """Describe how long ago ``value`` was, falling back to a calendar date."""

    reference = now or datetime.now(UTC)
    diff_days = math.floor((reference - value).total_seconds() / 86400)

    if diff_days <= 0:
        return "Today"
    if diff_days == 1:
        return "Yesterday"
    if diff_days < 7:
        return f"{diff_days} days ago"
    if diff_days < 30:
        return f"{diff_days // 7} weeks ago"
    return format_calendar_date(value)


def format_clock_time(value: datetime) -> str:
    return value.strftime("%H:%M:%S")


def month_label(value: datetime) -> str:
    """``Aug 2025``"""

    return f"{value.strftime('%b')} {value.year}"


def parse_month_label(label: str) -> datetime | None:
    """Inverse of :func:`month_label`, anchored on the first of the month."""

    try:
        return datetime.strptime(f"1 {label}", "%d %b %Y").replace(tzinfo=UTC)
    except ValueError:
        return None


def format_percent_change(value: float) -> str:
    """``+15.3%`` / ``-7.8%`` / ``0.0%``"""

    if value > 0:
        return f"+{to_fixed(value, 1)}%"
    return f"{to_fixed(value, 1)}%"


__all__ = [
    "format_amount",
    "format_calendar_date",
    "format_clock_time",
    "format_number",
    "format_percent_change",
    "format_price",
    "format_relative_date",
    "js_round",
    "month_label",
    "parse_month_label",
    "to_fixed",
]
