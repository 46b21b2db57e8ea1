"""Trend readings derived from daily snapshots."""

from __future__ import annotations

from enum import Enum

from shoal.core.models.base import DashboardModel


class TrendDirection(str, Enum):
    UP = "up"
    DOWN = "down"
    NEUTRAL = "neutral"


class TrendReading(DashboardModel):
    """Change of a tracked value between two equal-length periods."""

    trend_percentage: float
    trend_direction: TrendDirection
    trend_display: str
    previous_value: float


__all__ = ["TrendDirection", "TrendReading"]
