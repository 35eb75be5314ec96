"""Park status classification.

The park status is a pure function of the latest wind gust, the rolling
rain total and the local time. It is never stored as mutable state; every
cycle recomputes it.

Order of checks:

1. Outside opening hours the park is closed (weather is irrelevant)
2. Without a current observation the park is closed (unknown is unsafe)
3. More than the wet threshold of rain makes it too wet (overrides wind)
4. Otherwise the wind gust picks a bucket, upper bounds inclusive:
   <= 15 perfect, <= 30 windy, <= 45 strong, above that extreme
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from park_conditions.models.status import ParkStatus


@dataclass(frozen=True)
class StatusThresholds:
    """Thresholds and opening hours used to classify the park."""

    wet_threshold_mm: float = 7.0
    perfect_max_gust_kmh: float = 15.0
    windy_max_gust_kmh: float = 30.0
    strong_max_gust_kmh: float = 45.0
    opening_hour: int = 6
    # Southern hemisphere: longer summer hours from October to March
    summer_months: frozenset[int] = field(
        default_factory=lambda: frozenset({10, 11, 12, 1, 2, 3})
    )
    summer_closing_hour: int = 19
    winter_closing_hour: int = 17

    def closing_hour(self, month: int) -> int:
        """Closing hour for a calendar month."""
        if month in self.summer_months:
            return self.summer_closing_hour
        return self.winter_closing_hour


DEFAULT_THRESHOLDS = StatusThresholds()


def is_open_by_schedule(
    now: datetime, thresholds: StatusThresholds = DEFAULT_THRESHOLDS
) -> bool:
    """Check if the park is within opening hours at a local time."""
    return thresholds.opening_hour <= now.hour < thresholds.closing_hour(now.month)


def classify_wind(
    wind_gust_kmh: float, thresholds: StatusThresholds = DEFAULT_THRESHOLDS
) -> ParkStatus:
    """Bucket a wind gust into a wind-driven park status."""
    if wind_gust_kmh <= thresholds.perfect_max_gust_kmh:
        return ParkStatus.PERFECT_CONDITIONS
    if wind_gust_kmh <= thresholds.windy_max_gust_kmh:
        return ParkStatus.WINDY_CONDITIONS
    if wind_gust_kmh <= thresholds.strong_max_gust_kmh:
        return ParkStatus.STRONG_WINDS
    return ParkStatus.EXTREME_WINDS


def classify(
    wind_gust_kmh: float | None,
    rain_total_mm: float,
    now: datetime,
    thresholds: StatusThresholds = DEFAULT_THRESHOLDS,
) -> ParkStatus:
    """Classify the park.

    Args:
        wind_gust_kmh: Latest wind gust, or None if there is no observation
        rain_total_mm: Rolling rain total
        now: Local time at the park
        thresholds: Classification thresholds

    Returns:
        The park status
    """
    if not is_open_by_schedule(now, thresholds):
        return ParkStatus.CLOSED
    if wind_gust_kmh is None:
        return ParkStatus.CLOSED
    if rain_total_mm > thresholds.wet_threshold_mm:
        return ParkStatus.WET_CONDITIONS
    return classify_wind(wind_gust_kmh, thresholds)
