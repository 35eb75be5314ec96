"""Rules that turn observations into park and trail status."""

from park_conditions.rules.classifier import (
    DEFAULT_THRESHOLDS,
    StatusThresholds,
    classify,
    classify_wind,
    is_open_by_schedule,
)
from park_conditions.rules.rain import (
    AnchorMatch,
    AnchorStrategy,
    RainAccumulator,
    RainBreakdown,
    find_reset_anchor,
    rain_breakdown,
    two_day_rain_total,
)
from park_conditions.rules.trails import resolve_trail_statuses, trail_status

__all__ = [
    "DEFAULT_THRESHOLDS",
    "StatusThresholds",
    "classify",
    "classify_wind",
    "is_open_by_schedule",
    "AnchorMatch",
    "AnchorStrategy",
    "RainAccumulator",
    "RainBreakdown",
    "find_reset_anchor",
    "rain_breakdown",
    "two_day_rain_total",
    "resolve_trail_statuses",
    "trail_status",
]
