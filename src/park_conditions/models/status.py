"""Park and trail status enumerations.

Enum values double as the stable string tags written to persistent
storage, so they must not change once released.
"""

from __future__ import annotations

from enum import Enum


class ParkStatus(str, Enum):
    """Discrete condition of the park, derived from weather and time of day."""

    CLOSED = "closed"
    PERFECT_CONDITIONS = "perfectConditions"  # gusts <= 15 km/h
    WINDY_CONDITIONS = "windyConditions"  # gusts 15-30 km/h
    STRONG_WINDS = "strongWinds"  # gusts 30-45 km/h
    EXTREME_WINDS = "extremeWinds"  # gusts > 45 km/h
    WET_CONDITIONS = "wetConditions"  # > 7 mm of rain over ~2 days

    @property
    def wind_severity(self) -> int | None:
        """Rank of the wind-driven statuses (0 = calm), None for the others."""
        return _WIND_SEVERITY.get(self)


_WIND_SEVERITY = {
    ParkStatus.PERFECT_CONDITIONS: 0,
    ParkStatus.WINDY_CONDITIONS: 1,
    ParkStatus.STRONG_WINDS: 2,
    ParkStatus.EXTREME_WINDS: 3,
}


class TrailStatus(str, Enum):
    """Condition of a single trail under a given park status."""

    OPEN = "Open"
    OPEN_WITH_SAFETY_OFFICER = "Open if Safety Officer onsite"
    CAUTION = "Caution"
    CLOSED = "Closed"

    @property
    def is_open(self) -> bool:
        """Whether the trail can be ridden in some form."""
        return self != TrailStatus.CLOSED


class TrailDifficulty(str, Enum):
    """Trail difficulty grade, easiest first."""

    GREEN = "Green"
    BLUE = "Blue"
    BLACK_DIAMOND = "Black Diamond"
    DOUBLE_BLACK_DIAMOND = "Double Black Diamond"
    PROLINE = "Proline"

    @property
    def rank(self) -> int:
        """Position in the difficulty order (0 = easiest)."""
        return list(TrailDifficulty).index(self)


class TrailDirection(str, Enum):
    """Direction a trail is ridden."""

    DOWNHILL = "Downhill"
    UPHILL = "Uphill"
    MULTI_DIRECTION = "Multi-direction"


class SuitableBike(str, Enum):
    """Bike types a trail suits."""

    DIRT_JUMPER = "Dirt Jumper"
    HARDTAIL = "Hardtail"
    TRAIL = "Trail"
    ENDURO = "Enduro"
    DOWNHILL = "Downhill"
