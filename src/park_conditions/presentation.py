"""Display lookups for statuses and notifications.

Colours are plain colour names so any front end (app, watch, web) can map
them to its own palette. Icons are SF Symbol names as used by the apps.
"""

from __future__ import annotations

from typing import Any

from park_conditions.conditions import ConditionsReading
from park_conditions.models.notification import NotificationKind
from park_conditions.models.status import (
    ParkStatus,
    TrailDifficulty,
    TrailDirection,
    TrailStatus,
)

PARK_STATUS_TITLES: dict[ParkStatus, str] = {
    ParkStatus.CLOSED: "Park is Closed",
    ParkStatus.PERFECT_CONDITIONS: "Perfect Conditions",
    ParkStatus.WINDY_CONDITIONS: "Windy Conditions",
    ParkStatus.STRONG_WINDS: "Strong Winds",
    ParkStatus.EXTREME_WINDS: "Extreme Winds",
    ParkStatus.WET_CONDITIONS: "Wet Conditions",
}

PARK_STATUS_IMAGES: dict[ParkStatus, str] = {
    ParkStatus.CLOSED: "BareCreek-Night",
    ParkStatus.PERFECT_CONDITIONS: "BareCreek-Open",
    ParkStatus.WINDY_CONDITIONS: "BareCreek-Wind",
    ParkStatus.STRONG_WINDS: "BareCreek-StrongWind",
    ParkStatus.EXTREME_WINDS: "BareCreek-ExtremeWind",
    ParkStatus.WET_CONDITIONS: "BareCreek-Wet",
}

PARK_STATUS_COLORS: dict[ParkStatus, str] = {
    ParkStatus.CLOSED: "red",
    ParkStatus.PERFECT_CONDITIONS: "green",
    ParkStatus.WINDY_CONDITIONS: "yellow",
    ParkStatus.STRONG_WINDS: "orange",
    ParkStatus.EXTREME_WINDS: "red",
    ParkStatus.WET_CONDITIONS: "blue",
}

TRAIL_STATUS_COLORS: dict[TrailStatus, str] = {
    TrailStatus.OPEN: "green",
    TrailStatus.OPEN_WITH_SAFETY_OFFICER: "blue",
    TrailStatus.CAUTION: "orange",
    TrailStatus.CLOSED: "red",
}

TRAIL_STATUS_ICONS: dict[TrailStatus, str] = {
    TrailStatus.OPEN: "checkmark.circle.fill",
    TrailStatus.OPEN_WITH_SAFETY_OFFICER: "person.fill.checkmark",
    TrailStatus.CAUTION: "exclamationmark.triangle.fill",
    TrailStatus.CLOSED: "xmark.circle.fill",
}

DIFFICULTY_COLORS: dict[TrailDifficulty, str] = {
    TrailDifficulty.GREEN: "green",
    TrailDifficulty.BLUE: "blue",
    TrailDifficulty.BLACK_DIAMOND: "black",
    TrailDifficulty.DOUBLE_BLACK_DIAMOND: "black",
    TrailDifficulty.PROLINE: "purple",
}

DIFFICULTY_ICONS: dict[TrailDifficulty, str] = {
    TrailDifficulty.GREEN: "circle.fill",
    TrailDifficulty.BLUE: "square.fill",
    TrailDifficulty.BLACK_DIAMOND: "diamond.fill",
    TrailDifficulty.DOUBLE_BLACK_DIAMOND: "diamond.fill",
    TrailDifficulty.PROLINE: "hexagon.fill",
}

DIRECTION_ICONS: dict[TrailDirection, str] = {
    TrailDirection.DOWNHILL: "arrow.down",
    TrailDirection.UPHILL: "arrow.up",
    TrailDirection.MULTI_DIRECTION: "arrow.up.arrow.down",
}

NOTIFICATION_ICONS: dict[NotificationKind, str] = {
    NotificationKind.PERFECT_CONDITIONS: "checkmark.circle.fill",
    NotificationKind.RAIN: "cloud.rain.fill",
    NotificationKind.TOO_WET: "exclamationmark.triangle.fill",
    NotificationKind.PARK_OPEN_CLOSED: "clock.fill",
    NotificationKind.FAVORITE_TRAIL: "heart.fill",
    NotificationKind.GENERAL_UPDATE: "bell.fill",
}

NOTIFICATION_COLORS: dict[NotificationKind, str] = {
    NotificationKind.PERFECT_CONDITIONS: "green",
    NotificationKind.RAIN: "blue",
    NotificationKind.TOO_WET: "orange",
    NotificationKind.PARK_OPEN_CLOSED: "purple",
    NotificationKind.FAVORITE_TRAIL: "red",
    NotificationKind.GENERAL_UPDATE: "gray",
}


def companion_payload(reading: ConditionsReading) -> dict[str, Any] | None:
    """Build the status summary pushed to the companion watch app.

    Values are preformatted strings with one decimal place.

    Returns:
        The payload, or None when no weather has been received yet
    """
    current = reading.current
    if current is None:
        return None
    return {
        "parkStatus": PARK_STATUS_TITLES[reading.park_status],
        "statusColor": PARK_STATUS_COLORS[reading.park_status],
        "windSpeed": f"{current.wind_gust_kmh:.1f}",
        "windDirection": current.wind_direction,
        "rainTotal": f"{reading.rain_total_mm:.1f}",
    }
