"""Bare Creek trail catalog.

Each trail's status map says how the trail is run under every park status.
Most trails share one of a handful of patterns, defined once below.
"""

from __future__ import annotations

from park_conditions.models.status import (
    ParkStatus,
    SuitableBike,
    TrailDifficulty,
    TrailDirection,
    TrailStatus,
)
from park_conditions.models.trail import Trail

# Open in any weather, closed only with the park
ALL_WEATHER: dict[ParkStatus, TrailStatus] = {
    ParkStatus.CLOSED: TrailStatus.CLOSED,
    ParkStatus.PERFECT_CONDITIONS: TrailStatus.OPEN,
    ParkStatus.WINDY_CONDITIONS: TrailStatus.OPEN,
    ParkStatus.STRONG_WINDS: TrailStatus.OPEN,
    ParkStatus.EXTREME_WINDS: TrailStatus.OPEN,
    ParkStatus.WET_CONDITIONS: TrailStatus.OPEN,
}

# Wind does not matter, wet ground does
DRY_ONLY: dict[ParkStatus, TrailStatus] = {
    **ALL_WEATHER,
    ParkStatus.WET_CONDITIONS: TrailStatus.CLOSED,
}

# Jump lines: caution in strong wind, closed in extreme wind or wet
STANDARD: dict[ParkStatus, TrailStatus] = {
    ParkStatus.CLOSED: TrailStatus.CLOSED,
    ParkStatus.PERFECT_CONDITIONS: TrailStatus.OPEN,
    ParkStatus.WINDY_CONDITIONS: TrailStatus.OPEN,
    ParkStatus.STRONG_WINDS: TrailStatus.CAUTION,
    ParkStatus.EXTREME_WINDS: TrailStatus.CLOSED,
    ParkStatus.WET_CONDITIONS: TrailStatus.CLOSED,
}

# Big features: only in perfect conditions with a safety officer present
SAFETY_OFFICER_ONLY: dict[ParkStatus, TrailStatus] = {
    ParkStatus.CLOSED: TrailStatus.CLOSED,
    ParkStatus.PERFECT_CONDITIONS: TrailStatus.OPEN_WITH_SAFETY_OFFICER,
    ParkStatus.WINDY_CONDITIONS: TrailStatus.CLOSED,
    ParkStatus.STRONG_WINDS: TrailStatus.CLOSED,
    ParkStatus.EXTREME_WINDS: TrailStatus.CLOSED,
    ParkStatus.WET_CONDITIONS: TrailStatus.CLOSED,
}

# Not currently open to the public
ALWAYS_CLOSED: dict[ParkStatus, TrailStatus] = {
    status: TrailStatus.CLOSED for status in ParkStatus
}

_EASY = [SuitableBike.HARDTAIL, SuitableBike.TRAIL, SuitableBike.ENDURO]
_INTERMEDIATE = [SuitableBike.TRAIL, SuitableBike.ENDURO, SuitableBike.DOWNHILL]
_EXPERT = [SuitableBike.ENDURO, SuitableBike.DOWNHILL]


def _trail(
    trail_id: str,
    name: str,
    difficulty: TrailDifficulty,
    direction: TrailDirection,
    status_map: dict[ParkStatus, TrailStatus],
    bikes: list[SuitableBike],
    image_name: str,
) -> Trail:
    return Trail(
        id=trail_id,
        name=name,
        difficulty=difficulty,
        direction=direction,
        status_map=dict(status_map),
        suitable_bikes=list(bikes),
        image_name=image_name,
    )


def default_trails() -> list[Trail]:
    """Build a fresh copy of the Bare Creek trail catalog."""
    down = TrailDirection.DOWNHILL
    up = TrailDirection.UPHILL
    return [
        _trail(
            "pump-track", "Pump Track", TrailDifficulty.BLUE,
            TrailDirection.MULTI_DIRECTION, ALL_WEATHER,
            [SuitableBike.DIRT_JUMPER, SuitableBike.HARDTAIL, SuitableBike.TRAIL],
            "Trails-PumpTrack",
        ),
        _trail(
            "falcon-oath", "Falcon Oath", TrailDifficulty.GREEN, down, DRY_ONLY,
            _EASY, "Trails-FalconOath",
        ),
        _trail(
            "mild", "Mild", TrailDifficulty.BLACK_DIAMOND, down, STANDARD,
            _INTERMEDIATE, "Trails-Mild",
        ),
        _trail(
            "medium", "Medium", TrailDifficulty.BLACK_DIAMOND, down, STANDARD,
            _INTERMEDIATE, "Trails-Medium",
        ),
        _trail(
            "spicy", "Spicy", TrailDifficulty.DOUBLE_BLACK_DIAMOND, down,
            SAFETY_OFFICER_ONLY, _EXPERT, "Trails-Spicy",
        ),
        _trail(
            "social-distancing", "Social Distancing", TrailDifficulty.BLACK_DIAMOND,
            down, STANDARD, _INTERMEDIATE, "Trails-SocialDistancing",
        ),
        _trail(
            "livewire", "Livewire", TrailDifficulty.DOUBLE_BLACK_DIAMOND, down,
            SAFETY_OFFICER_ONLY, _EXPERT, "Trails-Livewire",
        ),
        _trail(
            "trash-panda", "Trash Panda", TrailDifficulty.BLUE, down, STANDARD,
            _INTERMEDIATE, "Trails-TrashPanda",
        ),
        _trail(
            "bin-chicken", "Bin Chicken", TrailDifficulty.BLUE, down, STANDARD,
            _INTERMEDIATE, "Trails-BinChicken",
        ),
        _trail(
            "short-circuit", "Short Circuit", TrailDifficulty.BLUE, down, STANDARD,
            _INTERMEDIATE, "Trails-ShortCircuit",
        ),
        _trail(
            "power-trip", "Power Trip", TrailDifficulty.BLACK_DIAMOND, down, STANDARD,
            _INTERMEDIATE, "Trails-PowerTrip",
        ),
        _trail(
            "darcside", "Darcside", TrailDifficulty.PROLINE, down, ALWAYS_CLOSED,
            _EXPERT, "Trails-Darcside",
        ),
        _trail(
            "blackout", "Blackout", TrailDifficulty.DOUBLE_BLACK_DIAMOND, down,
            ALWAYS_CLOSED, _EXPERT, "Trails-Blackout",
        ),
        _trail(
            "watts-up", "Watts Up", TrailDifficulty.PROLINE, down, ALWAYS_CLOSED,
            _EXPERT, "Trails-WattsUp",
        ),
        _trail(
            "four-seconds", "Four Seconds", TrailDifficulty.GREEN, up, STANDARD,
            _EASY, "Trails-FourSeconds",
        ),
        _trail(
            "the-butler", "The Butler", TrailDifficulty.GREEN, up, STANDARD,
            _EASY, "Trails-TheButler",
        ),
        _trail(
            "lighten-up", "Lighten Up", TrailDifficulty.GREEN, up, STANDARD,
            _EASY, "Trails-LightenUp",
        ),
        _trail(
            "power-back", "Power Back", TrailDifficulty.GREEN, up, STANDARD,
            _EASY, "Trails-PowerBack",
        ),
    ]
