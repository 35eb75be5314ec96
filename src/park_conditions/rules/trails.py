"""Trail status resolution."""

from __future__ import annotations

from collections.abc import Iterable

from park_conditions.models.status import ParkStatus, TrailStatus
from park_conditions.models.trail import Trail


def trail_status(trail: Trail, park_status: ParkStatus) -> TrailStatus:
    """Look up a trail's status under a park status."""
    return trail.status_for(park_status)


def resolve_trail_statuses(
    trails: Iterable[Trail], park_status: ParkStatus
) -> dict[str, TrailStatus]:
    """Resolve every trail's status, keyed by trail id."""
    return {trail.id: trail_status(trail, park_status) for trail in trails}
