"""Trail search, filtering and sorting."""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

from pydantic import BaseModel

from park_conditions.models.status import (
    ParkStatus,
    SuitableBike,
    TrailDifficulty,
    TrailDirection,
    TrailStatus,
)
from park_conditions.models.trail import Trail


class SortOption(str, Enum):
    """Trail list orderings."""

    ALPHABETICAL = "alphabetical"
    STATUS = "status"
    DIRECTION = "direction"
    DIFFICULTY = "difficulty"
    FAVORITES = "favorites"


class TrailQuery(BaseModel):
    """Filters and ordering for a trail list. Unset filters match everything."""

    search_text: str = ""
    favorites_only: bool = False
    difficulty: TrailDifficulty | None = None
    direction: TrailDirection | None = None
    status: TrailStatus | None = None
    bike: SuitableBike | None = None
    sort: SortOption = SortOption.ALPHABETICAL

    @property
    def has_active_filters(self) -> bool:
        return bool(
            self.search_text
            or self.favorites_only
            or self.difficulty
            or self.direction
            or self.status
            or self.bike
        )

    def matches(self, trail: Trail, park_status: ParkStatus) -> bool:
        """Check a trail against every filter."""
        if self.search_text and self.search_text.lower() not in trail.name.lower():
            return False
        if self.favorites_only and not trail.is_favorite:
            return False
        if self.difficulty and trail.difficulty != self.difficulty:
            return False
        if self.direction and trail.direction != self.direction:
            return False
        if self.status and trail.status_for(park_status) != self.status:
            return False
        if self.bike and self.bike not in trail.suitable_bikes:
            return False
        return True


def filter_trails(
    trails: Iterable[Trail], park_status: ParkStatus, query: TrailQuery
) -> list[Trail]:
    """Apply a query's filters and ordering to trails."""
    selected = [trail for trail in trails if query.matches(trail, park_status)]

    # Stable sorts keep catalog order within ties
    if query.sort == SortOption.ALPHABETICAL:
        selected.sort(key=lambda t: t.name)
    elif query.sort == SortOption.STATUS:
        selected.sort(key=lambda t: t.status_for(park_status).value)
    elif query.sort == SortOption.DIRECTION:
        selected.sort(key=lambda t: t.direction.value)
    elif query.sort == SortOption.DIFFICULTY:
        selected.sort(key=lambda t: t.difficulty.rank)
    elif query.sort == SortOption.FAVORITES:
        selected.sort(key=lambda t: not t.is_favorite)
    return selected
