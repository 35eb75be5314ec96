"""Trail models."""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator

from park_conditions.models.status import (
    ParkStatus,
    SuitableBike,
    TrailDifficulty,
    TrailDirection,
    TrailStatus,
)


class Trail(BaseModel):
    """A trail in the park catalog.

    The status map is fixed when the catalog is authored and must cover
    every park status. ``is_favorite`` is the only field that changes at
    runtime, and only through the trail catalog.
    """

    id: str = Field(..., min_length=1, description="Stable trail identifier")
    name: str = Field(..., description="Display name")
    difficulty: TrailDifficulty
    direction: TrailDirection
    status_map: dict[ParkStatus, TrailStatus] = Field(
        ..., description="Trail status for every park status"
    )
    suitable_bikes: list[SuitableBike] = Field(default_factory=list)
    image_name: str | None = None
    is_favorite: bool = False

    @model_validator(mode="after")
    def validate_status_map(self) -> "Trail":
        """Reject status maps that do not cover every park status."""
        missing = [status.value for status in ParkStatus if status not in self.status_map]
        if missing:
            raise ValueError(
                f"Trail {self.id!r} has no status for: {', '.join(missing)}"
            )
        return self

    def status_for(self, park_status: ParkStatus) -> TrailStatus:
        """Get this trail's status under a park status."""
        return self.status_map[park_status]

    def is_always_closed(self) -> bool:
        """Check if the trail is closed under every park status."""
        return all(status == TrailStatus.CLOSED for status in self.status_map.values())
