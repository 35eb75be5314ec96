"""Snapshot of previously derived state.

The snapshot is all the engine remembers between cycles. A field that is
None has never been observed, which the notification rules treat as a cold
start rather than as a change.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from park_conditions.models.status import ParkStatus, TrailStatus


class Snapshot(BaseModel):
    """Last known park state used to detect transitions."""

    park_status: ParkStatus | None = None
    is_raining: bool | None = None
    is_park_open: bool | None = None
    trail_statuses: dict[str, TrailStatus] = Field(default_factory=dict)
    last_notification_at: datetime | None = Field(
        default=None, description="When a notification was last sent to the OS"
    )

    @property
    def is_empty(self) -> bool:
        """Check if nothing has been recorded yet."""
        return (
            self.park_status is None
            and self.is_raining is None
            and self.is_park_open is None
            and not self.trail_statuses
        )
