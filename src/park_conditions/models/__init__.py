"""Domain models for park conditions."""

from park_conditions.models.observation import (
    NO_DATA,
    Observation,
    ObservationStore,
    format_timestamp,
    parse_timestamp,
    sort_newest_first,
)
from park_conditions.models.status import (
    ParkStatus,
    SuitableBike,
    TrailDifficulty,
    TrailDirection,
    TrailStatus,
)
from park_conditions.models.trail import Trail
from park_conditions.models.notification import NotificationEvent, NotificationKind
from park_conditions.models.snapshot import Snapshot
from park_conditions.models.preferences import (
    NotificationPreferences,
    NotificationRule,
)

__all__ = [
    # Observation
    "NO_DATA",
    "Observation",
    "ObservationStore",
    "format_timestamp",
    "parse_timestamp",
    "sort_newest_first",
    # Status
    "ParkStatus",
    "SuitableBike",
    "TrailDifficulty",
    "TrailDirection",
    "TrailStatus",
    # Trail
    "Trail",
    # Notification
    "NotificationEvent",
    "NotificationKind",
    "Snapshot",
    "NotificationPreferences",
    "NotificationRule",
]
