"""Notification models."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class NotificationKind(str, Enum):
    """Kinds of notification the engine can raise."""

    PERFECT_CONDITIONS = "perfectConditions"
    RAIN = "rain"
    TOO_WET = "tooWet"
    PARK_OPEN_CLOSED = "parkOpenClosed"
    FAVORITE_TRAIL = "favoriteTrails"
    GENERAL_UPDATE = "generalUpdate"


class NotificationEvent(BaseModel):
    """A notification raised by the engine.

    Everything except ``is_read`` is fixed at creation; the notification log
    replaces the record when the user reads it.
    """

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    kind: NotificationKind
    title: str
    body: str
    timestamp: datetime
    is_read: bool = False
    deep_link: str | None = Field(
        default=None, description="In-app destination opened from the notification"
    )
    trail_id: str | None = Field(
        default=None, description="Trail the notification is about, if any"
    )
