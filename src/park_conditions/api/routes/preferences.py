"""Notification preference routes.

Updates go through the preference setters so the master switch and the
per-rule switches stay consistent: switching the master off clears every
rule, and switching any rule on switches the master on.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from park_conditions.api.dependencies import get_services
from park_conditions.models.preferences import NotificationPreferences, NotificationRule
from park_conditions.services import ParkServices

router = APIRouter()


class PreferencesUpdate(BaseModel):
    """Update notification switches. Omitted fields are left unchanged."""

    enabled: bool | None = None
    perfect_conditions: bool | None = None
    rain: bool | None = None
    too_wet: bool | None = None
    open_closed: bool | None = None
    favorite_trails: bool | None = None


@router.get("/", response_model=NotificationPreferences)
async def get_preferences(
    services: ParkServices = Depends(get_services),
) -> NotificationPreferences:
    """Get the notification switches."""
    return services.preferences


@router.put("/", response_model=NotificationPreferences)
async def update_preferences(
    data: PreferencesUpdate,
    services: ParkServices = Depends(get_services),
) -> NotificationPreferences:
    """Update the notification switches."""
    # Edit a copy; the engine may be reading the current object
    preferences = services.preferences.model_copy()

    # Master switch first so turning it on with rules in one request works
    if data.enabled is not None:
        preferences.set_enabled(data.enabled)

    for rule in NotificationRule:
        value = getattr(data, rule.value)
        if value is not None:
            preferences.set_rule(rule, value)

    services.update_preferences(preferences)
    return preferences
