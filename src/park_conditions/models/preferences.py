"""Notification preferences.

The master switch and the per-rule switches are kept consistent:

- turning the master switch off turns every rule off
- turning any rule on turns the master switch on

The engine only checks ``is_active`` before evaluating rules, which is
correct only while these invariants hold, so mutate preferences through
``set_enabled`` and ``set_rule`` rather than assigning fields directly.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, model_validator


class NotificationRule(str, Enum):
    """Individually toggleable notification rules."""

    PERFECT_CONDITIONS = "perfect_conditions"
    RAIN = "rain"
    TOO_WET = "too_wet"
    OPEN_CLOSED = "open_closed"
    FAVORITE_TRAILS = "favorite_trails"


class NotificationPreferences(BaseModel):
    """User notification switches plus the OS authorization state."""

    enabled: bool = Field(default=False, description="Master notification switch")
    authorized: bool = Field(
        default=False, description="Whether the OS allows this app to notify"
    )
    perfect_conditions: bool = False
    rain: bool = False
    too_wet: bool = False
    open_closed: bool = False
    favorite_trails: bool = False

    @model_validator(mode="after")
    def enforce_master_switch(self) -> "NotificationPreferences":
        """Any enabled rule implies the master switch is on."""
        if any(self.is_rule_enabled(rule) for rule in NotificationRule):
            self.enabled = True
        return self

    @property
    def is_active(self) -> bool:
        """Whether notifications may be emitted at all."""
        return self.enabled and self.authorized

    def is_rule_enabled(self, rule: NotificationRule) -> bool:
        """Check a single rule switch."""
        return bool(getattr(self, rule.value))

    def set_enabled(self, value: bool) -> None:
        """Set the master switch, clearing every rule when turned off."""
        self.enabled = value
        if not value:
            for rule in NotificationRule:
                setattr(self, rule.value, False)

    def set_rule(self, rule: NotificationRule, value: bool) -> None:
        """Set a rule switch, turning the master switch on if needed."""
        setattr(self, rule.value, value)
        if value:
            self.enabled = True

    def enable_all(self) -> None:
        """Turn on the master switch and every rule."""
        for rule in NotificationRule:
            self.set_rule(rule, True)
