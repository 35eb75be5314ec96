"""Mapping between domain state and store keys.

Keys match the ones the mobile app has always written, so an exported
key-value dump can be loaded as-is.

Reads never fail: a store error or an unreadable value is logged and the
key is treated as absent, which the engine handles as a cold start.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any

from pydantic import TypeAdapter, ValidationError

from park_conditions.database.store import StateStore
from park_conditions.exceptions import PersistenceError
from park_conditions.models.notification import NotificationEvent
from park_conditions.models.preferences import NotificationPreferences, NotificationRule
from park_conditions.models.snapshot import Snapshot
from park_conditions.models.status import ParkStatus, TrailStatus

logger = logging.getLogger(__name__)

LAST_PARK_STATUS_KEY = "lastParkStatus"
LAST_RAIN_CONDITION_KEY = "lastRainCondition"
LAST_PARK_OPEN_KEY = "lastParkOpen"
LAST_TRAIL_STATUS_MAP_KEY = "lastTrailStatusMap"
LAST_NOTIFICATION_TIME_KEY = "lastNotificationTime"
NOTIFICATIONS_KEY = "appNotifications"
FAVORITES_KEY = "favoriteTrailIDs"

NOTIFICATIONS_ENABLED_KEY = "notificationsEnabled"
PREFERENCE_KEYS: dict[NotificationRule, str] = {
    NotificationRule.PERFECT_CONDITIONS: "notifyPerfectConditions",
    NotificationRule.RAIN: "notifyRain",
    NotificationRule.TOO_WET: "notifyTooWet",
    NotificationRule.OPEN_CLOSED: "notifyOpenClosed",
    NotificationRule.FAVORITE_TRAILS: "notifyFavoriteTrails",
}

_notification_list = TypeAdapter(list[NotificationEvent])


class StateRepository:
    """Loads and saves snapshots, the notification log, favourites and preferences."""

    def __init__(self, store: StateStore):
        self.store = store

    # -- low level -------------------------------------------------------

    def _read_json(self, key: str) -> Any:
        try:
            raw = self.store.get(key)
        except PersistenceError as e:
            logger.warning(f"Could not read {key}, treating as absent: {e}")
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning(f"Ignoring unreadable value for {key}")
            return None

    @staticmethod
    def _dump(value: Any) -> str:
        return json.dumps(value)

    # -- snapshot --------------------------------------------------------

    def load_snapshot(self) -> Snapshot:
        """Load the last snapshot; anything missing stays unknown."""
        snapshot = Snapshot()

        status = self._read_json(LAST_PARK_STATUS_KEY)
        if status is not None:
            try:
                snapshot.park_status = ParkStatus(status)
            except ValueError:
                logger.warning(f"Unknown park status tag {status!r}")

        raining = self._read_json(LAST_RAIN_CONDITION_KEY)
        if isinstance(raining, bool):
            snapshot.is_raining = raining

        park_open = self._read_json(LAST_PARK_OPEN_KEY)
        if isinstance(park_open, bool):
            snapshot.is_park_open = park_open

        trail_map = self._read_json(LAST_TRAIL_STATUS_MAP_KEY)
        if isinstance(trail_map, dict):
            for trail_id, tag in trail_map.items():
                try:
                    snapshot.trail_statuses[trail_id] = TrailStatus(tag)
                except ValueError:
                    logger.warning(f"Unknown trail status tag {tag!r} for {trail_id}")

        notified_at = self._read_json(LAST_NOTIFICATION_TIME_KEY)
        if isinstance(notified_at, str):
            try:
                snapshot.last_notification_at = datetime.fromisoformat(notified_at)
            except ValueError:
                logger.warning(f"Ignoring unreadable notification time {notified_at!r}")

        logger.debug(
            f"Loaded snapshot: status={snapshot.park_status}, raining={snapshot.is_raining},"
            f" open={snapshot.is_park_open}, trails={len(snapshot.trail_statuses)}"
        )
        return snapshot

    def save_snapshot(self, snapshot: Snapshot) -> None:
        """Save a snapshot.

        Raises:
            PersistenceError: If the store cannot be written
        """
        values: dict[str, str] = {
            LAST_TRAIL_STATUS_MAP_KEY: self._dump(
                {trail_id: status.value for trail_id, status in snapshot.trail_statuses.items()}
            ),
        }
        if snapshot.park_status is not None:
            values[LAST_PARK_STATUS_KEY] = self._dump(snapshot.park_status.value)
        if snapshot.is_raining is not None:
            values[LAST_RAIN_CONDITION_KEY] = self._dump(snapshot.is_raining)
        if snapshot.is_park_open is not None:
            values[LAST_PARK_OPEN_KEY] = self._dump(snapshot.is_park_open)
        if snapshot.last_notification_at is not None:
            values[LAST_NOTIFICATION_TIME_KEY] = self._dump(
                snapshot.last_notification_at.isoformat()
            )
        self.store.set_many(values)

    # -- notification log ------------------------------------------------

    def load_notifications(self) -> list[NotificationEvent]:
        """Load the notification log, most recent first."""
        try:
            raw = self.store.get(NOTIFICATIONS_KEY)
        except PersistenceError as e:
            logger.warning(f"Could not read notifications: {e}")
            return []
        if raw is None:
            return []
        try:
            notifications = _notification_list.validate_json(raw)
        except ValidationError:
            logger.warning("Ignoring unreadable notification log")
            return []
        return sorted(notifications, key=lambda n: n.timestamp, reverse=True)

    def save_notifications(self, notifications: list[NotificationEvent]) -> None:
        """Save the notification log.

        Raises:
            PersistenceError: If the store cannot be written
        """
        self.store.set(
            NOTIFICATIONS_KEY, _notification_list.dump_json(notifications).decode()
        )

    # -- favourites ------------------------------------------------------

    def load_favorites(self) -> set[str]:
        """Load favourite trail ids."""
        favorites = self._read_json(FAVORITES_KEY)
        if not isinstance(favorites, list):
            return set()
        return {str(trail_id) for trail_id in favorites}

    def save_favorites(self, favorites: set[str]) -> None:
        """Save favourite trail ids.

        Raises:
            PersistenceError: If the store cannot be written
        """
        self.store.set(FAVORITES_KEY, self._dump(sorted(favorites)))

    # -- preferences -----------------------------------------------------

    def load_preferences(self, authorized: bool = False) -> NotificationPreferences:
        """Load notification switches; unset switches default to off."""
        values: dict[str, bool] = {"authorized": authorized}
        enabled = self._read_json(NOTIFICATIONS_ENABLED_KEY)
        if isinstance(enabled, bool):
            values["enabled"] = enabled
        for rule, key in PREFERENCE_KEYS.items():
            value = self._read_json(key)
            if isinstance(value, bool):
                values[rule.value] = value
        return NotificationPreferences(**values)

    def save_preferences(self, preferences: NotificationPreferences) -> None:
        """Save notification switches (authorization is OS state, not saved).

        Raises:
            PersistenceError: If the store cannot be written
        """
        values = {NOTIFICATIONS_ENABLED_KEY: self._dump(preferences.enabled)}
        for rule, key in PREFERENCE_KEYS.items():
            values[key] = self._dump(preferences.is_rule_enabled(rule))
        self.store.set_many(values)
