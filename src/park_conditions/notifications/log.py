"""In-app notification log.

The log keeps the most recent notifications (newest first, capped) so the
app can show a history with read/unread state. Every change is saved
through the repository; a failed save is logged and the in-memory log
stays authoritative for the rest of the process.
"""

from __future__ import annotations

import logging
import threading
import uuid
from datetime import datetime, timedelta

from park_conditions.database.repository import StateRepository
from park_conditions.exceptions import PersistenceError
from park_conditions.models.notification import NotificationEvent

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 100


class NotificationLog:
    """Capped, newest-first history of notification events."""

    def __init__(
        self,
        repository: StateRepository | None = None,
        limit: int = DEFAULT_LIMIT,
    ):
        self.limit = limit
        self._repository = repository
        self._lock = threading.Lock()
        self._items: list[NotificationEvent] = []
        if repository is not None:
            self._items = repository.load_notifications()[:limit]

    def notifications(self) -> list[NotificationEvent]:
        """Copy of the log, newest first."""
        with self._lock:
            return list(self._items)

    @property
    def unread_count(self) -> int:
        with self._lock:
            return sum(1 for item in self._items if not item.is_read)

    def add(self, event: NotificationEvent) -> None:
        """Insert an event at the front, dropping the oldest past the cap."""
        with self._lock:
            self._items.insert(0, event)
            del self._items[self.limit:]
            items = list(self._items)
        self._save(items)

    def mark_as_read(self, notification_id: uuid.UUID) -> bool:
        """Mark one notification read.

        Returns:
            True if the notification was found
        """
        with self._lock:
            for index, item in enumerate(self._items):
                if item.id == notification_id:
                    self._items[index] = item.model_copy(update={"is_read": True})
                    break
            else:
                return False
            items = list(self._items)
        self._save(items)
        return True

    def mark_all_as_read(self) -> None:
        with self._lock:
            self._items = [
                item if item.is_read else item.model_copy(update={"is_read": True})
                for item in self._items
            ]
            items = list(self._items)
        self._save(items)

    def remove(self, notification_id: uuid.UUID) -> bool:
        """Remove one notification.

        Returns:
            True if the notification was found
        """
        with self._lock:
            remaining = [item for item in self._items if item.id != notification_id]
            if len(remaining) == len(self._items):
                return False
            self._items = remaining
            items = list(self._items)
        self._save(items)
        return True

    def clear(self) -> None:
        with self._lock:
            self._items = []
        self._save([])

    def clear_older_than(self, now: datetime, days: int = 30) -> int:
        """Drop notifications older than a number of days.

        Returns:
            Number of notifications removed
        """
        cutoff = now - timedelta(days=days)
        with self._lock:
            kept = [item for item in self._items if item.timestamp > cutoff]
            removed = len(self._items) - len(kept)
            self._items = kept
            items = list(self._items)
        if removed:
            self._save(items)
        return removed

    def _save(self, items: list[NotificationEvent]) -> None:
        if self._repository is None:
            return
        try:
            self._repository.save_notifications(items)
        except PersistenceError as e:
            logger.error(f"Failed to save notification log: {e}")

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
