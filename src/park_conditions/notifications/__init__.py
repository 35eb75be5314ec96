"""Change detection and notification delivery."""

from park_conditions.notifications.dispatch import (
    DeliveryRequest,
    LoggingDispatcher,
    NotificationDispatcher,
)
from park_conditions.notifications.engine import ChangeNotificationEngine, CycleResult
from park_conditions.notifications.log import NotificationLog

__all__ = [
    "DeliveryRequest",
    "LoggingDispatcher",
    "NotificationDispatcher",
    "ChangeNotificationEngine",
    "CycleResult",
    "NotificationLog",
]
