"""Notification delivery.

The engine hands each event to a ``NotificationDispatcher``, which asks the
platform to show it. Delivery is fire-and-forget: a dispatcher may return
before the platform has shown anything, and failures are reported by
raising ``DispatchError`` so the engine can log them and move on.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from park_conditions.models.notification import NotificationEvent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeliveryRequest:
    """What the platform needs to show a notification."""

    title: str
    body: str
    sound: str = "default"
    delay_seconds: float = 1.0
    payload: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_event(cls, event: NotificationEvent) -> "DeliveryRequest":
        """Build a request whose payload lets the app find the event again."""
        payload: dict[str, Any] = {
            "notification_id": str(event.id),
            "kind": event.kind.value,
        }
        if event.deep_link:
            payload["deep_link"] = event.deep_link
        return cls(title=event.title, body=event.body, payload=payload)


class NotificationDispatcher(ABC):
    """Abstract platform notification sender."""

    @abstractmethod
    def dispatch(self, request: DeliveryRequest) -> None:
        """Ask the platform to deliver a notification soon.

        Raises:
            DispatchError: If the platform refuses the request
        """


class LoggingDispatcher(NotificationDispatcher):
    """Dispatcher that only logs; the default when no platform is attached."""

    def __init__(self) -> None:
        self.sent: list[DeliveryRequest] = []

    def dispatch(self, request: DeliveryRequest) -> None:
        logger.info(f"Notification: {request.title!r} - {request.body!r}")
        self.sent.append(request)
