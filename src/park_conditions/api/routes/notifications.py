"""Notification log routes."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from park_conditions.api.dependencies import get_services
from park_conditions.models.notification import NotificationEvent
from park_conditions.presentation import NOTIFICATION_COLORS, NOTIFICATION_ICONS
from park_conditions.services import ParkServices

router = APIRouter()


class NotificationResponse(NotificationEvent):
    """A logged notification with display hints."""

    icon: str
    color: str


class NotificationListResponse(BaseModel):
    """The notification log, newest first."""

    unread_count: int
    notifications: list[NotificationResponse]


def _notification_response(event: NotificationEvent) -> NotificationResponse:
    return NotificationResponse(
        **event.model_dump(),
        icon=NOTIFICATION_ICONS[event.kind],
        color=NOTIFICATION_COLORS[event.kind],
    )


@router.get("/", response_model=NotificationListResponse)
async def list_notifications(
    unread_only: bool = False,
    services: ParkServices = Depends(get_services),
) -> NotificationListResponse:
    """List logged notifications."""
    events = services.log.notifications()
    if unread_only:
        events = [event for event in events if not event.is_read]
    return NotificationListResponse(
        unread_count=services.log.unread_count,
        notifications=[_notification_response(event) for event in events],
    )


@router.post("/read-all", status_code=status.HTTP_204_NO_CONTENT)
async def mark_all_read(
    services: ParkServices = Depends(get_services),
) -> None:
    """Mark every notification read."""
    services.log.mark_all_as_read()


@router.post("/{notification_id}/read", status_code=status.HTTP_204_NO_CONTENT)
async def mark_read(
    notification_id: uuid.UUID,
    services: ParkServices = Depends(get_services),
) -> None:
    """Mark one notification read."""
    if not services.log.mark_as_read(notification_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notification not found",
        )


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_notification(
    notification_id: uuid.UUID,
    services: ParkServices = Depends(get_services),
) -> None:
    """Remove one notification."""
    if not services.log.remove(notification_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notification not found",
        )


@router.delete("/", status_code=status.HTTP_204_NO_CONTENT)
async def clear_notifications(
    services: ParkServices = Depends(get_services),
) -> None:
    """Clear the notification log."""
    services.log.clear()
