"""Park status routes.

Exposes the derived park status, the current weather and the trail
statuses from the most recent cycle, and lets clients ask for a refresh.
"""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from park_conditions.api.dependencies import get_services
from park_conditions.models.status import ParkStatus, TrailStatus
from park_conditions.monitor import CycleTrigger
from park_conditions.notifications.engine import CycleResult
from park_conditions.presentation import (
    PARK_STATUS_COLORS,
    PARK_STATUS_IMAGES,
    PARK_STATUS_TITLES,
    companion_payload,
)
from park_conditions.services import ParkServices

router = APIRouter()


class WeatherResponse(BaseModel):
    """Latest weather sample."""

    timestamp: str
    wind_gust_kmh: float
    wind_direction: str
    rain_since_reset_mm: float


class StatusResponse(BaseModel):
    """Current park conditions."""

    park_status: ParkStatus
    title: str
    color: str
    image_name: str
    is_park_open: bool
    is_raining: bool
    rain_total_mm: float
    current: WeatherResponse | None
    evaluated_at: datetime
    trail_statuses: dict[str, TrailStatus]
    new_notifications: int = Field(
        default=0, description="Notifications raised by this cycle"
    )
    companion: dict[str, str] | None = Field(
        default=None, description="Summary for the companion watch app"
    )


def _status_response(result: CycleResult) -> StatusResponse:
    reading = result.reading
    current = reading.current
    return StatusResponse(
        park_status=reading.park_status,
        title=PARK_STATUS_TITLES[reading.park_status],
        color=PARK_STATUS_COLORS[reading.park_status],
        image_name=PARK_STATUS_IMAGES[reading.park_status],
        is_park_open=reading.is_park_open,
        is_raining=reading.is_raining,
        rain_total_mm=round(reading.rain_total_mm, 1),
        current=WeatherResponse(
            timestamp=current.timestamp,
            wind_gust_kmh=current.wind_gust_kmh,
            wind_direction=current.wind_direction,
            rain_since_reset_mm=current.rain_since_reset,
        )
        if current
        else None,
        evaluated_at=reading.evaluated_at,
        trail_statuses=result.trail_statuses,
        new_notifications=len(result.events),
        companion=companion_payload(reading),
    )


@router.get("/", response_model=StatusResponse)
async def get_status(
    services: ParkServices = Depends(get_services),
) -> StatusResponse:
    """Get the conditions from the most recent cycle."""
    result = services.engine.last_result
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Park conditions have not been evaluated yet",
        )
    return _status_response(result)


@router.post("/refresh", response_model=StatusResponse)
async def refresh_status(
    services: ParkServices = Depends(get_services),
) -> StatusResponse:
    """Fetch fresh observations and run a cycle now."""
    result = await services.monitor.refresh(CycleTrigger.FOREGROUND)
    return _status_response(result)
