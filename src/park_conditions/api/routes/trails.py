"""Trail routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel

from park_conditions.api.dependencies import get_services
from park_conditions.catalog.query import SortOption, TrailQuery, filter_trails
from park_conditions.exceptions import UnknownTrailError
from park_conditions.models.status import (
    ParkStatus,
    SuitableBike,
    TrailDifficulty,
    TrailDirection,
    TrailStatus,
)
from park_conditions.models.trail import Trail
from park_conditions.presentation import TRAIL_STATUS_COLORS
from park_conditions.services import ParkServices

router = APIRouter()


class TrailResponse(BaseModel):
    """A trail with its status under the current park status."""

    id: str
    name: str
    difficulty: TrailDifficulty
    direction: TrailDirection
    status: TrailStatus
    status_color: str
    suitable_bikes: list[SuitableBike]
    image_name: str | None
    is_favorite: bool


def _current_park_status(services: ParkServices) -> ParkStatus:
    result = services.engine.last_result
    return result.park_status if result else ParkStatus.CLOSED


def _trail_response(trail: Trail, park_status: ParkStatus) -> TrailResponse:
    trail_status = trail.status_for(park_status)
    return TrailResponse(
        id=trail.id,
        name=trail.name,
        difficulty=trail.difficulty,
        direction=trail.direction,
        status=trail_status,
        status_color=TRAIL_STATUS_COLORS[trail_status],
        suitable_bikes=trail.suitable_bikes,
        image_name=trail.image_name,
        is_favorite=trail.is_favorite,
    )


@router.get("/", response_model=list[TrailResponse])
async def list_trails(
    search: str = "",
    favorites_only: bool = False,
    difficulty: TrailDifficulty | None = None,
    direction: TrailDirection | None = None,
    trail_status: TrailStatus | None = Query(default=None, alias="status"),
    bike: SuitableBike | None = None,
    sort: SortOption = SortOption.ALPHABETICAL,
    services: ParkServices = Depends(get_services),
) -> list[TrailResponse]:
    """List trails, filtered and sorted."""
    park_status = _current_park_status(services)
    query = TrailQuery(
        search_text=search,
        favorites_only=favorites_only,
        difficulty=difficulty,
        direction=direction,
        status=trail_status,
        bike=bike,
        sort=sort,
    )
    trails = filter_trails(services.catalog.trails(), park_status, query)
    return [_trail_response(trail, park_status) for trail in trails]


@router.get("/{trail_id}", response_model=TrailResponse)
async def get_trail(
    trail_id: str,
    services: ParkServices = Depends(get_services),
) -> TrailResponse:
    """Get a single trail."""
    try:
        trail = services.catalog.get(trail_id)
    except UnknownTrailError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Trail not found: {trail_id}",
        )
    return _trail_response(trail, _current_park_status(services))


@router.post("/{trail_id}/favorite", response_model=TrailResponse)
async def toggle_favorite(
    trail_id: str,
    services: ParkServices = Depends(get_services),
) -> TrailResponse:
    """Toggle a trail's favourite flag."""
    try:
        trail = services.catalog.toggle_favorite(trail_id)
    except UnknownTrailError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Trail not found: {trail_id}",
        )
    return _trail_response(trail, _current_park_status(services))
