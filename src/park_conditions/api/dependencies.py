"""FastAPI dependencies."""

from __future__ import annotations

from fastapi import Request

from park_conditions.services import ParkServices


def get_services(request: Request) -> ParkServices:
    """Get the services attached to the running app."""
    return request.app.state.services
