"""Notification wording."""

from __future__ import annotations

from park_conditions.models.status import TrailStatus


def park_open(park_name: str) -> tuple[str, str]:
    return (
        f"{park_name} is Now Open",
        "The bike park is now open for riding.",
    )


def park_closed(park_name: str) -> tuple[str, str]:
    return (
        f"{park_name} is Now Closed",
        "The bike park is now closed. Check opening hours or weather conditions.",
    )


def perfect_conditions(park_name: str, max_gust_kmh: float) -> tuple[str, str]:
    return (
        "Perfect Riding Conditions!",
        f"Wind gusts are below {max_gust_kmh:g}km/h at {park_name}."
        " Ideal conditions for all trails!",
    )


def conditions_changed(park_name: str) -> tuple[str, str]:
    return (
        "Conditions Have Changed",
        f"{park_name} is no longer in perfect riding conditions."
        " Check the app for details.",
    )


def rain_detected(park_name: str) -> tuple[str, str]:
    return (
        f"Rain Detected at {park_name}",
        "Rain has been detected at the weather station. Check conditions before riding.",
    )


def too_wet(park_name: str, wet_threshold_mm: float) -> tuple[str, str]:
    return (
        f"{park_name} Too Wet to Ride",
        f"Rain total exceeds {wet_threshold_mm:g}mm over 2 days."
        " The park is likely too wet for riding.",
    )


def trail_opened(trail_name: str, status: TrailStatus) -> tuple[str, str]:
    if status == TrailStatus.OPEN_WITH_SAFETY_OFFICER:
        body = f"{trail_name} can now be ridden if a safety officer is on site."
    elif status == TrailStatus.CAUTION:
        body = f"{trail_name} is now open with caution recommended."
    else:
        body = f"{trail_name} is now open and ready to ride!"
    return f"Trail Now Open: {trail_name}", body


def trail_closed(trail_name: str) -> tuple[str, str]:
    return (
        f"Trail Now Closed: {trail_name}",
        f"{trail_name} is now closed due to current conditions.",
    )


def safety_officer_required(trail_name: str) -> tuple[str, str]:
    return (
        f"Safety Officer Required: {trail_name}",
        f"{trail_name} now requires a safety officer to be on site.",
    )


def trail_fully_open(trail_name: str) -> tuple[str, str]:
    return (
        f"Trail Fully Open: {trail_name}",
        f"{trail_name} is now fully open and doesn't require a safety officer.",
    )
