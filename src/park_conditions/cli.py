"""Command-line interface for park conditions."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from park_conditions.catalog.query import SortOption, TrailQuery, filter_trails
from park_conditions.exceptions import ParkConditionsError
from park_conditions.monitor import CycleTrigger
from park_conditions.presentation import PARK_STATUS_TITLES, companion_payload
from park_conditions.services import ParkServices


def _refresh(services: ParkServices):
    async def run():
        try:
            return await services.monitor.refresh(CycleTrigger.FOREGROUND)
        finally:
            await services.aclose()

    return asyncio.run(run())


def cmd_status(services: ParkServices, args: argparse.Namespace) -> int:
    result = _refresh(services)
    reading = result.reading

    if args.json:
        print(json.dumps(companion_payload(reading) or {}, indent=2))
        return 0

    print(f"{services.settings.park_name}: {PARK_STATUS_TITLES[reading.park_status]}")
    print(f"  Open by schedule: {'yes' if reading.is_park_open else 'no'}")
    if reading.current is None:
        print("  No weather data available")
    else:
        print(
            f"  Wind gust: {reading.current.wind_gust_kmh:.1f} km/h"
            f" {reading.current.wind_direction}".rstrip()
        )
        print(f"  Rain (2 days): {reading.rain_total_mm:.1f} mm")
    if services.monitor.last_error is not None:
        print(f"  Warning: {services.monitor.last_error}")
    for event in result.events:
        print(f"  * {event.title}: {event.body}")
    return 0


def cmd_trails(services: ParkServices, args: argparse.Namespace) -> int:
    result = _refresh(services)
    query = TrailQuery(
        search_text=args.search,
        favorites_only=args.favorites,
        sort=SortOption(args.sort),
    )
    for trail in filter_trails(services.catalog.trails(), result.park_status, query):
        marker = "*" if trail.is_favorite else " "
        status = trail.status_for(result.park_status).value
        print(f"{marker} {trail.name:<20} {trail.difficulty.value:<22} {status}")
    return 0


def cmd_notifications(services: ParkServices, args: argparse.Namespace) -> int:
    events = services.log.notifications()
    if args.unread:
        events = [event for event in events if not event.is_read]
    if not events:
        print("No notifications")
        return 0
    for event in events:
        marker = " " if event.is_read else "*"
        print(f"{marker} {event.timestamp:%Y-%m-%d %H:%M} {event.title}")
        print(f"    {event.body}")
    if args.mark_read:
        services.log.mark_all_as_read()
    return 0


def cmd_serve(services: ParkServices, args: argparse.Namespace) -> int:
    import uvicorn

    from park_conditions.api import create_app

    settings = services.settings
    uvicorn.run(
        create_app(services),
        host=args.host or settings.host,
        port=args.port or settings.port,
    )
    return 0


def main() -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Bare Creek Guide - Park status, trail conditions and notifications"
    )
    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s 0.1.0",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Status command
    status_parser = subparsers.add_parser(
        "status", help="Fetch the latest weather and show the park status"
    )
    status_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the companion summary as JSON",
    )
    status_parser.set_defaults(handler=cmd_status)

    # Trails command
    trails_parser = subparsers.add_parser(
        "trails", help="List trails with their current status"
    )
    trails_parser.add_argument("--search", default="", help="Filter by trail name")
    trails_parser.add_argument(
        "--favorites",
        action="store_true",
        help="Only show favourite trails",
    )
    trails_parser.add_argument(
        "--sort",
        choices=[option.value for option in SortOption],
        default=SortOption.ALPHABETICAL.value,
        help="Sort order",
    )
    trails_parser.set_defaults(handler=cmd_trails)

    # Notifications command
    notifications_parser = subparsers.add_parser(
        "notifications", help="Show the notification log"
    )
    notifications_parser.add_argument(
        "--unread",
        action="store_true",
        help="Only show unread notifications",
    )
    notifications_parser.add_argument(
        "--mark-read",
        action="store_true",
        help="Mark all notifications read after listing",
    )
    notifications_parser.set_defaults(handler=cmd_notifications)

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the REST API")
    serve_parser.add_argument("--host", help="Bind address")
    serve_parser.add_argument("--port", type=int, help="Port")
    serve_parser.set_defaults(handler=cmd_serve)

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        return 0

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        services = ParkServices.from_settings()
        return args.handler(services, args)
    except ParkConditionsError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
