"""Tests for the command-line handlers."""

import argparse
import json
from datetime import datetime

import pytest

from park_conditions.cli import cmd_notifications, cmd_status, cmd_trails
from park_conditions.config import Settings
from park_conditions.database.store import MemoryStateStore
from park_conditions.exceptions import ProviderError
from park_conditions.models.notification import NotificationEvent, NotificationKind
from park_conditions.services import ParkServices

from conftest import RecordingDispatcher, StaticProvider

NOON = datetime(2025, 3, 12, 12, 0)


def build_services(batches) -> ParkServices:
    return ParkServices.from_settings(
        Settings(),
        store=MemoryStateStore(),
        provider=StaticProvider(batches),
        dispatcher=RecordingDispatcher(),
        clock=lambda: NOON,
    )


class TestStatusCommand:
    """Tests for the status command."""

    def test_prints_status(self, capsys, windy_batch):
        services = build_services([windy_batch])
        assert cmd_status(services, argparse.Namespace(json=False)) == 0

        out = capsys.readouterr().out
        assert "Bare Creek: Windy Conditions" in out
        assert "Wind gust: 22.0 km/h SW" in out
        assert "Rain (2 days): 0.0 mm" in out

    def test_json(self, capsys, calm_batch):
        services = build_services([calm_batch])
        cmd_status(services, argparse.Namespace(json=True))

        payload = json.loads(capsys.readouterr().out)
        assert payload["parkStatus"] == "Perfect Conditions"
        assert payload["windSpeed"] == "8.0"

    def test_fetch_failure(self, capsys):
        """Test a failed fetch reports the park closed with a warning."""
        services = build_services([ProviderError("boom", "static")])
        assert cmd_status(services, argparse.Namespace(json=False)) == 0

        out = capsys.readouterr().out
        assert "Park is Closed" in out
        assert "No weather data available" in out
        assert "Warning:" in out


class TestTrailsCommand:
    def test_lists_trails(self, capsys, windy_batch):
        services = build_services([windy_batch])
        args = argparse.Namespace(search="power", favorites=False, sort="alphabetical")
        assert cmd_trails(services, args) == 0

        lines = capsys.readouterr().out.splitlines()
        assert len(lines) == 2
        assert "Power Back" in lines[0]
        assert lines[0].endswith("Open")


class TestNotificationsCommand:
    """Tests for the notifications command."""

    def test_empty(self, capsys):
        services = build_services([])
        args = argparse.Namespace(unread=False, mark_read=False)
        assert cmd_notifications(services, args) == 0
        assert "No notifications" in capsys.readouterr().out

    def test_mark_read(self, capsys):
        services = build_services([])
        services.log.add(
            NotificationEvent(
                kind=NotificationKind.RAIN,
                title="Rain Alert",
                body="It's started raining at Bare Creek",
                timestamp=NOON,
            )
        )
        cmd_notifications(services, argparse.Namespace(unread=True, mark_read=True))

        out = capsys.readouterr().out
        assert "* 2025-03-12 12:00 Rain Alert" in out
        assert services.log.unread_count == 0
