"""Pytest fixtures for park conditions tests.

This module provides test fixtures that ensure:
1. No external HTTP calls are made (the weather feed is faked)
2. No on-disk database is touched (memory stores and in-memory SQLite)
3. Isolated test environment with controlled configuration
"""

import os
from collections.abc import Callable
from datetime import datetime

import pytest

# Set test environment BEFORE importing application modules
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

from park_conditions.catalog.manager import TrailCatalog
from park_conditions.conditions import ParkConditions
from park_conditions.database.repository import StateRepository
from park_conditions.database.store import MemoryStateStore
from park_conditions.exceptions import DispatchError, ProviderError
from park_conditions.models.observation import Observation
from park_conditions.models.preferences import NotificationPreferences
from park_conditions.models.status import (
    ParkStatus,
    SuitableBike,
    TrailDifficulty,
    TrailDirection,
    TrailStatus,
)
from park_conditions.models.trail import Trail
from park_conditions.notifications.dispatch import DeliveryRequest, NotificationDispatcher
from park_conditions.notifications.engine import ChangeNotificationEngine
from park_conditions.notifications.log import NotificationLog
from park_conditions.providers.base import ObservationProvider


# =============================================================================
# Test Doubles
# =============================================================================


class RecordingDispatcher(NotificationDispatcher):
    """Dispatcher that remembers every request."""

    def __init__(self):
        self.sent: list[DeliveryRequest] = []

    def dispatch(self, request: DeliveryRequest) -> None:
        self.sent.append(request)

    @property
    def titles(self) -> list[str]:
        return [request.title for request in self.sent]


class FailingDispatcher(NotificationDispatcher):
    """Dispatcher that the platform always refuses."""

    def __init__(self):
        self.attempts = 0

    def dispatch(self, request: DeliveryRequest) -> None:
        self.attempts += 1
        raise DispatchError("Notifications not allowed")


class CrashingDispatcher(NotificationDispatcher):
    """Dispatcher whose platform call blows up with an unexpected error."""

    def __init__(self):
        self.attempts = 0

    def dispatch(self, request: DeliveryRequest) -> None:
        self.attempts += 1
        raise OSError("notification service unavailable")


class StaticProvider(ObservationProvider):
    """Provider returning canned batches, or failing when given an error."""

    name = "static"
    url = "http://example.invalid/observations.json"

    def __init__(self, batches: list[list[Observation] | ProviderError] | None = None):
        super().__init__()
        self.batches = list(batches or [])
        self.calls = 0

    async def fetch_observations(self) -> list[Observation]:
        self.calls += 1
        batch = self.batches.pop(0) if self.batches else []
        if isinstance(batch, ProviderError):
            raise batch
        return list(batch)

    def _translate_response(self, response_data):
        return []


# =============================================================================
# Test Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Reset settings cache before each test to ensure clean state."""
    from park_conditions.config import get_settings
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def store() -> MemoryStateStore:
    """Empty in-memory state store."""
    return MemoryStateStore()


@pytest.fixture
def repository(store: MemoryStateStore) -> StateRepository:
    """Repository over the in-memory store."""
    return StateRepository(store)


@pytest.fixture
def dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()


# =============================================================================
# Observation Builders
# =============================================================================


@pytest.fixture
def make_observation() -> Callable[..., Observation]:
    """Factory for observations with sensible defaults."""

    def _make(
        timestamp: str,
        gust: float = 10.0,
        rain: str = "0.0",
        direction: str = "SW",
    ) -> Observation:
        return Observation(
            timestamp=timestamp,
            wind_gust_kmh=gust,
            wind_direction=direction,
            rain_trace=rain,
        )

    return _make


@pytest.fixture
def midday() -> datetime:
    """A weekday lunchtime in March, inside summer opening hours."""
    return datetime(2025, 3, 12, 14, 5)


@pytest.fixture
def calm_batch(make_observation) -> list[Observation]:
    """Dry, calm afternoon: Perfect Conditions."""
    return [
        make_observation("20250312140000", gust=8.0, rain="0.0"),
        make_observation("20250312133000", gust=9.0, rain="0.0"),
        make_observation("20250312090000", gust=5.0, rain="0.0"),
    ]


@pytest.fixture
def windy_batch(make_observation) -> list[Observation]:
    """Dry afternoon with 22 km/h gusts: Windy Conditions."""
    return [
        make_observation("20250312140000", gust=22.0, rain="0.0"),
        make_observation("20250312090000", gust=12.0, rain="0.0"),
    ]


# =============================================================================
# Catalog and Engine
# =============================================================================


@pytest.fixture
def fair_weather_trail() -> Trail:
    """Trail that only opens in perfect conditions."""
    status_map = {status: TrailStatus.CLOSED for status in ParkStatus}
    status_map[ParkStatus.PERFECT_CONDITIONS] = TrailStatus.OPEN
    return Trail(
        id="fair-weather",
        name="Fair Weather",
        difficulty=TrailDifficulty.BLUE,
        direction=TrailDirection.DOWNHILL,
        status_map=status_map,
        suitable_bikes=[SuitableBike.TRAIL],
    )


@pytest.fixture
def all_weather_trail() -> Trail:
    """Trail open whenever the park is."""
    status_map = {status: TrailStatus.OPEN for status in ParkStatus}
    status_map[ParkStatus.CLOSED] = TrailStatus.CLOSED
    return Trail(
        id="all-weather",
        name="All Weather",
        difficulty=TrailDifficulty.GREEN,
        direction=TrailDirection.UPHILL,
        status_map=status_map,
    )


@pytest.fixture
def enabled_preferences() -> NotificationPreferences:
    """Every rule on and the platform allowing notifications."""
    preferences = NotificationPreferences(authorized=True)
    preferences.enable_all()
    return preferences


@pytest.fixture
def make_engine(
    repository: StateRepository,
    dispatcher: RecordingDispatcher,
    enabled_preferences: NotificationPreferences,
    fair_weather_trail: Trail,
    all_weather_trail: Trail,
) -> Callable[..., ChangeNotificationEngine]:
    """Factory for engines sharing the test repository."""

    def _make(
        trails: list[Trail] | None = None,
        preferences: NotificationPreferences | None = None,
        dispatcher_: NotificationDispatcher | None = None,
        favorites: tuple[str, ...] = (),
    ) -> ChangeNotificationEngine:
        catalog = TrailCatalog(
            trails if trails is not None else [fair_weather_trail, all_weather_trail],
            repository,
        )
        for trail_id in favorites:
            catalog.add_favorite(trail_id)
        return ChangeNotificationEngine(
            conditions=ParkConditions(),
            catalog=catalog,
            preferences=preferences if preferences is not None else enabled_preferences,
            log=NotificationLog(repository),
            dispatcher=dispatcher_ or dispatcher,
            repository=repository,
        )

    return _make
