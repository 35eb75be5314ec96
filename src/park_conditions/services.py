"""Service wiring.

``ParkServices`` builds the object graph (state store, repository, catalog,
notification log, engine, provider, monitor) from settings so the API and
the CLI share one way of assembling it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

from park_conditions.catalog.data import default_trails
from park_conditions.catalog.manager import TrailCatalog
from park_conditions.conditions import ParkConditions
from park_conditions.config import Settings, get_settings
from park_conditions.database.repository import StateRepository
from park_conditions.database.store import SqlStateStore, StateStore
from park_conditions.exceptions import PersistenceError
from park_conditions.models.preferences import NotificationPreferences
from park_conditions.monitor import ParkClock, ParkMonitor
from park_conditions.notifications.dispatch import LoggingDispatcher, NotificationDispatcher
from park_conditions.notifications.engine import ChangeNotificationEngine
from park_conditions.notifications.log import NotificationLog
from park_conditions.providers.base import ObservationProvider
from park_conditions.providers.bom import BomObservationProvider

logger = logging.getLogger(__name__)


@dataclass
class ParkServices:
    """Everything a running instance needs, wired together."""

    settings: Settings
    store: StateStore
    repository: StateRepository
    catalog: TrailCatalog
    log: NotificationLog
    preferences: NotificationPreferences
    engine: ChangeNotificationEngine
    provider: ObservationProvider
    monitor: ParkMonitor

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        store: StateStore | None = None,
        provider: ObservationProvider | None = None,
        dispatcher: NotificationDispatcher | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> ParkServices:
        """Build services, overriding any piece that is passed in."""
        settings = settings or get_settings()
        if store is None:
            store = SqlStateStore(settings.database_url, echo=settings.database_echo)
        repository = StateRepository(store)

        catalog = TrailCatalog(default_trails(), repository)
        log = NotificationLog(repository, limit=settings.notification_log_limit)
        preferences = repository.load_preferences(
            authorized=settings.notifications_authorized
        )

        engine = ChangeNotificationEngine(
            conditions=ParkConditions(
                settings.status_thresholds(),
                reset_hour=settings.rain_reset_hour,
                tolerance_minutes=settings.rain_anchor_tolerance_minutes,
            ),
            catalog=catalog,
            preferences=preferences,
            log=log,
            dispatcher=dispatcher or LoggingDispatcher(),
            repository=repository,
            park_name=settings.park_name,
            min_notification_interval=timedelta(
                seconds=settings.min_notification_interval_seconds
            ),
            notification_retention_days=settings.notification_retention_days,
        )

        if provider is None:
            provider = BomObservationProvider(
                url=settings.weather_url,
                user_agent=settings.weather_user_agent,
                timeout=settings.weather_timeout_seconds,
                max_observations=settings.max_observations,
            )
        monitor = ParkMonitor(provider, engine, clock or ParkClock(settings.park_timezone))

        return cls(
            settings=settings,
            store=store,
            repository=repository,
            catalog=catalog,
            log=log,
            preferences=preferences,
            engine=engine,
            provider=provider,
            monitor=monitor,
        )

    def update_preferences(self, preferences: NotificationPreferences) -> bool:
        """Hand new preferences to the engine and persist them."""
        self.engine.replace_preferences(preferences)
        self.preferences = preferences
        return self.save_preferences()

    def save_preferences(self) -> bool:
        """Persist the current preferences, logging on failure."""
        try:
            self.repository.save_preferences(self.preferences)
        except PersistenceError as e:
            logger.error(f"Failed to save preferences: {e}")
            return False
        return True

    async def aclose(self) -> None:
        self.monitor.stop()
        await self.provider.aclose()
        if isinstance(self.store, SqlStateStore):
            self.store.close()
