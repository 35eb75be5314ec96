"""Change-notification engine.

Each cycle takes a batch of observations, derives the park state, compares
it with the snapshot left by the previous cycle, and raises one
notification per meaningful transition. The new snapshot is saved at the
end of every cycle, whether or not anything fired and whether or not
notifications are switched on, so turning notifications on later never
replays stale transitions.

## Rules

| Rule | Fires when | Kind |
|------|------------|------|
| Open/closed | opening hours flip (open or closed) | parkOpenClosed |
| Perfect conditions | status enters or leaves perfectConditions | perfectConditions |
| Rain | raining goes from False to True | rain |
| Too wet | status enters wetConditions | tooWet |
| Favourite trails | a favourite trail opens, closes, or gains/loses the safety officer requirement | favoriteTrails |

Every rule needs a known previous value: the first cycle after install only
records state. The open/closed message wins over the perfect-conditions
message for the same cycle, and favourite trails opening or closing with the
park are not announced separately.

## Concurrency

Cycles can be triggered from a timer, the app coming to the foreground or a
background wake, possibly on different threads. ``process_cycle`` holds a
lock for the whole compare-and-update sequence so two cycles never see the
same snapshot.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from park_conditions.catalog.manager import TrailCatalog
from park_conditions.conditions import ConditionsReading, ParkConditions
from park_conditions.database.repository import StateRepository
from park_conditions.exceptions import DispatchError, PersistenceError
from park_conditions.models.notification import NotificationEvent, NotificationKind
from park_conditions.models.observation import Observation
from park_conditions.models.preferences import NotificationPreferences, NotificationRule
from park_conditions.models.snapshot import Snapshot
from park_conditions.models.status import ParkStatus, TrailStatus
from park_conditions.models.trail import Trail
from park_conditions.notifications import messages
from park_conditions.notifications.dispatch import DeliveryRequest, NotificationDispatcher
from park_conditions.notifications.log import NotificationLog
from park_conditions.rules.trails import resolve_trail_statuses

logger = logging.getLogger(__name__)

STATUS_DEEP_LINK = "status"


def trail_deep_link(trail_id: str) -> str:
    return f"trails/{trail_id}"


@dataclass
class CycleResult:
    """Outcome of one processing cycle."""

    reading: ConditionsReading
    trail_statuses: dict[str, TrailStatus] = field(default_factory=dict)
    events: list[NotificationEvent] = field(default_factory=list)
    dispatched: int = 0  # events handed to the platform
    snapshot_saved: bool = True

    @property
    def park_status(self) -> ParkStatus:
        return self.reading.park_status

    @property
    def rain_total_mm(self) -> float:
        return self.reading.rain_total_mm

    @property
    def is_park_open(self) -> bool:
        return self.reading.is_park_open

    @property
    def is_raining(self) -> bool:
        return self.reading.is_raining


class ChangeNotificationEngine:
    """Derives park state and notifies on transitions.

    Example:
        ```python
        engine = ChangeNotificationEngine(
            conditions=ParkConditions(),
            catalog=TrailCatalog(default_trails(), repository),
            preferences=repository.load_preferences(authorized=True),
            log=NotificationLog(repository),
            dispatcher=LoggingDispatcher(),
            repository=repository,
        )
        result = engine.process_cycle(observations, now)
        ```
    """

    def __init__(
        self,
        conditions: ParkConditions,
        catalog: TrailCatalog,
        preferences: NotificationPreferences,
        log: NotificationLog,
        dispatcher: NotificationDispatcher,
        repository: StateRepository | None = None,
        park_name: str = "Bare Creek",
        min_notification_interval: timedelta = timedelta(minutes=5),
        notification_retention_days: int | None = 30,
    ):
        self.conditions = conditions
        self.catalog = catalog
        self.preferences = preferences
        self.log = log
        self.dispatcher = dispatcher
        self.repository = repository
        self.park_name = park_name
        self.min_notification_interval = min_notification_interval
        self.notification_retention_days = notification_retention_days

        self._lock = threading.Lock()
        self._snapshot = repository.load_snapshot() if repository else Snapshot()
        self._last_result: CycleResult | None = None

    @property
    def snapshot(self) -> Snapshot:
        """Copy of the snapshot left by the last cycle."""
        with self._lock:
            return self._snapshot.model_copy(deep=True)

    @property
    def last_result(self) -> CycleResult | None:
        with self._lock:
            return self._last_result

    def replace_preferences(self, preferences: NotificationPreferences) -> None:
        """Swap in new preferences between cycles.

        Pass a new object; the one the engine holds is never mutated in place.
        """
        with self._lock:
            self.preferences = preferences

    def process_cycle(
        self, observations: Iterable[Observation], now: datetime
    ) -> CycleResult:
        """Run one cycle: derive, compare, notify, persist.

        Args:
            observations: Latest batch from the weather source (may be empty)
            now: Local time at the park

        Returns:
            The derived state and any notifications raised
        """
        with self._lock:
            reading = self.conditions.update(observations, now)
            trails = self.catalog.trails()
            trail_statuses = resolve_trail_statuses(trails, reading.park_status)
            preferences = self.preferences.model_copy()
            previous = self._snapshot

            events: list[NotificationEvent] = []
            if preferences.is_active:
                events = self._evaluate_rules(
                    previous, reading, trail_statuses, trails, preferences, now
                )
            else:
                logger.debug("Notifications not authorized or enabled, only tracking state")

            self._age_out_notifications(now)

            dispatched = 0
            last_notification_at = previous.last_notification_at
            if events:
                for event in events:
                    self.log.add(event)
                if self._throttled(previous, now):
                    logger.info(
                        f"Throttling {len(events)} notification(s): last sent at"
                        f" {previous.last_notification_at}"
                    )
                else:
                    dispatched = self._dispatch(events)
                    last_notification_at = now

            self._snapshot = Snapshot(
                park_status=reading.park_status,
                is_raining=reading.is_raining,
                is_park_open=reading.is_park_open,
                trail_statuses=trail_statuses,
                last_notification_at=last_notification_at,
            )
            saved = self._save_snapshot(self._snapshot)

            result = CycleResult(
                reading=reading,
                trail_statuses=trail_statuses,
                events=events,
                dispatched=dispatched,
                snapshot_saved=saved,
            )
            self._last_result = result

        logger.info(
            f"Cycle complete: {reading.park_status.value},"
            f" rain {reading.rain_total_mm:.1f}mm, {len(events)} notification(s)"
        )
        return result

    # -- rules -----------------------------------------------------------

    def _evaluate_rules(
        self,
        previous: Snapshot,
        reading: ConditionsReading,
        trail_statuses: dict[str, TrailStatus],
        trails: list[Trail],
        preferences: NotificationPreferences,
        now: datetime,
    ) -> list[NotificationEvent]:
        events: list[NotificationEvent] = []

        park_events = self._park_status_events(previous, reading, preferences, now)
        events.extend(park_events)
        park_open_changed = any(
            e.kind == NotificationKind.PARK_OPEN_CLOSED for e in park_events
        )

        if preferences.is_rule_enabled(NotificationRule.RAIN):
            events.extend(self._rain_events(previous, reading, now))

        if preferences.is_rule_enabled(NotificationRule.TOO_WET):
            events.extend(self._too_wet_events(previous, reading, now))

        if preferences.is_rule_enabled(NotificationRule.FAVORITE_TRAILS):
            events.extend(
                self._favorite_trail_events(
                    previous, trail_statuses, trails, park_open_changed, now
                )
            )

        return events

    def _park_status_events(
        self,
        previous: Snapshot,
        reading: ConditionsReading,
        preferences: NotificationPreferences,
        now: datetime,
    ) -> list[NotificationEvent]:
        open_changed = (
            previous.is_park_open is not None
            and previous.is_park_open != reading.is_park_open
        )
        if open_changed and preferences.is_rule_enabled(NotificationRule.OPEN_CLOSED):
            if reading.is_park_open:
                title, body = messages.park_open(self.park_name)
            else:
                title, body = messages.park_closed(self.park_name)
            return [self._event(NotificationKind.PARK_OPEN_CLOSED, title, body, now)]

        if not preferences.is_rule_enabled(NotificationRule.PERFECT_CONDITIONS):
            return []

        last_status = previous.park_status
        status = reading.park_status
        if last_status is None or last_status == status:
            return []

        logger.debug(f"Park status changed from {last_status.value} to {status.value}")
        if status == ParkStatus.PERFECT_CONDITIONS:
            title, body = messages.perfect_conditions(
                self.park_name, self.conditions.thresholds.perfect_max_gust_kmh
            )
        elif last_status == ParkStatus.PERFECT_CONDITIONS:
            title, body = messages.conditions_changed(self.park_name)
        else:
            return []
        return [self._event(NotificationKind.PERFECT_CONDITIONS, title, body, now)]

    def _rain_events(
        self, previous: Snapshot, reading: ConditionsReading, now: datetime
    ) -> list[NotificationEvent]:
        # Unknown previous state (first run) never counts as a change
        if previous.is_raining is False and reading.is_raining:
            title, body = messages.rain_detected(self.park_name)
            return [self._event(NotificationKind.RAIN, title, body, now)]
        return []

    def _too_wet_events(
        self, previous: Snapshot, reading: ConditionsReading, now: datetime
    ) -> list[NotificationEvent]:
        if (
            previous.park_status is not None
            and previous.park_status != ParkStatus.WET_CONDITIONS
            and reading.park_status == ParkStatus.WET_CONDITIONS
        ):
            title, body = messages.too_wet(
                self.park_name, self.conditions.thresholds.wet_threshold_mm
            )
            return [self._event(NotificationKind.TOO_WET, title, body, now)]
        return []

    def _favorite_trail_events(
        self,
        previous: Snapshot,
        trail_statuses: dict[str, TrailStatus],
        trails: list[Trail],
        park_open_changed: bool,
        now: datetime,
    ) -> list[NotificationEvent]:
        events: list[NotificationEvent] = []
        for trail in trails:
            if not trail.is_favorite:
                continue
            before = previous.trail_statuses.get(trail.id)
            after = trail_statuses[trail.id]
            if before is None or before == after:
                continue

            message = self._trail_transition_message(trail, before, after)
            if message is None:
                logger.debug(f"{trail.name}: {before.value} -> {after.value} not notified")
                continue

            opened_or_closed = before.is_open != after.is_open
            if opened_or_closed and park_open_changed:
                logger.debug(f"{trail.name}: covered by park open/closed notification")
                continue

            title, body = message
            events.append(
                self._event(
                    NotificationKind.FAVORITE_TRAIL,
                    title,
                    body,
                    now,
                    deep_link=trail_deep_link(trail.id),
                    trail_id=trail.id,
                )
            )
        return events

    @staticmethod
    def _trail_transition_message(
        trail: Trail, before: TrailStatus, after: TrailStatus
    ) -> tuple[str, str] | None:
        if before == TrailStatus.CLOSED and after.is_open:
            return messages.trail_opened(trail.name, after)
        if before.is_open and after == TrailStatus.CLOSED:
            return messages.trail_closed(trail.name)
        if before == TrailStatus.OPEN and after == TrailStatus.OPEN_WITH_SAFETY_OFFICER:
            return messages.safety_officer_required(trail.name)
        if before == TrailStatus.OPEN_WITH_SAFETY_OFFICER and after == TrailStatus.OPEN:
            return messages.trail_fully_open(trail.name)
        return None

    @staticmethod
    def _event(
        kind: NotificationKind,
        title: str,
        body: str,
        now: datetime,
        deep_link: str | None = STATUS_DEEP_LINK,
        trail_id: str | None = None,
    ) -> NotificationEvent:
        return NotificationEvent(
            kind=kind,
            title=title,
            body=body,
            timestamp=now,
            deep_link=deep_link,
            trail_id=trail_id,
        )

    # -- side effects ----------------------------------------------------

    def _age_out_notifications(self, now: datetime) -> None:
        if not self.notification_retention_days:
            return
        removed = self.log.clear_older_than(now, self.notification_retention_days)
        if removed:
            logger.info(
                f"Removed {removed} notification(s) older than"
                f" {self.notification_retention_days} days"
            )

    def _throttled(self, previous: Snapshot, now: datetime) -> bool:
        if previous.last_notification_at is None:
            return False
        return now - previous.last_notification_at < self.min_notification_interval

    def _dispatch(self, events: list[NotificationEvent]) -> int:
        dispatched = 0
        for event in events:
            try:
                self.dispatcher.dispatch(DeliveryRequest.from_event(event))
            except DispatchError as e:
                logger.error(f"Error sending notification {event.title!r}: {e}")
                continue
            except Exception as e:
                logger.exception(f"Dispatcher failed for notification {event.title!r}: {e}")
                continue
            dispatched += 1
        return dispatched

    def _save_snapshot(self, snapshot: Snapshot) -> bool:
        if self.repository is None:
            return True
        try:
            self.repository.save_snapshot(snapshot)
        except PersistenceError as e:
            logger.error(f"Failed to save snapshot, keeping it in memory: {e}")
            return False
        return True
