"""Tests for the change-notification engine."""

import threading
from datetime import datetime, timedelta

import pytest

from park_conditions.catalog.data import default_trails
from park_conditions.catalog.manager import TrailCatalog
from park_conditions.conditions import ParkConditions
from park_conditions.database.repository import (
    LAST_PARK_OPEN_KEY,
    LAST_PARK_STATUS_KEY,
    LAST_RAIN_CONDITION_KEY,
    LAST_TRAIL_STATUS_MAP_KEY,
    StateRepository,
)
from park_conditions.database.store import MemoryStateStore
from park_conditions.exceptions import PersistenceError
from park_conditions.models.notification import NotificationEvent, NotificationKind
from park_conditions.models.preferences import NotificationPreferences, NotificationRule
from park_conditions.models.status import (
    ParkStatus,
    TrailDifficulty,
    TrailDirection,
    TrailStatus,
)
from park_conditions.models.trail import Trail
from park_conditions.notifications.engine import ChangeNotificationEngine
from park_conditions.notifications.log import NotificationLog

from conftest import CrashingDispatcher, FailingDispatcher, RecordingDispatcher

T0 = datetime(2025, 3, 12, 14, 5)


def kinds(result) -> list[NotificationKind]:
    return [event.kind for event in result.events]


class BrokenStore(MemoryStateStore):
    """Store that can be read but never written."""

    def set(self, key: str, value: str) -> None:
        raise PersistenceError("disk full", key=key)

    def set_many(self, values: dict[str, str]) -> None:
        raise PersistenceError("disk full")


class TestColdStart:
    """Tests for the first cycle after install."""

    def test_first_cycle_emits_nothing(self, make_engine, calm_batch, dispatcher):
        """Test no notifications without a previous state to compare."""
        engine = make_engine(favorites=("fair-weather",))
        result = engine.process_cycle(calm_batch, T0)

        assert result.park_status == ParkStatus.PERFECT_CONDITIONS
        assert result.events == []
        assert dispatcher.sent == []

    def test_first_cycle_writes_snapshot(self, make_engine, calm_batch, store):
        """Test the snapshot is saved even though nothing fired."""
        make_engine().process_cycle(calm_batch, T0)

        assert store.get(LAST_PARK_STATUS_KEY) == '"perfectConditions"'
        assert store.get(LAST_RAIN_CONDITION_KEY) == "false"
        assert store.get(LAST_PARK_OPEN_KEY) == "true"
        assert '"fair-weather": "Open"' in store.get(LAST_TRAIL_STATUS_MAP_KEY)

    def test_snapshot_survives_restart(self, make_engine, windy_batch, calm_batch):
        """Test a new engine continues from the saved snapshot."""
        make_engine().process_cycle(windy_batch, T0)

        restarted = make_engine()
        result = restarted.process_cycle(calm_batch, T0 + timedelta(minutes=5))
        assert kinds(result) == [NotificationKind.PERFECT_CONDITIONS]


class TestParkStatusRules:
    """Tests for perfect-conditions and open/closed notifications."""

    def test_windy_to_perfect_emits_exactly_one(self, make_engine, windy_batch, calm_batch):
        """Test Windy -> Perfect raises one perfect-conditions event."""
        engine = make_engine()
        engine.process_cycle(windy_batch, T0)
        result = engine.process_cycle(calm_batch, T0 + timedelta(minutes=5))

        assert kinds(result) == [NotificationKind.PERFECT_CONDITIONS]
        assert result.events[0].title == "Perfect Riding Conditions!"

    def test_leaving_perfect(self, make_engine, windy_batch, calm_batch):
        """Test Perfect -> Windy says conditions changed."""
        engine = make_engine()
        engine.process_cycle(calm_batch, T0)
        result = engine.process_cycle(windy_batch, T0 + timedelta(minutes=5))

        assert kinds(result) == [NotificationKind.PERFECT_CONDITIONS]
        assert result.events[0].title == "Conditions Have Changed"

    def test_windy_to_strong_not_notified(self, make_engine, make_observation, windy_batch):
        """Test changes between non-perfect statuses are silent."""
        engine = make_engine()
        engine.process_cycle(windy_batch, T0)
        result = engine.process_cycle(
            [make_observation("20250312141000", gust=35.0)], T0 + timedelta(minutes=5)
        )
        assert result.park_status == ParkStatus.STRONG_WINDS
        assert result.events == []

    def test_park_closing(self, make_engine, calm_batch):
        """Test closing time raises a single open/closed event."""
        engine = make_engine(favorites=("fair-weather",))
        engine.process_cycle(calm_batch, datetime(2025, 3, 12, 18, 55))
        result = engine.process_cycle(calm_batch, datetime(2025, 3, 12, 19, 5))

        assert result.park_status == ParkStatus.CLOSED
        assert result.is_park_open is False
        assert kinds(result) == [NotificationKind.PARK_OPEN_CLOSED]
        assert result.events[0].title == "Bare Creek is Now Closed"

    def test_park_opening(self, make_engine, calm_batch):
        engine = make_engine()
        engine.process_cycle(calm_batch, datetime(2025, 3, 12, 5, 55))
        result = engine.process_cycle(calm_batch, datetime(2025, 3, 12, 6, 0))

        assert kinds(result) == [NotificationKind.PARK_OPEN_CLOSED]
        assert result.events[0].title == "Bare Creek is Now Open"

    def test_closing_without_open_closed_rule(self, make_engine, calm_batch):
        """Test the perfect-conditions rule covers closing when open/closed is off."""
        preferences = NotificationPreferences(authorized=True)
        preferences.enable_all()
        preferences.set_rule(NotificationRule.OPEN_CLOSED, False)
        engine = make_engine(preferences=preferences, favorites=("fair-weather",))
        engine.process_cycle(calm_batch, datetime(2025, 3, 12, 18, 55))
        result = engine.process_cycle(calm_batch, datetime(2025, 3, 12, 19, 5))

        assert kinds(result) == [
            NotificationKind.PERFECT_CONDITIONS,
            NotificationKind.FAVORITE_TRAIL,
        ]
        assert result.events[0].title == "Conditions Have Changed"
        assert result.events[1].title == "Trail Now Closed: Fair Weather"


class TestRainRules:
    """Tests for rain and too-wet notifications."""

    def test_rain_starts(self, make_engine, calm_batch, make_observation):
        engine = make_engine()
        engine.process_cycle(calm_batch, T0)
        result = engine.process_cycle(
            [
                make_observation("20250312141000", gust=8.0, rain="0.4"),
                make_observation("20250312090000", gust=8.0, rain="0.0"),
            ],
            T0 + timedelta(minutes=5),
        )
        assert result.is_raining is True
        assert kinds(result) == [NotificationKind.RAIN]

    def test_rain_continuing_is_silent(self, make_engine, make_observation):
        engine = make_engine()
        batch = [make_observation("20250312141000", gust=8.0, rain="0.4")]
        engine.process_cycle(batch, T0)
        engine.process_cycle(batch, T0 + timedelta(minutes=5))
        result = engine.process_cycle(batch, T0 + timedelta(minutes=10))
        assert NotificationKind.RAIN not in kinds(result)

    def test_too_wet(self, make_engine, calm_batch, make_observation):
        """Test entering wet conditions raises one too-wet event."""
        engine = make_engine()
        engine.process_cycle(calm_batch, T0)
        wet = [
            make_observation("20250312141000", gust=8.0, rain="2.2"),
            make_observation("20250312090000", gust=8.0, rain="9.0"),
        ]
        result = engine.process_cycle(wet, T0 + timedelta(minutes=5))

        assert result.park_status == ParkStatus.WET_CONDITIONS
        assert kinds(result).count(NotificationKind.TOO_WET) == 1

        result = engine.process_cycle(wet, T0 + timedelta(minutes=10))
        assert NotificationKind.TOO_WET not in kinds(result)


class TestFavoriteTrailRules:
    """Tests for favourite trail notifications."""

    def test_safety_officer_trail_opens(self, make_engine, windy_batch, calm_batch):
        engine = make_engine(trails=default_trails(), favorites=("spicy",))
        engine.process_cycle(windy_batch, T0)
        result = engine.process_cycle(calm_batch, T0 + timedelta(minutes=5))

        favorite_events = [e for e in result.events if e.kind == NotificationKind.FAVORITE_TRAIL]
        assert len(favorite_events) == 1
        assert favorite_events[0].title == "Trail Now Open: Spicy"
        assert "safety officer" in favorite_events[0].body
        assert favorite_events[0].trail_id == "spicy"
        assert favorite_events[0].deep_link == "trails/spicy"

    def test_safety_officer_required(self, make_engine, windy_batch, calm_batch):
        """Test Open -> Open with safety officer has its own message."""
        status_map = {status: TrailStatus.CLOSED for status in ParkStatus}
        status_map[ParkStatus.PERFECT_CONDITIONS] = TrailStatus.OPEN
        status_map[ParkStatus.WINDY_CONDITIONS] = TrailStatus.OPEN_WITH_SAFETY_OFFICER
        trail = Trail(
            id="gap-jump",
            name="Gap Jump",
            difficulty=TrailDifficulty.PROLINE,
            direction=TrailDirection.DOWNHILL,
            status_map=status_map,
        )
        engine = make_engine(trails=[trail], favorites=("gap-jump",))
        engine.process_cycle(calm_batch, T0)
        result = engine.process_cycle(windy_batch, T0 + timedelta(minutes=10))
        assert result.events[-1].title == "Safety Officer Required: Gap Jump"

        result = engine.process_cycle(calm_batch, T0 + timedelta(minutes=20))
        assert result.events[-1].title == "Trail Fully Open: Gap Jump"

    def test_caution_change_not_notified(self, make_engine, make_observation, windy_batch):
        """Test Open <-> Caution is not a named transition."""
        engine = make_engine(trails=default_trails(), favorites=("mild",))
        engine.process_cycle(windy_batch, T0)
        result = engine.process_cycle(
            [make_observation("20250312141000", gust=35.0)], T0 + timedelta(minutes=5)
        )
        assert result.trail_statuses["mild"] == TrailStatus.CAUTION
        assert result.events == []

    def test_always_closed_favorite_never_opens(self, make_engine, windy_batch, calm_batch):
        engine = make_engine(trails=default_trails(), favorites=("darcside",))
        for minutes, batch in enumerate([windy_batch, calm_batch, windy_batch, calm_batch]):
            result = engine.process_cycle(batch, T0 + timedelta(minutes=10 * minutes))
            assert NotificationKind.FAVORITE_TRAIL not in kinds(result)

    def test_non_favorites_ignored(self, make_engine, windy_batch, calm_batch):
        engine = make_engine()
        engine.process_cycle(windy_batch, T0)
        result = engine.process_cycle(calm_batch, T0 + timedelta(minutes=5))
        assert NotificationKind.FAVORITE_TRAIL not in kinds(result)

    def test_new_favorite_has_no_prior_status(self, repository, dispatcher, windy_batch, calm_batch):
        """Test a trail without a recorded status is only recorded."""
        catalog = TrailCatalog(default_trails(), repository)
        preferences = NotificationPreferences(authorized=True)
        preferences.enable_all()
        engine = ChangeNotificationEngine(
            conditions=ParkConditions(),
            catalog=catalog,
            preferences=preferences,
            log=NotificationLog(repository),
            dispatcher=dispatcher,
            repository=repository,
        )
        engine.process_cycle(windy_batch, T0)

        # Forget one trail's status, as if it had just been added to the catalog
        snapshot = repository.load_snapshot()
        del snapshot.trail_statuses["spicy"]
        repository.save_snapshot(snapshot)
        catalog.add_favorite("spicy")

        restarted = ChangeNotificationEngine(
            conditions=ParkConditions(),
            catalog=catalog,
            preferences=preferences,
            log=NotificationLog(repository),
            dispatcher=dispatcher,
            repository=repository,
        )
        result = restarted.process_cycle(calm_batch, T0 + timedelta(minutes=5))
        assert NotificationKind.FAVORITE_TRAIL not in kinds(result)
        assert restarted.snapshot.trail_statuses["spicy"] == TrailStatus.OPEN_WITH_SAFETY_OFFICER


class TestEndToEnd:
    """End-to-end cycles from raw observations."""

    def test_wet_regardless_of_wind(self, make_engine, make_observation):
        """Test 2.2mm today plus 9.0mm at the reset is too wet to ride."""
        engine = make_engine()
        result = engine.process_cycle(
            [
                make_observation("20250312090000", gust=10.0, rain="9.0"),
                make_observation("20250312140000", gust=10.0, rain="2.2"),
            ],
            T0,
        )
        assert result.rain_total_mm == pytest.approx(11.2)
        assert result.park_status == ParkStatus.WET_CONDITIONS

    def test_favorite_opens_with_perfect_conditions(
        self, make_engine, make_observation, windy_batch
    ):
        """Test Windy -> Perfect opens a fair-weather favourite exactly once."""
        engine = make_engine(favorites=("fair-weather",))
        engine.process_cycle(windy_batch, T0)
        assert engine.snapshot.trail_statuses["fair-weather"] == TrailStatus.CLOSED

        result = engine.process_cycle(
            [
                make_observation("20250312141000", gust=12.0, rain="0.0"),
                make_observation("20250312090000", gust=10.0, rain="3.0"),
            ],
            T0 + timedelta(minutes=5),
        )

        assert result.rain_total_mm == pytest.approx(3.0)
        assert result.park_status == ParkStatus.PERFECT_CONDITIONS
        assert result.trail_statuses["fair-weather"] == TrailStatus.OPEN
        assert kinds(result) == [
            NotificationKind.PERFECT_CONDITIONS,
            NotificationKind.FAVORITE_TRAIL,
        ]
        assert result.events[1].title == "Trail Now Open: Fair Weather"

    def test_empty_batch_keeps_weather(self, make_engine, calm_batch):
        """Test a failed fetch keeps the last weather and status."""
        engine = make_engine()
        first = engine.process_cycle(calm_batch, T0)
        result = engine.process_cycle([], T0 + timedelta(minutes=5))

        assert result.reading.current == first.reading.current
        assert result.park_status == ParkStatus.PERFECT_CONDITIONS
        assert result.events == []

    def test_no_weather_ever_is_closed(self, make_engine):
        result = make_engine().process_cycle([], T0)
        assert result.reading.current is None
        assert result.park_status == ParkStatus.CLOSED
        assert result.is_park_open is True


class TestDeliveryAndThrottling:
    """Tests for the notification log, dispatch and rate limiting."""

    def test_events_logged_and_dispatched(self, make_engine, windy_batch, calm_batch, dispatcher):
        engine = make_engine()
        engine.process_cycle(windy_batch, T0)
        result = engine.process_cycle(calm_batch, T0 + timedelta(minutes=5))

        assert result.dispatched == 1
        assert dispatcher.titles == ["Perfect Riding Conditions!"]
        request = dispatcher.sent[0]
        assert request.sound == "default"
        assert request.payload["kind"] == "perfectConditions"
        assert request.payload["notification_id"] == str(result.events[0].id)
        assert engine.log.notifications()[0].id == result.events[0].id
        assert engine.snapshot.last_notification_at == T0 + timedelta(minutes=5)

    def test_throttled_within_interval(self, make_engine, windy_batch, calm_batch, dispatcher):
        """Test a second burst within five minutes is logged but not sent."""
        engine = make_engine()
        engine.process_cycle(windy_batch, T0)
        engine.process_cycle(calm_batch, T0 + timedelta(minutes=5))
        result = engine.process_cycle(windy_batch, T0 + timedelta(minutes=7))

        assert len(result.events) == 1
        assert result.dispatched == 0
        assert len(dispatcher.sent) == 1
        assert len(engine.log) == 2
        assert engine.snapshot.last_notification_at == T0 + timedelta(minutes=5)

        result = engine.process_cycle(calm_batch, T0 + timedelta(minutes=11))
        assert result.dispatched == 1

    def test_dispatch_failure_does_not_abort(self, make_engine, windy_batch, calm_batch, store):
        failing = FailingDispatcher()
        engine = make_engine(dispatcher_=failing)
        engine.process_cycle(windy_batch, T0)
        result = engine.process_cycle(calm_batch, T0 + timedelta(minutes=5))

        assert failing.attempts == 1
        assert result.dispatched == 0
        assert len(engine.log) == 1
        assert store.get(LAST_PARK_STATUS_KEY) == '"perfectConditions"'

    def test_unexpected_dispatch_error_does_not_abort(
        self, make_engine, windy_batch, calm_batch, store
    ):
        """Test a crashing dispatcher still persists the snapshot, so nothing is logged twice."""
        crashing = CrashingDispatcher()
        engine = make_engine(dispatcher_=crashing)
        engine.process_cycle(windy_batch, T0)
        result = engine.process_cycle(calm_batch, T0 + timedelta(minutes=5))

        assert crashing.attempts == 1
        assert result.dispatched == 0
        assert result.snapshot_saved is True
        assert store.get(LAST_PARK_STATUS_KEY) == '"perfectConditions"'
        assert len(engine.log) == 1

        result = engine.process_cycle(calm_batch, T0 + timedelta(minutes=10))
        assert result.events == []
        assert len(engine.log) == 1

    def test_persistence_failure_does_not_abort(self, dispatcher, windy_batch, calm_batch):
        """Test a failing store still lets cycles compare against memory."""
        repository = StateRepository(BrokenStore())
        preferences = NotificationPreferences(authorized=True)
        preferences.enable_all()
        engine = ChangeNotificationEngine(
            conditions=ParkConditions(),
            catalog=TrailCatalog(default_trails(), repository),
            preferences=preferences,
            log=NotificationLog(repository),
            dispatcher=dispatcher,
            repository=repository,
        )
        first = engine.process_cycle(windy_batch, T0)
        assert first.snapshot_saved is False

        result = engine.process_cycle(calm_batch, T0 + timedelta(minutes=5))
        assert kinds(result) == [NotificationKind.PERFECT_CONDITIONS]


class TestPreferencesGate:
    """Tests for the notification switches."""

    def test_disabled_tracks_state_silently(self, make_engine, windy_batch, calm_batch, dispatcher):
        """Test no events while disabled and no replay after enabling."""
        preferences = NotificationPreferences(authorized=True)
        engine = make_engine(preferences=preferences)
        engine.process_cycle(windy_batch, T0)
        result = engine.process_cycle(calm_batch, T0 + timedelta(minutes=5))
        assert result.events == []
        assert engine.snapshot.park_status == ParkStatus.PERFECT_CONDITIONS

        preferences.enable_all()
        result = engine.process_cycle(calm_batch, T0 + timedelta(minutes=10))
        assert result.events == []
        assert dispatcher.sent == []

    def test_unauthorized_is_silent(self, make_engine, windy_batch, calm_batch):
        preferences = NotificationPreferences()
        preferences.enable_all()
        engine = make_engine(preferences=preferences)
        engine.process_cycle(windy_batch, T0)
        result = engine.process_cycle(calm_batch, T0 + timedelta(minutes=5))
        assert result.events == []

    def test_single_rule_disabled(self, make_engine, windy_batch, calm_batch):
        preferences = NotificationPreferences(authorized=True)
        preferences.enable_all()
        preferences.set_rule(NotificationRule.PERFECT_CONDITIONS, False)
        engine = make_engine(preferences=preferences)
        engine.process_cycle(windy_batch, T0)
        result = engine.process_cycle(calm_batch, T0 + timedelta(minutes=5))
        assert result.events == []

    def test_replaced_preferences_apply_next_cycle(self, make_engine, windy_batch, calm_batch):
        """Test swapping in new preferences between cycles."""
        engine = make_engine(preferences=NotificationPreferences(authorized=True))
        engine.process_cycle(windy_batch, T0)

        enabled = NotificationPreferences(authorized=True)
        enabled.set_rule(NotificationRule.PERFECT_CONDITIONS, True)
        engine.replace_preferences(enabled)
        result = engine.process_cycle(calm_batch, T0 + timedelta(minutes=5))

        assert engine.preferences is enabled
        assert kinds(result) == [NotificationKind.PERFECT_CONDITIONS]


class TestNotificationRetention:
    """Tests for ageing out old notifications."""

    def test_old_notifications_dropped_each_cycle(self, make_engine, calm_batch):
        engine = make_engine()
        engine.log.add(
            NotificationEvent(
                kind=NotificationKind.RAIN,
                title="Rain Alert",
                body="old",
                timestamp=T0 - timedelta(days=31),
            )
        )
        engine.log.add(
            NotificationEvent(
                kind=NotificationKind.RAIN,
                title="Rain Alert",
                body="recent",
                timestamp=T0 - timedelta(days=2),
            )
        )

        engine.process_cycle(calm_batch, T0)

        assert [event.body for event in engine.log.notifications()] == ["recent"]

    def test_retention_disabled(self, make_engine, calm_batch):
        engine = make_engine()
        engine.notification_retention_days = None
        engine.log.add(
            NotificationEvent(
                kind=NotificationKind.RAIN,
                title="Rain Alert",
                body="old",
                timestamp=T0 - timedelta(days=90),
            )
        )

        engine.process_cycle(calm_batch, T0)

        assert len(engine.log) == 1


class TestConcurrency:
    """Tests for overlapping cycles."""

    def test_parallel_cycles_notify_once(self, make_engine, windy_batch, calm_batch):
        """Test concurrent cycles never both see the same previous state."""
        engine = make_engine()
        engine.process_cycle(windy_batch, T0)

        barrier = threading.Barrier(8)

        def run():
            barrier.wait()
            engine.process_cycle(calm_batch, T0 + timedelta(minutes=5))

        threads = [threading.Thread(target=run) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        perfect = [
            e for e in engine.log.notifications()
            if e.kind == NotificationKind.PERFECT_CONDITIONS
        ]
        assert len(perfect) == 1
