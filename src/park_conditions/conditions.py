"""Current park conditions.

``ParkConditions`` owns the observation store and the rain accumulator and
recomputes the park status whenever either changes. It is the derived-state
half of a cycle; the notification engine is the other half.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from park_conditions.models.observation import Observation, ObservationStore
from park_conditions.models.status import ParkStatus
from park_conditions.rules.classifier import (
    DEFAULT_THRESHOLDS,
    StatusThresholds,
    classify,
    is_open_by_schedule,
)
from park_conditions.rules.rain import (
    DEFAULT_RESET_HOUR,
    DEFAULT_TOLERANCE_MINUTES,
    RainAccumulator,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConditionsReading:
    """Derived conditions at one point in time."""

    park_status: ParkStatus
    rain_total_mm: float
    is_park_open: bool
    current: Observation | None
    evaluated_at: datetime

    @property
    def is_raining(self) -> bool:
        """Whether the latest reading shows rain since the daily reset."""
        return self.current is not None and self.current.rain_since_reset > 0

    @property
    def wind_gust_kmh(self) -> float | None:
        return self.current.wind_gust_kmh if self.current else None


class ParkConditions:
    """Observation store, rain total and park status kept in step."""

    def __init__(
        self,
        thresholds: StatusThresholds = DEFAULT_THRESHOLDS,
        reset_hour: int = DEFAULT_RESET_HOUR,
        tolerance_minutes: int = DEFAULT_TOLERANCE_MINUTES,
    ):
        self.thresholds = thresholds
        self.store = ObservationStore()
        self.rain = RainAccumulator(reset_hour, tolerance_minutes)
        self._lock = threading.Lock()
        self._reading: ConditionsReading | None = None

    @property
    def reading(self) -> ConditionsReading | None:
        """The most recent reading (None before the first update)."""
        with self._lock:
            return self._reading

    def update(self, observations: Iterable[Observation], now: datetime) -> ConditionsReading:
        """Take in a batch and recompute the park status.

        An empty batch keeps the previous observations and rain total, but
        the status is still recomputed because opening hours depend only on
        the clock.
        """
        batch = list(observations)
        if self.store.update(batch, now):
            self.rain.update(batch)
        else:
            logger.info("No new observations, keeping previous weather data")

        current = self.store.current
        rain_total = self.rain.total_mm
        status = classify(
            current.wind_gust_kmh if current else None,
            rain_total,
            now,
            self.thresholds,
        )
        reading = ConditionsReading(
            park_status=status,
            rain_total_mm=rain_total,
            is_park_open=is_open_by_schedule(now, self.thresholds),
            current=current,
            evaluated_at=now,
        )
        with self._lock:
            self._reading = reading

        logger.debug(
            f"Park status {status.value}: gust {reading.wind_gust_kmh} km/h,"
            f" rain {rain_total:.1f}mm, open by schedule {reading.is_park_open}"
        )
        return reading
