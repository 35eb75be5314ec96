"""Rolling rain accumulation.

The weather station reports "rain since 9am" and zeroes that counter every
day at the reset hour. Just before the reset, the reading holds the whole
previous day's rain. Adding the latest reading to the reading taken at the
reset hour on the same day gives an approximate rolling ~48 hour total,
which is what decides whether the trails are too wet to ride.

Anchor matching, in priority order:

1. A sample taken exactly at the reset time (09:00:00)
2. The earliest sample within the tolerance window (09:00-09:15)
3. The earliest sample of the day at or after the reset time
4. Nothing found: the previous period contributes 0 mm
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from park_conditions.models.observation import Observation, sort_newest_first

logger = logging.getLogger(__name__)

DEFAULT_RESET_HOUR = 9
DEFAULT_TOLERANCE_MINUTES = 15


class AnchorStrategy(str, Enum):
    """How the reset-hour anchor sample was found."""

    EXACT = "exact"
    WITHIN_TOLERANCE = "within_tolerance"
    FIRST_AFTER_RESET = "first_after_reset"


@dataclass(frozen=True)
class AnchorMatch:
    """The sample used as the previous period's rain total."""

    observation: Observation
    strategy: AnchorStrategy

    @property
    def rain_mm(self) -> float:
        return self.observation.rain_since_reset


@dataclass(frozen=True)
class RainBreakdown:
    """A rain total and the readings it was built from."""

    current_period_mm: float
    previous_period_mm: float
    latest: Observation
    anchor: AnchorMatch | None = None

    @property
    def total_mm(self) -> float:
        return self.current_period_mm + self.previous_period_mm


def _reference_day(observations: list[Observation]) -> datetime | None:
    """Calendar day of the newest sample with a readable timestamp."""
    for observation in observations:
        local_time = observation.local_time
        if local_time is not None:
            return local_time.replace(hour=0, minute=0, second=0, microsecond=0)
    return None


def find_reset_anchor(
    observations: Iterable[Observation],
    reset_hour: int = DEFAULT_RESET_HOUR,
    tolerance_minutes: int = DEFAULT_TOLERANCE_MINUTES,
) -> AnchorMatch | None:
    """Find the sample taken at (or just after) the daily rain reset.

    Only samples on the same calendar day as the newest observation are
    considered. Samples with malformed timestamps are skipped.

    Args:
        observations: Observations in any order
        reset_hour: Local hour at which the station resets its counter
        tolerance_minutes: Width of the "close to reset" window

    Returns:
        The anchor sample, or None if the day has no sample after the reset
    """
    ordered = sort_newest_first(observations)
    day = _reference_day(ordered)
    if day is None:
        return None

    reset_at = day + timedelta(hours=reset_hour)
    window_end = reset_at + timedelta(minutes=tolerance_minutes)

    candidates: list[tuple[datetime, Observation]] = []
    for observation in ordered:
        local_time = observation.local_time
        if local_time is None:
            logger.debug(f"Skipping malformed timestamp: {observation.timestamp!r}")
            continue
        if local_time.date() != day.date() or local_time < reset_at:
            continue
        candidates.append((local_time, observation))

    if not candidates:
        return None

    # Earliest first
    candidates.sort(key=lambda item: item[0])

    for local_time, observation in candidates:
        if local_time == reset_at:
            return AnchorMatch(observation, AnchorStrategy.EXACT)

    first_time, first = candidates[0]
    if first_time <= window_end:
        return AnchorMatch(first, AnchorStrategy.WITHIN_TOLERANCE)
    return AnchorMatch(first, AnchorStrategy.FIRST_AFTER_RESET)


def rain_breakdown(
    observations: Iterable[Observation],
    reset_hour: int = DEFAULT_RESET_HOUR,
    tolerance_minutes: int = DEFAULT_TOLERANCE_MINUTES,
) -> RainBreakdown | None:
    """Split the rolling rain total into its two contributions.

    Samples with malformed timestamps are ignored.

    Returns:
        The breakdown, or None if no sample has a readable timestamp
    """
    ordered = [o for o in sort_newest_first(observations) if o.local_time is not None]
    if not ordered:
        return None

    latest = ordered[0]
    anchor = find_reset_anchor(ordered, reset_hour, tolerance_minutes)

    if anchor is None:
        return RainBreakdown(
            current_period_mm=latest.rain_since_reset,
            previous_period_mm=0.0,
            latest=latest,
        )

    if anchor.observation == latest:
        # The newest reading is the reset reading itself; count it once.
        return RainBreakdown(
            current_period_mm=0.0,
            previous_period_mm=anchor.rain_mm,
            latest=latest,
            anchor=anchor,
        )

    return RainBreakdown(
        current_period_mm=latest.rain_since_reset,
        previous_period_mm=anchor.rain_mm,
        latest=latest,
        anchor=anchor,
    )


def two_day_rain_total(
    observations: Iterable[Observation],
    reset_hour: int = DEFAULT_RESET_HOUR,
    tolerance_minutes: int = DEFAULT_TOLERANCE_MINUTES,
) -> float | None:
    """Rolling rain total in mm, or None for an empty batch."""
    breakdown = rain_breakdown(observations, reset_hour, tolerance_minutes)
    return breakdown.total_mm if breakdown else None


class RainAccumulator:
    """Keeps the latest rolling rain total.

    An empty batch leaves the previous total in place so a failed fetch
    never wipes out good data.

    Example:
        ```python
        accumulator = RainAccumulator()
        accumulator.update(observations)
        if accumulator.total_mm > 7.0:
            ...
        ```
    """

    def __init__(
        self,
        reset_hour: int = DEFAULT_RESET_HOUR,
        tolerance_minutes: int = DEFAULT_TOLERANCE_MINUTES,
        initial_total_mm: float = 0.0,
    ):
        self.reset_hour = reset_hour
        self.tolerance_minutes = tolerance_minutes
        self._lock = threading.Lock()
        self._total_mm = initial_total_mm
        self._breakdown: RainBreakdown | None = None

    @property
    def total_mm(self) -> float:
        with self._lock:
            return self._total_mm

    @property
    def breakdown(self) -> RainBreakdown | None:
        """Readings behind the current total (None until the first batch)."""
        with self._lock:
            return self._breakdown

    def update(self, observations: Iterable[Observation]) -> float:
        """Recompute the total from a batch and return it."""
        breakdown = rain_breakdown(observations, self.reset_hour, self.tolerance_minutes)
        with self._lock:
            if breakdown is None:
                logger.debug(
                    f"Empty observation batch, keeping rain total {self._total_mm:.1f}mm"
                )
                return self._total_mm

            self._breakdown = breakdown
            self._total_mm = breakdown.total_mm
            total = self._total_mm

        anchor = breakdown.anchor
        anchor_desc = (
            f"{anchor.observation.timestamp} ({anchor.strategy.value})" if anchor else "none"
        )
        logger.debug(
            f"Rain total {total:.1f}mm = current {breakdown.current_period_mm:.1f}mm"
            f" + previous {breakdown.previous_period_mm:.1f}mm, anchor {anchor_desc}"
        )
        return total
