"""Weather observation models.

Observations come from a weather station that reports every few minutes.
Timestamps are naive local times in the fixed ``YYYYMMDDhhmmss`` format, so
string order and chronological order agree.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"

# Rain value reported when the station has no reading
NO_DATA = "-"


class Observation(BaseModel):
    """A single weather sample.

    Two observations with the same timestamp are the same sample, so
    equality and hashing only look at ``timestamp``.
    """

    model_config = ConfigDict(frozen=True)

    timestamp: str = Field(
        ..., description="Local time as YYYYMMDDhhmmss (naive, zero padded)"
    )
    wind_gust_kmh: float = Field(..., ge=0, description="Wind gust speed in km/h")
    wind_direction: str = Field(default="", description="Wind direction code (e.g. 'NNE')")
    rain_trace: str = Field(
        default=NO_DATA,
        description="Rain since the daily reset in mm, or '-' when missing",
    )

    @property
    def rain_since_reset(self) -> float:
        """Rain in mm since the last daily reset (0.0 when missing)."""
        if self.rain_trace == NO_DATA:
            return 0.0
        try:
            value = float(self.rain_trace)
        except ValueError:
            return 0.0
        return value if value >= 0 else 0.0

    @property
    def local_time(self) -> datetime | None:
        """Parsed local timestamp, or None if the timestamp is malformed."""
        return parse_timestamp(self.timestamp)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Observation):
            return NotImplemented
        return self.timestamp == other.timestamp

    def __hash__(self) -> int:
        return hash(self.timestamp)


def parse_timestamp(value: str) -> datetime | None:
    """Parse a ``YYYYMMDDhhmmss`` timestamp, returning None if malformed."""
    if len(value) != 14 or not value.isdigit():
        return None
    try:
        return datetime.strptime(value, TIMESTAMP_FORMAT)
    except ValueError:
        return None


def format_timestamp(value: datetime) -> str:
    """Format a datetime in the station's timestamp format."""
    return value.strftime(TIMESTAMP_FORMAT)


def sort_newest_first(observations: Iterable[Observation]) -> list[Observation]:
    """Sort observations by timestamp descending, dropping duplicate samples."""
    unique: dict[str, Observation] = {}
    for observation in observations:
        unique.setdefault(observation.timestamp, observation)
    return sorted(unique.values(), key=lambda o: o.timestamp, reverse=True)


class ObservationStore:
    """Holds the most recent batch of observations.

    An empty batch never replaces a good one: a failed or empty fetch keeps
    the previous observations (and therefore the previous current reading).
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._history: tuple[Observation, ...] = ()
        self._updated_at: datetime | None = None

    def update(self, observations: Iterable[Observation], now: datetime | None = None) -> bool:
        """Replace the stored batch.

        Samples with malformed timestamps are dropped.

        Returns:
            True if the batch was stored, False if it was empty and ignored
        """
        ordered = [o for o in sort_newest_first(observations) if o.local_time is not None]
        if not ordered:
            return False
        with self._lock:
            self._history = tuple(ordered)
            self._updated_at = now
        return True

    @property
    def history(self) -> tuple[Observation, ...]:
        """All stored observations, newest first."""
        with self._lock:
            return self._history

    @property
    def current(self) -> Observation | None:
        """The newest observation, if any."""
        with self._lock:
            return self._history[0] if self._history else None

    @property
    def updated_at(self) -> datetime | None:
        """When the stored batch was last replaced."""
        with self._lock:
            return self._updated_at

    def __len__(self) -> int:
        return len(self.history)
