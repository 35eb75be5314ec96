"""Park monitor: fetch observations and run notification cycles.

A cycle can be started by the refresh timer, by the app returning to the
foreground or by a background wake. Whatever the trigger, a failed fetch
still runs the cycle with an empty batch so the opening-hours state stays
current while the last known weather is kept.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime
from enum import Enum
from zoneinfo import ZoneInfo

from park_conditions.exceptions import ProviderError
from park_conditions.models.observation import Observation
from park_conditions.notifications.engine import ChangeNotificationEngine, CycleResult
from park_conditions.providers.base import ObservationProvider

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "Australia/Sydney"


class CycleTrigger(str, Enum):
    """What started a cycle."""

    TIMER = "timer"
    FOREGROUND = "foreground"
    BACKGROUND = "background"


class ParkClock:
    """Current local time at the park, as a naive datetime."""

    def __init__(self, timezone: str = DEFAULT_TIMEZONE):
        self.zone = ZoneInfo(timezone)

    def __call__(self) -> datetime:
        return datetime.now(self.zone).replace(tzinfo=None)


class ParkMonitor:
    """Runs fetch-and-evaluate cycles against a provider and engine."""

    def __init__(
        self,
        provider: ObservationProvider,
        engine: ChangeNotificationEngine,
        clock: Callable[[], datetime] | None = None,
    ):
        self.provider = provider
        self.engine = engine
        self.clock = clock or ParkClock()
        self.last_error: ProviderError | None = None
        self._stopped = asyncio.Event()

    async def refresh(self, trigger: CycleTrigger = CycleTrigger.TIMER) -> CycleResult:
        """Fetch the latest observations and run one cycle.

        Args:
            trigger: What started this refresh

        Returns:
            Result of the cycle
        """
        logger.debug(f"Refreshing park conditions ({trigger.value})")
        observations: list[Observation] = []
        try:
            observations = await self.provider.fetch_observations()
            self.last_error = None
        except ProviderError as e:
            self.last_error = e
            logger.warning(f"Weather fetch failed, keeping previous data: {e}")

        now = self.clock()
        return await asyncio.to_thread(self.engine.process_cycle, observations, now)

    async def run(self, interval: float = 300.0) -> None:
        """Refresh every ``interval`` seconds until ``stop`` is called."""
        logger.info(f"Park monitor started, refreshing every {interval:g}s")
        self._stopped.clear()
        while not self._stopped.is_set():
            try:
                await self.refresh(CycleTrigger.TIMER)
            except Exception:
                logger.exception("Unexpected error during refresh cycle")
            try:
                await asyncio.wait_for(self._stopped.wait(), timeout=interval)
            except asyncio.TimeoutError:
                pass
        logger.info("Park monitor stopped")

    def stop(self) -> None:
        self._stopped.set()
