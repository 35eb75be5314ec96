"""Bureau of Meteorology observation provider.

## Feed
- URL: http://www.bom.gov.au/fwo/IDN60901/IDN60901.94759.json
- Station: Sydney region automatic weather station nearest Bare Creek
- Auth: none, but requests without a browser-like User-Agent may be refused
- Update cadence: roughly every 10 minutes, about three days of history

## Response Format
```json
{
  "observations": {
    "header": [...],
    "data": [
      {
        "local_date_time_full": "20250312105500",
        "gust_kmh": 15,
        "wind_dir": "SW",
        "rain_trace": "2.2",
        ...
      }
    ]
  }
}
```

## Field Translation (BOM -> Observation)
| BOM Field | Observation Field | Notes |
|-----------|-------------------|-------|
| local_date_time_full | timestamp | Station local time, YYYYMMDDhhmmss |
| gust_kmh | wind_gust_kmh | Record skipped when null |
| wind_dir | wind_direction | Null becomes "" |
| rain_trace | rain_trace | mm since 09:00, "-" when missing |
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from park_conditions.models.observation import (
    NO_DATA,
    Observation,
    parse_timestamp,
    sort_newest_first,
)
from park_conditions.providers.base import ObservationProvider

logger = logging.getLogger(__name__)

BOM_OBSERVATIONS_URL = "http://www.bom.gov.au/fwo/IDN60901/IDN60901.94759.json"


def _translate_record(record: dict[str, Any]) -> Observation | None:
    """Translate one BOM record, returning None if it is unusable."""
    timestamp = record.get("local_date_time_full")
    gust = record.get("gust_kmh")
    if not isinstance(timestamp, str) or parse_timestamp(timestamp) is None:
        return None
    if gust is None:
        return None

    rain = record.get("rain_trace")
    try:
        return Observation(
            timestamp=timestamp,
            wind_gust_kmh=gust,
            wind_direction=record.get("wind_dir") or "",
            rain_trace=str(rain) if rain is not None else NO_DATA,
        )
    except ValidationError:
        return None


class BomObservationProvider(ObservationProvider):
    """Bureau of Meteorology station observations.

    Example:
        ```python
        async with BomObservationProvider(user_agent="Mozilla/5.0") as provider:
            observations = await provider.fetch_observations()
        ```
    """

    name = "bom"
    url = BOM_OBSERVATIONS_URL

    def _translate_response(self, response_data: Any) -> list[Observation]:
        """Translate the BOM payload to canonical observations.

        See module docstring for the field mapping.
        """
        if not isinstance(response_data, dict):
            return []
        records = (response_data.get("observations") or {}).get("data") or []

        observations: list[Observation] = []
        skipped = 0
        for record in records:
            observation = _translate_record(record) if isinstance(record, dict) else None
            if observation is None:
                skipped += 1
                continue
            observations.append(observation)

        if skipped:
            logger.warning(f"{self.name}: skipped {skipped} unusable record(s)")

        return sort_newest_first(observations)[: self.max_observations]
