"""Weather observation providers."""

from park_conditions.providers.base import ObservationProvider, RateLimitError
from park_conditions.providers.bom import BOM_OBSERVATIONS_URL, BomObservationProvider

__all__ = [
    "ObservationProvider",
    "RateLimitError",
    "BomObservationProvider",
    "BOM_OBSERVATIONS_URL",
]
