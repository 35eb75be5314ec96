"""Exception hierarchy for park conditions.

None of these are fatal to the host process: the engine catches them at
its boundaries, logs, and carries on with the best state it has.
"""

from __future__ import annotations


class ParkConditionsError(Exception):
    """Base exception for all park conditions errors."""


class ProviderError(ParkConditionsError):
    """Raised when weather observations cannot be retrieved."""

    def __init__(
        self,
        message: str,
        provider: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code
        self.response_body = response_body


class PersistenceError(ParkConditionsError):
    """Raised when the state store cannot be read or written."""

    def __init__(self, message: str, key: str | None = None):
        super().__init__(message)
        self.key = key


class DispatchError(ParkConditionsError):
    """Raised when a notification cannot be handed to the OS."""


class CatalogError(ParkConditionsError):
    """Raised for trail catalog authoring errors."""


class UnknownTrailError(CatalogError):
    """Raised when a trail identifier is not in the catalog."""

    def __init__(self, trail_id: str):
        super().__init__(f"Unknown trail: {trail_id}")
        self.trail_id = trail_id
