"""Trail catalog ownership.

``TrailCatalog`` is the only writer of trail favourite flags. Readers get
copies, so the presentation layer can read while a cycle or a toggle is in
progress without seeing a half-applied change.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable

from park_conditions.database.repository import StateRepository
from park_conditions.exceptions import CatalogError, PersistenceError, UnknownTrailError
from park_conditions.models.trail import Trail

logger = logging.getLogger(__name__)


class TrailCatalog:
    """The park's trails and the user's favourites.

    Example:
        ```python
        catalog = TrailCatalog(default_trails(), repository)
        trail = catalog.toggle_favorite("mild")
        assert trail.is_favorite
        ```
    """

    def __init__(
        self,
        trails: Iterable[Trail],
        repository: StateRepository | None = None,
    ):
        """Initialize the catalog.

        Args:
            trails: Catalog entries (ids must be unique)
            repository: Where favourites are loaded from and saved to

        Raises:
            CatalogError: If two trails share an id
        """
        self._lock = threading.Lock()
        self._repository = repository
        self._trails: dict[str, Trail] = {}
        for trail in trails:
            if trail.id in self._trails:
                raise CatalogError(f"Duplicate trail id: {trail.id}")
            self._trails[trail.id] = trail.model_copy(deep=True)

        if repository is not None:
            favorites = repository.load_favorites()
            unknown = favorites - self._trails.keys()
            if unknown:
                logger.info(f"Ignoring favourites for unknown trails: {sorted(unknown)}")
            for trail_id in favorites & self._trails.keys():
                self._trails[trail_id].is_favorite = True

    def trails(self) -> list[Trail]:
        """Copies of all trails in catalog order."""
        with self._lock:
            return [trail.model_copy(deep=True) for trail in self._trails.values()]

    def favorites(self) -> list[Trail]:
        """Copies of the favourite trails."""
        return [trail for trail in self.trails() if trail.is_favorite]

    def favorite_ids(self) -> set[str]:
        with self._lock:
            return {trail_id for trail_id, trail in self._trails.items() if trail.is_favorite}

    def get(self, trail_id: str) -> Trail:
        """Get a copy of one trail.

        Raises:
            UnknownTrailError: If the id is not in the catalog
        """
        with self._lock:
            trail = self._trails.get(trail_id)
            if trail is None:
                raise UnknownTrailError(trail_id)
            return trail.model_copy(deep=True)

    def toggle_favorite(self, trail_id: str) -> Trail:
        """Flip a trail's favourite flag and return the updated trail.

        Raises:
            UnknownTrailError: If the id is not in the catalog
        """
        return self._set_favorite(trail_id, None)

    def add_favorite(self, trail_id: str) -> Trail:
        """Mark a trail as favourite."""
        return self._set_favorite(trail_id, True)

    def remove_favorite(self, trail_id: str) -> Trail:
        """Unmark a trail as favourite."""
        return self._set_favorite(trail_id, False)

    def _set_favorite(self, trail_id: str, value: bool | None) -> Trail:
        with self._lock:
            trail = self._trails.get(trail_id)
            if trail is None:
                raise UnknownTrailError(trail_id)
            trail.is_favorite = (not trail.is_favorite) if value is None else value
            updated = trail.model_copy(deep=True)
            favorites = {tid for tid, t in self._trails.items() if t.is_favorite}

        logger.info(f"Trail {trail_id} favourite: {updated.is_favorite}")
        self._save(favorites)
        return updated

    def _save(self, favorites: set[str]) -> None:
        if self._repository is None:
            return
        try:
            self._repository.save_favorites(favorites)
        except PersistenceError as e:
            logger.error(f"Failed to save favourites: {e}")

    def __len__(self) -> int:
        with self._lock:
            return len(self._trails)

    def __contains__(self, trail_id: object) -> bool:
        with self._lock:
            return trail_id in self._trails
