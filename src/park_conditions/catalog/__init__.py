"""Trail catalog: static trail data, favourites and trail queries."""

from park_conditions.catalog.data import default_trails
from park_conditions.catalog.manager import TrailCatalog
from park_conditions.catalog.query import SortOption, TrailQuery, filter_trails

__all__ = [
    "default_trails",
    "TrailCatalog",
    "SortOption",
    "TrailQuery",
    "filter_trails",
]
