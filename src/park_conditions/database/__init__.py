"""Persistence for park state.

This module provides:
- A key-value store contract with in-memory and SQLAlchemy implementations
- The repository that maps snapshots, notifications, favourites and
  preferences onto store keys
"""

from park_conditions.database.models import Base, StateEntry
from park_conditions.database.repository import StateRepository
from park_conditions.database.store import MemoryStateStore, SqlStateStore, StateStore

__all__ = [
    "Base",
    "StateEntry",
    "StateRepository",
    "MemoryStateStore",
    "SqlStateStore",
    "StateStore",
]
