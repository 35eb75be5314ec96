"""Key-value state stores.

The engine only needs a logical key-value contract: read a string, write a
string, delete a key. Missing keys are normal (first run) and read as None.

## Usage

```python
from park_conditions.database import SqlStateStore

store = SqlStateStore("sqlite:///park_conditions.db")
store.set("lastParkStatus", '"perfectConditions"')
store.get("lastParkStatus")
```
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import Engine, create_engine, delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from park_conditions.database.models import Base, StateEntry
from park_conditions.exceptions import PersistenceError

logger = logging.getLogger(__name__)


def _create_engine(database_url: str, echo: bool) -> Engine:
    # In-memory SQLite lives inside one connection; share it across threads
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        return create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(database_url, echo=echo, pool_pre_ping=True)


class StateStore(ABC):
    """Abstract key-value store for persisted state."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Read a value, or None if the key has never been written.

        Raises:
            PersistenceError: If the store cannot be read
        """

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Write a value.

        Raises:
            PersistenceError: If the store cannot be written
        """

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a key if present."""

    def set_many(self, values: dict[str, str]) -> None:
        """Write several values."""
        for key, value in values.items():
            self.set(key, value)


class MemoryStateStore(StateStore):
    """In-process store, used in tests and when nothing should hit disk."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._lock = threading.Lock()
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def set_many(self, values: dict[str, str]) -> None:
        with self._lock:
            self._data.update(values)

    def snapshot(self) -> dict[str, str]:
        """Copy of everything stored."""
        with self._lock:
            return dict(self._data)


class SqlStateStore(StateStore):
    """State store backed by a SQLAlchemy database (SQLite by default)."""

    def __init__(
        self,
        database_url: str | None = None,
        engine: Engine | None = None,
        echo: bool = False,
    ):
        """Initialize the store and create its table if needed.

        Args:
            database_url: SQLAlchemy URL, used when no engine is given
            engine: Existing engine to reuse
            echo: Log SQL statements
        """
        if engine is None:
            if database_url is None:
                raise ValueError("Either database_url or engine is required")
            engine = _create_engine(database_url, echo)

        self.engine = engine
        self._session_factory = sessionmaker(
            self.engine,
            expire_on_commit=False,
            autoflush=False,
        )

        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to create state table: {e}") from e

        logger.info(f"State store initialized ({self.engine.url.get_backend_name()})")

    @contextmanager
    def _session(self) -> Iterator[Session]:
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def get(self, key: str) -> str | None:
        try:
            with self._session() as session:
                return session.scalar(
                    select(StateEntry.value).where(StateEntry.key == key)
                )
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to read {key}: {e}", key=key) from e

    def set(self, key: str, value: str) -> None:
        self.set_many({key: value})

    def set_many(self, values: dict[str, str]) -> None:
        try:
            with self._session() as session:
                for key, value in values.items():
                    entry = session.get(StateEntry, key)
                    if entry is None:
                        session.add(StateEntry(key=key, value=value))
                    else:
                        entry.value = value
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to write {sorted(values)}: {e}") from e

    def delete(self, key: str) -> None:
        try:
            with self._session() as session:
                session.execute(delete(StateEntry).where(StateEntry.key == key))
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to delete {key}: {e}", key=key) from e

    def close(self) -> None:
        """Dispose of the engine's connection pool."""
        logger.info("Closing state store")
        self.engine.dispose()
