"""Database models for persisted park state.

All state the engine keeps between runs is small, so it lives in a single
key-value table rather than a normalised schema.

## Schema Overview

```
state_entries
├── key (PK)      e.g. "lastParkStatus", "appNotifications"
├── value         JSON text
└── updated_at
```
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all database models."""


class StateEntry(Base):
    """A single persisted key-value pair."""

    __tablename__ = "state_entries"

    key: Mapped[str] = mapped_column(String(128), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<StateEntry {self.key}>"
