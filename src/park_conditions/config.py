"""Application configuration.

Configuration is loaded from environment variables using pydantic-settings.
Every value has a default tuned for Bare Creek Bike Park, so the library
works out of the box; override with environment variables or a `.env` file.

## Useful Environment Variables

- PARK_TIMEZONE: IANA timezone of the park (default: Australia/Sydney)
- WEATHER_URL: Bureau of Meteorology observations feed for the station
- DATABASE_URL: SQLAlchemy URL for persisted state (default: local SQLite)
- REFRESH_INTERVAL_SECONDS: Period of the in-app refresh timer
- MIN_NOTIFICATION_INTERVAL_SECONDS: Minimum gap between OS notifications

## Example .env file

```
PARK_TIMEZONE=Australia/Sydney
DATABASE_URL=sqlite:///park_conditions.db
WET_THRESHOLD_MM=7.0
```
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from park_conditions.rules.classifier import StatusThresholds


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Bare Creek Guide"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"

    # Park
    park_name: str = "Bare Creek"
    park_timezone: str = "Australia/Sydney"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    allowed_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:8000"],
        description="CORS allowed origins",
    )

    # Weather source
    weather_url: str = Field(
        default="http://www.bom.gov.au/fwo/IDN60901/IDN60901.94759.json",
        description="BOM station observations feed (Terrey Hills)",
    )
    weather_user_agent: str = Field(
        default="park-conditions/0.1.0",
        description="User-Agent for the BOM feed (requests without one are rejected)",
    )
    weather_timeout_seconds: float = Field(default=10.0, gt=0, le=120)
    max_observations: int = Field(default=50, ge=1, le=500)
    refresh_interval_seconds: int = Field(default=5 * 60, ge=30, le=86400)

    # Rain accumulation
    rain_reset_hour: int = Field(default=9, ge=0, le=23)
    rain_anchor_tolerance_minutes: int = Field(default=15, ge=0, le=59)

    # Status thresholds
    wet_threshold_mm: float = Field(default=7.0, ge=0)
    perfect_max_gust_kmh: float = Field(default=15.0, ge=0)
    windy_max_gust_kmh: float = Field(default=30.0, ge=0)
    strong_max_gust_kmh: float = Field(default=45.0, ge=0)

    # Opening hours
    opening_hour: int = Field(default=6, ge=0, le=23)
    summer_months: list[int] = Field(default=[10, 11, 12, 1, 2, 3])
    summer_closing_hour: int = Field(default=19, ge=1, le=24)
    winter_closing_hour: int = Field(default=17, ge=1, le=24)

    # Notifications
    notification_log_limit: int = Field(default=100, ge=1, le=1000)
    min_notification_interval_seconds: int = Field(default=5 * 60, ge=0)
    notification_retention_days: int = Field(
        default=30, ge=1, description="Age after which logged notifications are dropped"
    )
    notifications_authorized: bool = Field(
        default=True,
        description="Whether the platform allows notifications to be shown",
    )

    # Persistence
    database_url: str = Field(
        default="sqlite:///park_conditions.db",
        description="SQLAlchemy URL for the key-value state store",
    )
    database_echo: bool = False  # Log SQL queries

    @field_validator("summer_months")
    @classmethod
    def validate_summer_months(cls, v: list[int]) -> list[int]:
        """Ensure summer months are calendar months."""
        for month in v:
            if not 1 <= month <= 12:
                raise ValueError(f"Invalid month in summer_months: {month}")
        return v

    @field_validator("database_url", mode="before")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Normalise the legacy ``postgres://`` scheme for SQLAlchemy."""
        if v.startswith("postgres://"):
            return v.replace("postgres://", "postgresql://", 1)
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    def status_thresholds(self) -> StatusThresholds:
        """Build classifier thresholds from these settings."""
        return StatusThresholds(
            wet_threshold_mm=self.wet_threshold_mm,
            perfect_max_gust_kmh=self.perfect_max_gust_kmh,
            windy_max_gust_kmh=self.windy_max_gust_kmh,
            strong_max_gust_kmh=self.strong_max_gust_kmh,
            opening_hour=self.opening_hour,
            summer_months=frozenset(self.summer_months),
            summer_closing_hour=self.summer_closing_hour,
            winter_closing_hour=self.winter_closing_hour,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are loaded once and cached. To reload, clear the cache:
    ```python
    get_settings.cache_clear()
    ```
    """
    return Settings()


def get_settings_uncached() -> Settings:
    """Get fresh settings without caching.

    Useful for testing when environment variables change.
    """
    return Settings()
