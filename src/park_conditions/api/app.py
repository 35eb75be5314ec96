"""FastAPI application factory.

Creates and configures the FastAPI application with all routes and middleware.

## Usage

```python
from park_conditions.api import create_app

app = create_app()

# Run with uvicorn
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
```

## Configuration

The app is configured via environment variables. See `park_conditions.config`
for available settings.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from park_conditions.services import ParkServices

logger = logging.getLogger(__name__)


def create_app(
    services: ParkServices | None = None,
    start_monitor: bool = True,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        services: Prebuilt services (built from settings when omitted)
        start_monitor: Run the periodic refresh loop while the app is up

    Returns:
        Configured FastAPI application
    """
    services = services or ParkServices.from_settings()
    settings = services.settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan manager.

        Handles startup and shutdown tasks:
        - Start the refresh loop
        - Close the weather client and state store on shutdown
        """
        logger.info(f"Starting {settings.app_name} v{settings.app_version}")

        task: asyncio.Task | None = None
        if start_monitor:
            task = asyncio.create_task(
                services.monitor.run(settings.refresh_interval_seconds)
            )

        yield

        logger.info("Shutting down")
        services.monitor.stop()
        if task is not None:
            await task
        await services.aclose()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description=f"Riding conditions and notifications for {settings.park_name}",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.services = services

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )

    # Include routers
    from park_conditions.api.routes import notifications, preferences, status, trails

    app.include_router(status.router, prefix="/api/status", tags=["Status"])
    app.include_router(trails.router, prefix="/api/trails", tags=["Trails"])
    app.include_router(
        notifications.router, prefix="/api/notifications", tags=["Notifications"]
    )
    app.include_router(preferences.router, prefix="/api/preferences", tags=["Preferences"])

    # Health check endpoint
    @app.get("/health", tags=["Health"])
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "version": settings.app_version}

    return app
