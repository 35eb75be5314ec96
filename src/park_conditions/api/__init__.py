"""FastAPI application and routes.

This module provides the REST API in front of the park conditions engine.

## API Structure

- /health - Liveness check
- /api/status - Current park status, weather and refresh
- /api/trails - Trail list with filters, favourites
- /api/notifications - In-app notification log
- /api/preferences - Notification switches
"""

from park_conditions.api.app import create_app

__all__ = ["create_app"]
