"""Base observation provider abstraction.

This module defines the interface for weather observation sources and the
canonical format they translate into.

## Canonical Data Format

Every provider returns a list of `park_conditions.models.observation.Observation`
records, newest first, without duplicates and capped at ``max_observations``.

### Canonical Units
- Wind gust: kilometres per hour (km/h)
- Wind direction: compass code (e.g. "NNE"), empty when unknown
- Rain: millimetres since the daily reset, as text, "-" when missing
- Timestamp: station local time, ``YYYYMMDDhhmmss``

### Translation Requirements
Each provider must implement `_translate_response()`. Records that cannot be
translated (missing timestamp or gust, malformed values) are skipped rather
than failing the whole batch.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from park_conditions.exceptions import ProviderError
from park_conditions.models.observation import Observation

logger = logging.getLogger(__name__)

DEFAULT_MAX_OBSERVATIONS = 50


class RateLimitError(ProviderError):
    """Raised when the source asks us to slow down."""

    def __init__(
        self,
        provider: str,
        retry_after: int | None = None,
        status_code: int | None = None,
    ):
        super().__init__(
            f"Rate limit exceeded for {provider}",
            provider=provider,
            status_code=status_code,
        )
        self.retry_after = retry_after


class ObservationProvider(ABC):
    """Abstract base class for weather observation sources.

    Attributes:
        name: Short provider name used in logs and errors
        url: Feed URL

    Example:
        ```python
        async with BomObservationProvider() as provider:
            observations = await provider.fetch_observations()
        ```
    """

    name: str
    url: str

    def __init__(
        self,
        url: str | None = None,
        user_agent: str | None = None,
        timeout: float = 10.0,
        max_observations: int = DEFAULT_MAX_OBSERVATIONS,
        client: httpx.AsyncClient | None = None,
    ):
        """Initialize the provider.

        Args:
            url: Override the default feed URL
            user_agent: User-Agent string for requests
            timeout: Request timeout in seconds
            max_observations: Most records to keep from one response
            client: Pre-built HTTP client (not closed by the provider)
        """
        if url:
            self.url = url
        self.user_agent = user_agent or "park-conditions/0.1.0"
        self.timeout = timeout
        self.max_observations = max_observations
        self._client = client
        self._owns_client = client is None

        # Cache for conditional requests
        self._etag: str | None = None
        self._last_modified: str | None = None
        self._cached: list[Observation] | None = None

    async def __aenter__(self) -> ObservationProvider:
        """Enter async context manager."""
        self._get_client()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Exit async context manager."""
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
            self._owns_client = True
        return self._client

    def _get_default_headers(self) -> dict[str, str]:
        """Get default headers for requests."""
        return {
            "User-Agent": self.user_agent,
            "Accept": "application/json",
        }

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type((httpx.TimeoutException, httpx.NetworkError)),
        reraise=True,
    )
    async def _fetch(self, url: str) -> httpx.Response:
        """Fetch the feed with retry logic.

        Raises:
            ProviderError: If the server answers with an error status
            RateLimitError: If rate limit is exceeded
            httpx.HTTPError: If the request fails after retries
        """
        client = self._get_client()
        headers = self._get_default_headers()
        if self._cached is not None:
            if self._etag:
                headers["If-None-Match"] = self._etag
            if self._last_modified:
                headers["If-Modified-Since"] = self._last_modified

        response = await client.get(url, headers=headers)

        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            raise RateLimitError(
                self.name,
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
                status_code=429,
            )

        if response.status_code == 304:
            return response  # Caller should check for 304

        if response.status_code >= 400:
            raise ProviderError(
                f"API request failed: {response.status_code}",
                provider=self.name,
                status_code=response.status_code,
                response_body=response.text,
            )

        self._etag = response.headers.get("ETag")
        self._last_modified = response.headers.get("Last-Modified")
        return response

    async def fetch_observations(self) -> list[Observation]:
        """Fetch the latest observations.

        Returns:
            Observations newest first, at most ``max_observations``

        Raises:
            ProviderError: If observations cannot be retrieved
        """
        try:
            response = await self._fetch(self.url)
        except httpx.HTTPError as e:
            raise ProviderError(
                f"Request to {self.url} failed: {e}", provider=self.name
            ) from e

        if response.status_code == 304 and self._cached is not None:
            logger.debug(f"{self.name}: feed not modified, reusing cached observations")
            return list(self._cached)

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError(
                f"Failed to parse response: {e}",
                provider=self.name,
                response_body=response.text,
            ) from e

        observations = self._translate_response(data)
        if not observations:
            raise ProviderError("No usable observations in response", provider=self.name)

        self._cached = observations
        logger.info(
            f"{self.name}: fetched {len(observations)} observations,"
            f" newest {observations[0].timestamp}"
        )
        return list(observations)

    @abstractmethod
    def _translate_response(self, response_data: Any) -> list[Observation]:
        """Translate a provider-specific payload to canonical observations.

        Returns:
            Observations newest first, at most ``max_observations``
        """
