"""Base weather provider abstraction.

This module defines the interface for weather data providers. Every provider
translates its API response into the canonical `WeatherReading` defined in
`lawn_advisor.models.weather`, so the advisory engine never sees a
provider-specific payload.

## Supported Providers

### MET Norway (api.met.no)
- Endpoint: https://api.met.no/weatherapi/locationforecast/2.0/compact
- Auth: User-Agent header required (no API key)
- Current conditions: first timeseries entry, next_1_hours symbol code

### OpenWeatherMap (openweathermap.org)
- Endpoint: https://api.openweathermap.org/data/2.5/weather
- Auth: API key in `appid` query parameter
- Current conditions: weather[0].id / weather[0].main

Readings are never cached: every plan gets a fresh reading on every run.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

import httpx
from pydantic import ValidationError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from lawn_advisor.errors import RateLimitError, WeatherUnavailable
from lawn_advisor.models.location import Coordinates
from lawn_advisor.models.weather import WeatherReading


class WeatherProvider(ABC):
    """Abstract base class for weather data providers.

    Attributes:
        name: Provider name used in logs and readings
        base_url: Base URL for the API
        requires_api_key: Whether this provider requires an API key

    Example:
        ```python
        async with MetNoProvider(user_agent="my-app/1.0 contact@example.com") as provider:
            reading = await provider.current_conditions(59.9139, 10.7522)
        ```
    """

    name: str
    base_url: str
    requires_api_key: bool = False

    def __init__(
        self,
        api_key: str | None = None,
        user_agent: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the provider.

        Args:
            api_key: API key if required by the provider
            user_agent: User-Agent string for requests
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        if self.requires_api_key and not api_key:
            raise ValueError(f"{self.name} requires an API key")
        self.api_key = api_key
        self.user_agent = user_agent or "lawn-advisor/0.1.0"
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> WeatherProvider:
        """Enter async context manager."""
        self._get_client()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Exit async context manager."""
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
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
    async def _fetch(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Fetch data from the API with retry logic.

        Args:
            url: Full URL to fetch
            params: Query parameters
            headers: Additional headers

        Returns:
            HTTP response

        Raises:
            WeatherUnavailable: If the API answers with an error status
            RateLimitError: If rate limit is exceeded
            httpx.TimeoutException, httpx.NetworkError: After retries are exhausted
        """
        client = self._get_client()
        request_headers = self._get_default_headers()
        if headers:
            request_headers.update(headers)

        response = await client.get(url, params=params, headers=request_headers)

        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            raise RateLimitError(
                self.name,
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
                status_code=429,
            )

        if response.status_code >= 400:
            raise WeatherUnavailable(
                f"API request failed: {response.status_code}",
                provider=self.name,
                status_code=response.status_code,
                response_body=response.text,
            )

        return response

    async def _fetch_json(
        self,
        url: str,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Fetch a URL and decode its JSON body.

        Transport failures and undecodable bodies are raised as
        `WeatherUnavailable`.
        """
        try:
            response = await self._fetch(url, params=params)
        except httpx.HTTPError as e:
            raise WeatherUnavailable(
                f"Request to {self.name} failed: {e!r}",
                provider=self.name,
            ) from e

        try:
            data = response.json()
        except ValueError as e:
            raise WeatherUnavailable(
                f"Failed to parse response: {e}",
                provider=self.name,
                response_body=response.text,
            ) from e

        if not isinstance(data, dict):
            raise WeatherUnavailable(
                "Unexpected response shape",
                provider=self.name,
                response_body=response.text,
            )
        return data

    async def current_conditions(self, latitude: float, longitude: float) -> WeatherReading:
        """Get current weather conditions at a location.

        Args:
            latitude: Latitude in decimal degrees
            longitude: Longitude in decimal degrees

        Returns:
            WeatherReading in canonical format

        Raises:
            WeatherUnavailable: If the reading cannot be retrieved
        """
        try:
            coordinates = Coordinates(latitude=latitude, longitude=longitude)
        except ValueError as e:
            raise WeatherUnavailable(
                f"Invalid coordinates ({latitude}, {longitude})",
                provider=self.name,
            ) from e
        return await self.get_current_conditions(coordinates)

    @abstractmethod
    async def get_current_conditions(self, coordinates: Coordinates) -> WeatherReading:
        """Fetch and translate current conditions for validated coordinates."""

    def _translate(
        self,
        response_data: dict[str, Any],
        coordinates: Coordinates,
    ) -> WeatherReading:
        """Run `_translate_response`, reporting malformed payloads as unavailable."""
        try:
            return self._translate_response(response_data, coordinates)
        except (AttributeError, KeyError, TypeError, ValidationError) as e:
            raise WeatherUnavailable(
                f"Malformed response: {e}",
                provider=self.name,
            ) from e

    @abstractmethod
    def _translate_response(

        self,
        response_data: dict[str, Any],
        coordinates: Coordinates,
    ) -> WeatherReading:
        """Translate provider-specific response to a canonical reading.

        Args:
            response_data: Raw JSON response from provider
            coordinates: Location coordinates

        Returns:
            WeatherReading in canonical format
        """
