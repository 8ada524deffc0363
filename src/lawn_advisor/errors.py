"""Error taxonomy for the advisory engine.

Run-level errors abort a whole advisory pass; plan-level errors are contained
to the plan that raised them.

| Error | Level | Raised by |
|-------|-------|-----------|
| StoreUnavailable | run | plan store |
| WeatherUnavailable | plan | weather providers |
| RateLimitError | plan | weather providers (HTTP 429) |
| DeliveryFailed | plan | notification senders |
"""

from __future__ import annotations


class AdvisoryError(Exception):
    """Base exception for all advisory engine errors."""


class StoreUnavailable(AdvisoryError):
    """Raised when the plan store cannot return the active plan set."""


class WeatherUnavailable(AdvisoryError):
    """Raised when current conditions cannot be retrieved for a location."""

    def __init__(
        self,
        message: str,
        provider: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code
        self.response_body = response_body


class RateLimitError(WeatherUnavailable):
    """Raised when provider rate limit is exceeded."""

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


class DeliveryFailed(AdvisoryError):
    """Raised when a notification could not be delivered."""

    def __init__(self, message: str, target: str):
        super().__init__(message)
        self.target = target


class SchedulerError(AdvisoryError):
    """Raised on scheduler lifecycle misuse (e.g. starting twice)."""
