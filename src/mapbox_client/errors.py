"""
Exceptions raised by the Mapbox client.

ApiError covers every error status from the API, including locally raised
rate limit rejections. TransportError covers failures to send a request or
read its response.
"""

from __future__ import annotations

from datetime import datetime


class MapboxClientError(Exception):
    """Base class for every error raised by the Mapbox client."""


class ApiError(MapboxClientError):
    """An error status (4xx/5xx) returned by the Mapbox API."""

    def __init__(self, status_code: int, message: str = "", code: str = ""):
        self.status_code = status_code
        self.message = message
        self.code = code
        super().__init__(f"api error({status_code}): {message}")


class AuthError(ApiError):
    """HTTP 401. Terminal for the call, never rate limited."""

    def __init__(self, message: str = "unauthorized request. Provide Mapbox API key"):
        super().__init__(401, message)


class RateLimitError(ApiError):
    """Any 429-class condition, local or remote."""

    def __init__(self, message: str = "", code: str = "", reset_at: datetime | None = None):
        self.reset_at = reset_at
        super().__init__(429, message, code)


class LocalRateLimitError(RateLimitError):
    """Raised before any network call while a bucket's reset window is open."""

    def __init__(self, bucket: str, reset_at: datetime, retry_after: float):
        self.bucket = bucket
        self.retry_after = retry_after
        super().__init__(f"Rate limiting {bucket} requests", reset_at=reset_at)


class RemoteRateLimitError(RateLimitError):
    """A 429 actually returned by the API."""


class TransportError(MapboxClientError):
    """The request could not be completed or its response could not be read or decoded."""

    def __init__(self, message: str, original: Exception | None = None):
        self.original = original
        super().__init__(message)
