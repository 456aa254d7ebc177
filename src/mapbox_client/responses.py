"""
Classification of completed Mapbox HTTP exchanges.

Turns a `requests.Response` into either a decoded pydantic model or one of
the client errors, and records server-declared rate limit resets.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Optional, TypeVar

import requests
from pydantic import BaseModel, ValidationError, field_validator

from .errors import ApiError, AuthError, RemoteRateLimitError, TransportError
from .throttling import RateLimit, RateLimitRegistry

logger = logging.getLogger(__name__)

RATE_LIMIT_RESET_HEADER = "X-Rate-Limit-Reset"

ResponseT = TypeVar("ResponseT", bound=BaseModel)

_RESET_PATTERN = re.compile(r"[+-]?[0-9]+")


class ErrorResponse(BaseModel):
    """Error body returned by the API for 4xx/5xx statuses."""
    message: str = ""
    code: str = ""

    @field_validator("message", "code", mode="before")
    @classmethod
    def null_as_empty(cls, value):
        return "" if value is None else value


def parse_reset_header(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an `X-Rate-Limit-Reset` header.

    Args:
        value: Header value, expected to be an integer Unix timestamp

    Returns:
        Aware UTC datetime, or None if the value is missing or not a bare
        decimal integer (no whitespace or digit separators)
    """
    if value is None or not _RESET_PATTERN.fullmatch(value):
        return None
    seconds = int(value)
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


class ResponseInterpreter:
    """
    Post-flight handler for API responses.

    Outcomes:
    - 401: AuthError
    - unreadable body: TransportError
    - 4xx/5xx: ApiError (RemoteRateLimitError for 429, which also records the
      reset time in the registry when the header is parseable)
    - 2xx: body decoded into the requested model, or TransportError
    """

    def __init__(self, registry: RateLimitRegistry):
        self.registry = registry

    def handle(
        self,
        response: requests.Response,
        bucket: RateLimit,
        model: type[ResponseT],
    ) -> ResponseT:
        """
        Classify a response and decode its body.

        Args:
            response: Completed HTTP response (closed before returning)
            bucket: Rate limit bucket of the operation that produced it
            model: Pydantic model to decode a successful body into

        Returns:
            Instance of `model`

        Raises:
            AuthError, RemoteRateLimitError, ApiError, TransportError
        """
        try:
            return self._handle(response, bucket, model)
        finally:
            response.close()

    def _handle(
        self,
        response: requests.Response,
        bucket: RateLimit,
        model: type[ResponseT],
    ) -> ResponseT:
        status = response.status_code
        logger.debug(f"{bucket} response status: {status}")

        if status == 401:
            raise AuthError()

        try:
            body = response.content
        except requests.RequestException as e:
            raise TransportError(f"failed to read body. {e}", original=e) from e

        if 400 <= status <= 599:
            raise self._error_for(response, status, body, bucket)

        try:
            return model.model_validate_json(body)
        except ValidationError as e:
            raise TransportError(f"failed to read body. {e}", original=e) from e

    def _error_for(
        self,
        response: requests.Response,
        status: int,
        body: bytes,
        bucket: RateLimit,
    ) -> ApiError:
        try:
            # a bare null body carries no message or code
            error = ErrorResponse() if body.strip() == b"null" else ErrorResponse.model_validate_json(body)
        except ValidationError:
            if status == 429:
                return RemoteRateLimitError()
            return ApiError(status)

        if status != 429:
            return ApiError(status, error.message, error.code)

        raw_reset = response.headers.get(RATE_LIMIT_RESET_HEADER)
        reset_at = parse_reset_header(raw_reset)
        if reset_at is None:
            logger.warning(f"{bucket} rate limited without a usable reset header: {raw_reset!r}")
        else:
            self.registry.record_reset(bucket, reset_at)
            logger.warning(f"{bucket} rate limited until {reset_at.isoformat()}")

        return RemoteRateLimitError(error.message, error.code, reset_at)
