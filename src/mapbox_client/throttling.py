"""
Rate limit tracking for Mapbox API buckets.

Mapbox enforces separate rate limits per family of endpoints. When the API
answers 429 it also sends the absolute time at which the limit resets, so the
client can refuse further calls for that family locally until then instead of
spending a round trip on a request that is certain to fail.

See https://docs.mapbox.com/api/overview/#rate-limits
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from enum import StrEnum
from typing import Callable, Optional

from .errors import LocalRateLimitError

logger = logging.getLogger(__name__)


class RateLimit(StrEnum):
    """A set of operations that share one server-side rate limit."""
    GEOCODING = "geocoding"
    MATRIX = "matrix"
    DIRECTIONS = "directions"
    SEARCHBOX = "searchbox"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RateLimitRegistry:
    """
    Thread-safe record of when each rate limit bucket stops being blocked.

    Holds at most one reset time per bucket; the latest recorded one wins.
    Expired entries are cleared by the first check that observes them, so no
    timer or background sweep is needed.

    A single lock covers every read and write. It is only ever held for a
    dict lookup or assignment, never across a network call.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        """
        Initialize an empty registry.

        Args:
            clock: Zero-argument callable returning the current aware UTC
                datetime (defaults to the system clock)
        """
        self._clock = clock or utc_now
        self._resets: dict[RateLimit, Optional[datetime]] = {}
        self._lock = threading.Lock()

    def check_blocked(self, bucket: RateLimit) -> None:
        """
        Pre-flight check for a bucket.

        Clears the bucket's entry if its reset time has passed.

        Args:
            bucket: Rate limit bucket about to be used

        Raises:
            LocalRateLimitError: If the bucket's reset time is still in the future
        """
        with self._lock:
            reset_at = self._resets.get(bucket)
            if reset_at is None:
                return

            now = self._clock()
            if reset_at <= now:
                self._resets[bucket] = None
                logger.info(f"Rate limit for {bucket} expired at {reset_at.isoformat()}")
                return

            retry_after = (reset_at - now).total_seconds()

        raise LocalRateLimitError(bucket, reset_at, retry_after)

    def is_blocked(self, bucket: RateLimit) -> bool:
        """Return True if a call in this bucket would be rejected right now."""
        try:
            self.check_blocked(bucket)
        except LocalRateLimitError:
            return True
        return False

    def record_reset(self, bucket: RateLimit, reset_at: datetime) -> None:
        """
        Block a bucket until `reset_at`, replacing any previous reset time.

        Args:
            bucket: Rate limit bucket reported as exhausted
            reset_at: Datetime after which calls may resume (naive values are taken as UTC)
        """
        if reset_at.tzinfo is None:
            reset_at = reset_at.replace(tzinfo=timezone.utc)
        with self._lock:
            self._resets[bucket] = reset_at

    def blocked_until(self, bucket: RateLimit) -> Optional[datetime]:
        """Stored reset time for a bucket, without clearing expired entries."""
        with self._lock:
            return self._resets.get(bucket)
