from __future__ import annotations

import json
import threading
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from mapbox_client import MapboxClient, RateLimitRegistry


def make_response(
    status_code: int = 200,
    body: Any = None,
    headers: dict[str, str] | None = None,
) -> requests.Response:
    """Build a real requests.Response with a preloaded body.

    `body` may be bytes, a str, or any JSON-serializable value.
    """
    if body is None:
        content = b""
    elif isinstance(body, bytes):
        content = body
    elif isinstance(body, str):
        content = body.encode()
    else:
        content = json.dumps(body).encode()

    response = requests.Response()
    response.status_code = status_code
    response._content = content
    response._content_consumed = True
    response.headers = CaseInsensitiveDict(headers or {})
    response.url = "https://api.mapbox.test/"
    return response


class BrokenBodyResponse(requests.Response):
    """Response whose body fails while being read."""

    def __init__(self, status_code: int = 200):
        super().__init__()
        self.status_code = status_code
        self.closed = False

    @property
    def content(self) -> bytes:  # type: ignore[override]
        raise requests.exceptions.ChunkedEncodingError("connection broken mid-body")

    def close(self) -> None:
        self.closed = True


class FakeSession:
    """Stand-in for requests.Session that replays queued responses.

    Queue entries may be responses, exceptions (raised), or callables
    taking the recorded call and returning a response.
    """

    def __init__(self, *responses: Any) -> None:
        self._responses = list(responses)
        self._lock = threading.Lock()
        self.calls: list[dict[str, Any]] = []
        self.default: Any = None
        self.closed = False

    def queue(self, *responses: Any) -> None:
        with self._lock:
            self._responses.extend(responses)

    def request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        call = {"method": method, "url": url, **kwargs}
        with self._lock:
            self.calls.append(call)
            if self._responses:
                item = self._responses.pop(0)
            elif self.default is not None:
                item = self.default
            else:
                raise AssertionError("FakeSession: no responses queued")
        if isinstance(item, BaseException):
            raise item
        if callable(item):
            return item(call)
        return item

    def close(self) -> None:
        self.closed = True


class FakeClock:
    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)

    def unix(self, offset: float = 0) -> str:
        """Unix timestamp string `offset` seconds from now, as in X-Rate-Limit-Reset."""
        return str(int(self.now.timestamp() + offset))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def registry(clock: FakeClock) -> RateLimitRegistry:
    return RateLimitRegistry(clock=clock)


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def client(session: FakeSession, registry: RateLimitRegistry) -> MapboxClient:
    return MapboxClient(api_key="test", session=session, registry=registry)
