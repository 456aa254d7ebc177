from __future__ import annotations

import threading
from datetime import timedelta

import pytest
import requests

from conftest import FakeSession, make_response
from mapbox_client import (
    AuthError,
    Coordinate,
    DirectionsMatrixRequest,
    DirectionsRequest,
    ForwardGeocodeRequest,
    GeocodeResponse,
    LocalRateLimitError,
    MapboxClient,
    Profile,
    RateLimit,
    RateLimitRegistry,
    RemoteRateLimitError,
    ReverseGeocodeRequest,
    SearchboxReverseRequest,
    TransportError,
)
from mapbox_client.settings import MapboxSettings

REVERSE = ReverseGeocodeRequest(Coordinate(lat=48.8584, lng=2.2945), language="en", limit=1)
TOO_MANY = {"message": "Too Many Requests", "code": "too_many_requests"}


def rate_limited(clock, seconds: int = 1):
    return make_response(429, TOO_MANY, {"X-Rate-Limit-Reset": clock.unix(seconds)})


def test_missing_api_key_raises(monkeypatch):
    monkeypatch.setenv("MAPBOX_API_KEY", "env-key")

    with pytest.raises(ValueError, match="missing Mapbox API key"):
        MapboxClient(api_key="")


def test_default_timeout_and_own_registry():
    a = MapboxClient(api_key="k", timeout=0)
    b = MapboxClient(api_key="k")

    assert a.timeout == 30.0
    assert a.registry is not b.registry
    a.close()
    b.close()


def test_rate_limit_round_trip(client, session, clock):
    session.queue(make_response(200, {}))
    client.reverse_geocode(REVERSE)

    session.queue(rate_limited(clock, 2))
    with pytest.raises(RemoteRateLimitError) as excinfo:
        client.reverse_geocode(REVERSE)
    assert str(excinfo.value) == "api error(429): Too Many Requests"

    # Rejected locally, nothing sent
    calls_before = len(session.calls)
    with pytest.raises(LocalRateLimitError) as excinfo:
        client.reverse_geocode(REVERSE)
    assert str(excinfo.value) == "api error(429): Rate limiting geocoding requests"
    assert len(session.calls) == calls_before

    # Other buckets still go out
    session.queue(make_response(200, {"code": "Ok"}))
    client.directions(DirectionsRequest(Profile.DRIVING, [Coordinate(1, 2), Coordinate(3, 4)]))
    assert len(session.calls) == calls_before + 1

    clock.advance(2.1)
    session.queue(make_response(200, {"features": []}))
    assert client.reverse_geocode(REVERSE).features == []


def test_every_endpoint_checks_its_bucket(client, session, registry, clock):
    calls = [
        (RateLimit.GEOCODING, lambda: client.forward_geocode(ForwardGeocodeRequest(search_text="Paris"))),
        (RateLimit.GEOCODING, lambda: client.forward_geocode_batch([ForwardGeocodeRequest(search_text="Paris")])),
        (RateLimit.GEOCODING, lambda: client.reverse_geocode(REVERSE)),
        (RateLimit.GEOCODING, lambda: client.reverse_geocode_batch([REVERSE])),
        (RateLimit.DIRECTIONS, lambda: client.directions(
            DirectionsRequest(Profile.WALKING, [Coordinate(1, 2), Coordinate(3, 4)]))),
        (RateLimit.MATRIX, lambda: client.directions_matrix(
            DirectionsMatrixRequest(Profile.DRIVING, [Coordinate(1, 2), Coordinate(3, 4)]))),
        (RateLimit.SEARCHBOX, lambda: client.searchbox_reverse(SearchboxReverseRequest(Coordinate(1, 2)))),
    ]
    for bucket in RateLimit:
        registry.record_reset(bucket, clock.now + timedelta(seconds=10))

    for bucket, call in calls:
        with pytest.raises(LocalRateLimitError) as excinfo:
            call()
        assert excinfo.value.bucket == bucket

    assert session.calls == []


def test_request_carries_token_and_drops_empty_params(client, session):
    session.queue(make_response(200, {"code": "Ok"}))

    client.directions_matrix(DirectionsMatrixRequest(Profile.DRIVING, [Coordinate(1, 2), Coordinate(3, 4)]))

    call = session.calls[0]
    assert call["method"] == "GET"
    assert call["url"] == "https://api.mapbox.com/directions-matrix/v1/mapbox/driving/2,1;4,3"
    assert call["params"] == {"access_token": "test"}
    assert call["timeout"] == 30.0
    assert "Referer" not in call["headers"]


def test_referer_header_is_sent(session, registry):
    client = MapboxClient(api_key="test", referer="https://example.com/", session=session, registry=registry)
    session.queue(make_response(200, {}))

    client.reverse_geocode(REVERSE)

    assert session.calls[0]["headers"]["Referer"] == "https://example.com/"


def test_batch_posts_json_body(client, session):
    session.queue(make_response(200, {"batch": [{"features": []}, {"features": []}]}))

    resp = client.reverse_geocode_batch([REVERSE, ReverseGeocodeRequest(Coordinate(lat=1.5, lng=-2))])

    call = session.calls[0]
    assert call["method"] == "POST"
    assert call["url"] == "https://api.mapbox.com/search/geocode/v6/batch"
    assert call["json"] == [
        {"longitude": 2.2945, "latitude": 48.8584, "language": "en", "limit": 1},
        {"longitude": -2, "latitude": 1.5},
    ]
    assert len(resp.batch) == 2


def test_transport_failure_is_wrapped(client, session, registry):
    session.queue(requests.ConnectionError("connection refused"))

    with pytest.raises(TransportError) as excinfo:
        client.reverse_geocode(REVERSE)

    assert isinstance(excinfo.value.original, requests.ConnectionError)
    assert registry.blocked_until(RateLimit.GEOCODING) is None


def test_auth_error_surfaces(client, session, registry):
    session.queue(make_response(401))

    with pytest.raises(AuthError):
        client.searchbox_reverse(SearchboxReverseRequest(Coordinate(1, 2)))

    assert not registry.is_blocked(RateLimit.SEARCHBOX)


def test_from_env(monkeypatch, session):
    monkeypatch.setenv("MAPBOX_API_KEY", "env-key")
    monkeypatch.setenv("MAPBOX_TIMEOUT", "5")
    monkeypatch.setenv("MAPBOX_REFERER", "https://example.com/")

    client = MapboxClient.from_env(session=session)

    assert client.api_key == "env-key"
    assert client.timeout == 5.0
    assert client.referer == "https://example.com/"


def test_from_env_override_wins(monkeypatch, session):
    monkeypatch.setenv("MAPBOX_API_KEY", "env-key")

    client = MapboxClient.from_env(session=session, api_key="explicit")

    assert client.api_key == "explicit"


def test_from_env_without_key_raises(monkeypatch, tmp_path):
    monkeypatch.delenv("MAPBOX_API_KEY", raising=False)
    monkeypatch.chdir(tmp_path)

    with pytest.raises(ValueError):
        MapboxClient.from_env()


def test_constructor_falls_back_to_settings(session):
    settings = MapboxSettings(api_key="k", timeout=7, referer="https://example.com/", base_url="http://localhost:8080")

    client = MapboxClient(settings=settings, session=session)

    assert client.api_key == "k"
    assert client.timeout == 7.0
    assert client.referer == "https://example.com/"
    assert client.base_url == "http://localhost:8080"


def test_explicit_arguments_beat_settings(session):
    settings = MapboxSettings(api_key="from-settings", timeout=7, referer="https://example.com/")

    client = MapboxClient(api_key="explicit", timeout=2, referer="", settings=settings, session=session)

    assert client.api_key == "explicit"
    assert client.timeout == 2.0
    assert client.referer == ""


def test_constructor_reads_environment(monkeypatch, tmp_path, session):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("MAPBOX_API_KEY", "env-key")

    client = MapboxClient(session=session)

    assert client.api_key == "env-key"
    assert client.base_url == "https://api.mapbox.com"


def test_settings_without_key_raises(session):
    with pytest.raises(ValueError, match="missing Mapbox API key"):
        MapboxClient(settings=MapboxSettings(api_key=None), session=session)


def test_context_manager_closes_session(session):
    with MapboxClient(api_key="test", session=session) as client:
        assert client.session is session

    assert session.closed


def test_many_keeps_order_and_collects_errors(client, session, clock):
    def respond(call):
        lat = float(call["params"]["latitude"])
        if lat == 2:
            return make_response(500, b"oops")
        return make_response(200, {"attribution": call["params"]["latitude"]})

    session.default = respond
    reqs = [ReverseGeocodeRequest(Coordinate(lat=float(i), lng=0.5)) for i in range(5)]

    results = client.reverse_geocode_many(reqs, n_workers=3)

    assert len(results) == 5
    for i, result in enumerate(results):
        if i == 2:
            assert result.status_code == 500
        else:
            assert isinstance(result, GeocodeResponse)
            assert result.attribution == str(i)


def test_concurrent_callers_around_a_rate_limit(clock):
    registry = RateLimitRegistry(clock=clock)
    session = FakeSession()
    client = MapboxClient(api_key="test", session=session, registry=registry)

    session.queue(rate_limited(clock, 1))
    with pytest.raises(RemoteRateLimitError):
        client.reverse_geocode(REVERSE)

    session.default = lambda call: make_response(200, {})
    outcomes = {"ok": 0, "local": 0}
    lock = threading.Lock()

    def worker():
        for _ in range(50):
            try:
                client.reverse_geocode(REVERSE)
                key = "ok"
            except LocalRateLimitError:
                key = "local"
            with lock:
                outcomes[key] += 1

    threads = [threading.Thread(target=worker) for _ in range(2)]
    for t in threads:
        t.start()
    clock.advance(1.5)
    for t in threads:
        t.join()

    assert outcomes["ok"] + outcomes["local"] == 100
    assert not registry.is_blocked(RateLimit.GEOCODING)
