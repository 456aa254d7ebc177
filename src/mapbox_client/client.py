"""
Mapbox API client.

Wraps the Geocoding v6, Directions v5, Matrix v1 and Search Box endpoints.
Every call first consults the client's RateLimitRegistry so that, after the
API answers 429 for one family of endpoints, further calls in that family fail
locally until the server's reset time instead of reaching the network.

Reference: https://docs.mapbox.com/api/overview/
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Callable, Iterable, Optional, Sequence, TypeVar

import requests
from tqdm import tqdm

from .directions import DirectionsRequest, DirectionsResponse
from .errors import MapboxClientError, TransportError
from .geocoding import (
    GEOCODING_BATCH_ENDPOINT,
    GEOCODING_FORWARD_ENDPOINT,
    GEOCODING_REVERSE_ENDPOINT,
    ForwardGeocodeRequest,
    GeocodeBatchResponse,
    GeocodeResponse,
    ReverseGeocodeRequest,
)
from .matrix import DirectionsMatrixRequest, DirectionsMatrixResponse
from .responses import ResponseInterpreter, ResponseT
from .searchbox import SEARCHBOX_REVERSE_ENDPOINT, SearchboxReverseRequest, SearchboxReverseResponse
from .settings import DEFAULT_BASE_URL, DEFAULT_TIMEOUT, MapboxSettings
from .throttling import RateLimit, RateLimitRegistry

logger = logging.getLogger(__name__)

RequestT = TypeVar("RequestT")


class MapboxClient:
    """
    Mapbox API client.

    Safe to share between threads: the only mutable shared state is the rate
    limit registry, which does its own locking.

    Example:
        with MapboxClient.from_env() as client:
            resp = client.reverse_geocode(
                ReverseGeocodeRequest(Coordinate(lat=48.8584, lng=2.2945))
            )
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        referer: Optional[str] = None,
        base_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        registry: Optional[RateLimitRegistry] = None,
        settings: Optional[MapboxSettings] = None,
    ):
        """
        Initialize the client.

        Args:
            api_key: Mapbox access token
            timeout: HTTP request timeout in seconds (default: 30)
            referer: Referer header, needed when the token has URL restrictions
            base_url: API root (default: Mapbox production)
            session: Optional requests session (defaults to a new one)
            registry: Optional rate limit registry (defaults to a new one)
            settings: Fallback for any argument left as None (defaults to
                MAPBOX_* environment variables and .env)

        Raises:
            ValueError: If no API key is given or configured
        """
        settings = settings or MapboxSettings()
        if api_key is None:
            api_key = settings.api_key
        if not api_key:
            raise ValueError("missing Mapbox API key")

        self.api_key = api_key
        self.timeout = (settings.timeout if timeout is None else timeout) or DEFAULT_TIMEOUT
        self.referer = settings.referer if referer is None else referer
        self.base_url = (settings.base_url if base_url is None else base_url) or DEFAULT_BASE_URL
        self.session = session or requests.Session()
        self.registry = registry or RateLimitRegistry()
        self.interpreter = ResponseInterpreter(self.registry)

        logger.info(f"Initialized MapboxClient: {self.base_url}, timeout={self.timeout}s")

    @classmethod
    def from_env(
        cls,
        session: Optional[requests.Session] = None,
        registry: Optional[RateLimitRegistry] = None,
        **overrides: Any,
    ) -> "MapboxClient":
        """
        Create a client from MAPBOX_* environment variables (or .env).

        Args:
            session: Optional requests session
            registry: Optional rate limit registry
            **overrides: Values that take precedence over the environment
                (api_key, timeout, base_url, referer)
        """
        return cls(session=session, registry=registry, settings=MapboxSettings(**overrides))

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "MapboxClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # --- Geocoding ------------------------------------------------------------

    def forward_geocode(self, req: ForwardGeocodeRequest) -> GeocodeResponse:
        """https://docs.mapbox.com/api/search/geocoding/#forward-geocoding-with-search-text-input"""
        return self._call(
            RateLimit.GEOCODING, "GET", GEOCODING_FORWARD_ENDPOINT,
            req.query_params(), GeocodeResponse,
        )

    def forward_geocode_batch(self, reqs: Sequence[ForwardGeocodeRequest]) -> GeocodeBatchResponse:
        """https://docs.mapbox.com/api/search/geocoding/#batch-geocoding"""
        return self._call(
            RateLimit.GEOCODING, "POST", GEOCODING_BATCH_ENDPOINT,
            {}, GeocodeBatchResponse,
            json_body=[r.to_batch_item() for r in reqs],
        )

    def reverse_geocode(self, req: ReverseGeocodeRequest) -> GeocodeResponse:
        """https://docs.mapbox.com/api/search/geocoding/#reverse-geocoding"""
        return self._call(
            RateLimit.GEOCODING, "GET", GEOCODING_REVERSE_ENDPOINT,
            req.query_params(), GeocodeResponse,
        )

    def reverse_geocode_batch(self, reqs: Sequence[ReverseGeocodeRequest]) -> GeocodeBatchResponse:
        """Batch endpoint with reverse queries only."""
        return self._call(
            RateLimit.GEOCODING, "POST", GEOCODING_BATCH_ENDPOINT,
            {}, GeocodeBatchResponse,
            json_body=[r.to_batch_item() for r in reqs],
        )

    def forward_geocode_many(
        self,
        reqs: Iterable[ForwardGeocodeRequest],
        n_workers: int = 1,
        show_progress: bool = False,
    ) -> list[GeocodeResponse | MapboxClientError]:
        """Run forward_geocode for each request, see `_fetch_many`."""
        return self._fetch_many(self.forward_geocode, reqs, n_workers, show_progress)

    def reverse_geocode_many(
        self,
        reqs: Iterable[ReverseGeocodeRequest],
        n_workers: int = 1,
        show_progress: bool = False,
    ) -> list[GeocodeResponse | MapboxClientError]:
        """Run reverse_geocode for each request, see `_fetch_many`."""
        return self._fetch_many(self.reverse_geocode, reqs, n_workers, show_progress)

    # --- Navigation -----------------------------------------------------------

    def directions(self, req: DirectionsRequest) -> DirectionsResponse:
        """https://docs.mapbox.com/api/navigation/directions/"""
        return self._call(
            RateLimit.DIRECTIONS, "GET", req.path(),
            req.query_params(), DirectionsResponse,
        )

    def directions_matrix(self, req: DirectionsMatrixRequest) -> DirectionsMatrixResponse:
        """https://docs.mapbox.com/api/navigation/matrix/"""
        return self._call(
            RateLimit.MATRIX, "GET", req.path(),
            req.query_params(), DirectionsMatrixResponse,
        )

    # --- Search Box -----------------------------------------------------------

    def searchbox_reverse(self, req: SearchboxReverseRequest) -> SearchboxReverseResponse:
        """https://docs.mapbox.com/api/search/search-box/#reverse-lookup"""
        return self._call(
            RateLimit.SEARCHBOX, "GET", SEARCHBOX_REVERSE_ENDPOINT,
            req.query_params(), SearchboxReverseResponse,
        )

    # --- Plumbing -------------------------------------------------------------

    def _call(
        self,
        bucket: RateLimit,
        method: str,
        path: str,
        params: dict[str, str],
        model: type[ResponseT],
        json_body: Any = None,
    ) -> ResponseT:
        self.registry.check_blocked(bucket)
        response = self._request(method, path, params, json_body)
        return self.interpreter.handle(response, bucket, model)

    def _request(
        self,
        method: str,
        path: str,
        params: dict[str, str],
        json_body: Any = None,
    ) -> requests.Response:
        """
        Issue one HTTP request.

        Empty query values are dropped and the access token is added.

        Raises:
            TransportError: If the request could not be completed
        """
        query = {"access_token": self.api_key, **params}
        query = {k: v for k, v in sorted(query.items()) if v != ""}

        url = f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"
        headers = {"Accept": "application/json"}
        if self.referer:
            headers["Referer"] = self.referer

        logger.debug(f"{method} {url}")

        try:
            return self.session.request(
                method,
                url,
                params=query,
                json=json_body,
                headers=headers,
                timeout=self.timeout,
                stream=True,
            )
        except requests.RequestException as e:
            raise TransportError(f"{method} {path} failed. {e}", original=e) from e

    def _fetch_many(
        self,
        fetch: Callable[[RequestT], ResponseT],
        reqs: Iterable[RequestT],
        n_workers: int,
        show_progress: bool,
    ) -> list[ResponseT | MapboxClientError]:
        """
        Fan single requests out over a thread pool.

        Results keep the input order. A request that fails with a client
        error (including a local rate limit rejection) yields the error object
        in its slot instead of aborting the whole batch.

        Args:
            fetch: Bound single-request method
            reqs: Requests to run
            n_workers: Number of worker threads
            show_progress: Whether to show a progress bar

        Returns:
            List of responses or errors, same order as input
        """
        reqs_list = list(reqs)
        results: list[Any] = [None] * len(reqs_list)

        with ThreadPoolExecutor(max_workers=max(1, n_workers)) as executor:
            future_to_idx = {
                executor.submit(fetch, req): idx
                for idx, req in enumerate(reqs_list)
            }

            with tqdm(total=len(future_to_idx), desc="Mapbox requests", disable=not show_progress) as pbar:
                for future in as_completed(future_to_idx):
                    idx = future_to_idx[future]
                    try:
                        results[idx] = future.result()
                    except MapboxClientError as e:
                        logger.error(f"Request {idx} failed: {e}")
                        results[idx] = e
                    pbar.update(1)

        return results
