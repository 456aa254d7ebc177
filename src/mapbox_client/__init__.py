"""
- Client: MapboxClient, the entry point for every endpoint
- Throttling: per-bucket rate limit registry
- Responses: response classification and decoding
- Errors: exception hierarchy
- Models: coordinates, bounding boxes and API enums
- Geocoding, directions, matrix, searchbox: request and response types
"""

from .client import MapboxClient

from .settings import MapboxSettings

from .throttling import (
    RateLimit,
    RateLimitRegistry,
)

from .responses import (
    ErrorResponse,
    ResponseInterpreter,
    parse_reset_header,
)

from .errors import (
    MapboxClientError,
    ApiError,
    AuthError,
    RateLimitError,
    LocalRateLimitError,
    RemoteRateLimitError,
    TransportError,
)

from .models import (
    Coordinate,
    BoundingBox,
    Profile,
    Annotation,
    Approach,
    FeatureType,
    Exclude,
    Geometries,
    Include,
    Overview,
    VoiceUnits,
    MatchCodeConfidence,
    MatchCodeValue,
    Waypoint,
)

from .geocoding import (
    ForwardGeocodeRequest,
    ReverseGeocodeRequest,
    GeocodeResponse,
    GeocodeBatchResponse,
    Feature,
    Properties,
)

from .directions import (
    DirectionsRequest,
    DirectionsResponse,
    Route,
    RouteLeg,
)

from .matrix import (
    DirectionsMatrixRequest,
    DirectionsMatrixResponse,
)

from .searchbox import (
    SearchboxReverseRequest,
    SearchboxReverseResponse,
)

__all__ = [
    # Client
    "MapboxClient",
    "MapboxSettings",
    # Throttling
    "RateLimit",
    "RateLimitRegistry",
    # Responses
    "ErrorResponse",
    "ResponseInterpreter",
    "parse_reset_header",
    # Errors
    "MapboxClientError",
    "ApiError",
    "AuthError",
    "RateLimitError",
    "LocalRateLimitError",
    "RemoteRateLimitError",
    "TransportError",
    # Models
    "Coordinate",
    "BoundingBox",
    "Profile",
    "Annotation",
    "Approach",
    "FeatureType",
    "Exclude",
    "Geometries",
    "Include",
    "Overview",
    "VoiceUnits",
    "MatchCodeConfidence",
    "MatchCodeValue",
    "Waypoint",
    # Geocoding
    "ForwardGeocodeRequest",
    "ReverseGeocodeRequest",
    "GeocodeResponse",
    "GeocodeBatchResponse",
    "Feature",
    "Properties",
    # Directions
    "DirectionsRequest",
    "DirectionsResponse",
    "Route",
    "RouteLeg",
    # Matrix
    "DirectionsMatrixRequest",
    "DirectionsMatrixResponse",
    # Search Box
    "SearchboxReverseRequest",
    "SearchboxReverseResponse",
]
