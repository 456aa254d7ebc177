"""
Value types shared by the Mapbox endpoints.

Coordinates and bounding boxes are immutable, frozen dataclasses. The string
enums carry the exact values the API expects in query strings.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import StrEnum
from typing import Iterable, Optional

from pydantic import BaseModel, Field


def format_float(value: float) -> str:
    """Shortest decimal form of a float, without a trailing ".0"."""
    text = repr(float(value))
    if text.endswith(".0"):
        text = text[:-2]
    return text


def format_bool(value: bool) -> str:
    return "true" if value else "false"


TIME_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def format_time(value: Optional[datetime]) -> str:
    """Format a datetime in UTC for time-dependent routing parameters."""
    if value is None:
        return ""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime(TIME_FORMAT)


def join_values(values: Iterable[object], sep: str) -> str:
    return sep.join(str(v) for v in values)


@dataclass(frozen=True)
class Coordinate:
    """A WGS84 point."""
    lat: float = 0.0
    lng: float = 0.0

    def is_zero(self) -> bool:
        return self.lat == 0 and self.lng == 0

    def wgs84_format(self) -> str:
        """Mapbox order is longitude first: "lng,lat"."""
        return f"{format_float(self.lng)},{format_float(self.lat)}"


def format_coordinates(coordinates: Iterable[Coordinate]) -> str:
    """Semicolon-separated list of coordinates, as used in routing paths."""
    return ";".join(c.wgs84_format() for c in coordinates)


@dataclass(frozen=True)
class BoundingBox:
    min: Coordinate = Coordinate()
    max: Coordinate = Coordinate()

    def query(self) -> str:
        return ",".join(format_float(v) for v in self.to_list())

    def to_list(self) -> list[float]:
        return [self.min.lng, self.min.lat, self.max.lng, self.max.lat]


class Profile(StrEnum):
    DRIVING = "mapbox/driving"
    WALKING = "mapbox/walking"
    CYCLING = "mapbox/cycling"
    DRIVING_TRAFFIC = "mapbox/driving-traffic"


class Annotation(StrEnum):
    DURATION = "duration"
    DISTANCE = "distance"
    SPEED = "speed"
    CONGESTION = "congestion"


class Approach(StrEnum):
    UNRESTRICTED = "unrestricted"
    CURB = "curb"


class FeatureType(StrEnum):
    COUNTRY = "country"
    REGION = "region"
    POSTCODE = "postcode"
    DISTRICT = "district"
    PLACE = "place"
    LOCALITY = "locality"
    NEIGHBORHOOD = "neighborhood"
    STREET = "street"
    BLOCK = "block"
    ADDRESS = "address"
    SECONDARY_ADDRESS = "secondary_address"
    POI = "poi"
    POI_LANDMARK = "poi.landmark"


class Exclude(StrEnum):
    MOTORWAY = "motorway"
    TOLL = "toll"
    FERRY = "ferry"
    UNPAVED = "unpaved"
    CASH_ONLY_TOLLS = "cash_only_tolls"


class Geometries(StrEnum):
    GEOJSON = "geojson"
    POLYLINE = "polyline"
    POLYLINE6 = "polyline6"


class Include(StrEnum):
    HOV2 = "hov2"
    HOV3 = "hov3"
    HOT = "hot"


class Overview(StrEnum):
    FULL = "full"
    SIMPLIFIED = "simplified"
    FALSE = "false"


class VoiceUnits(StrEnum):
    IMPERIAL = "imperial"
    METRIC = "metric"


class MatchCodeConfidence(StrEnum):
    EXACT = "exact"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class MatchCodeValue(StrEnum):
    MATCHED = "matched"
    UNMATCHED = "unmatched"
    NOT_APPLICABLE = "not_applicable"
    INFERRED = "inferred"
    PLAUSIBLE = "plausible"


class Waypoint(BaseModel):
    """A snapped input coordinate, as returned by the routing APIs."""
    distance: float = 0.0
    name: str = ""
    location: list[float] = Field(default_factory=list)
