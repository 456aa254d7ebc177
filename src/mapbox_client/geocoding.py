"""
Geocoding v6 requests and responses.

Reference: https://docs.mapbox.com/api/search/geocoding/
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from pydantic import BaseModel, Field

from .models import (
    BoundingBox,
    Coordinate,
    FeatureType,
    MatchCodeConfidence,
    MatchCodeValue,
    format_bool,
    format_float,
    join_values,
)

GEOCODING_FORWARD_ENDPOINT = "/search/geocode/v6/forward"
GEOCODING_REVERSE_ENDPOINT = "/search/geocode/v6/reverse"
GEOCODING_BATCH_ENDPOINT = "/search/geocode/v6/batch"


@dataclass(frozen=True)
class ForwardGeocodeRequest:
    """
    Forward geocoding with search text or structured input.

    Either `search_text` or the structured fields (`address_line1`,
    `postcode`, `place`) are expected to be set.
    """
    search_text: str = ""
    address_line1: str = ""
    postcode: str = ""
    place: str = ""
    autocomplete: bool = False
    bbox: BoundingBox = BoundingBox()
    country: str = ""
    language: str = ""
    limit: int = 0
    proximity: Coordinate = Coordinate()
    types: list[FeatureType] = field(default_factory=list)

    def query_params(self) -> dict[str, str]:
        params = {"autocomplete": format_bool(self.autocomplete)}
        if self.search_text:
            params["q"] = self.search_text
        if self.address_line1:
            params["address_line1"] = self.address_line1
        if self.postcode:
            params["postcode"] = self.postcode
        if self.place:
            params["place"] = self.place
        if not self.bbox.min.is_zero():
            params["bbox"] = self.bbox.query()
        if self.country:
            params["country"] = self.country
        if self.language:
            params["language"] = self.language
        if self.limit:
            params["limit"] = str(self.limit)
        if not self.proximity.is_zero():
            params["proximity"] = self.proximity.wgs84_format()
        if self.types:
            params["types"] = join_values(self.types, ",")
        return params

    def to_batch_item(self) -> dict[str, Any]:
        """JSON object for one entry of a batch geocoding body."""
        item: dict[str, Any] = {}
        if self.search_text:
            item["q"] = self.search_text
        if self.address_line1:
            item["address_line1"] = self.address_line1
        if self.postcode:
            item["postcode"] = self.postcode
        if self.place:
            item["place"] = self.place
        if self.autocomplete:
            item["autocomplete"] = True
        if not self.bbox.min.is_zero() and not self.bbox.max.is_zero():
            item["bbox"] = self.bbox.to_list()
        if self.country:
            item["country"] = self.country
        if self.language:
            item["language"] = self.language
        if self.limit:
            item["limit"] = self.limit
        if not self.proximity.is_zero():
            item["proximity"] = [self.proximity.lng, self.proximity.lat]
        if self.types:
            item["types"] = [str(t) for t in self.types]
        return item


@dataclass(frozen=True)
class ReverseGeocodeRequest:
    coordinate: Coordinate
    country: str = ""
    language: str = ""
    limit: int = 0
    types: list[FeatureType] = field(default_factory=list)

    def query_params(self) -> dict[str, str]:
        params = {
            "latitude": format_float(self.coordinate.lat),
            "longitude": format_float(self.coordinate.lng),
        }
        if self.country:
            params["country"] = self.country
        if self.language:
            params["language"] = self.language
        if self.limit > 0:
            params["limit"] = str(self.limit)
        if self.types:
            params["types"] = join_values(self.types, ",")
        return params

    def to_batch_item(self) -> dict[str, Any]:
        item: dict[str, Any] = {
            "longitude": self.coordinate.lng,
            "latitude": self.coordinate.lat,
        }
        if self.country:
            item["country"] = self.country
        if self.language:
            item["language"] = self.language
        if self.limit > 0:
            item["limit"] = self.limit
        if self.types:
            item["types"] = [str(t) for t in self.types]
        return item


# --- Responses ---------------------------------------------------------------

class Geometry(BaseModel):
    type: str = ""
    coordinates: list[float] = Field(default_factory=list)


class RoutablePoint(BaseModel):
    name: str = ""
    latitude: float = 0.0
    longitude: float = 0.0


class ExtendedCoordinate(BaseModel):
    """Feature coordinates, with accuracy and routable entry points."""
    latitude: float = 0.0
    longitude: float = 0.0
    accuracy: str = ""
    routable_points: list[RoutablePoint] = Field(default_factory=list)


class Context(BaseModel):
    """
    Hierarchy entry for a feature (country, region, place, ...).

    The API uses several shapes for context objects; they are merged here.
    https://docs.mapbox.com/api/search/geocoding/#the-context-object
    """
    mapbox_id: str = ""
    name: str = ""
    wikidata_id: str = ""
    region_code: str = ""
    region_code_full: str = ""
    address_number: str = ""
    street_name: str = ""
    country_code: str = ""
    country_code_alpha_3: str = ""


class MatchCode(BaseModel):
    address_number: Optional[MatchCodeValue] = None
    street: Optional[MatchCodeValue] = None
    postcode: Optional[MatchCodeValue] = None
    place: Optional[MatchCodeValue] = None
    region: Optional[MatchCodeValue] = None
    locality: Optional[MatchCodeValue] = None
    country: Optional[MatchCodeValue] = None
    confidence: Optional[MatchCodeConfidence] = None


class Properties(BaseModel):
    mapbox_id: str = ""
    feature_type: str = ""
    name: str = ""
    name_preferred: str = ""
    place_formatted: str = ""
    full_address: str = ""
    coordinates: ExtendedCoordinate = Field(default_factory=ExtendedCoordinate)
    context: dict[str, Context] = Field(default_factory=dict)
    bbox: list[float] = Field(default_factory=list)
    match_code: Optional[MatchCode] = None


class Feature(BaseModel):
    id: str = ""
    type: str = ""
    geometry: Optional[Geometry] = None  # center of properties.bbox
    properties: Optional[Properties] = None


class GeocodeResponse(BaseModel):
    type: str = ""
    features: list[Feature] = Field(default_factory=list)
    attribution: str = ""

    def features_of_type(self, feature_type: FeatureType | str) -> list[Feature]:
        """Features whose properties report the given feature type."""
        return [
            f for f in self.features
            if f.properties is not None and f.properties.feature_type == feature_type
        ]


class GeocodeBatchResponse(BaseModel):
    batch: list[GeocodeResponse] = Field(default_factory=list)
