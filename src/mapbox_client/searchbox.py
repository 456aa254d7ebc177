"""
Search Box reverse lookup.

Reference: https://docs.mapbox.com/api/search/search-box/#reverse-lookup
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from .geocoding import Context, ExtendedCoordinate, Geometry
from .models import Coordinate, FeatureType, format_float, join_values

SEARCHBOX_REVERSE_ENDPOINT = "/search/searchbox/v1/reverse"


@dataclass(frozen=True)
class SearchboxReverseRequest:
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


def coerce_brand(value: Any) -> Optional[list[str]]:
    """
    Normalize the `brand` property.

    The API sends it as null, as an array of names, or occasionally as some
    other JSON value. Arrays pass through; any other non-null value becomes a
    one-element list holding its JSON text.
    """
    if value is None:
        return None
    if isinstance(value, list):
        return [v if isinstance(v, str) else json.dumps(v) for v in value]
    return [json.dumps(value, ensure_ascii=False)]


class SearchboxReverseProperties(BaseModel):
    mapbox_id: str = ""
    feature_type: str = ""
    name: str = ""
    name_preferred: str = ""
    place_formatted: str = ""
    full_address: str = ""
    coordinates: ExtendedCoordinate = Field(default_factory=ExtendedCoordinate)
    context: dict[str, Context] = Field(default_factory=dict)
    bbox: list[float] = Field(default_factory=list)
    language: str = ""
    maki: str = ""
    poi_category: list[str] = Field(default_factory=list)
    poi_category_ids: list[str] = Field(default_factory=list)
    brand: Optional[list[str]] = None
    brand_id: Any = None
    external_ids: dict[str, str] = Field(default_factory=dict)
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("brand", mode="before")
    @classmethod
    def _coerce_brand(cls, value: Any) -> Optional[list[str]]:
        return coerce_brand(value)


class SearchboxReverseFeature(BaseModel):
    id: str = ""
    type: str = ""
    geometry: Optional[Geometry] = None
    properties: Optional[SearchboxReverseProperties] = None


class SearchboxReverseResponse(BaseModel):
    type: str = ""
    features: list[SearchboxReverseFeature] = Field(default_factory=list)
    attribution: str = ""
