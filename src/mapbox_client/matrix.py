"""
Matrix v1: travel times and distances between many points.

Reference: https://docs.mapbox.com/api/navigation/matrix/
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from pydantic import BaseModel, Field

from .models import (
    Annotation,
    Approach,
    Coordinate,
    Profile,
    Waypoint,
    format_coordinates,
    join_values,
)

MATRIX_PATH = "directions-matrix/v1"


@dataclass(frozen=True)
class DirectionsMatrixRequest:
    # required
    profile: Profile
    coordinates: list[Coordinate]

    # optional
    annotations: list[Annotation] = field(default_factory=list)
    approaches: list[Approach] = field(default_factory=list)
    destinations: list[int] = field(default_factory=list)
    sources: list[int] = field(default_factory=list)
    fallback_speed: float = 0.0

    def path(self) -> str:
        return f"{MATRIX_PATH}/{self.profile}/{format_coordinates(self.coordinates)}"

    def query_params(self) -> dict[str, str]:
        return {
            "annotations": join_values(self.annotations, ","),
            "approaches": join_values(self.approaches, ";"),
            "destinations": join_values(self.destinations, ";"),
            "sources": join_values(self.sources, ";"),
            "fallback_speed": f"{self.fallback_speed:f}" if self.fallback_speed else "",
        }


class DirectionsMatrixResponse(BaseModel):
    """
    Matrix result. `durations[i][j]` is the travel time in seconds from
    source i to destination j; entries are None when no route was found.
    """
    code: str = ""
    durations: list[list[Optional[float]]] = Field(default_factory=list)
    distances: list[list[Optional[float]]] = Field(default_factory=list)
    destinations: list[Waypoint] = Field(default_factory=list)
    sources: list[Waypoint] = Field(default_factory=list)
