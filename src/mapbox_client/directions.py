"""
Directions v5 requests and responses.

Reference: https://docs.mapbox.com/api/navigation/directions/
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from .models import (
    Annotation,
    Approach,
    Coordinate,
    Exclude,
    Geometries,
    Include,
    Overview,
    Profile,
    VoiceUnits,
    Waypoint,
    format_bool,
    format_coordinates,
    format_time,
    join_values,
)

DIRECTIONS_PATH = "directions/v5"


@dataclass(frozen=True)
class DirectionsRequest:
    """
    A Directions API request.

    Booleans are tri-state: None leaves the parameter out so the API default
    applies.
    """
    # required
    profile: Profile
    coordinates: list[Coordinate]

    # optional
    alternatives: Optional[bool] = None
    annotations: list[Annotation] = field(default_factory=list)
    avoid_maneuver_radius: int = 0  # 1 to 1000
    continue_straight: Optional[bool] = None
    excludes: list[Exclude] = field(default_factory=list)
    geometries: Optional[Geometries] = None
    includes: list[Include] = field(default_factory=list)
    overview: Optional[Overview] = None
    approaches: list[Approach] = field(default_factory=list)
    steps: Optional[bool] = None
    banner_instructions: Optional[bool] = None
    language: str = ""
    roundabout_exits: Optional[bool] = None
    voice_instructions: Optional[bool] = None
    voice_units: Optional[VoiceUnits] = None
    waypoints: list[int] = field(default_factory=list)
    waypoints_per_route: Optional[bool] = None
    waypoint_names: list[str] = field(default_factory=list)
    waypoint_targets: list[str] = field(default_factory=list)

    # mapbox/walking
    walking_speed: float = 0.0
    walkway_bias: float = 0.0

    # mapbox/driving
    alley_bias: float = 0.0
    arrive_by: Optional[datetime] = None
    depart_at: Optional[datetime] = None
    max_height: int = 0
    max_width: int = 0
    max_weight: int = 0

    # mapbox/driving-traffic
    snapping_include_closures: Optional[bool] = None
    snapping_include_static_closures: Optional[bool] = None

    def path(self) -> str:
        return f"{DIRECTIONS_PATH}/{self.profile}/{format_coordinates(self.coordinates)}"

    def query_params(self) -> dict[str, str]:
        params: dict[str, str] = {}

        def set_bool(name: str, value: Optional[bool]) -> None:
            if value is not None:
                params[name] = format_bool(value)

        overview = self.overview
        set_bool("alternatives", self.alternatives)
        if self.annotations:
            # annotations only work with overview=full
            params["annotations"] = join_values(self.annotations, ",")
            overview = Overview.FULL
        if self.avoid_maneuver_radius:
            params["avoid_maneuver_radius"] = str(self.avoid_maneuver_radius)
        set_bool("continue_straight", self.continue_straight)
        if self.excludes:
            params["exclude"] = join_values(self.excludes, ",")
        if self.geometries:
            params["geometries"] = str(self.geometries)
        if self.includes:
            params["include"] = join_values(self.includes, ",")
        if overview:
            params["overview"] = str(overview)
        if self.approaches:
            params["approaches"] = join_values(self.approaches, ";")
        set_bool("steps", self.steps)
        set_bool("banner_instructions", self.banner_instructions)
        if self.language:
            params["language"] = self.language
        set_bool("roundabout_exits", self.roundabout_exits)
        set_bool("voice_instructions", self.voice_instructions)
        if self.voice_units:
            params["voice_units"] = str(self.voice_units)
        if self.waypoints:
            params["waypoints"] = join_values(self.waypoints, ";")
        set_bool("waypoints_per_route", self.waypoints_per_route)
        if self.waypoint_names:
            params["waypoint_names"] = join_values(self.waypoint_names, ";")
        if self.waypoint_targets:
            params["waypoint_targets"] = join_values(self.waypoint_targets, ";")
        if self.walking_speed:
            params["walking_speed"] = f"{self.walking_speed:.2f}"
        if self.walkway_bias:
            params["walkway_bias"] = f"{self.walkway_bias:.2f}"
        if self.alley_bias:
            params["alley_bias"] = f"{self.alley_bias:.2f}"
        if self.arrive_by is not None:
            params["arrive_by"] = format_time(self.arrive_by)
        if self.depart_at is not None:
            params["depart_at"] = format_time(self.depart_at)
        if self.max_height:
            params["max_height"] = str(self.max_height)
        if self.max_width:
            params["max_width"] = str(self.max_width)
        if self.max_weight:
            params["max_weight"] = str(self.max_weight)
        set_bool("snapping_include_closures", self.snapping_include_closures)
        set_bool("snapping_include_static_closures", self.snapping_include_static_closures)
        return params


# --- Responses ---------------------------------------------------------------

class Maneuver(BaseModel):
    bearing_after: float = 0.0
    bearing_before: float = 0.0
    location: list[float] = Field(default_factory=list)  # [lng, lat]
    type: str = ""
    modifier: str = ""
    instruction: str = ""


class Intersection(BaseModel):
    location: list[float] = Field(default_factory=list)
    bearings: list[int] = Field(default_factory=list)
    entry: list[bool] = Field(default_factory=list)
    in_: Optional[int] = Field(default=None, alias="in")
    out: Optional[int] = None


class Step(BaseModel):
    distance: float = 0.0
    duration: float = 0.0
    geometry: Any = None  # polyline string or GeoJSON LineString
    name: str = ""
    maneuver: Maneuver = Field(default_factory=Maneuver)
    mode: str = ""
    weight: float = 0.0
    intersections: list[Intersection] = Field(default_factory=list)


class Maxspeed(BaseModel):
    speed: Optional[int] = None
    unit: str = ""
    unknown: Optional[bool] = None
    none: Optional[bool] = None


class DirectionsAnnotation(BaseModel):
    distance: list[float] = Field(default_factory=list)
    duration: list[float] = Field(default_factory=list)
    speed: list[float] = Field(default_factory=list)
    congestion: list[str] = Field(default_factory=list)
    maxspeed: list[Maxspeed] = Field(default_factory=list)


class Admin(BaseModel):
    iso_3166_1_alpha3: str = ""
    iso_3166_1: str = ""


class VoiceInstruction(BaseModel):
    distanceAlongGeometry: float = 0.0
    announcement: str = ""
    ssmlAnnouncement: str = ""


class Component(BaseModel):
    text: str = ""
    type: str = ""


class Instruction(BaseModel):
    text: str = ""
    type: str = ""
    modifier: str = ""
    components: list[Component] = Field(default_factory=list)


class BannerInstruction(BaseModel):
    distanceAlongGeometry: float = 0.0
    primary: Instruction = Field(default_factory=Instruction)
    secondary: Optional[Instruction] = None


class ViaWaypoint(BaseModel):
    waypoint_index: int = 0
    distance_from_start: float = 0.0
    geometry_index: int = 0


class RouteLeg(BaseModel):
    """A leg of a route between two waypoints."""
    distance: float = 0.0  # meters
    duration: float = 0.0  # seconds
    summary: str = ""
    weight: float = 0.0
    steps: list[Step] = Field(default_factory=list)
    annotation: DirectionsAnnotation = Field(default_factory=DirectionsAnnotation)
    admins: list[Admin] = Field(default_factory=list)
    voiceInstructions: list[VoiceInstruction] = Field(default_factory=list)
    bannerInstructions: list[BannerInstruction] = Field(default_factory=list)
    via_waypoints: list[ViaWaypoint] = Field(default_factory=list)


class Route(BaseModel):
    duration: float = 0.0
    distance: float = 0.0
    weight_name: str = ""
    weight: float = 0.0
    duration_typical: Optional[float] = None
    weight_typical: Optional[float] = None
    geometry: Any = None
    legs: list[RouteLeg] = Field(default_factory=list)
    voiceLocale: str = ""
    waypoints: list[Waypoint] = Field(default_factory=list)


class DirectionsResponse(BaseModel):
    code: str = ""
    uuid: str = ""
    routes: list[Route] = Field(default_factory=list)
    waypoints: list[Waypoint] = Field(default_factory=list)
