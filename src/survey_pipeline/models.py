"""Pydantic data models for the survey ingestion pipeline."""

from __future__ import annotations

import math
from datetime import datetime
from enum import Enum
from typing import Any, Iterator, Literal, Sequence

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator

from .errors import SurveyPipelineError

# Coordinate value exactly as it appeared in the JSON (text, number, or missing).
RawCoordinate = Any


def _coerce_text(value: Any) -> Any:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    return value


class ProjectionMethod(str, Enum):
    """Strategy used to turn geographic coordinates into local offsets."""

    EQUIRECTANGULAR = "equirectangular"
    UTM_GRID = "utm_grid"


class PlacementMode(str, Enum):
    """How a consumer should anchor a POI vertically."""

    ALIGN_WITH_GROUND = "align_with_ground"
    FIXED_HEIGHT = "fixed_height"


# ---------------------------------------------------------------------------
# Input records
# ---------------------------------------------------------------------------


class PointRecord(BaseModel):
    """A surveyed point feature (manhole, enclosure) before validation."""

    model_config = ConfigDict(frozen=True)

    kind: str
    id: str | None = None
    label: str = ""
    description: str = ""
    latitude: RawCoordinate = None
    longitude: RawCoordinate = None
    directions: dict[str, tuple[str, ...]] = Field(default_factory=dict)

    @field_validator("id", mode="before")
    @classmethod
    def _id_text(cls, value: Any) -> Any:
        return _coerce_text(value)

    @field_validator("label", "description", mode="before")
    @classmethod
    def _text(cls, value: Any) -> Any:
        value = _coerce_text(value)
        return "" if value is None else value

    @field_validator("directions", mode="before")
    @classmethod
    def _drop_empty_directions(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, dict):
            return {k: v for k, v in value.items() if v is not None}
        return value

    @property
    def identifier(self) -> str:
        """Best human-readable handle for diagnostics."""
        return self.label or self.id or "<unnamed>"


class SegmentRecord(BaseModel):
    """One surveyed vertex of a conduit."""

    model_config = ConfigDict(frozen=True)

    lat: RawCoordinate = None
    lng: RawCoordinate = None
    notes: str = ""

    @field_validator("notes", mode="before")
    @classmethod
    def _text(cls, value: Any) -> Any:
        value = _coerce_text(value)
        return "" if value is None else value


class ConduitRecord(BaseModel):
    """A surveyed path feature. Segment order is the path direction."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = ""
    description: str = ""
    id: int | str | None = None
    segments: tuple[SegmentRecord, ...] = Field(default=(), alias="segment")

    @field_validator("name", "description", mode="before")
    @classmethod
    def _text(cls, value: Any) -> Any:
        value = _coerce_text(value)
        return "" if value is None else value

    @field_validator("id", mode="before")
    @classmethod
    def _id(cls, value: Any) -> Any:
        if isinstance(value, float):
            return int(value) if value.is_integer() else str(value)
        return value

    @field_validator("segments", mode="before")
    @classmethod
    def _skip_null_segments(cls, value: Any) -> Any:
        if value is None:
            return ()
        if isinstance(value, list):
            return [s for s in value if s is not None]
        return value


class SurveyZone(BaseModel):
    """Structured content of one input document."""

    zone: str | None = None
    conduits: list[ConduitRecord] = Field(default_factory=list)
    points: list[PointRecord] = Field(default_factory=list)
    # entries dropped while decoding
    diagnostics: list[Diagnostic] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------


class GeoCoordinate(BaseModel):
    """A validated WGS84 coordinate."""

    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float
    altitude: float | None = None


class ReferencePoint(GeoCoordinate):
    """Origin of the local tangent-plane coordinate system."""


class LocalPosition(BaseModel):
    """Offset from the reference point in meters."""

    model_config = ConfigDict(frozen=True)

    east: float = 0.0
    north: float = 0.0
    up: float = 0.0

    def as_scene_tuple(self) -> tuple[float, float, float]:
        """Return ``(east, up, north)``, the axis order of a y-up scene."""
        return (self.east, self.up, self.north)


def polyline_length(positions: Sequence[LocalPosition]) -> float:
    """Planar length in meters of the polyline through consecutive positions."""
    total = 0.0
    for i in range(1, len(positions)):
        p1, p2 = positions[i - 1], positions[i]
        total += math.hypot(p2.east - p1.east, p2.north - p1.north)
    return total


# ---------------------------------------------------------------------------
# Assembled entities
# ---------------------------------------------------------------------------


class AssetHandle(BaseModel):
    """Opaque reference to a consumer-owned visual asset (icon, prefab, canvas)."""

    model_config = ConfigDict(frozen=True)

    key: str

    @model_validator(mode="before")
    @classmethod
    def _from_string(cls, value: Any) -> Any:
        if isinstance(value, str):
            return {"key": value}
        return value

    def __str__(self) -> str:
        return self.key


class PointOfInterest(BaseModel):
    """A located feature ready for placement by a consumer."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    kind: str
    position: LocalPosition
    tracking_radius: float
    close_tracking_radius: float
    placement_mode: PlacementMode = PlacementMode.ALIGN_WITH_GROUND
    relative_height: float = 0.0
    facing_heading: float = 0.0
    icon: AssetHandle | None = None
    object_asset: AssetHandle | None = None
    model_asset: AssetHandle | None = None
    canvas_asset: AssetHandle | None = None


class LinePath(BaseModel):
    """An ordered polyline in local coordinates."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    color: str = "#FF0000"
    width: float = 0.5
    positions: tuple[LocalPosition, ...]

    @model_validator(mode="after")
    def _at_least_two_points(self) -> "LinePath":
        if len(self.positions) < 2:
            raise ValueError(f"LinePath '{self.name}' needs at least 2 positions, got {len(self.positions)}")
        return self

    @computed_field
    @property
    def length_m(self) -> float:
        return polyline_length(self.positions)


class SpatialSet(BaseModel):
    """POIs and line paths sharing one reference point, handed to consumers."""

    model_config = ConfigDict(frozen=True)

    name: str
    zone: str | None = None
    created_at: datetime
    reference: ReferencePoint
    method: ProjectionMethod
    poi_set_name: str
    pois: tuple[PointOfInterest, ...] = ()
    line_set_name: str
    lines: tuple[LinePath, ...] = ()

    @computed_field
    @property
    def version(self) -> str:
        return self.created_at.strftime("%Y%m%d_%H%M%S")

    def iter_pois(self) -> Iterator[PointOfInterest]:
        return iter(self.pois)

    def iter_lines(self) -> Iterator[LinePath]:
        return iter(self.lines)


class Diagnostic(BaseModel):
    """A recoverable problem found while processing a batch."""

    model_config = ConfigDict(frozen=True)

    kind: str
    level: Literal["warning", "info"] = "warning"
    message: str
    record: str | None = None

    @classmethod
    def from_error(
        cls,
        error: SurveyPipelineError,
        record: str | None = None,
        level: Literal["warning", "info"] = "warning",
    ) -> "Diagnostic":
        return cls(kind=error.kind, level=level, message=str(error), record=record)


class PipelineResult(BaseModel):
    """Complete result of processing one input document."""

    model_config = ConfigDict(frozen=True)

    spatial_set: SpatialSet
    diagnostics: tuple[Diagnostic, ...] = ()


SurveyZone.model_rebuild()
