"""Coordinate validation at the input boundary.

Every coordinate goes through ``parse_coordinate`` before it is used in
arithmetic. Problems with a single record become diagnostics and the batch
carries on.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

from .errors import InsufficientPath, InvalidCoordinate
from .models import ConduitRecord, Diagnostic, GeoCoordinate, PointRecord, RawCoordinate, SegmentRecord, SurveyZone

logger = logging.getLogger(__name__)

MIN_PATH_SEGMENTS = 2
MIN_MIDPOINT_SEGMENTS = 3

_LIMITS = {"latitude": 90.0, "longitude": 180.0}


@dataclass(frozen=True)
class ValidatedPoint:
    record: PointRecord
    coordinate: GeoCoordinate


@dataclass(frozen=True)
class ValidatedSegment:
    index: int  # position in the original segment list
    record: SegmentRecord
    coordinate: GeoCoordinate


@dataclass(frozen=True)
class ValidatedConduit:
    record: ConduitRecord
    segments: tuple[ValidatedSegment, ...]

    @property
    def name(self) -> str:
        return self.record.name or (str(self.record.id) if self.record.id is not None else "<unnamed>")

    @property
    def is_path(self) -> bool:
        return len(self.segments) >= MIN_PATH_SEGMENTS


@dataclass
class ValidatedZone:
    zone: str | None
    points: list[ValidatedPoint] = field(default_factory=list)
    conduits: list[ValidatedConduit] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)


def parse_coordinate(raw: RawCoordinate, field_name: str) -> float:
    """Convert a raw latitude/longitude value into a float, checking its range.

    Accepts numbers and numeric text. ``field_name`` is ``"latitude"`` or
    ``"longitude"`` and selects the allowed range.

    Raises:
        InvalidCoordinate: missing, non-numeric, non-finite or out of range.
    """
    if raw is None:
        raise InvalidCoordinate(field_name, raw, "missing")
    if isinstance(raw, bool):
        raise InvalidCoordinate(field_name, raw, "not a number")
    if isinstance(raw, (int, float)):
        value = float(raw)
    elif isinstance(raw, str):
        text = raw.strip()
        if not text:
            raise InvalidCoordinate(field_name, raw, "empty")
        try:
            value = float(text)
        except ValueError:
            raise InvalidCoordinate(field_name, raw, "not a number") from None
    else:
        raise InvalidCoordinate(field_name, raw, f"unsupported type {type(raw).__name__}")

    if not math.isfinite(value):
        raise InvalidCoordinate(field_name, raw, "not finite")
    limit = _LIMITS[field_name]
    if not -limit <= value <= limit:
        raise InvalidCoordinate(field_name, raw, f"outside [-{limit:g}, {limit:g}]")
    return value


def parse_geo_coordinate(latitude: RawCoordinate, longitude: RawCoordinate) -> GeoCoordinate:
    return GeoCoordinate(
        latitude=parse_coordinate(latitude, "latitude"),
        longitude=parse_coordinate(longitude, "longitude"),
    )


def validate_point(record: PointRecord) -> ValidatedPoint:
    return ValidatedPoint(record=record, coordinate=parse_geo_coordinate(record.latitude, record.longitude))


def validate_conduit(record: ConduitRecord, diagnostics: list[Diagnostic]) -> ValidatedConduit:
    """Validate each segment, keeping the valid ones in their original order."""
    valid: list[ValidatedSegment] = []
    for idx, segment in enumerate(record.segments):
        try:
            coordinate = parse_geo_coordinate(segment.lat, segment.lng)
        except InvalidCoordinate as exc:
            ref = f"{record.name}[{idx}]"
            logger.warning("Dropping segment %s: %s", ref, exc)
            diagnostics.append(Diagnostic.from_error(exc, record=ref))
            continue
        valid.append(ValidatedSegment(index=idx, record=segment, coordinate=coordinate))
    return ValidatedConduit(record=record, segments=tuple(valid))


def validate_zone(zone: SurveyZone) -> ValidatedZone:
    """Validate all records of a parsed document. Never raises for per-record problems."""
    result = ValidatedZone(zone=zone.zone, diagnostics=list(zone.diagnostics))

    for record in zone.points:
        try:
            result.points.append(validate_point(record))
        except InvalidCoordinate as exc:
            logger.warning("Dropping %s %s: %s", record.kind, record.identifier, exc)
            result.diagnostics.append(Diagnostic.from_error(exc, record=record.identifier))

    for record in zone.conduits:
        conduit = validate_conduit(record, result.diagnostics)
        if not conduit.is_path:
            exc = InsufficientPath(conduit.name, len(conduit.segments), MIN_PATH_SEGMENTS)
            logger.warning("Skipping conduit: %s", exc)
            result.diagnostics.append(Diagnostic.from_error(exc, record=conduit.name))
        result.conduits.append(conduit)

    logger.debug(
        "Validated %d/%d points, %d/%d conduits usable as paths",
        len(result.points),
        len(zone.points),
        sum(1 for c in result.conduits if c.is_path),
        len(zone.conduits),
    )
    return result
