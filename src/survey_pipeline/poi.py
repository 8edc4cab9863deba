"""Point-of-interest assembly for point features and conduit key points."""

from __future__ import annotations

import logging

from .config import FeatureDefaults
from .errors import InsufficientPath, InvalidCoordinate
from .models import Diagnostic, LocalPosition, PointOfInterest
from .reference import ProjectionSession
from .validate import MIN_MIDPOINT_SEGMENTS, MIN_PATH_SEGMENTS, ValidatedConduit, ValidatedPoint, ValidatedSegment

logger = logging.getLogger(__name__)


def _make_poi(
    name: str,
    description: str,
    kind: str,
    position: LocalPosition,
    defaults: FeatureDefaults,
) -> PointOfInterest:
    return PointOfInterest(
        name=name,
        description=description,
        kind=kind,
        position=position,
        tracking_radius=defaults.tracking_radius,
        close_tracking_radius=defaults.close_tracking_radius,
        placement_mode=defaults.placement_mode,
        relative_height=defaults.relative_height,
        facing_heading=defaults.facing_heading,
        icon=defaults.icon,
        object_asset=defaults.object_asset,
        model_asset=defaults.model_asset,
        canvas_asset=defaults.canvas_asset,
    )


def build_point_poi(point: ValidatedPoint, session: ProjectionSession, defaults: FeatureDefaults) -> PointOfInterest:
    """Build the POI for a validated manhole/enclosure record."""
    record = point.record
    label = record.label or record.id or ""
    name = defaults.label_format.format(label=label, id=record.id or "", kind=record.kind)
    return _make_poi(name, record.description, record.kind, session.project(point.coordinate), defaults)


def _conduit_poi(
    conduit: ValidatedConduit,
    segment: ValidatedSegment,
    suffix: str,
    session: ProjectionSession,
    defaults: FeatureDefaults,
) -> PointOfInterest:
    label = f"{conduit.name} {suffix}"
    return _make_poi(
        defaults.label_format.format(label=label, id=conduit.record.id or "", kind="conduit"),
        f"{conduit.record.description}\nNotes: {segment.record.notes}",
        "conduit",
        session.project(segment.coordinate),
        defaults,
    )


def build_conduit_pois(
    conduit: ValidatedConduit,
    session: ProjectionSession,
    defaults: FeatureDefaults,
    diagnostics: list[Diagnostic] | None = None,
) -> list[PointOfInterest]:
    """Derive Start, End and Midpoint POIs from a conduit's valid segments.

    Conduits that are not paths (fewer than two valid segments) yield nothing.
    The midpoint is the valid segment at index ``count // 2`` and needs at
    least three valid segments. A key point the projection rejects is left
    out and reported.
    """
    segments = conduit.segments
    if len(segments) < MIN_PATH_SEGMENTS:
        return []

    picks = [("Start", segments[0]), ("End", segments[-1])]
    if len(segments) >= MIN_MIDPOINT_SEGMENTS:
        picks.append(("Midpoint", segments[len(segments) // 2]))
    else:
        exc = InsufficientPath(conduit.name, len(segments), MIN_MIDPOINT_SEGMENTS, feature="midpoint")
        logger.debug("No midpoint POI: %s", exc)
        if diagnostics is not None:
            diagnostics.append(Diagnostic.from_error(exc, record=conduit.name, level="info"))

    pois = []
    for suffix, segment in picks:
        try:
            pois.append(_conduit_poi(conduit, segment, suffix, session, defaults))
        except InvalidCoordinate as exc:
            ref = f"{conduit.name} {suffix}"
            logger.warning("Dropping POI %s: %s", ref, exc)
            if diagnostics is not None:
                diagnostics.append(Diagnostic.from_error(exc, record=ref))
    return pois
