"""Batch entry points: raw survey JSON in, SpatialSet plus diagnostics out.

Flow is strictly one-way::

    text -> reader -> validate -> resolve reference -> project -> assemble -> SpatialSet

Only ``MalformedInput`` and ``NoReferenceAvailable`` escape; every other
problem is reported in ``PipelineResult.diagnostics``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO

from .config import PipelineConfig
from .errors import InvalidCoordinate
from .models import Diagnostic, GeoCoordinate, PipelineResult, SpatialSet, SurveyZone
from .paths import build_line_paths
from .poi import build_conduit_pois, build_point_poi
from .reader import read_enclosures_json, read_zone_json
from .reference import ProjectionSession, resolve_reference
from .validate import ValidatedZone, validate_zone

logger = logging.getLogger(__name__)


def assemble_spatial_set(
    validated: ValidatedZone,
    session: ProjectionSession,
    config: PipelineConfig,
    name: str | None = None,
    diagnostics: list[Diagnostic] | None = None,
) -> SpatialSet:
    """Build a new SpatialSet from validated records with a resolved session.

    POIs come in input order: point features first, then Start/End/Midpoint
    of each conduit.
    """
    if diagnostics is None:
        diagnostics = []

    pois = []
    for point in validated.points:
        try:
            pois.append(build_point_poi(point, session, config.defaults_for(point.record.kind)))
        except InvalidCoordinate as exc:
            logger.warning("Dropping %s %s: %s", point.record.kind, point.record.identifier, exc)
            diagnostics.append(Diagnostic.from_error(exc, record=point.record.identifier))

    conduit_defaults = config.defaults_for("conduit")
    for conduit in validated.conduits:
        pois.extend(build_conduit_pois(conduit, session, conduit_defaults, diagnostics))

    lines = build_line_paths(validated.conduits, session, config.line_style, diagnostics)

    created_at = datetime.now(timezone.utc)
    spatial_set = SpatialSet(
        name=name or f"{config.poi_set_name}_{created_at:%Y%m%d_%H%M%S}",
        zone=validated.zone,
        created_at=created_at,
        reference=session.reference,
        method=session.method,
        poi_set_name=config.poi_set_name,
        pois=tuple(pois),
        line_set_name=config.line_set_name,
        lines=tuple(lines),
    )
    logger.info(
        "Created spatial set %r with %d POIs and %d conduit lines",
        spatial_set.name,
        len(spatial_set.pois),
        len(spatial_set.lines),
    )
    return spatial_set


def process_survey(
    zone: SurveyZone,
    config: PipelineConfig | None = None,
    *,
    reference: GeoCoordinate | None = None,
    session: ProjectionSession | None = None,
    name: str | None = None,
) -> PipelineResult:
    """Validate, resolve the reference, project and assemble an already-parsed document.

    Args:
        zone: parsed document.
        config: defaults and projection method; ``PipelineConfig()`` if omitted.
        reference: explicit origin, overriding ``config.reference``.
        session: reuse an existing session (and its reference) across batches.
        name: SpatialSet name; defaults to the POI set name plus a timestamp.

    Raises:
        NoReferenceAvailable: no origin in the session, arguments, config or input.
    """
    config = config or PipelineConfig()
    if session is None:
        session = ProjectionSession(config.method)

    validated = validate_zone(zone)
    diagnostics = list(validated.diagnostics)

    resolve_reference(session, validated, reference or config.reference)
    spatial_set = assemble_spatial_set(validated, session, config, name, diagnostics)

    if diagnostics:
        logger.warning("%d diagnostic(s) while processing zone %r", len(diagnostics), zone.zone)
    return PipelineResult(spatial_set=spatial_set, diagnostics=tuple(diagnostics))


def process_zone(
    source: str | bytes | BinaryIO,
    config: PipelineConfig | None = None,
    *,
    reference: GeoCoordinate | None = None,
    session: ProjectionSession | None = None,
    name: str | None = None,
) -> PipelineResult:
    """Process a zone document (conduits + manholes)."""
    return process_survey(read_zone_json(source), config, reference=reference, session=session, name=name)


def process_enclosures(
    source: str | bytes | BinaryIO,
    config: PipelineConfig | None = None,
    *,
    reference: GeoCoordinate | None = None,
    session: ProjectionSession | None = None,
    name: str | None = None,
) -> PipelineResult:
    """Process an enclosure document (array of enclosures with GPS coordinates)."""
    return process_survey(read_enclosures_json(source), config, reference=reference, session=session, name=name)


def process_zone_file(path: str | Path, config: PipelineConfig | None = None, **kwargs) -> PipelineResult:
    """Read a zone JSON file from disk and process it."""
    with open(path, "rb") as f:
        return process_zone(f, config, **kwargs)
