"""Line path assembly from conduit segments."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .config import LineStyle
from .errors import InsufficientPath, InvalidCoordinate
from .models import Diagnostic, LinePath, LocalPosition
from .reference import ProjectionSession
from .validate import MIN_PATH_SEGMENTS, ValidatedConduit

logger = logging.getLogger(__name__)


def build_line_path(
    conduit: ValidatedConduit,
    session: ProjectionSession,
    style: LineStyle,
    diagnostics: list[Diagnostic] | None = None,
) -> LinePath:
    """Project every valid segment in survey order into one LinePath.

    A segment the projection rejects is left out of the path and reported.

    Raises:
        InsufficientPath: fewer than two vertices could be projected.
    """
    positions: list[LocalPosition] = []
    for segment in conduit.segments:
        try:
            positions.append(session.project(segment.coordinate))
        except InvalidCoordinate as exc:
            ref = f"{conduit.name}[{segment.index}]"
            logger.warning("Dropping path vertex %s: %s", ref, exc)
            if diagnostics is not None:
                diagnostics.append(Diagnostic.from_error(exc, record=ref))

    if len(positions) < MIN_PATH_SEGMENTS:
        raise InsufficientPath(conduit.name, len(positions), MIN_PATH_SEGMENTS)

    return LinePath(
        name=conduit.name,
        description=conduit.record.description,
        color=style.color,
        width=style.width,
        positions=tuple(positions),
    )


def build_line_paths(
    conduits: Iterable[ValidatedConduit],
    session: ProjectionSession,
    style: LineStyle,
    diagnostics: list[Diagnostic] | None = None,
) -> list[LinePath]:
    """One LinePath per conduit with at least two valid segments, in input order."""
    lines: list[LinePath] = []
    for conduit in conduits:
        if not conduit.is_path:
            logger.debug("Skipping conduit %s - %d valid segment(s)", conduit.name, len(conduit.segments))
            continue
        try:
            line = build_line_path(conduit, session, style, diagnostics)
        except InsufficientPath as exc:
            logger.warning("Skipping conduit: %s", exc)
            if diagnostics is not None:
                diagnostics.append(Diagnostic.from_error(exc, record=conduit.name))
            continue
        logger.debug("Added conduit %s with %d positions (%.1f m)", line.name, len(line.positions), line.length_m)
        lines.append(line)
    return lines
