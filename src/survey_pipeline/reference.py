"""Reference point resolution and the per-batch projection session."""

from __future__ import annotations

import logging

from .errors import InvalidCoordinate, NoReferenceAvailable
from .models import GeoCoordinate, LocalPosition, ProjectionMethod, ReferencePoint
from .projection import check_coordinate, project
from .validate import ValidatedZone

logger = logging.getLogger(__name__)


class ProjectionSession:
    """Holds the single active reference point of one processing batch.

    ``reference`` is ``None`` until set; there is no zero-valued placeholder.
    The session freezes on the first projection, after which the reference can
    only be replaced with an explicit ``reset``.
    """

    def __init__(
        self,
        method: ProjectionMethod = ProjectionMethod.EQUIRECTANGULAR,
        reference: ReferencePoint | None = None,
    ):
        self.method = ProjectionMethod(method)
        self._reference = reference
        self._frozen = False

    @property
    def reference(self) -> ReferencePoint | None:
        return self._reference

    @property
    def frozen(self) -> bool:
        return self._frozen

    def set_reference(self, point: GeoCoordinate, *, reset: bool = False) -> ReferencePoint:
        """Set the reference if none is active, or replace it when ``reset`` is true."""
        if self._reference is not None and not reset:
            logger.debug("Reference already set to %s; ignoring %s", self._reference, point)
            return self._reference
        if self._frozen:
            logger.warning("Resetting reference after projection; earlier local positions are stale")
        self._reference = ReferencePoint(**point.model_dump())
        self._frozen = False
        return self._reference

    def reset(self) -> None:
        self._reference = None
        self._frozen = False

    def project(self, point: GeoCoordinate) -> LocalPosition:
        position = project(point, self._reference, self.method)
        self._frozen = True
        return position


def resolve_reference(
    session: ProjectionSession,
    validated: ValidatedZone,
    explicit: GeoCoordinate | None = None,
) -> ReferencePoint:
    """Pick the session origin.

    Priority: a reference already held by the session, then ``explicit``,
    then the first valid point feature, then the first valid segment of the
    first conduit that has one.

    Raises:
        NoReferenceAvailable: none of the above exists.
    """
    if session.reference is not None:
        return session.reference

    if explicit is not None:
        try:
            check_coordinate(explicit.latitude, explicit.longitude)
        except InvalidCoordinate as exc:
            raise NoReferenceAvailable(f"Supplied reference point is unusable: {exc}") from exc
        logger.info("Using caller-supplied reference point: %s, %s", explicit.latitude, explicit.longitude)
        return session.set_reference(explicit)

    if validated.points:
        first = validated.points[0]
        logger.info(
            "Auto-set reference point from %s %s: %s, %s",
            first.record.kind,
            first.record.identifier,
            first.coordinate.latitude,
            first.coordinate.longitude,
        )
        return session.set_reference(first.coordinate)

    for conduit in validated.conduits:
        if conduit.segments:
            coordinate = conduit.segments[0].coordinate
            logger.info(
                "Auto-set reference point from conduit %s: %s, %s",
                conduit.name,
                coordinate.latitude,
                coordinate.longitude,
            )
            return session.set_reference(coordinate)

    raise NoReferenceAvailable()
