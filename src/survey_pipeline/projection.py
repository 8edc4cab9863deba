"""Geographic to local planar projection.

Two strategies, selected with ``ProjectionMethod``:

- ``EQUIRECTANGULAR``: tangent-plane small-angle approximation on a sphere of
  radius ``EARTH_RADIUS_M``. Good for site-scale baselines; error grows with
  distance from the reference and towards the poles.
- ``UTM_GRID``: both points are projected into the UTM zone of the reference
  (WGS 84 / UTM via pyproj) and the grid difference is returned.

The two do not produce identical numbers, so a consumer must stick to one.
Both map easting to ``LocalPosition.east`` and northing to ``LocalPosition.north``;
``up`` is the altitude difference (missing altitude counts as 0).
"""

from __future__ import annotations

import logging
import math
from functools import lru_cache

from pyproj import CRS, Transformer

from .errors import InvalidCoordinate, MissingReference
from .models import GeoCoordinate, LocalPosition, ProjectionMethod, ReferencePoint

logger = logging.getLogger(__name__)

EARTH_RADIUS_M = 6378137.0
WGS84_EPSG = 4326


def check_coordinate(latitude: float, longitude: float) -> None:
    if not -90.0 <= latitude <= 90.0:
        raise InvalidCoordinate("latitude", latitude, "outside [-90, 90]")
    if not -180.0 <= longitude <= 180.0:
        raise InvalidCoordinate("longitude", longitude, "outside [-180, 180]")


def _vertical(point: GeoCoordinate, reference: GeoCoordinate) -> float:
    return (point.altitude or 0.0) - (reference.altitude or 0.0)


def project_equirectangular(point: GeoCoordinate, reference: GeoCoordinate) -> LocalPosition:
    lat_ref = math.radians(reference.latitude)
    d_lat = math.radians(point.latitude) - lat_ref
    d_lon = math.radians(point.longitude - reference.longitude)
    return LocalPosition(
        east=EARTH_RADIUS_M * d_lon * math.cos(lat_ref),
        north=EARTH_RADIUS_M * d_lat,
        up=_vertical(point, reference),
    )


def unproject_equirectangular(position: LocalPosition, reference: GeoCoordinate) -> GeoCoordinate:
    """Algebraic inverse of ``project_equirectangular`` against the same reference."""
    lat_ref = math.radians(reference.latitude)
    latitude = math.degrees(lat_ref + position.north / EARTH_RADIUS_M)
    longitude = reference.longitude + math.degrees(position.east / (EARTH_RADIUS_M * math.cos(lat_ref)))
    altitude = None
    if reference.altitude is not None or position.up:
        altitude = (reference.altitude or 0.0) + position.up
    return GeoCoordinate(latitude=latitude, longitude=longitude, altitude=altitude)


def utm_zone(latitude: float, longitude: float) -> tuple[int, bool]:
    """Return ``(zone_number, is_northern)`` for a WGS84 coordinate.

    Includes the Norway (32V) and Svalbard (31X-37X) exceptions.
    """
    check_coordinate(latitude, longitude)
    # 180 belongs to zone 60, not 61
    zone = min(int((longitude + 180.0) // 6.0) + 1, 60)

    if 56.0 <= latitude < 64.0 and 3.0 <= longitude < 12.0:
        zone = 32
    elif 72.0 <= latitude < 84.0 and 0.0 <= longitude < 42.0:
        if longitude < 9.0:
            zone = 31
        elif longitude < 21.0:
            zone = 33
        elif longitude < 33.0:
            zone = 35
        else:
            zone = 37

    return zone, latitude >= 0.0


def utm_epsg(zone: int, is_northern: bool) -> int:
    if not 1 <= zone <= 60:
        raise ValueError(f"Invalid UTM zone number: {zone}")
    return (32600 if is_northern else 32700) + zone


@lru_cache(maxsize=16)
def _utm_transformer(epsg: int) -> Transformer:
    logger.debug("Creating WGS84 -> EPSG:%d transformer", epsg)
    return Transformer.from_crs(CRS.from_epsg(WGS84_EPSG), CRS.from_epsg(epsg), always_xy=True)


def to_utm(point: GeoCoordinate, epsg: int) -> tuple[float, float]:
    """Project a coordinate into the given UTM grid, returning ``(easting, northing)``."""
    easting, northing = _utm_transformer(epsg).transform(point.longitude, point.latitude)
    if not (math.isfinite(easting) and math.isfinite(northing)):
        raise InvalidCoordinate("coordinate", (point.latitude, point.longitude), f"not projectable in EPSG:{epsg}")
    return easting, northing


def project_utm_difference(point: GeoCoordinate, reference: GeoCoordinate) -> LocalPosition:
    zone, is_northern = utm_zone(reference.latitude, reference.longitude)
    epsg = utm_epsg(zone, is_northern)
    ref_e, ref_n = to_utm(reference, epsg)
    e, n = to_utm(point, epsg)
    return LocalPosition(east=e - ref_e, north=n - ref_n, up=_vertical(point, reference))


_STRATEGIES = {
    ProjectionMethod.EQUIRECTANGULAR: project_equirectangular,
    ProjectionMethod.UTM_GRID: project_utm_difference,
}


def project(
    point: GeoCoordinate,
    reference: ReferencePoint | None,
    method: ProjectionMethod = ProjectionMethod.EQUIRECTANGULAR,
) -> LocalPosition:
    """Project ``point`` to a local offset from ``reference``.

    Raises:
        MissingReference: ``reference`` is None.
        InvalidCoordinate: either coordinate is out of range.
    """
    if reference is None:
        raise MissingReference()
    check_coordinate(point.latitude, point.longitude)
    check_coordinate(reference.latitude, reference.longitude)
    return _STRATEGIES[ProjectionMethod(method)](point, reference)
