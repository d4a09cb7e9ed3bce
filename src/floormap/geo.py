"""Geo projector — coordinate transforms between lon/lat and local meters.

Building footprints and location fixes are reasoned about in a local planar
frame centred on a reference point.  The projection is equirectangular, so it
is only valid over building-scale extents (well under a kilometre) and makes
no provision for the poles or the antimeridian.

Convention:
    - Local origin (0, 0) = reference point (ref_lon, ref_lat)
    - 1 local unit = 1 meter
    - +X = East, +Y = North
    - Coordinates are passed GeoJSON-style: longitude first
"""

from __future__ import annotations

import math
from typing import Iterable, Sequence

EARTH_RADIUS_M = 6_371_000.0


def to_local_meters(
    lon: float, lat: float, ref_lon: float, ref_lat: float
) -> tuple[float, float]:
    """Convert lon/lat to local (x, y) meters relative to a reference point."""
    x = (lon - ref_lon) * (math.pi / 180) * EARTH_RADIUS_M * math.cos(ref_lat * math.pi / 180)
    y = (lat - ref_lat) * (math.pi / 180) * EARTH_RADIUS_M
    return (x, y)


def from_local_meters(
    x: float, y: float, ref_lon: float, ref_lat: float
) -> tuple[float, float]:
    """Convert local (x, y) meters back to (lon, lat).

    Exact inverse of :func:`to_local_meters` for the same reference point.
    """
    lat = ref_lat + y / ((math.pi / 180) * EARTH_RADIUS_M)
    lon = ref_lon + x / ((math.pi / 180) * EARTH_RADIUS_M * math.cos(ref_lat * math.pi / 180))
    return (lon, lat)


def bbox_center(points: Iterable[Sequence[float]]) -> tuple[float, float]:
    """Return the (lon, lat) centre of the bounding box of ``points``.

    Raises:
        ValueError: If ``points`` is empty.
    """
    lons: list[float] = []
    lats: list[float] = []
    for p in points:
        lons.append(p[0])
        lats.append(p[1])
    if not lons:
        raise ValueError("bbox_center() of an empty point set")
    return ((min(lons) + max(lons)) / 2, (min(lats) + max(lats)) / 2)


def project_points(
    points: Iterable[Sequence[float]], ref_lon: float, ref_lat: float
) -> list[tuple[float, float]]:
    """Project a sequence of [lon, lat, ...] points to local meters."""
    return [to_local_meters(p[0], p[1], ref_lon, ref_lat) for p in points]
