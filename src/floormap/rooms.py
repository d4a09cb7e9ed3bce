"""Room locator — which room polygon contains a location fix.

Uses ray-casting point-in-polygon against the exterior ring of each candidate
(holes are ignored).  Candidates are tested in order and the first match wins;
overlapping rooms are not disambiguated.

Boundary rule: the crossing test is half-open (an edge counts when exactly one
endpoint lies strictly above the point, and the point lies strictly left of
the crossing).  Points on a polygon's bottom or left boundary are therefore
inside and points on its top or right boundary outside, and a vertex is
included or excluded by that same rule every time.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from floormap.layers.layer import Feature


def point_in_polygon(px: float, py: float, ring: Sequence[Sequence[float]]) -> bool:
    """True when (px, py) falls inside ``ring``.

    ``ring`` is a GeoJSON linear ring of ``[lon, lat, ...]`` positions; only
    the first two values of each position are read and a closing duplicate
    vertex is harmless. Crossings use a half-open interval in y, so bottom
    and left edges count as inside and top and right edges as outside.
    """
    if len(ring) < 3:
        return False
    inside = False
    prev_lon, prev_lat = ring[-1][0], ring[-1][1]
    for position in ring:
        lon, lat = position[0], position[1]
        if (lat > py) != (prev_lat > py):
            cross_lon = lon + (prev_lon - lon) * (py - lat) / (prev_lat - lat)
            if px < cross_lon:
                inside = not inside
        prev_lon, prev_lat = lon, lat
    return inside


def feature_contains(feature: Feature, lon: float, lat: float) -> bool:
    return point_in_polygon(lon, lat, feature.exterior_ring())


def locate(lon: float, lat: float, candidates: Iterable[Feature]) -> Feature | None:
    """Return the first candidate room containing (lon, lat), or None."""
    for feature in candidates:
        if feature_contains(feature, lon, lat):
            return feature
    return None
