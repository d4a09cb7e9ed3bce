"""Orientation estimator — best-fit map bearing for a building footprint.

The principal axis of the footprint vertex cloud is found from its second
moments about the bounding-box centre.  Every vertex counts equally (no area
or edge-length weighting), so densely vertexed walls pull the axis towards
themselves.

The final bearing subtracts a fixed offset that reconciles the principal-axis
angle with the map renderer's bearing convention for one particular building.
It is dataset specific and comes from configuration.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np

from floormap.geo import bbox_center, project_points
from floormap.layers.layer import Feature

DEFAULT_BEARING_OFFSET_DEG = 83.0


@dataclass(frozen=True)
class OrientationFit:
    """Result of fitting a bearing to a footprint."""
    center_lon: float
    center_lat: float
    angle_rad: float  # principal-axis angle in the local frame
    bearing: float    # map bearing, degrees


def principal_axis_angle(points_m: Sequence[Sequence[float]]) -> float:
    """Principal-axis angle (radians) of local-meter points about the origin.

    ``0.5 * atan2(2*sumXY, sumXX - sumYY)`` over the raw second moments.
    """
    pts = np.asarray(points_m, dtype=float).reshape(-1, 2)
    x = pts[:, 0]
    y = pts[:, 1]
    sum_xx = float(np.dot(x, x))
    sum_yy = float(np.dot(y, y))
    sum_xy = float(np.dot(x, y))
    return 0.5 * math.atan2(2 * sum_xy, sum_xx - sum_yy)


def angle_to_bearing(angle_rad: float, offset_deg: float = DEFAULT_BEARING_OFFSET_DEG) -> float:
    return -angle_rad * 180 / math.pi - offset_deg


def fit_points(
    points: Sequence[Sequence[float]],
    offset_deg: float = DEFAULT_BEARING_OFFSET_DEG,
) -> OrientationFit | None:
    """Fit a bearing to lon/lat points.

    Returns None when there are fewer than 2 distinct points, where the
    principal axis is undefined.
    """
    distinct = {(float(p[0]), float(p[1])) for p in points}
    if len(distinct) < 2:
        return None

    center_lon, center_lat = bbox_center(points)
    local = project_points(points, center_lon, center_lat)
    angle = principal_axis_angle(local)
    return OrientationFit(
        center_lon=center_lon,
        center_lat=center_lat,
        angle_rad=angle,
        bearing=angle_to_bearing(angle, offset_deg),
    )


def fit_orientation(
    features: Iterable[Feature],
    offset_deg: float = DEFAULT_BEARING_OFFSET_DEG,
) -> OrientationFit | None:
    """Fit a bearing to the footprint vertices of every feature."""
    points: list = []
    for feature in features:
        points.extend(feature.footprint_vertices())
    return fit_points(points, offset_deg)
