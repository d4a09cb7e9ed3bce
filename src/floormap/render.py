"""Declarative drawable layers for the map client.

The rendering surface takes a list of plain dicts, one per drawable layer,
in draw order.  Hidden sublayers are simply absent from the list.  Per-feature
colours are baked into each exported feature's properties (``fill_color`` /
``line_color``) so the client needs no classification logic of its own.

Layer types:
    polygon-fill     -- extruded room footprints
    polygon-outline  -- stroked outlines with transparent fill
    point-marker     -- the location fix
"""

from __future__ import annotations

from typing import Mapping

from floormap.altitude import DEFAULT_FLOOR_HEIGHT
from floormap.floors import FloorBucket, FloorClassifier
from floormap.layers.exporters.geojson import export_feature, export_geojson
from floormap.layers.layer import FeatureCollection
from floormap.view import FLOOR_GROUPS, MapState, Sublayer

UNIT_LINE_COLOR = [0, 0, 80, 100]
HIGHLIGHT_COLOR = [0, 255, 255, 100]
MARKER_COLOR = [0, 120, 255, 255]
TRANSPARENT = [0, 0, 0, 0]

DETAIL_LINE_WIDTH_PX = 1.8
HIGHLIGHT_LINE_WIDTH_PX = 2.5
MARKER_RADIUS_M = 0.3

# Layer id suffix per floor group
_GROUP_SUFFIX = {FloorBucket.GROUND: "bv", FloorBucket.UPPER: "ov"}

Buckets = Mapping[FloorBucket, FeatureCollection]


def floor_offset(bucket: FloorBucket, floor_height: float = DEFAULT_FLOOR_HEIGHT) -> float:
    """Vertical translation applied to a floor's layers."""
    return floor_height if bucket == FloorBucket.UPPER else 0.0


def layer_id(sublayer: Sublayer, bucket: FloorBucket) -> str:
    return f"{sublayer.value}-{_GROUP_SUFFIX[bucket]}"


def _units_layer(
    bucket: FloorBucket, features: FeatureCollection,
    classifier: FloorClassifier, floor_height: float,
) -> dict:
    data = export_geojson(features, lambda f: {"fill_color": list(classifier.color(f))})
    return {
        "id": layer_id(Sublayer.UNITS, bucket),
        "type": "polygon-fill",
        "data": data,
        "extruded": True,
        "pickable": True,
        "elevation": floor_height,
        "line_color": UNIT_LINE_COLOR,
        "translation": [0.0, 0.0, floor_offset(bucket, floor_height)],
    }


def _details_layer(
    bucket: FloorBucket, features: FeatureCollection,
    classifier: FloorClassifier, floor_height: float,
) -> dict:
    data = export_geojson(features, lambda f: {"line_color": list(classifier.color(f))})
    return {
        "id": layer_id(Sublayer.DETAILS, bucket),
        "type": "polygon-outline",
        "data": data,
        "pickable": True,
        "fill_color": TRANSPARENT,
        "line_width_px": DETAIL_LINE_WIDTH_PX,
        "depth_test": False,
        "translation": [0.0, 0.0, floor_offset(bucket, floor_height)],
    }


def build_layers(
    state: MapState,
    units: Buckets,
    details: Buckets,
    classifier: FloorClassifier,
    floor_height: float = DEFAULT_FLOOR_HEIGHT,
) -> list[dict]:
    """Build the drawable layer list for the current state, in draw order."""
    layers: list[dict] = []
    empty = FeatureCollection()

    for bucket in FLOOR_GROUPS:
        if state.visibility.is_visible(bucket, Sublayer.UNITS):
            layers.append(_units_layer(bucket, units.get(bucket, empty), classifier, floor_height))

    for bucket in FLOOR_GROUPS:
        if state.visibility.is_visible(bucket, Sublayer.DETAILS):
            layers.append(_details_layer(bucket, details.get(bucket, empty), classifier, floor_height))

    if state.selected is not None:
        room_bucket = classifier.classify_feature(state.selected)
        layers.append({
            "id": "highlight-room",
            "type": "polygon-outline",
            "data": export_feature(state.selected),
            "pickable": False,
            "fill_color": TRANSPARENT,
            "line_color": HIGHLIGHT_COLOR,
            "line_width_px": HIGHLIGHT_LINE_WIDTH_PX,
            "depth_test": False,
            "translation": [0.0, 0.0, floor_offset(room_bucket, floor_height)],
        })

    if state.fix is not None:
        fix = state.fix
        layers.append({
            "id": "gps-dot",
            "type": "point-marker",
            "data": [{
                "position": [fix.longitude, fix.latitude, fix.elevation],
                "floor": fix.floor,
            }],
            "radius_m": MARKER_RADIUS_M,
            "fill_color": MARKER_COLOR,
            "depth_test": False,
        })

    return layers
