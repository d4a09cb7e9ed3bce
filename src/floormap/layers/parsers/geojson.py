"""Parse GeoJSON (RFC 7946) building features to a FeatureCollection.

Handles FeatureCollection and single Feature payloads with Polygon and
MultiPolygon geometries.  Properties pass through untouched.  Coordinates are
already in [lng, lat] order.
"""

from __future__ import annotations

import json

from floormap.layers.layer import POLYGON_TYPES, Feature, FeatureCollection


def parse_geojson(geojson: str | dict) -> FeatureCollection:
    """Parse a GeoJSON string or decoded dict into a FeatureCollection.

    Args:
        geojson: Raw GeoJSON content, or the already-decoded object.

    Returns:
        FeatureCollection with parsed features. Returns an empty collection
        on parse errors.
    """
    if isinstance(geojson, dict):
        data = geojson
    else:
        try:
            data = json.loads(geojson)
        except (json.JSONDecodeError, TypeError):
            return FeatureCollection()
        if not isinstance(data, dict):
            return FeatureCollection()

    features: list[Feature] = []

    if data.get("type") == "FeatureCollection":
        for idx, raw in enumerate(data.get("features") or []):
            feature = _parse_feature(raw, idx)
            if feature is not None:
                features.append(feature)
    elif data.get("type") == "Feature":
        feature = _parse_feature(data, 0)
        if feature is not None:
            features.append(feature)

    return FeatureCollection(features=tuple(features), name=data.get("name", "") or "")


def _parse_feature(raw: dict, idx: int) -> Feature | None:
    """Parse a single GeoJSON Feature dict; None for unusable features."""
    if not isinstance(raw, dict):
        return None

    geometry = raw.get("geometry")
    if not isinstance(geometry, dict):
        return None

    geom_type = geometry.get("type", "")
    coordinates = geometry.get("coordinates")

    if geom_type not in POLYGON_TYPES or not coordinates:
        return None

    properties = raw.get("properties") or {}
    if not isinstance(properties, dict):
        properties = {}

    # ArcGIS query results carry the object id as a top-level "id"
    feature_id = raw.get("id", properties.get("OBJECTID", f"geojson-{idx}"))
    if not isinstance(feature_id, str):
        feature_id = str(feature_id)

    return Feature(
        feature_id=feature_id,
        geometry_type=geom_type,
        coordinates=coordinates,
        properties=properties,
    )
