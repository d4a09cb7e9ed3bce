"""Export features to GeoJSON dicts (RFC 7946 compliant).

GeoJSON coordinates are [lng, lat] (already the internal storage convention).
The render layer builder uses this to hand feature data to the map client.
"""

from __future__ import annotations

from typing import Callable, Iterable

from floormap.layers.layer import Feature

StyleFn = Callable[[Feature], dict]


def export_geojson(features: Iterable[Feature], style: StyleFn | None = None) -> dict:
    """Export features to a GeoJSON FeatureCollection dict.

    Args:
        features: A FeatureCollection or any iterable of Feature.
        style: Optional callable returning extra properties per feature
            (e.g. precomputed colours) merged over the source attributes.

    Returns:
        Dict representing a valid GeoJSON FeatureCollection.
    """
    return {
        "type": "FeatureCollection",
        "features": [export_feature(f, style) for f in features],
    }


def export_feature(feature: Feature, style: StyleFn | None = None) -> dict:
    """Convert a Feature to a GeoJSON Feature dict."""
    properties = dict(feature.properties)
    if style is not None:
        properties.update(style(feature))
    return {
        "type": "Feature",
        "id": feature.feature_id,
        "geometry": {
            "type": feature.geometry_type,
            "coordinates": feature.coordinates,
        },
        "properties": properties,
    }
