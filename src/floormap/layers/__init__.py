"""Building geometry layers — feature model and GeoJSON import/export."""

from floormap.layers.layer import Feature, FeatureCollection

__all__ = ["Feature", "FeatureCollection"]
