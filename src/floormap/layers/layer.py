"""Feature and FeatureCollection dataclasses for building geometry.

All coordinates are stored in GeoJSON convention: [lng, lat] or [lng, lat, alt].
Only areal geometries are modelled; the endpoints serve rooms ("units") and
fixture outlines ("details") as Polygon or MultiPolygon features.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

# Attribute names used by the building feature services
LEVEL_KEY = "LEVEL_ID"
NAME_KEY = "NAME"
USE_TYPE_KEY = "USE_TYPE"

POLYGON_TYPES = ("Polygon", "MultiPolygon")


@dataclass(frozen=True)
class Feature:
    """A single areal feature (room or detail outline).

    Attributes:
        feature_id: Unique identifier for this feature.
        geometry_type: One of "Polygon", "MultiPolygon".
        coordinates: GeoJSON-style coordinate arrays.
            Polygon: [[[lng, lat], [lng, lat], ...]]  (list of rings)
            MultiPolygon: [[[[lng, lat], ...]], ...]  (list of polygons)
        properties: Attribute map (level id, name, usage type, ...).
    """

    feature_id: str
    geometry_type: str
    coordinates: list
    properties: dict = field(default_factory=dict)

    @property
    def level_id(self) -> str:
        value = self.properties.get(LEVEL_KEY)
        return "" if value is None else str(value)

    @property
    def name(self) -> str | None:
        return self.properties.get(NAME_KEY)

    @property
    def use_type(self) -> str | None:
        return self.properties.get(USE_TYPE_KEY)

    def exterior_ring(self) -> list:
        """Return the first coordinate ring; holes and later polygons are ignored."""
        try:
            if self.geometry_type == "Polygon":
                return self.coordinates[0]
            if self.geometry_type == "MultiPolygon":
                return self.coordinates[0][0]
        except (IndexError, TypeError):
            pass
        return []

    def footprint_vertices(self) -> list:
        """Return every exterior-ring vertex of the geometry, in order."""
        if self.geometry_type == "Polygon":
            return list(self.coordinates[0]) if self.coordinates else []
        vertices: list = []
        for polygon in self.coordinates or []:
            if polygon:
                vertices.extend(polygon[0])
        return vertices


@dataclass(frozen=True)
class FeatureCollection:
    """An ordered, immutable sequence of features sharing lon/lat degrees.

    Attributes:
        features: Features in source order.
        name: Optional display name (from the GeoJSON ``name`` member).
    """

    features: tuple[Feature, ...] = ()
    name: str = ""

    def __iter__(self) -> Iterator[Feature]:
        return iter(self.features)

    def __len__(self) -> int:
        return len(self.features)
