"""Feature classifier — level identifiers to floor buckets and colours.

The building services tag every feature with a free-text level identifier
("BV", "ÖV", "Entré", ...).  Classification is a pure, total lookup against
per-building synonym tables: anything unmatched lands in OTHER.
"""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from floormap.layers.layer import Feature, FeatureCollection


class FloorBucket(Enum):
    """Which floor group a feature or fix belongs to."""
    GROUND = "ground"
    UPPER = "upper"
    OTHER = "other"


DEFAULT_GROUND_LEVELS = ("BV", "ENTRÉ", "VÅN 1")
DEFAULT_UPPER_LEVELS = ("ÖV", "OV", "VÅN 2", "2V")

# RGBA
BUCKET_COLORS: dict[FloorBucket, tuple[int, int, int, int]] = {
    FloorBucket.GROUND: (255, 120, 120, 180),
    FloorBucket.UPPER: (255, 230, 100, 180),
    FloorBucket.OTHER: (180, 255, 150, 160),
}


def normalize_level(level_id: object) -> str:
    """Canonical form used for matching: NFC, stripped, upper-cased."""
    if level_id is None:
        return ""
    return unicodedata.normalize("NFC", str(level_id)).strip().upper()


@dataclass(frozen=True)
class FloorClassifier:
    """Case-insensitive synonym lookup from level identifier to bucket."""

    ground_levels: frozenset[str] = frozenset(DEFAULT_GROUND_LEVELS)
    upper_levels: frozenset[str] = frozenset(DEFAULT_UPPER_LEVELS)

    @classmethod
    def from_synonyms(
        cls, ground: Iterable[str], upper: Iterable[str]
    ) -> "FloorClassifier":
        """Build a classifier from raw (any-case) synonym lists."""
        return cls(
            ground_levels=frozenset(normalize_level(s) for s in ground),
            upper_levels=frozenset(normalize_level(s) for s in upper),
        )

    def classify(self, level_id: object) -> FloorBucket:
        level = normalize_level(level_id)
        if level in self.ground_levels:
            return FloorBucket.GROUND
        if level in self.upper_levels:
            return FloorBucket.UPPER
        return FloorBucket.OTHER

    def classify_feature(self, feature: Feature) -> FloorBucket:
        return self.classify(feature.level_id)

    def color(self, feature: Feature) -> tuple[int, int, int, int]:
        """Display colour of a feature, keyed by its floor bucket."""
        return BUCKET_COLORS[self.classify_feature(feature)]

    def bucket_features(
        self, collection: Iterable[Feature]
    ) -> dict[FloorBucket, FeatureCollection]:
        """Partition features into one collection per bucket, keeping order.

        Every bucket is present in the result, possibly empty.
        """
        grouped: dict[FloorBucket, list[Feature]] = {b: [] for b in FloorBucket}
        for feature in collection:
            grouped[self.classify_feature(feature)].append(feature)
        return {b: FeatureCollection(features=tuple(fs)) for b, fs in grouped.items()}
