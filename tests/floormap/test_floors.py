"""Tests for floormap.floors — level id classification and colours."""

import unicodedata

import pytest

from floormap.floors import BUCKET_COLORS, FloorBucket, FloorClassifier, normalize_level
from floormap.layers import Feature, FeatureCollection


def feature(fid, level):
    return Feature(fid, "Polygon", [[[0, 0], [1, 0], [1, 1]]], {"LEVEL_ID": level})


@pytest.mark.unit
class TestClassify:
    """Default synonym tables."""

    @pytest.mark.parametrize("level", ["bv", "BV", "Bv", "Entré", "ENTRÉ", "vån 1", "VÅN 1"])
    def test_ground(self, level):
        assert FloorClassifier().classify(level) == FloorBucket.GROUND

    @pytest.mark.parametrize("level", ["2v", "2V", "öv", "ÖV", "ov", "OV", "Vån 2"])
    def test_upper(self, level):
        assert FloorClassifier().classify(level) == FloorBucket.UPPER

    @pytest.mark.parametrize("level", ["garage", "", "3V", "VÅN 3", "källare"])
    def test_other(self, level):
        assert FloorClassifier().classify(level) == FloorBucket.OTHER

    def test_none_is_other(self):
        assert FloorClassifier().classify(None) == FloorBucket.OTHER

    def test_surrounding_whitespace_ignored(self):
        assert FloorClassifier().classify("  bv ") == FloorBucket.GROUND

    def test_decomposed_unicode_matches(self):
        decomposed = unicodedata.normalize("NFD", "Entré")
        assert decomposed != "Entré"
        assert FloorClassifier().classify(decomposed) == FloorBucket.GROUND

    def test_classify_feature(self):
        assert FloorClassifier().classify_feature(feature("1", "ÖV")) == FloorBucket.UPPER
        assert FloorClassifier().classify_feature(Feature("2", "Polygon", [], {})) == FloorBucket.OTHER


@pytest.mark.unit
class TestCustomSynonyms:

    def test_from_synonyms_normalizes(self):
        c = FloorClassifier.from_synonyms(ground=["plan 1", "entrance"], upper=["plan 2"])
        assert c.classify("PLAN 1") == FloorBucket.GROUND
        assert c.classify("Entrance") == FloorBucket.GROUND
        assert c.classify("plan 2") == FloorBucket.UPPER
        assert c.classify("BV") == FloorBucket.OTHER

    def test_normalize_level(self):
        assert normalize_level(" öv ") == "ÖV"
        assert normalize_level(None) == ""
        assert normalize_level(2) == "2"


@pytest.mark.unit
class TestColors:

    def test_color_by_bucket(self):
        c = FloorClassifier()
        assert c.color(feature("1", "BV")) == (255, 120, 120, 180)
        assert c.color(feature("2", "ÖV")) == (255, 230, 100, 180)
        assert c.color(feature("3", "garage")) == (180, 255, 150, 160)

    def test_synonyms_share_bucket_color(self):
        c = FloorClassifier()
        assert c.color(feature("1", "Entré")) == BUCKET_COLORS[FloorBucket.GROUND]
        assert c.color(feature("2", "2V")) == BUCKET_COLORS[FloorBucket.UPPER]


@pytest.mark.unit
class TestBucketFeatures:

    def test_one_feature_per_bucket(self):
        fc = FeatureCollection(features=(feature("a", "BV"), feature("b", "ÖV")))
        buckets = FloorClassifier().bucket_features(fc)
        assert len(buckets[FloorBucket.GROUND]) == 1
        assert len(buckets[FloorBucket.UPPER]) == 1
        assert len(buckets[FloorBucket.OTHER]) == 0
        assert buckets[FloorBucket.GROUND].features[0].feature_id == "a"

    def test_order_preserved(self):
        fc = [feature("a", "BV"), feature("b", "garage"), feature("c", "entré"), feature("d", "bv")]
        ground = FloorClassifier().bucket_features(fc)[FloorBucket.GROUND]
        assert [f.feature_id for f in ground] == ["a", "c", "d"]

    def test_empty(self):
        buckets = FloorClassifier().bucket_features([])
        assert set(buckets) == set(FloorBucket)
        assert all(len(c) == 0 for c in buckets.values())
