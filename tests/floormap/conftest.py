"""Shared fixtures for floormap tests — a small two-floor building."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from floormap.fetch import BuildingData
from floormap.layers.parsers.geojson import parse_geojson
from floormap.session import MapSession


def square(lon0: float, lat0: float, lon1: float, lat1: float) -> list:
    """Closed counter-clockwise ring for an axis-aligned rectangle."""
    return [[lon0, lat0], [lon1, lat0], [lon1, lat1], [lon0, lat1], [lon0, lat0]]


def polygon_feature(fid, ring, level, name="", use_type="") -> dict:
    return {
        "type": "Feature",
        "id": fid,
        "geometry": {"type": "Polygon", "coordinates": [ring]},
        "properties": {"LEVEL_ID": level, "NAME": name, "USE_TYPE": use_type},
    }


# Ground-floor room, upper-floor room next to it, and a garage outside both
KITCHEN = square(17.9120, 59.2888, 17.9125, 59.2890)
OFFICE = square(17.9125, 59.2888, 17.9130, 59.2890)
GARAGE = square(17.9135, 59.2888, 17.9140, 59.2890)

KITCHEN_CENTER = (17.91225, 59.2889)
OFFICE_CENTER = (17.91275, 59.2889)
OUTSIDE = (17.9110, 59.2880)


@pytest.fixture
def spots() -> SimpleNamespace:
    """Named (lon, lat) positions in and around the building."""
    return SimpleNamespace(kitchen=KITCHEN_CENTER, office=OFFICE_CENTER, outside=OUTSIDE)


@pytest.fixture
def units_geojson() -> dict:
    return {
        "type": "FeatureCollection",
        "features": [
            polygon_feature(1, KITCHEN, "BV", "Kök", "Kitchen"),
            polygon_feature(2, OFFICE, "ÖV", "Kontor", "Office"),
            polygon_feature(3, GARAGE, "Garage", "Garage", "Parking"),
        ],
    }


@pytest.fixture
def details_geojson() -> dict:
    return {
        "type": "FeatureCollection",
        "features": [
            polygon_feature(10, square(17.9121, 59.28885, 17.9122, 59.28895), "bv", "Bänk"),
            polygon_feature(11, square(17.9126, 59.28885, 17.9127, 59.28895), "2V", "Skrivbord"),
        ],
    }


@pytest.fixture
def building(units_geojson, details_geojson) -> BuildingData:
    return BuildingData(
        units=parse_geojson(units_geojson),
        details=parse_geojson(details_geojson),
    )


@pytest.fixture
def session(building) -> MapSession:
    s = MapSession()
    s.apply_building(building)
    return s
