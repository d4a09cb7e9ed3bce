"""Tests for floormap.session — startup derivation and the reading pipeline."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from floormap.comms.event_bus import FLOOR_CHANGED, LOCATION_UPDATE, MAP_LOADED, ROOM_CHANGED
from floormap.fetch import BuildingData, FeatureFetchError
from floormap.floors import FloorBucket
from floormap.layers import FeatureCollection
from floormap.location import LocationError, LocationQueue, LocationReading
from floormap.session import MapNotLoadedError, MapSession
from floormap.view import ViewState, toggle_group


def drain(q) -> list[dict]:
    out = []
    while not q.empty():
        out.append(q.get_nowait())
    return out


@pytest.mark.unit
class TestLoad:

    def test_buckets(self, session):
        assert len(session.units[FloorBucket.GROUND]) == 1
        assert len(session.units[FloorBucket.UPPER]) == 1
        assert len(session.units[FloorBucket.OTHER]) == 1
        assert len(session.details[FloorBucket.GROUND]) == 1
        assert len(session.details[FloorBucket.UPPER]) == 1

    def test_scenario_bv_and_ov_give_one_feature_each(self, units_geojson, details_geojson):
        from floormap.layers.parsers.geojson import parse_geojson

        units_geojson["features"] = units_geojson["features"][:2]  # BV + ÖV
        s = MapSession()
        s.apply_building(BuildingData(parse_geojson(units_geojson), parse_geojson(details_geojson)))
        assert len(s.units[FloorBucket.GROUND]) == 1
        assert len(s.units[FloorBucket.UPPER]) == 1

        s.dispatch(toggle_group, FloorBucket.GROUND)
        ground = s.state.visibility.ground
        assert (ground.units, ground.details, ground.active) == (False, False, False)
        assert [layer["id"] for layer in s.layers()] == ["units-ov", "details-ov"]

    def test_orientation_sets_view_and_home(self, session):
        assert session.loaded is True
        view = session.state.view
        assert view == session.state.home_view
        assert view.zoom == pytest.approx(20.2)
        # bbox centre of the three rooms
        assert view.longitude == pytest.approx((17.9120 + 17.9140) / 2)
        assert view.latitude == pytest.approx((59.2888 + 59.2890) / 2)
        assert view.bearing != 0.0

    def test_empty_units_keep_default_bearing(self):
        s = MapSession(initial_view=ViewState(bearing=0.0))
        s.apply_building(BuildingData(FeatureCollection(), FeatureCollection()))
        assert s.loaded is True
        assert s.state.view.bearing == 0.0
        assert s.state.view == ViewState()

    def test_map_loaded_event(self, building):
        s = MapSession()
        q = s.event_bus.subscribe(MAP_LOADED)
        s.apply_building(building)
        msg = q.get_nowait()
        assert msg["data"]["units_ground"] == 1
        assert msg["data"]["details_upper"] == 1

    def test_layers_before_load_raise(self):
        with pytest.raises(MapNotLoadedError):
            MapSession().layers()

    def test_load_failure_records_error(self):
        def handler(request):
            return httpx.Response(500)

        async def go(s):
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
                await s.load("https://x.example/units", "https://x.example/details", client=client)

        s = MapSession()
        with pytest.raises(FeatureFetchError):
            asyncio.run(go(s))
        assert s.loaded is False
        assert "units" in s.load_error or "details" in s.load_error
        assert s.units == {}

    def test_load_success(self, units_geojson, details_geojson):
        def handler(request):
            body = units_geojson if request.url.path == "/units" else details_geojson
            return httpx.Response(200, json=body)

        async def go(s):
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
                await s.load("https://x.example/units", "https://x.example/details", client=client)

        s = MapSession()
        asyncio.run(go(s))
        assert s.loaded is True
        assert s.load_error is None
        assert len(s.room_candidates()) == 2


@pytest.mark.unit
class TestReadingPipeline:

    def test_room_candidates_exclude_other_floor(self, session):
        names = [f.name for f in session.room_candidates()]
        assert names == ["Kök", "Kontor"]

    def test_reading_in_ground_room(self, session, spots):
        fix = session.process_reading(LocationReading(*spots.kitchen, 30.0))
        assert fix.floor == "ground"
        assert fix.elevation == pytest.approx(0.1)
        assert session.state.selected.name == "Kök"
        assert session.state.fix == fix
        info = session.info()
        assert info["room"] == {"name": "Kök", "use_type": "Kitchen"}
        assert info["level"] == "BV"

    def test_room_floor_sets_marker_elevation(self, session, spots):
        fix = session.process_reading(LocationReading(*spots.office, 30.0))
        assert fix.floor == "upper"
        assert fix.elevation == pytest.approx(2.7)
        # the altitude classifier itself has not moved
        assert session.altitude.floor == FloorBucket.GROUND

    def test_outside_clears_selection(self, session, spots):
        session.process_reading(LocationReading(*spots.kitchen, 30.0))
        fix = session.process_reading(LocationReading(*spots.outside, 30.0))
        assert session.state.selected is None
        assert fix.floor == "ground"
        assert session.info()["room"] is None

    def test_outside_uses_altitude_floor(self, session, spots):
        session.process_reading(LocationReading(*spots.outside, 30.0))
        for _ in range(30):
            fix = session.process_reading(LocationReading(*spots.outside, 33.0))
        assert fix.floor == "upper"
        assert fix.elevation == pytest.approx(2.7)

    def test_events(self, session, spots):
        q = session.event_bus.subscribe()
        session.process_reading(LocationReading(*spots.kitchen, 30.0))
        session.process_reading(LocationReading(*spots.kitchen, 30.0))
        session.process_reading(LocationReading(*spots.outside, 30.0))
        types = [m["type"] for m in drain(q)]
        assert types.count(LOCATION_UPDATE) == 3
        # entered kitchen, then left it
        assert types.count(ROOM_CHANGED) == 2
        assert FLOOR_CHANGED not in types

    def test_floor_changed_event(self, session, spots):
        q = session.event_bus.subscribe(FLOOR_CHANGED)
        session.process_reading(LocationReading(*spots.outside, 30.0))
        for _ in range(30):
            session.process_reading(LocationReading(*spots.outside, 33.0))
        msgs = drain(q)
        assert len(msgs) == 1
        assert msgs[0]["data"] == {"floor": "upper"}

    def test_track_source(self, session, spots):
        async def go():
            source = LocationQueue()
            source.put(LocationReading(*spots.kitchen, 30.0))
            source.put(LocationError(code=3, message="timeout"))
            source.put(LocationReading(*spots.office, 30.0))
            source.close()
            return await session.track(source, timeout=1.0)

        tracker = asyncio.run(go())
        assert tracker.processed == 2
        assert tracker.errors == 1
        assert session.state.selected.name == "Kontor"
