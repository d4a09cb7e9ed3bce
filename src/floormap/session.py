"""MapSession — one user's map: building data, UI state, location pipeline.

Startup: both feature endpoints are fetched together, units and details are
bucketed per floor, and the footprint orientation fit sets the initial and
home camera.  Afterwards every location reading runs the same synchronous
pipeline on the event loop: altitude floor classification, then room
location, then a state update and event publication.
"""

from __future__ import annotations

from typing import AsyncIterator, Callable

import httpx
from loguru import logger

from floormap.altitude import AltitudeFloorClassifier
from floormap.comms.event_bus import (
    FLOOR_CHANGED,
    LOCATION_UPDATE,
    MAP_LOADED,
    ROOM_CHANGED,
    EventBus,
)
from floormap.fetch import BuildingData, FeatureFetchError, fetch_building
from floormap.floors import FloorBucket, FloorClassifier
from floormap.layers.layer import Feature, FeatureCollection
from floormap.location import (
    DEFAULT_TIMEOUT_S,
    LocationFix,
    LocationReading,
    LocationTracker,
    SourceItem,
)
from floormap.orientation import DEFAULT_BEARING_OFFSET_DEG, fit_orientation
from floormap.render import build_layers
from floormap.rooms import locate
from floormap.view import (
    DEFAULT_HOME_ZOOM,
    FLOOR_GROUPS,
    MapState,
    ViewState,
    apply_orientation,
    info_readout,
    select_room,
    set_fix,
)

Transition = Callable[..., MapState]


class MapNotLoadedError(RuntimeError):
    """Derived map state was requested before a successful load."""


class MapSession:
    """Holds the building data and the current ``MapState``.

    Usage:
        session = MapSession()
        await session.load(units_url, details_url)
        session.process_reading(LocationReading(lon, lat, alt))
        layers = session.layers()
    """

    def __init__(
        self,
        *,
        classifier: FloorClassifier | None = None,
        altitude: AltitudeFloorClassifier | None = None,
        event_bus: EventBus | None = None,
        initial_view: ViewState | None = None,
        bearing_offset: float = DEFAULT_BEARING_OFFSET_DEG,
        home_zoom: float = DEFAULT_HOME_ZOOM,
    ) -> None:
        self.classifier = classifier or FloorClassifier()
        self.altitude = altitude or AltitudeFloorClassifier()
        self.event_bus = event_bus or EventBus()
        self.bearing_offset = bearing_offset
        self.home_zoom = home_zoom

        view = initial_view or ViewState()
        self.state = MapState(view=view, home_view=view)
        self.units: dict[FloorBucket, FeatureCollection] = {}
        self.details: dict[FloorBucket, FeatureCollection] = {}
        self.loaded = False
        self.load_error: str | None = None
        self.tracker: LocationTracker | None = None

    @property
    def floor_height(self) -> float:
        return self.altitude.floor_height

    # -- startup -----------------------------------------------------------

    async def load(
        self,
        units_url: str,
        details_url: str,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Fetch both endpoints and derive floor buckets and orientation.

        Raises:
            FeatureFetchError: If either fetch fails; nothing is derived and
                the error is kept in ``load_error``.
        """
        try:
            data = await fetch_building(units_url, details_url, client=client, timeout=timeout)
        except FeatureFetchError as e:
            self.load_error = str(e)
            logger.error(f"Map load failed: {e}")
            raise
        self.apply_building(data)

    def apply_building(self, data: BuildingData) -> None:
        """Derive buckets and the orientation fit from fetched features."""
        self.units = self.classifier.bucket_features(data.units)
        self.details = self.classifier.bucket_features(data.details)

        fit = fit_orientation(data.units, self.bearing_offset)
        if fit is not None:
            self.state = apply_orientation(self.state, fit, self.home_zoom)
            logger.info(
                f"Orientation fit: center {fit.center_lat:.7f}, {fit.center_lon:.7f}, "
                f"bearing {fit.bearing:.1f}"
            )
        else:
            logger.warning("Orientation fit skipped: no usable unit geometry, bearing stays default")

        self.loaded = True
        self.load_error = None
        counts = {
            f"{kind}_{b.value}": len(c)
            for kind, buckets in (("units", self.units), ("details", self.details))
            for b, c in buckets.items()
        }
        logger.info(f"Map loaded: {counts}")
        self.event_bus.publish(MAP_LOADED, counts)

    # -- state -------------------------------------------------------------

    def dispatch(self, transition: Transition, *args) -> MapState:
        """Apply a pure transition from ``floormap.view`` to the current state."""
        self.state = transition(self.state, *args)
        return self.state

    def room_candidates(self) -> list[Feature]:
        """Rooms eligible for location: ground floor first, then upper."""
        candidates: list[Feature] = []
        for bucket in FLOOR_GROUPS:
            candidates.extend(self.units.get(bucket, ()))
        return candidates

    # -- location pipeline -------------------------------------------------

    def process_reading(self, reading: LocationReading) -> LocationFix:
        """Classify floor, locate room, and update state for one reading."""
        floor_state = self.altitude.update(reading.altitude)
        floor = floor_state.floor
        elevation = floor_state.elevation

        room = locate(reading.longitude, reading.latitude, self.room_candidates())
        if room is not None:
            # Inside a mapped room the marker sits on that room's floor
            floor = self.classifier.classify_feature(room)
            elevation = (
                self.altitude.floor_height if floor == FloorBucket.UPPER
                else self.altitude.ground_elevation
            )

        fix = LocationFix(
            longitude=reading.longitude,
            latitude=reading.latitude,
            elevation=elevation,
            floor=floor.value,
        )

        previous = self.state.selected
        self.state = set_fix(select_room(self.state, room), fix)

        self.event_bus.publish(LOCATION_UPDATE, {
            "longitude": fix.longitude,
            "latitude": fix.latitude,
            "elevation": fix.elevation,
            "floor": fix.floor,
        })
        if floor_state.changed:
            self.event_bus.publish(FLOOR_CHANGED, {"floor": floor_state.floor.value})
        if _feature_key(previous) != _feature_key(room):
            self.event_bus.publish(ROOM_CHANGED, {
                "room_id": room.feature_id if room is not None else None,
                "name": room.name if room is not None else None,
            })
            if room is None:
                logger.debug("Location outside all mapped rooms")
            else:
                logger.debug(f"Entered room {room.name!r} ({room.level_id})")
        return fix

    async def track(
        self, source: AsyncIterator[SourceItem], timeout: float = DEFAULT_TIMEOUT_S
    ) -> LocationTracker:
        """Drain a location source through :meth:`process_reading`."""
        self.tracker = LocationTracker(self.process_reading, timeout=timeout)
        await self.tracker.run(source)
        return self.tracker

    def stop_tracking(self) -> None:
        if self.tracker is not None:
            self.tracker.stop()

    # -- outputs -----------------------------------------------------------

    def layers(self) -> list[dict]:
        if not self.loaded:
            raise MapNotLoadedError(self.load_error or "map data not loaded")
        return build_layers(self.state, self.units, self.details, self.classifier, self.floor_height)

    def info(self) -> dict:
        return info_readout(self.state)


def _feature_key(feature: Feature | None) -> str | None:
    return None if feature is None else feature.feature_id
