"""Indoor map API — camera, layer panel, drawable layers, location fixes.

All map state lives in the single ``MapSession`` on ``app.state.session``.
Handlers run on the event loop and each one applies its transition
synchronously, so readings and UI toggles never interleave.
"""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, HTTPException, Request
from loguru import logger
from pydantic import BaseModel, Field

from app.config import settings
from floormap.floors import FloorBucket
from floormap.location import LocationError, LocationReading
from floormap.session import MapNotLoadedError, MapSession
from floormap.view import (
    FLOOR_GROUPS,
    Sublayer,
    ViewState,
    go_home,
    rendered_view,
    set_view,
    toggle_3d,
    toggle_group,
    toggle_layer,
    toggle_layers_panel,
)

router = APIRouter(prefix="/api", tags=["indoor"])


# ---------------------------------------------------------------------------
# Request / Response models
# ---------------------------------------------------------------------------

class ViewStateModel(BaseModel):
    """Camera parameters as exchanged with the client."""
    longitude: float = Field(ge=-180.0, le=180.0)
    latitude: float = Field(ge=-90.0, le=90.0)
    zoom: float
    pitch: float = 0.0
    bearing: float = 0.0


class LocationReadingModel(BaseModel):
    """One reading from the client's geolocation watch."""
    longitude: float = Field(ge=-180.0, le=180.0)
    latitude: float = Field(ge=-90.0, le=90.0)
    altitude: float | None = None


class LocationErrorModel(BaseModel):
    """A geolocation failure reported by the client."""
    code: int | None = None
    message: str = ""


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _get_session(request: Request) -> MapSession:
    """Retrieve the MapSession, or 503 with the load error if it never loaded."""
    session = getattr(request.app.state, "session", None)
    if session is None:
        raise HTTPException(503, "Map session not available")
    if not session.loaded:
        raise HTTPException(503, session.load_error or "Map data not loaded")
    return session


def _parse_group(group: str) -> FloorBucket:
    try:
        bucket = FloorBucket(group)
    except ValueError:
        raise HTTPException(404, f"Unknown layer group: {group}")
    if bucket not in FLOOR_GROUPS:
        raise HTTPException(404, f"Unknown layer group: {group}")
    return bucket


def _parse_sublayer(sublayer: str) -> Sublayer:
    try:
        return Sublayer(sublayer)
    except ValueError:
        raise HTTPException(404, f"Unknown sublayer: {sublayer}")


def _view_payload(session: MapSession) -> dict:
    state = session.state
    return {
        "view": asdict(rendered_view(state, settings.pitch_3d)),
        "home_view": asdict(state.home_view),
        "is_3d": state.is_3d,
    }


def _visibility_payload(session: MapSession) -> dict:
    state = session.state
    groups = {}
    for bucket in FLOOR_GROUPS:
        group = state.visibility.group(bucket)
        groups[bucket.value] = {
            "active": group.active,
            **{s.value: group.is_visible(s) for s in Sublayer},
        }
    return {"open": state.layers_open, "groups": groups}


# ---------------------------------------------------------------------------
# Client configuration
# ---------------------------------------------------------------------------

@router.get("/map/config")
async def get_map_config():
    """Basemap style and geolocation watch options for the client."""
    return {
        "map_style": settings.map_style_url,
        "geolocation": {
            "enable_high_accuracy": settings.location_high_accuracy,
            "maximum_age": settings.location_maximum_age_ms,
            "timeout": settings.location_timeout_ms,
        },
    }


# ---------------------------------------------------------------------------
# Camera
# ---------------------------------------------------------------------------

@router.get("/map/view")
async def get_view(request: Request):
    """Current camera (pitch reflects the 2D/3D flag) and the home camera."""
    return _view_payload(_get_session(request))


@router.put("/map/view")
async def put_view(body: ViewStateModel, request: Request):
    """Echo a pan/zoom/rotate from the client back into the map state."""
    session = _get_session(request)
    session.dispatch(set_view, ViewState(**body.model_dump()))
    return _view_payload(session)


@router.post("/map/toggle-3d")
async def post_toggle_3d(request: Request):
    session = _get_session(request)
    session.dispatch(toggle_3d)
    return _view_payload(session)


@router.post("/map/home")
async def post_home(request: Request):
    """Return to the home camera in 2D."""
    session = _get_session(request)
    session.dispatch(go_home)
    return _view_payload(session)


# ---------------------------------------------------------------------------
# Layer panel
# ---------------------------------------------------------------------------

@router.get("/map/visibility")
async def get_visibility(request: Request):
    return _visibility_payload(_get_session(request))


@router.post("/map/panel")
async def post_panel(request: Request):
    """Collapse or expand the layer panel."""
    session = _get_session(request)
    session.dispatch(toggle_layers_panel)
    return _visibility_payload(session)


@router.post("/map/visibility/{group}")
async def post_toggle_group(group: str, request: Request):
    """Toggle a whole floor group (select-all / select-none)."""
    session = _get_session(request)
    session.dispatch(toggle_group, _parse_group(group))
    return _visibility_payload(session)


@router.post("/map/visibility/{group}/{sublayer}")
async def post_toggle_layer(group: str, sublayer: str, request: Request):
    session = _get_session(request)
    session.dispatch(toggle_layer, _parse_group(group), _parse_sublayer(sublayer))
    return _visibility_payload(session)


# ---------------------------------------------------------------------------
# Drawable layers and info bar
# ---------------------------------------------------------------------------

@router.get("/map/layers")
async def get_layers(request: Request):
    """Declarative drawable layer list in draw order."""
    session = _get_session(request)
    try:
        return {"layers": session.layers()}
    except MapNotLoadedError as e:
        raise HTTPException(503, str(e))


@router.get("/map/info")
async def get_info(request: Request):
    return _get_session(request).info()


# ---------------------------------------------------------------------------
# Location
# ---------------------------------------------------------------------------

@router.post("/location")
async def post_location(body: LocationReadingModel, request: Request):
    """Process one geolocation reading: floor, room, marker."""
    session = _get_session(request)
    fix = session.process_reading(
        LocationReading(body.longitude, body.latitude, body.altitude)
    )
    return {"fix": asdict(fix), "info": session.info()}


@router.post("/location/error")
async def post_location_error(body: LocationErrorModel):
    """Record a client geolocation failure; the last fix is kept."""
    error = LocationError(code=body.code, message=body.message)
    logger.warning(f"Location error from client: {error.message} (code={error.code})")
    return {"status": "logged"}
