"""Map UI state as an immutable value plus pure transition functions.

Every user interaction (pan/zoom, layer toggles, 2D/3D switch, home) and
every processed location fix produces a new ``MapState`` via
``dataclasses.replace``; nothing is mutated in place.  Callers hold the
current state and swap it for the returned one.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum

from floormap.floors import FloorBucket
from floormap.layers.layer import Feature
from floormap.location import LocationFix
from floormap.orientation import OrientationFit

DEFAULT_PITCH_3D = 70.0
DEFAULT_HOME_ZOOM = 20.2


@dataclass(frozen=True)
class ViewState:
    """Camera parameters for the rendering surface."""
    longitude: float = 17.9128075
    latitude: float = 59.2890342
    zoom: float = 19.0
    pitch: float = 0.0
    bearing: float = 0.0
    max_zoom: float = 33.0


class Sublayer(Enum):
    """Drawable sublayers within one floor group."""
    UNITS = "units"
    DETAILS = "details"


@dataclass(frozen=True)
class GroupVisibility:
    """Sublayer flags for one floor group.

    ``active`` is derived, so it is true exactly when any sublayer is shown.
    """
    units: bool = True
    details: bool = True

    @property
    def active(self) -> bool:
        return self.units or self.details

    def is_visible(self, sublayer: Sublayer) -> bool:
        return getattr(self, sublayer.value)


# Floor groups shown in the layer panel, in display order
FLOOR_GROUPS = (FloorBucket.GROUND, FloorBucket.UPPER)


@dataclass(frozen=True)
class LayerVisibility:
    ground: GroupVisibility = field(default_factory=GroupVisibility)
    upper: GroupVisibility = field(default_factory=GroupVisibility)

    def group(self, bucket: FloorBucket) -> GroupVisibility:
        if bucket not in FLOOR_GROUPS:
            raise KeyError(f"No layer group for floor: {bucket.value}")
        return getattr(self, bucket.value)

    def is_visible(self, bucket: FloorBucket, sublayer: Sublayer) -> bool:
        return self.group(bucket).is_visible(sublayer)


@dataclass(frozen=True)
class MapState:
    """Everything the UI renders, in one immutable value."""
    view: ViewState = field(default_factory=ViewState)
    home_view: ViewState = field(default_factory=ViewState)
    is_3d: bool = False
    visibility: LayerVisibility = field(default_factory=LayerVisibility)
    layers_open: bool = False
    selected: Feature | None = None
    fix: LocationFix | None = None


# ---------------------------------------------------------------------------
# Camera transitions
# ---------------------------------------------------------------------------

def set_view(state: MapState, view: ViewState) -> MapState:
    """Echo a camera change from user interaction (pan/zoom/rotate).

    The zoom bound belongs to the map, not to the incoming camera: ``max_zoom``
    is kept from the current view and zoom is clamped to it.
    """
    max_zoom = state.view.max_zoom
    view = replace(view, max_zoom=max_zoom, zoom=min(view.zoom, max_zoom))
    return replace(state, view=view)


def toggle_3d(state: MapState) -> MapState:
    return replace(state, is_3d=not state.is_3d)


def go_home(state: MapState) -> MapState:
    """Return to the home camera in 2D."""
    return replace(state, is_3d=False, view=state.home_view)


def apply_orientation(
    state: MapState, fit: OrientationFit, zoom: float = DEFAULT_HOME_ZOOM
) -> MapState:
    """Centre and rotate both the current and home camera on a fitted footprint."""
    home = replace(
        state.home_view,
        longitude=fit.center_lon,
        latitude=fit.center_lat,
        zoom=zoom,
        pitch=0.0,
        bearing=fit.bearing,
    )
    return replace(state, view=home, home_view=home)


def rendered_view(state: MapState, pitch_3d: float = DEFAULT_PITCH_3D) -> ViewState:
    """Camera as handed to the renderer: pitch is driven by the 2D/3D flag."""
    return replace(state.view, pitch=pitch_3d if state.is_3d else 0.0)


# ---------------------------------------------------------------------------
# Layer panel transitions
# ---------------------------------------------------------------------------

def _with_group(state: MapState, bucket: FloorBucket, group: GroupVisibility) -> MapState:
    visibility = replace(state.visibility, **{bucket.value: group})
    return replace(state, visibility=visibility)


def toggle_group(state: MapState, bucket: FloorBucket) -> MapState:
    """Flip a whole floor group: every sublayer takes ``not active``."""
    value = not state.visibility.group(bucket).active
    group = GroupVisibility(**{s.value: value for s in Sublayer})
    return _with_group(state, bucket, group)


def toggle_layer(state: MapState, bucket: FloorBucket, sublayer: Sublayer) -> MapState:
    group = state.visibility.group(bucket)
    group = replace(group, **{sublayer.value: not group.is_visible(sublayer)})
    return _with_group(state, bucket, group)


def toggle_layers_panel(state: MapState) -> MapState:
    return replace(state, layers_open=not state.layers_open)


# ---------------------------------------------------------------------------
# Location transitions
# ---------------------------------------------------------------------------

def select_room(state: MapState, room: Feature | None) -> MapState:
    return replace(state, selected=room)


def set_fix(state: MapState, fix: LocationFix | None) -> MapState:
    return replace(state, fix=fix)


# ---------------------------------------------------------------------------
# Info readout
# ---------------------------------------------------------------------------

NO_VALUE = "-"


def info_readout(state: MapState) -> dict:
    """Text for the info bar: location, floor, and the room the user is in.

    ``room`` is None when the user is outside every mapped room.
    """
    location = None
    if state.fix is not None:
        location = {
            "latitude": f"{state.fix.latitude:.6f}",
            "longitude": f"{state.fix.longitude:.6f}",
            "elevation": f"{state.fix.elevation:.1f}",
            "floor": state.fix.floor,
        }

    room = None
    if state.selected is not None:
        room = {
            "name": state.selected.name or NO_VALUE,
            "use_type": state.selected.use_type or NO_VALUE,
        }

    return {
        "location": location,
        "level": (state.selected.level_id or NO_VALUE) if state.selected is not None else NO_VALUE,
        "room": room,
    }
