"""Altitude floor classifier — infer the current floor from altitude drift.

Altitude readings are turned into an offset from the first altitude seen
(the session baseline), smoothed with an exponential moving average, and
compared against a hysteresis band so that noise around the threshold does
not flip the floor back and forth.

The reference behaviour checks the thresholds against the smoothed value
from *before* the current reading is folded in, which lags transitions by
one reading.  That is kept as the default (``lagged=True``) until the
intended behaviour is confirmed; ``lagged=False`` checks the freshly updated
value instead.
"""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from floormap.floors import FloorBucket

DEFAULT_FLOOR_HEIGHT = 2.7
DEFAULT_GROUND_ELEVATION = 0.1


@dataclass
class AltitudeReading:
    """Outcome of feeding one altitude reading to the classifier."""
    floor: FloorBucket
    offset: float          # raw offset from baseline
    smoothed: float        # smoothed offset after this reading
    elevation: float       # quantized display elevation for the floor
    changed: bool          # floor changed on this reading


class AltitudeFloorClassifier:
    """EMA + hysteresis state machine over one stream of altitude readings."""

    def __init__(
        self,
        *,
        up_threshold: float = 1.5,
        down_threshold: float = 1.0,
        smoothing: float = 0.2,
        floor_height: float = DEFAULT_FLOOR_HEIGHT,
        ground_elevation: float = DEFAULT_GROUND_ELEVATION,
        lagged: bool = True,
    ) -> None:
        if down_threshold > up_threshold:
            raise ValueError(
                f"down_threshold ({down_threshold}) must not exceed up_threshold ({up_threshold})"
            )
        if not 0.0 < smoothing <= 1.0:
            raise ValueError(f"smoothing must be in (0, 1], got {smoothing}")
        self.up_threshold = up_threshold
        self.down_threshold = down_threshold
        self.smoothing = smoothing
        self.floor_height = floor_height
        self.ground_elevation = ground_elevation
        self.lagged = lagged

        self.floor = FloorBucket.GROUND
        self.baseline: float | None = None
        self.smoothed: float | None = None

    @property
    def elevation(self) -> float:
        """Display elevation for the current floor."""
        return self.floor_height if self.floor == FloorBucket.UPPER else self.ground_elevation

    def update(self, altitude: float | None) -> AltitudeReading:
        """Fold one reading in and return the resulting floor state."""
        if self.baseline is None and altitude is not None:
            self.baseline = altitude
            logger.debug(f"Altitude baseline set: {altitude:.2f} m")

        if altitude is not None and self.baseline is not None:
            offset = altitude - self.baseline
        else:
            offset = 0.0

        previous = self.smoothed
        if previous is None:
            self.smoothed = offset
        else:
            self.smoothed = previous * (1 - self.smoothing) + offset * self.smoothing

        if self.lagged:
            checked = offset if previous is None else previous
        else:
            checked = self.smoothed

        before = self.floor
        if checked > self.up_threshold and self.floor != FloorBucket.UPPER:
            self.floor = FloorBucket.UPPER
        elif checked < self.down_threshold and self.floor != FloorBucket.GROUND:
            self.floor = FloorBucket.GROUND

        changed = self.floor != before
        if changed:
            logger.info(
                f"Floor change: {before.value} -> {self.floor.value} "
                f"(smoothed offset {checked:.2f} m)"
            )

        return AltitudeReading(
            floor=self.floor,
            offset=offset,
            smoothed=self.smoothed,
            elevation=self.elevation,
            changed=changed,
        )
