"""Per-drone trip progress driven by a periodic scheduler tick.

Each tracked drone moves through three phases:

* not started: not in the delivering set
* running: 0 <= progress < 1, advanced by a cached increment every tick
* completed: pinned at exactly 1, completion callback fired once

The increment is computed once when the drone is first observed, either from
the trip distance or from a seeded trip duration. Within one tick every drone
is advanced before any completion callback runs, so callbacks observe a fully
advanced progress map.

Example:
    >>> clock = ProgressClock(scheduler, on_complete=lambda d: print(d.id))
    >>> clock.sync([delivering_drone])
    >>> scheduler.advance(Minute(5))
    LON-DR-012
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum, auto
import logging
import math

from skyfleet.config import MIN_TRIP_DISTANCE, PROGRESS_TICK
from skyfleet.geo import Coordinate, interpolate_position, route_bearing
from skyfleet.mission import assign_trip, trip_duration
from skyfleet.mission.trip import Trip
from skyfleet.timer import CancelToken, Scheduler
from skyfleet.unit import Kilometer, Millisecond, Time
from skyfleet.vehicles import Drone

logger = logging.getLogger(__name__)

_EPSILON = 1e-9


class ProgressTiming(Enum):
    DISTANCE = auto()
    DURATION = auto()


@dataclass
class _Track:
    drone: Drone
    increment: float
    progress: float = 0.0
    completed: bool = False


def _ceil(value: float) -> int:
    """Ceiling that ignores float noise just above an integer."""
    return max(1, math.ceil(value - _EPSILON))


class ProgressClock:
    """Advances 0..1 progress for every delivering drone on a fixed tick.

    Args:
        scheduler (Scheduler): Drives the periodic tick.
        tick (Time): Tick period.
        timing (ProgressTiming): How the per-tick increment is derived.
        on_complete (Callable[[Drone], None] | None): Called once per drone
            when its progress reaches 1.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        tick: Time = PROGRESS_TICK,
        timing: ProgressTiming = ProgressTiming.DISTANCE,
        on_complete: Callable[[Drone], None] | None = None,
    ):
        self._scheduler = scheduler
        self._tick_period = tick
        self._timing = timing
        self._on_complete = on_complete
        self._tracks: dict[str, _Track] = {}
        self._token: CancelToken | None = None

    # -------------------------------- Tracking --------------------------------

    def sync(self, drones: Iterable[Drone]) -> None:
        """Make ``drones`` the tracked delivering set.

        New drones start at 0 with a freshly computed increment. Drones that
        are already tracked keep their progress and take the new snapshot.
        Drones missing from ``drones`` lose their record, so a later return
        starts over at 0.
        """
        incoming = {drone.id: drone for drone in drones}

        for drone_id in list(self._tracks):
            if drone_id not in incoming:
                del self._tracks[drone_id]
                logger.debug("Stopped tracking %s", drone_id)

        for drone_id, drone in incoming.items():
            track = self._tracks.get(drone_id)
            if track is None:
                self._tracks[drone_id] = _Track(drone, self._increment_for(drone))
                logger.debug("Tracking %s", drone_id)
            else:
                track.drone = drone

        self._update_job()

    def untrack(self, drone_id: str) -> None:
        if self._tracks.pop(drone_id, None) is not None:
            self._update_job()

    def _increment_for(self, drone: Drone) -> float:
        trip = drone.trip or assign_trip(drone)
        return 1.0 / trip_ticks(trip, self._tick_period, self._timing)

    def _update_job(self) -> None:
        if self._tracks and self._token is None:
            self._token = self._scheduler.schedule(self._tick_period, self.tick)
        elif not self._tracks and self._token is not None:
            self.stop()

    # -------------------------------- Ticking --------------------------------

    def tick(self) -> None:
        """Advance every running track, then fire completions in tracking order."""
        finished: list[Drone] = []
        for track in self._tracks.values():
            if track.completed:
                continue
            track.progress += track.increment
            if track.progress >= 1.0 - _EPSILON:
                track.progress = 1.0
                track.completed = True
                finished.append(track.drone)

        for drone in finished:
            logger.info("Trip complete for %s", drone.id)
            if self._on_complete is not None:
                self._on_complete(drone)

    def stop(self) -> None:
        """Cancel the periodic tick. Progress is kept."""
        if self._token is not None:
            self._token.cancel()
            self._token = None

    def close(self) -> None:
        """Cancel the tick and forget every record."""
        self.stop()
        self._tracks.clear()

    # -------------------------------- Views --------------------------------

    @property
    def running(self) -> bool:
        return self._token is not None

    @property
    def tracked_ids(self) -> list[str]:
        return list(self._tracks)

    @property
    def progress_map(self) -> dict[str, float]:
        return {drone_id: track.progress for drone_id, track in self._tracks.items()}

    def progress(self, drone_id: str) -> float:
        track = self._tracks.get(drone_id)
        return track.progress if track else 0.0

    def increment(self, drone_id: str) -> float | None:
        track = self._tracks.get(drone_id)
        return track.increment if track else None

    def is_completed(self, drone_id: str) -> bool:
        track = self._tracks.get(drone_id)
        return bool(track and track.completed)

    def position_of(self, drone: Drone) -> Coordinate:
        """Interpolated ``(lng, lat)`` along the trip, or the drone's own coordinate."""
        if not drone.route:
            return drone.coordinates.as_pair()
        return interpolate_position(drone.route, self.progress(drone.id))

    def bearing_of(self, drone: Drone) -> float:
        return route_bearing(drone.route, self.progress(drone.id))


def trip_ticks(trip: Trip, tick: Time = PROGRESS_TICK, timing: ProgressTiming = ProgressTiming.DISTANCE) -> int:
    """Number of ticks ``trip`` takes to complete.

    Distance timing flies one metre per millisecond of tick, with trips
    shorter than ``MIN_TRIP_DISTANCE`` counted at that length. Duration timing
    spreads the seeded trip duration over the ticks.
    """
    tick_ms = tick.to(Millisecond)
    if timing is ProgressTiming.DURATION:
        return _ceil(trip_duration(trip.id).to(Millisecond) / tick_ms)
    km = max(trip.distance.to(Kilometer), MIN_TRIP_DISTANCE.to(Kilometer))
    return _ceil(km * 1000 / tick_ms)
