"""Drone taxi entity and its derived display attributes.

Drones are immutable snapshots. The fleet container rebuilds them on every read
from static city configuration, battery overrides and trip enrichment, so every
change goes through ``dataclasses.replace`` rather than mutation.

Battery thresholds drive most of the derived attributes:

* below 25 % a drone is low battery, whatever its status, and renders orange
* below 20 % it is critical and shows up under the critical battery filter
* range is drawn from a band picked by battery level

Example:
    >>> drone = Drone("LON-DR-001", "Skyrunner X1", "Skyrunner X1", DroneStatus.STANDBY,
    ...               battery=92, range_km=calculate_range("LON-DR-001", 92), load=0,
    ...               coordinates=GeoPoint(51.5074, -0.128))
    >>> drone.marker_color
    '#10B981'
    >>> drone.with_battery(18).marker_color
    '#FF9F3D'
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING, NamedTuple

import numpy as np

from skyfleet.config import CRITICAL_BATTERY, LOW_BATTERY, MID_BATTERY
from skyfleet.geo import GeoPoint, Place, Route
from skyfleet.seeding import string_hash

if TYPE_CHECKING:
    from skyfleet.mission.trip import Trip

LOW_BATTERY_COLOR = "#FF9F3D"
DELIVERING_COLOR = "#3DA9FF"
STANDBY_COLOR = "#10B981"


class DroneStatus(Enum):
    STANDBY = "standby"
    DELIVERING = "delivering"


class DroneCategory(Enum):
    """Table category of a drone, declared in display order."""

    ACTIVE = "active"
    LOW_BAT = "lowBat"
    READY = "ready"

    @property
    def rank(self) -> int:
        return list(DroneCategory).index(self)


class StatusDisplay(NamedTuple):
    text: str
    color: str


# Range bands as (upper battery bound, min km, max km), checked in order
_RANGE_BANDS = ((LOW_BATTERY, 5, 10), (MID_BATTERY, 10, 20), (101, 20, 40))


def calculate_range(drone_id: str, battery: int) -> int:
    """Range in km for ``battery``, uniform within the battery's band.

    The draw is seeded by the drone id, so a drone keeps the same range for as
    long as it stays in the same band.

    Args:
        drone_id (str): Drone identifier used as the seed.
        battery (int): Battery percentage.

    Returns:
        int: 5-10 km below 25 %, 10-20 km below 50 %, 20-40 km otherwise.
    """
    rng = np.random.default_rng(string_hash(drone_id))
    for bound, low, high in _RANGE_BANDS:
        if battery < bound:
            return int(rng.integers(low, high, endpoint=True))
    return int(rng.integers(_RANGE_BANDS[-1][1], _RANGE_BANDS[-1][2], endpoint=True))


def capacity_for(name: str) -> int:
    """Passenger seats: six for X2 airframes, four otherwise."""
    return 6 if "X2" in name else 4


@dataclass(frozen=True)
class Drone:
    """Immutable snapshot of one drone taxi.

    Attributes:
        id (str): Globally unique id prefixed by the city code (``LON-DR-001``).
        name (str): Display name, the model plus an optional suffix.
        model (str): Airframe model tag (``Skyrunner X1``).
        status (DroneStatus): Standby or delivering.
        battery (int): Charge level in percent, always within [0, 100].
        range_km (int): Derived range for the current battery band.
        load (int): Passengers on board.
        coordinates (GeoPoint): Current position.
        eta (str | None): ETA label while delivering.
        trip (Trip | None): Enriched trip while delivering.
        trip_origin (Place | None): Explicit trip start from configuration.
        trip_destination (Place | None): Explicit trip end from configuration.
    """

    id: str
    name: str
    model: str
    status: DroneStatus
    battery: int
    range_km: int
    load: int
    coordinates: GeoPoint
    eta: str | None = None
    trip: Trip | None = None
    trip_origin: Place | None = None
    trip_destination: Place | None = None

    def __post_init__(self):
        if not 0 <= self.battery <= 100:
            msg = f"Battery out of range for {self.id}: {self.battery}"
            raise ValueError(msg)
        if self.load < 0:
            msg = f"Negative load for {self.id}: {self.load}"
            raise ValueError(msg)

    @property
    def is_delivering(self) -> bool:
        return self.status is DroneStatus.DELIVERING

    @property
    def is_low_battery(self) -> bool:
        return self.battery < LOW_BATTERY

    @property
    def is_critical_battery(self) -> bool:
        return self.battery < CRITICAL_BATTERY

    @property
    def category(self) -> DroneCategory:
        if self.is_low_battery:
            return DroneCategory.LOW_BAT
        if self.is_delivering:
            return DroneCategory.ACTIVE
        return DroneCategory.READY

    @property
    def marker_color(self) -> str:
        """Map marker colour. Low battery wins over delivering."""
        return self.status_display.color

    @property
    def status_display(self) -> StatusDisplay:
        if self.is_low_battery:
            return StatusDisplay("LOW BATTERY", LOW_BATTERY_COLOR)
        if self.is_delivering:
            return StatusDisplay("DELIVERING", DELIVERING_COLOR)
        return StatusDisplay("STANDBY", STANDBY_COLOR)

    @property
    def capacity(self) -> int:
        return capacity_for(self.name)

    @property
    def capacity_label(self) -> str:
        return f"{self.capacity} Pax"

    @property
    def route(self) -> Route:
        return self.trip.route if self.trip else ()

    def with_battery(self, battery: int) -> Drone:
        """Copy with a new battery level and the range recomputed for it."""
        return replace(self, battery=battery, range_km=calculate_range(self.id, battery))
