"""Trip, ride offer and ride history records.

A ``Trip`` is derived data. It is rebuilt from a seed key every time a drone is
enriched and never persisted. ``CompletedRide`` is the one record that is
persisted, as camelCase JSON in the completed rides store.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
import random
import string
from typing import Any

from skyfleet.config import ROUTE_STEPS
from skyfleet.geo import Place, Route, interpolate_route
from skyfleet.unit import Meter

_RIDE_ID_ALPHABET = string.ascii_lowercase + string.digits


@dataclass(frozen=True)
class Trip:
    """Origin, destination and discretised route of one delivery or ride.

    Attributes:
        id (str): Seed key. Duration based timing derives the trip length from it.
        origin (Place): Named start point.
        destination (Place): Named end point.
        route (Route): ``(lng, lat)`` points from origin to destination.
    """

    id: str
    origin: Place
    destination: Place
    route: Route = field(default=(), repr=False)

    @classmethod
    def between(cls, trip_id: str, origin: Place, destination: Place, steps: int = ROUTE_STEPS) -> "Trip":
        """Build a trip with an interpolated route between two places."""
        return cls(trip_id, origin, destination, interpolate_route(origin, destination, steps))

    @property
    def distance(self) -> Meter:
        """Geodesic distance between origin and destination."""
        return self.origin.distance_to(self.destination)


@dataclass(frozen=True)
class RideOffer:
    """A proposed ride shown to the simulated driver."""

    id: str
    trip: Trip
    passengers: int
    eta: str


@dataclass(frozen=True)
class FlightRecord:
    """One entry of a drone's mock flight history."""

    time: str
    origin: str
    destination: str
    duration: str
    status: str


def new_ride_id(now: datetime) -> str:
    """Ride id of the form ``ride-<epoch ms>-<7 random chars>``."""
    millis = int(now.timestamp() * 1000)
    suffix = "".join(random.choices(_RIDE_ID_ALPHABET, k=7))
    return f"ride-{millis}-{suffix}"


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a ``Z`` suffix."""
    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class CompletedRide:
    """A finished driver ride as stored in the completed rides list.

    Attributes:
        id (str): Unique ride id.
        drone_id (str): Drone that flew the ride.
        drone_name (str): Display name of that drone.
        origin (str): Origin landmark name.
        destination (str): Destination landmark name.
        passengers (int): Passenger count.
        completed_at (datetime): Timezone aware completion time.
        eta (str | None): ETA label quoted when the ride was offered.
    """

    id: str
    drone_id: str
    drone_name: str
    origin: str
    destination: str
    passengers: int
    completed_at: datetime
    eta: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "droneId": self.drone_id,
            "droneName": self.drone_name,
            "origin": self.origin,
            "destination": self.destination,
            "passengers": self.passengers,
            "completedAt": format_timestamp(self.completed_at),
        }
        if self.eta is not None:
            data["eta"] = self.eta
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CompletedRide":
        """Parse a stored record.

        Raises:
            KeyError: If a required key is missing.
            ValueError: If ``completedAt`` is not an ISO-8601 timestamp.
            TypeError: If ``data`` is not a mapping of the expected shape.
        """
        completed_at = datetime.fromisoformat(data["completedAt"])
        if completed_at.tzinfo is None:
            completed_at = completed_at.replace(tzinfo=UTC)
        return cls(
            id=str(data["id"]),
            drone_id=str(data["droneId"]),
            drone_name=str(data.get("droneName", "")),
            origin=str(data.get("origin", "Origin")),
            destination=str(data.get("destination", "Destination")),
            passengers=int(data.get("passengers") or 0),
            completed_at=completed_at,
            eta=data.get("eta"),
        )
