"""Static city configuration: London, Abu Dhabi and Paris.

Each roster entry is a ``DroneConfig`` with coordinates given as degree offsets
from the city centre (0.01 degrees is roughly 1 km).
"""

from dataclasses import dataclass

from skyfleet.config import DEFAULT_ZOOM, DRIVER_DRONE_ID
from skyfleet.geo import GeoPoint, Place
from skyfleet.vehicles import Drone, DroneStatus, calculate_range

X1 = "Skyrunner X1"
X2 = "Skyrunner X2"

STANDBY = DroneStatus.STANDBY
DELIVERING = DroneStatus.DELIVERING


@dataclass(frozen=True)
class DroneConfig:
    id: str
    status: DroneStatus
    battery: int
    model: str
    offset_lat: float
    offset_lng: float
    suffix: str = ""
    eta: str | None = None
    load: int = 0
    trip_origin: Place | None = None
    trip_destination: Place | None = None

    @property
    def name(self) -> str:
        return f"{self.model} {self.suffix}" if self.suffix else self.model


@dataclass(frozen=True)
class City:
    """A city with its fixed drone roster.

    Attributes:
        id (str): Slug used by ``select_city`` (``"london"``).
        name (str): Display name.
        center (GeoPoint): Default map centre.
        zoom (float): Default map zoom.
        drones (tuple[Drone, ...]): Roster built from static configuration.
    """

    id: str
    name: str
    center: GeoPoint
    zoom: float
    drones: tuple[Drone, ...]


def create_city_drones(prefix: str, center: GeoPoint, configs: list[DroneConfig]) -> tuple[Drone, ...]:
    """Build a roster, prefixing ids with the city code and placing drones around ``center``."""
    drones = []
    for config in configs:
        drone_id = f"{prefix}-{config.id}"
        drones.append(
            Drone(
                id=drone_id,
                name=config.name,
                model=config.model,
                status=config.status,
                battery=config.battery,
                range_km=calculate_range(drone_id, config.battery),
                load=config.load,
                coordinates=center.offset(config.offset_lat, config.offset_lng),
                eta=config.eta,
                trip_origin=config.trip_origin,
                trip_destination=config.trip_destination,
            )
        )
    return tuple(drones)


LONDON_CENTER = GeoPoint(51.5074, -0.1276)
ABU_DHABI_CENTER = GeoPoint(24.4539, 54.3773)
PARIS_CENTER = GeoPoint(48.8566, 2.3522)

# fmt: off
LONDON_DRONES = [
    DroneConfig("DR-001-taxi-1", STANDBY, 92, X1, 0.0006, -0.0011, suffix="Taxi 1"),
    DroneConfig("DR-001-taxi-2", STANDBY, 92, X1, 0.0011, -0.0006, suffix="Taxi 2"),
    DroneConfig("DR-001-taxi-3", STANDBY, 92, X1, 0.0006, -0.0111, suffix="Taxi 3"),
    DroneConfig("DR-001", STANDBY, 92, X1, 0, -0.0004),
    DroneConfig("DR-002", STANDBY, 88, X2, 0.0081, 0.0354),
    DroneConfig("DR-003", STANDBY, 75, X1, -0.0029, 0.0411),
    DroneConfig("DR-004", STANDBY, 95, X2, 0.0120, 0.0006),
    DroneConfig("DR-005", STANDBY, 67, X1, -0.0041, 0.0079),
    DroneConfig("DR-006", STANDBY, 81, X2, 0.0213, 0.0251),
    DroneConfig("DR-007", STANDBY, 58, X1, -0.0099, -0.0081),
    DroneConfig("DR-008", STANDBY, 90, X2, 0.0151, -0.0285),
    DroneConfig("DR-009", STANDBY, 73, X1, 0.0275, 0.0031),
    DroneConfig("DR-010", STANDBY, 86, X2, 0.0060, 0.1571),
    DroneConfig("DR-011", STANDBY, 78, X1, -0.0181, -0.0165),
    DroneConfig("DR-012", DELIVERING, 62, X2, 0.0071, 0.0269, eta="8 mins", load=2),
    DroneConfig("DR-013", DELIVERING, 71, X1, 0.0247, -0.0113, eta="12 mins", load=3),
    DroneConfig("DR-014", DELIVERING, 55, X2, -0.0107, -0.0467, eta="15 mins", load=1),
    DroneConfig("DR-015", DELIVERING, 68, X1, 0.0017, 0.0521, eta="6 mins", load=4),
    DroneConfig("DR-016", DELIVERING, 84, X2, 0.0356, 0.0218, eta="10 mins", load=2),
    DroneConfig("DR-017", DELIVERING, 77, X1, -0.0224, 0.0261, eta="5 mins", load=3),
    DroneConfig("DR-018", STANDBY, 18, X2, -0.0063, -0.0143),
    DroneConfig("DR-019", DELIVERING, 22, X1, 0.0195, 0.0461, eta="3 mins", load=1),
    DroneConfig("DR-020", STANDBY, 15, X2, -0.0092, -0.0277),
    DroneConfig("DR-021", STANDBY, 20, X1, 0.0402, -0.0096),
]

ABU_DHABI_DRONES = [
    DroneConfig("DR-001", STANDBY, 94, X1, 0, 0),
    DroneConfig("DR-002", STANDBY, 88, X2, 0.008, 0.012),
    DroneConfig("DR-003", STANDBY, 76, X1, -0.006, 0.008),
    DroneConfig("DR-004", STANDBY, 91, X2, 0.012, -0.005),
    DroneConfig("DR-005", STANDBY, 82, X1, -0.004, -0.011),
    DroneConfig("DR-006", STANDBY, 65, X2, 0.015, 0.018),
    DroneConfig("DR-007", DELIVERING, 58, X1, -0.009, 0.022, eta="10 mins", load=2),
    DroneConfig("DR-008", DELIVERING, 72, X2, 0.018, -0.008, eta="7 mins", load=1),
    DroneConfig("DR-009", STANDBY, 19, X1, -0.012, -0.015),
    DroneConfig("DR-010", DELIVERING, 24, X2, 0.006, -0.018, eta="4 mins", load=3),
]

PARIS_DRONES = [
    DroneConfig("DR-001", STANDBY, 90, X1, 0, 0),
    DroneConfig("DR-002", STANDBY, 85, X2, 0.006, 0.004),
    DroneConfig("DR-003", STANDBY, 78, X1, -0.005, 0.009),
    DroneConfig("DR-004", STANDBY, 92, X2, 0.009, -0.003),
    DroneConfig("DR-005", STANDBY, 70, X1, -0.008, -0.006),
    DroneConfig("DR-006", STANDBY, 88, X2, 0.011, 0.014),
    DroneConfig("DR-007", DELIVERING, 64, X1, -0.004, 0.018, eta="9 mins", load=2),
    DroneConfig("DR-008", DELIVERING, 75, X2, 0.013, -0.012, eta="12 mins", load=4),
    DroneConfig("DR-009", STANDBY, 17, X1, -0.011, 0.005),
    DroneConfig("DR-010", DELIVERING, 21, X2, 0.007, -0.016, eta="5 mins", load=1),
]
# fmt: on

LONDON = City("london", "London", LONDON_CENTER, DEFAULT_ZOOM, create_city_drones("LON", LONDON_CENTER, LONDON_DRONES))
ABU_DHABI = City(
    "abu-dhabi", "Abu Dhabi", ABU_DHABI_CENTER, DEFAULT_ZOOM, create_city_drones("AUH", ABU_DHABI_CENTER, ABU_DHABI_DRONES)
)
PARIS = City("paris", "Paris", PARIS_CENTER, DEFAULT_ZOOM, create_city_drones("PAR", PARIS_CENTER, PARIS_DRONES))

CITIES: tuple[City, ...] = (LONDON, ABU_DHABI, PARIS)

# The driver's own drone is stationed in Abu Dhabi but is not part of the public roster
_DRIVER_PREFIX, _DRIVER_SUFFIX = DRIVER_DRONE_ID.split("-", 1)
DRIVER_DRONE = create_city_drones(_DRIVER_PREFIX, ABU_DHABI_CENTER, [DroneConfig(_DRIVER_SUFFIX, STANDBY, 100, X2, 0, 0)])[0]


def get_city(city_id: str) -> City | None:
    """City with ``city_id``, or None."""
    return next((city for city in CITIES if city.id == city_id), None)


def all_drones() -> list[Drone]:
    """Every configured drone across all cities, plus the driver drone."""
    return [drone for city in CITIES for drone in city.drones] + [DRIVER_DRONE]
