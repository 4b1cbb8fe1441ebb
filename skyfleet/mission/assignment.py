"""Deterministic mock trip assignment.

Every derived attribute here is a pure function of an id string: the same drone
id always gets the same landmarks, destination offset and trip duration, which
keeps the dashboard stable across re-renders and makes tests reproducible.

Example:
    >>> a = assign_trip(drone)
    >>> b = assign_trip(drone)
    >>> a == b
    True
"""

from collections.abc import Iterable
from dataclasses import replace
import logging

from skyfleet.config import TRIP_DURATION_MIN, TRIP_DURATION_SPAN
from skyfleet.geo import GeoPoint, Place
from skyfleet.seeding import seeded_random, string_hash
from skyfleet.unit import Second
from skyfleet.vehicles import Drone, DroneStatus

from .trip import FlightRecord, RideOffer, Trip

logger = logging.getLogger(__name__)

DEFAULT_CITY_PREFIX = "LON"

LANDMARKS: dict[str, tuple[str, ...]] = {
    "LON": (
        "Paddington Hub", "Kings Cross", "Waterloo Station", "Liverpool Street",
        "Canary Wharf", "Heathrow Terminal", "Shoreditch", "Camden Market",
        "Westminster", "Victoria Station", "Tower Bridge", "Hyde Park",
        "Regent's Park", "Southwark", "Euston", "Bermondsey", "Hoxton",
        "Angel", "Whitechapel", "Vauxhall",
    ),
    "AUH": (
        "Sheikh Zayed Grand Mosque", "Corniche", "Marina Mall", "Yas Island",
        "Saadiyat Island", "Al Reem Island", "Khalifa City", "Al Maryah Island",
        "Abu Dhabi Airport", "Al Zahiyah", "Al Qurm", "Al Mushrif",
        "Al Danah", "Al Nahyan", "Al Rawdah", "Al Kheeran", "Hudayriat Island",
        "Al Reem", "Zayed Port", "Al Bateen",
    ),
    "PAR": (
        "Eiffel Tower", "Champs-Élysées", "Notre-Dame", "Louvre Museum",
        "Gare du Nord", "Gare de Lyon", "Montmartre", "Le Marais",
        "Saint-Germain", "Bastille", "La Défense", "Place de la Concorde",
        "Arc de Triomphe", "Montparnasse", "Belleville", "Pigalle",
        "Opéra Garnier", "Île de la Cité", "Panthéon", "Marais",
    ),
}

HISTORY_STATUSES = ("Completed", "Completed", "Completed", "Cancelled")
HISTORY_DURATIONS = ("12 min", "18 min", "8 min", "22 min", "15 min", "6 min")
HISTORY_TIMES = ("2 hours ago", "5 hours ago", "Yesterday", "2 days ago", "3 days ago")

# Ride offers start within +-0.02 degrees of the city centre
_OFFER_SPREAD = 0.04


def city_prefix(drone_id: str) -> str:
    """Upper-cased first ``-`` segment of ``drone_id``."""
    return drone_id.split("-")[0].upper()


def landmarks_for(drone_id: str) -> tuple[str, ...]:
    """Landmark names of the drone's city, London for unknown prefixes."""
    return LANDMARKS.get(city_prefix(drone_id), LANDMARKS[DEFAULT_CITY_PREFIX])


def landmark_indices(seed: int, count: int) -> tuple[int, int]:
    """Two distinct indices into a list of ``count`` landmarks.

    Raises:
        ValueError: If fewer than two landmarks are available.
    """
    if count < 2:
        msg = f"Need at least two landmarks, got {count}"
        raise ValueError(msg)
    from_idx = (seed * 17) % count
    to_idx = (seed * 31) % count
    if to_idx == from_idx:
        to_idx = (to_idx + 1) % count
    return from_idx, to_idx


def destination_offset(seed: int) -> tuple[float, float]:
    """Seeded ``(d_lat, d_lng)`` in degrees from origin to destination."""
    return 0.008 + (seed % 5) * 0.004, 0.01 + (seed % 7) * 0.003


def trip_duration(key: str) -> Second:
    """Seeded trip duration, uniform in 20-40 s."""
    r = seeded_random(string_hash(key))
    return Second.from_si(float(TRIP_DURATION_MIN) + r * float(TRIP_DURATION_SPAN))


def assign_trip(drone: Drone) -> Trip:
    """Trip for ``drone``, from its explicit endpoints or derived from its id.

    Without explicit endpoints the trip starts at the drone's coordinates and
    ends at a seeded offset, with both ends named after seeded landmarks.
    """
    if drone.trip_origin is not None and drone.trip_destination is not None:
        return Trip.between(drone.id, drone.trip_origin, drone.trip_destination)

    landmarks = landmarks_for(drone.id)
    seed = string_hash(drone.id)
    from_idx, to_idx = landmark_indices(seed, len(landmarks))
    d_lat, d_lng = destination_offset(seed)

    here = drone.coordinates
    origin = Place(here.lat, here.lng, landmarks[from_idx])
    destination = Place(here.lat + d_lat, here.lng + d_lng, landmarks[to_idx])
    return Trip.between(drone.id, origin, destination)


def enrich_drone(drone: Drone) -> Drone:
    """Attach a trip to a delivering drone. Other drones are returned as is."""
    if drone.status is not DroneStatus.DELIVERING:
        return drone
    return replace(drone, trip=assign_trip(drone))


def enrich_drones(drones: Iterable[Drone]) -> list[Drone]:
    return [enrich_drone(drone) for drone in drones]


def generate_ride_offer(driver: Drone, sequence: int, center: GeoPoint) -> RideOffer:
    """Pseudo-random ride offer number ``sequence`` for the driver drone.

    The offer is seeded by the driver id and the sequence number, so each new
    offer differs from the previous one while a given sequence always replays
    the same ride.

    Args:
        driver (Drone): The driver's drone. Its city picks the landmark names and
            its capacity caps the passenger count.
        sequence (int): Offer counter, incremented for every new offer.
        center (GeoPoint): City centre the pickup is scattered around.

    Returns:
        RideOffer: A ride whose trip id is ``"<driver id>#<sequence>"``.
    """
    key = f"{driver.id}#{sequence}"
    seed = string_hash(key)
    landmarks = landmarks_for(driver.id)
    from_idx, to_idx = landmark_indices(seed, len(landmarks))

    origin = Place(
        center.lat + (seeded_random(seed) - 0.5) * _OFFER_SPREAD,
        center.lng + (seeded_random(seed + 1) - 0.5) * _OFFER_SPREAD,
        landmarks[from_idx],
    )
    d_lat, d_lng = destination_offset(seed)
    destination = Place(origin.lat + d_lat, origin.lng + d_lng, landmarks[to_idx])

    passengers = 1 + int(seeded_random(seed + 2) * driver.capacity)
    eta_minutes = 3 + int(seeded_random(seed + 3) * 10)
    offer = RideOffer(
        id=f"offer-{key}",
        trip=Trip.between(key, origin, destination),
        passengers=passengers,
        eta=f"{eta_minutes} mins",
    )
    logger.debug("Generated offer %s: %s -> %s", offer.id, origin.name, destination.name)
    return offer


def generate_mock_history(drone_id: str) -> list[FlightRecord]:
    """Three to five seeded past flights for the drone detail card."""
    landmarks = landmarks_for(drone_id)
    seed = string_hash(drone_id)
    count = 3 + seed % 3

    history = []
    for i in range(count):
        s = seed + i
        from_idx, to_idx = landmark_indices(s, len(landmarks))
        history.append(
            FlightRecord(
                time=HISTORY_TIMES[i % len(HISTORY_TIMES)],
                origin=landmarks[from_idx],
                destination=landmarks[to_idx],
                duration=HISTORY_DURATIONS[(s + i) % len(HISTORY_DURATIONS)],
                status=HISTORY_STATUSES[(s + i) % len(HISTORY_STATUSES)],
            )
        )
    return history
