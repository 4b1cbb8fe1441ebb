"""Route interpolation, fleet bounds and position along a route.

Routes are tuples of ``(lng, lat)`` pairs. They are recomputed every time a
drone is enriched, so everything here is pure and cheap.

Example:
    >>> route = interpolate_route(GeoPoint(24.4419, 54.6479), GeoPoint(24.4292, 54.6183))
    >>> len(route)
    16
    >>> interpolate_position(route, 0.0) == route[0]
    True
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
import math
from typing import Protocol

import numpy as np

from skyfleet.config import BOUNDS_MIN_SPAN, ROUTE_ARC, ROUTE_STEPS

from .geo_point import GeoPoint

Coordinate = tuple[float, float]
"""A ``(lng, lat)`` pair."""

Route = tuple[Coordinate, ...]

_DEGENERATE = 1e-9


class Located(Protocol):
    """Anything with a current coordinate and an optional route."""

    @property
    def coordinates(self) -> GeoPoint: ...

    @property
    def route(self) -> Route: ...


@dataclass(frozen=True)
class Bounds:
    """Axis aligned region in degrees."""

    min_lng: float
    min_lat: float
    max_lng: float
    max_lat: float

    @property
    def center(self) -> GeoPoint:
        return GeoPoint((self.min_lat + self.max_lat) / 2, (self.min_lng + self.max_lng) / 2)

    def as_pairs(self) -> tuple[Coordinate, Coordinate]:
        """Return ``((sw_lng, sw_lat), (ne_lng, ne_lat))``."""
        return ((self.min_lng, self.min_lat), (self.max_lng, self.max_lat))


def interpolate_route(origin: GeoPoint, destination: GeoPoint, steps: int = ROUTE_STEPS) -> Route:
    """Discretise the path from ``origin`` to ``destination`` into ``steps + 1`` points.

    Latitude and longitude are interpolated linearly, and latitude gets an extra
    ``sin(t * pi) * 0.002`` degrees so the path bulges into a visible arc. The
    arc is zero at both ends, so the first and last points are the endpoints.

    Args:
        origin (GeoPoint): Start of the route.
        destination (GeoPoint): End of the route.
        steps (int): Number of segments. Must be at least 1.

    Returns:
        Route: ``steps + 1`` ``(lng, lat)`` pairs.

    Raises:
        ValueError: If ``steps`` is smaller than 1.
    """
    if steps < 1:
        msg = f"Route needs at least one step, got {steps}"
        raise ValueError(msg)

    t = np.linspace(0.0, 1.0, steps + 1)
    lat = origin.lat + (destination.lat - origin.lat) * t + np.sin(t * np.pi) * ROUTE_ARC
    lng = origin.lng + (destination.lng - origin.lng) * t
    lat[0], lng[0] = origin.lat, origin.lng
    lat[-1], lng[-1] = destination.lat, destination.lng
    return tuple(zip(lng.tolist(), lat.tolist()))


def compute_bounds(drones: Iterable[Located]) -> Bounds | None:
    """Region covering every drone's coordinate and every point of its route.

    Each span is widened to at least ``BOUNDS_MIN_SPAN`` around its midpoint,
    so a single drone still yields a non-empty region.

    Returns:
        Bounds | None: The padded region, or None when ``drones`` is empty.
    """
    points: list[Coordinate] = []
    for drone in drones:
        points.append(drone.coordinates.as_pair())
        points.extend(drone.route)

    if not points:
        return None

    coords = np.asarray(points, dtype=float)
    min_lng, min_lat = coords.min(axis=0)
    max_lng, max_lat = coords.max(axis=0)

    lng_span = max(max_lng - min_lng, BOUNDS_MIN_SPAN)
    lat_span = max(max_lat - min_lat, BOUNDS_MIN_SPAN)
    lng_mid = (min_lng + max_lng) / 2
    lat_mid = (min_lat + max_lat) / 2

    return Bounds(
        min_lng=float(lng_mid - lng_span / 2),
        min_lat=float(lat_mid - lat_span / 2),
        max_lng=float(lng_mid + lng_span / 2),
        max_lat=float(lat_mid + lat_span / 2),
    )


def interpolate_position(route: Sequence[Coordinate], progress: float) -> Coordinate:
    """Position at ``progress`` along ``route``.

    Progress maps to the virtual index ``progress * (N - 1)`` and the position is
    interpolated between the points on either side of it.

    Returns:
        Coordinate: ``(lng, lat)``. ``(0, 0)`` for an empty route.
    """
    if not route:
        return (0.0, 0.0)
    if progress <= 0:
        return tuple(route[0])
    if progress >= 1:
        return tuple(route[-1])

    idx = progress * (len(route) - 1)
    lo = math.floor(idx)
    hi = min(math.ceil(idx), len(route) - 1)
    frac = idx - lo
    (lng0, lat0), (lng1, lat1) = route[lo], route[hi]
    return (lng0 + (lng1 - lng0) * frac, lat0 + (lat1 - lat0) * frac)


def route_bearing(route: Sequence[Coordinate], progress: float) -> float:
    """Heading in degrees from the current position to the next route point.

    0 is north and values grow clockwise, normalised to [0, 360). Routes with
    fewer than two points, and positions sitting on the next point, give 0.
    """
    if len(route) < 2:
        return 0.0

    clamped = min(max(progress, 0.0), 1.0)
    idx = clamped * (len(route) - 1)
    next_idx = min(math.floor(idx) + 1, len(route) - 1)
    lng, lat = interpolate_position(route, clamped)
    next_lng, next_lat = route[next_idx]

    d_lng = next_lng - lng
    d_lat = next_lat - lat
    if abs(d_lng) < _DEGENERATE and abs(d_lat) < _DEGENERATE:
        return 0.0
    return math.degrees(math.atan2(d_lng, d_lat)) % 360.0
