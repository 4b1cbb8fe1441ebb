"""Geographic points, routes and bounds for the fleet simulation.

Exports:
    GeoPoint: Decimal degree coordinate with geodesic distance
    Place: Named GeoPoint used for trip endpoints
    Bounds: Padded region covering a set of drones
    interpolate_route: Arc shaped route between two points
    compute_bounds: Region covering drones and their routes
    interpolate_position: Position at a progress value along a route
    route_bearing: Heading along a route at a progress value
"""

from .geo_point import GeoPoint, Place
from .route import (
    Bounds,
    Coordinate,
    Route,
    compute_bounds,
    interpolate_position,
    interpolate_route,
    route_bearing,
)

__all__ = [
    "GeoPoint",
    "Place",
    "Bounds",
    "Coordinate",
    "Route",
    "compute_bounds",
    "interpolate_position",
    "interpolate_route",
    "route_bearing",
]
