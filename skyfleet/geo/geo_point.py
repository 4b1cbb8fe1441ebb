"""Geographic points and named places.

Coordinates are plain decimal degrees. Distances between points use the WGS84
ellipsoid through pyproj, which is what the distance based progress timing
relies on. The battery drain model deliberately uses a flat-earth estimate
instead (see ``skyfleet.energy``).
"""

from dataclasses import dataclass

from pyproj import Geod

from skyfleet.unit import Meter

# WGS84 geodesic calculator for accurate Earth surface calculations
_WGS84 = Geod(ellps="WGS84")


@dataclass(frozen=True)
class GeoPoint:
    """A geographic point in decimal degrees.

    Attributes:
        lat (float): Latitude, positive north.
        lng (float): Longitude, positive east.

    Example:
        >>> london = GeoPoint(51.5074, -0.1276)
        >>> paris = GeoPoint(48.8566, 2.3522)
        >>> print(f"{london.distance_to(paris).to(Kilometer):.0f} km")
        344 km
    """

    lat: float
    lng: float

    def distance_to(self, other: "GeoPoint") -> Meter:
        """Geodesic distance to another point on the WGS84 ellipsoid.

        Args:
            other (GeoPoint): Target point.

        Returns:
            Meter: Distance along Earth's surface.
        """
        _, _, dist = _WGS84.inv(self.lng, self.lat, other.lng, other.lat)
        return Meter(dist)

    def offset(self, d_lat: float, d_lng: float) -> "GeoPoint":
        """Return a new point shifted by the given degree deltas."""
        return GeoPoint(self.lat + d_lat, self.lng + d_lng)

    def as_pair(self) -> tuple[float, float]:
        """Return ``(lng, lat)``, the order map renderers expect."""
        return (self.lng, self.lat)

    def __str__(self) -> str:
        return f"({self.lat:.4f}, {self.lng:.4f})"


@dataclass(frozen=True)
class Place(GeoPoint):
    """A point with a display name, used for trip endpoints."""

    name: str = ""

    @property
    def point(self) -> GeoPoint:
        return GeoPoint(self.lat, self.lng)

    def __str__(self) -> str:
        return self.name or super().__str__()
