"""Distance units for trip lengths and range figures.

Distances are stored in meters. Trip distances and drone ranges are usually
quoted in kilometers.

Example:
    >>> trip = Kilometer(3.6)
    >>> float(trip)
    3600.0
    >>> trip.to(Kilometer)
    3.6
"""

from __future__ import annotations

from .unit_float import UnitFloat


class Meter(UnitFloat):
    """Distance unit: Meter (SI base unit for length)."""

    IS_FAMILY_ROOT = True
    SCALE_TO_SI = 1.0
    SYMBOL = "m"


class Kilometer(Meter):
    """Distance unit: Kilometer (1000 meters)."""

    SCALE_TO_SI = 1000.0
    SYMBOL = "km"
