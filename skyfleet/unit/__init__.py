"""Typed quantities for the fleet simulation core.

The simulation keeps every interval, delay and distance in a unit class so that
a tick of ``Millisecond(500)`` can never be added to a ``Kilometer(3)`` by
mistake. Values are stored in SI scale and converted with ``to()``.

Unit Families:
    - Time: Second (root), Millisecond, Minute
    - Distance: Meter (root), Kilometer

Example:
    >>> from skyfleet.unit import Millisecond, Second
    >>> cooldown = Second(10)
    >>> tick = Millisecond(500)
    >>> cooldown / tick
    20.0
"""

from .unit_base import Unit
from .unit_distance import Kilometer, Meter
from .unit_float import UnitFloat
from .unit_time import Millisecond, Minute, Second, Time

__all__ = [
    "Unit",
    "UnitFloat",
    "Meter",
    "Kilometer",
    "Second",
    "Millisecond",
    "Minute",
    "Time",
]
