"""Time units for scheduler intervals, delays and trip durations.

All time units are stored in seconds. The simulation mostly deals in
milliseconds (progress and charge ticks) and seconds (offer delays, cooldown,
trip durations).

Example:
    >>> Millisecond(500) == Second(0.5)
    True
    >>> str(Minute(1.5))
    '1.5 min'
"""

from __future__ import annotations

from .unit_float import UnitFloat


class Second(UnitFloat):
    """Time unit: Second (SI base unit for time)."""

    IS_FAMILY_ROOT = True
    SCALE_TO_SI = 1.0
    SYMBOL = "s"


class Millisecond(Second):
    """Time unit: Millisecond, used for scheduler ticks."""

    SCALE_TO_SI = 0.001
    SYMBOL = "ms"


class Minute(Second):
    """Time unit: Minute (60 seconds)."""

    SCALE_TO_SI = 60.0
    SYMBOL = "min"


Time = Second | Millisecond | Minute  # Type alias for any time unit
