"""Battery charge and drain model.

Battery levels are integer percentages in [0, 100]. Two operations change them:

* a lump-sum drain after a ride, proportional to the flat-earth distance
  between the trip endpoints and clamped to 5-20 points
* a charge session that ramps linearly to 100 over a fixed duration, updating
  on a fast tick

Example:
    >>> origin = GeoPoint(24.4419, 54.6479)
    >>> destination = GeoPoint(24.4292, 54.6183)
    >>> calculate_drain(origin, destination)
    11
    >>> apply_drain(100, origin, destination)
    89
"""

from collections.abc import Callable
import logging
import math

from skyfleet.config import (
    CHARGE_DURATION,
    CHARGE_TICK,
    DEFAULT_BATTERY,
    DRAIN_MAX,
    DRAIN_MIN,
    DRAIN_PER_KM,
    KM_PER_DEGREE,
)
from skyfleet.geo import GeoPoint
from skyfleet.seeding import round_half_up
from skyfleet.timer import CancelToken, Scheduler
from skyfleet.unit import Kilometer, Second, Time

logger = logging.getLogger(__name__)

FULL_BATTERY = 100
EMPTY_BATTERY = 0


def parse_battery(raw: object, default: int = DEFAULT_BATTERY) -> int:
    """Parse a stored battery value.

    Strings are parsed as decimal integers and numbers are rounded. Anything
    unparsable or outside [0, 100] yields ``default``.
    """
    if raw is None or isinstance(raw, bool):
        return default
    if isinstance(raw, str):
        try:
            value = int(raw.strip())
        except ValueError:
            return default
    elif isinstance(raw, int | float):
        if not math.isfinite(raw):
            return default
        value = round_half_up(raw)
    else:
        return default

    if EMPTY_BATTERY <= value <= FULL_BATTERY:
        return value
    return default


def clamp_battery(level: float) -> int:
    """Round half up, then clamp to [0, 100]."""
    return max(EMPTY_BATTERY, min(FULL_BATTERY, round_half_up(level)))


def flat_distance_km(origin: GeoPoint, destination: GeoPoint) -> Kilometer:
    """City scale distance estimate, one degree taken as 111 km on both axes."""
    d_lat = destination.lat - origin.lat
    d_lng = destination.lng - origin.lng
    return Kilometer(math.sqrt(d_lat * d_lat + d_lng * d_lng) * KM_PER_DEGREE)


def calculate_drain(origin: GeoPoint, destination: GeoPoint) -> int:
    """Battery points used by a ride between two points, 3 per km within [5, 20]."""
    km = flat_distance_km(origin, destination).to(Kilometer)
    return max(DRAIN_MIN, min(DRAIN_MAX, round_half_up(km * DRAIN_PER_KM)))


def apply_drain(level: int, origin: GeoPoint, destination: GeoPoint) -> int:
    """Battery left after a ride, never below zero."""
    return max(EMPTY_BATTERY, level - calculate_drain(origin, destination))


class ChargeSession:
    """Linear charge from ``start_level`` to 100 over ``duration``.

    Every tick computes ``round(start + (100 - start) * min(1, elapsed / duration))``
    and reports it through ``on_level``. The session stops itself on the first
    tick where the elapsed time reaches ``duration``, at exactly 100.

    Attributes:
        level (int): Last reported level.
        active (bool): True until the session finishes or is cancelled.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        start_level: int,
        on_level: Callable[[int], None],
        on_done: Callable[[], None] | None = None,
        duration: Time = CHARGE_DURATION,
        tick: Time = CHARGE_TICK,
    ):
        if float(duration) <= 0:
            msg = f"Charge duration must be positive, got {duration}"
            raise ValueError(msg)

        self._scheduler = scheduler
        self._start_level = clamp_battery(start_level)
        self._on_level = on_level
        self._on_done = on_done
        self._duration = duration
        self._started_at = scheduler.now()
        self.level = self._start_level
        self.active = True
        self._token: CancelToken | None = scheduler.schedule(tick, self._tick)
        logger.debug("Charging from %d%%", self._start_level)

    def cancel(self) -> None:
        """Stop charging and keep the last reported level."""
        if not self.active:
            return
        self._stop()
        logger.debug("Charging cancelled at %d%%", self.level)

    def _tick(self) -> None:
        elapsed: Second = self._scheduler.now() - self._started_at
        progress = min(1.0, elapsed / self._duration)
        self.level = round_half_up(self._start_level + (FULL_BATTERY - self._start_level) * progress)
        self._on_level(self.level)

        if progress >= 1.0:
            self._stop()
            logger.debug("Charging complete")
            if self._on_done is not None:
                self._on_done()

    def _stop(self) -> None:
        self.active = False
        if self._token is not None:
            self._token.cancel()
            self._token = None
