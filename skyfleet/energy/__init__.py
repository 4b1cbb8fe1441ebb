"""Battery model: parsing, drain after rides and timed charging.

Exports:
    ChargeSession: Scheduler driven linear charge to 100 %
    parse_battery: Tolerant parser for stored levels
    clamp_battery: Round and clamp to [0, 100]
    flat_distance_km: Flat-earth distance between two points
    calculate_drain: Battery points used by a ride
    apply_drain: Battery left after a ride
"""

from .battery import (
    EMPTY_BATTERY,
    FULL_BATTERY,
    ChargeSession,
    apply_drain,
    calculate_drain,
    clamp_battery,
    flat_distance_km,
    parse_battery,
)

__all__ = [
    "ChargeSession",
    "apply_drain",
    "calculate_drain",
    "clamp_battery",
    "flat_distance_km",
    "parse_battery",
    "FULL_BATTERY",
    "EMPTY_BATTERY",
]
