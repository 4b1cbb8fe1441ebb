"""Drone taxi entities.

Exports:
    Drone: Immutable drone snapshot with derived display attributes
    DroneStatus: Standby or delivering
    DroneCategory: Table category (active, low battery, ready)
    StatusDisplay: Status badge text and colour
    calculate_range: Seeded range banding by battery level
    capacity_for: Passenger seats for a drone name
"""

from .drone import (
    DELIVERING_COLOR,
    LOW_BATTERY_COLOR,
    STANDBY_COLOR,
    Drone,
    DroneCategory,
    DroneStatus,
    StatusDisplay,
    calculate_range,
    capacity_for,
)

__all__ = [
    "Drone",
    "DroneStatus",
    "DroneCategory",
    "StatusDisplay",
    "calculate_range",
    "capacity_for",
    "LOW_BATTERY_COLOR",
    "DELIVERING_COLOR",
    "STANDBY_COLOR",
]
