"""Static fleet configuration."""

from .cities import (
    ABU_DHABI,
    CITIES,
    DRIVER_DRONE,
    LONDON,
    PARIS,
    City,
    DroneConfig,
    all_drones,
    create_city_drones,
    get_city,
)

__all__ = [
    "City",
    "DroneConfig",
    "CITIES",
    "LONDON",
    "ABU_DHABI",
    "PARIS",
    "DRIVER_DRONE",
    "all_drones",
    "create_city_drones",
    "get_city",
]
