"""Trips, ride offers and the deterministic assignment generator.

Exports:
    Trip: Origin, destination and route of one ride
    RideOffer: Ride proposed to the simulated driver
    CompletedRide: Persisted record of a finished ride
    FlightRecord: Mock flight history entry
    assign_trip, enrich_drone, enrich_drones: Seeded trip enrichment
    generate_ride_offer: Seeded driver offers
    generate_mock_history: Seeded flight history
"""

from .assignment import (
    LANDMARKS,
    assign_trip,
    city_prefix,
    destination_offset,
    enrich_drone,
    enrich_drones,
    generate_mock_history,
    generate_ride_offer,
    landmark_indices,
    landmarks_for,
    trip_duration,
)
from .trip import CompletedRide, FlightRecord, RideOffer, Trip, format_timestamp, new_ride_id

__all__ = [
    "Trip",
    "RideOffer",
    "CompletedRide",
    "FlightRecord",
    "LANDMARKS",
    "assign_trip",
    "city_prefix",
    "destination_offset",
    "enrich_drone",
    "enrich_drones",
    "generate_mock_history",
    "generate_ride_offer",
    "landmark_indices",
    "landmarks_for",
    "trip_duration",
    "format_timestamp",
    "new_ride_id",
]
