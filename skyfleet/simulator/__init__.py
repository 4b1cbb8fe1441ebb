"""Simulation sessions built on the scheduler.

Exports:
    ProgressClock: Per-drone trip progress with one-shot completion
    ProgressTiming: Distance or duration based progress increments
    FleetDashboard: Operator fleet view state container
    Viewport, CategoryFilter: Fleet view state records
    DriverSession: Single driver ride offer state machine
    RideState, DriverStatus: Driver session states
"""

from .driver import DriverSession, DriverStatus, RideState
from .fleet import CategoryFilter, FleetDashboard, Viewport
from .progress import ProgressClock, ProgressTiming, trip_ticks

__all__ = [
    "ProgressClock",
    "ProgressTiming",
    "trip_ticks",
    "FleetDashboard",
    "Viewport",
    "CategoryFilter",
    "DriverSession",
    "DriverStatus",
    "RideState",
]
