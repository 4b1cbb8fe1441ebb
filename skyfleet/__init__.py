"""skyfleet: simulation core of a drone taxi fleet dashboard.

Sub-packages:
    unit: Typed time and distance quantities
    state: Validated finite state machine
    timer: Countdown timers and schedulers
    geo: Points, routes and bounds
    mission: Trips, offers and deterministic assignment
    vehicles: Drone entity
    data: Static city configuration
    storage: Key-value storage and typed stores
    energy: Battery charge and drain
    simulator: Progress clock, fleet dashboard and driver session
"""

__version__ = "0.1.0"
