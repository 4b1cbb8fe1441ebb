"""Fleet dashboard state container.

``FleetDashboard`` owns everything the operator view needs: the active city,
battery overrides, the map viewport, selection and hover, and the table
filters. The UI layer reads its derived views and forwards gestures as commands.
Nothing here renders.

The roster is never cached. Every read of ``drones`` starts from the static
city configuration, applies the battery overrides and re-enriches delivering
drones with their deterministic trips.

Example:
    >>> dashboard = FleetDashboard(MemoryStorage(), scheduler=VirtualScheduler())
    >>> dashboard.select_drone("LON-DR-001")
    >>> dashboard.viewport.zoom
    13.0
    >>> dashboard.deselect_drone()
    >>> dashboard.viewport.zoom
    12.5
"""

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, fields
import logging

from skyfleet.config import INITIAL_ZOOM_OFFSET, PROGRESS_TICK, ZOOM_INCREMENT
from skyfleet.data import CITIES, City
from skyfleet.energy import apply_drain, clamp_battery
from skyfleet.geo import Bounds, Coordinate, compute_bounds
from skyfleet.mission import enrich_drones
from skyfleet.storage import BatteryOverrideStore, StoragePort
from skyfleet.timer import Scheduler
from skyfleet.unit import Time
from skyfleet.vehicles import Drone, DroneCategory

from .progress import ProgressClock, ProgressTiming

logger = logging.getLogger(__name__)


@dataclass
class Viewport:
    """Map camera state.

    Attributes:
        longitude (float): Camera centre longitude.
        latitude (float): Camera centre latitude.
        zoom (float): Zoom level.
        bounds (Bounds | None): Region the camera was last fitted to.
    """

    longitude: float
    latitude: float
    zoom: float
    bounds: Bounds | None = None


@dataclass
class CategoryFilter:
    """Independent visibility bits for the three table categories."""

    active: bool = True
    ready: bool = True
    low_bat: bool = True

    _NAMES = {
        "active": "active",
        "ready": "ready",
        "lowBat": "low_bat",
        "low_bat": "low_bat",
    }

    def allows(self, category: DroneCategory) -> bool:
        if category is DroneCategory.ACTIVE:
            return self.active
        if category is DroneCategory.LOW_BAT:
            return self.low_bat
        return self.ready

    def toggle(self, name: str) -> bool:
        """Flip one bit and return its new value.

        Raises:
            ValueError: If ``name`` is not a category.
        """
        attr = self._NAMES.get(name)
        if attr is None:
            msg = f"Unknown category: {name}"
            raise ValueError(msg)
        value = not getattr(self, attr)
        setattr(self, attr, value)
        return value

    def as_dict(self) -> dict[str, bool]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


class FleetDashboard:
    """State container behind the operator fleet view.

    Args:
        storage (StoragePort): Backend holding battery overrides.
        cities (Iterable[City]): Selectable cities, the first one active.
        scheduler (Scheduler | None): Enables trip animation. Without it every
            delivering drone stays at progress 0.
        tick (Time): Progress tick period.
    """

    def __init__(
        self,
        storage: StoragePort,
        cities: Iterable[City] = CITIES,
        scheduler: Scheduler | None = None,
        tick: Time = PROGRESS_TICK,
    ):
        self._cities = {city.id: city for city in cities}
        if not self._cities:
            msg = "FleetDashboard needs at least one city"
            raise ValueError(msg)

        self._active_city_id = next(iter(self._cities))
        self._store = BatteryOverrideStore(storage)
        self._overrides = self._store.load()
        self._unsubscribe = self._store.subscribe(self._on_overrides_changed)

        city = self.active_city
        self.viewport = Viewport(city.center.lng, city.center.lat, city.zoom + INITIAL_ZOOM_OFFSET)
        self.selected_id: str | None = None
        self.hovered_id: str | None = None
        self.category_filter = CategoryFilter()
        self.critical_battery_filter = False
        self.table_revealed = False
        self._pre_selection_zoom: float | None = None

        self._clock = (
            ProgressClock(scheduler, tick, ProgressTiming.DISTANCE, on_complete=self._on_trip_complete)
            if scheduler is not None
            else None
        )
        self._sync_clock()

    # -------------------------------- Views --------------------------------

    @property
    def cities(self) -> list[City]:
        return list(self._cities.values())

    @property
    def active_city(self) -> City:
        return self._cities[self._active_city_id]

    @property
    def overrides(self) -> dict[str, int]:
        return dict(self._overrides)

    @property
    def drones(self) -> list[Drone]:
        """Active roster with overrides applied and trips attached."""
        return enrich_drones(self._apply_override(drone) for drone in self.active_city.drones)

    @property
    def displayed_drones(self) -> list[Drone]:
        """Roster filtered by the category bits and the critical battery filter."""
        return [drone for drone in self.drones if self._is_displayed(drone)]

    @property
    def sorted_displayed_drones(self) -> list[Drone]:
        """Displayed drones ordered active, low battery, then ready."""
        return sorted(self.displayed_drones, key=lambda drone: drone.category.rank)

    @property
    def category_counts(self) -> dict[DroneCategory, int]:
        counts = Counter(drone.category for drone in self.drones)
        return {category: counts.get(category, 0) for category in DroneCategory}

    @property
    def selected_drone(self) -> Drone | None:
        return self._find(self.displayed_drones, self.selected_id)

    @property
    def hovered_drone(self) -> Drone | None:
        return self._find(self.drones, self.hovered_id)

    @property
    def progress_map(self) -> dict[str, float]:
        return self._clock.progress_map if self._clock else {}

    def position_of(self, drone: Drone) -> Coordinate:
        if self._clock is None:
            return drone.coordinates.as_pair()
        return self._clock.position_of(drone)

    def bearing_of(self, drone: Drone) -> float:
        return self._clock.bearing_of(drone) if self._clock else 0.0

    # -------------------------------- Commands --------------------------------

    def select_city(self, city_id: str) -> None:
        """Switch roster and fit the viewport to the new fleet."""
        city = self._cities.get(city_id)
        if city is None:
            logger.debug("Ignoring unknown city %s", city_id)
            return
        if city_id == self._active_city_id:
            return

        self._active_city_id = city_id
        self.selected_id = None
        self.hovered_id = None
        self._pre_selection_zoom = None

        bounds = compute_bounds(self.drones)
        if bounds is None:
            self.viewport = Viewport(city.center.lng, city.center.lat, city.zoom)
        else:
            center = bounds.center
            self.viewport = Viewport(center.lng, center.lat, city.zoom, bounds)
        logger.info("Switched to %s (%d drones)", city.name, len(city.drones))
        self._sync_clock()

    def handle_map_load(self) -> None:
        """Settle the zoom on the city default and reveal the fleet table."""
        self.viewport.zoom = self.active_city.zoom
        self.table_revealed = True

    def select_drone(self, drone_id: str) -> None:
        """Centre on a displayed drone, zooming in on the first selection only."""
        drone = self._find(self.displayed_drones, drone_id)
        if drone is None:
            logger.debug("Ignoring selection of %s", drone_id)
            return

        if self.selected_id is None:
            self._pre_selection_zoom = self.viewport.zoom
            self.viewport.zoom += ZOOM_INCREMENT

        self.viewport.longitude, self.viewport.latitude = self.position_of(drone)
        self.selected_id = drone_id

    def deselect_drone(self) -> None:
        """Restore the pre-selection zoom and clear the selection."""
        if self._pre_selection_zoom is not None:
            self.viewport.zoom = self._pre_selection_zoom
        self._pre_selection_zoom = None
        self.selected_id = None

    def hover_drone(self, drone_id: str | None) -> None:
        self.hovered_id = drone_id if self._find(self.drones, drone_id) else None

    def toggle_category(self, name: str) -> None:
        """Flip one of ``active``, ``ready`` or ``lowBat``.

        Raises:
            ValueError: If ``name`` is not a category.
        """
        self.category_filter.toggle(name)
        self._enforce_selection()

    def set_critical_battery_filter(self, enabled: bool) -> None:
        self.critical_battery_filter = enabled
        self._enforce_selection()

    def toggle_critical_battery_filter(self) -> None:
        self.set_critical_battery_filter(not self.critical_battery_filter)

    def update_battery(self, drone_id: str, level: float) -> None:
        """Override one drone's battery and persist it.

        Unknown ids are ignored. The level is clamped to [0, 100].
        """
        if not any(drone.id == drone_id for city in self._cities.values() for drone in city.drones):
            logger.debug("Ignoring battery update for unknown drone %s", drone_id)
            return

        clamped = clamp_battery(level)
        self._overrides = {**self._overrides, drone_id: clamped}
        self._overrides.update(self._store.save(drone_id, clamped))
        self._after_roster_change()

    def reset_batteries(self) -> None:
        """Drop every override, reverting to the configured levels."""
        self._overrides = {}
        self._store.clear()
        self._after_roster_change()

    def close(self) -> None:
        """Stop the progress tick and detach from the override store."""
        self._unsubscribe()
        if self._clock is not None:
            self._clock.close()

    # -------------------------------- Internals --------------------------------

    def _apply_override(self, drone: Drone) -> Drone:
        level = self._overrides.get(drone.id)
        return drone if level is None else drone.with_battery(level)

    def _is_displayed(self, drone: Drone) -> bool:
        if not self.category_filter.allows(drone.category):
            return False
        return drone.is_critical_battery or not self.critical_battery_filter

    @staticmethod
    def _find(drones: list[Drone], drone_id: str | None) -> Drone | None:
        if drone_id is None:
            return None
        return next((drone for drone in drones if drone.id == drone_id), None)

    def _enforce_selection(self) -> None:
        if self.selected_id is not None and self.selected_drone is None:
            logger.debug("Selection %s no longer displayed", self.selected_id)
            self.deselect_drone()

    def _sync_clock(self) -> None:
        if self._clock is not None:
            self._clock.sync(drone for drone in self.drones if drone.is_delivering)

    def _after_roster_change(self) -> None:
        self._sync_clock()
        self._enforce_selection()

    def _on_overrides_changed(self, levels: dict[str, int]) -> None:
        self._overrides = levels
        self._after_roster_change()

    def _on_trip_complete(self, drone: Drone) -> None:
        current = self._find(self.drones, drone.id) or drone
        trip = current.trip or drone.trip
        if trip is None:
            return
        drained = apply_drain(current.battery, trip.origin, trip.destination)
        logger.info("%s landed, battery %d%% -> %d%%", drone.id, current.battery, drained)
        self.update_battery(drone.id, drained)
