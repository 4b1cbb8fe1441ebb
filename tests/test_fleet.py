"""
Tests for the fleet dashboard state container.
"""

import json
from pathlib import Path
import tempfile
import unittest
from unittest import mock

from skyfleet.config import BATTERY_LEVELS_KEY
from skyfleet.data import ABU_DHABI, LONDON, PARIS
from skyfleet.energy import calculate_drain
from skyfleet.simulator import FleetDashboard, trip_ticks
from skyfleet.storage import JsonFileStorage, MemoryStorage
from skyfleet.timer import VirtualScheduler
from skyfleet.unit import Millisecond, Second
from skyfleet.vehicles import LOW_BATTERY_COLOR, STANDBY_COLOR, DroneCategory

DELIVERING_LONDON = {"LON-DR-012", "LON-DR-013", "LON-DR-014", "LON-DR-015", "LON-DR-016", "LON-DR-017", "LON-DR-019"}


class TestFleetViews(unittest.TestCase):
    """Test roster, filters and counts."""

    def setUp(self):
        self.storage = MemoryStorage()
        self.dashboard = FleetDashboard(self.storage)

    def test_initial_state(self):
        """Test London is active and the camera starts slightly zoomed in."""
        self.assertEqual(self.dashboard.active_city, LONDON)
        self.assertEqual(self.dashboard.viewport.longitude, LONDON.center.lng)
        self.assertEqual(self.dashboard.viewport.latitude, LONDON.center.lat)
        self.assertEqual(self.dashboard.viewport.zoom, 12.5)
        self.assertFalse(self.dashboard.table_revealed)
        self.assertEqual([city.id for city in self.dashboard.cities], ["london", "abu-dhabi", "paris"])

    def test_category_counts(self):
        """Test counts cover every category."""
        self.assertEqual(
            self.dashboard.category_counts,
            {DroneCategory.ACTIVE: 6, DroneCategory.LOW_BAT: 4, DroneCategory.READY: 14},
        )

    def test_delivering_drones_have_trips(self):
        """Test every delivering drone is enriched on read."""
        delivering = [drone for drone in self.dashboard.drones if drone.is_delivering]
        self.assertEqual({drone.id for drone in delivering}, DELIVERING_LONDON)
        self.assertTrue(all(drone.trip is not None for drone in delivering))

    def test_toggle_category(self):
        """Test hiding low battery drones."""
        self.dashboard.toggle_category("lowBat")
        self.assertEqual(len(self.dashboard.displayed_drones), 20)
        self.assertFalse(self.dashboard.category_filter.as_dict()["low_bat"])
        self.dashboard.toggle_category("lowBat")
        self.assertEqual(len(self.dashboard.displayed_drones), 24)

    def test_all_categories_hidden(self):
        """Test hiding every category displays nothing."""
        for name in ("active", "ready", "lowBat"):
            self.dashboard.toggle_category(name)
        self.assertEqual(self.dashboard.displayed_drones, [])
        self.assertEqual(sum(self.dashboard.category_counts.values()), 24)

    def test_marker_color_follows_override(self):
        """Test LON-DR-001 turns from green to orange when forced to 18 %."""
        drone = next(d for d in self.dashboard.drones if d.id == "LON-DR-001")
        self.assertEqual(drone.marker_color, STANDBY_COLOR)
        self.dashboard.update_battery("LON-DR-001", 18)
        drone = next(d for d in self.dashboard.drones if d.id == "LON-DR-001")
        self.assertEqual(drone.marker_color, LOW_BATTERY_COLOR)

    def test_unknown_category(self):
        """Test unknown category names are rejected."""
        with self.assertRaises(ValueError):
            self.dashboard.toggle_category("charging")

    def test_critical_filter(self):
        """Test the critical filter keeps drones under 20 % only."""
        self.dashboard.set_critical_battery_filter(True)
        self.assertEqual({drone.id for drone in self.dashboard.displayed_drones}, {"LON-DR-018", "LON-DR-020"})
        self.dashboard.toggle_critical_battery_filter()
        self.assertEqual(len(self.dashboard.displayed_drones), 24)

    def test_filters_combine(self):
        """Test the critical filter intersects with the category bits."""
        self.dashboard.toggle_category("lowBat")
        self.dashboard.set_critical_battery_filter(True)
        self.assertEqual(self.dashboard.displayed_drones, [])

    def test_sorted_order(self):
        """Test active drones first, then low battery, then ready."""
        ranks = [drone.category.rank for drone in self.dashboard.sorted_displayed_drones]
        self.assertEqual(ranks, sorted(ranks))
        self.assertEqual(self.dashboard.sorted_displayed_drones[0].category, DroneCategory.ACTIVE)

    def test_hover(self):
        """Test hover resolves known drones only."""
        self.dashboard.hover_drone("LON-DR-005")
        self.assertEqual(self.dashboard.hovered_drone.id, "LON-DR-005")
        self.dashboard.hover_drone("PAR-DR-001")
        self.assertIsNone(self.dashboard.hovered_drone)
        self.dashboard.hover_drone(None)
        self.assertIsNone(self.dashboard.hovered_id)

    def test_no_scheduler_no_progress(self):
        """Test without a scheduler drones stay at their coordinates."""
        drone = self.dashboard.drones[16]
        self.assertEqual(self.dashboard.progress_map, {})
        self.assertEqual(self.dashboard.position_of(drone), drone.coordinates.as_pair())
        self.assertEqual(self.dashboard.bearing_of(drone), 0.0)

    def test_needs_a_city(self):
        """Test an empty city list is rejected."""
        with self.assertRaises(ValueError):
            FleetDashboard(self.storage, cities=[])


class TestSelectionAndViewport(unittest.TestCase):
    """Test selection, zoom and city switching."""

    def setUp(self):
        self.dashboard = FleetDashboard(MemoryStorage())

    def test_select_zooms_in_once(self):
        """Test the first selection zooms in and switching selection does not."""
        self.dashboard.select_drone("LON-DR-001")
        self.assertEqual(self.dashboard.viewport.zoom, 13.0)
        drone = self.dashboard.selected_drone
        self.assertEqual((self.dashboard.viewport.longitude, self.dashboard.viewport.latitude), drone.coordinates.as_pair())

        self.dashboard.select_drone("LON-DR-002")
        self.assertEqual(self.dashboard.viewport.zoom, 13.0)
        self.assertEqual(self.dashboard.selected_id, "LON-DR-002")

        self.dashboard.deselect_drone()
        self.assertEqual(self.dashboard.viewport.zoom, 12.5)
        self.assertIsNone(self.dashboard.selected_drone)

    def test_map_load(self):
        """Test map load settles on the city zoom and reveals the table."""
        self.dashboard.handle_map_load()
        self.assertEqual(self.dashboard.viewport.zoom, 12)
        self.assertTrue(self.dashboard.table_revealed)
        self.dashboard.select_drone("LON-DR-001")
        self.assertEqual(self.dashboard.viewport.zoom, 12.5)
        self.dashboard.deselect_drone()
        self.assertEqual(self.dashboard.viewport.zoom, 12)

    def test_select_hidden_or_unknown(self):
        """Test hidden and unknown drones cannot be selected."""
        self.dashboard.toggle_category("ready")
        self.dashboard.select_drone("LON-DR-001")
        self.dashboard.select_drone("XYZ")
        self.assertIsNone(self.dashboard.selected_id)
        self.assertEqual(self.dashboard.viewport.zoom, 12.5)

    def test_filter_clears_selection(self):
        """Test hiding the selected drone clears the selection and restores zoom."""
        self.dashboard.select_drone("LON-DR-001")
        self.dashboard.toggle_category("ready")
        self.assertIsNone(self.dashboard.selected_id)
        self.assertEqual(self.dashboard.viewport.zoom, 12.5)

    def test_critical_filter_keeps_critical_selection(self):
        """Test a critical drone stays selected under the critical filter."""
        self.dashboard.select_drone("LON-DR-018")
        self.dashboard.set_critical_battery_filter(True)
        self.assertEqual(self.dashboard.selected_id, "LON-DR-018")
        self.dashboard.update_battery("LON-DR-018", 80)
        self.assertIsNone(self.dashboard.selected_id)

    def test_select_city(self):
        """Test switching city fits the camera to the new fleet."""
        self.dashboard.select_drone("LON-DR-001")
        self.dashboard.hover_drone("LON-DR-002")
        self.dashboard.select_city("abu-dhabi")

        viewport = self.dashboard.viewport
        self.assertEqual(self.dashboard.active_city, ABU_DHABI)
        self.assertIsNone(self.dashboard.selected_id)
        self.assertIsNone(self.dashboard.hovered_id)
        self.assertEqual(viewport.zoom, ABU_DHABI.zoom)
        self.assertIsNotNone(viewport.bounds)
        self.assertEqual((viewport.longitude, viewport.latitude), viewport.bounds.center.as_pair())
        self.assertEqual(
            self.dashboard.category_counts,
            {DroneCategory.ACTIVE: 2, DroneCategory.LOW_BAT: 2, DroneCategory.READY: 6},
        )

        self.dashboard.select_drone("AUH-DR-001")
        self.dashboard.deselect_drone()
        self.assertEqual(self.dashboard.viewport.zoom, ABU_DHABI.zoom)

    def test_select_same_or_unknown_city(self):
        """Test no-op city selections leave the camera alone."""
        self.dashboard.select_drone("LON-DR-001")
        self.dashboard.select_city("london")
        self.dashboard.select_city("tokyo")
        self.assertEqual(self.dashboard.selected_id, "LON-DR-001")
        self.assertEqual(self.dashboard.viewport.zoom, 13.0)


class TestBatteryOverrides(unittest.TestCase):
    """Test operator battery overrides."""

    def setUp(self):
        self.storage = MemoryStorage()
        self.dashboard = FleetDashboard(self.storage)

    def drone(self, drone_id):
        return next(drone for drone in self.dashboard.drones if drone.id == drone_id)

    def test_update_battery(self):
        """Test overrides change the drone and persist."""
        self.dashboard.update_battery("LON-DR-001", 10)
        drone = self.drone("LON-DR-001")
        self.assertEqual(drone.battery, 10)
        self.assertEqual(drone.category, DroneCategory.LOW_BAT)
        self.assertEqual(json.loads(self.storage.get(BATTERY_LEVELS_KEY)), {"LON-DR-001": 10})

    def test_update_clamps(self):
        """Test levels are clamped into [0, 100]."""
        self.dashboard.update_battery("LON-DR-001", 150)
        self.dashboard.update_battery("LON-DR-002", -4)
        self.assertEqual(self.dashboard.overrides, {"LON-DR-001": 100, "LON-DR-002": 0})

    def test_unknown_drone_ignored(self):
        """Test unknown ids do not write anything."""
        self.dashboard.update_battery("LON-DR-999", 50)
        self.assertIsNone(self.storage.get(BATTERY_LEVELS_KEY))

    def test_other_city_drone(self):
        """Test drones of inactive cities can be overridden."""
        self.dashboard.update_battery("PAR-DR-009", 90)
        self.dashboard.select_city("paris")
        self.assertEqual(self.drone("PAR-DR-009").category, DroneCategory.READY)

    def test_overrides_survive_restart(self):
        """Test a new dashboard reads persisted overrides."""
        self.dashboard.update_battery("LON-DR-003", 33)
        restarted = FleetDashboard(self.storage)
        self.assertEqual(next(d for d in restarted.drones if d.id == "LON-DR-003").battery, 33)

    def test_external_write(self):
        """Test changes by another writer reach the dashboard."""
        self.storage.external_write(BATTERY_LEVELS_KEY, json.dumps({"LON-DR-004": 12}))
        self.assertEqual(self.drone("LON-DR-004").battery, 12)
        self.storage.external_write(BATTERY_LEVELS_KEY, None)
        self.assertEqual(self.drone("LON-DR-004").battery, 95)

    def test_reset(self):
        """Test reset reverts to configured levels."""
        self.dashboard.update_battery("LON-DR-001", 10)
        self.dashboard.reset_batteries()
        self.assertEqual(self.dashboard.overrides, {})
        self.assertEqual(self.drone("LON-DR-001").battery, 92)
        self.assertIsNone(self.storage.get(BATTERY_LEVELS_KEY))

    def test_unsaved_override_survives_refresh(self):
        """Test an override whose file write failed is kept for the session."""
        with tempfile.TemporaryDirectory() as tmp:
            storage = JsonFileStorage(Path(tmp) / "storage.json")
            dashboard = FleetDashboard(storage)
            with mock.patch("skyfleet.storage.file_storage.os.replace", side_effect=OSError("disk full")):
                with self.assertLogs("skyfleet.storage", level="WARNING"):
                    dashboard.update_battery("LON-DR-001", 40)
            self.assertEqual(dashboard.overrides, {"LON-DR-001": 40})

            self.assertEqual(storage.refresh(), [])
            self.assertEqual(dashboard.overrides, {"LON-DR-001": 40})
            self.assertEqual(next(d for d in dashboard.drones if d.id == "LON-DR-001").battery, 40)
            self.assertEqual(list(Path(tmp).iterdir()), [])
            dashboard.close()


class TestTripAnimation(unittest.TestCase):
    """Test trip progress and landing drain on the dashboard."""

    def setUp(self):
        self.storage = MemoryStorage()
        self.scheduler = VirtualScheduler()
        self.dashboard = FleetDashboard(self.storage, scheduler=self.scheduler)

    def tearDown(self):
        self.dashboard.close()

    def test_tracks_delivering_drones(self):
        """Test every delivering drone starts at 0."""
        self.assertEqual(self.dashboard.progress_map, {drone_id: 0.0 for drone_id in DELIVERING_LONDON})

    def test_city_switch_resyncs(self):
        """Test switching city tracks the new fleet."""
        self.scheduler.advance(Second(1))
        self.dashboard.select_city("paris")
        self.assertEqual(self.dashboard.progress_map, {"PAR-DR-007": 0.0, "PAR-DR-008": 0.0, "PAR-DR-010": 0.0})
        self.assertEqual({d.id for d in PARIS.drones if d.is_delivering}, set(self.dashboard.progress_map))

    def test_landing_drains_battery_once(self):
        """Test a landed drone loses battery by trip distance, once."""
        drone = next(d for d in self.dashboard.drones if d.id == "LON-DR-015")
        ticks = trip_ticks(drone.trip)
        self.scheduler.advance(Millisecond(500 * (ticks - 1)))
        self.assertLess(self.dashboard.progress_map["LON-DR-015"], 1.0)
        self.assertEqual(self.dashboard.overrides.get("LON-DR-015"), None)

        self.scheduler.advance(Millisecond(500))
        self.assertEqual(self.dashboard.progress_map["LON-DR-015"], 1.0)
        expected = 68 - calculate_drain(drone.trip.origin, drone.trip.destination)
        self.assertEqual(self.dashboard.overrides["LON-DR-015"], expected)

        self.scheduler.advance(Second(30))
        self.assertEqual(self.dashboard.overrides["LON-DR-015"], expected)
        self.assertEqual(self.dashboard.progress_map["LON-DR-015"], 1.0)

    def test_selection_follows_position(self):
        """Test selecting a flying drone centres on its interpolated position."""
        self.scheduler.advance(Second(1))
        drone = next(d for d in self.dashboard.drones if d.id == "LON-DR-012")
        self.dashboard.select_drone("LON-DR-012")
        position = self.dashboard.position_of(drone)
        self.assertNotEqual(position, drone.coordinates.as_pair())
        self.assertEqual((self.dashboard.viewport.longitude, self.dashboard.viewport.latitude), position)

    def test_close(self):
        """Test close cancels the progress tick."""
        self.dashboard.close()
        self.assertEqual(self.scheduler.pending, 0)


if __name__ == "__main__":
    unittest.main()
