"""
Tests for the simulated driver's ride offer lifecycle.
"""

from datetime import UTC, datetime, timedelta
import json
import unittest

from skyfleet.config import COMPLETED_RIDES_KEY, DRIVER_BATTERY_KEY, DRIVER_DRONE_ID, PROGRESS_TICK
from skyfleet.data import ABU_DHABI
from skyfleet.energy import calculate_drain
from skyfleet.simulator import DriverSession, DriverStatus, ProgressTiming, RideState, trip_ticks
from skyfleet.storage import MemoryStorage
from skyfleet.timer import VirtualScheduler
from skyfleet.unit import Millisecond, Second

EPOCH = datetime(2025, 3, 14, 9, 0, tzinfo=UTC)


class DriverTestCase(unittest.TestCase):
    battery = None

    def setUp(self):
        self.scheduler = VirtualScheduler()
        self.storage = MemoryStorage()
        if self.battery is not None:
            self.storage.set(DRIVER_BATTERY_KEY, str(self.battery))
        self.session = self.make_session()
        self.states = []
        self.session.add_listener(self.states.append)

    def tearDown(self):
        self.session.close()

    def make_session(self, **kwargs):
        kwargs.setdefault("wall_clock", lambda: EPOCH + timedelta(seconds=float(self.scheduler.now())))
        return DriverSession(self.scheduler, self.storage, **kwargs)

    def notified(self):
        self.session.start()
        self.scheduler.advance(Second(5))
        self.assertIs(self.session.state, RideState.NOTIFIED)

    def fly(self):
        ticks = trip_ticks(self.session.offer.trip, PROGRESS_TICK, ProgressTiming.DURATION)
        self.scheduler.advance(Millisecond(500 * ticks))


class TestOfferCycle(DriverTestCase):
    """Test offers, rejection and the notification delay."""

    def test_initial_state(self):
        """Test a fresh session waits idle at full battery."""
        self.assertIs(self.session.state, RideState.IDLE)
        self.assertIsNone(self.session.offer)
        self.assertEqual(self.session.battery, 100)
        self.assertIs(self.session.status, DriverStatus.WAITING)
        self.assertEqual(self.session.waiting_label, "Waiting for rides")
        self.assertEqual(self.session.position, ABU_DHABI.center.as_pair())

    def test_offer_shown_after_delay(self):
        """Test the offer is shown five seconds after start."""
        self.assertTrue(self.session.start())
        self.assertIs(self.session.state, RideState.OFFER_PENDING)
        self.assertIsNotNone(self.session.offer)
        self.scheduler.advance(Millisecond(4900))
        self.assertIs(self.session.state, RideState.OFFER_PENDING)
        self.scheduler.advance(Millisecond(100))
        self.assertIs(self.session.state, RideState.NOTIFIED)
        self.assertEqual(self.session.waiting_label, "Ride request pending")
        self.assertEqual(self.states, [RideState.OFFER_PENDING, RideState.NOTIFIED])

    def test_start_only_when_idle(self):
        """Test start is refused once an offer is pending."""
        self.session.start()
        self.assertFalse(self.session.start())

    def test_accept_refused_before_notified(self):
        """Test an offer cannot be accepted or rejected while pending."""
        self.session.start()
        self.assertFalse(self.session.accept())
        self.assertFalse(self.session.reject())
        self.assertIs(self.session.state, RideState.OFFER_PENDING)

    def test_reject_brings_new_offer(self):
        """Test rejecting waits two seconds, then offers a different ride."""
        self.notified()
        first = self.session.offer
        self.assertTrue(self.session.reject())
        self.assertIs(self.session.state, RideState.IDLE)

        self.scheduler.advance(Millisecond(1900))
        self.assertIs(self.session.state, RideState.IDLE)
        self.scheduler.advance(Millisecond(100))
        self.assertIs(self.session.state, RideState.OFFER_PENDING)
        self.assertNotEqual(self.session.offer.id, first.id)

        self.scheduler.advance(Second(5))
        self.assertIs(self.session.state, RideState.NOTIFIED)
        self.assertEqual(
            self.states,
            [
                RideState.OFFER_PENDING,
                RideState.NOTIFIED,
                RideState.REJECTED,
                RideState.IDLE,
                RideState.OFFER_PENDING,
                RideState.NOTIFIED,
            ],
        )

    def test_remove_listener(self):
        """Test removed listeners stop receiving states."""
        seen = []
        remove = self.session.add_listener(seen.append)
        remove()
        self.session.start()
        self.assertEqual(seen, [])

    def test_close_cancels_timers(self):
        """Test close cancels the pending notification."""
        self.session.start()
        self.session.close()
        self.assertEqual(self.scheduler.pending, 0)
        self.scheduler.advance(Second(10))
        self.assertIs(self.session.state, RideState.OFFER_PENDING)
        self.assertFalse(self.session.start_charging())


class TestRide(DriverTestCase):
    """Test accepted rides from launch to cooldown."""

    def test_accept_launches(self):
        """Test accepting puts the driver drone in flight from the pickup."""
        self.notified()
        offer = self.session.offer
        self.assertTrue(self.session.accept())
        self.assertIs(self.session.state, RideState.IN_FLIGHT)
        self.assertIs(self.session.status, DriverStatus.DRIVING)

        drone = self.session.driver_drone
        self.assertEqual(drone.id, DRIVER_DRONE_ID)
        self.assertTrue(drone.is_delivering)
        self.assertEqual(drone.load, offer.passengers)
        self.assertEqual(drone.eta, offer.eta)
        self.assertEqual(self.session.position, offer.trip.route[0])
        self.assertEqual(self.session.progress, 0.0)

    def test_flight_progress(self):
        """Test progress grows while in flight."""
        self.notified()
        self.session.accept()
        self.scheduler.advance(Second(5))
        self.assertGreater(self.session.progress, 0.0)
        self.assertLess(self.session.progress, 1.0)
        self.assertIs(self.session.state, RideState.IN_FLIGHT)

    def test_landing(self):
        """Test landing drains the battery, records the ride and cools down."""
        self.notified()
        offer = self.session.offer
        self.session.accept()
        self.fly()

        drain = calculate_drain(offer.trip.origin, offer.trip.destination)
        self.assertIs(self.session.state, RideState.COOLDOWN)
        self.assertEqual(self.session.battery, 100 - drain)
        self.assertEqual(self.storage.get(DRIVER_BATTERY_KEY), str(100 - drain))
        self.assertIsNone(self.session.driver_drone)
        self.assertIs(self.session.status, DriverStatus.WAITING)
        self.assertEqual(self.session.waiting_label, "Preparing next ride")
        self.assertEqual(self.states[-2:], [RideState.COMPLETED, RideState.COOLDOWN])

        (ride,) = self.session.completed_rides
        self.assertEqual(ride, self.session.last_completed_ride)
        self.assertEqual(ride.drone_id, DRIVER_DRONE_ID)
        self.assertEqual(ride.drone_name, "Skyrunner X2")
        self.assertEqual(ride.origin, offer.trip.origin.name)
        self.assertEqual(ride.destination, offer.trip.destination.name)
        self.assertEqual(ride.passengers, offer.passengers)
        self.assertEqual(ride.eta, offer.eta)
        self.assertGreater(ride.completed_at, EPOCH + timedelta(seconds=5))
        self.assertEqual(len(json.loads(self.storage.get(COMPLETED_RIDES_KEY))), 1)

    def test_cooldown_then_next_offer(self):
        """Test a new offer follows ten seconds after landing."""
        self.notified()
        first = self.session.offer
        self.session.accept()
        self.fly()

        self.scheduler.advance(Millisecond(9900))
        self.assertIs(self.session.state, RideState.COOLDOWN)
        self.scheduler.advance(Millisecond(100))
        self.assertIs(self.session.state, RideState.OFFER_PENDING)
        self.assertNotEqual(self.session.offer.id, first.id)
        self.scheduler.advance(Second(5))
        self.assertIs(self.session.state, RideState.NOTIFIED)

    def test_completion_never_before_acceptance(self):
        """Test a wall clock running backwards still orders the timestamps."""
        self.session.close()
        times = iter([EPOCH, EPOCH - timedelta(minutes=5)])
        self.session = self.make_session(wall_clock=lambda: next(times))
        self.notified()
        self.session.accept()
        self.fly()
        self.assertEqual(self.session.last_completed_ride.completed_at, EPOCH)

    def test_rides_accumulate(self):
        """Test two rides are kept newest first."""
        for _ in range(2):
            self.scheduler.advance(Second(10))
            if self.session.state is RideState.IDLE:
                self.session.start()
            self.scheduler.advance(Second(5))
            self.session.accept()
            self.fly()
        rides = self.session.completed_rides
        self.assertEqual(len(rides), 2)
        self.assertGreater(rides[0].completed_at, rides[1].completed_at)


class TestCharging(DriverTestCase):
    """Test charging the driver drone."""

    battery = 50

    def test_charges_to_full(self):
        """Test the battery ramps to 100 over five seconds."""
        self.assertTrue(self.session.start_charging())
        self.assertFalse(self.session.start_charging())
        self.scheduler.advance(Second(1))
        self.assertEqual(self.session.battery, 60)
        self.assertEqual(self.storage.get(DRIVER_BATTERY_KEY), "60")
        self.assertIs(self.session.status, DriverStatus.CHARGING)

        self.scheduler.advance(Second(4))
        self.assertEqual(self.session.battery, 100)
        self.assertFalse(self.session.is_charging)
        self.assertFalse(self.session.start_charging())

    def test_stop_keeps_level(self):
        """Test stopping keeps the level reached."""
        self.session.start_charging()
        self.scheduler.advance(Second(2))
        self.assertTrue(self.session.stop_charging())
        self.assertFalse(self.session.stop_charging())
        self.scheduler.advance(Second(5))
        self.assertEqual(self.session.battery, 70)

    def test_refused_in_flight(self):
        """Test charging cannot start during a ride."""
        self.notified()
        self.session.accept()
        self.assertFalse(self.session.start_charging())

    def test_accept_stops_charging(self):
        """Test accepting a ride ends the charge session."""
        self.session.close()
        self.session = self.make_session(charge_duration=Second(20))
        self.session.start()
        self.session.start_charging()
        self.scheduler.advance(Second(5))
        self.assertTrue(self.session.is_charging)

        level = self.session.battery
        self.assertEqual(level, 63)
        self.session.accept()
        self.assertFalse(self.session.is_charging)
        self.scheduler.advance(Second(5))
        self.assertEqual(self.session.battery, level)

    def test_external_battery_write(self):
        """Test another writer's battery change is picked up."""
        self.storage.external_write(DRIVER_BATTERY_KEY, "42")
        self.assertEqual(self.session.battery, 42)


class TestEmptyBattery(DriverTestCase):
    """Test offers shown with an empty battery."""

    battery = 0

    def test_alert_and_refusal(self):
        """Test an empty battery raises the alert and blocks acceptance."""
        self.notified()
        self.assertTrue(self.session.needs_charge)
        self.assertTrue(self.session.low_battery_alert)
        self.assertFalse(self.session.can_accept)
        self.assertFalse(self.session.accept())
        self.assertIs(self.session.state, RideState.NOTIFIED)

    def test_alert_once_per_offer(self):
        """Test a dismissed alert is not raised again for the same offer."""
        self.notified()
        self.session.dismiss_low_battery_alert()
        self.storage.external_write(DRIVER_BATTERY_KEY, "0")
        self.assertFalse(self.session.low_battery_alert)

    def test_charging_clears_alert(self):
        """Test charge gained while notified allows acceptance."""
        self.notified()
        self.session.start_charging()
        self.scheduler.advance(Millisecond(100))
        self.assertFalse(self.session.low_battery_alert)
        self.assertTrue(self.session.can_accept)
        self.assertTrue(self.session.accept())

    def test_reject_allowed(self):
        """Test an empty battery can still decline rides."""
        self.notified()
        self.assertTrue(self.session.reject())
        self.assertFalse(self.session.low_battery_alert)


if __name__ == "__main__":
    unittest.main()
