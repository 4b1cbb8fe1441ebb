"""Ride offer lifecycle of the single simulated driver.

The driver's drone cycles through offers on scheduler timers::

    IDLE -> OFFER_PENDING -> NOTIFIED -> ACCEPTED -> IN_FLIGHT -> COMPLETED -> COOLDOWN
                                 |                                              |
                                 +-> REJECTED -> IDLE     OFFER_PENDING <-------+

A fresh offer is shown after the notification delay. Rejecting waits a short
delay before the next offer. Accepting flies the offer's trip on a duration
timed progress clock, and on landing the battery is drained, the ride is
recorded, and a cooldown runs before the next offer. Charging is independent of
the offer cycle but refused while a ride is accepted or in flight.

Every timer is owned by the session and cancelled by ``close``.
"""

from collections.abc import Callable
from dataclasses import replace
from datetime import UTC, datetime
from enum import Enum, auto
import logging

from skyfleet.config import (
    CHARGE_DURATION,
    CHARGE_TICK,
    COOLDOWN_DELAY,
    NOTIFICATION_DELAY,
    PROGRESS_TICK,
    REJECT_DELAY,
)
from skyfleet.data import ABU_DHABI, DRIVER_DRONE
from skyfleet.energy import FULL_BATTERY, ChargeSession, apply_drain
from skyfleet.geo import Coordinate, GeoPoint
from skyfleet.mission import CompletedRide, RideOffer, generate_ride_offer, new_ride_id
from skyfleet.state import Action, StateMachine
from skyfleet.storage import CompletedRideStore, DriverBatteryStore, StoragePort
from skyfleet.timer import CancelToken, Scheduler
from skyfleet.unit import Time
from skyfleet.vehicles import Drone, DroneStatus

from .progress import ProgressClock, ProgressTiming

logger = logging.getLogger(__name__)


class RideState(Enum):
    IDLE = auto()
    OFFER_PENDING = auto()
    NOTIFIED = auto()
    ACCEPTED = auto()
    REJECTED = auto()
    IN_FLIGHT = auto()
    COMPLETED = auto()
    COOLDOWN = auto()


class DriverStatus(Enum):
    DRIVING = "driving"
    CHARGING = "charging"
    WAITING = "waiting"


RideListener = Callable[[RideState], None]

_ENGAGED = (RideState.ACCEPTED, RideState.IN_FLIGHT)


def _utc_now() -> datetime:
    return datetime.now(UTC)


class DriverSession:
    """Ride offer state machine for one driver drone.

    Args:
        scheduler (Scheduler): Drives offer delays, charging and trip progress.
        storage (StoragePort): Backend for the driver battery and ride history.
        driver (Drone): The driver's drone.
        center (GeoPoint): City centre that ride pickups are scattered around.
        wall_clock (Callable[[], datetime]): Source of ride timestamps.
        notification_delay (Time): Delay before a pending offer is shown.
        reject_delay (Time): Delay before a new offer follows a rejection.
        cooldown (Time): Delay before a new offer follows a completed ride.
        charge_duration (Time): Time to charge from any level to 100.
        charge_tick (Time): Charging update period.
        progress_tick (Time): Trip progress update period.

    Attributes:
        offer (RideOffer | None): Current offer, absent until ``start``.
        low_battery_alert (bool): Raised once per offer shown with an empty battery.
        last_completed_ride (CompletedRide | None): Most recent ride of this session.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        storage: StoragePort,
        driver: Drone = DRIVER_DRONE,
        center: GeoPoint = ABU_DHABI.center,
        wall_clock: Callable[[], datetime] = _utc_now,
        notification_delay: Time = NOTIFICATION_DELAY,
        reject_delay: Time = REJECT_DELAY,
        cooldown: Time = COOLDOWN_DELAY,
        charge_duration: Time = CHARGE_DURATION,
        charge_tick: Time = CHARGE_TICK,
        progress_tick: Time = PROGRESS_TICK,
    ):
        self._scheduler = scheduler
        self._driver = driver
        self._center = center
        self._wall_clock = wall_clock
        self._notification_delay = notification_delay
        self._reject_delay = reject_delay
        self._cooldown = cooldown
        self._charge_duration = charge_duration
        self._charge_tick = charge_tick

        self._battery_store = DriverBatteryStore(storage)
        self._rides = CompletedRideStore(storage)
        self._battery = self._battery_store.get()
        self._unsubscribe = self._battery_store.subscribe(self._on_battery_changed)

        self._clock = ProgressClock(scheduler, progress_tick, ProgressTiming.DURATION, on_complete=self._on_trip_complete)
        self._machine = StateMachine(
            RideState.IDLE,
            {
                RideState.IDLE: [Action(RideState.OFFER_PENDING, self._schedule_notification)],
                RideState.OFFER_PENDING: [Action(RideState.NOTIFIED, self._check_battery_alert)],
                RideState.NOTIFIED: [Action(RideState.ACCEPTED), Action(RideState.REJECTED)],
                RideState.ACCEPTED: [Action(RideState.IN_FLIGHT, self._launch)],
                RideState.REJECTED: [Action(RideState.IDLE)],
                RideState.IN_FLIGHT: [Action(RideState.COMPLETED)],
                RideState.COMPLETED: [Action(RideState.COOLDOWN, self._schedule_next_offer)],
                RideState.COOLDOWN: [Action(RideState.OFFER_PENDING, self._schedule_notification)],
            },
        )

        self.offer: RideOffer | None = None
        self.low_battery_alert = False
        self.last_completed_ride: CompletedRide | None = None
        self._sequence = 0
        self._alerted_offer_id: str | None = None
        self._accepted_at: datetime | None = None
        self._flight: Drone | None = None
        self._charge: ChargeSession | None = None
        self._pending: CancelToken | None = None
        self._listeners: list[RideListener] = []
        self._closed = False

    # -------------------------------- Views --------------------------------

    @property
    def state(self) -> RideState:
        return self._machine.current

    @property
    def battery(self) -> int:
        return self._battery

    @property
    def is_charging(self) -> bool:
        return self._charge is not None and self._charge.active

    @property
    def needs_charge(self) -> bool:
        return self._battery <= 0

    @property
    def can_accept(self) -> bool:
        return self.state is RideState.NOTIFIED and not self.needs_charge

    @property
    def driver_drone(self) -> Drone | None:
        """The driver's drone while a ride is in flight, otherwise None."""
        if self._flight is None:
            return None
        return replace(self._flight, battery=self._battery)

    @property
    def progress(self) -> float:
        return self._clock.progress(self._driver.id) if self._flight else 0.0

    @property
    def position(self) -> Coordinate:
        if self._flight is None:
            return self._driver.coordinates.as_pair()
        return self._clock.position_of(self._flight)

    @property
    def bearing(self) -> float:
        return self._clock.bearing_of(self._flight) if self._flight else 0.0

    @property
    def status(self) -> DriverStatus:
        if self._flight is not None:
            return DriverStatus.DRIVING
        if self.is_charging:
            return DriverStatus.CHARGING
        return DriverStatus.WAITING

    @property
    def waiting_label(self) -> str:
        if self.state is RideState.COOLDOWN:
            return "Preparing next ride"
        if self.state is RideState.NOTIFIED:
            return "Ride request pending"
        return "Waiting for rides"

    @property
    def completed_rides(self) -> list[CompletedRide]:
        return self._rides.rides()

    def add_listener(self, listener: RideListener) -> Callable[[], None]:
        """Call ``listener`` with every state entered. Returns a remover."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    # -------------------------------- Commands --------------------------------

    def start(self) -> bool:
        """Generate the first offer. Only valid while idle."""
        if self._closed or self.state is not RideState.IDLE:
            return False
        self._cancel_pending()
        self._new_offer()
        self._transition(RideState.OFFER_PENDING)
        return True

    def accept(self) -> bool:
        """Accept the shown offer. Refused unless notified with charge left."""
        if not self.can_accept:
            logger.debug("Accept refused in %s with battery %d%%", self.state.name, self._battery)
            return False
        self._accepted_at = self._wall_clock()
        self.low_battery_alert = False
        self._transition(RideState.ACCEPTED)
        self._transition(RideState.IN_FLIGHT)
        return True

    def reject(self) -> bool:
        """Decline the shown offer. A new offer follows after the reject delay."""
        if self.state is not RideState.NOTIFIED:
            return False
        self.low_battery_alert = False
        self._transition(RideState.REJECTED)
        self._transition(RideState.IDLE)
        self._pending = self._scheduler.call_later(self._reject_delay, self._offer_after_reject)
        return True

    def start_charging(self) -> bool:
        """Charge to 100. No-op while charging, when full, or during a ride."""
        if self._closed or self.is_charging or self._battery >= FULL_BATTERY or self.state in _ENGAGED:
            return False
        self._charge = ChargeSession(
            self._scheduler,
            self._battery,
            on_level=self._set_battery,
            on_done=self._on_charged,
            duration=self._charge_duration,
            tick=self._charge_tick,
        )
        return True

    def stop_charging(self) -> bool:
        """Stop charging, keeping the last level reached."""
        if not self.is_charging:
            return False
        self._charge.cancel()
        self._charge = None
        return True

    def dismiss_low_battery_alert(self) -> None:
        self.low_battery_alert = False

    def close(self) -> None:
        """Cancel every timer, the charge session and the trip track."""
        self._closed = True
        self._cancel_pending()
        self.stop_charging()
        self._clock.close()
        self._unsubscribe()

    # -------------------------------- Transitions --------------------------------

    def _transition(self, state: RideState) -> None:
        self._machine.request_transition(state)
        logger.debug("Driver %s -> %s", self._driver.id, state.name)
        for listener in list(self._listeners):
            listener(state)

    def _new_offer(self) -> None:
        self.offer = generate_ride_offer(self._driver, self._sequence, self._center)
        self._sequence += 1
        self.low_battery_alert = False

    def _schedule_notification(self) -> None:
        self._pending = self._scheduler.call_later(self._notification_delay, self._notify)

    def _notify(self) -> None:
        self._pending = None
        self._transition(RideState.NOTIFIED)

    def _check_battery_alert(self) -> None:
        if self.offer is None or not self.needs_charge:
            return
        if self._alerted_offer_id != self.offer.id:
            self._alerted_offer_id = self.offer.id
            self.low_battery_alert = True
            logger.info("Battery empty, charge before accepting %s", self.offer.id)

    def _offer_after_reject(self) -> None:
        self._pending = None
        if self.state is RideState.IDLE:
            self._new_offer()
            self._transition(RideState.OFFER_PENDING)

    def _launch(self) -> None:
        if self.is_charging:
            self.stop_charging()
        trip = self.offer.trip
        self._flight = replace(
            self._driver,
            status=DroneStatus.DELIVERING,
            battery=self._battery,
            load=self.offer.passengers,
            eta=self.offer.eta,
            coordinates=trip.origin.point,
            trip=trip,
            trip_origin=trip.origin,
            trip_destination=trip.destination,
        )
        self._clock.sync([self._flight])
        logger.info("Ride %s: %s -> %s", self.offer.id, trip.origin.name, trip.destination.name)

    def _on_trip_complete(self, drone: Drone) -> None:
        trip = drone.trip
        self._set_battery(apply_drain(self._battery, trip.origin, trip.destination))

        completed_at = self._wall_clock()
        if self._accepted_at is not None and completed_at < self._accepted_at:
            completed_at = self._accepted_at
        ride = CompletedRide(
            id=new_ride_id(completed_at),
            drone_id=drone.id,
            drone_name=drone.name or drone.model,
            origin=trip.origin.name or "Origin",
            destination=trip.destination.name or "Destination",
            passengers=drone.load,
            completed_at=completed_at,
            eta=drone.eta,
        )
        self._rides.append(ride)
        self.last_completed_ride = ride

        self._clock.untrack(drone.id)
        self._flight = None
        self._transition(RideState.COMPLETED)
        self._transition(RideState.COOLDOWN)

    def _schedule_next_offer(self) -> None:
        self._pending = self._scheduler.call_later(self._cooldown, self._offer_after_cooldown)

    def _offer_after_cooldown(self) -> None:
        self._pending = None
        self._new_offer()
        self._transition(RideState.OFFER_PENDING)

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    # -------------------------------- Battery --------------------------------

    def _set_battery(self, level: int) -> None:
        self._battery = self._battery_store.set(level)
        self._battery_changed()

    def _on_battery_changed(self, level: int) -> None:
        self._battery = level
        self._battery_changed()

    def _battery_changed(self) -> None:
        if self.state is not RideState.NOTIFIED:
            return
        if self.needs_charge:
            self._check_battery_alert()
        else:
            self.low_battery_alert = False

    def _on_charged(self) -> None:
        self._charge = None
        logger.info("Driver drone fully charged")
