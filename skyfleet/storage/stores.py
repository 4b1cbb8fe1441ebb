"""Typed stores over the key-value storage port.

Each store owns one key:

* ``BatteryOverrideStore``: JSON object of drone id to battery percentage
* ``DriverBatteryStore``: the driver drone's battery as a decimal string
* ``CompletedRideStore``: JSON array of completed rides, newest first on read

Reads never raise. Malformed values are logged and replaced by defaults. Write
failures are logged and swallowed, leaving the caller's in-memory state as the
source of truth for the rest of the session.
"""

from collections.abc import Callable
from datetime import datetime
import json
import logging

from skyfleet.config import BATTERY_LEVELS_KEY, COMPLETED_RIDES_KEY, DEFAULT_BATTERY, DRIVER_BATTERY_KEY
from skyfleet.energy import clamp_battery, parse_battery
from skyfleet.mission import CompletedRide

from .port import StorageError, StoragePort, Unsubscribe

logger = logging.getLogger(__name__)


class _KeyStore:
    key: str

    def __init__(self, storage: StoragePort):
        self.storage = storage

    def _read(self) -> str | None:
        try:
            return self.storage.get(self.key)
        except StorageError as e:
            logger.warning("Cannot read %s: %s", self.key, e)
            return None

    def _write(self, value: str) -> bool:
        try:
            self.storage.set(self.key, value)
        except StorageError as e:
            logger.warning("Cannot persist %s: %s", self.key, e)
            return False
        return True

    def _read_json(self, expected: type, default):
        raw = self._read()
        if not raw:
            return default
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("Malformed %s, using default: %s", self.key, e)
            return default
        if not isinstance(parsed, expected):
            logger.warning("Malformed %s, expected %s", self.key, expected.__name__)
            return default
        return parsed

    def clear(self) -> None:
        try:
            self.storage.remove(self.key)
        except StorageError as e:
            logger.warning("Cannot clear %s: %s", self.key, e)

    def _on_change(self, callback: Callable[[str | None], None]) -> Unsubscribe:
        def listener(key: str, value: str | None) -> None:
            if key == self.key:
                callback(value)

        return self.storage.subscribe(listener)


class BatteryOverrideStore(_KeyStore):
    """Per-drone battery levels set by the operator."""

    key = BATTERY_LEVELS_KEY

    def load(self) -> dict[str, int]:
        """Stored overrides. Entries with invalid levels are dropped."""
        parsed = self._read_json(dict, {})
        levels: dict[str, int] = {}
        for drone_id, raw in parsed.items():
            level = parse_battery(raw, default=-1)
            if level < 0:
                logger.warning("Dropping invalid battery override %s=%r", drone_id, raw)
                continue
            levels[str(drone_id)] = level
        return levels

    def save(self, drone_id: str, level: float) -> dict[str, int]:
        """Merge one override and persist the whole map.

        Returns:
            dict[str, int]: The merged map, even when the write failed.
        """
        levels = self.load()
        levels[drone_id] = clamp_battery(level)
        self._write(json.dumps(levels))
        return levels

    def subscribe(self, callback: Callable[[dict[str, int]], None]) -> Unsubscribe:
        """Call ``callback`` with the reloaded map whenever the key changes."""
        return self._on_change(lambda _value: callback(self.load()))


class DriverBatteryStore(_KeyStore):
    """Battery of the single simulated driver drone."""

    key = DRIVER_BATTERY_KEY

    def get(self) -> int:
        return parse_battery(self._read(), default=DEFAULT_BATTERY)

    def set(self, level: float) -> int:
        """Persist ``level``, clamped. Subscribers of the storage are notified."""
        clamped = clamp_battery(level)
        self._write(str(clamped))
        return clamped

    def subscribe(self, callback: Callable[[int], None]) -> Unsubscribe:
        return self._on_change(lambda value: callback(parse_battery(value, default=DEFAULT_BATTERY)))


class CompletedRideStore(_KeyStore):
    """Append-only history of the driver's completed rides.

    Growth is unbounded. Records that fail to parse are skipped on read.
    """

    key = COMPLETED_RIDES_KEY

    def rides(self) -> list[CompletedRide]:
        """All rides, newest first."""
        rides = []
        for entry in self._read_json(list, []):
            try:
                rides.append(CompletedRide.from_dict(entry))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping malformed ride record: %s", e)
        rides.sort(key=lambda ride: ride.completed_at, reverse=True)
        return rides

    def append(self, ride: CompletedRide) -> CompletedRide:
        rides = [ride, *self.rides()]
        self._write(json.dumps([r.to_dict() for r in rides], ensure_ascii=False))
        return ride

    def today(self, now: datetime | None = None) -> list[CompletedRide]:
        """Rides completed on the local calendar day of ``now``."""
        now = now or datetime.now().astimezone()
        local_tz = now.tzinfo
        return [ride for ride in self.rides() if ride.completed_at.astimezone(local_tz).date() == now.date()]
