"""Durable key-value storage and the typed fleet stores.

Exports:
    StoragePort: Protocol implemented by storage backends
    StorageError: Raised by a failing backend
    MemoryStorage: In-memory backend, also used by tests
    JsonFileStorage: JSON file backend for the terminal front-end
    BatteryOverrideStore, DriverBatteryStore, CompletedRideStore: Typed stores
"""

from .file_storage import JsonFileStorage
from .port import Listener, MemoryStorage, StorageError, StoragePort, Unsubscribe
from .stores import BatteryOverrideStore, CompletedRideStore, DriverBatteryStore

__all__ = [
    "StoragePort",
    "StorageError",
    "Listener",
    "Unsubscribe",
    "MemoryStorage",
    "JsonFileStorage",
    "BatteryOverrideStore",
    "DriverBatteryStore",
    "CompletedRideStore",
]
