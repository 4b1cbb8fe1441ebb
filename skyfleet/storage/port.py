"""Key-value storage port and the in-memory backend.

The simulation core persists three things (battery overrides, the driver's
battery and completed rides) through a tiny string key-value interface, the
same shape as browser local storage. Writers notify every subscriber with the
key and its new value (None on removal), which is how external updates reach
the fleet and driver read models.
"""

from collections.abc import Callable
import logging
from typing import Protocol

logger = logging.getLogger(__name__)

Listener = Callable[[str, str | None], None]
Unsubscribe = Callable[[], None]


class StorageError(Exception):
    """Raised by a backend that cannot read or write a value."""


class StoragePort(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...

    def subscribe(self, listener: Listener) -> Unsubscribe: ...


class ListenerRegistry:
    """Subscriber bookkeeping shared by the storage backends."""

    def __init__(self):
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Unsubscribe:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def notify(self, key: str, value: str | None) -> None:
        for listener in list(self._listeners):
            listener(key, value)


class MemoryStorage:
    """Dict backed storage. Every write notifies all subscribers."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})
        self._listeners = ListenerRegistry()

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
        self._listeners.notify(key, value)

    def remove(self, key: str) -> None:
        if self._data.pop(key, None) is not None:
            self._listeners.notify(key, None)

    def subscribe(self, listener: Listener) -> Unsubscribe:
        return self._listeners.subscribe(listener)

    def external_write(self, key: str, value: str | None) -> None:
        """Simulate another writer changing ``key``, then notify subscribers."""
        if value is None:
            self._data.pop(key, None)
        else:
            self._data[key] = value
        logger.debug("External write to %s", key)
        self._listeners.notify(key, value)
