"""Timer and scheduler utilities for the simulation core.

Every periodic or delayed behaviour (progress ticks, charging ticks, offer
notifications, cooldowns) is registered on a ``Scheduler`` and cancelled through
the returned ``CancelToken``.

Components:
    Timer: Countdown timer with duration management and completion detection
    Scheduler: Abstract scheduling interface
    VirtualScheduler: Deterministic virtual-time scheduler for tests
    RealtimeScheduler: Wall-clock paced scheduler for the terminal front-end
    CancelToken: Handle used to cancel a scheduled job

Example:
    >>> from skyfleet.timer import VirtualScheduler
    >>> from skyfleet.unit import Second
    >>> scheduler = VirtualScheduler()
    >>> fired = []
    >>> _ = scheduler.call_later(Second(5), lambda: fired.append(True))
    >>> scheduler.advance(Second(5))
    >>> fired
    [True]
"""

from .scheduler import CancelToken, RealtimeScheduler, Scheduler, VirtualScheduler
from .timer import Timer

__all__ = ["Timer", "Scheduler", "VirtualScheduler", "RealtimeScheduler", "CancelToken"]
