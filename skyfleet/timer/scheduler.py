"""Cooperative schedulers driving every tick of the simulation.

The simulation core never touches wall-clock timers directly. Progress ticks,
charge ticks, offer notifications and cooldowns all go through a ``Scheduler``,
which hands back a ``CancelToken`` for each job. Owners cancel their tokens when
they stop or are closed, so no job outlives its session.

Two implementations are provided:

* ``VirtualScheduler`` keeps a virtual clock that only moves when ``advance`` is
  called. Tests use it to step through minutes of simulation deterministically.
* ``RealtimeScheduler`` sleeps the real gap before each step and is used by the
  terminal front-end. It can run faster than real time with ``speed``.

Both run everything on the calling thread. Jobs due at the same instant fire in
the order they were scheduled, and a job cancelled by an earlier callback in the
same instant does not fire.

Example:
    >>> scheduler = VirtualScheduler()
    >>> ticks = []
    >>> token = scheduler.schedule(Millisecond(500), lambda: ticks.append(scheduler.now()))
    >>> scheduler.advance(Second(2))
    >>> len(ticks)
    4
    >>> token.cancel()
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
import logging
import time

from skyfleet.unit import Second, Time

from .timer import Timer

logger = logging.getLogger(__name__)

_ZERO_TIME = Second(0.0)
_EPSILON = 1e-9


@dataclass(eq=False)
class _Job:
    timer: Timer
    interval: Time
    callback: Callable[[], None]
    repeat: bool
    order: int
    cancelled: bool = field(default=False)

    @property
    def due(self) -> bool:
        return float(self.timer.duration) <= _EPSILON


class CancelToken:
    """Handle returned for every scheduled job."""

    def __init__(self, job: _Job):
        self._job = job

    def cancel(self) -> None:
        """Stop the job. Cancelling twice is harmless."""
        self._job.cancelled = True

    @property
    def cancelled(self) -> bool:
        """True once the job was cancelled or, for one-shot jobs, has fired."""
        return self._job.cancelled


class Scheduler(ABC):
    """Abstract scheduler interface used by every timed component."""

    @abstractmethod
    def now(self) -> Second:
        """Return the current scheduler time."""

    @abstractmethod
    def schedule(self, interval: Time, callback: Callable[[], None]) -> CancelToken:
        """Run ``callback`` every ``interval`` until cancelled."""

    @abstractmethod
    def call_later(self, delay: Time, callback: Callable[[], None]) -> CancelToken:
        """Run ``callback`` once after ``delay``."""


class VirtualScheduler(Scheduler):
    """Scheduler on a virtual clock that moves only through ``advance``.

    Attributes:
        _now (Second): Current virtual time.
        _jobs (list[_Job]): Live jobs in scheduling order.
    """

    _now: Second
    _jobs: list[_Job]

    def __init__(self, start: Time = _ZERO_TIME):
        self._now = Second.from_si(float(start))
        self._jobs = []
        self._order = 0

    def now(self) -> Second:
        return self._now

    def schedule(self, interval: Time, callback: Callable[[], None]) -> CancelToken:
        if float(interval) <= 0:
            msg = f"Periodic interval must be positive, got {interval}"
            raise ValueError(msg)
        return self._add(interval, callback, repeat=True)

    def call_later(self, delay: Time, callback: Callable[[], None]) -> CancelToken:
        if float(delay) < 0:
            msg = f"Delay cannot be negative, got {delay}"
            raise ValueError(msg)
        return self._add(delay, callback, repeat=False)

    @property
    def pending(self) -> int:
        """Number of live jobs."""
        return sum(1 for job in self._jobs if not job.cancelled)

    def next_due(self) -> Second | None:
        """Time left until the next job fires, or None when idle."""
        live = [job for job in self._jobs if not job.cancelled]
        if not live:
            return None
        return Second.from_si(max(0.0, min(float(job.timer.duration) for job in live)))

    def advance(self, dt: Time) -> None:
        """Move the virtual clock forward by ``dt``, firing due jobs in order.

        Raises:
            ValueError: If ``dt`` is negative.
        """
        if float(dt) < 0:
            msg = f"Cannot advance by a negative duration: {dt}"
            raise ValueError(msg)

        remaining = round(float(dt), 9)
        while True:
            self._jobs = [job for job in self._jobs if not job.cancelled]
            step = self.next_due()
            if step is None or float(step) > remaining + _EPSILON:
                break
            self._step(float(step))
            remaining = round(remaining - float(step), 9)
            self._fire_due()

        if remaining > 0:
            self._step(remaining)

    def _add(self, interval: Time, callback: Callable[[], None], repeat: bool) -> CancelToken:
        job = _Job(Timer(interval), interval, callback, repeat, self._order)
        self._order += 1
        self._jobs.append(job)
        return CancelToken(job)

    def _step(self, delta: float) -> None:
        step = Second.from_si(delta)
        for job in self._jobs:
            job.timer._advance(step)
        self._now = Second.from_si(round(float(self._now) + delta, 9))

    def _fire_due(self) -> None:
        due = sorted((job for job in self._jobs if job.due and not job.cancelled), key=lambda job: job.order)
        for job in due:
            if job.cancelled:
                continue
            if job.repeat:
                job.timer.reset(job.interval)
            else:
                job.cancelled = True
            job.callback()


class RealtimeScheduler(VirtualScheduler):
    """Virtual scheduler paced against the wall clock.

    Args:
        speed (float): Simulated seconds per real second. ``2.0`` runs twice
            as fast as real time.
        sleep: Sleep function, replaceable in tests.
    """

    def __init__(self, speed: float = 1.0, sleep: Callable[[float], None] = time.sleep):
        if speed <= 0:
            msg = f"Invalid speed: {speed}"
            raise ValueError(msg)
        super().__init__()
        self.speed = speed
        self._sleep = sleep

    def run_for(self, duration: Time) -> None:
        """Run all jobs for ``duration`` of simulated time."""
        remaining = float(duration)
        while remaining > _EPSILON:
            step = self.next_due()
            delta = remaining if step is None else min(float(step), remaining)
            self._sleep(delta / self.speed)
            self.advance(Second.from_si(delta))
            remaining = round(remaining - delta, 9)

    def run_until(self, predicate: Callable[[], bool], timeout: Time | None = None) -> bool:
        """Run jobs until ``predicate`` holds, nothing is scheduled, or ``timeout`` elapses.

        Returns:
            bool: The final value of ``predicate``.
        """
        started = self.now()
        while not predicate():
            step = self.next_due()
            if step is None:
                logger.debug("Scheduler idle before predicate was satisfied")
                break
            if timeout is not None:
                left = float(timeout) - (float(self.now()) - float(started))
                if left <= _EPSILON:
                    break
                step = Second.from_si(min(float(step), left))
            self._sleep(float(step) / self.speed)
            self.advance(step)
        return predicate()
