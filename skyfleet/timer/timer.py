"""Countdown timer used by the schedulers.

A Timer holds the time left before a scheduled job is due. Schedulers advance
every live timer by the same step and fire the jobs whose timer is done.
Timers are managed by a scheduler and are not meant to be advanced by hand.

Example Usage:
    >>> timer = Timer(Millisecond(500))
    >>> timer._advance(Millisecond(200))
    >>> timer.duration.to(Millisecond)
    300.0
    >>> timer.done
    False
"""

from skyfleet.unit import Second, Time

_ZERO_TIME = Second(0.0)
_PRECISION = 9  # decimal places kept in SI seconds, absorbs float drift from repeated ticks


class Timer:
    """Countdown timer for simulation time management and scheduling.

    Note:
        Timer instances are owned by one scheduled job. Repeating jobs call
        ``reset`` instead of creating a new timer each period.

    Attributes:
        _duration (Time): Current remaining time. Decreases as the timer
                         advances and reaches zero when complete.
    """

    _duration: Time

    def __init__(self, duration: Time) -> None:
        """Initialize timer with specified duration.

        Args:
            duration (Time): Initial countdown duration. Must be non-negative.
        """
        self._duration = duration

    @property
    def duration(self) -> Time:
        """Get current remaining duration of the timer."""
        return self._duration

    @property
    def done(self) -> bool:
        """Check if timer has completed countdown."""
        return self._duration <= _ZERO_TIME

    def _advance(self, delta: Time) -> None:
        """Advance timer by reducing remaining duration.

        Args:
            delta (Time): Time amount to subtract from remaining duration.
        """
        remaining = round(float(self._duration) - float(delta), _PRECISION)
        self._duration = type(self._duration).from_si(remaining)

    def reset(self, duration: Time) -> None:
        """Reset timer to new duration, restarting countdown.

        Args:
            duration (Time): New countdown duration to set.
        """
        self._duration = duration
