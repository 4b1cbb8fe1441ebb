"""Unit family foundation for typed simulation quantities.

Every quantity in the simulation core (tick intervals, notification delays, trip
distances) is expressed through a unit class. Each class belongs to a family
(time, distance) identified by its ROOT class, and arithmetic or comparisons are
only allowed inside one family.

Example:
    >>> class Second(Unit):
    ...     IS_FAMILY_ROOT = True
    >>> class Millisecond(Second):
    ...     pass  # ROOT is Second
"""

from __future__ import annotations

from typing import ClassVar

Number = int | float


class Unit:
    """Base class for all unit types.

    Attributes:
        ROOT (ClassVar[type[Unit]]): Root class defining the unit family.
        SYMBOL (ClassVar[str]): Unit symbol for display purposes.
        IS_FAMILY_ROOT (ClassVar[bool]): Marks the base unit of a family.
    """

    __slots__ = ()

    ROOT: ClassVar[type[Unit]]
    SYMBOL: ClassVar[str] = ""
    IS_FAMILY_ROOT: ClassVar[bool] = False

    def __init_subclass__(cls, **kwargs):
        """Assign ROOT to the nearest ancestor flagged IS_FAMILY_ROOT."""
        super().__init_subclass__(**kwargs)
        if cls.__dict__.get("IS_FAMILY_ROOT", False):
            cls.ROOT = cls
            return

        for base in cls.mro()[1:]:
            if base.__dict__.get("IS_FAMILY_ROOT", False):
                cls.ROOT = base
                return

        cls.ROOT = cls

    @classmethod
    def _check_same_root(cls, unit_type: type) -> None:
        """Reject operations across unit families.

        Raises:
            TypeError: If ``unit_type`` is not a unit of the same family.
        """
        other_root = getattr(unit_type, "ROOT", None)
        if cls.ROOT is not other_root:
            msg = f"Incompatible units: {cls.ROOT.__name__} and {getattr(other_root, '__name__', unit_type.__name__)}"
            raise TypeError(msg)
