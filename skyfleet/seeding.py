"""Pure seed derivation for mock trips and offers.

Every mock attribute in the simulation (landmark names, destination offsets,
trip durations, ride offers, flight history) is derived from an integer seed
computed from an identifier string. The formulas below are a reproducibility
contract: changing any of them changes which mock trip an id receives.

Example:
    >>> string_hash("LON-DR-001") == string_hash("LON-DR-001")
    True
    >>> 0.0 <= seeded_random(42) < 1.0
    True
"""

import math


def string_hash(value: str) -> int:
    """Polynomial hash ``h = h*31 + code_unit`` wrapped to signed 32 bits.

    Characters outside the BMP are hashed as their UTF-16 surrogate pair, so
    the result matches hashing the string code unit by code unit. Lone
    surrogates hash as their own code unit.

    Returns:
        int: The absolute value of the wrapped hash.
    """
    h = 0
    data = value.encode("utf-16-le", "surrogatepass")
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        h = (h * 31 + unit) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return abs(h)


def seeded_random(seed: float) -> float:
    """Sine based pseudo-random value in [0, 1) for ``seed``."""
    x = math.sin(seed) * 10000
    return x - math.floor(x)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going up (2.5 -> 3, -2.5 -> -2)."""
    return math.floor(value + 0.5)
