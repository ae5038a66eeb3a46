"""
Rounding helpers with JavaScript semantics.

Reported figures must match the dashboard's historical output exactly,
so Python's banker's rounding cannot be used for them.
"""

import math
from decimal import Decimal, ROUND_HALF_UP


def js_round(value: float) -> int:
    """Round half toward positive infinity, like ``Math.round``."""
    floor = math.floor(value)
    return int(floor + 1 if value - floor >= 0.5 else floor)


def round_cents(value: float) -> float:
    """Round a dollar amount to cents, like ``Math.round(x * 100) / 100``."""
    return js_round(value * 100) / 100


def to_fixed(value: float, digits: int) -> float:
    """Round like ``Number.prototype.toFixed`` and return the parsed number.

    toFixed works on the exact binary value of the double, so 1.005 becomes
    1.00 rather than 1.01. Ties round away from zero.

    Args:
        value: Number to round
        digits: Decimal places to keep

    Returns:
        Rounded value as a float
    """
    if digits < 0:
        raise ValueError("digits cannot be negative")
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))
