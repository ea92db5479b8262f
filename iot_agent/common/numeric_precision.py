"""Numeric precision helpers shared by the decoders.

Precision policy:
- Filling percentage: 5 decimals, standard rounding
- Derived integer levels: truncation toward zero, never rounding
"""

from __future__ import annotations

import math

# Decimals kept for percentage values
PERCENTAGE_PRECISION = 5


def round_to_precision(value: float, decimals: int = PERCENTAGE_PRECISION) -> float:
    """Round a value to a fixed number of decimals."""
    if not math.isfinite(value):
        return value
    factor = 10 ** decimals
    return round(value * factor) / factor


def truncate_to_int(value: float) -> int:
    """Truncate toward zero, so -187.1 becomes -187 and 140.5 becomes 140."""
    return int(value)


def int_div_toward_zero(numerator: int, denominator: int) -> int:
    """Integer division that truncates toward zero like fixed-width firmware math.

    Python's ``//`` floors, which differs for negative operands.
    """
    quotient = abs(numerator) // abs(denominator)
    if (numerator < 0) != (denominator < 0):
        return -quotient
    return quotient
