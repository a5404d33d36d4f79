"""Rounding helpers shared by the calculation modules."""

import math
from decimal import Decimal, ROUND_HALF_UP, localcontext


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round half away from zero, the way people round by hand.

    Python's built-in round() uses banker's rounding and works on the binary
    float, so round(-6.25, 1) gives -6.2. This works on the shortest decimal
    repr of the value instead, giving -6.3.

    Args:
        value: Number to round
        ndigits: Decimal places to keep

    Returns:
        Rounded value as float; infinities and NaN are returned unchanged
    """
    value = float(value)
    if not math.isfinite(value):
        return value

    exact = Decimal(repr(value))
    quantum = Decimal(1).scaleb(-ndigits)
    with localcontext() as ctx:
        # Enough digits for the integer part plus the kept decimals
        ctx.prec = max(ctx.prec, exact.adjusted() + ndigits + 2)
        return float(exact.quantize(quantum, rounding=ROUND_HALF_UP))


def round_to_int(value: float) -> int:
    """Round half away from zero to the nearest integer."""
    return int(round_half_up(value))
