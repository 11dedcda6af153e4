"""
Fixed-Point Number Formatting

OBJ numbers are written with a fixed count of digits after the decimal
point, never in scientific notation, always with '.' as the separator.

Rounding rule: the value's shortest round-trip decimal form (repr) is
rounded half away from zero. 1.005 therefore becomes "1.01" at two digits
even though the nearest binary double sits slightly below 1.005. The sign
of zero is kept, so -0.0 and tiny negatives print as "-0.0000".
"""

from decimal import Decimal, Context, ROUND_HALF_UP
from typing import Iterable

# Enough significant digits for any finite double plus the fractional part
_BASE_CONTEXT_PRECISION = 330


def format_float(value: float, precision: int) -> str:
    """
    Format a number in fixed-point notation.

    Args:
        value: Finite number to format
        precision: Digits after the decimal point (0 omits the point)

    Returns:
        Formatted string
    """
    context = Context(prec=_BASE_CONTEXT_PRECISION + precision, rounding=ROUND_HALF_UP)
    quantum = Decimal(1).scaleb(-precision)
    rounded = Decimal(repr(float(value))).quantize(quantum, context=context)
    return format(rounded, "f")


def format_vector(values: Iterable[float], precision: int) -> str:
    """Format components space-separated."""
    return " ".join(format_float(v, precision) for v in values)
