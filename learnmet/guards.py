"""Numeric guards shared by every metric so degenerate inputs resolve to zero."""

from math import floor, isfinite
from typing import Optional


def finite_or_zero(value: Optional[float]) -> float:
    """Return ``value`` as a float, or 0.0 when it is missing, NaN or infinite."""
    if value is None:
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if isfinite(number) else 0.0


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """
    Divide without ever producing NaN or Infinity.

    Returns ``default`` when the denominator is zero, missing or non-finite,
    and when the quotient itself is not finite.
    """
    if not denominator:
        return default
    try:
        quotient = float(numerator) / float(denominator)
    except (TypeError, ValueError, ZeroDivisionError, OverflowError):
        return default
    return quotient if isfinite(quotient) else default


def clamp_non_negative(value: float) -> float:
    return max(0.0, finite_or_zero(value))


def clamp(value: float, lower: float, upper: float) -> float:
    """Bound ``value`` to ``[lower, upper]``; non-finite input maps to ``lower``."""
    if value is None:
        return lower
    try:
        number = float(value)
    except (TypeError, ValueError):
        return lower
    if not isfinite(number):
        return lower
    return min(max(number, lower), upper)


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves away from zero for non-negative values (2.5 -> 3), unlike ``round``."""
    scale = 10**digits
    return floor(finite_or_zero(value) * scale + 0.5) / scale
