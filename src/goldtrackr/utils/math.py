"""
Numeric helpers for price calculations and display.

Provides division-safe percentage math, boundary validation for user
supplied numbers, and the formatting used by the CLI reporter and logs.
"""

import math
from typing import Any, Final


# Epsilon for floating point comparisons
EPSILON: Final[float] = 1e-10


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """
    Safely divide two numbers, returning default on division by zero.

    Args:
        numerator: The dividend.
        denominator: The divisor.
        default: Value to return if denominator is zero.

    Returns:
        Result of division or default value.
    """
    if abs(denominator) < EPSILON:
        return default
    return numerator / denominator


def percent_change(base: float, value: float) -> float:
    """
    Relative change from base to value, in percent.

    Example:
        >>> percent_change(100.0, 101.5)
        1.5
    """
    return safe_divide(value - base, base) * 100.0


def clamp(value: float, low: float, high: float) -> float:
    """Clamp value into [low, high]."""
    return max(low, min(high, value))


def as_positive_float(value: Any) -> float | None:
    """
    Coerce user input to a finite positive float.

    Args:
        value: Raw input (number or numeric string).

    Returns:
        The float, or None if it is non-numeric, NaN, infinite or <= 0.
    """
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or number <= 0:
        return None
    return number


def format_price(price: float, decimals: int = 2) -> str:
    """
    Format a USD price with thousands separators.

    Example:
        >>> format_price(97450)
        '$97,450.00'
    """
    sign = "-" if price < 0 else ""
    return f"{sign}${abs(price):,.{decimals}f}"


def format_percent(pct: float, show_sign: bool = True) -> str:
    """
    Format a percentage with two decimals.

    Example:
        >>> format_percent(1.234)
        '+1.23%'
    """
    sign = "+" if show_sign and pct > 0 else ""
    return f"{sign}{pct:.2f}%"


def format_compact_usd(value: float) -> str:
    """
    Format large USD amounts (volume, market cap) compactly.

    Examples:
        >>> format_compact_usd(1_250_000_000)
        '$1.25B'
        >>> format_compact_usd(950)
        '$950'
    """
    if value >= 1e12:
        return f"${value / 1e12:.2f}T"
    if value >= 1e9:
        return f"${value / 1e9:.2f}B"
    if value >= 1e6:
        return f"${value / 1e6:.2f}M"
    return f"${value:.0f}"
