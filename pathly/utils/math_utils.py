# File: utils/math_utils.py
"""Math and calculation utilities for Pathly.

Pure Python math functions shared by the engines.

Functions:
    - round_points: Consistent rounding to configured precision
    - clamp: Bound a value to a closed range
    - calculate_percentage: Ratio as a clamped 0-100 percentage
"""

from __future__ import annotations

import math

# Default float precision for point rounding
DATA_FLOAT_PRECISION = 2


def round_points(value: float, precision: int = DATA_FLOAT_PRECISION) -> float:
    """Round a point value to the configured precision.

    Examples:
        round_points(10.456) → 10.46
        round_points(27.499999999999996) → 27.5
    """
    return round(value, precision)


def clamp(value: float, min_val: float, max_val: float) -> float:
    """Clamp a value between minimum and maximum bounds.

    NaN clamps to the minimum so that a garbage ratio can never escape the
    range.

    Examples:
        clamp(150, 0, 100) → 100
        clamp(-10, 0, 100) → 0
        clamp(50, 0, 100) → 50
    """
    if math.isnan(value):
        return min_val
    return max(min_val, min(value, max_val))


def calculate_percentage(current: float, target: float) -> float:
    """Calculate ``current / target`` as a percentage clamped to [0, 100].

    Returns:
        Percentage, or 0.0 if target is not positive (division by zero guard)

    Examples:
        calculate_percentage(50, 100) → 50.0
        calculate_percentage(150, 100) → 100.0
        calculate_percentage(5, 0) → 0.0
    """
    if target <= 0:
        return 0.0
    return clamp((current / target) * 100, 0.0, 100.0)
