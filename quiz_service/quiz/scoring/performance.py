"""
Performance Bands - Human-readable labels for accuracy percentages
"""

from typing import List, Tuple

# Lower bound (inclusive) -> label, checked top-down
PERFORMANCE_BANDS: List[Tuple[int, str]] = [
    (90, "Excellent"),
    (80, "Great"),
    (70, "Good"),
    (60, "Fair"),
]

FALLBACK_BAND = "Needs Improvement"


def round_half_up_percent(numerator: int, denominator: int) -> int:
    """
    Percentage of numerator/denominator rounded half-up, in integer arithmetic.

    Raises:
        ZeroDivisionError: if denominator is zero
    """
    if denominator == 0:
        raise ZeroDivisionError("percentage of an empty set is undefined")
    return (200 * numerator + denominator) // (2 * denominator)


def performance_band(accuracy: int) -> str:
    """Map an accuracy percentage to its performance label"""
    for lower, label in PERFORMANCE_BANDS:
        if accuracy >= lower:
            return label
    return FALLBACK_BAND
