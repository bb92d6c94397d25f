"""Guarded arithmetic and number helpers shared by the aggregation and export code."""

import math


def to_number(value) -> float:
    """Coerce a stored value to a float, treating None/blank/garbage as 0.

    Args:
        value: Anything a record field may hold (number, numeric string, None)

    Returns:
        The float value, or 0.0 when it is not a finite number
    """
    if value is None or value == "":
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def safe_div(numerator: float, denominator: float) -> float:
    """Divide, returning 0 instead of NaN/Infinity when the denominator is 0."""
    if not denominator:
        return 0.0
    return numerator / denominator


def percent(part: float, whole: float) -> float:
    return safe_div(part, whole) * 100


def round2(value: float) -> float:
    return round(value, 2)


def format_number(value: float, max_decimals: int = 2) -> str:
    """Thousands-separated rendering, trailing zeros dropped: 1234.5 -> '1,234.5'."""
    text = f"{value:,.{max_decimals}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text
