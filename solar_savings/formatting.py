"""
Rounding and display helpers shared by the calculators.
"""

import math


def round_half_up(value: float, digits: int = 0):
    """
    Round halves upward, the way price sheets round.

    Python's built-in round() uses banker's rounding (round(1187.5) == 1188 but
    round(1186.5) == 1186). Every figure in the calculator rounds halves up.

    Args:
        value: Number to round
        digits: Decimal places to keep

    Returns:
        int when digits is 0, otherwise float
    """
    if digits == 0:
        return int(math.floor(value + 0.5))
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def format_currency(amount: float) -> str:
    """Format a dollar amount with thousands separators and no cents."""
    rounded = round_half_up(amount)
    if rounded < 0:
        return f"-${-rounded:,}"
    return f"${rounded:,}"


def format_number(value: float, decimals: int = 0) -> str:
    """Format a number with thousands separators."""
    return f"{round_half_up(value, decimals):,.{decimals}f}"
