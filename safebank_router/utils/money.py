"""Amount helpers shared by the coverage and routing engines"""

import math
from typing import Any


def round_half_up(value: float) -> int:
    """Round to the nearest whole unit, halves away from zero"""
    if value < 0:
        return -math.floor(-value + 0.5)
    return math.floor(value + 0.5)


def as_amount(value: Any) -> float:
    """Coerce a loosely-typed amount to a number; missing or malformed becomes 0"""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return value if math.isfinite(value) else 0
    try:
        number = float(str(value).replace(",", "").strip())
    except ValueError:
        return 0
    if not math.isfinite(number):
        return 0
    return int(number) if number.is_integer() else number


def format_amount(value: float) -> str:
    """Thousands-separated whole units, e.g. 5000000 -> "5,000,000" """
    return f"{round_half_up(value):,}"
