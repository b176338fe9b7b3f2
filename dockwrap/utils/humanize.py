"""Human readable sizes."""

from typing import Optional

_DECIMAL_UNITS = ["B", "kB", "MB", "GB", "TB", "PB", "EB", "ZB", "YB"]


def human_size(size: Optional[float], precision: int = 4) -> str:
    """Format a byte count the way the docker CLI does.

    Decimal (1000-based) units, ``precision`` significant digits, no space
    between number and unit: ``2746000`` -> ``"2.746MB"``. Negative or
    missing sizes (the engine reports -1 when not computed) render as "0B".
    """
    if size is None or size < 0:
        size = 0
    value = float(size)
    i = 0
    while value >= 1000.0 and i < len(_DECIMAL_UNITS) - 1:
        value /= 1000.0
        i += 1
    return f"{value:.{precision}g}{_DECIMAL_UNITS[i]}"
