"""Lenient numeric parsing for form-style input."""

import math
from typing import Any, Optional


def _to_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        n = float(value)
    else:
        s = str(value).strip()
        if not s:
            return None
        try:
            n = float(s)
        except ValueError:
            return None
    return n if math.isfinite(n) else None


def to_nullable_int(value: Any) -> Optional[int]:
    """Blank or non-numeric becomes None, anything else a floored non-negative int."""
    n = _to_number(value)
    if n is None:
        return None
    return max(0, math.floor(n))


def to_int_or_zero(value: Any) -> int:
    n = to_nullable_int(value)
    return 0 if n is None else n


def parse_weight_kg(value: Any) -> Optional[float]:
    """Accepts ``72,5`` as well as ``72.5``. Non-positive values clear the weight."""
    if isinstance(value, str):
        value = value.strip().replace(",", ".")
    n = _to_number(value)
    if n is None or n <= 0:
        return None
    return math.floor(n * 100 + 0.5) / 100
