import math
from typing import Any, Optional


def to_number(value: Any) -> Optional[float]:
    """Coerce a submitted quantity/rate to float.

    Accepts ints, floats and numeric strings. Returns None for missing,
    boolean, blank, non-numeric or non-finite input.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, str):
        value = value.strip()
        if value == "":
            return None

    try:
        number = float(value)
    except (TypeError, ValueError):
        return None

    if not math.isfinite(number):
        return None
    return number


def is_blank(value: Any) -> bool:
    return value is None or not str(value).strip()
