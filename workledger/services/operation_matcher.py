"""
Cross-collection operation correlation.

The job operation ledger, the contractor work-done ledger and bill snapshots
were written at different times and do not share a reliable operation key.
"The same operation" is therefore identified by a composite key:

    (operation name with surrounding whitespace removed,
     value per book rounded to 2 decimal places)

Rounding is ROUND_HALF_UP on the shortest decimal representation of the
float, so 1.005 -> 1.01 and 1.00999 -> 1.01.

Every place that correlates entries across collections goes through this
module; nothing else compares names or rates directly.
"""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Callable, Iterable, Optional, Tuple

OperationKey = Tuple[str, Decimal]

_CENT = Decimal("0.01")


def round_rate(value: Any) -> Decimal:
    if value is None or isinstance(value, bool):
        return Decimal("0.00")
    try:
        return Decimal(str(float(value))).quantize(_CENT, rounding=ROUND_HALF_UP)
    except (TypeError, ValueError, InvalidOperation):
        return Decimal("0.00")


def operation_key(name: Any, rate: Any) -> OperationKey:
    return (str(name or "").strip(), round_rate(rate))


def same_operation(name_a: Any, rate_a: Any, name_b: Any, rate_b: Any) -> bool:
    return operation_key(name_a, rate_a) == operation_key(name_b, rate_b)


def find_match(
    entries: Iterable[dict],
    name: Any,
    rate: Any,
    *,
    name_of: Callable[[dict], Any],
    rate_of: Callable[[dict], Any],
) -> Optional[dict]:
    """First entry whose (name_of(entry), rate_of(entry)) key equals (name, rate)."""
    wanted = operation_key(name, rate)
    for entry in entries:
        if operation_key(name_of(entry), rate_of(entry)) == wanted:
            return entry
    return None


def find_work_done_match(ops_done: Iterable[dict], name: Any, rate: Any) -> Optional[dict]:
    return find_match(
        ops_done,
        name,
        rate,
        name_of=lambda e: e.get("opsName"),
        rate_of=lambda e: e.get("valuePerBook"),
    )
