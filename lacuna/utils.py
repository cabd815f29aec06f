"""Key helpers shared by the grid and grouping operations."""
from __future__ import annotations

from typing import Any, Iterable, List

from .scalar import ABSENT, is_nan
from .schema import Column, Kind


class _NaNKey:
    """Hashable stand-in for NaN, which is never equal to itself."""

    def __repr__(self):
        return 'NaN'


NAN_KEY = _NaNKey()


def key(value: Any) -> Any:
    """Dict/set key for a cell value: every NaN maps to the same key."""
    if is_nan(value):
        return NAN_KEY
    return value


def distinct(values: Iterable[Any]) -> List[Any]:
    """Distinct values in order of first appearance."""
    seen = set()
    out = []
    for v in values:
        k = key(v)
        if k in seen:
            continue
        seen.add(k)
        out.append(v)
    return out


def sorted_observed(column: Column, values: Iterable[Any]) -> List[Any]:
    """Distinct ``values`` in domain order (categories) or ascending order.

    NaN sorts after every number and ABSENT after everything.
    """
    values = distinct(values)
    present = [v for v in values if v is not ABSENT and not is_nan(v)]
    if column.kind is Kind.CATEGORY:
        present.sort(key=column.domain.index)
    else:
        present.sort()
    if any(is_nan(v) for v in values):
        present.append(float('nan'))
    if any(v is ABSENT for v in values):
        present.append(ABSENT)
    return present
