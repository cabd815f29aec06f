"""Built-in aggregators.

Zero-row group results:

    count    0        a real zero, never ABSENT
    mean     NaN      0 / 0
    minimum  +inf     identity of min over the empty set
    maximum  -inf     identity of max over the empty set
    sd       ABSENT   undefined below two observations
    total    0.0      identity of +

For non-empty groups an ABSENT cell makes the result ABSENT unless the
aggregator was built with ``skip_absent=True``. NaN propagates.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, List, Optional

import numpy as np

from lacuna.scalar import ABSENT
from .reducer import Reducer, as_reducer


@dataclass(frozen=True)
class Aggregate:
    """One requested output of group_aggregate: a reducer applied to a column.

    ``column`` is None for reducers over whole rows (row count).
    """
    column: Optional[str]
    reducer: Reducer


def _numbers(values: List[Any]) -> Optional[np.ndarray]:
    if any(v is ABSENT for v in values):
        return None
    return np.asarray(values, dtype=np.float64)


def _mean(values):
    arr = _numbers(values)
    return ABSENT if arr is None else float(np.mean(arr))


def _minimum(values):
    arr = _numbers(values)
    return ABSENT if arr is None else float(np.min(arr))


def _maximum(values):
    arr = _numbers(values)
    return ABSENT if arr is None else float(np.max(arr))


def _sd(values):
    arr = _numbers(values)
    if arr is None or len(arr) < 2:
        return ABSENT
    return float(np.std(arr, ddof=1))


def _total(values):
    arr = _numbers(values)
    return ABSENT if arr is None else float(np.sum(arr))


def _count_rows(values):
    return float(len(values))


def _count_present(values):
    return float(sum(1 for v in values if v is not ABSENT))


ROW_COUNT = Reducer('count', _count_rows, empty=0.0)
PRESENT_COUNT = Reducer('count', _count_present, empty=0.0)
MEAN = Reducer('mean', _mean, empty=math.nan, numeric=True)
MINIMUM = Reducer('minimum', _minimum, empty=math.inf, numeric=True)
MAXIMUM = Reducer('maximum', _maximum, empty=-math.inf, numeric=True)
SD = Reducer('sd', _sd, empty=ABSENT, numeric=True)
TOTAL = Reducer('total', _total, empty=0.0, numeric=True)


def count(column: Optional[str] = None) -> Aggregate:
    """Rows per group, or non-ABSENT cells of ``column`` per group."""
    if column is None:
        return Aggregate(None, ROW_COUNT)
    return Aggregate(column, PRESENT_COUNT)


def mean(column: str, skip_absent: bool = False) -> Aggregate:
    return Aggregate(column, MEAN.skipping_absent(skip_absent))


def minimum(column: str, skip_absent: bool = False) -> Aggregate:
    return Aggregate(column, MINIMUM.skipping_absent(skip_absent))


def maximum(column: str, skip_absent: bool = False) -> Aggregate:
    return Aggregate(column, MAXIMUM.skipping_absent(skip_absent))


def sd(column: str, skip_absent: bool = False) -> Aggregate:
    """Sample standard deviation (n - 1 denominator)."""
    return Aggregate(column, SD.skipping_absent(skip_absent))


def total(column: str, skip_absent: bool = False) -> Aggregate:
    return Aggregate(column, TOTAL.skipping_absent(skip_absent))


def custom(column: Optional[str], reducer_or_func: Any) -> Aggregate:
    """Apply a user reducer (a Reducer or a @reducer-decorated function)."""
    return Aggregate(column, as_reducer(reducer_or_func))
