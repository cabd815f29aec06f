"""Reducers: per-group aggregation functions with an explicit empty result.

Every reducer states what it returns for a group with zero rows. There is
no framework-wide fallback: a reducer declared without ``empty`` is a
configuration error, raised when the reducer is built, not when a group
happens to be empty.

Usage::

    @reducer(empty=0.0)
    def spread(values) -> float:
        return max(values) - min(values)

    group_aggregate(t, "smoker", {"spread": custom("age", spread)})
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, replace
from typing import Any, Callable, List, Optional

from lacuna.errors import ReducerConfigError
from lacuna.scalar import ABSENT
from lacuna.schema import Kind


class _Undeclared(enum.Enum):
    """Default of ``empty``: the reducer has not said what an empty group yields."""
    MISSING = 'missing'

    def __repr__(self):
        return '<empty result not declared>'

    def __bool__(self):
        return False


MISSING = _Undeclared.MISSING


# ---------------------------------------------------------------------------
# Reducer
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Reducer:
    """A registered group reduction.

    Attributes:
        name: identifier used in error messages
        func: callable taking the list of a group's cell values
        empty: result for a zero-row group (required)
        kind: kind of the output column
        numeric: True if the input column must be a NUMBER column
        skip_absent: drop ABSENT cells before reducing; a group left with
            no values then yields ``empty``
    """
    name: str
    func: Callable[[List[Any]], Any]
    empty: Any = MISSING
    kind: Kind = Kind.NUMBER
    numeric: bool = False
    skip_absent: bool = False

    def __post_init__(self):
        if self.empty is MISSING:
            raise ReducerConfigError(
                f"reducer {self.name!r} must declare its result for an empty group "
                f"(pass empty=...; use ABSENT if it is undefined)"
            )
        if self.kind is Kind.CATEGORY:
            raise ReducerConfigError(f"reducer {self.name!r}: category output is not supported")

    def __call__(self, values: List[Any]) -> Any:
        if self.skip_absent:
            values = [v for v in values if v is not ABSENT]
        if not values:
            return self.empty
        return self.func(values)

    def skipping_absent(self, skip: bool = True) -> "Reducer":
        return replace(self, skip_absent=skip)


# ---------------------------------------------------------------------------
# @reducer decorator
# ---------------------------------------------------------------------------

def reducer(empty=MISSING, kind: Kind = Kind.NUMBER, numeric: bool = False, skip_absent: bool = False):
    """Decorator that turns a function of a group's values into a Reducer.

    The decorated function is returned unchanged with the Reducer attached
    as ``._reducer``, so it stays callable on plain lists.

    Raises:
        ReducerConfigError: ``empty`` was not given
    """
    def decorator(func):
        func._reducer = Reducer(
            name=func.__name__,
            func=func,
            empty=empty,
            kind=kind,
            numeric=numeric,
            skip_absent=skip_absent,
        )
        return func

    return decorator


def as_reducer(obj: Any, name: Optional[str] = None) -> Reducer:
    """Accept a Reducer or a @reducer-decorated function.

    A bare function is refused: it has not declared its empty result.
    """
    if isinstance(obj, Reducer):
        return obj
    if callable(obj) and hasattr(obj, '_reducer'):
        return obj._reducer
    if callable(obj):
        label = name or getattr(obj, '__name__', repr(obj))
        raise ReducerConfigError(
            f"{label!r} is a plain function; wrap it with @reducer(empty=...) "
            f"or Reducer(..., empty=...) to declare its empty-group result"
        )
    raise TypeError(f"Cannot convert {obj!r} to Reducer.")
