"""Nullable scalar values.

A cell is one of:
  - ABSENT, the explicit missing marker (``None`` is accepted as input)
  - a Number, stored as float64, which may itself be NaN
  - Text (str), Boolean (bool), or a Category tag (str)

ABSENT and NaN are different things. Both are infectious in arithmetic,
but ABSENT wins when both appear, and comparing anything with ABSENT gives
ABSENT (unknown) rather than True or False.
"""
from __future__ import annotations

import math
from typing import Any, Optional

import numpy as np

from .errors import TypeMismatch
from .schema import Kind


class Absent:
    """Singleton marker for an explicitly missing cell."""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return 'ABSENT'

    def __bool__(self):
        return False

    def __reduce__(self):
        return (Absent, ())

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self


ABSENT = Absent()


def is_absent(value: Any) -> bool:
    return value is None or value is ABSENT


def is_number(value: Any) -> bool:
    """True for ints and floats (numpy included), never for bools."""
    if isinstance(value, (bool, np.bool_)):
        return False
    return isinstance(value, (int, float, np.integer, np.floating))


def is_nan(value: Any) -> bool:
    return is_number(value) and math.isnan(float(value))


def kind_of(value: Any) -> Optional[Kind]:
    """Kind of a Python value, or None for ABSENT.

    Strings report as TEXT; whether a string is a category tag depends on
    the column it sits in, not on the value.
    """
    if is_absent(value):
        return None
    if isinstance(value, (bool, np.bool_)):
        return Kind.BOOLEAN
    if is_number(value):
        return Kind.NUMBER
    if isinstance(value, str):
        return Kind.TEXT
    raise TypeMismatch(None, "kind_of", "number, str or bool", type(value).__name__)


def normalize(value: Any) -> Any:
    """Map input spellings onto canonical cell values (None -> ABSENT, ints -> float)."""
    if is_absent(value):
        return ABSENT
    if isinstance(value, (bool, np.bool_)):
        return bool(value)
    if is_number(value):
        return float(value)
    return value


def same_value(a: Any, b: Any) -> bool:
    """Exact, two-valued matching used for sentinels and keys.

    ABSENT never matches, NaN never matches, and values of different kinds
    never match (True is not 1, "1" is not 1).
    """
    if is_absent(a) or is_absent(b):
        return False
    kind_a, kind_b = kind_of(a), kind_of(b)
    if kind_a is not kind_b:
        return False
    if kind_a is Kind.NUMBER:
        return float(a) == float(b)
    return a == b


# ---------------------------------------------------------------------------
# Three-valued comparison
# ---------------------------------------------------------------------------

def eq(a: Any, b: Any) -> Any:
    """Three-valued equality: ABSENT if either side is ABSENT.

    ``eq(nan, nan)`` is False, as in IEEE 754.
    """
    if is_absent(a) or is_absent(b):
        return ABSENT
    if is_number(a) and is_number(b):
        return float(a) == float(b)
    if kind_of(a) is not kind_of(b):
        return False
    return a == b


def ne(a: Any, b: Any) -> Any:
    result = eq(a, b)
    if result is ABSENT:
        return ABSENT
    return not result


# ---------------------------------------------------------------------------
# Arithmetic
# ---------------------------------------------------------------------------

def _operand(op_name: str, value: Any) -> np.float64:
    if not is_number(value):
        raise TypeMismatch(None, op_name, "number", type(value).__name__)
    return np.float64(value)


def _binary(op_name: str, ufunc, a: Any, b: Any) -> Any:
    if is_absent(a) or is_absent(b):
        return ABSENT
    x, y = _operand(op_name, a), _operand(op_name, b)
    with np.errstate(all='ignore'):
        return float(ufunc(x, y))


def add(a: Any, b: Any) -> Any:
    return _binary("add", np.add, a, b)


def sub(a: Any, b: Any) -> Any:
    """``sub(inf, inf)`` is NaN."""
    return _binary("sub", np.subtract, a, b)


def mul(a: Any, b: Any) -> Any:
    """``mul(0, inf)`` is NaN."""
    return _binary("mul", np.multiply, a, b)


def div(a: Any, b: Any) -> Any:
    """IEEE division: ``div(0, 0)`` is NaN and ``div(1, 0)`` is inf, never an error."""
    return _binary("div", np.divide, a, b)


def neg(a: Any) -> Any:
    if is_absent(a):
        return ABSENT
    return float(-_operand("neg", a))


def sqrt(a: Any) -> Any:
    """Square root; negative inputs give NaN."""
    if is_absent(a):
        return ABSENT
    x = _operand("sqrt", a)
    with np.errstate(all='ignore'):
        return float(np.sqrt(x))
