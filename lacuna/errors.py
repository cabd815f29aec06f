"""Exception types raised by lacuna operations.

All errors are raised immediately and carry enough context (column,
operation) to diagnose the failing call. Inputs are never mutated, so a
failed operation leaves every table as it was.
"""
from __future__ import annotations

from typing import Any, Iterable, Optional, Sequence


class LacunaError(Exception):
    """Base class for every error raised by lacuna."""
    pass


class InvalidColumn(LacunaError, KeyError):
    """A requested column is not part of the table's schema."""

    def __init__(self, column: str, operation: str, available: Iterable[str] = ()):
        self.column = column
        self.operation = operation
        self.available = tuple(available)
        super().__init__(
            f"{operation}: no column named {column!r} "
            f"(available: {', '.join(self.available) or 'none'})"
        )

    def __str__(self):
        # KeyError quotes its message, which is noisy for a sentence
        return self.args[0]


class TypeMismatch(LacunaError, TypeError):
    """A column or value has the wrong kind for the operation."""

    def __init__(self, column: Optional[str], operation: str, expected: str, actual: Any):
        self.column = column
        self.operation = operation
        self.expected = expected
        self.actual = actual
        where = f"column {column!r}" if column is not None else "value"
        super().__init__(f"{operation}: {where} expected {expected}, got {actual}")


class OutOfDomain(LacunaError, ValueError):
    """A category tag is not part of the column's declared domain."""

    def __init__(self, column: str, operation: str, value: Any, domain: Sequence[str]):
        self.column = column
        self.operation = operation
        self.value = value
        self.domain = tuple(domain)
        super().__init__(
            f"{operation}: {value!r} is not in the declared domain of "
            f"column {column!r} {list(self.domain)!r}"
        )


class EmptyDomain(LacunaError, ValueError):
    """A complete() key spec resolved to no values at all."""

    def __init__(self, column: str, operation: str = "complete"):
        self.column = column
        self.operation = operation
        super().__init__(f"{operation}: key domain for column {column!r} is empty")


class ReducerConfigError(LacunaError, ValueError):
    """A user reducer was declared without a zero-row result."""
    pass


class ReducerError(LacunaError):
    """A reducer raised while aggregating one group."""

    def __init__(self, reducer_name: str, column: Optional[str], group: Any, original_error: Exception):
        self.reducer_name = reducer_name
        self.column = column
        self.group = group
        self.original_error = original_error
        super().__init__(
            f"group_aggregate: reducer {reducer_name!r} failed on column "
            f"{column!r} for group {group!r}: {type(original_error).__name__}: {original_error}"
        )


class UnmatchedKeys(LacunaError, ValueError):
    """left_join(unmatched='error') found left keys with no right match."""

    def __init__(self, column: str, keys: Sequence[Any]):
        self.column = column
        self.keys = list(keys)
        preview = ', '.join(repr(k) for k in self.keys[:10])
        more = f" (+{len(self.keys) - 10} more)" if len(self.keys) > 10 else ""
        super().__init__(
            f"left_join: {len(self.keys)} value(s) of {column!r} have no match: {preview}{more}"
        )
