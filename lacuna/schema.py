"""Column schema: kinds, declared category domains, and kind predicates.

The declared domain of a CATEGORY column is part of the schema, not
something inferred from data. It may list tags that no row uses, which is
what lets group_aggregate() report empty groups.

Note: polars dtype equality (==) has surprising behavior with non-polars
types, and Enum dtypes compare unequal when their categories differ. Kind
inference therefore checks dtype classes rather than instances.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import polars as pl

from .errors import TypeMismatch


class Kind(enum.Enum):
    NUMBER = "number"
    TEXT = "text"
    BOOLEAN = "boolean"
    CATEGORY = "category"


@dataclass(frozen=True)
class Column:
    """A named, typed column. ``domain`` is the ordered tag set of a CATEGORY column."""
    name: str
    kind: Kind
    domain: Optional[Tuple[str, ...]] = None

    def __post_init__(self):
        if not isinstance(self.kind, Kind):
            object.__setattr__(self, 'kind', Kind(self.kind))
        if self.kind is Kind.CATEGORY:
            if self.domain is None:
                raise ValueError(f"category column {self.name!r} needs a declared domain")
            domain = tuple(self.domain)
            for tag in domain:
                if not isinstance(tag, str):
                    raise TypeMismatch(self.name, "Column", "str category tags", type(tag).__name__)
            if len(set(domain)) != len(domain):
                raise ValueError(f"category column {self.name!r} has duplicate tags in its domain")
            object.__setattr__(self, 'domain', domain)
        elif self.domain is not None:
            raise ValueError(
                f"column {self.name!r}: only category columns take a domain, not {self.kind.value}"
            )

    def __repr__(self):
        if self.domain is not None:
            return f"Column({self.name!r}, {self.kind.value}, domain={list(self.domain)!r})"
        return f"Column({self.name!r}, {self.kind.value})"

    @property
    def dtype(self) -> pl.DataType:
        if self.kind is Kind.NUMBER:
            return pl.Float64
        if self.kind is Kind.TEXT:
            return pl.String
        if self.kind is Kind.BOOLEAN:
            return pl.Boolean
        return pl.Enum(list(self.domain))

    def renamed(self, name: str) -> "Column":
        return Column(name, self.kind, self.domain)


# ---------------------------------------------------------------------------
# Constructors
# ---------------------------------------------------------------------------

def number(name: str) -> Column:
    return Column(name, Kind.NUMBER)


def text(name: str) -> Column:
    return Column(name, Kind.TEXT)


def boolean(name: str) -> Column:
    return Column(name, Kind.BOOLEAN)


def category(name: str, domain: Sequence[str]) -> Column:
    return Column(name, Kind.CATEGORY, tuple(domain))


# ---------------------------------------------------------------------------
# Kind inference from polars dtypes
# ---------------------------------------------------------------------------

def column_from_dtype(name: str, dtype, domain: Optional[Sequence[str]] = None) -> Column:
    """Build a Column for a polars dtype.

    An explicit ``domain`` always makes the column a CATEGORY. Enum dtypes
    carry their own domain; plain Categorical dtypes do not, so they need
    one supplied.
    """
    if domain is not None:
        return Column(name, Kind.CATEGORY, tuple(domain))
    if isinstance(dtype, pl.Enum):
        return Column(name, Kind.CATEGORY, tuple(dtype.categories.to_list()))
    if dtype == pl.Boolean:
        return Column(name, Kind.BOOLEAN)
    if dtype.is_numeric():
        return Column(name, Kind.NUMBER)
    if dtype in (pl.String, pl.Utf8, pl.Null):
        return Column(name, Kind.TEXT)
    raise TypeMismatch(name, "column_from_dtype", "numeric, string, boolean or enum dtype", dtype)


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------

def is_numeric(column: Column) -> bool:
    return column.kind is Kind.NUMBER


def is_categorical(column: Column) -> bool:
    return column.kind is Kind.CATEGORY
