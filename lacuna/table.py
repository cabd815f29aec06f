"""Table: an immutable, rectangular, column-typed table.

Every row has every declared column; a missing cell is ABSENT, never a
missing key. The table is backed by a polars DataFrame whose dtypes follow
the schema (Float64, String, Boolean, Enum). ABSENT is stored as a polars
null and NaN as a float NaN, so the two stay distinguishable.

Usage::

    from lacuna import Table, number, text

    t = Table([text("person"), number("treatment"), number("response")], [
        ("Derrick Whitmore", 1, 7),
        (None, 2, 10),
    ])
    t.column("person")  # -> ['Derrick Whitmore', ABSENT]
"""
from __future__ import annotations

import math
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple, Union

import numpy as np
import polars as pl

from .errors import InvalidColumn, OutOfDomain, TypeMismatch
from .scalar import ABSENT, is_absent, is_number
from .schema import Column, Kind

ColumnsArg = Union[str, Sequence[str]]


def column_names(columns: ColumnsArg) -> List[str]:
    """Normalize a single column name or a sequence of names to a list."""
    if isinstance(columns, str):
        return [columns]
    return list(columns)


def coerce_cell(column: Column, value: Any, operation: str) -> Any:
    """Validate a Python value for ``column`` and return its storage form.

    ABSENT/None become None (a polars null); numbers become float.
    """
    if is_absent(value):
        return None
    kind = column.kind
    if kind is Kind.NUMBER:
        if not is_number(value):
            raise TypeMismatch(column.name, operation, "number", type(value).__name__)
        return float(value)
    if kind is Kind.BOOLEAN:
        if not isinstance(value, (bool, np.bool_)):
            raise TypeMismatch(column.name, operation, "bool", type(value).__name__)
        return bool(value)
    if not isinstance(value, str):
        raise TypeMismatch(column.name, operation, "str", type(value).__name__)
    if kind is Kind.CATEGORY and value not in column.domain:
        raise OutOfDomain(column.name, operation, value, column.domain)
    return value


def _snapshot(value: Any) -> Any:
    """Comparison key that makes ABSENT==ABSENT and NaN==NaN for table equality."""
    if value is ABSENT:
        return ('<absent>',)
    if isinstance(value, float) and math.isnan(value):
        return ('<nan>',)
    return value


class Table:
    """Immutable table of nullable scalars over a fixed column schema."""

    __slots__ = ('_columns', '_index', '_df')

    def __init__(self, columns: Sequence[Column], rows: Iterable[Any] = ()):
        columns = tuple(columns)
        _check_unique(columns)
        data: Dict[str, List[Any]] = {c.name: [] for c in columns}
        names = [c.name for c in columns]
        for row in rows:
            if isinstance(row, Mapping):
                extra = set(row) - set(names)
                if extra:
                    raise InvalidColumn(sorted(extra)[0], "Table", names)
                missing = [n for n in names if n not in row]
                if missing:
                    raise ValueError(
                        f"Table: row {dict(row)!r} has no value for {missing!r}; "
                        "use ABSENT for a missing cell"
                    )
                values = [row[n] for n in names]
            else:
                values = list(row)
                if len(values) != len(columns):
                    raise ValueError(
                        f"Table: row {values!r} has {len(values)} values, "
                        f"expected {len(columns)}"
                    )
            for column, value in zip(columns, values):
                data[column.name].append(coerce_cell(column, value, "Table"))
        self._init(columns, _build_frame(columns, data))

    def _init(self, columns: Tuple[Column, ...], df: pl.DataFrame) -> None:
        self._columns = columns
        self._index = {c.name: c for c in columns}
        self._df = df

    # -- constructors ------------------------------------------------------

    @classmethod
    def from_rows(cls, columns: Sequence[Column], rows: Iterable[Any]) -> "Table":
        return cls(columns, rows)

    @classmethod
    def from_columns(cls, columns: Sequence[Column], data: Mapping[str, Sequence[Any]]) -> "Table":
        """Build a table from column-oriented data keyed by column name."""
        columns = tuple(columns)
        _check_unique(columns)
        names = [c.name for c in columns]
        for name in data:
            if name not in names:
                raise InvalidColumn(name, "Table.from_columns", names)
        lengths = {len(data[n]) for n in names if n in data}
        missing = [n for n in names if n not in data]
        if missing:
            raise ValueError(f"Table.from_columns: no data for {missing!r}")
        if len(lengths) > 1:
            raise ValueError(f"Table.from_columns: columns have different lengths {sorted(lengths)}")
        coerced = {
            c.name: [coerce_cell(c, v, "Table.from_columns") for v in data[c.name]]
            for c in columns
        }
        return cls._from_frame(columns, _build_frame(columns, coerced))

    @classmethod
    def _from_frame(cls, columns: Sequence[Column], df: pl.DataFrame) -> "Table":
        """Wrap a polars frame, casting each column to its schema dtype."""
        columns = tuple(columns)
        if columns:
            df = df.select([pl.col(c.name).cast(c.dtype) for c in columns])
        table = cls.__new__(cls)
        table._init(columns, df)
        return table

    # -- schema ------------------------------------------------------------

    @property
    def columns(self) -> Tuple[Column, ...]:
        return self._columns

    @property
    def names(self) -> List[str]:
        return [c.name for c in self._columns]

    @property
    def height(self) -> int:
        return self._df.height

    def __len__(self) -> int:
        return self._df.height

    def __contains__(self, name: str) -> bool:
        return name in self._index

    def column_spec(self, name: str, operation: str = "column_spec") -> Column:
        try:
            return self._index[name]
        except KeyError:
            raise InvalidColumn(name, operation, self.names) from None

    def column_specs(self, names: ColumnsArg, operation: str) -> List[Column]:
        return [self.column_spec(n, operation) for n in column_names(names)]

    # -- data access -------------------------------------------------------

    @property
    def frame(self) -> pl.DataFrame:
        """The backing polars frame. Treat it as read-only; use to_polars() for a copy."""
        return self._df

    def column(self, name: str) -> List[Any]:
        self.column_spec(name, "column")
        return [ABSENT if v is None else v for v in self._df.get_column(name).to_list()]

    def rows(self) -> List[Dict[str, Any]]:
        names = self.names
        cols = [self.column(n) for n in names]
        return [dict(zip(names, values)) for values in zip(*cols)] if names else []

    def select(self, names: ColumnsArg) -> "Table":
        specs = self.column_specs(names, "select")
        return Table._from_frame(specs, self._df)

    def with_values(self, name: str, values: Sequence[Any]) -> "Table":
        """New table with the cells of column ``name`` replaced by ``values``."""
        spec = self.column_spec(name, "with_values")
        values = list(values)
        if len(values) != self.height:
            raise ValueError(
                f"with_values: got {len(values)} values for {self.height} rows"
            )
        ser = pl.Series(name, [coerce_cell(spec, v, "with_values") for v in values], dtype=spec.dtype)
        return Table._from_frame(self._columns, self._df.with_columns(ser))

    def to_polars(self) -> pl.DataFrame:
        return self._df.clone()

    # -- comparison / display ----------------------------------------------

    def equals(self, other: "Table") -> bool:
        """Same schema and same cells, counting ABSENT==ABSENT and NaN==NaN."""
        if not isinstance(other, Table):
            return False
        if self._columns != other._columns or self.height != other.height:
            return False
        for name in self.names:
            mine = [_snapshot(v) for v in self.column(name)]
            theirs = [_snapshot(v) for v in other.column(name)]
            if mine != theirs:
                return False
        return True

    def __repr__(self):
        schema = ', '.join(repr(c) for c in self._columns)
        return f"Table[{self.height} rows]({schema})\n{self._df}"


def _check_unique(columns: Tuple[Column, ...]) -> None:
    seen = set()
    for c in columns:
        if not isinstance(c, Column):
            raise TypeError(f"expected Column, got {c!r}")
        if c.name in seen:
            raise ValueError(f"duplicate column name {c.name!r}")
        seen.add(c.name)


def _build_frame(columns: Tuple[Column, ...], data: Mapping[str, List[Any]]) -> pl.DataFrame:
    return pl.DataFrame([pl.Series(c.name, data[c.name], dtype=c.dtype) for c in columns])
