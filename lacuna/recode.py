"""Coalesce and sentinel recoding.

These two are inverses in spirit: ``coalesce`` turns ABSENT into an
ordinary value, ``recode_sentinel`` turns an ordinary-looking value
(say -99) into ABSENT. Neither ever touches NaN, which is a number, not
a missing marker.
"""
from __future__ import annotations

import functools
import logging
import operator
from typing import Any, Iterable, List, Mapping, Optional, Sequence

import polars as pl

from .config import options
from .errors import OutOfDomain, TypeMismatch
from .scalar import ABSENT, is_absent, is_nan, kind_of, same_value
from .schema import Column, Kind
from .table import ColumnsArg, Table, coerce_cell

log = logging.getLogger("lacuna.recode")


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, str)


# ---------------------------------------------------------------------------
# coalesce
# ---------------------------------------------------------------------------

def coalesce(values: Iterable[Any], default: Any) -> List[Any]:
    """Replace ABSENT elements with ``default``; everything else (NaN too) passes through.

    ``default`` may be a scalar or a sequence of the same length, in which
    case the replacement is taken elementwise.
    """
    values = list(values)
    if _is_sequence(default):
        defaults = list(default)
        if len(defaults) != len(values):
            raise ValueError(
                f"coalesce: default has {len(defaults)} elements, values have {len(values)}"
            )
    else:
        defaults = [default] * len(values)
    return [d if is_absent(v) else v for v, d in zip(values, defaults)]


def coalesce_columns(table: Table, defaults: Mapping[str, Any]) -> Table:
    """Table form of ``coalesce``: fill ABSENT cells of each named column with its default."""
    exprs = []
    for name, default in defaults.items():
        spec = table.column_spec(name, "coalesce_columns")
        value = coerce_cell(spec, default, "coalesce_columns")
        exprs.append(pl.col(name).fill_null(pl.lit(value).cast(spec.dtype)).alias(name))
    log.debug("coalesce_columns %s rows=%d", list(defaults), table.height)
    if not exprs:
        return table
    return Table._from_frame(table.columns, table.frame.with_columns(exprs))


# ---------------------------------------------------------------------------
# sentinel recoding
# ---------------------------------------------------------------------------

def recode_sentinel(values: Iterable[Any], sentinel: Any) -> List[Any]:
    """Replace elements exactly equal to ``sentinel`` with ABSENT.

    Equality is exact: kinds must agree (True is not 1), ABSENT stays ABSENT,
    and NaN is never recoded, not even by a NaN sentinel.
    """
    return [ABSENT if is_absent(v) or same_value(v, sentinel) else v for v in values]


def _applicable(column: Column, sentinel: Any) -> bool:
    """Whether a sentinel could ever equal a cell of ``column``."""
    if is_absent(sentinel) or is_nan(sentinel):
        return False
    kind = kind_of(sentinel)
    if column.kind is Kind.CATEGORY:
        return kind is Kind.TEXT and sentinel in column.domain
    return kind is column.kind


def recode_sentinels(
    table: Table,
    sentinels: Optional[Iterable[Any]] = None,
    columns: Optional[ColumnsArg] = None,
) -> Table:
    """Recode every cell equal to one of ``sentinels`` to ABSENT.

    This is the load-time normalisation step: sentinels that cannot occur
    in a column (a number in a text column, a tag outside a category's
    domain) are skipped for that column rather than raising.

    Args:
        table: input table (not modified)
        sentinels: values meaning "missing" (default: ``options.sentinels``)
        columns: columns to recode (default: all)
    """
    if sentinels is None:
        sentinels = options.sentinels
    sentinels = list(sentinels)
    specs = table.columns if columns is None else table.column_specs(columns, "recode_sentinels")

    exprs = []
    for spec in specs:
        relevant = [s for s in sentinels if _applicable(spec, s)]
        if not relevant:
            continue
        match = functools.reduce(
            operator.or_,
            [pl.col(spec.name) == pl.lit(coerce_cell(spec, s, "recode_sentinels")).cast(spec.dtype)
             for s in relevant],
        )
        exprs.append(
            pl.when(match)
            .then(pl.lit(None, dtype=spec.dtype))
            .otherwise(pl.col(spec.name))
            .alias(spec.name)
        )
    log.debug("recode_sentinels %r over %d column(s)", sentinels, len(exprs))
    if not exprs:
        return table
    return Table._from_frame(table.columns, table.frame.with_columns(exprs))


def recode_sentinel_column(table: Table, column: str, sentinel: Any) -> Table:
    """Recode one column's ``sentinel`` to ABSENT, raising if it can never match.

    Unlike ``recode_sentinels``, a sentinel of the wrong kind for the column
    is an error here, since the caller named both explicitly.
    """
    spec = table.column_spec(column, "recode_sentinel_column")
    if not is_absent(sentinel) and not is_nan(sentinel) and not _applicable(spec, sentinel):
        if spec.kind is Kind.CATEGORY and isinstance(sentinel, str):
            raise OutOfDomain(column, "recode_sentinel_column", sentinel, spec.domain)
        raise TypeMismatch(column, "recode_sentinel_column", spec.kind.value, type(sentinel).__name__)
    return recode_sentinels(table, [sentinel], [column])
