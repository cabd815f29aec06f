"""Reveal keys that have no partner in another table.

``unmatched_keys()`` is the anti-join question "which of my keys does the
other table not know about?", answered as a set of distinct values.
``left_join(..., unmatched="error")`` turns the same question into a hard
failure at join time.

Matching is exact: both key columns must have the same kind, nothing is
coerced, and non-key columns are never consulted. NaN is a number: it is
reported unless the other table also has a NaN key. ABSENT keys are never
reported by ``unmatched_keys``, since whether they match anything is
unknown; ``left_join(unmatched="error")`` still refuses them, because they
can never find a partner in a join.
"""
from __future__ import annotations

import logging
import math
from typing import Any, FrozenSet, List, Optional, Tuple

import polars as pl

from .errors import TypeMismatch, UnmatchedKeys
from .scalar import ABSENT, is_nan
from .schema import Column, Kind
from .table import Table
from .utils import key as _cell_key

log = logging.getLogger("lacuna.joins")

_KEY = "__lacuna_key"
_NAN_FLAG = "__lacuna_key_is_nan"
_LEFT_ROW = "__lacuna_left_row"
_RIGHT_ROW = "__lacuna_right_row"
RIGHT_SUFFIX = "_right"
UNMATCHED_POLICIES = ('drop', 'error')


def _key_specs(left: Table, right: Table, key: str, right_key: Optional[str], operation: str) -> Tuple[Column, Column]:
    lspec = left.column_spec(key, operation)
    rspec = right.column_spec(right_key or key, operation)
    if lspec.kind is not rspec.kind:
        raise TypeMismatch(
            rspec.name, operation,
            f"{lspec.kind.value} to match {lspec.name!r}", rspec.kind.value,
        )
    return lspec, rspec


def _has_nan(keys: pl.DataFrame) -> bool:
    return bool(keys.get_column(_KEY).is_nan().any())


def _ordered(keys) -> List[Any]:
    """Sorted keys with NaN, then ABSENT, last."""
    values = [v for v in keys if v is not ABSENT and not is_nan(v)]
    return sorted(values) + [v for v in keys if is_nan(v)] + [v for v in keys if v is ABSENT]


def _key_expr(spec: Column) -> pl.Expr:
    # Enum dtypes with different domains can't be compared directly, tags can
    expr = pl.col(spec.name)
    if spec.kind is Kind.CATEGORY:
        expr = expr.cast(pl.String)
    return expr.alias(_KEY)


def _join_exprs(spec: Column) -> List[pl.Expr]:
    # numbers join on (value, is-NaN) so that NaN keys pair up explicitly
    if spec.kind is not Kind.NUMBER:
        return [_key_expr(spec)]
    col = pl.col(spec.name)
    return [
        pl.when(col.is_nan()).then(pl.lit(0.0)).otherwise(col).alias(_KEY),
        col.is_nan().alias(_NAN_FLAG),
    ]


def _join_names(spec: Column) -> List[str]:
    return [_KEY, _NAN_FLAG] if spec.kind is Kind.NUMBER else [_KEY]


def unmatched_keys(
    left: Table,
    right: Table,
    key: str,
    right_key: Optional[str] = None,
) -> FrozenSet[Any]:
    """Distinct values of ``left[key]`` that occur nowhere in ``right[right_key or key]``.

    Raises:
        InvalidColumn: a key column is missing
        TypeMismatch: the two key columns have different kinds
    """
    lspec, rspec = _key_specs(left, right, key, right_key, "unmatched_keys")
    lkeys = left.frame.select(_key_expr(lspec)).drop_nulls().unique(maintain_order=True)
    rkeys = right.frame.select(_key_expr(rspec)).drop_nulls().unique(maintain_order=True)
    nan_unmatched = False
    if lspec.kind is Kind.NUMBER:
        # NaN matches NaN, as in left_join, complete and group_aggregate
        nan_unmatched = _has_nan(lkeys) and not _has_nan(rkeys)
        lkeys = lkeys.filter(pl.col(_KEY).is_nan().not_())
        rkeys = rkeys.filter(pl.col(_KEY).is_nan().not_())
    missing = lkeys.join(rkeys, on=_KEY, how="anti").get_column(_KEY).to_list()
    if nan_unmatched:
        missing.append(math.nan)
    result = frozenset(missing)
    log.debug(
        "unmatched_keys %s -> %s: %d of %d distinct key(s) unmatched",
        lspec.name, rspec.name, len(result), lkeys.height,
    )
    return result


def anti_join(left: Table, right: Table, key: str, right_key: Optional[str] = None) -> Table:
    """Rows of ``left`` whose key is one of ``unmatched_keys(left, right, key)``."""
    missing = {_cell_key(v) for v in unmatched_keys(left, right, key, right_key)}
    mask = pl.Series([_cell_key(v) in missing for v in left.column(key)], dtype=pl.Boolean)
    return Table._from_frame(left.columns, left.frame.filter(mask))


def left_join(
    left: Table,
    right: Table,
    on: str,
    right_on: Optional[str] = None,
    *,
    unmatched: str = 'drop',
) -> Table:
    """Join every row of ``left`` with its matching rows of ``right``.

    Right's non-key columns are appended after left's columns; a name that
    clashes with a left column gets the ``_right`` suffix. Left rows with
    no match get ABSENT in the right columns. Row order follows ``left``,
    then ``right`` for multiple matches.

    Args:
        unmatched: 'drop' (right rows without a left partner are simply
            not part of a left join) or 'error' (raise ``UnmatchedKeys``
            if any left key has no match in ``right``)
    """
    if unmatched not in UNMATCHED_POLICIES:
        raise ValueError(f"unmatched must be one of {UNMATCHED_POLICIES}, got {unmatched!r}")
    lspec, rspec = _key_specs(left, right, on, right_on, "left_join")

    if unmatched == 'error':
        missing = set(unmatched_keys(left, right, on, right_on))
        if left.frame.get_column(lspec.name).null_count():
            missing.add(ABSENT)
        if missing:
            raise UnmatchedKeys(lspec.name, _ordered(missing))

    taken = set(left.names)
    right_cols: List[Column] = []
    renames = {}
    for spec in right.columns:
        if spec.name == rspec.name:
            continue
        name = spec.name
        if name in taken:
            name = f"{name}{RIGHT_SUFFIX}"
            if name in taken:
                raise ValueError(f"left_join: cannot place right column {spec.name!r}, {name!r} is taken")
        taken.add(name)
        renames[spec.name] = name
        right_cols.append(spec.renamed(name))

    lf = left.frame.with_row_index(_LEFT_ROW).with_columns(_join_exprs(lspec))
    rf = right.frame.with_row_index(_RIGHT_ROW).select(
        _join_exprs(rspec) + [pl.col(_RIGHT_ROW)]
        + [pl.col(old).alias(new) for old, new in renames.items()]
    )
    joined = (
        lf.join(rf, on=_join_names(lspec), how="left")
        .sort([_LEFT_ROW, _RIGHT_ROW], nulls_last=True)
    )
    log.debug(
        "left_join on %s=%s: %d left row(s) -> %d row(s)",
        lspec.name, rspec.name, left.height, joined.height,
    )
    return Table._from_frame(left.columns + tuple(right_cols), joined)
