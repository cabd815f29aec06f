"""Last observation carried forward.

``fill()`` replaces ABSENT cells with a neighbouring observed value:

  - ``down``: nearest preceding value; a leading run stays ABSENT
  - ``up``: nearest following value; a trailing run stays ABSENT
  - ``downup``: down, then up (fills a leading run too)
  - ``updown``: up, then down

NaN is an observed value: it is carried like any other and never
overwritten. With ``by=``, values are only carried between rows that share
the same ``by`` values.
"""
from __future__ import annotations

import logging
from typing import Optional

import polars as pl

from .config import options, validate_fill_direction
from .table import ColumnsArg, Table, column_names

log = logging.getLogger("lacuna.fill")

# polars fill_null strategy for each pass
_PASSES = {
    'down': ('forward',),
    'up': ('backward',),
    'downup': ('forward', 'backward'),
    'updown': ('backward', 'forward'),
}


def _fill_expr(name: str, direction: str, by: Optional[list]) -> pl.Expr:
    expr = pl.col(name)
    for strategy in _PASSES[direction]:
        expr = expr.fill_null(strategy=strategy)
    if by:
        expr = expr.over(by)
    return expr.alias(name)


def fill(
    table: Table,
    columns: ColumnsArg,
    direction: Optional[str] = None,
    *,
    by: Optional[ColumnsArg] = None,
) -> Table:
    """Fill ABSENT cells of ``columns`` from neighbouring rows.

    Args:
        table: input table (not modified)
        columns: a column name or a sequence of names to fill
        direction: one of 'down', 'up', 'downup', 'updown'
            (default: ``options.fill_direction``)
        by: optional grouping column(s); values never cross group boundaries

    Returns:
        A new Table with the same schema and row order.

    Raises:
        InvalidColumn: a target or ``by`` column is not in the table
        ValueError: unknown direction, or a column is both target and ``by``
    """
    if direction is None:
        direction = options.fill_direction
    validate_fill_direction(direction)

    targets = column_names(columns)
    table.column_specs(targets, "fill")
    groups = column_names(by) if by is not None else []
    table.column_specs(groups, "fill")
    overlap = set(targets) & set(groups)
    if overlap:
        raise ValueError(f"fill: {sorted(overlap)!r} used both as target and as by column")

    log.debug("fill %s direction=%s by=%s rows=%d", targets, direction, groups, table.height)
    if not targets or table.height == 0:
        return table

    filled = table.frame.with_columns([_fill_expr(n, direction, groups) for n in targets])
    return Table._from_frame(table.columns, filled)
