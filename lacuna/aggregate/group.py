"""Group-by aggregation that can keep empty categories.

With ``retain_declared_domain=True`` every tag of the category column's
declared domain becomes a group, including tags no row uses; those groups
get each reducer's empty result (count 0, mean NaN, min +inf, max -inf,
sd ABSENT).

The alternative, aggregating observed groups and then calling
``complete(result, [category_column])``, restores the missing categories
too, but with ABSENT in every aggregate, count included: the information
that the count is exactly zero is lost.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping

from lacuna.errors import ReducerError, TypeMismatch
from lacuna.scalar import ABSENT
from lacuna.schema import Column, is_categorical, is_numeric
from lacuna.table import Table
from lacuna.utils import key, sorted_observed
from .builtin import Aggregate

log = logging.getLogger("lacuna.aggregate")


def _group_domain(table: Table, spec: Column, retain_declared_domain: bool) -> List[Any]:
    values = table.column(spec.name)
    if not retain_declared_domain:
        return sorted_observed(spec, values)
    if not is_categorical(spec):
        raise TypeMismatch(
            spec.name, "group_aggregate",
            "category column when retain_declared_domain=True", spec.kind.value,
        )
    domain = list(spec.domain)
    if any(v is ABSENT for v in values):
        domain.append(ABSENT)
    return domain


def _validate(table: Table, category_column: str, aggregators: Mapping[str, Aggregate]) -> None:
    for out_name, agg in aggregators.items():
        if not isinstance(agg, Aggregate):
            raise TypeError(
                f"group_aggregate: {out_name!r} must be an Aggregate "
                f"(count(), mean(col), custom(col, reducer), ...), got {agg!r}"
            )
        if out_name == category_column:
            raise ValueError(f"group_aggregate: output {out_name!r} collides with the group column")
        if agg.column is None:
            continue
        spec = table.column_spec(agg.column, "group_aggregate")
        if agg.reducer.numeric and not is_numeric(spec):
            raise TypeMismatch(
                spec.name, f"group_aggregate({agg.reducer.name})", "number", spec.kind.value,
            )


def group_aggregate(
    table: Table,
    category_column: str,
    aggregators: Mapping[str, Aggregate],
    *,
    retain_declared_domain: bool = False,
) -> Table:
    """Aggregate ``table`` per value of ``category_column``.

    Args:
        table: input table (not modified)
        category_column: the grouping column
        aggregators: output column name -> Aggregate, e.g.
            ``{"n": count(), "avg": mean("age"), "sd": sd("age")}``
        retain_declared_domain: group over the column's full declared
            domain instead of the observed values only

    Returns:
        One row per group: the group column followed by the aggregates, in
        declared-domain order for category columns (ascending otherwise),
        an ABSENT group last.

    Raises:
        InvalidColumn: unknown group or aggregate column
        TypeMismatch: a numeric reducer on a non-number column, or
            ``retain_declared_domain`` on a non-category column
        ReducerError: a user reducer raised
    """
    spec = table.column_spec(category_column, "group_aggregate")
    _validate(table, category_column, aggregators)
    groups = _group_domain(table, spec, retain_declared_domain)

    members: Dict[Any, List[int]] = {}
    for i, v in enumerate(table.column(category_column)):
        members.setdefault(key(v), []).append(i)

    cells = {
        agg.column: table.column(agg.column)
        for agg in aggregators.values() if agg.column is not None
    }

    out_columns = [spec] + [Column(name, agg.reducer.kind) for name, agg in aggregators.items()]
    rows = []
    for group in groups:
        idx = members.get(key(group), [])
        row = [group]
        for agg in aggregators.values():
            values = idx if agg.column is None else [cells[agg.column][i] for i in idx]
            row.append(_reduce(agg, values, group))
        rows.append(row)

    log.debug(
        "group_aggregate by %s: %d group(s), %d empty, retain_declared_domain=%s",
        category_column, len(groups),
        sum(1 for g in groups if key(g) not in members), retain_declared_domain,
    )
    return Table(out_columns, rows)


def _reduce(agg: Aggregate, values: List[Any], group: Any) -> Any:
    try:
        return agg.reducer(values)
    except Exception as e:
        raise ReducerError(agg.reducer.name, agg.column, group, e) from e
