"""Reshaping that moves missing values between implicit and explicit.

``pivot_wider`` spreads one column into many; a (row, column) pair with no
source row becomes an explicit ABSENT cell. ``pivot_longer`` stacks
columns back into rows, and with ``drop_absent=True`` (like
``drop_absent()``) explicit ABSENT cells disappear, becoming implicit.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .errors import TypeMismatch
from .scalar import ABSENT
from .schema import Column, Kind
from .table import ColumnsArg, Table, column_names
from .utils import key

log = logging.getLogger("lacuna.reshape")


def drop_absent(table: Table, columns: Optional[ColumnsArg] = None) -> Table:
    """Rows of ``table`` with no ABSENT cell in ``columns`` (default: all). NaN is kept."""
    specs = table.columns if columns is None else table.column_specs(columns, "drop_absent")
    if not specs or table.height == 0:
        return table
    kept = table.frame.drop_nulls(subset=[c.name for c in specs])
    log.debug("drop_absent: %d -> %d row(s)", table.height, kept.height)
    return Table._from_frame(table.columns, kept)


def pivot_wider(
    table: Table,
    names_from: str,
    values_from: str,
    id_columns: Optional[Sequence[str]] = None,
) -> Table:
    """One row per id tuple, one column per distinct ``names_from`` value.

    Args:
        names_from: column whose values name the new columns (``str(value)``)
        values_from: column that fills the new columns
        id_columns: columns identifying an output row (default: every
            column except ``names_from`` and ``values_from``)

    Raises:
        ValueError: ABSENT in ``names_from``, duplicate (id, name) pairs, or
            a new column name clashing with an id column
    """
    name_spec = table.column_spec(names_from, "pivot_wider")
    value_spec = table.column_spec(values_from, "pivot_wider")
    if id_columns is None:
        id_specs = [c for c in table.columns if c.name not in (names_from, values_from)]
    else:
        id_specs = table.column_specs(list(id_columns), "pivot_wider")
    id_names = [c.name for c in id_specs]

    rows = table.rows()
    new_names: List[str] = []
    seen_names = set()
    for row in rows:
        v = row[names_from]
        if v is ABSENT:
            raise ValueError(f"pivot_wider: {names_from!r} has ABSENT values, which cannot name a column")
        name = _column_name(name_spec, v)
        if name not in seen_names:
            seen_names.add(name)
            new_names.append(name)
    clash = seen_names & set(id_names)
    if clash:
        raise ValueError(f"pivot_wider: new column(s) {sorted(clash)!r} clash with id columns")

    order: List[Tuple[Any, ...]] = []
    cells: Dict[Tuple[Any, ...], Dict[str, Any]] = {}
    ids: Dict[Tuple[Any, ...], Dict[str, Any]] = {}
    for row in rows:
        k = tuple(key(row[n]) for n in id_names)
        if k not in cells:
            order.append(k)
            cells[k] = {}
            ids[k] = {n: row[n] for n in id_names}
        name = _column_name(name_spec, row[names_from])
        if name in cells[k]:
            raise ValueError(
                f"pivot_wider: more than one {values_from!r} value for "
                f"{ids[k]!r} and {names_from}={row[names_from]!r}"
            )
        cells[k][name] = row[values_from]

    out_columns = list(id_specs) + [value_spec.renamed(n) for n in new_names]
    out_rows = [
        dict(ids[k], **{n: cells[k].get(n, ABSENT) for n in new_names})
        for k in order
    ]
    log.debug(
        "pivot_wider %s/%s: %d row(s) -> %d row(s) x %d new column(s)",
        names_from, values_from, table.height, len(out_rows), len(new_names),
    )
    return Table(out_columns, out_rows)


def _column_name(spec: Column, value: Any) -> str:
    if spec.kind is Kind.NUMBER and float(value).is_integer():
        return str(int(value))
    return str(value)


def pivot_longer(
    table: Table,
    columns: ColumnsArg,
    names_to: str = "name",
    values_to: str = "value",
    drop_absent: bool = False,
) -> Table:
    """Stack ``columns`` into (``names_to``, ``values_to``) rows.

    The remaining columns identify each row and are repeated. With
    ``drop_absent=True`` rows whose value is ABSENT are left out.

    Raises:
        TypeMismatch: the stacked columns do not share one kind (category
            columns must also share their domain)
        ValueError: ``names_to``/``values_to`` clash with a kept column
    """
    specs = table.column_specs(columns, "pivot_longer")
    if not specs:
        raise ValueError("pivot_longer: no columns to stack")
    first = specs[0]
    for spec in specs[1:]:
        if spec.kind is not first.kind or spec.domain != first.domain:
            raise TypeMismatch(spec.name, "pivot_longer", f"{first.kind.value} like {first.name!r}", spec.kind.value)
    stacked = set(column_names(columns))
    id_specs = [c for c in table.columns if c.name not in stacked]
    taken = {c.name for c in id_specs}
    for new in (names_to, values_to):
        if new in taken:
            raise ValueError(f"pivot_longer: {new!r} clashes with an existing column")
    if names_to == values_to:
        raise ValueError("pivot_longer: names_to and values_to must differ")

    out_columns = id_specs + [Column(names_to, Kind.TEXT), first.renamed(values_to)]
    out_rows = []
    for row in table.rows():
        base = {c.name: row[c.name] for c in id_specs}
        for spec in specs:
            value = row[spec.name]
            if drop_absent and value is ABSENT:
                continue
            out_rows.append(dict(base, **{names_to: spec.name, values_to: value}))
    log.debug(
        "pivot_longer %d column(s): %d row(s) -> %d row(s), drop_absent=%s",
        len(specs), table.height, len(out_rows), drop_absent,
    )
    return Table(out_columns, out_rows)
