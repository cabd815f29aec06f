"""Turn implicit missing values into explicit ones.

``complete()`` expands a table to the full Cartesian product of its key
domains. Key combinations already present keep their rows untouched; each
absent combination gets a new row with ABSENT in every non-key column.

Key specs:
  - ``"col"`` or ``observed("col")``: the distinct values seen in the data,
    sorted ascending, ABSENT last (a bare name on a CATEGORY column means
    ``levels("col")`` instead)
  - ``domain("col", values)``: an explicitly supplied, ordered domain
  - ``levels("col")``: the declared domain of a CATEGORY column
  - ``nesting("a", "b")``: only the (a, b) pairs present in the data

The result is in grid order (lexicographic over the specs, in the order
given), not in the input's row order. Rows whose keys fall outside a
supplied domain are appended after the grid (``out_of_domain="keep"``) or
dropped (``"drop"``).
"""
from __future__ import annotations

import itertools
import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from .config import options, validate_out_of_domain
from .errors import EmptyDomain, TypeMismatch
from .scalar import ABSENT, is_absent, is_number
from .schema import is_categorical
from .table import Table, coerce_cell
from .utils import distinct, key as _key, sorted_observed

log = logging.getLogger("lacuna.complete")


# ---------------------------------------------------------------------------
# Key specs
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Observed:
    name: str


@dataclass(frozen=True)
class Domain:
    name: str
    values: Tuple[Any, ...]


@dataclass(frozen=True)
class Levels:
    name: str


@dataclass(frozen=True)
class Nesting:
    names: Tuple[str, ...]


KeySpec = Union[str, Observed, Domain, Levels, Nesting]


def observed(name: str) -> Observed:
    return Observed(name)


def domain(name: str, values: Iterable[Any]) -> Domain:
    return Domain(name, tuple(values))


def levels(name: str) -> Levels:
    return Levels(name)


def nesting(*names: str) -> Nesting:
    if not names:
        raise ValueError("nesting() needs at least one column")
    return Nesting(tuple(names))


def full_seq(values: Iterable[Any], period: float) -> List[float]:
    """Every value from min to max of ``values`` in steps of ``period``.

    ABSENT values are ignored. Raises ValueError when a value does not sit
    on the step grid, or on a NaN input. Steps that hit an input value
    return that value exactly; the others are rounded onto the grid, so
    ``full_seq([0.1, 0.3], 0.1)`` ends at 0.3, not 0.30000000000000004.
    """
    if not is_number(period) or not 0 < period < math.inf:
        raise ValueError(f"full_seq: period must be a positive finite number, got {period!r}")
    nums = []
    for v in values:
        if is_absent(v):
            continue
        if not is_number(v):
            raise TypeMismatch(None, "full_seq", "number", type(v).__name__)
        if not math.isfinite(v):
            raise ValueError(f"full_seq: {v!r} has no place in a sequence")
        nums.append(float(v))
    if not nums:
        return []
    lo, hi = min(nums), max(nums)
    on_grid = {}
    for v in nums:
        steps = (v - lo) / period
        if not math.isclose(steps, round(steps), abs_tol=1e-9):
            raise ValueError(f"full_seq: {v!r} is not a multiple of {period!r} away from {lo!r}")
        on_grid[int(round(steps))] = v
    count = int(round((hi - lo) / period))
    digits = max(0, -math.floor(math.log10(period))) + 9
    return [on_grid.get(i, round(lo + i * period, digits)) for i in range(count + 1)]


# ---------------------------------------------------------------------------
# Domain resolution
# ---------------------------------------------------------------------------

@dataclass
class _Resolved:
    names: Tuple[str, ...]
    tuples: List[Tuple[Any, ...]]
    supplied: bool

    def keyset(self):
        return {tuple(_key(v) for v in t) for t in self.tuples}


def _resolve(table: Table, spec: KeySpec) -> _Resolved:
    if isinstance(spec, str):
        column = table.column_spec(spec, "complete")
        spec = Levels(spec) if is_categorical(column) else Observed(spec)

    if isinstance(spec, Observed):
        column = table.column_spec(spec.name, "complete")
        values = sorted_observed(column, table.column(spec.name))
        resolved = _Resolved((spec.name,), [(v,) for v in values], supplied=False)
    elif isinstance(spec, Levels):
        column = table.column_spec(spec.name, "complete")
        if not is_categorical(column):
            raise TypeMismatch(spec.name, "complete", "category column for levels()", column.kind.value)
        values = list(column.domain)
        if any(v is ABSENT for v in table.column(spec.name)):
            values.append(ABSENT)
        resolved = _Resolved((spec.name,), [(v,) for v in values], supplied=False)
    elif isinstance(spec, Domain):
        column = table.column_spec(spec.name, "complete")
        values = []
        for v in spec.values:
            stored = coerce_cell(column, v, "complete")
            values.append(ABSENT if stored is None else stored)
        resolved = _Resolved((spec.name,), [(v,) for v in distinct(values)], supplied=True)
    elif isinstance(spec, Nesting):
        table.column_specs(spec.names, "complete")
        cols = [table.column(n) for n in spec.names]
        seen = set()
        tuples = []
        for t in zip(*cols):
            k = tuple(_key(v) for v in t)
            if k not in seen:
                seen.add(k)
                tuples.append(t)
        resolved = _Resolved(spec.names, tuples, supplied=False)
    else:
        raise TypeError(f"complete: cannot use {spec!r} as a key spec")

    if not resolved.tuples:
        raise EmptyDomain(resolved.names[0])
    return resolved


# ---------------------------------------------------------------------------
# complete
# ---------------------------------------------------------------------------

def complete(
    table: Table,
    keys: Sequence[KeySpec],
    *,
    fill: Optional[Mapping[str, Any]] = None,
    explicit: bool = True,
    out_of_domain: Optional[str] = None,
) -> Table:
    """Expand ``table`` to every combination of the key domains.

    Args:
        table: input table (not modified)
        keys: key specs (see module docstring); a bare str is a column name
        fill: optional column -> value used for ABSENT non-key cells
        explicit: if True, ``fill`` also replaces ABSENT cells that were
            already in the input; if False, only the synthesized rows
        out_of_domain: 'keep' (append rows whose keys fall outside a
            supplied domain) or 'drop' (default: ``options.out_of_domain``)

    Returns:
        A new Table with the same schema, in grid order, followed by any
        kept out-of-domain rows in their original order.

    Raises:
        InvalidColumn: unknown column in a key spec or in ``fill``
        EmptyDomain: a key spec resolved to no values
        TypeMismatch / OutOfDomain: a supplied domain or fill value is not
            legal for its column
        ValueError: a column is used by two key specs, or is both key and fill
    """
    if isinstance(keys, (str, Observed, Domain, Levels, Nesting)):
        keys = [keys]
    if out_of_domain is None:
        out_of_domain = options.out_of_domain
    validate_out_of_domain(out_of_domain)
    if not keys:
        raise ValueError("complete: at least one key spec is required")

    resolved = [_resolve(table, spec) for spec in keys]
    key_names: List[str] = []
    for r in resolved:
        for name in r.names:
            if name in key_names:
                raise ValueError(f"complete: column {name!r} appears in more than one key spec")
            key_names.append(name)

    fill = dict(fill or {})
    fill_values: Dict[str, Any] = {}
    for name, value in fill.items():
        spec = table.column_spec(name, "complete")
        if name in key_names:
            raise ValueError(f"complete: key column {name!r} cannot be filled")
        coerce_cell(spec, value, "complete")
        fill_values[name] = value

    rows = table.rows()
    buckets: Dict[Tuple[Any, ...], List[int]] = {}
    for i, row in enumerate(rows):
        buckets.setdefault(tuple(_key(row[n]) for n in key_names), []).append(i)

    value_names = [n for n in table.names if n not in key_names]
    out: List[Dict[str, Any]] = []
    synthesized = 0
    for combo in itertools.product(*[r.tuples for r in resolved]):
        flat = [v for part in combo for v in part]
        k = tuple(_key(v) for v in flat)
        if k in buckets:
            out.extend(rows[i] for i in buckets[k])
            continue
        new_row = dict(zip(key_names, flat))
        for name in value_names:
            new_row[name] = fill_values.get(name, ABSENT)
        out.append(new_row)
        synthesized += 1

    extra = _out_of_domain_rows(rows, resolved)
    if extra:
        if out_of_domain == 'keep':
            log.debug("complete: keeping %d out-of-domain row(s) after the grid", len(extra))
            out.extend(rows[i] for i in extra)
        else:
            log.warning("complete: dropping %d out-of-domain row(s)", len(extra))

    if explicit and fill_values:
        out = [
            {n: (fill_values[n] if n in fill_values and row[n] is ABSENT else row[n]) for n in table.names}
            for row in out
        ]

    log.debug(
        "complete keys=%s input=%d output=%d synthesized=%d",
        key_names, table.height, len(out), synthesized,
    )
    return Table(table.columns, out)


def _out_of_domain_rows(rows: List[Dict[str, Any]], resolved: List[_Resolved]) -> List[int]:
    supplied = [(r.names, r.keyset()) for r in resolved if r.supplied]
    if not supplied:
        return []
    extra = []
    for i, row in enumerate(rows):
        for names, keyset in supplied:
            if tuple(_key(row[n]) for n in names) not in keyset:
                extra.append(i)
                break
    return extra
