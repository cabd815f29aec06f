"""Conversion between Tables and polars / pandas DataFrames.

Kinds are inferred from dtypes: numbers -> NUMBER, strings -> TEXT,
booleans -> BOOLEAN, Enum / Categorical / pandas ``category`` -> CATEGORY.
A ``domains`` mapping declares (or overrides) the domain of category
columns, and turns a string column into a category column.

NaN and ABSENT stay apart in both directions. On the pandas side NaN in a
float column stays NaN and ``None``/``pd.NA`` become ABSENT; ``to_pandas``
returns nullable extension dtypes so ABSENT comes back as ``pd.NA``.
Note that plain numpy float columns can't hold ``None``: pandas has
already turned it into NaN before lacuna sees it.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

import numpy as np
import pandas as pd
import polars as pl

from .errors import OutOfDomain
from .schema import Column, Kind, column_from_dtype
from .table import Table

log = logging.getLogger("lacuna.interop")


def _observed_domain(ser: pl.Series) -> List[str]:
    return sorted(str(v) for v in ser.drop_nulls().unique().to_list())


def from_polars(df: pl.DataFrame, domains: Optional[Mapping[str, Sequence[str]]] = None) -> Table:
    """Wrap a polars frame as a Table, inferring kinds from dtypes."""
    domains = dict(domains or {})
    columns: List[Column] = []
    for name in df.columns:
        ser = df.get_column(name)
        domain = domains.get(name)
        if domain is None and ser.dtype == pl.Categorical:
            domain = _observed_domain(ser)
        spec = column_from_dtype(name, ser.dtype, domain)
        if spec.kind is Kind.CATEGORY:
            allowed = set(spec.domain)
            for v in ser.cast(pl.String).drop_nulls().unique().to_list():
                if v not in allowed:
                    raise OutOfDomain(name, "from_polars", v, spec.domain)
        columns.append(spec)
    log.debug("from_polars: %d row(s), schema %s", df.height, columns)
    return Table._from_frame(columns, df)


def from_pandas(df: pd.DataFrame, domains: Optional[Mapping[str, Sequence[str]]] = None) -> Table:
    """Build a Table from a pandas frame, keeping NaN distinct from missing."""
    domains = dict(domains or {})
    for name in df.columns:
        if isinstance(df[name].dtype, pd.CategoricalDtype) and name not in domains:
            domains[name] = [str(c) for c in df[name].cat.categories]
    pl_df = pl.from_pandas(df, nan_to_null=False)
    return from_polars(pl_df, domains)


def _pandas_array(spec: Column, values: List[Any]):
    present = [v is not None for v in values]
    if spec.kind is Kind.NUMBER:
        data = np.array([v if v is not None else 0.0 for v in values], dtype=np.float64)
        mask = np.array([not p for p in present], dtype=bool)
        return pd.arrays.FloatingArray(data, mask)
    if spec.kind is Kind.BOOLEAN:
        return pd.array([v if v is not None else pd.NA for v in values], dtype="boolean")
    if spec.kind is Kind.TEXT:
        return pd.array([v if v is not None else pd.NA for v in values], dtype="string")
    return pd.Categorical(values, categories=list(spec.domain))


def to_pandas(table: Table) -> pd.DataFrame:
    """Convert to pandas with nullable dtypes (Float64, boolean, string, category)."""
    data: Dict[str, Any] = {}
    for spec in table.columns:
        raw = table.frame.get_column(spec.name).to_list()
        data[spec.name] = _pandas_array(spec, raw)
    return pd.DataFrame(data, columns=table.names)
