"""lacuna: explicit, implicit and sentinel missing values in tables.

Usage::

    from lacuna import Table, text, number, fill, complete

    t = Table([text("person"), number("treatment")], [("Derrick Whitmore", 1), (None, 2)])
    fill(t, "person").column("person")  # -> ['Derrick Whitmore', 'Derrick Whitmore']
"""
from .aggregate import (
    Aggregate, Reducer, count, custom, group_aggregate, maximum, mean, minimum,
    reducer, sd, total,
)
from .complete import complete, domain, full_seq, levels, nesting, observed
from .config import configure_logging, option_context, options
from .errors import (
    EmptyDomain, InvalidColumn, LacunaError, OutOfDomain, ReducerConfigError,
    ReducerError, TypeMismatch, UnmatchedKeys,
)
from .fill import fill
from .interop import from_pandas, from_polars, to_pandas
from .joins import anti_join, left_join, unmatched_keys
from .recode import coalesce, coalesce_columns, recode_sentinel, recode_sentinel_column, recode_sentinels
from .reshape import drop_absent, pivot_longer, pivot_wider
from .scalar import ABSENT, Absent, is_absent, is_nan
from .schema import Column, Kind, boolean, category, number, text
from .table import Table

__version__ = "0.1.0"
