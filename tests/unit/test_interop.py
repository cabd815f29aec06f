import math

import pandas as pd
import polars as pl
import pytest

from lacuna import (
    ABSENT, Kind, Table, boolean, category, from_pandas, from_polars, number, text, to_pandas,
)
from lacuna.errors import OutOfDomain, TypeMismatch


# ============================================================================
# Tests: polars
# ============================================================================

class TestFromPolars:
    def test_kinds_inferred(self):
        df = pl.DataFrame({
            "n": [1, 2],
            "f": [1.5, float('nan')],
            "s": ["x", None],
            "b": [True, None],
        })
        t = from_polars(df)
        assert [c.kind for c in t.columns] == [Kind.NUMBER, Kind.NUMBER, Kind.TEXT, Kind.BOOLEAN]
        assert t.column("n") == [1.0, 2.0]
        assert math.isnan(t.column("f")[1])
        assert t.column("s") == ["x", ABSENT]
        assert t.column("b") == [True, ABSENT]

    def test_enum_domain(self):
        df = pl.DataFrame({"c": pl.Series(["no", "no"], dtype=pl.Enum(["yes", "no"]))})
        spec = from_polars(df).column_spec("c")
        assert spec.kind is Kind.CATEGORY
        assert spec.domain == ("yes", "no")

    def test_declared_domain_for_strings(self):
        df = pl.DataFrame({"c": ["no", None]})
        t = from_polars(df, domains={"c": ["yes", "no"]})
        assert t.column_spec("c").domain == ("yes", "no")
        assert t.column("c") == ["no", ABSENT]

    def test_value_outside_declared_domain(self):
        df = pl.DataFrame({"c": ["no", "maybe"]})
        with pytest.raises(OutOfDomain):
            from_polars(df, domains={"c": ["yes", "no"]})

    def test_unsupported_dtype(self):
        df = pl.DataFrame({"l": [[1], [2]]})
        with pytest.raises(TypeMismatch):
            from_polars(df)

    def test_polars_round_trip_keeps_nan_and_absent(self):
        t = Table([number("x"), text("s")], [(1, None), (None, "a"), (float('nan'), "b")])
        assert from_polars(t.to_polars()).equals(t)


# ============================================================================
# Tests: pandas
# ============================================================================

class TestPandas:
    def test_nan_stays_nan(self):
        t = from_pandas(pd.DataFrame({"x": [1.0, float('nan')]}))
        xs = t.column("x")
        assert xs[0] == 1.0
        assert math.isnan(xs[1])

    def test_nullable_float_na_is_absent(self):
        df = pd.DataFrame({"x": pd.array([1.0, None], dtype="Float64")})
        assert from_pandas(df).column("x") == [1.0, ABSENT]

    def test_category_dtype(self):
        df = pd.DataFrame({"smoker": pd.Categorical(["no", "no"], categories=["yes", "no"])})
        spec = from_pandas(df).column_spec("smoker")
        assert spec.kind is Kind.CATEGORY
        assert spec.domain == ("yes", "no")

    def test_to_pandas_dtypes(self):
        t = Table(
            [number("x"), text("s"), boolean("b"), category("c", ["yes", "no"])],
            [(1, "a", True, "no"), (None, None, None, None)],
        )
        df = to_pandas(t)
        assert list(df.columns) == ["x", "s", "b", "c"]
        assert str(df["x"].dtype) == "Float64"
        assert str(df["b"].dtype) == "boolean"
        assert isinstance(df["c"].dtype, pd.CategoricalDtype)
        assert list(df["c"].cat.categories) == ["yes", "no"]
        assert df["x"].iloc[0] == 1.0
        assert df["x"].iloc[1] is pd.NA
        assert df["s"].iloc[1] is pd.NA
        assert df.isna().iloc[1].all()

    def test_to_pandas_keeps_domain_for_empty_groups(self):
        t = Table([category("c", ["yes", "no"])], [("no",)])
        assert list(to_pandas(t)["c"].cat.categories) == ["yes", "no"]
