import math

import pytest

from lacuna import (
    ABSENT, Table, category, coalesce, coalesce_columns, number, option_context,
    recode_sentinel, recode_sentinel_column, recode_sentinels, text,
)
from lacuna.errors import InvalidColumn, OutOfDomain, TypeMismatch

NAN = float('nan')


# ============================================================================
# Tests: coalesce
# ============================================================================

class TestCoalesce:
    def test_replaces_absent(self):
        assert coalesce([1, 4, 5, 7, ABSENT], 0) == [1, 4, 5, 7, 0]

    def test_none_counts_as_absent(self):
        assert coalesce([None, 2], 0) == [0, 2]

    def test_nan_passes_through(self):
        result = coalesce([NAN, ABSENT], 0)
        assert math.isnan(result[0])
        assert result[1] == 0

    def test_elementwise_default(self):
        assert coalesce([ABSENT, 2, ABSENT], [10, 20, 30]) == [10, 2, 30]

    def test_elementwise_default_length(self):
        with pytest.raises(ValueError, match="default has 2"):
            coalesce([ABSENT, 2, 3], [1, 2])

    def test_string_default_is_a_scalar(self):
        assert coalesce([ABSENT, "b"], "none") == ["none", "b"]

    def test_idempotent(self):
        once = coalesce([1, ABSENT], 0)
        assert coalesce(once, 0) == once


class TestCoalesceColumns:
    def test_fills_named_columns(self):
        t = Table([number("x"), text("t")], [(None, None), (NAN, "b")])
        result = coalesce_columns(t, {"x": 0, "t": "none"})
        xs = result.column("x")
        assert xs[0] == 0.0
        assert math.isnan(xs[1])
        assert result.column("t") == ["none", "b"]

    def test_default_must_fit_column(self):
        t = Table([number("x")], [(None,)])
        with pytest.raises(TypeMismatch):
            coalesce_columns(t, {"x": "zero"})

    def test_category_default_in_domain(self):
        t = Table([category("c", ["a", "b"])], [(None,)])
        assert coalesce_columns(t, {"c": "b"}).column("c") == ["b"]
        with pytest.raises(OutOfDomain):
            coalesce_columns(t, {"c": "z"})

    def test_unknown_column(self):
        with pytest.raises(InvalidColumn):
            coalesce_columns(Table([number("x")]), {"y": 0})


# ============================================================================
# Tests: sentinels
# ============================================================================

class TestRecodeSentinel:
    def test_replaces_sentinel(self):
        assert recode_sentinel([1, 4, 5, 7, -99], -99) == [1, 4, 5, 7, ABSENT]

    def test_idempotent(self):
        once = recode_sentinel([1, -99], -99)
        assert recode_sentinel(once, -99) == once

    def test_nan_never_recoded(self):
        result = recode_sentinel([NAN, 1], NAN)
        assert math.isnan(result[0])
        assert result[1] == 1

    def test_exact_kind(self):
        assert recode_sentinel([True, 1, "1"], 1) == [True, ABSENT, "1"]

    def test_text_sentinel(self):
        assert recode_sentinel(["n/a", "x"], "n/a") == [ABSENT, "x"]

    def test_int_and_float_match(self):
        assert recode_sentinel([-99.0], -99) == [ABSENT]


class TestRecodeSentinels:
    def _survey(self):
        return Table([number("age"), text("note"), category("c", ["a", "-99"])], [
            (31, "-99", "a"),
            (-99, "ok", "-99"),
            (NAN, None, None),
        ])

    def test_default_sentinels(self):
        result = recode_sentinels(self._survey())
        ages = result.column("age")
        assert ages[0] == 31.0
        assert ages[1] is ABSENT
        assert math.isnan(ages[2])
        # -99.0 is a number: text and category columns are left alone
        assert result.column("note") == ["-99", "ok", ABSENT]
        assert result.column("c") == ["a", "-99", ABSENT]

    def test_mixed_sentinels(self):
        result = recode_sentinels(self._survey(), [-99, "-99"])
        assert result.column("age")[1] is ABSENT
        assert result.column("note") == [ABSENT, "ok", ABSENT]
        assert result.column("c") == ["a", ABSENT, ABSENT]

    def test_restrict_columns(self):
        result = recode_sentinels(self._survey(), ["-99"], columns=["note"])
        assert result.column("note")[0] is ABSENT
        assert result.column("c")[1] == "-99"

    def test_sentinels_from_options(self):
        with option_context(sentinels=(31.0,)):
            result = recode_sentinels(self._survey())
        assert result.column("age")[0] is ABSENT
        assert result.column("age")[1] == -99.0

    def test_idempotent(self):
        once = recode_sentinels(self._survey())
        assert recode_sentinels(once).equals(once)


class TestRecodeSentinelColumn:
    def test_recodes(self):
        t = Table([number("x")], [(-99,), (1,)])
        assert recode_sentinel_column(t, "x", -99).column("x") == [ABSENT, 1.0]

    def test_wrong_kind(self):
        t = Table([number("x")], [(1,)])
        with pytest.raises(TypeMismatch):
            recode_sentinel_column(t, "x", "-99")

    def test_tag_outside_domain(self):
        t = Table([category("c", ["a"])], [("a",)])
        with pytest.raises(OutOfDomain):
            recode_sentinel_column(t, "c", "zz")
