import math

import pytest

from lacuna import (
    ABSENT, Kind, Table, category, drop_absent, number, pivot_longer, pivot_wider, text,
)
from lacuna.errors import InvalidColumn, TypeMismatch


def _stocks():
    return Table([number("year"), number("qtr"), number("price")], [
        (2022, 1, 1.88),
        (2022, 2, 0.59),
        (2022, 3, 0.35),
        (2022, 4, None),
        (2023, 2, 0.92),
        (2023, 3, 0.17),
        (2023, 4, 2.66),
    ])


class TestPivotWider:
    def test_implicit_gap_becomes_explicit(self):
        wide = pivot_wider(_stocks(), "qtr", "price")
        assert wide.names == ["year", "1", "2", "3", "4"]
        rows = wide.rows()
        assert rows[0] == {"year": 2022.0, "1": 1.88, "2": 0.59, "3": 0.35, "4": ABSENT}
        assert rows[1]["1"] is ABSENT
        assert rows[1]["4"] == 2.66

    def test_value_kind_carried(self):
        wide = pivot_wider(_stocks(), "qtr", "price")
        assert wide.column_spec("3").kind is Kind.NUMBER

    def test_explicit_id_columns(self):
        t = Table([text("id"), text("extra"), text("k"), number("v")], [
            ("a", "x", "p", 1), ("a", "y", "q", 2),
        ])
        wide = pivot_wider(t, "k", "v", id_columns=["id"])
        assert wide.rows() == [{"id": "a", "p": 1.0, "q": 2.0}]

    def test_text_names_keep_first_appearance_order(self):
        t = Table([text("id"), text("k"), number("v")], [("a", "z", 1), ("a", "b", 2)])
        assert pivot_wider(t, "k", "v").names == ["id", "z", "b"]

    def test_duplicate_cells(self):
        t = Table([text("id"), text("k"), number("v")], [("a", "p", 1), ("a", "p", 2)])
        with pytest.raises(ValueError, match="more than one"):
            pivot_wider(t, "k", "v")

    def test_absent_name(self):
        t = Table([text("id"), text("k"), number("v")], [("a", None, 1)])
        with pytest.raises(ValueError, match="ABSENT"):
            pivot_wider(t, "k", "v")

    def test_name_clashes_with_id(self):
        t = Table([text("id"), text("k"), number("v")], [("a", "id", 1)])
        with pytest.raises(ValueError, match="clash"):
            pivot_wider(t, "k", "v")

    def test_unknown_column(self):
        with pytest.raises(InvalidColumn):
            pivot_wider(_stocks(), "quarter", "price")


class TestPivotLonger:
    def _wide(self):
        return pivot_wider(_stocks(), "qtr", "price")

    def test_keeps_explicit_absent(self):
        long = pivot_longer(self._wide(), ["1", "2", "3", "4"], names_to="qtr", values_to="price")
        assert len(long) == 8
        assert long.names == ["year", "qtr", "price"]
        assert long.column_spec("qtr").kind is Kind.TEXT
        assert long.column("qtr")[:4] == ["1", "2", "3", "4"]
        assert long.column("price")[3] is ABSENT

    def test_drop_absent_makes_gaps_implicit(self):
        long = pivot_longer(
            self._wide(), ["1", "2", "3", "4"], names_to="qtr", values_to="price", drop_absent=True,
        )
        assert len(long) == 6
        assert ABSENT not in long.column("price")

    def test_nan_is_kept(self):
        t = Table([text("id"), number("a"), number("b")], [("x", float('nan'), None)])
        long = pivot_longer(t, ["a", "b"], drop_absent=True)
        assert long.column("name") == ["a"]
        assert math.isnan(long.column("value")[0])

    def test_mixed_kinds(self):
        t = Table([number("a"), text("b")], [(1, "x")])
        with pytest.raises(TypeMismatch):
            pivot_longer(t, ["a", "b"])

    def test_category_domains_must_match(self):
        t = Table([category("a", ["x"]), category("b", ["y"])], [("x", "y")])
        with pytest.raises(TypeMismatch):
            pivot_longer(t, ["a", "b"])

    def test_output_name_clash(self):
        t = Table([text("name"), number("a")], [("n", 1)])
        with pytest.raises(ValueError, match="clashes"):
            pivot_longer(t, ["a"])

    def test_needs_columns(self):
        with pytest.raises(ValueError):
            pivot_longer(_stocks(), [])


class TestDropAbsent:
    def test_all_columns(self):
        assert len(drop_absent(_stocks())) == 6

    def test_subset(self):
        t = Table([number("a"), number("b")], [(None, 1), (1, None), (float('nan'), 2)])
        kept = drop_absent(t, ["a"])
        assert kept.column("b") == [ABSENT, 2.0]
        assert math.isnan(kept.column("a")[1])

    def test_schema_preserved(self):
        t = _stocks()
        assert drop_absent(t).columns == t.columns
