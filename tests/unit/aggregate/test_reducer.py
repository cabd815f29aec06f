import copy
import math
import pickle

import pytest

from lacuna import ABSENT, Kind, Reducer, custom, reducer
from lacuna.aggregate import MISSING, as_reducer
from lacuna.aggregate.builtin import MAXIMUM, MEAN, MINIMUM, ROW_COUNT, SD, TOTAL
from lacuna.errors import ReducerConfigError


def test_builtin_empty_results():
    assert ROW_COUNT([]) == 0.0
    assert TOTAL([]) == 0.0
    assert math.isnan(MEAN([]))
    assert MINIMUM([]) == math.inf
    assert MAXIMUM([]) == -math.inf
    assert SD([]) is ABSENT


def test_builtin_values():
    assert MEAN([1.0, 2.0, 6.0]) == 3.0
    assert SD([2.0, 4.0]) == pytest.approx(math.sqrt(2))
    assert MEAN([1.0, ABSENT]) is ABSENT
    assert MEAN.skipping_absent()([1.0, ABSENT]) == 1.0


def test_decorator_attaches_reducer():
    @reducer(empty=0.0)
    def biggest_gap(values):
        ordered = sorted(values)
        return max(b - a for a, b in zip(ordered, ordered[1:])) if len(ordered) > 1 else 0.0

    # the function itself stays usable on plain lists
    assert biggest_gap([1.0, 5.0, 6.0]) == 4.0
    red = biggest_gap._reducer
    assert red.name == "biggest_gap"
    assert red.empty == 0.0
    assert red([]) == 0.0
    assert as_reducer(biggest_gap) is red


def test_decorator_requires_empty():
    with pytest.raises(ReducerConfigError, match="empty group"):
        @reducer()
        def no_empty(values):
            return len(values)


def test_reducer_requires_empty():
    with pytest.raises(ReducerConfigError):
        Reducer("r", len)


def test_missing_marker():
    assert not MISSING
    assert repr(MISSING) == "<empty result not declared>"
    assert copy.deepcopy(MISSING) is MISSING
    assert pickle.loads(pickle.dumps(MISSING)) is MISSING


def test_category_output_refused():
    with pytest.raises(ReducerConfigError):
        Reducer("mode", lambda values: values[0], empty=ABSENT, kind=Kind.CATEGORY)


def test_plain_function_refused():
    with pytest.raises(ReducerConfigError, match="plain function"):
        custom("age", lambda values: 1.0)


def test_non_callable_refused():
    with pytest.raises(TypeError):
        as_reducer(42)


def test_text_output_kind():
    @reducer(empty=ABSENT, kind=Kind.TEXT)
    def first(values):
        return values[0]

    assert first._reducer.kind is Kind.TEXT
    assert first._reducer(["x", "y"]) == "x"
