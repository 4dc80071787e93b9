import pytest

from lotolab.errors import ValidationError
from lotolab.utilities.constraints import PredictionConstraints, satisfies


def test_no_constraints_accepts_everything():
    assert satisfies([1, 2, 3, 4, 5], None)
    assert PredictionConstraints().is_empty


def test_sum_bounds():
    c = PredictionConstraints(min_sum=100, max_sum=150)
    assert satisfies([10, 20, 30, 40, 49], c)       # 149
    assert not satisfies([1, 2, 3, 4, 5], c)        # 15
    assert not satisfies([45, 46, 47, 48, 49], c)   # 235


def test_even_and_low_counts():
    c = PredictionConstraints(min_even=2, max_even=3, min_low=1, max_low=2)
    assert satisfies([2, 4, 30, 31, 33], c)
    assert not satisfies([2, 4, 6, 31, 33], c)      # 3 even but 3 low
    assert not satisfies([1, 3, 31, 33, 35], c)     # no even


def test_low_boundary_is_25():
    c = PredictionConstraints(min_low=1)
    assert satisfies([25, 30, 31, 32, 33], c)
    assert not satisfies([26, 30, 31, 32, 33], c)


def test_include_and_exclude():
    c = PredictionConstraints(include={7, 11}, exclude={13})
    assert satisfies([7, 11, 20, 30, 40], c)
    assert not satisfies([7, 12, 20, 30, 40], c)
    assert not satisfies([7, 11, 13, 30, 40], c)
    assert not c.is_empty


def test_to_dict():
    c = PredictionConstraints(min_sum=10, include=[5, 3])
    d = c.to_dict()
    assert d["minSum"] == 10
    assert d["includeNumbers"] == [3, 5]
    assert d["excludeNumbers"] == []


@pytest.mark.parametrize("kwargs,message", [
    ({"min_sum": 120, "max_sum": 119}, "minSum cannot be greater than maxSum."),
    ({"min_even": 3, "max_even": 1}, "minEven cannot be greater than maxEven."),
    ({"min_low": 5, "max_low": 4}, "minLow cannot be greater than maxLow."),
    ({"include": [0]}, "includeNumbers must be between 1 and 49."),
    ({"exclude": [50]}, "excludeNumbers must be between 1 and 49."),
    ({"include": [1, 2, 3, 4, 5, 6]}, "includeNumbers cannot force more than 5 distinct numbers."),
    ({"include": [7, 9], "exclude": [9]}, "includeNumbers and excludeNumbers overlap: [9]."),
])
def test_invalid_constraints_rejected_at_construction(kwargs, message):
    with pytest.raises(ValidationError) as exc:
        PredictionConstraints(**kwargs)
    assert str(exc.value) == message


def test_equal_bounds_are_allowed():
    c = PredictionConstraints(min_sum=99, max_sum=99, min_even=0, max_even=0)
    assert satisfies([1, 3, 5, 41, 49], c)      # 99, no even
    assert not satisfies([1, 3, 5, 41, 48], c)
