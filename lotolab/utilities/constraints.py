# lotolab/utilities/constraints.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Optional

from ..config import LOW_NUMBER_MAX, MAIN_MAX, MAIN_MIN, MAIN_PICKS
from ..errors import ValidationError


def _check_bounds(name: str, lo: Optional[int], hi: Optional[int]) -> None:
    if lo is not None and hi is not None and lo > hi:
        raise ValidationError(f"min{name} cannot be greater than max{name}.")


@dataclass(frozen=True)
class PredictionConstraints:
    """
    Filter a generated grid must pass. Contradictory bounds, out-of-range
    numbers and include/exclude overlaps are rejected at construction.
    """
    min_sum: Optional[int] = None
    max_sum: Optional[int] = None
    min_even: Optional[int] = None
    max_even: Optional[int] = None
    min_low: Optional[int] = None
    max_low: Optional[int] = None
    include: FrozenSet[int] = field(default_factory=frozenset)
    exclude: FrozenSet[int] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        object.__setattr__(self, "include", frozenset(int(n) for n in self.include))
        object.__setattr__(self, "exclude", frozenset(int(n) for n in self.exclude))
        _check_bounds("Sum", self.min_sum, self.max_sum)
        _check_bounds("Even", self.min_even, self.max_even)
        _check_bounds("Low", self.min_low, self.max_low)
        if any(n < MAIN_MIN or n > MAIN_MAX for n in self.include):
            raise ValidationError(f"includeNumbers must be between {MAIN_MIN} and {MAIN_MAX}.")
        if any(n < MAIN_MIN or n > MAIN_MAX for n in self.exclude):
            raise ValidationError(f"excludeNumbers must be between {MAIN_MIN} and {MAIN_MAX}.")
        if len(self.include) > MAIN_PICKS:
            raise ValidationError(f"includeNumbers cannot force more than {MAIN_PICKS} distinct numbers.")
        overlap = self.include & self.exclude
        if overlap:
            raise ValidationError(f"includeNumbers and excludeNumbers overlap: {sorted(overlap)}.")

    @property
    def is_empty(self) -> bool:
        bounds = (self.min_sum, self.max_sum, self.min_even, self.max_even, self.min_low, self.max_low)
        return all(b is None for b in bounds) and not self.include and not self.exclude

    def to_dict(self) -> dict:
        return {
            "minSum": self.min_sum, "maxSum": self.max_sum,
            "minEven": self.min_even, "maxEven": self.max_even,
            "minLow": self.min_low, "maxLow": self.max_low,
            "includeNumbers": sorted(self.include), "excludeNumbers": sorted(self.exclude),
        }


def _within(value: int, lo: Optional[int], hi: Optional[int]) -> bool:
    if lo is not None and value < lo:
        return False
    if hi is not None and value > hi:
        return False
    return True


def satisfies(numbers: Iterable[int], constraints: Optional[PredictionConstraints]) -> bool:
    if constraints is None:
        return True
    nums = [int(n) for n in numbers]
    if not _within(sum(nums), constraints.min_sum, constraints.max_sum):
        return False
    if not _within(sum(1 for n in nums if n % 2 == 0), constraints.min_even, constraints.max_even):
        return False
    if not _within(sum(1 for n in nums if n <= LOW_NUMBER_MAX), constraints.min_low, constraints.max_low):
        return False
    chosen = set(nums)
    if not constraints.include <= chosen:
        return False
    if constraints.exclude & chosen:
        return False
    return True
