# lotolab/validation.py
# Request validation: everything here runs before any sampling work.
from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Optional
import logging

from .config import LUCKY_MAX, LUCKY_MIN, MAIN_MAX, MAIN_MIN, PredictionOptions
from .errors import ValidationError
from .utilities.constraints import PredictionConstraints

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PredictionRequest:
    count: int
    constraints: Optional[PredictionConstraints] = None


def _reject(message: str):
    logger.warning("Request rejected: %s", message)
    raise ValidationError(message)


def _as_int(value, name: str) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool):
        _reject(f"{name} must be an integer.")
    if isinstance(value, float) and not value.is_integer():
        _reject(f"{name} must be an integer.")
    try:
        return int(value)
    except (TypeError, ValueError):
        _reject(f"{name} must be an integer.")


def is_main_number(n: int) -> bool:
    return MAIN_MIN <= n <= MAIN_MAX


def is_lucky_number(n: int) -> bool:
    return LUCKY_MIN <= n <= LUCKY_MAX


def normalize_count(count: Optional[int], options: PredictionOptions) -> int:
    count = _as_int(count, "count")
    if count is None or count <= 0:
        return options.default_count
    return min(count, options.max_count)


def validate_prediction_request(
    count: Optional[int],
    options: Optional[PredictionOptions] = None,
    *,
    min_sum: Optional[int] = None,
    max_sum: Optional[int] = None,
    min_even: Optional[int] = None,
    max_even: Optional[int] = None,
    min_low: Optional[int] = None,
    max_low: Optional[int] = None,
    include: Optional[Iterable[int]] = None,
    exclude: Optional[Iterable[int]] = None,
) -> PredictionRequest:
    opts = options or PredictionOptions()
    normalized = normalize_count(count, opts)

    include_list = [_as_int(n, "includeNumbers") for n in (include or [])]
    exclude_list = [_as_int(n, "excludeNumbers") for n in (exclude or [])]
    if len(include_list) > opts.max_include_numbers:
        _reject(f"includeNumbers cannot contain more than {opts.max_include_numbers} values.")

    bounds = dict(
        min_sum=_as_int(min_sum, "minSum"), max_sum=_as_int(max_sum, "maxSum"),
        min_even=_as_int(min_even, "minEven"), max_even=_as_int(max_even, "maxEven"),
        min_low=_as_int(min_low, "minLow"), max_low=_as_int(max_low, "maxLow"),
    )
    # bounds, ranges and overlap are checked by PredictionConstraints itself
    try:
        constraints = PredictionConstraints(include=include_list, exclude=exclude_list, **bounds)
    except ValidationError as e:
        _reject(str(e))
    return PredictionRequest(count=normalized, constraints=None if constraints.is_empty else constraints)


def validate_base_number(base_number) -> int:
    n = _as_int(base_number, "baseNumber")
    if n is None or not is_main_number(n):
        _reject(f"baseNumber must be between {MAIN_MIN} and {MAIN_MAX}.")
    return n


def validate_bucket_size(bucket_size, options: Optional[PredictionOptions] = None) -> int:
    opts = options or PredictionOptions()
    size = _as_int(bucket_size, "bucketSize")
    return opts.default_bucket_size if size is None or size <= 0 else size


def validate_top(top, options: Optional[PredictionOptions] = None) -> int:
    opts = options or PredictionOptions()
    n = _as_int(top, "top")
    return opts.default_top if n is None else n


def validate_sample_size(sample_size) -> Optional[int]:
    n = _as_int(sample_size, "sampleSize")
    return n if n is not None and n > 0 else None
