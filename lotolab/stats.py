# lotolab/stats.py
# Draw statistics (overview, frequencies, patterns, co-occurrence around a base number)
from __future__ import annotations
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Dict, List, Optional, Sequence
import logging

import numpy as np
import pandas as pd

from .config import LOW_NUMBER_MAX, MAIN_MAX, MAIN_PICKS, UNKNOWN_DAY
from .draws import Draw, draws_to_frame
from .utilities.weights import lucky_counts, main_counts
from .validation import validate_base_number

logger = logging.getLogger(__name__)

MAIN_COLS = [f"n{i}" for i in range(1, MAIN_PICKS + 1)]


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(p.title() for p in rest)


def _camel_dict(obj) -> dict:
    out = {}
    for k, v in asdict(obj).items():
        if isinstance(v, date):
            v = v.isoformat()
        elif isinstance(v, list):
            v = [{_camel(a): b for a, b in x.items()} if isinstance(x, dict) else x for x in v]
        out[_camel(k)] = v
    return out


@dataclass
class DayCount:
    day_name: str
    count: int


@dataclass
class StatsOverview:
    total_draws: int = 0
    first_draw_date: Optional[date] = None
    last_draw_date: Optional[date] = None
    draws_per_day_of_week: List[DayCount] = field(default_factory=list)

    def to_dict(self) -> dict:
        return _camel_dict(self)


@dataclass
class NumberFrequency:
    number: int
    count: int
    frequency: float


@dataclass
class StatsFrequencies:
    main_numbers: List[NumberFrequency] = field(default_factory=list)
    lucky_numbers: List[NumberFrequency] = field(default_factory=list)

    def to_dict(self) -> dict:
        return _camel_dict(self)


@dataclass
class SumBucket:
    min_inclusive: int
    max_inclusive: int
    count: int


@dataclass
class PatternDistribution:
    sum_buckets: List[SumBucket] = field(default_factory=list)
    even_count_distribution: Dict[int, int] = field(default_factory=dict)
    low_count_distribution: Dict[int, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return _camel_dict(self)


@dataclass
class CooccurringNumber:
    number: int
    cooccurrence_count: int
    conditional_probability: float
    global_probability: float


@dataclass
class CooccurrenceStats:
    base_number: int
    total_draws: int = 0
    draws_containing_base: int = 0
    cooccurrences: List[CooccurringNumber] = field(default_factory=list)

    def to_dict(self) -> dict:
        return _camel_dict(self)


def overview(draws: Sequence[Draw]) -> StatsOverview:
    df = draws_to_frame(draws)
    if df.empty:
        logger.info("Stats overview requested but no draws are available yet.")
        return StatsOverview()
    days = df["day_name"].fillna(UNKNOWN_DAY).replace("", UNKNOWN_DAY)
    vc = days.value_counts()
    per_day = sorted(((str(k), int(v)) for k, v in vc.items()), key=lambda kv: (-kv[1], kv[0]))
    return StatsOverview(
        total_draws=int(len(df)),
        first_draw_date=df["draw_date"].min().date(),
        last_draw_date=df["draw_date"].max().date(),
        draws_per_day_of_week=[DayCount(day_name=k, count=v) for k, v in per_day],
    )


def frequency_table(counts: np.ndarray) -> pd.DataFrame:
    idx = np.arange(1, counts.size + 1)
    total = int(counts.sum())
    df = pd.DataFrame({"number": idx, "count": counts.astype(int)})
    df["frequency"] = df["count"] / total if total > 0 else 0.0
    return df.sort_values(["count", "number"], ascending=[False, True]).reset_index(drop=True)


def _to_frequencies(table: pd.DataFrame) -> List[NumberFrequency]:
    return [NumberFrequency(int(n), int(c), float(f)) for n, c, f in table.itertuples(index=False, name=None)]


def frequencies(draws: Sequence[Draw]) -> StatsFrequencies:
    draws = list(draws)
    if not draws:
        logger.info("Stats frequencies requested but no draws are available yet.")
        return StatsFrequencies()
    return StatsFrequencies(
        main_numbers=_to_frequencies(frequency_table(main_counts(draws))),
        lucky_numbers=_to_frequencies(frequency_table(lucky_counts(draws))),
    )


def sum_buckets(sums: Sequence[int], bucket_size: int = 10) -> List[SumBucket]:
    """Buckets aligned on multiples of ``bucket_size`` covering [min(sums), max(sums)]."""
    if len(sums) == 0:
        return []
    size = bucket_size if bucket_size > 0 else 10
    s = pd.Series(list(sums), dtype=int)
    lo, hi = int(s.min()), int(s.max())
    counts = (s // size * size).value_counts()
    out = []
    for start in range(lo // size * size, hi + 1, size):
        out.append(SumBucket(min_inclusive=start, max_inclusive=start + size - 1, count=int(counts.get(start, 0))))
    return out


def patterns(draws: Sequence[Draw], bucket_size: int = 10) -> PatternDistribution:
    df = draws_to_frame(draws)
    if df.empty:
        logger.info("Stats patterns requested but no draws are available yet.")
        return PatternDistribution()
    mains = df[MAIN_COLS]
    sums = mains.sum(axis=1).astype(int).tolist()
    even = (mains % 2 == 0).sum(axis=1).value_counts()
    low = (mains <= LOW_NUMBER_MAX).sum(axis=1).value_counts()
    return PatternDistribution(
        sum_buckets=sum_buckets(sums, bucket_size),
        even_count_distribution={k: int(even.get(k, 0)) for k in range(MAIN_PICKS + 1)},
        low_count_distribution={k: int(low.get(k, 0)) for k in range(MAIN_PICKS + 1)},
    )


def cooccurrence(draws: Sequence[Draw], base_number: int, top: Optional[int] = 15) -> CooccurrenceStats:
    base_number = validate_base_number(base_number)
    draws = list(draws)
    if not draws:
        logger.info("Cooccurrence stats requested for %d but no draws are available yet.", base_number)
        return CooccurrenceStats(base_number=base_number)

    total = len(draws)
    with_base = [d for d in draws if base_number in d.main_set]
    global_counts = main_counts(draws)
    co_counts = main_counts(with_base)
    co_counts[base_number - 1] = 0

    items = []
    for n in range(1, MAIN_MAX + 1):
        c = int(co_counts[n - 1])
        if c <= 0:
            continue
        items.append(CooccurringNumber(
            number=n,
            cooccurrence_count=c,
            conditional_probability=c / len(with_base) if with_base else 0.0,
            global_probability=float(global_counts[n - 1]) / total,
        ))
    items.sort(key=lambda x: (-x.cooccurrence_count, x.number))
    limit = 15 if top is None else int(top)
    if limit > 0:
        items = items[:limit]
    return CooccurrenceStats(
        base_number=base_number,
        total_draws=total,
        draws_containing_base=len(with_base),
        cooccurrences=items,
    )

