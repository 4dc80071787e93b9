# lotolab/engine/generator.py
"""
Grid generator: strategy weights -> sampler -> constraint filter -> dedup.

Each call owns its RNG and its dedup set. Fewer grids than requested is a
valid (degraded) outcome when the attempt budget runs out under tight
constraints.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Callable, List, Optional, Sequence, Tuple
import logging
import threading

import numpy as np

from ..config import LUCKY_MIN, MAIN_MIN, MAIN_PICKS, PredictionOptions
from ..draws import Draw
from ..errors import OperationCancelled
from ..metrics import MetricsRecorder, NullRecorder
from ..utilities.constraints import PredictionConstraints, satisfies
from ..utilities.wrs import sample_chained, sample_single, sample_without_replacement
from .strategies import Strategy, StrategyWeights, resolve_weights

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PredictedGrid:
    numbers: Tuple[int, ...]
    lucky: int
    score: float

    @property
    def key(self) -> str:
        return "-".join(str(n) for n in self.numbers) + f"+{self.lucky}"

    def to_dict(self) -> dict:
        return {"numbers": list(self.numbers), "luckyNumber": self.lucky, "score": self.score}


@dataclass
class PredictionsResponse:
    generated_at_utc: datetime
    strategy: Strategy
    requested: int
    count: int = 0
    draws: List[PredictedGrid] = field(default_factory=list)
    attempts: int = 0

    @property
    def degraded(self) -> bool:
        return self.count < self.requested

    def to_dict(self) -> dict:
        return {
            "generatedAtUtc": self.generated_at_utc.isoformat(),
            "strategy": self.strategy.value,
            "requested": self.requested,
            "count": self.count,
            "draws": [g.to_dict() for g in self.draws],
        }


def max_possible_score(weights: StrategyWeights) -> float:
    main_max = float(np.max(weights.main)) if weights.main.size else 0.0
    lucky_max = float(np.max(weights.lucky)) if weights.lucky.size else 0.0
    return main_max * MAIN_PICKS + lucky_max


def draw_grid(weights: StrategyWeights, rng: np.random.Generator) -> Tuple[List[int], int]:
    """One candidate: 5 mains (plain or co-occurrence chained) and a lucky number."""
    if weights.chained:
        numbers = sample_without_replacement(weights.main, 1, rng, start=MAIN_MIN)
        while len(numbers) < MAIN_PICKS:
            numbers.append(sample_chained(numbers, weights.cooccurrence, weights.main, rng))
    else:
        numbers = sample_without_replacement(weights.main, MAIN_PICKS, rng, start=MAIN_MIN)
    lucky = sample_single(weights.lucky, rng, start=LUCKY_MIN)
    return numbers, lucky


def score_grid(numbers: Sequence[int], lucky: int, weights: StrategyWeights, max_score: float) -> float:
    raw = sum(float(weights.main[n - MAIN_MIN]) for n in numbers) + float(weights.lucky[lucky - LUCKY_MIN])
    return round(raw / max_score, 4) if max_score > 0 else 0.0


def generate(
    count: int,
    strategy,
    draws: Sequence[Draw],
    constraints: Optional[PredictionConstraints] = None,
    rng: Optional[np.random.Generator] = None,
    *,
    options: Optional[PredictionOptions] = None,
    weights: Optional[StrategyWeights] = None,
    cancel: Optional[threading.Event] = None,
    recorder: Optional[MetricsRecorder] = None,
    today: Optional[date] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> PredictionsResponse:
    """
    Generate up to ``count`` distinct grids.

    ``weights`` may be passed pre-resolved (the backtest resolves them once);
    otherwise they are built from ``draws`` for ``strategy``.
    """
    opts = options or PredictionOptions()
    rec = recorder or NullRecorder()
    rng = rng if rng is not None else np.random.default_rng()
    strategy = Strategy.parse(strategy)
    count = max(int(count), 0)

    if weights is None:
        weights = resolve_weights(strategy, draws, opts, today=today)
    max_score = max_possible_score(weights)

    budget = max(count * opts.max_attempts_multiplier, count)
    results: List[PredictedGrid] = []
    seen = set()
    attempts = 0

    while len(results) < count and attempts < budget:
        if cancel is not None and cancel.is_set():
            raise OperationCancelled(f"generation cancelled after {attempts} attempts")
        attempts += 1
        numbers, lucky = draw_grid(weights, rng)
        numbers.sort()
        if not satisfies(numbers, constraints):
            continue
        grid_key = (tuple(numbers), lucky)
        if grid_key in seen:
            continue
        seen.add(grid_key)
        results.append(PredictedGrid(
            numbers=tuple(numbers),
            lucky=lucky,
            score=score_grid(numbers, lucky, weights, max_score),
        ))

    rec.increment("predictions_generated_total", len(results), strategy=strategy.value)
    rec.observe("prediction_attempts", attempts, strategy=strategy.value)
    if len(results) < count:
        rec.increment("predictions_degraded_total", strategy=strategy.value)
        logger.warning(
            "Could only generate %d of %d distinct grids after %d attempts (strategy=%s)",
            len(results), count, attempts, strategy.value,
        )

    now = clock() if clock else datetime.now(timezone.utc)
    return PredictionsResponse(
        generated_at_utc=now,
        strategy=strategy,
        requested=count,
        count=len(results),
        draws=results,
        attempts=attempts,
    )
