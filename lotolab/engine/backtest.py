# lotolab/engine/backtest.py
"""
Strategy backtest: replay the generator once per historical draw with a seed
derived from that draw, then tally how many numbers each prediction matched.

Weights are built from the *whole* history, including draws that come after
the one being evaluated (look-ahead). This is the existing behaviour and is
kept as is.
"""
from __future__ import annotations
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Dict, List, Optional, Sequence, Tuple
import hashlib
import logging
import threading
import time

import numpy as np

from ..config import BACKTEST_SAMPLE_SEED, PredictionOptions
from ..draws import Draw, filter_by_date, sort_by_date
from ..errors import OperationCancelled
from ..metrics import MetricsRecorder, NullRecorder
from .generator import PredictedGrid, generate
from .strategies import Strategy, StrategyWeights, resolve_weights

logger = logging.getLogger(__name__)

ProgressCB = Callable[[str, float], None]


@dataclass(frozen=True)
class MatchDistribution:
    matched_main: int
    matched_lucky: bool
    count: int

    def to_dict(self) -> dict:
        return {"matchedMain": self.matched_main, "matchedLucky": self.matched_lucky, "count": self.count}


@dataclass
class BacktestResult:
    strategy: Strategy
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    total_draws_analyzed: int = 0
    average_matched_main: float = 0.0
    distributions: List[MatchDistribution] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "strategy": self.strategy.value,
            "from": self.date_from.isoformat() if self.date_from else None,
            "to": self.date_to.isoformat() if self.date_to else None,
            "totalDrawsAnalyzed": self.total_draws_analyzed,
            "averageMatchedMain": self.average_matched_main,
            "distributions": [d.to_dict() for d in self.distributions],
        }


def _report(cb: Optional[ProgressCB], msg: str, p: float) -> None:
    """Clamp ``p`` to [0, 1] and forward it. Exceptions from ``cb`` propagate."""
    if cb:
        cb(msg, max(0.0, min(1.0, float(p))))


def derive_seed(draw: Draw, strategy) -> int:
    """Stable across processes: sha256 over the draw identity and the strategy."""
    strategy = Strategy.parse(strategy)
    parts = [str(draw.id), draw.draw_date.isoformat()]
    parts += [str(n) for n in draw.numbers]
    parts += [str(draw.lucky), strategy.value]
    digest = hashlib.sha256("|".join(parts).encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big") % 2_147_483_647 + 1


def match_draw(draw: Draw, grid: PredictedGrid) -> Tuple[int, bool]:
    matched_main = len(draw.main_set & set(grid.numbers))
    return matched_main, grid.lucky == draw.lucky


def subsample(draws: Sequence[Draw], sample_size: Optional[int], seed: int = BACKTEST_SAMPLE_SEED) -> List[Draw]:
    """Shuffle with a fixed seed then take ``sample_size``; no-op when not smaller."""
    draws = list(draws)
    if sample_size is None or sample_size <= 0 or sample_size >= len(draws):
        return draws
    order = np.random.default_rng(seed).permutation(len(draws))
    return [draws[i] for i in order[:sample_size]]


def predict_for_draw(draw: Draw, strategy: Strategy, history: Sequence[Draw], weights: StrategyWeights,
                     options: PredictionOptions) -> Optional[PredictedGrid]:
    rng = np.random.default_rng(derive_seed(draw, strategy))
    response = generate(1, strategy, history, None, rng, options=options, weights=weights)
    return response.draws[0] if response.draws else None


def _evaluate(draw: Draw, strategy: Strategy, history: Sequence[Draw], weights: StrategyWeights,
              options: PredictionOptions, cancel: Optional[threading.Event]) -> Optional[Tuple[int, bool]]:
    if cancel is not None and cancel.is_set():
        raise OperationCancelled("backtest cancelled")
    grid = predict_for_draw(draw, strategy, history, weights, options)
    if grid is None:
        logger.warning("No prediction generated for draw %s", draw.id)
        return None
    return match_draw(draw, grid)


def summarize(strategy: Strategy, outcomes: Sequence[Optional[Tuple[int, bool]]], total: int,
              date_from: Optional[date] = None, date_to: Optional[date] = None) -> BacktestResult:
    tally: Dict[Tuple[int, bool], int] = Counter(o for o in outcomes if o is not None)
    matched_sum = sum(m * c for (m, _), c in tally.items())
    dist = [MatchDistribution(m, lucky, c) for (m, lucky), c in tally.items()]
    dist.sort(key=lambda d: (d.matched_main, d.matched_lucky), reverse=True)
    return BacktestResult(
        strategy=strategy,
        date_from=date_from,
        date_to=date_to,
        total_draws_analyzed=total,
        average_matched_main=(matched_sum / total) if total > 0 else 0.0,
        distributions=dist,
    )


def backtest(
    strategy,
    draws: Sequence[Draw],
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    sample_size: Optional[int] = None,
    *,
    options: Optional[PredictionOptions] = None,
    cancel: Optional[threading.Event] = None,
    recorder: Optional[MetricsRecorder] = None,
    progress_cb: Optional[ProgressCB] = None,
    workers: int = 1,
    today: Optional[date] = None,
) -> BacktestResult:
    """
    Replay ``strategy`` against every draw in [date_from, date_to].

    ``workers > 1`` spreads the per-draw work over a thread pool; each draw
    has its own seed so the result does not depend on scheduling.
    """
    opts = options or PredictionOptions()
    rec = recorder or NullRecorder()
    strategy = Strategy.parse(strategy)
    started = time.perf_counter()

    history = sort_by_date(draws)
    selected = subsample(filter_by_date(history, date_from, date_to), sample_size)
    rec.increment("backtests_total", strategy=strategy.value)

    if not selected:
        logger.info("Backtest %s: no draws in range %s..%s", strategy.value, date_from, date_to)
        return BacktestResult(strategy=strategy, date_from=date_from, date_to=date_to)

    weights = resolve_weights(strategy, history, opts, today=today)
    total = len(selected)
    logger.info("Backtest %s over %d draws (history=%d, workers=%d)", strategy.value, total, len(history), workers)

    outcomes: List[Optional[Tuple[int, bool]]] = []
    if workers and workers > 1:
        with ThreadPoolExecutor(max_workers=int(workers)) as executor:
            futures = [executor.submit(_evaluate, d, strategy, history, weights, opts, cancel) for d in selected]
            try:
                for i, fut in enumerate(futures, start=1):
                    outcomes.append(fut.result())
                    _report(progress_cb, f"Backtest: {i}/{total}", i / total)
            except OperationCancelled:
                for fut in futures:
                    fut.cancel()
                raise
    else:
        for i, d in enumerate(selected, start=1):
            outcomes.append(_evaluate(d, strategy, history, weights, opts, cancel))
            _report(progress_cb, f"Backtest: {i}/{total}", i / total)

    result = summarize(strategy, outcomes, total, date_from, date_to)
    rec.increment("backtest_draws_analyzed_total", total, strategy=strategy.value)
    rec.observe("backtest_duration_seconds", time.perf_counter() - started, strategy=strategy.value)
    return result
