# lotolab/engine/strategies.py
# Strategy selector -> weight vectors. One pure function per strategy, picked
# from the STRATEGIES lookup table.
from __future__ import annotations
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence
import logging

import numpy as np

from ..config import LUCKY_MAX, MAIN_MAX, PredictionOptions
from ..draws import Draw
from ..errors import ValidationError
from ..utilities.weights import cold_weights, cooccurrence_matrix, frequency_weights, uniform_weights

logger = logging.getLogger(__name__)


class Strategy(str, Enum):
    UNIFORM = "Uniform"
    FREQUENCY_GLOBAL = "FrequencyGlobal"
    FREQUENCY_RECENT = "FrequencyRecent"
    COLD = "Cold"
    COOCCURRENCE = "Cooccurrence"

    @classmethod
    def parse(cls, value, strict: bool = False) -> "Strategy":
        """Case-insensitive lookup by name or value; unknown falls back to Uniform."""
        if isinstance(value, Strategy):
            return value
        if value is not None:
            key = str(value).strip().replace("_", "").replace("-", "").lower()
            for s in cls:
                if key in (s.value.lower(), s.name.replace("_", "").lower()):
                    return s
        if strict:
            raise ValidationError(f"Unknown strategy {value!r}; expected one of {[s.value for s in cls]}.")
        if value is not None:
            logger.info("Unknown strategy %r, using Uniform", value)
        return cls.UNIFORM


@dataclass(frozen=True)
class StrategyWeights:
    main: np.ndarray
    lucky: np.ndarray
    cooccurrence: Optional[np.ndarray] = None

    @property
    def chained(self) -> bool:
        return self.cooccurrence is not None


@dataclass(frozen=True)
class StrategyContext:
    recent_window_days: int = 730
    today: Optional[date] = None


def recent_draws(draws: Sequence[Draw], window_days: int, today: Optional[date] = None) -> List[Draw]:
    cutoff = (today or date.today()) - timedelta(days=int(window_days))
    return [d for d in draws if d.draw_date >= cutoff]


def _uniform(draws: Sequence[Draw], ctx: StrategyContext) -> StrategyWeights:
    return StrategyWeights(uniform_weights(MAIN_MAX), uniform_weights(LUCKY_MAX))


def _frequency_global(draws: Sequence[Draw], ctx: StrategyContext) -> StrategyWeights:
    main, lucky = frequency_weights(draws)
    return StrategyWeights(main, lucky)


def _frequency_recent(draws: Sequence[Draw], ctx: StrategyContext) -> StrategyWeights:
    window = recent_draws(draws, ctx.recent_window_days, ctx.today)
    if not window:
        logger.info("No draws in the last %d days, using the full history", ctx.recent_window_days)
        window = list(draws)
    main, lucky = frequency_weights(window)
    return StrategyWeights(main, lucky)


def _cold(draws: Sequence[Draw], ctx: StrategyContext) -> StrategyWeights:
    main, lucky = cold_weights(draws)
    return StrategyWeights(main, lucky)


def _cooccurrence(draws: Sequence[Draw], ctx: StrategyContext) -> StrategyWeights:
    main, lucky = frequency_weights(draws)
    return StrategyWeights(main, lucky, cooccurrence=cooccurrence_matrix(draws))


StrategyFn = Callable[[Sequence[Draw], StrategyContext], StrategyWeights]

STRATEGIES: Dict[Strategy, StrategyFn] = {
    Strategy.UNIFORM: _uniform,
    Strategy.FREQUENCY_GLOBAL: _frequency_global,
    Strategy.FREQUENCY_RECENT: _frequency_recent,
    Strategy.COLD: _cold,
    Strategy.COOCCURRENCE: _cooccurrence,
}


def resolve_weights(strategy, draws: Sequence[Draw], options: Optional[PredictionOptions] = None,
                    today: Optional[date] = None) -> StrategyWeights:
    opts = options or PredictionOptions()
    fn = STRATEGIES.get(Strategy.parse(strategy), _uniform)
    return fn(list(draws), StrategyContext(recent_window_days=opts.recent_window_days, today=today))
