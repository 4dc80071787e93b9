# lotolab/utilities/wrs.py
from __future__ import annotations
from typing import List, Sequence
import numpy as np


def _roulette(candidates: np.ndarray, weights: np.ndarray, rng: np.random.Generator) -> int:
    """
    Cumulative-sum (roulette wheel) pick: draw u in [0, total) and return the
    first candidate whose running weight passes u. A pool with no mass is
    treated as uniform.
    """
    w = np.clip(np.asarray(weights, dtype=float), 0.0, None)
    cumulative = np.cumsum(w)
    total = float(cumulative[-1]) if cumulative.size else 0.0
    if not np.isfinite(total) or total <= 0:
        cumulative = np.arange(1, len(candidates) + 1, dtype=float)
        total = float(len(candidates))
    draw = rng.random() * total
    idx = int(np.searchsorted(cumulative, draw, side="right"))
    return min(idx, len(candidates) - 1)


def sample_without_replacement(weights: Sequence[float], k: int, rng: np.random.Generator,
                               start: int = 1) -> List[int]:
    """
    k roulette picks, each removing the chosen number from the pool.
    Returned in pick order; number ``start + i`` carries ``weights[i]``.
    """
    w = np.asarray(weights, dtype=float)
    if k > w.size:
        raise ValueError(f"cannot pick {k} distinct numbers from {w.size}")
    numbers = np.arange(start, start + w.size)
    picked: List[int] = []
    for _ in range(int(k)):
        idx = _roulette(numbers, w, rng)
        picked.append(int(numbers[idx]))
        numbers = np.delete(numbers, idx)
        w = np.delete(w, idx)
    return picked


def sample_chained(selected: Sequence[int], cooccurrence: np.ndarray, fallback_weights: Sequence[float],
                   rng: np.random.Generator) -> int:
    """
    Pick one more main number given the ones already ``selected``.

    A candidate's weight is the sum of its co-occurrence counts with every
    selected number. With no co-occurrence mass the global ``fallback_weights``
    are used, then a uniform pick among the remaining numbers.
    """
    size = cooccurrence.shape[0]
    chosen = {int(n) for n in selected}
    candidates = np.array([n for n in range(1, size + 1) if n not in chosen])
    if candidates.size == 0:
        raise ValueError("no candidates left to pick from")

    if chosen:
        rows = cooccurrence[np.ix_(candidates - 1, np.array(sorted(chosen)) - 1)]
        w = rows.sum(axis=1).astype(float)
    else:
        w = np.zeros(candidates.size, dtype=float)
    if w.sum() <= 0:
        w = np.asarray(fallback_weights, dtype=float)[candidates - 1]
    return int(candidates[_roulette(candidates, w, rng)])


def sample_single(weights: Sequence[float], rng: np.random.Generator, start: int = 1) -> int:
    """One weighted pick over the full domain (used for the lucky number)."""
    w = np.asarray(weights, dtype=float)
    numbers = np.arange(start, start + w.size)
    return int(numbers[_roulette(numbers, w, rng)])
