# lotolab/utilities/weights.py
# Frequency / cold / co-occurrence models. Vector index n-1 holds number n.
from __future__ import annotations
from typing import Iterable, Tuple
import numpy as np

from ..config import COLD_EPSILON, LUCKY_MAX, MAIN_MAX
from ..draws import Draw


def uniform_weights(size: int) -> np.ndarray:
    return np.full(int(size), 1.0 / int(size), dtype=float)


def main_counts(draws: Iterable[Draw]) -> np.ndarray:
    counts = np.zeros(MAIN_MAX, dtype=np.int64)
    for d in draws:
        for n in d.numbers:
            counts[n - 1] += 1
    return counts


def lucky_counts(draws: Iterable[Draw]) -> np.ndarray:
    counts = np.zeros(LUCKY_MAX, dtype=np.int64)
    for d in draws:
        counts[d.lucky - 1] += 1
    return counts


def normalize(counts: np.ndarray) -> np.ndarray:
    """count / total, or a uniform vector when there is no mass."""
    c = np.asarray(counts, dtype=float)
    total = float(c.sum())
    if total <= 0:
        return uniform_weights(c.size)
    return c / total


def frequency_weights(draws: Iterable[Draw]) -> Tuple[np.ndarray, np.ndarray]:
    draws = list(draws)
    return normalize(main_counts(draws)), normalize(lucky_counts(draws))


def inverse_weights(counts: np.ndarray, epsilon: float = COLD_EPSILON) -> np.ndarray:
    raw = 1.0 / (np.asarray(counts, dtype=float) + epsilon)
    total = float(raw.sum())
    if not np.isfinite(total) or total <= 0:
        return uniform_weights(raw.size)
    return raw / total


def cold_weights(draws: Iterable[Draw], epsilon: float = COLD_EPSILON) -> Tuple[np.ndarray, np.ndarray]:
    """
    Inverse-frequency weights: 1 / (count + epsilon), renormalized.

    Numbers never drawn get the largest weight.
    """
    draws = list(draws)
    return inverse_weights(main_counts(draws), epsilon), inverse_weights(lucky_counts(draws), epsilon)


def cooccurrence_matrix(draws: Iterable[Draw]) -> np.ndarray:
    """Symmetric 49x49 pair counts over the main numbers; the diagonal stays 0."""
    m = np.zeros((MAIN_MAX, MAIN_MAX), dtype=np.int64)
    for d in draws:
        row = sorted(d.numbers)
        for i in range(len(row)):
            for j in range(i + 1, len(row)):
                a, b = row[i] - 1, row[j] - 1
                m[a, b] += 1
                m[b, a] += 1
    return m
