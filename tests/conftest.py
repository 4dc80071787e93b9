from datetime import date, timedelta

import numpy as np
import pytest

from lotolab.draws import Draw

DAY_NAMES = ["LUNDI", "MERCREDI", "SAMEDI"]


def make_draw(draw_id, day, numbers, lucky, day_name=None, official=None):
    if isinstance(day, str):
        day = date.fromisoformat(day)
    return Draw(id=draw_id, draw_date=day, numbers=tuple(numbers), lucky=lucky,
                official_draw_id=official, day_name=day_name)


@pytest.fixture
def sample_draws():
    """60 pseudo-random draws, every 3 days from 2020-01-01."""
    rng = np.random.default_rng(42)
    out = []
    start = date(2020, 1, 1)
    for i in range(60):
        nums = sorted(int(n) + 1 for n in rng.choice(49, size=5, replace=False))
        lucky = int(rng.integers(1, 11))
        day_name = DAY_NAMES[i % 3] if i % 10 else None
        out.append(make_draw(i + 1, start + timedelta(days=3 * i), nums, lucky, day_name, f"2020{i + 1:03d}"))
    return out


@pytest.fixture
def constant_draws():
    """Ten identical draws: only 1-5 and lucky 1 were ever drawn."""
    return [make_draw(i + 1, date(2021, 1, 1) + timedelta(days=i), [1, 2, 3, 4, 5], 1) for i in range(10)]


@pytest.fixture
def rng():
    return np.random.default_rng(2024)
