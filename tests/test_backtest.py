import threading
from datetime import date

import pytest

from lotolab.engine.backtest import backtest, derive_seed, match_draw, subsample, summarize
from lotolab.engine.generator import PredictedGrid
from lotolab.engine.strategies import Strategy
from lotolab.errors import OperationCancelled
from lotolab.metrics import InMemoryRecorder

from conftest import make_draw


def test_same_input_same_result(sample_draws):
    a = backtest(Strategy.FREQUENCY_GLOBAL, sample_draws)
    b = backtest(Strategy.FREQUENCY_GLOBAL, list(reversed(sample_draws)))
    assert a.to_dict() == b.to_dict()


def test_thread_pool_matches_sequential(sample_draws):
    seq = backtest(Strategy.COOCCURRENCE, sample_draws, workers=1)
    par = backtest(Strategy.COOCCURRENCE, sample_draws, workers=4)
    assert seq.to_dict() == par.to_dict()


def test_distribution_adds_up(sample_draws):
    res = backtest(Strategy.COLD, sample_draws)
    assert res.total_draws_analyzed == len(sample_draws)
    assert sum(d.count for d in res.distributions) == len(sample_draws)
    matched = sum(d.matched_main * d.count for d in res.distributions)
    assert res.average_matched_main == pytest.approx(matched / len(sample_draws))
    keys = [(d.matched_main, d.matched_lucky) for d in res.distributions]
    assert keys == sorted(keys, reverse=True)
    assert len(set(keys)) == len(keys)


def test_empty_history():
    res = backtest(Strategy.UNIFORM, [])
    assert res.total_draws_analyzed == 0
    assert res.average_matched_main == 0.0
    assert res.distributions == []


def test_date_range(sample_draws):
    start, end = date(2020, 2, 1), date(2020, 3, 31)
    expected = [d for d in sample_draws if start <= d.draw_date <= end]
    res = backtest(Strategy.UNIFORM, sample_draws, start, end)
    assert res.total_draws_analyzed == len(expected)
    assert res.to_dict()["from"] == "2020-02-01"
    assert res.to_dict()["to"] == "2020-03-31"


def test_range_with_no_draws(sample_draws):
    res = backtest(Strategy.UNIFORM, sample_draws, date(2030, 1, 1), date(2030, 12, 31))
    assert res.total_draws_analyzed == 0
    assert res.distributions == []


def test_sample_size(sample_draws):
    res = backtest(Strategy.FREQUENCY_GLOBAL, sample_draws, sample_size=10)
    assert res.total_draws_analyzed == 10
    again = backtest(Strategy.FREQUENCY_GLOBAL, sample_draws, sample_size=10)
    assert res.to_dict() == again.to_dict()


def test_subsample_is_fixed_and_bounded(sample_draws):
    a = subsample(sample_draws, 15)
    b = subsample(sample_draws, 15)
    assert [d.id for d in a] == [d.id for d in b]
    assert len({d.id for d in a}) == 15
    assert subsample(sample_draws, 100) == sample_draws
    assert subsample(sample_draws, None) == sample_draws


def test_seed_depends_on_strategy_and_draw(sample_draws):
    d = sample_draws[0]
    seeds = {derive_seed(d, s) for s in Strategy}
    assert len(seeds) == len(Strategy)
    assert derive_seed(d, Strategy.COLD) == derive_seed(d, "Cold")
    assert derive_seed(d, Strategy.COLD) != derive_seed(sample_draws[1], Strategy.COLD)
    assert all(1 <= s <= 2_147_483_647 for s in seeds)


def test_match_draw():
    d = make_draw(1, "2022-01-03", [1, 2, 3, 4, 5], 7)
    assert match_draw(d, PredictedGrid((1, 2, 10, 20, 30), 7, 0.5)) == (2, True)
    assert match_draw(d, PredictedGrid((11, 12, 13, 14, 15), 6, 0.5)) == (0, False)


def test_summarize_counts_skipped_draws_in_the_total():
    res = summarize(Strategy.UNIFORM, [(2, True), None, (2, True), (0, False)], total=4)
    assert res.total_draws_analyzed == 4
    assert res.average_matched_main == pytest.approx(1.0)
    assert [(d.matched_main, d.matched_lucky, d.count) for d in res.distributions] == [(2, True, 2), (0, False, 1)]


def test_cancel(sample_draws):
    ev = threading.Event()
    ev.set()
    with pytest.raises(OperationCancelled):
        backtest(Strategy.UNIFORM, sample_draws, cancel=ev)
    with pytest.raises(OperationCancelled):
        backtest(Strategy.UNIFORM, sample_draws, cancel=ev, workers=3)


def test_cancel_midway(sample_draws):
    ev = threading.Event()
    seen = []

    def progress(msg, p):
        seen.append(p)
        if len(seen) == 5:
            ev.set()

    with pytest.raises(OperationCancelled):
        backtest(Strategy.UNIFORM, sample_draws, cancel=ev, progress_cb=progress)
    assert len(seen) == 5


def test_progress_and_metrics(sample_draws):
    rec = InMemoryRecorder()
    seen = []
    backtest("FrequencyGlobal", sample_draws, recorder=rec, progress_cb=lambda m, p: seen.append(p))
    assert seen[-1] == 1.0
    assert seen == sorted(seen)
    assert rec.counter("backtests_total", strategy="FrequencyGlobal") == 1
    assert rec.counter("backtest_draws_analyzed_total") == len(sample_draws)
    assert len(rec.samples("backtest_duration_seconds")) == 1


def test_progress_callback_errors_propagate(sample_draws):
    def progress(msg, p):
        raise RuntimeError("ui gone")

    with pytest.raises(RuntimeError, match="ui gone"):
        backtest(Strategy.UNIFORM, sample_draws, progress_cb=progress)
