# lotolab/service.py
"""
Service facade the transport layer calls into.

Each operation validates its inputs first, then loads the draw snapshot once
from the injected source. Snapshot read failures propagate untouched; retry
policy belongs to the store.
"""
from __future__ import annotations
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Iterable, List, Optional
import logging
import threading

import numpy as np

from .config import PredictionOptions
from .draws import Draw, DrawPage, DrawSource, parse_date_range, query_draws
from .engine.backtest import BacktestResult, ProgressCB, backtest
from .engine.generator import PredictionsResponse, generate
from .engine.strategies import Strategy
from .errors import ValidationError
from .freshness import IngestionFreshness
from .metrics import MetricsRecorder, NullRecorder
from . import stats
from .validation import (
    validate_base_number, validate_bucket_size, validate_prediction_request,
    validate_sample_size, validate_top,
)

logger = logging.getLogger(__name__)


class LotoService:
    def __init__(
        self,
        draw_source: DrawSource,
        options: Optional[PredictionOptions] = None,
        recorder: Optional[MetricsRecorder] = None,
        freshness: Optional[IngestionFreshness] = None,
        max_staleness: timedelta = timedelta(days=7),
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.draw_source = draw_source
        self.options = options or PredictionOptions()
        self.recorder = recorder or NullRecorder()
        self.freshness = freshness
        self.max_staleness = max_staleness
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    # ---- helpers ----
    def _load(self) -> List[Draw]:
        if self.freshness is not None and self.freshness.is_stale(self.max_staleness, now=self.clock()):
            snap = self.freshness.snapshot()
            logger.warning("Serving from a stale draw snapshot (last ingestion: %s)", snap.last_success_utc)
        return list(self.draw_source())

    def _validated(self, fn, *args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except ValidationError:
            self.recorder.increment("validation_errors_total")
            raise

    def _today(self) -> date:
        return self.clock().date()

    # ---- predictions ----
    def predict(
        self,
        count: Optional[int] = None,
        strategy=Strategy.FREQUENCY_GLOBAL,
        *,
        min_sum: Optional[int] = None,
        max_sum: Optional[int] = None,
        min_even: Optional[int] = None,
        max_even: Optional[int] = None,
        min_low: Optional[int] = None,
        max_low: Optional[int] = None,
        include: Optional[Iterable[int]] = None,
        exclude: Optional[Iterable[int]] = None,
        seed: Optional[int] = None,
        cancel: Optional[threading.Event] = None,
    ) -> PredictionsResponse:
        request = self._validated(
            validate_prediction_request, count, self.options,
            min_sum=min_sum, max_sum=max_sum, min_even=min_even, max_even=max_even,
            min_low=min_low, max_low=max_low, include=include, exclude=exclude,
        )
        strategy = Strategy.parse(strategy)
        self.recorder.increment("predictions_requested_total", strategy=strategy.value)
        draws = self._load()
        return generate(
            request.count, strategy, draws, request.constraints, np.random.default_rng(seed),
            options=self.options, cancel=cancel, recorder=self.recorder,
            today=self._today(), clock=self.clock,
        )

    # ---- backtest ----
    def backtest(
        self,
        strategy=Strategy.FREQUENCY_GLOBAL,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        sample_size: Optional[int] = None,
        *,
        workers: int = 1,
        cancel: Optional[threading.Event] = None,
        progress_cb: Optional[ProgressCB] = None,
    ) -> BacktestResult:
        start, end = self._validated(parse_date_range, date_from, date_to)
        size = self._validated(validate_sample_size, sample_size)
        draws = self._load()
        return backtest(
            strategy, draws, start, end, size,
            options=self.options, cancel=cancel, recorder=self.recorder,
            progress_cb=progress_cb, workers=workers, today=self._today(),
        )

    # ---- stats ----
    def overview(self) -> stats.StatsOverview:
        self.recorder.increment("stats_requests_total", report="overview")
        return stats.overview(self._load())

    def frequencies(self) -> stats.StatsFrequencies:
        self.recorder.increment("stats_requests_total", report="frequencies")
        return stats.frequencies(self._load())

    def patterns(self, bucket_size: Optional[int] = None) -> stats.PatternDistribution:
        size = self._validated(validate_bucket_size, bucket_size, self.options)
        self.recorder.increment("stats_requests_total", report="patterns")
        return stats.patterns(self._load(), size)

    def cooccurrence(self, base_number: int, top: Optional[int] = None) -> stats.CooccurrenceStats:
        base = self._validated(validate_base_number, base_number)
        limit = self._validated(validate_top, top, self.options)
        self.recorder.increment("stats_requests_total", report="cooccurrence")
        return stats.cooccurrence(self._load(), base, limit)

    # ---- draws ----
    def draws(self, page: int = 1, page_size: Optional[int] = None,
              date_from: Optional[str] = None, date_to: Optional[str] = None) -> DrawPage:
        self._validated(parse_date_range, date_from, date_to)
        return query_draws(self._load(), page, page_size, date_from, date_to, self.options)
