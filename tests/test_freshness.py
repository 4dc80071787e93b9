from datetime import datetime, timedelta, timezone

from lotolab.freshness import FreshnessSnapshot, IngestionFreshness


def test_never_published_is_stale():
    f = IngestionFreshness()
    assert f.snapshot() == FreshnessSnapshot()
    assert f.is_stale(timedelta(days=1))


def test_publish_swaps_snapshot():
    f = IngestionFreshness()
    before = f.snapshot()
    ts = datetime(2024, 1, 10, 8, 0, tzinfo=timezone.utc)
    snap = f.publish(ts, draws_ingested=12)
    assert f.snapshot() is snap
    assert before.last_success_utc is None
    assert snap.draws_ingested == 12


def test_naive_timestamps_are_utc():
    f = IngestionFreshness()
    snap = f.publish(datetime(2024, 1, 10, 8, 0))
    assert snap.last_success_utc.tzinfo is timezone.utc


def test_staleness_window():
    f = IngestionFreshness()
    f.publish(datetime(2024, 1, 10, tzinfo=timezone.utc))
    now = datetime(2024, 1, 15, tzinfo=timezone.utc)
    assert not f.is_stale(timedelta(days=7), now=now)
    assert f.is_stale(timedelta(days=2), now=now)
