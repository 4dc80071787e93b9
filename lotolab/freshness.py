# lotolab/freshness.py
"""
Ingestion freshness, read-only from the core's side.

The ingestion collaborator publishes a new immutable snapshot after each
successful refresh; readers only ever see a whole snapshot.
"""
from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
import threading


@dataclass(frozen=True)
class FreshnessSnapshot:
    last_success_utc: Optional[datetime] = None
    draws_ingested: int = 0


class IngestionFreshness:
    def __init__(self, initial: Optional[FreshnessSnapshot] = None):
        self._lock = threading.Lock()
        self._snapshot = initial or FreshnessSnapshot()

    def publish(self, last_success_utc: datetime, draws_ingested: int = 0) -> FreshnessSnapshot:
        """Called by the ingestion side only."""
        if last_success_utc.tzinfo is None:
            last_success_utc = last_success_utc.replace(tzinfo=timezone.utc)
        snap = FreshnessSnapshot(last_success_utc=last_success_utc, draws_ingested=int(draws_ingested))
        with self._lock:
            self._snapshot = snap
        return snap

    def snapshot(self) -> FreshnessSnapshot:
        with self._lock:
            return self._snapshot

    def is_stale(self, max_age: timedelta, now: Optional[datetime] = None) -> bool:
        snap = self.snapshot()
        if snap.last_success_utc is None:
            return True
        now = now or datetime.now(timezone.utc)
        return now - snap.last_success_utc > max_age
