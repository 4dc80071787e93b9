# lotolab/metrics.py
# Injected metrics recorders. Nothing in the engines touches a global instrument.
from __future__ import annotations
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Protocol, Tuple
import json
import threading

from .logger import append_row

Key = Tuple[str, Tuple[Tuple[str, str], ...]]

CSV_HEADERS = ["timestamp", "kind", "name", "value", "tags"]


def _key(name: str, tags: Dict[str, object]) -> Key:
    return name, tuple(sorted((k, str(v)) for k, v in tags.items()))


class MetricsRecorder(Protocol):
    def increment(self, name: str, value: int = 1, **tags) -> None: ...

    def observe(self, name: str, value: float, **tags) -> None: ...


class NullRecorder:
    def increment(self, name: str, value: int = 1, **tags) -> None:
        return None

    def observe(self, name: str, value: float, **tags) -> None:
        return None


class InMemoryRecorder:
    """Thread-safe counters and histogram samples, mostly for tests and the CLI."""

    def __init__(self):
        self._lock = threading.Lock()
        self._counters: Dict[Key, int] = {}
        self._histograms: Dict[Key, List[float]] = {}

    def increment(self, name: str, value: int = 1, **tags) -> None:
        k = _key(name, tags)
        with self._lock:
            self._counters[k] = self._counters.get(k, 0) + int(value)

    def observe(self, name: str, value: float, **tags) -> None:
        k = _key(name, tags)
        with self._lock:
            self._histograms.setdefault(k, []).append(float(value))

    def counter(self, name: str, **tags) -> int:
        """Exact-tag lookup, or the sum over every tag set when no tags are given."""
        with self._lock:
            if tags:
                return self._counters.get(_key(name, tags), 0)
            return sum(v for (n, _), v in self._counters.items() if n == name)

    def samples(self, name: str) -> List[float]:
        with self._lock:
            out: List[float] = []
            for (n, _), vals in self._histograms.items():
                if n == name:
                    out.extend(vals)
            return out

    def snapshot(self) -> dict:
        with self._lock:
            counters = {}
            for (n, tags), v in self._counters.items():
                label = n + ("{" + ",".join(f"{k}={t}" for k, t in tags) + "}" if tags else "")
                counters[label] = v
            histograms = {}
            for (n, tags), vals in self._histograms.items():
                label = n + ("{" + ",".join(f"{k}={t}" for k, t in tags) + "}" if tags else "")
                histograms[label] = {
                    "count": len(vals),
                    "sum": float(sum(vals)),
                    "max": float(max(vals)) if vals else 0.0,
                }
            return {"counters": counters, "histograms": histograms}


class CsvRecorder:
    """Appends one CSV row per recorded event."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _write(self, kind: str, name: str, value: float, tags: Dict[str, object]) -> None:
        row = {
            "timestamp": datetime.now(timezone.utc).isoformat(timespec="seconds"),
            "kind": kind,
            "name": name,
            "value": value,
            "tags": json.dumps({k: str(v) for k, v in sorted(tags.items())}),
        }
        with self._lock:
            append_row(self.path, row, CSV_HEADERS)

    def increment(self, name: str, value: int = 1, **tags) -> None:
        self._write("counter", name, int(value), tags)

    def observe(self, name: str, value: float, **tags) -> None:
        self._write("histogram", name, float(value), tags)
