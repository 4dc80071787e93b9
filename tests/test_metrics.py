import csv
import json
import threading

from lotolab.metrics import CSV_HEADERS, CsvRecorder, InMemoryRecorder, NullRecorder


def test_in_memory_counters_by_tag():
    rec = InMemoryRecorder()
    rec.increment("hits", strategy="Cold")
    rec.increment("hits", 2, strategy="Cold")
    rec.increment("hits", strategy="Uniform")
    assert rec.counter("hits", strategy="Cold") == 3
    assert rec.counter("hits") == 4
    assert rec.counter("missing") == 0


def test_in_memory_histograms():
    rec = InMemoryRecorder()
    rec.observe("latency", 0.5, op="a")
    rec.observe("latency", 1.5, op="b")
    assert sorted(rec.samples("latency")) == [0.5, 1.5]
    snap = rec.snapshot()
    assert snap["histograms"]["latency{op=a}"] == {"count": 1, "sum": 0.5, "max": 0.5}


def test_in_memory_is_thread_safe():
    rec = InMemoryRecorder()

    def work():
        for _ in range(1000):
            rec.increment("n")

    threads = [threading.Thread(target=work) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert rec.counter("n") == 8000


def test_null_recorder_accepts_everything():
    rec = NullRecorder()
    rec.increment("x", 3, a=1)
    rec.observe("y", 0.1)


def test_csv_recorder(tmp_path):
    p = tmp_path / "metrics.csv"
    rec = CsvRecorder(p)
    rec.increment("predictions_requested_total", strategy="Cold")
    rec.observe("backtest_duration_seconds", 0.25)
    with p.open(newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert list(rows[0].keys()) == CSV_HEADERS
    assert rows[0]["kind"] == "counter"
    assert json.loads(rows[0]["tags"]) == {"strategy": "Cold"}
    assert rows[1]["kind"] == "histogram"
    assert float(rows[1]["value"]) == 0.25
