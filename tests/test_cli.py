import json
import logging

import pytest

from lotolab.cli import main

CSV = """date,n1,n2,n3,n4,n5,lucky,day_name
2022-01-03,1,2,3,4,5,7,LUNDI
2022-01-05,10,20,30,40,49,1,MERCREDI
2022-01-08,11,12,13,14,15,10,SAMEDI
2022-01-10,1,12,23,34,45,3,LUNDI
"""


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    root = logging.getLogger("lotolab")
    for h in list(root.handlers):
        root.removeHandler(h)
    root.setLevel(logging.NOTSET)


@pytest.fixture
def base_args(tmp_path):
    p = tmp_path / "draws.csv"
    p.write_text(CSV, encoding="utf-8")
    return ["--csv", str(p), "--config", str(tmp_path / "config.json")]


def _run(capsys, argv):
    code = main(argv)
    return code, capsys.readouterr()


def test_predict(capsys, base_args):
    code, out = _run(capsys, base_args + ["predict", "--count", "3", "--strategy", "Uniform", "--seed", "5"])
    assert code == 0
    payload = json.loads(out.out)
    assert payload["count"] == 3
    assert payload["strategy"] == "Uniform"
    assert len(payload["draws"]) == 3


def test_predict_with_include(capsys, base_args):
    code, out = _run(capsys, base_args + ["predict", "--count", "2", "--strategy", "Uniform", "--include", "7", "--seed", "1"])
    assert code == 0
    for grid in json.loads(out.out)["draws"]:
        assert 7 in grid["numbers"]


def test_predict_invalid_bounds(capsys, base_args):
    code, out = _run(capsys, base_args + ["predict", "--min-sum", "120", "--max-sum", "119"])
    assert code == 2
    assert "minSum cannot be greater than maxSum." in out.err


def test_backtest(capsys, base_args):
    code, out = _run(capsys, base_args + ["backtest", "--strategy", "Cold", "--date-from", "2022-01-04"])
    assert code == 0
    payload = json.loads(out.out)
    assert payload["totalDrawsAnalyzed"] == 3


def test_backtest_bad_date(capsys, base_args):
    code, out = _run(capsys, base_args + ["backtest", "--date-from", "2022/01/04"])
    assert code == 2
    assert "yyyy-MM-dd" in out.err


def test_stats(capsys, base_args):
    code, out = _run(capsys, base_args + ["stats", "overview"])
    assert code == 0
    assert json.loads(out.out)["totalDraws"] == 4

    code, out = _run(capsys, base_args + ["stats", "cooccurrence", "--base", "1"])
    assert code == 0
    payload = json.loads(out.out)
    assert payload["drawsContainingBase"] == 2

    code, out = _run(capsys, base_args + ["stats", "cooccurrence"])
    assert code == 2


def test_draws(capsys, base_args):
    code, out = _run(capsys, base_args + ["draws", "--page-size", "2"])
    assert code == 0
    payload = json.loads(out.out)
    assert payload["totalPages"] == 2
    assert payload["items"][0]["drawDate"] == "2022-01-10"


def test_missing_csv(capsys, tmp_path):
    code, out = _run(capsys, ["--csv", str(tmp_path / "none.csv"), "--config", str(tmp_path / "c.json"),
                              "stats", "frequencies"])
    assert code == 1
    assert "not found" in out.err


def test_metrics_csv(capsys, base_args, tmp_path):
    metrics = tmp_path / "metrics.csv"
    code, _ = _run(capsys, base_args + ["--metrics-csv", str(metrics), "stats", "patterns"])
    assert code == 0
    assert "stats_requests_total" in metrics.read_text(encoding="utf-8")
