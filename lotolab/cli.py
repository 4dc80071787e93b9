# lotolab/cli.py
from __future__ import annotations
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import DATA_DIR, load_options
from .draws import CsvDrawSource
from .engine.strategies import Strategy
from .errors import DrawSourceError, ValidationError
from .logger import configure_logging
from .metrics import CsvRecorder, InMemoryRecorder
from .service import LotoService

logger = logging.getLogger(__name__)

STRATEGY_CHOICES = [s.value for s in Strategy]


def _print(payload) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def _numbers(text: str) -> List[int]:
    try:
        return [int(x) for x in text.split(",") if x.strip()]
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected comma-separated integers, got {text!r}") from None


def _service(args) -> LotoService:
    options = load_options(args.config)
    recorder = CsvRecorder(args.metrics_csv) if args.metrics_csv else InMemoryRecorder()
    return LotoService(CsvDrawSource(args.csv), options=options, recorder=recorder)


def cmd_predict(args):
    svc = _service(args)
    res = svc.predict(
        args.count, args.strategy,
        min_sum=args.min_sum, max_sum=args.max_sum,
        min_even=args.min_even, max_even=args.max_even,
        min_low=args.min_low, max_low=args.max_low,
        include=args.include, exclude=args.exclude,
        seed=args.seed,
    )
    _print(res.to_dict())


def cmd_backtest(args):
    svc = _service(args)

    def progress(msg: str, p: float) -> None:
        logger.debug("%s (%.0f%%)", msg, p * 100)

    res = svc.backtest(args.strategy, args.date_from, args.date_to, args.sample_size,
                       workers=args.workers, progress_cb=progress)
    _print(res.to_dict())


def cmd_stats(args):
    svc = _service(args)
    if args.report == "overview":
        res = svc.overview()
    elif args.report == "frequencies":
        res = svc.frequencies()
    elif args.report == "patterns":
        res = svc.patterns(args.bucket_size)
    else:
        if args.base is None:
            raise ValidationError("--base is required for the cooccurrence report.")
        res = svc.cooccurrence(args.base, args.top)
    _print(res.to_dict())


def cmd_draws(args):
    svc = _service(args)
    _print(svc.draws(args.page, args.page_size, args.date_from, args.date_to).to_dict())


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="lotolab", description="Draw statistics, weighted grid generation and strategy backtests")
    p.add_argument("--csv", default=str(DATA_DIR / "draws.csv"), help="Draw history CSV (default: Data/draws.csv)")
    p.add_argument("--config", default=None, help="JSON options file")
    p.add_argument("--metrics-csv", default=None, help="Append metrics events to this CSV")
    p.add_argument("--log-level", default="WARNING")
    p.add_argument("--log-file", default=None)
    sub = p.add_subparsers(dest="cmd", required=True)

    pr = sub.add_parser("predict", help="Generate weighted grids")
    pr.add_argument("--count", type=int, default=None)
    pr.add_argument("--strategy", choices=STRATEGY_CHOICES, default=Strategy.FREQUENCY_GLOBAL.value)
    for name in ("min-sum", "max-sum", "min-even", "max-even", "min-low", "max-low"):
        pr.add_argument(f"--{name}", type=int, default=None)
    pr.add_argument("--include", type=_numbers, default=None, help="Comma-separated forced numbers")
    pr.add_argument("--exclude", type=_numbers, default=None, help="Comma-separated excluded numbers")
    pr.add_argument("--seed", type=int, default=None)
    pr.set_defaults(func=cmd_predict)

    bt = sub.add_parser("backtest", help="Replay a strategy against the history")
    bt.add_argument("--strategy", choices=STRATEGY_CHOICES, default=Strategy.FREQUENCY_GLOBAL.value)
    bt.add_argument("--date-from", default=None, help="yyyy-MM-dd")
    bt.add_argument("--date-to", default=None, help="yyyy-MM-dd")
    bt.add_argument("--sample-size", type=int, default=None)
    bt.add_argument("--workers", type=int, default=1)
    bt.set_defaults(func=cmd_backtest)

    st = sub.add_parser("stats", help="Statistics reports")
    st.add_argument("report", choices=["overview", "frequencies", "patterns", "cooccurrence"])
    st.add_argument("--bucket-size", type=int, default=None)
    st.add_argument("--base", type=int, default=None)
    st.add_argument("--top", type=int, default=None)
    st.set_defaults(func=cmd_stats)

    dr = sub.add_parser("draws", help="List draws, newest first")
    dr.add_argument("--page", type=int, default=1)
    dr.add_argument("--page-size", type=int, default=None)
    dr.add_argument("--date-from", default=None)
    dr.add_argument("--date-to", default=None)
    dr.set_defaults(func=cmd_draws)
    return p


def main(argv: Optional[List[str]] = None) -> int:
    p = build_parser()
    args = p.parse_args(argv)
    configure_logging(args.log_level, args.log_file)
    try:
        args.func(args)
    except ValidationError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    except DrawSourceError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
