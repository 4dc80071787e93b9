# lotolab/logger.py
from __future__ import annotations
import csv
import logging
from pathlib import Path
from typing import Dict, List, Optional

CONSOLE_FORMAT = "%(levelname)s %(name)s: %(message)s"
DETAILED_FORMAT = "%(asctime)s - %(levelname)s - [%(funcName)s] - %(message)s"

_HANDLER_TAG = "_lotolab_handler"


def configure_logging(level: str | int = "INFO", log_file: Optional[str | Path] = None) -> logging.Logger:
    """
    Attach a console handler (and optionally a file handler) to the
    ``lotolab`` logger. Calling it again replaces the handlers it added.
    """
    root = logging.getLogger("lotolab")
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {level}")
    root.setLevel(level)

    for h in list(root.handlers):
        if getattr(h, _HANDLER_TAG, False):
            root.removeHandler(h)
            h.close()

    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    setattr(console, _HANDLER_TAG, True)
    root.addHandler(console)

    if log_file:
        p = Path(log_file)
        p.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(p, "a", "utf-8")
        fh.setFormatter(logging.Formatter(DETAILED_FORMAT))
        setattr(fh, _HANDLER_TAG, True)
        root.addHandler(fh)
    return root


def ensure_csv(path: str | Path, headers: List[str]) -> None:
    p = Path(path)
    if not p.exists() or p.stat().st_size == 0:
        p.parent.mkdir(parents=True, exist_ok=True)
        with p.open("w", newline="", encoding="utf-8") as f:
            csv.writer(f).writerow(headers)


def _existing_headers(p: Path) -> Optional[List[str]]:
    if not p.exists() or p.stat().st_size == 0:
        return None
    with p.open(newline="", encoding="utf-8") as f:
        return next(csv.reader(f), None)


def append_row(path: str | Path, row: Dict[str, str | int | float], headers: Optional[List[str]] = None) -> None:
    p = Path(path)
    # header order follows the first row written to a fresh file
    headers = headers or _existing_headers(p) or list(row.keys())
    ensure_csv(p, headers)
    with p.open("a", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=headers, extrasaction="ignore")
        w.writerow(row)
