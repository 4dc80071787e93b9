# lotolab/draws.py
# Draw records, date parsing/filtering, CSV snapshot source and paged queries.
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence, Tuple
import csv
import logging
import math

import pandas as pd

from .config import LUCKY_MAX, LUCKY_MIN, MAIN_MAX, MAIN_MIN, MAIN_PICKS, PredictionOptions
from .errors import DrawSourceError, ValidationError

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"
# FDJ archives write dates day-first
DAYFIRST_FORMAT = "%d/%m/%Y"


@dataclass(frozen=True)
class Draw:
    id: int
    draw_date: date
    numbers: Tuple[int, ...]
    lucky: int
    official_draw_id: Optional[str] = None
    day_name: Optional[str] = None

    def __post_init__(self) -> None:
        nums = tuple(int(n) for n in self.numbers)
        if len(nums) != MAIN_PICKS or len(set(nums)) != MAIN_PICKS:
            raise ValueError(f"draw {self.id}: expected {MAIN_PICKS} distinct main numbers, got {nums}")
        if any(n < MAIN_MIN or n > MAIN_MAX for n in nums):
            raise ValueError(f"draw {self.id}: main numbers must be between {MAIN_MIN} and {MAIN_MAX}")
        if not LUCKY_MIN <= int(self.lucky) <= LUCKY_MAX:
            raise ValueError(f"draw {self.id}: lucky number must be between {LUCKY_MIN} and {LUCKY_MAX}")
        object.__setattr__(self, "numbers", nums)
        object.__setattr__(self, "lucky", int(self.lucky))

    @property
    def main_set(self) -> frozenset:
        return frozenset(self.numbers)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "officialDrawId": self.official_draw_id or "",
            "drawDate": self.draw_date.isoformat(),
            "drawDayName": self.day_name,
            "numbers": list(self.numbers),
            "luckyNumber": self.lucky,
        }


@dataclass
class DrawPage:
    items: List[Draw] = field(default_factory=list)
    page: int = 1
    page_size: int = 50
    total_count: int = 0
    total_pages: int = 0

    def to_dict(self) -> dict:
        return {
            "items": [d.to_dict() for d in self.items],
            "page": self.page,
            "pageSize": self.page_size,
            "totalCount": self.total_count,
            "totalPages": self.total_pages,
        }


# ---- Dates ----
def parse_date(value: Optional[str], field_name: str = "date") -> Optional[date]:
    if value is None or not str(value).strip():
        return None
    try:
        return datetime.strptime(str(value).strip(), DATE_FORMAT).date()
    except ValueError:
        raise ValidationError(f"{field_name} must use yyyy-MM-dd format.") from None


def parse_date_range(date_from: Optional[str], date_to: Optional[str]) -> Tuple[Optional[date], Optional[date]]:
    start = parse_date(date_from, "dateFrom")
    end = parse_date(date_to, "dateTo")
    if start and end and start > end:
        raise ValidationError("dateFrom cannot be after dateTo.")
    return start, end


def sort_by_date(draws: Iterable[Draw]) -> List[Draw]:
    return sorted(draws, key=lambda d: (d.draw_date, d.id))


def filter_by_date(draws: Iterable[Draw], date_from: Optional[date] = None,
                   date_to: Optional[date] = None) -> List[Draw]:
    out = []
    for d in draws:
        if date_from and d.draw_date < date_from:
            continue
        if date_to and d.draw_date > date_to:
            continue
        out.append(d)
    return out


# ---- DataFrame <-> Draw ----
_MAIN_PREFIXES = ("n", "number", "num", "white", "ball", "boule_")
_LUCKY_NAMES = ("lucky", "luckynumber", "lucky_number", "chance", "numero_chance", "special", "bonus")
_DATE_NAMES = ("draw_date", "drawdate", "date", "date_de_tirage")
_DAY_NAMES = ("day_name", "draw_day_name", "drawdayname", "jour_de_tirage", "weekday")
_OFFICIAL_NAMES = ("official_draw_id", "officialdrawid", "annee_numero_de_tirage")


def _first_present(columns: Sequence[str], names: Sequence[str]) -> Optional[str]:
    for n in names:
        if n in columns:
            return n
    return None


def _main_columns(columns: Sequence[str]) -> List[str]:
    for prefix in _MAIN_PREFIXES:
        cols = [c for c in columns if c.startswith(prefix) and c[len(prefix):].isdigit()]
        if len(cols) >= MAIN_PICKS:
            return sorted(cols, key=lambda c: int(c[len(prefix):]))[:MAIN_PICKS]
    return []


def parse_draw_dates(values: pd.Series) -> pd.Series:
    """
    ISO dates first, then day-first ``dd/MM/yyyy``. Values matching neither
    come back as NaT.
    """
    if pd.api.types.is_datetime64_any_dtype(values):
        return values
    text = values.astype(str).str.strip()
    iso = pd.to_datetime(text, format=DATE_FORMAT, errors="coerce")
    dayfirst = pd.to_datetime(text, format=DAYFIRST_FORMAT, errors="coerce")
    return iso.fillna(dayfirst)


def draws_from_frame(df: pd.DataFrame) -> List[Draw]:
    """
    Build draws from a DataFrame with flexible column names.

    Main numbers come from ``n1..n5`` (or ``number1..``, ``white1..``,
    ``ball1..``, ``boule_1..``), the lucky number from ``lucky``/``chance``/
    ``numero_chance``, the date from ``draw_date``/``date``/``date_de_tirage``
    as ``yyyy-MM-dd`` or ``dd/MM/yyyy``. Missing ids are numbered from 1 in
    row order.
    """
    if df is None or df.empty:
        return []
    work = df.copy()
    work.columns = [str(c).strip().lower() for c in work.columns]
    cols = list(work.columns)

    main_cols = _main_columns(cols)
    lucky_col = _first_present(cols, _LUCKY_NAMES)
    date_col = _first_present(cols, _DATE_NAMES)
    if not main_cols or lucky_col is None or date_col is None:
        raise ValueError(f"Could not detect draw columns in {cols}")
    day_col = _first_present(cols, _DAY_NAMES)
    official_col = _first_present(cols, _OFFICIAL_NAMES)

    dates = parse_draw_dates(work[date_col])
    if dates.isna().any():
        bad = work.loc[dates.isna(), date_col].tolist()[:3]
        raise ValueError(f"Unparseable draw dates: {bad}")

    out: List[Draw] = []
    for i, (idx, row) in enumerate(work.iterrows()):
        raw_id = row["id"] if "id" in cols else None
        draw_id = int(raw_id) if raw_id is not None and pd.notna(raw_id) else i + 1
        day = row[day_col] if day_col else None
        official = row[official_col] if official_col else None
        out.append(Draw(
            id=draw_id,
            draw_date=dates.loc[idx].date(),
            numbers=tuple(int(row[c]) for c in main_cols),
            lucky=int(row[lucky_col]),
            official_draw_id=str(official) if official is not None and pd.notna(official) else None,
            day_name=str(day).strip() if day is not None and pd.notna(day) and str(day).strip() else None,
        ))
    return out


def draws_to_frame(draws: Iterable[Draw]) -> pd.DataFrame:
    rows = []
    for d in draws:
        row = {"id": d.id, "draw_date": pd.Timestamp(d.draw_date), "day_name": d.day_name, "lucky": d.lucky}
        for i, n in enumerate(d.numbers, start=1):
            row[f"n{i}"] = n
        rows.append(row)
    columns = ["id", "draw_date", "day_name", "lucky"] + [f"n{i}" for i in range(1, MAIN_PICKS + 1)]
    return pd.DataFrame(rows, columns=columns)


class CsvDrawSource:
    """Read-only draw snapshot loaded from a CSV file on each call."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def __call__(self) -> List[Draw]:
        try:
            df = pd.read_csv(self.path, sep=None, engine="python", index_col=False)
        except FileNotFoundError as e:
            raise DrawSourceError(f"Draw history not found at {self.path}") from e
        except (OSError, csv.Error, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            raise DrawSourceError(f"Could not read draw history {self.path}: {e}") from e
        try:
            draws = draws_from_frame(df)
        except (ValueError, KeyError) as e:
            raise DrawSourceError(f"Malformed draw history {self.path}: {e}") from e
        logger.debug("Loaded %d draws from %s", len(draws), self.path)
        return draws


DrawSource = Callable[[], Iterable[Draw]]


# ---- Paged query ----
def query_draws(draws: Iterable[Draw], page: int = 1, page_size: Optional[int] = None,
                date_from: Optional[str] = None, date_to: Optional[str] = None,
                options: Optional[PredictionOptions] = None) -> DrawPage:
    opts = options or PredictionOptions()
    page = 1 if page is None or page < 1 else int(page)
    if page_size is None or page_size <= 0:
        page_size = opts.draws_page_size
    page_size = min(int(page_size), opts.draws_max_page_size)

    start, end = parse_date_range(date_from, date_to)
    selected = sorted(filter_by_date(draws, start, end), key=lambda d: (d.draw_date, d.id), reverse=True)
    total = len(selected)
    offset = (page - 1) * page_size
    return DrawPage(
        items=selected[offset:offset + page_size],
        page=page,
        page_size=page_size,
        total_count=total,
        total_pages=math.ceil(total / page_size) if total else 0,
    )
