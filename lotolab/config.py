# lotolab/config.py
"""
Config module used by the service, the CLI and the engines.

Exports:
- DATA_DIR: Path to Data/ (override with LOTOLAB_DATA_DIR)
- PredictionOptions: host-owned tunables
- load_options(path=None, environ=None) -> PredictionOptions
- save_options(options, path) -> None
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional
import json
import logging
import os

logger = logging.getLogger(__name__)

# Game rules (5 mains from 1..49 + 1 lucky from 1..10)
MAIN_MIN, MAIN_MAX = 1, 49
LUCKY_MIN, LUCKY_MAX = 1, 10
MAIN_PICKS = 5
LOW_NUMBER_MAX = 25

COLD_EPSILON = 1e-3
BACKTEST_SAMPLE_SEED = 1337
UNKNOWN_DAY = "UNKNOWN"

ENV_PREFIX = "LOTOLAB_"

# Allow overrides via environment variables, otherwise default to ./Data
DATA_DIR = Path(os.environ.get("LOTOLAB_DATA_DIR", Path.cwd() / "Data")).resolve()
CONFIG_PATH = DATA_DIR / "config.json"


@dataclass(frozen=True)
class PredictionOptions:
    default_count: int = 10          # used when the requested count is missing or <= 0
    max_count: int = 100             # hard limit on grids per request
    recent_window_days: int = 730    # look-back for FrequencyRecent
    max_include_numbers: int = 5
    max_attempts_multiplier: int = 100
    default_bucket_size: int = 10
    default_top: int = 15
    draws_page_size: int = 50
    draws_max_page_size: int = 200

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{f.name} must be an integer, got {value!r}")
            if value <= 0:
                raise ValueError(f"{f.name} must be positive, got {value}")
        if self.default_count > self.max_count:
            raise ValueError("default_count cannot exceed max_count")

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


def _coerce_int(name: str, raw: Any) -> int:
    if isinstance(raw, bool):
        raise ValueError(f"{name} must be an integer, got {raw!r}")
    if isinstance(raw, int):
        return raw
    try:
        return int(str(raw).strip())
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _read_config_file(path: Path) -> Dict[str, Any]:
    """
    Read a JSON config file. A missing file yields {}; a malformed one is
    logged and ignored.
    """
    if not path.exists():
        return {}
    try:
        text = path.read_text(encoding="utf-8")
        data = json.loads(text) if text.strip() else {}
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Ignoring unreadable config file %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring config file %s: top-level value is not an object", path)
        return {}
    return data


def load_options(path: Optional[str | Path] = None,
                 environ: Optional[Mapping[str, str]] = None) -> PredictionOptions:
    """
    Resolve options in order: defaults, JSON file, LOTOLAB_<FIELD> env vars.

    The file is the explicit ``path``, else ``$LOTOLAB_CONFIG``, else
    Data/config.json when it exists.
    """
    env = os.environ if environ is None else environ
    if path is None:
        path = env.get(ENV_PREFIX + "CONFIG") or CONFIG_PATH
    values: Dict[str, int] = {}
    known = {f.name for f in fields(PredictionOptions)}

    for key, raw in _read_config_file(Path(path)).items():
        if key not in known:
            logger.debug("Unknown config key %r ignored", key)
            continue
        values[key] = _coerce_int(key, raw)

    for name in known:
        raw = env.get(ENV_PREFIX + name.upper())
        if raw is not None and str(raw).strip():
            values[name] = _coerce_int(name, raw)

    return PredictionOptions(**values)


def save_options(options: PredictionOptions, path: str | Path) -> None:
    """Save options atomically as JSON."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    tmp = target.with_suffix(target.suffix + ".tmp")
    tmp.write_text(json.dumps(options.to_dict(), indent=2), encoding="utf-8")
    os.replace(tmp, target)
