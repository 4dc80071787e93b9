"""Frequency-weighted lottery grid generation, strategy backtests and draw statistics."""
from .config import PredictionOptions, load_options
from .draws import CsvDrawSource, Draw
from .engine.backtest import BacktestResult, backtest
from .engine.generator import PredictedGrid, PredictionsResponse, generate
from .engine.strategies import Strategy
from .errors import DrawSourceError, OperationCancelled, ValidationError
from .service import LotoService

__version__ = "1.0.0"

__all__ = [
    "BacktestResult", "CsvDrawSource", "Draw", "DrawSourceError", "LotoService",
    "OperationCancelled", "PredictedGrid", "PredictionOptions", "PredictionsResponse",
    "Strategy", "ValidationError", "backtest", "generate", "load_options",
]
