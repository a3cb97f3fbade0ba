"""Daily-bar technical analysis and trade scoring engine.

Pipeline (one symbol, one synchronous pass):
- Candles (>= 200 ascending daily bars) -> price/volume arrays
- Indicators: RSI, MACD, Bollinger Bands, ATR, ADX, Stochastic, OBV, RVOL, pivot points
- Candlestick patterns on the latest bar: Doji, Hammer, Bullish Engulfing
- Nine additive scoring rules -> score, breakdown, warnings
- Score -> one of seven recommendation tiers, suggested actions, tips
"""

from .analyzer import analyze
from .config import EngineConfig
from .errors import AnalysisError, InsufficientDataError, InvalidCandleError, MarketDataError
from .models import Action, Candle, Report

__all__ = [
    "analyze",
    "Action",
    "Candle",
    "EngineConfig",
    "Report",
    "AnalysisError",
    "InsufficientDataError",
    "InvalidCandleError",
    "MarketDataError",
]
