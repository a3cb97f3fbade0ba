from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Tuple

@dataclass(frozen=True)
class Candle:
    timestamp: int  # unix seconds
    open: float
    high: float
    low: float
    close: float
    volume: int

    @property
    def date(self) -> datetime:
        return datetime.fromtimestamp(self.timestamp, tz=timezone.utc)

    @property
    def body(self) -> float:
        return abs(self.close - self.open)

    @property
    def upper_wick(self) -> float:
        return self.high - max(self.open, self.close)

    @property
    def lower_wick(self) -> float:
        return min(self.open, self.close) - self.low

@dataclass(frozen=True)
class PivotLevels:
    pivot: float
    r1: float
    r2: float
    s1: float
    s2: float

@dataclass(frozen=True)
class IndicatorSnapshot:
    """Latest value of every indicator series, taken at the last bar."""

    price: float
    rsi: float
    macd: float
    macd_signal: float
    macd_histogram: float
    bb_upper: float
    bb_middle: float
    bb_lower: float
    sma5: float
    ema20: float
    ema50: float
    ema200: float
    atr: float
    adx: float
    di_plus: float
    di_minus: float
    stoch_k: float
    stoch_d: float
    obv: float
    obv_prev: float
    rvol: float
    pivots: PivotLevels

    @property
    def support(self) -> float:
        return self.pivots.s2

    @property
    def resistance(self) -> float:
        return self.pivots.r2

    @property
    def bb_bandwidth(self) -> float:
        """(upper - lower) / middle in percent; 0 for a zero middle band."""
        if self.bb_middle == 0:
            return 0.0
        return (self.bb_upper - self.bb_lower) / self.bb_middle * 100.0

@dataclass(frozen=True)
class PatternDescription:
    name: str
    description: str

@dataclass(frozen=True)
class PatternResult:
    patterns: Tuple[str, ...] = ()
    descriptions: Tuple[PatternDescription, ...] = ()

    @property
    def pattern_string(self) -> str:
        return ", ".join(self.patterns) if self.patterns else "None"

@dataclass(frozen=True)
class BreakdownEntry:
    rule: str
    points: int
    text: str

@dataclass(frozen=True)
class ScoreWarning:
    kind: str  # squeeze | weak_trend | low_volume
    message: str

@dataclass(frozen=True)
class ScoreResult:
    score: int
    breakdown: Tuple[BreakdownEntry, ...]
    warnings: Tuple[ScoreWarning, ...]

class Action(str, Enum):
    STRONG_BUY = "STRONG BUY"
    BUY = "BUY"
    WEAK_BUY = "WEAK BUY"
    WAIT = "WAIT"
    WEAK_SELL = "WEAK SELL"
    SELL = "SELL"
    STRONG_SELL = "STRONG SELL"

    @property
    def is_buy(self) -> bool:
        return self in (Action.STRONG_BUY, Action.BUY, Action.WEAK_BUY)

    @property
    def is_sell(self) -> bool:
        return self in (Action.STRONG_SELL, Action.SELL, Action.WEAK_SELL)

@dataclass(frozen=True)
class Recommendation:
    action: Action
    confidence: str
    position_size: str
    emoji: str
    reason: str

@dataclass(frozen=True)
class Report:
    timestamp: int
    price: float
    snapshot: IndicatorSnapshot
    patterns: PatternResult
    score: int
    breakdown: Tuple[BreakdownEntry, ...]
    warnings: Tuple[ScoreWarning, ...]
    recommendation: Recommendation
    suggested_actions: Tuple[str, ...]
    tips: Tuple[str, ...]
    symbol: Optional[str] = None
    meta: Tuple[Tuple[str, Any], ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out["recommendation"]["action"] = self.recommendation.action.value
        out["snapshot"]["support"] = self.snapshot.support
        out["snapshot"]["resistance"] = self.snapshot.resistance
        out["patterns"]["pattern_string"] = self.patterns.pattern_string
        out["meta"] = dict(self.meta)
        out["date"] = datetime.fromtimestamp(self.timestamp, tz=timezone.utc).strftime("%Y-%m-%d")
        return out
