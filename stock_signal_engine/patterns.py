from __future__ import annotations

from typing import Sequence

from .models import Candle, PatternDescription, PatternResult

DOJI = PatternDescription(
    name="DOJI",
    description=(
        "Indecision candle. Small body shows buyers and sellers are balanced. "
        "Often signals potential reversal when at support/resistance. "
        "Wait for next candle to confirm direction."
    ),
)
HAMMER = PatternDescription(
    name="HAMMER",
    description=(
        "Bullish reversal signal. Long lower wick shows strong rejection of lower prices. "
        "Most reliable when found at support levels or after a downtrend. "
        "Consider buying if confirmed by next candle."
    ),
)
BULLISH_ENGULFING = PatternDescription(
    name="BULLISH ENGULFING",
    description=(
        "Strong reversal pattern. Today's green candle completely engulfs yesterday's red candle. "
        "Shows shift in momentum from sellers to buyers. "
        "High-probability buy signal, especially with high volume."
    ),
)

def is_doji(candle: Candle) -> bool:
    """Body no larger than 10% of the high-low range."""
    return candle.body <= 0.1 * (candle.high - candle.low)

def is_hammer(candle: Candle) -> bool:
    """
    - long lower wick (at least twice the body)
    - upper wick no longer than the body
    """
    body = candle.body
    return candle.lower_wick >= 2 * body and candle.upper_wick <= body

def is_bullish_engulfing(current: Candle, previous: Candle) -> bool:
    prev_red = previous.close < previous.open
    curr_green = current.close > current.open
    engulfs = current.open <= previous.close and current.close >= previous.open
    return prev_red and curr_green and engulfs

def detect_patterns(candles: Sequence[Candle]) -> PatternResult:
    """Classify the latest bar. Every matching pattern is reported, in a fixed order."""
    if len(candles) < 2:
        return PatternResult()

    latest = candles[-1]
    previous = candles[-2]

    found = []
    if is_doji(latest):
        found.append(("Doji", DOJI))
    if is_hammer(latest):
        found.append(("Hammer", HAMMER))
    if is_bullish_engulfing(latest, previous):
        found.append(("Bullish Engulfing", BULLISH_ENGULFING))

    return PatternResult(
        patterns=tuple(name for name, _ in found),
        descriptions=tuple(desc for _, desc in found),
    )
