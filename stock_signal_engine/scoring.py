"""Rule-based composite score and the recommendation derived from it.

Nine additive rules run in a fixed order; their breakdown lines come out in
that same order. Warnings never move the score, they only change the
position-size text and the reason of the recommendation.
"""
from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from .config import EngineConfig
from .models import (
    Action,
    BreakdownEntry,
    IndicatorSnapshot,
    PatternResult,
    Recommendation,
    ScoreResult,
    ScoreWarning,
)

SQUEEZE = "squeeze"
WEAK_TREND = "weak_trend"
LOW_VOLUME = "low_volume"

def _near(price: float, level: float, proximity: float) -> bool:
    return abs(price - level) < price * proximity

def score_snapshot(snap: IndicatorSnapshot, cfg: Optional[EngineConfig] = None) -> ScoreResult:
    cfg = cfg or EngineConfig()
    price = snap.price
    entries: List[BreakdownEntry] = []
    warnings: List[ScoreWarning] = []

    def add(rule: str, points: int, text: str) -> None:
        entries.append(BreakdownEntry(rule=rule, points=points, text=f"{text} → {points:+d}" if points else f"{text} → 0"))

    # 1. RSI
    if snap.rsi < cfg.rsi_oversold:
        add("rsi", 2, f"✓ RSI Oversold ({snap.rsi:.1f})")
    elif snap.rsi > cfg.rsi_overbought:
        add("rsi", -2, f"✗ RSI Overbought ({snap.rsi:.1f})")
    else:
        add("rsi", 0, f"○ RSI Neutral ({snap.rsi:.1f})")

    # 2. MACD (no neutral branch)
    if snap.macd > snap.macd_signal:
        add("macd", 2, "✓ MACD Bullish")
    else:
        add("macd", -2, "✗ MACD Bearish")

    # 3. Bollinger
    if price < snap.bb_lower:
        add("bollinger", 2, "✓ Price bounced off Lower BB")
    elif price > snap.bb_upper:
        add("bollinger", -2, "✗ Price rejected at Upper BB")
    elif snap.bb_bandwidth < cfg.squeeze_bandwidth_pct:
        warnings.append(ScoreWarning(SQUEEZE, "⚠️ Bollinger Squeeze: Explosive move imminent - Direction unknown"))
        add("bollinger", 0, "⚠️ Bollinger Squeeze detected")
    else:
        add("bollinger", 0, "○ Price within Bollinger Bands")

    # 4. Price vs short SMA (equal counts as below)
    above_sma = price > snap.sma5
    if above_sma:
        add("sma", 1, f"✓ Price ABOVE {cfg.sma_short}-Day SMA")
    else:
        add("sma", -1, f"✗ Price BELOW {cfg.sma_short}-Day SMA")

    # 5. ADX trend strength, direction taken from rule 4
    if snap.adx > cfg.adx_strong:
        if above_sma:
            add("adx", 2, f"✓ Strong uptrend (ADX={snap.adx:.1f}, Price>SMA)")
        else:
            add("adx", -2, f"✗ Strong downtrend (ADX={snap.adx:.1f}, Price<SMA)")
    elif snap.adx < cfg.adx_weak:
        warnings.append(ScoreWarning(
            WEAK_TREND,
            f"⚠️ ADX < {cfg.adx_weak:g} ({snap.adx:.1f}): Weak trend - Reduce position size by 50%",
        ))
        add("adx", 0, f"⚠️ Weak trend (ADX={snap.adx:.1f})")
    else:
        add("adx", 0, f"○ Trend developing (ADX={snap.adx:.1f})")

    # 6. RVOL at support/resistance
    if snap.rvol > cfg.rvol_high:
        if _near(price, snap.support, cfg.level_proximity):
            add("rvol", 2, f"✓ High Volume at Support (RVOL={snap.rvol:.1f}x)")
        elif _near(price, snap.resistance, cfg.level_proximity):
            add("rvol", -2, f"✗ High Volume at Resistance (RVOL={snap.rvol:.1f}x)")
        else:
            add("rvol", 0, f"○ High Volume (RVOL={snap.rvol:.1f}x)")
    elif snap.rvol < cfg.rvol_low:
        warnings.append(ScoreWarning(
            LOW_VOLUME,
            f"⚠️ RVOL < {cfg.rvol_low:g} ({snap.rvol:.1f}x): Low volume - Moves lack conviction",
        ))
        add("rvol", 0, f"⚠️ Low Volume (RVOL={snap.rvol:.1f}x)")
    else:
        add("rvol", 0, f"○ Normal Volume (RVOL={snap.rvol:.1f}x)")

    # 7. Long-term trend
    if snap.ema50 > snap.ema200:
        add("long_term", 1, "✓ Long-term Golden Cross")
    else:
        add("long_term", -1, "✗ Long-term Death Cross")

    # 8. OBV (unchanged counts as decreasing)
    if snap.obv > snap.obv_prev:
        add("obv", 1, "✓ OBV Increasing")
    else:
        add("obv", -1, "✗ OBV Decreasing")

    # 9. Stochastic %K; the neutral band emits no line
    if snap.stoch_k < cfg.stoch_oversold:
        add("stochastic", 1, f"✓ Stoch Oversold (K={snap.stoch_k:.1f})")
    elif snap.stoch_k > cfg.stoch_overbought:
        add("stochastic", -1, f"✗ Stoch Overbought (K={snap.stoch_k:.1f})")

    return ScoreResult(
        score=sum(e.points for e in entries),
        breakdown=tuple(entries),
        warnings=tuple(warnings),
    )

def _tier(score: int) -> Tuple[Action, str, str, str]:
    if score >= 6:
        return Action.STRONG_BUY, "HIGH", "100%", "🟢🟢🟢"
    if score >= 3:
        return Action.BUY, "MEDIUM", "50-75%", "🟢🟢"
    if score >= 1:
        return Action.WEAK_BUY, "LOW", "25%", "🟢"
    if score <= -6:
        return Action.STRONG_SELL, "HIGH", "Exit 100%", "🔴🔴🔴"
    if score <= -3:
        return Action.SELL, "MEDIUM", "Exit 50-75%", "🔴🔴"
    if score <= -1:
        return Action.WEAK_SELL, "LOW", "Consider Exit", "🔴"
    return Action.WAIT, "NONE", "0% (Stay in cash)", "⏸️"

def recommend(score: int, warnings: Sequence[ScoreWarning] = ()) -> Recommendation:
    action, confidence, size, emoji = _tier(int(score))

    if any(w.kind == WEAK_TREND for w in warnings):
        if action.is_buy:
            size = f"{size} → Reduced to 25-50% due to weak trend"
        elif action.is_sell:
            size = f"{size} → Reduced due to weak trend"

    if score == 0:
        reason = "Mixed signals - Best to wait for clearer direction"
    elif abs(score) < 3:
        reason = "Weak signals - Low conviction setup"
    elif warnings:
        reason = f"Caution advised due to {len(warnings)} warning flag(s)"
    else:
        reason = f"{abs(score)} factors aligned for this {action.value.lower()}"

    return Recommendation(action=action, confidence=confidence, position_size=size, emoji=emoji, reason=reason)

def risk_reward_ratio(price: float, support: float, resistance: float) -> float:
    """Reward to resistance per unit of risk to support; 0 when there is no risk distance."""
    risk = price - support
    if risk <= 0:
        return 0.0
    return (resistance - price) / risk

def suggest_actions(action: Action, snap: IndicatorSnapshot, cfg: Optional[EngineConfig] = None) -> Tuple[str, ...]:
    cfg = cfg or EngineConfig()
    price, support, resistance = snap.price, snap.support, snap.resistance
    out: List[str] = []

    if action is Action.WAIT:
        if snap.adx < cfg.adx_strong:
            out.append(f"WAIT for ADX to rise above {cfg.adx_strong:g} for trend confirmation (current: {snap.adx:.1f})")
        if snap.rvol < cfg.rvol_confirm:
            out.append(f"WAIT for RVOL to exceed {cfg.rvol_confirm:g} for volume confirmation (current: {snap.rvol:.1f}x)")
        if snap.macd < snap.macd_signal:
            out.append("Monitor for MACD bullish crossover")
        out.append("If entering anyway, use MAXIMUM 25% position size due to weak signals")
    elif action.is_buy:
        rr = risk_reward_ratio(price, support, resistance)
        out.append(f"Enter at current price: ${price:.2f}")
        out.append(f"Set stop-loss at: ${support:.2f} (Support) - Risk: ${price - support:.2f} per share")
        out.append(f"Target resistance: ${resistance:.2f} - Potential: ${resistance - price:.2f} per share")
        out.append(f"Risk/Reward Ratio: 1:{rr:.2f}")
    elif action.is_sell:
        out.append(f"Exit at current price: ${price:.2f}")
        out.append(f"If holding, set stop-loss at: ${resistance:.2f} (Resistance)")
        out.append(f"Target support: ${support:.2f}")

    return tuple(out)

def trading_tips(snap: IndicatorSnapshot, patterns: PatternResult, cfg: Optional[EngineConfig] = None) -> Tuple[str, ...]:
    """Plain-language commentary on the snapshot. Has no effect on the score."""
    cfg = cfg or EngineConfig()
    price = snap.price
    tips: List[str] = []

    if snap.rsi > cfg.rsi_overbought:
        tips.append(f"RSI is Overbought (>{cfg.rsi_overbought:g}). Watch for a potential pullback or reversal.")
    elif snap.rsi < cfg.rsi_oversold:
        tips.append(f"RSI is Oversold (<{cfg.rsi_oversold:g}). Watch for a potential bounce.")
    else:
        tips.append(f"RSI is Neutral ({snap.rsi:.1f}). Trend is steady.")

    if price > snap.bb_upper:
        tips.append("Price is ABOVE the Upper Bollinger Band. Short-term overextended (Mean Reversion likely).")
    elif price < snap.bb_lower:
        tips.append("Price is BELOW the Lower Bollinger Band. Short-term oversold (Mean Reversion likely).")
    elif snap.bb_bandwidth < cfg.squeeze_bandwidth_pct:
        tips.append("Bollinger Bands are tightening (Squeeze). Watch for an explosive breakout.")
    else:
        tips.append("Price is within Bollinger Bands. Normal volatility.")

    if snap.macd > snap.macd_signal:
        tips.append("MACD is Bullish (MACD > Signal). Momentum is positive.")
    else:
        tips.append("MACD is Bearish (MACD < Signal). Momentum is negative.")

    if price > snap.sma5:
        tips.append(f"Price is ABOVE the {cfg.sma_short}-Day SMA. Short-term trend is UP.")
    else:
        tips.append(f"Price is BELOW the {cfg.sma_short}-Day SMA. Short-term trend is DOWN.")

    if snap.adx > cfg.adx_strong:
        tips.append(f"ADX is {snap.adx:.1f} (>{cfg.adx_strong:g}). Strong trend detected. Trade with the trend.")
    elif snap.adx < cfg.adx_weak:
        tips.append(f"ADX is {snap.adx:.1f} (<{cfg.adx_weak:g}). Weak trend / Choppy market. Caution on breakouts.")

    if snap.rvol > cfg.rvol_high:
        tips.append(f"High Relative Volume ({snap.rvol:.1f}x). Strong conviction in today's move.")
    elif snap.rvol < cfg.rvol_low:
        tips.append(f"Low Relative Volume ({snap.rvol:.1f}x). Move may lack conviction.")

    if snap.ema50 > snap.ema200:
        tips.append("Long-term trend is BULLISH (Golden Cross). Consider waiting for pullback.")
    else:
        tips.append("Long-term trend is BEARISH (Death Cross). Trade with caution.")

    if patterns.patterns:
        tips.append(f"Pattern Detected: {patterns.pattern_string}")
        for desc in patterns.descriptions:
            tips.append(f"  → {desc.name}: {desc.description}")

    return tuple(tips)
