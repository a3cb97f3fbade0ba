from __future__ import annotations

import logging
import math
from typing import Dict, Optional, Sequence

import numpy as np

from .config import EngineConfig
from .errors import InsufficientDataError, InvalidCandleError
from .indicators import adx, atr, bollinger_bands, macd, obv, pivot_points, rsi, rvol, stochastic
from .models import Candle, IndicatorSnapshot, Report
from .patterns import detect_patterns
from .scoring import recommend, score_snapshot, suggest_actions, trading_tips
from .series import Series, ema, rolling_sma

def validate_candles(candles: Sequence[Candle], min_candles: int) -> None:
    """Reject the whole series on the first bad bar; skipping bars would break index alignment."""
    if len(candles) < min_candles:
        raise InsufficientDataError(min_candles, len(candles))

    prev_ts: Optional[int] = None
    for i, cd in enumerate(candles):
        for name in ("open", "high", "low", "close"):
            v = getattr(cd, name)
            if v is None or not math.isfinite(float(v)):
                raise InvalidCandleError(i, f"{name} is not finite ({v!r})")
            if v < 0:
                raise InvalidCandleError(i, f"{name} is negative ({v!r})")
        vol = cd.volume
        if vol is None or not math.isfinite(float(vol)) or vol < 0:
            raise InvalidCandleError(i, f"volume must be a finite non-negative number ({vol!r})")
        if prev_ts is not None and cd.timestamp <= prev_ts:
            raise InvalidCandleError(i, f"timestamp {cd.timestamp} not after previous {prev_ts}")
        prev_ts = cd.timestamp

def price_arrays(candles: Sequence[Candle]) -> Dict[str, np.ndarray]:
    return {
        "open": np.asarray([cd.open for cd in candles], dtype=float),
        "high": np.asarray([cd.high for cd in candles], dtype=float),
        "low": np.asarray([cd.low for cd in candles], dtype=float),
        "close": np.asarray([cd.close for cd in candles], dtype=float),
        "volume": np.asarray([cd.volume for cd in candles], dtype=float),
    }

def build_snapshot(candles: Sequence[Candle], cfg: EngineConfig) -> IndicatorSnapshot:
    arr = price_arrays(candles)
    h, l, c, v = arr["high"], arr["low"], arr["close"], arr["volume"]

    macd_r = macd(c, cfg.macd_fast, cfg.macd_slow, cfg.macd_signal)
    bb = bollinger_bands(c, cfg.bb_period, cfg.bb_std_dev)
    adx_r = adx(h, l, c, cfg.adx_period)
    stoch = stochastic(h, l, c, cfg.stoch_k_period, cfg.stoch_d_period, cfg.stoch_smooth_k)
    obv_s = obv(c, v)

    latest: Dict[str, Series] = {
        "rsi": rsi(c, cfg.rsi_period),
        "macd": macd_r.line,
        "macd_signal": macd_r.signal,
        "macd_histogram": macd_r.histogram,
        "bb_upper": bb.upper,
        "bb_middle": bb.middle,
        "bb_lower": bb.lower,
        "sma5": rolling_sma(c, cfg.sma_short),
        "ema20": ema(c, cfg.ema_mid),
        "ema50": ema(c, cfg.ema_long_fast),
        "ema200": ema(c, cfg.ema_long_slow),
        "atr": atr(h, l, c, cfg.atr_period),
        "adx": adx_r.adx,
        "di_plus": adx_r.di_plus,
        "di_minus": adx_r.di_minus,
        "stoch_k": stoch.k,
        "stoch_d": stoch.d,
        "obv": obv_s,
        "rvol": rvol(v, cfg.rvol_period),
    }

    values: Dict[str, float] = {}
    for name, series in latest.items():
        val = series.last()
        if val is None:
            raise InsufficientDataError(
                cfg.min_candles, len(candles),
                detail=f"{name} still undefined at the latest bar (warm-up {series.warmup}).",
            )
        values[name] = val

    obv_prev = obv_s.last(2)
    if obv_prev is None:
        raise InsufficientDataError(cfg.min_candles, len(candles), detail="OBV needs two bars.")

    last = candles[-1]
    snap = IndicatorSnapshot(
        price=float(last.close),
        obv_prev=obv_prev,
        pivots=pivot_points(float(last.high), float(last.low), float(last.close)),
        **values,
    )
    logging.debug(
        "snapshot price=%.4f rsi=%.2f macd=%.4f/%.4f adx=%.2f rvol=%.2f",
        snap.price, snap.rsi, snap.macd, snap.macd_signal, snap.adx, snap.rvol,
    )
    return snap

def analyze(candles: Sequence[Candle], cfg: Optional[EngineConfig] = None, symbol: Optional[str] = None) -> Report:
    """Run the full pipeline over an ascending daily series and return the report."""
    cfg = cfg or EngineConfig()
    candles = list(candles)
    validate_candles(candles, cfg.min_candles)

    snap = build_snapshot(candles, cfg)
    patterns = detect_patterns(candles)
    scored = score_snapshot(snap, cfg)
    rec = recommend(scored.score, scored.warnings)
    actions = suggest_actions(rec.action, snap, cfg)
    tips = trading_tips(snap, patterns, cfg)

    logging.info(
        "analysis %s: score=%+d action=%s warnings=%d patterns=%s",
        symbol or "-", scored.score, rec.action.value, len(scored.warnings), patterns.pattern_string,
    )

    return Report(
        symbol=symbol,
        timestamp=int(candles[-1].timestamp),
        price=snap.price,
        snapshot=snap,
        patterns=patterns,
        score=scored.score,
        breakdown=scored.breakdown,
        warnings=scored.warnings,
        recommendation=rec,
        suggested_actions=actions,
        tips=tips,
        meta=(("n_candles", len(candles)), ("first_timestamp", int(candles[0].timestamp))),
    )
