from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from .models import PivotLevels
from .series import Series, ema, rolling_sma

@dataclass(frozen=True)
class MACD:
    line: Series
    signal: Series
    histogram: Series

@dataclass(frozen=True)
class BollingerBands:
    upper: Series
    middle: Series
    lower: Series

@dataclass(frozen=True)
class ADX:
    adx: Series
    di_plus: Series
    di_minus: Series

@dataclass(frozen=True)
class Stochastic:
    k: Series
    d: Series

def rsi(closes: Sequence[float], period: int = 14) -> Series:
    """RSI using simple average of the last `period` gains/losses (not Wilder's RMA).

    Undefined for the first `period` bars: one bar is lost to the price change
    and period-1 more to the average.

    Fallbacks:
      - average loss 0 -> rs = 100
      - average gain and average loss both 0 (flat window) -> RSI 50
    """
    c = np.asarray(closes, dtype=float)
    n = len(c)
    if n < 2:
        return Series.undefined(n)

    d = np.diff(c)
    avg_gain = rolling_sma(np.clip(d, 0, None), period)
    avg_loss = rolling_sma(np.clip(-d, 0, None), period)

    g = avg_gain.values
    l = avg_loss.values
    rs = np.full(len(g), 100.0)
    np.divide(g, l, out=rs, where=l != 0)
    out = 100.0 - 100.0 / (1.0 + rs)
    out[(g == 0) & (l == 0)] = 50.0

    # map diffs (len n-1) back onto indices 1..n-1
    return Series(out, avg_gain.warmup).shift(1)

def macd(closes: Sequence[float], fast: int = 12, slow: int = 26, signal: int = 9) -> MACD:
    """MACD line = EMA(fast) - EMA(slow); signal = EMA(signal) of the defined MACD values."""
    line = ema(closes, fast) - ema(closes, slow)
    sig = line.over_defined(lambda v: ema(v, signal))
    return MACD(line=line, signal=sig, histogram=line - sig)

def bollinger_bands(closes: Sequence[float], period: int = 20, std_dev: float = 2.0) -> BollingerBands:
    """Bands at `std_dev` sample standard deviations (ddof=1) around SMA(period).

    The deviation is measured from the middle band itself, so a flat window
    gives a zero-width band centred exactly on the price.
    """
    c = np.asarray(closes, dtype=float)
    middle = rolling_sma(c, period)
    if not middle.is_defined:
        return BollingerBands(upper=middle, middle=middle, lower=middle)

    dev = sliding_window_view(c, int(period)) - middle.values[:, None]
    with np.errstate(invalid="ignore", divide="ignore"):
        std = np.sqrt((dev * dev).sum(axis=1) / (int(period) - 1))
    upper = middle.map(lambda m: m + std_dev * std)
    lower = middle.map(lambda m: m - std_dev * std)
    return BollingerBands(upper=upper, middle=middle, lower=lower)

def true_range(highs: Sequence[float], lows: Sequence[float], closes: Sequence[float]) -> np.ndarray:
    """TR = max(high-low, |high-prev_close|, |low-prev_close|); TR[0] = high[0]-low[0]."""
    h = np.asarray(highs, dtype=float)
    l = np.asarray(lows, dtype=float)
    c = np.asarray(closes, dtype=float)
    tr = h - l
    if len(tr) > 1:
        prev_close = c[:-1]
        tr[1:] = np.maximum(tr[1:], np.maximum(np.abs(h[1:] - prev_close), np.abs(l[1:] - prev_close)))
    return tr

def atr(highs: Sequence[float], lows: Sequence[float], closes: Sequence[float], period: int = 14) -> Series:
    """ATR as a simple moving average of True Range."""
    return rolling_sma(true_range(highs, lows, closes), period)

def adx(highs: Sequence[float], lows: Sequence[float], closes: Sequence[float], period: int = 14) -> ADX:
    """Average Directional Index with +DI/-DI, all smoothed with SMA(period).

    DI is 0 where the smoothed true range is 0, DX is 0 where DI+ + DI- is 0.
    """
    h = np.asarray(highs, dtype=float)
    l = np.asarray(lows, dtype=float)
    n = len(h)

    dm_plus = np.zeros(n)
    dm_minus = np.zeros(n)
    if n > 1:
        up = h[1:] - h[:-1]
        down = l[:-1] - l[1:]
        dm_plus[1:] = np.where((up > down) & (up > 0), up, 0.0)
        dm_minus[1:] = np.where((down > up) & (down > 0), down, 0.0)

    atr_s = atr(h, l, closes, period)
    a = atr_s.values
    w = atr_s.warmup

    di_plus = np.zeros(len(a))
    di_minus = np.zeros(len(a))
    np.divide(dm_plus[w:], a, out=di_plus, where=a != 0)
    np.divide(dm_minus[w:], a, out=di_minus, where=a != 0)
    di_plus *= 100.0
    di_minus *= 100.0

    total = di_plus + di_minus
    dx = np.zeros(len(a))
    np.divide(np.abs(di_plus - di_minus), total, out=dx, where=total != 0)
    dx *= 100.0

    adx_s = Series(dx, w).over_defined(lambda v: rolling_sma(v, period))
    return ADX(adx=adx_s, di_plus=Series(di_plus, w), di_minus=Series(di_minus, w))

def stochastic(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    k_period: int = 14,
    d_period: int = 3,
    smooth_k: int = 3,
) -> Stochastic:
    """Slow stochastic: raw %K smoothed by SMA(smooth_k), %D = SMA(d_period) of smoothed %K.

    Raw %K is 50 when the k_period high-low range is 0.
    """
    h = np.asarray(highs, dtype=float)
    l = np.asarray(lows, dtype=float)
    c = np.asarray(closes, dtype=float)
    n = len(c)
    k_period = int(k_period)
    if k_period <= 0:
        raise ValueError(f"period must be positive, got {k_period}")

    if n < k_period:
        raw_k = Series.undefined(n)
    else:
        highest = sliding_window_view(h, k_period).max(axis=1)
        lowest = sliding_window_view(l, k_period).min(axis=1)
        rng = highest - lowest
        raw = np.full(len(rng), 50.0)
        ok = rng != 0
        raw[ok] = (c[k_period - 1 :][ok] - lowest[ok]) / rng[ok] * 100.0
        raw_k = Series(raw, k_period - 1)

    k_line = raw_k.over_defined(lambda v: rolling_sma(v, smooth_k))
    d_line = k_line.over_defined(lambda v: rolling_sma(v, d_period))
    return Stochastic(k=k_line, d=d_line)

def obv(closes: Sequence[float], volumes: Sequence[float]) -> Series:
    """On-Balance Volume: running sum of volume signed by the close-to-close direction."""
    c = np.asarray(closes, dtype=float)
    v = np.asarray(volumes, dtype=float)
    n = len(c)
    if n == 0:
        return Series.undefined(0)
    out = np.empty(n)
    out[0] = v[0]
    out[1:] = v[0] + np.cumsum(np.sign(np.diff(c)) * v[1:])
    return Series(out)

def rvol(volumes: Sequence[float], period: int = 20) -> Series:
    """Relative volume: volume / SMA(period) of volume; ratio 1 where the average is 0."""
    v = np.asarray(volumes, dtype=float)
    avg = rolling_sma(v, period)
    a = avg.values
    out = np.ones(len(a))
    np.divide(v[avg.warmup :], a, out=out, where=a != 0)
    return Series(out, avg.warmup)

def pivot_points(high: float, low: float, close: float) -> PivotLevels:
    """Classic floor pivots from a single bar."""
    pivot = (high + low + close) / 3.0
    rng = high - low
    return PivotLevels(
        pivot=pivot,
        r1=2.0 * pivot - low,
        r2=pivot + rng,
        s1=2.0 * pivot - high,
        s2=pivot - rng,
    )
