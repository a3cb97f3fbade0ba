from __future__ import annotations

from typing import List, Optional, Sequence

import numpy as np

from stock_signal_engine.models import Candle, IndicatorSnapshot, PivotLevels

DAY = 86400
START_TS = 1_700_006_400  # 2023-11-15 00:00 UTC


def make_candles(
    closes: Sequence[float],
    highs: Optional[Sequence[float]] = None,
    lows: Optional[Sequence[float]] = None,
    opens: Optional[Sequence[float]] = None,
    volumes: Optional[Sequence[int]] = None,
) -> List[Candle]:
    n = len(closes)
    highs = highs if highs is not None else closes
    lows = lows if lows is not None else closes
    opens = opens if opens is not None else closes
    volumes = volumes if volumes is not None else [1000] * n
    return [
        Candle(
            timestamp=START_TS + i * DAY,
            open=float(opens[i]),
            high=float(highs[i]),
            low=float(lows[i]),
            close=float(closes[i]),
            volume=int(volumes[i]),
        )
        for i in range(n)
    ]


def flat_candles(n: int = 200, price: float = 100.0, volume: int = 1000) -> List[Candle]:
    return make_candles([price] * n, volumes=[volume] * n)


def random_ohlcv(n: int = 120, seed: int = 7):
    rng = np.random.default_rng(seed)
    close = 100.0 + np.cumsum(rng.normal(0, 1, n))
    high = close + np.abs(rng.normal(0, 1, n))
    low = close - np.abs(rng.normal(0, 1, n))
    volume = rng.integers(500, 5000, n).astype(float)
    return high, low, close, volume


def make_snapshot(**overrides) -> IndicatorSnapshot:
    """Neutral-ish snapshot: MACD bullish, above SMA5, golden cross, OBV rising (score +5)."""
    values = dict(
        price=100.0,
        rsi=50.0,
        macd=1.0,
        macd_signal=0.5,
        macd_histogram=0.5,
        bb_upper=110.0,
        bb_middle=100.0,
        bb_lower=90.0,
        sma5=99.0,
        ema20=99.5,
        ema50=105.0,
        ema200=100.0,
        atr=2.0,
        adx=22.0,
        di_plus=20.0,
        di_minus=15.0,
        stoch_k=50.0,
        stoch_d=50.0,
        obv=1000.0,
        obv_prev=900.0,
        rvol=1.0,
        pivots=PivotLevels(pivot=100.0, r1=110.0, r2=130.0, s1=90.0, s2=70.0),
    )
    values.update(overrides)
    return IndicatorSnapshot(**values)


def walk_then_flat(n_walk: int = 230, n_flat: int = 30, seed: int = 21):
    """Random-walk closes followed by `n_flat` bars pinned to the walk's last close."""
    rng = np.random.default_rng(seed)
    walk = 100.0 + np.cumsum(rng.normal(0, 0.5, n_walk))
    return np.concatenate((walk, np.full(n_flat, walk[-1])))
