from __future__ import annotations

import os
from dataclasses import dataclass

def _env_float(key: str, default: float) -> float:
    v = os.getenv(key)
    if v is None or v == "":
        return default
    try:
        return float(v)
    except ValueError:
        return default

def _env_int(key: str, default: int) -> int:
    v = os.getenv(key)
    if v is None or v == "":
        return default
    try:
        return int(v)
    except ValueError:
        return default

def _env_str(key: str, default: str) -> str:
    v = os.getenv(key)
    return v if v not in (None, "") else default

@dataclass(frozen=True)
class EngineConfig:
    # Input
    min_candles: int = _env_int("SSE_MIN_CANDLES", 200)

    # Indicator periods
    rsi_period: int = _env_int("SSE_RSI_PERIOD", 14)
    macd_fast: int = _env_int("SSE_MACD_FAST", 12)
    macd_slow: int = _env_int("SSE_MACD_SLOW", 26)
    macd_signal: int = _env_int("SSE_MACD_SIGNAL", 9)
    bb_period: int = _env_int("SSE_BB_PERIOD", 20)
    bb_std_dev: float = _env_float("SSE_BB_STD_DEV", 2.0)
    atr_period: int = _env_int("SSE_ATR_PERIOD", 14)
    adx_period: int = _env_int("SSE_ADX_PERIOD", 14)
    stoch_k_period: int = _env_int("SSE_STOCH_K_PERIOD", 14)
    stoch_d_period: int = _env_int("SSE_STOCH_D_PERIOD", 3)
    stoch_smooth_k: int = _env_int("SSE_STOCH_SMOOTH_K", 3)
    rvol_period: int = _env_int("SSE_RVOL_PERIOD", 20)
    sma_short: int = _env_int("SSE_SMA_SHORT", 5)
    ema_mid: int = _env_int("SSE_EMA_MID", 20)
    ema_long_fast: int = _env_int("SSE_EMA_LONG_FAST", 50)
    ema_long_slow: int = _env_int("SSE_EMA_LONG_SLOW", 200)

    # Scoring thresholds
    rsi_oversold: float = _env_float("SSE_RSI_OVERSOLD", 30.0)
    rsi_overbought: float = _env_float("SSE_RSI_OVERBOUGHT", 70.0)
    adx_strong: float = _env_float("SSE_ADX_STRONG", 25.0)
    adx_weak: float = _env_float("SSE_ADX_WEAK", 20.0)
    rvol_high: float = _env_float("SSE_RVOL_HIGH", 2.0)
    rvol_low: float = _env_float("SSE_RVOL_LOW", 0.8)
    rvol_confirm: float = _env_float("SSE_RVOL_CONFIRM", 1.2)
    stoch_oversold: float = _env_float("SSE_STOCH_OVERSOLD", 20.0)
    stoch_overbought: float = _env_float("SSE_STOCH_OVERBOUGHT", 80.0)
    squeeze_bandwidth_pct: float = _env_float("SSE_SQUEEZE_BANDWIDTH_PCT", 5.0)
    # |price - level| < price * level_proximity counts as "at" support/resistance
    level_proximity: float = _env_float("SSE_LEVEL_PROXIMITY", 0.02)

    # Market data (Tradier). The key itself is only ever read from the environment.
    tradier_base_url: str = _env_str("SSE_TRADIER_BASE_URL", "https://api.tradier.com/v1")
    api_key_env: str = _env_str("SSE_API_KEY_ENV", "TRADIER_API_KEY")
    history_days: int = _env_int("SSE_HISTORY_DAYS", 400)
    http_timeout: float = _env_float("SSE_HTTP_TIMEOUT", 10.0)

    def api_key(self) -> str:
        return os.getenv(self.api_key_env, "")
