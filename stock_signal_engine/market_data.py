"""Market-data adapters that hand an ascending Candle list to the analyzer.

- CSV / DataFrame input (pandas)
- Tradier REST (quote + daily history). The API key comes from the caller or
  the environment and is never written anywhere.
"""
from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Callable, Dict, List, Optional

import pandas as pd
import requests

from .config import EngineConfig
from .errors import MarketDataError
from .models import Candle

REQUIRED_COLUMNS = ("open", "high", "low", "close", "volume")

@dataclass(frozen=True)
class Quote:
    symbol: str
    last: float
    change: float
    change_percent: float
    high: float
    low: float
    open: float
    previous_close: float

@dataclass(frozen=True)
class StockData:
    symbol: str
    quote: Quote
    candles: List[Candle]

def candles_from_frame(df: pd.DataFrame) -> List[Candle]:
    """Convert a frame with date|timestamp + OHLCV columns (any case) into ascending Candles."""
    if df is None or df.empty:
        return []
    df = df.rename(columns={c: str(c).strip().lower() for c in df.columns})

    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise MarketDataError(f"missing columns: {', '.join(missing)}")

    if "timestamp" in df.columns:
        ts = pd.to_numeric(df["timestamp"], errors="coerce")
    elif "date" in df.columns:
        dt = pd.to_datetime(df["date"], errors="coerce", utc=True)
        ts = (dt - pd.Timestamp("1970-01-01", tz="UTC")) // pd.Timedelta(seconds=1)
    else:
        raise MarketDataError("missing columns: date or timestamp")

    out = pd.DataFrame({"timestamp": ts})
    for col in REQUIRED_COLUMNS:
        out[col] = pd.to_numeric(df[col], errors="coerce")
    if out.isna().any().any():
        bad = int(out.isna().any(axis=1).sum())
        raise MarketDataError(f"{bad} row(s) with unparseable date/price/volume")
    fractional = out["volume"] % 1 != 0
    if fractional.any():
        raise MarketDataError(f"{int(fractional.sum())} row(s) with non-integral volume")

    out = out.sort_values("timestamp", kind="stable")
    return [
        Candle(
            timestamp=int(r.timestamp),
            open=float(r.open),
            high=float(r.high),
            low=float(r.low),
            close=float(r.close),
            volume=int(r.volume),
        )
        for r in out.itertuples(index=False)
    ]

def load_csv(path: str) -> List[Candle]:
    try:
        df = pd.read_csv(path)
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
        raise MarketDataError(f"cannot read {path}: {exc}") from exc
    candles = candles_from_frame(df)
    logging.info("loaded %d candles from %s", len(candles), path)
    return candles

def _parse_tradier_history(res: Dict[str, Any]) -> pd.DataFrame:
    history = res.get("history") if isinstance(res, dict) else None
    days = history.get("day") if isinstance(history, dict) else None
    if not days:
        return pd.DataFrame()
    if isinstance(days, dict):
        days = [days]
    return pd.DataFrame(
        [
            {
                "date": d.get("date"),
                "open": d.get("open"),
                "high": d.get("high"),
                "low": d.get("low"),
                "close": d.get("close"),
                "volume": d.get("volume"),
            }
            for d in days
        ]
    )

def _num(value, default: float = 0.0) -> float:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default

class TradierClient:
    """Tradier market-data client (quotes and daily history).

    Sessions are not shared between threads: each thread that issues a
    request gets its own from ``session_factory``.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        cfg: Optional[EngineConfig] = None,
        session_factory: Callable[[], requests.Session] = requests.Session,
    ):
        self.cfg = cfg or EngineConfig()
        self.api_key = api_key if api_key is not None else self.cfg.api_key()
        self.base_url = self.cfg.tradier_base_url.rstrip("/")
        self.session_factory = session_factory
        self._local = threading.local()

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    @property
    def session(self) -> requests.Session:
        s = getattr(self._local, "session", None)
        if s is None:
            s = self.session_factory()
            self._local.session = s
        return s

    def _get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        if not self.configured:
            raise MarketDataError(f"API key not configured (set {self.cfg.api_key_env})")
        url = f"{self.base_url}{path}"
        headers = {"Authorization": f"Bearer {self.api_key}", "Accept": "application/json"}
        try:
            resp = self.session.get(url, params=params, headers=headers, timeout=self.cfg.http_timeout)
        except requests.RequestException as exc:
            logging.warning("tradier request failed %s: %s", path, exc)
            raise MarketDataError(f"request to {path} failed: {exc}") from exc
        if not resp.ok:
            logging.warning("tradier %s -> %s: %s", path, resp.status_code, resp.text)
            raise MarketDataError(f"{path} returned status {resp.status_code}")
        try:
            return resp.json()
        except ValueError as exc:
            raise MarketDataError(f"{path} returned invalid JSON") from exc

    def fetch_quote(self, symbol: str) -> Quote:
        symbol = symbol.strip().upper()
        res = self._get("/markets/quotes", {"symbols": symbol, "greeks": "false"})
        quote = ((res or {}).get("quotes") or {}).get("quote")
        if not quote:
            raise MarketDataError(f"No data available for {symbol}")
        if isinstance(quote, list):
            quote = quote[0]
        if quote.get("type") == "null" or not quote.get("last"):
            raise MarketDataError(f"Invalid symbol: {symbol}")

        last = _num(quote.get("last"))
        return Quote(
            symbol=symbol,
            last=last,
            change=_num(quote.get("change")),
            change_percent=_num(quote.get("change_percentage")),
            high=_num(quote.get("high"), last),
            low=_num(quote.get("low"), last),
            open=_num(quote.get("open"), last),
            previous_close=_num(quote.get("prevclose"), last),
        )

    def fetch_candles(self, symbol: str, days: Optional[int] = None, end: Optional[date] = None) -> List[Candle]:
        """Daily bars for the last `days` calendar days (400 covers 200+ trading days)."""
        symbol = symbol.strip().upper()
        end = end or date.today()
        start = end - timedelta(days=int(days or self.cfg.history_days))
        res = self._get(
            "/markets/history",
            {"symbol": symbol, "interval": "daily", "start": start.isoformat(), "end": end.isoformat()},
        )
        df = _parse_tradier_history(res)
        if df.empty:
            raise MarketDataError(f"No historical data available for {symbol}")
        candles = candles_from_frame(df)
        logging.info("fetched %d daily candles for %s (%s..%s)", len(candles), symbol, start, end)
        return candles

    def fetch_stock_data(self, symbol: str) -> StockData:
        """Quote and history fetched concurrently."""
        symbol = symbol.strip().upper()
        with ThreadPoolExecutor(max_workers=2) as pool:
            f_quote = pool.submit(self.fetch_quote, symbol)
            f_candles = pool.submit(self.fetch_candles, symbol)
            quote = f_quote.result()
            candles = f_candles.result()
        return StockData(symbol=symbol, quote=quote, candles=candles)
