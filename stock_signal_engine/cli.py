from __future__ import annotations

import argparse
import json
import logging
from dataclasses import asdict, replace
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .analyzer import analyze, build_snapshot, validate_candles
from .config import EngineConfig
from .errors import AnalysisError, MarketDataError
from .market_data import TradierClient, load_csv
from .models import Candle
from .patterns import detect_patterns

def _p(obj: Any) -> None:
    print(json.dumps(obj, ensure_ascii=False, indent=2, default=str))

def _config(args: argparse.Namespace) -> EngineConfig:
    cfg = EngineConfig()
    if args.min_candles is not None:
        cfg = replace(cfg, min_candles=int(args.min_candles))
    return cfg

def _load(args: argparse.Namespace, cfg: EngineConfig) -> Tuple[Optional[str], List[Candle], Dict[str, Any]]:
    if args.csv:
        return args.symbol, load_csv(args.csv), {}
    client = TradierClient(api_key=args.api_key, cfg=cfg)
    data = client.fetch_stock_data(args.symbol)
    return data.symbol, data.candles, {"quote": asdict(data.quote)}

def _fail(err: Exception) -> int:
    _p({"ok": False, "error": getattr(err, "code", "error"), "message": str(err)})
    return 1

def cmd_analyze(args: argparse.Namespace) -> int:
    cfg = _config(args)
    try:
        symbol, candles, extra = _load(args, cfg)
        report = analyze(candles, cfg, symbol=symbol)
    except (AnalysisError, MarketDataError) as exc:
        logging.warning("analyze failed: %s", exc)
        return _fail(exc)
    _p({"ok": True, **extra, **report.to_dict()})
    return 0

def cmd_snapshot(args: argparse.Namespace) -> int:
    cfg = _config(args)
    try:
        symbol, candles, extra = _load(args, cfg)
        validate_candles(candles, cfg.min_candles)
        snap = build_snapshot(candles, cfg)
    except (AnalysisError, MarketDataError) as exc:
        logging.warning("snapshot failed: %s", exc)
        return _fail(exc)
    patterns = detect_patterns(candles)
    snap_d = asdict(snap)
    snap_d.update(support=snap.support, resistance=snap.resistance, bb_bandwidth=snap.bb_bandwidth)
    _p({
        "ok": True,
        "symbol": symbol,
        **extra,
        "snapshot": snap_d,
        "patterns": {"patterns": list(patterns.patterns), "pattern_string": patterns.pattern_string},
    })
    return 0

def _add_source_args(p: argparse.ArgumentParser) -> None:
    src = p.add_mutually_exclusive_group(required=True)
    src.add_argument("--csv", help="CSV with date|timestamp,open,high,low,close,volume columns")
    src.add_argument("--symbol", help="Ticker to fetch from Tradier")
    p.add_argument("--api-key", default=None, help="Tradier API key (default: $TRADIER_API_KEY)")
    p.add_argument("--min-candles", type=int, default=None, help="Minimum bars required (default: config)")

def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="stock-signal-engine",
        description="Daily-bar technical indicators, candlestick patterns and a composite trade score.",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = p.add_subparsers(dest="cmd", required=True)

    p_an = sub.add_parser("analyze", help="Full report: indicators, patterns, score, recommendation")
    _add_source_args(p_an)
    p_an.set_defaults(func=cmd_analyze)

    p_snap = sub.add_parser("snapshot", help="Latest indicator values and candlestick patterns only")
    _add_source_args(p_snap)
    p_snap.set_defaults(func=cmd_snapshot)

    return p

def main(argv: Optional[Sequence[str]] = None) -> int:
    p = build_parser()
    args = p.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )
    return args.func(args)

if __name__ == "__main__":
    raise SystemExit(main())
