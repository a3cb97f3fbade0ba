import json

import pandas as pd

from stock_signal_engine.cli import main


def write_flat_csv(path, n):
    df = pd.DataFrame(
        {
            "date": pd.date_range("2023-01-02", periods=n, freq="D").strftime("%Y-%m-%d"),
            "open": [100.0] * n,
            "high": [100.0] * n,
            "low": [100.0] * n,
            "close": [100.0] * n,
            "volume": [1000] * n,
        }
    )
    df.to_csv(path, index=False)
    return str(path)


def test_analyze_csv(tmp_path, capsys):
    path = write_flat_csv(tmp_path / "flat.csv", 200)
    assert main(["analyze", "--csv", path]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["ok"] is True
    assert out["score"] == -5
    assert out["recommendation"]["action"] == "SELL"
    assert out["date"] == "2023-07-20"


def test_analyze_insufficient_data(tmp_path, capsys):
    path = write_flat_csv(tmp_path / "short.csv", 150)
    assert main(["analyze", "--csv", path]) == 1
    out = json.loads(capsys.readouterr().out)
    assert out == {
        "ok": False,
        "error": "insufficient_data",
        "message": "Insufficient historical data. Minimum 200 days required (got 150).",
    }


def test_min_candles_override(tmp_path, capsys):
    path = write_flat_csv(tmp_path / "short.csv", 150)
    assert main(["analyze", "--csv", path, "--min-candles", "100"]) == 1
    out = json.loads(capsys.readouterr().out)
    # EMA200 is still undefined at bar 150
    assert out["error"] == "insufficient_data"
    assert "ema200" in out["message"]


def test_snapshot_command(tmp_path, capsys):
    path = write_flat_csv(tmp_path / "flat.csv", 220)
    assert main(["snapshot", "--csv", path]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["snapshot"]["rsi"] == 50.0
    assert out["snapshot"]["support"] == 100.0
    assert out["patterns"]["pattern_string"] == "Doji, Hammer"


def test_symbol_without_api_key(monkeypatch, capsys):
    monkeypatch.delenv("TRADIER_API_KEY", raising=False)
    assert main(["analyze", "--symbol", "AAPL"]) == 1
    out = json.loads(capsys.readouterr().out)
    assert out["error"] == "market_data_error"
