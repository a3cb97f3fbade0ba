import numpy as np
import pytest

from stock_signal_engine import indicators as ind

from helpers import random_ohlcv, walk_then_flat


def test_default_warmups_and_lengths():
    high, low, close, volume = random_ohlcv(120)
    n = len(close)

    m = ind.macd(close)
    bb = ind.bollinger_bands(close)
    a = ind.adx(high, low, close)
    st = ind.stochastic(high, low, close)

    expected = {
        "rsi": (ind.rsi(close), 14),
        "macd_line": (m.line, 25),
        "macd_signal": (m.signal, 33),
        "macd_hist": (m.histogram, 33),
        "bb_upper": (bb.upper, 19),
        "bb_middle": (bb.middle, 19),
        "bb_lower": (bb.lower, 19),
        "atr": (ind.atr(high, low, close), 13),
        "adx": (a.adx, 26),
        "di_plus": (a.di_plus, 13),
        "di_minus": (a.di_minus, 13),
        "stoch_k": (st.k, 15),
        "stoch_d": (st.d, 17),
        "obv": (ind.obv(close, volume), 0),
        "rvol": (ind.rvol(volume), 19),
    }
    for name, (series, warmup) in expected.items():
        assert len(series) == n, name
        assert series.warmup == warmup, name
        arr = series.to_array()
        assert np.isnan(arr[:warmup]).all(), name
        assert not np.isnan(arr[warmup:]).any(), name


def test_short_input_is_entirely_undefined():
    high, low, close, volume = random_ohlcv(10)
    assert len(ind.macd(close).signal) == 10
    assert not ind.macd(close).signal.is_defined
    st = ind.stochastic(high, low, close)
    assert len(st.k) == 10 and len(st.d) == 10
    assert not st.d.is_defined
    assert len(ind.adx(high, low, close).adx) == 10


def test_rsi_hand_computed():
    r = ind.rsi([10, 11, 10, 12], period=2)
    assert r.warmup == 2
    assert r.at(2) == pytest.approx(50.0)
    # gains (0 + 2) / 2 = 1, losses (1 + 0) / 2 = 0.5 -> rs 2
    assert r.at(3) == pytest.approx(100 - 100 / 3)


def test_rsi_bounds():
    _, _, close, _ = random_ohlcv(300, seed=3)
    vals = ind.rsi(close).values
    assert (vals >= 0).all() and (vals <= 100).all()


def test_rsi_no_losses_uses_rs_fallback():
    r = ind.rsi(np.arange(1.0, 40.0))
    assert np.allclose(r.values, 100 - 100 / 101)


def test_rsi_flat_window_is_neutral():
    r = ind.rsi([50.0] * 30)
    assert np.allclose(r.values, 50.0)


def test_macd_histogram_and_signal_seed():
    _, _, close, _ = random_ohlcv(150, seed=11)
    m = ind.macd(close)
    assert m.signal.values[0] == pytest.approx(m.line.values[:9].mean())
    line = m.line.to_array()
    sig = m.signal.to_array()
    hist = m.histogram.to_array()
    ok = ~np.isnan(sig)
    assert np.allclose(hist[ok], line[ok] - sig[ok])
    assert np.isnan(hist[~ok]).all()


def test_bollinger_uses_sample_std():
    _, _, close, _ = random_ohlcv(60, seed=5)
    bb = ind.bollinger_bands(close, period=20, std_dev=2.0)
    window = close[-20:]
    assert bb.middle.last() == pytest.approx(window.mean())
    assert bb.upper.last() - bb.lower.last() == pytest.approx(2 * 2.0 * np.std(window, ddof=1))


def test_bollinger_width_matches_sample_std_at_every_index():
    _, _, close, _ = random_ohlcv(120, seed=9)
    bb = ind.bollinger_bands(close, period=20, std_dev=2.0)
    for i in range(bb.middle.warmup, len(close)):
        window = close[i - 19 : i + 1]
        assert bb.middle.at(i) == pytest.approx(window.mean())
        assert bb.upper.at(i) - bb.lower.at(i) == pytest.approx(2 * 2.0 * np.std(window, ddof=1))


def test_bollinger_collapses_on_flat_tail():
    closes = walk_then_flat(n_walk=250, n_flat=20)
    bb = ind.bollinger_bands(closes)
    price = closes[-1]
    assert bb.middle.last() == price
    assert bb.upper.last() == price
    assert bb.lower.last() == price
    assert bb.upper.last(3) > bb.lower.last(3)


def test_true_range_and_atr():
    h = [10.0, 12.0, 11.0]
    l = [8.0, 9.0, 9.0]
    c = [9.0, 11.0, 10.0]
    assert list(ind.true_range(h, l, c)) == [2.0, 3.0, 2.0]
    a = ind.atr(h, l, c, period=2)
    assert a.at(0) is None
    assert a.at(1) == pytest.approx(2.5)
    assert a.at(2) == pytest.approx(2.5)


def test_adx_flat_is_zero():
    flat = [100.0] * 60
    a = ind.adx(flat, flat, flat)
    assert np.all(a.adx.values == 0)
    assert np.all(a.di_plus.values == 0)
    assert np.all(a.di_minus.values == 0)


def test_adx_steady_uptrend():
    close = np.arange(100.0, 160.0)
    a = ind.adx(close + 1, close - 1, close)
    assert np.all(a.di_minus.values == 0)
    assert a.adx.last() == pytest.approx(100.0)


def test_stochastic_zero_range_is_fifty():
    flat = [100.0] * 30
    st = ind.stochastic(flat, flat, flat)
    assert np.allclose(st.k.values, 50.0)
    assert np.allclose(st.d.values, 50.0)


def test_stochastic_close_at_high():
    close = np.arange(1.0, 31.0)
    st = ind.stochastic(close, close - 1, close)
    assert st.k.last() == pytest.approx(100.0)
    assert st.d.last() == pytest.approx(100.0)


def test_obv_running_sum():
    o = ind.obv([10, 11, 11, 10, 12], [100, 200, 300, 400, 500])
    assert list(o.values) == [100.0, 300.0, 300.0, -100.0, 400.0]


def test_obv_monotonic_with_price_direction():
    up = ind.obv(np.arange(1.0, 21.0), [10] * 20).values
    down = ind.obv(np.arange(20.0, 0.0, -1), [10] * 20).values
    assert np.all(np.diff(up) >= 0)
    assert np.all(np.diff(down) <= 0)


def test_rvol_ratio_and_zero_average():
    r = ind.rvol([100, 100, 100, 400], period=2)
    assert r.warmup == 1
    assert list(r.values) == pytest.approx([1.0, 1.0, 1.6])
    z = ind.rvol([0, 0, 0, 0], period=2)
    assert list(z.values) == [1.0, 1.0, 1.0]


def test_pivot_points():
    p = ind.pivot_points(110.0, 90.0, 100.0)
    assert p.pivot == pytest.approx(100.0)
    assert p.r1 == pytest.approx(110.0)
    assert p.r2 == pytest.approx(120.0)
    assert p.s1 == pytest.approx(90.0)
    assert p.s2 == pytest.approx(80.0)
