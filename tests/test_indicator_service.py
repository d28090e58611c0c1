import pytest

from tests.factories import candles_from_closes, make_candle
from zonepulse.app.services.indicator_service import IndicatorService, true_range
from zonepulse.app.state.indicator_state import IndicatorState


def feed(closes, spread=1.0):
    """Reproducir las velas de a una, como hace el motor."""
    service = IndicatorService()
    state = IndicatorState()
    candles = candles_from_closes(closes, spread=spread)
    for n in range(1, len(candles) + 1):
        service.update(state, candles[:n])
    return state


# ─── RSI ───────────────────────────────────────────────────────────────

def test_rsi_needs_fourteen_candles():
    candles = candles_from_closes(range(100, 113))
    assert IndicatorService.compute_rsi(candles) is None


def test_rsi_only_gains_caps_below_hundred():
    candles = candles_from_closes(range(100, 114))
    assert IndicatorService.compute_rsi(candles) == pytest.approx(100 - 100 / 101)


def test_rsi_only_losses_is_zero():
    candles = candles_from_closes(range(200, 180, -1))
    assert IndicatorService.compute_rsi(candles) == 0.0


def test_rsi_mixed_window():
    closes = [100.0]
    for i in range(14):
        closes.append(closes[-1] + (2.0 if i % 2 == 0 else -1.0))
    candles = candles_from_closes(closes)

    # 7 subidas de 2 y 7 bajadas de 1 → RS = 2
    assert IndicatorService.compute_rsi(candles) == pytest.approx(100 - 100 / 3)


def test_rsi_series_starts_at_fourteenth_candle():
    state = feed(range(100, 120))
    assert len(state.rsi_values) == 20 - 13
    assert state.rsi_zone == "overbought"


# ─── ATR ───────────────────────────────────────────────────────────────

def test_true_range_uses_previous_close():
    candle = make_candle(1, open=100, high=101, low=99, close=100)
    assert true_range(candle, 100.0) == 2.0
    assert true_range(candle, 105.0) == 6.0
    assert true_range(candle, 95.0) == 6.0


def test_atr_constant_range_is_fixed_point():
    state = feed([100.0] * 40)

    assert len(state.atr_values) == 40 - 14
    assert state.atr_values[0] == pytest.approx(2.0)
    assert state.atr == pytest.approx(2.0)


def test_atr_wilder_smoothing():
    state = feed([100.0] * 15 + [110.0])

    # seed = 2; TR de la última = |111 - 100| = 11
    assert state.atr_values[0] == pytest.approx(2.0)
    assert state.atr == pytest.approx((2.0 * 13 + 11.0) / 14)


# ─── MACD ──────────────────────────────────────────────────────────────

def test_macd_no_entry_before_twenty_six_candles():
    state = feed([100.0] * 25)
    assert state.macd is None
    assert state.macd_trend is None


def test_macd_first_entry_seeds():
    state = feed([100.0] * 26)

    entry = state.macd
    assert entry.ema26 == pytest.approx(100.0)
    # la EMA rápida arranca desde 0
    assert entry.ema12 == pytest.approx(100.0 * 2 / 13)
    assert entry.macd == pytest.approx(entry.ema12 - entry.ema26)
    assert entry.signal == 0.0


def test_macd_signal_seeded_with_average_of_nine():
    state = feed([100.0] * 34)

    values = state.macd_values
    assert len(values) == 9
    assert all(e.signal == 0.0 for e in values[:8])
    assert values[8].signal == pytest.approx(sum(e.macd for e in values) / 9)


def test_macd_signal_then_follows_ema():
    state = feed([100.0] * 35)

    prev, last = state.macd_values[-2], state.macd_values[-1]
    assert last.signal == pytest.approx((last.macd - prev.signal) * 0.2 + prev.signal)


def test_macd_converges_on_constant_series():
    state = feed([100.0] * 400)

    entry = state.macd
    assert entry.ema12 == pytest.approx(100.0)
    assert entry.macd == pytest.approx(0.0, abs=1e-6)
    assert entry.signal == pytest.approx(0.0, abs=1e-6)


def test_update_returns_latest_values():
    service = IndicatorService()
    state = IndicatorState()
    candles = candles_from_closes([100.0] * 30)

    latest = service.update(state, candles)

    assert set(latest) == {"rsi", "macd", "atr"}
    assert latest["rsi"] == state.rsi
