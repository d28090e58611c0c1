import math

import pytest

from tests.factories import make_candle
from zonepulse.app.domain.entities.tick import Tick
from zonepulse.app.domain.entities.zone import Zone, ZoneType
from zonepulse.app.domain.exceptions import InvalidCandleError, InvalidTickError


def test_tick_from_finnhub_trade():
    tick = Tick.from_trade({"p": 2034.5, "t": 1717000000123, "s": "OANDA:XAU_USD", "v": 2})

    assert tick.price == 2034.5
    assert tick.timestamp == pytest.approx(1717000000.123)
    assert tick.symbol == "OANDA:XAU_USD"
    assert tick.volume == 2.0


@pytest.mark.parametrize("raw", [
    {"t": 1717000000123},
    {"p": "abc", "t": 1717000000123},
    {"p": 0, "t": 1717000000123},
    {"p": math.nan, "t": 1717000000123},
    {"p": 2034.5},
])
def test_tick_rejects_malformed_trade(raw):
    with pytest.raises(InvalidTickError):
        Tick.from_trade(raw)


def test_candle_validate():
    candle = make_candle(0)
    assert candle.validate() is candle

    with pytest.raises(InvalidCandleError) as exc:
        make_candle(0, open=2010.0, high=2005.0).validate()

    assert exc.value.to_dict()["error"] == "INVALID_CANDLE"
    assert exc.value.timestamp == candle.timestamp


def test_candle_direction():
    assert make_candle(0, open=1, high=3, low=0, close=2).is_bullish
    assert make_candle(0, open=2, high=3, low=0, close=1).is_bearish
    doji = make_candle(0, open=2, high=3, low=0, close=2)
    assert not doji.is_bullish and not doji.is_bearish


def test_zone_overlap_is_inclusive():
    zone = Zone(ZoneType.OB_BULL, 2000.0, 2030.0, 0.0)

    assert zone.overlaps(2030.0, 2100.0)
    assert zone.overlaps(1900.0, 2000.0)
    assert not zone.overlaps(2030.01, 2100.0)
    assert zone.midpoint == 2015.0
