import pytest

from tests.factories import BASE_TS, make_candle, make_tick
from zonepulse.app.services.candle_builder import CandleBuilder


def test_first_tick_opens_candle_without_closing():
    builder = CandleBuilder(interval=60)

    assert builder.process_tick(make_tick(100.0, offset=5)) is None
    assert builder.current_bucket_start == BASE_TS

    building = builder.get_building_candle()
    assert building["open"] == building["close"] == 100.0
    assert building["volume"] == 1
    assert building["is_building"] is True


def test_ticks_in_same_bucket_update_ohlc():
    builder = CandleBuilder(interval=60)
    for offset, price in [(0, 100.0), (10, 103.0), (20, 98.0), (59.9, 101.0)]:
        assert builder.process_tick(make_tick(price, offset=offset)) is None

    building = builder.get_building_candle()
    assert building["open"] == 100.0
    assert building["high"] == 103.0
    assert building["low"] == 98.0
    assert building["close"] == 101.0
    assert building["volume"] == 4


def test_bucket_change_closes_candle():
    builder = CandleBuilder(interval=60)
    builder.process_tick(make_tick(100.0, offset=0))
    builder.process_tick(make_tick(101.0, offset=30))

    closed = builder.process_tick(make_tick(102.0, offset=60))

    assert closed is not None
    assert closed.timestamp == BASE_TS
    assert (closed.open, closed.high, closed.low, closed.close) == (100.0, 101.0, 100.0, 101.0)
    assert closed.volume == 2
    assert builder.current_bucket_start == BASE_TS + 60


def test_gap_between_buckets_does_not_fill_missing_minutes():
    builder = CandleBuilder(interval=60)
    builder.process_tick(make_tick(100.0, offset=0))

    closed = builder.process_tick(make_tick(105.0, offset=600))

    assert closed.timestamp == BASE_TS
    assert builder.current_bucket_start == BASE_TS + 600


def test_seed_continues_last_historical_bucket():
    builder = CandleBuilder(interval=60)
    last = make_candle(4, close=2001.0)
    builder.seed(last)

    assert builder.process_tick(make_tick(2003.0, offset=4 * 60 + 20)) is None
    closed = builder.process_tick(make_tick(2004.0, offset=5 * 60))

    assert closed.timestamp == last.timestamp
    assert closed.open == 2001.0
    assert closed.high == 2003.0
    assert closed.close == 2003.0
    assert closed.volume == 1


def test_unused_seed_bucket_is_discarded():
    builder = CandleBuilder(interval=60)
    builder.seed(make_candle(4))

    assert builder.process_tick(make_tick(2003.0, offset=10 * 60)) is None
    assert builder.current_bucket_start == BASE_TS + 10 * 60


def test_align_time():
    builder = CandleBuilder(interval=60)
    assert builder.align_time(BASE_TS + 59.999) == BASE_TS
    assert builder.align_time(BASE_TS + 60) == BASE_TS + 60


def test_invalid_interval():
    with pytest.raises(ValueError):
        CandleBuilder(interval=0)


def test_seeded_candle_shares_timestamp_but_not_extremes():
    builder = CandleBuilder(interval=60)
    last = make_candle(4, open=2000.0, high=2050.0, low=1950.0, close=2001.0)
    builder.seed(last)

    builder.process_tick(make_tick(2002.0, offset=4 * 60 + 30))
    closed = builder.process_tick(make_tick(2003.0, offset=5 * 60))

    assert closed.timestamp == last.timestamp
    assert (closed.high, closed.low) == (2002.0, 2001.0)
