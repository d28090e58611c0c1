from collections import deque

from tests.factories import make_candle
from zonepulse.app.domain.entities.zone import Zone, ZoneType
from zonepulse.app.services.zone_detector import ZoneDetector


def three(prev, last):
    """Serie mínima: una vela neutra seguida de prev y last."""
    return [make_candle(0), prev, last]


def test_fvg_up():
    prev = make_candle(1, open=100, high=101, low=99, close=100.5)
    last = make_candle(2, open=102.5, high=105, low=102, close=104)

    zones = ZoneDetector.detect(three(prev, last))

    assert zones == [Zone(ZoneType.FVG_UP, 101, 102, last.timestamp)]


def test_fvg_down():
    prev = make_candle(1, open=100, high=101, low=99, close=99.5)
    last = make_candle(2, open=97.5, high=98, low=95, close=96)

    zones = ZoneDetector.detect(three(prev, last))

    assert zones == [Zone(ZoneType.FVG_DOWN, 98, 99, last.timestamp)]


def test_bullish_order_block():
    prev = make_candle(1, open=2010, high=2030, low=2000, close=2005)
    last = make_candle(2, open=2004, high=2013, low=2003, close=2012)

    zones = ZoneDetector.detect(three(prev, last))

    assert zones == [Zone(ZoneType.OB_BULL, 2000, 2030, last.timestamp)]


def test_bearish_order_block():
    prev = make_candle(1, open=2005, high=2015, low=2000, close=2010)
    last = make_candle(2, open=2011, high=2012, low=2001, close=2004)

    zones = ZoneDetector.detect(three(prev, last))

    assert zones == [Zone(ZoneType.OB_BEAR, 2000, 2015, last.timestamp)]


def test_non_engulfing_reversal_is_not_an_order_block():
    prev = make_candle(1, open=2010, high=2030, low=2000, close=2005)
    last = make_candle(2, open=2006, high=2009, low=2004, close=2008)

    assert ZoneDetector.detect(three(prev, last)) == []


def test_needs_three_candles():
    prev = make_candle(0, open=100, high=101, low=99, close=100.5)
    last = make_candle(1, open=102.5, high=105, low=102, close=104)

    assert ZoneDetector.detect([prev, last]) == []


def test_should_scan_every_fifth_candle():
    detector = ZoneDetector(scan_interval=5)

    assert [n for n in range(1, 21) if detector.should_scan(n)] == [5, 10, 15, 20]


def test_similar_zone_is_deduplicated():
    detector = ZoneDetector(dedup_tolerance=0.5)
    zones = deque(maxlen=20)

    assert detector.insert(zones, Zone(ZoneType.FVG_UP, 100.0, 100.3, 1.0))
    assert not detector.insert(zones, Zone(ZoneType.FVG_UP, 100.2, 100.4, 2.0))
    assert detector.insert(zones, Zone(ZoneType.FVG_DOWN, 100.2, 100.4, 3.0))
    assert len(zones) == 2


def test_zone_buffer_keeps_most_recent():
    detector = ZoneDetector()
    zones = deque(maxlen=20)

    for i in range(25):
        detector.insert(zones, Zone(ZoneType.FVG_UP, 100.0 + i, 100.5 + i, float(i)))

    assert len(zones) == 20
    assert zones[0].timestamp == 5.0
    assert zones[-1].timestamp == 24.0


def test_update_returns_only_new_zones():
    detector = ZoneDetector()
    zones = deque(maxlen=20)
    prev = make_candle(1, open=2010, high=2030, low=2000, close=2005)
    last = make_candle(2, open=2004, high=2013, low=2003, close=2012)

    assert len(detector.update(zones, three(prev, last))) == 1
    assert detector.update(zones, three(prev, last)) == []
    assert len(zones) == 1
