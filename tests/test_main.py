import pytest
from fastapi.testclient import TestClient

import zonepulse.main as main
from tests.factories import order_block_series
from tests.test_backfill_usecase import FakeHistoryClient
from zonepulse.app.api.routes import init_routes
from zonepulse.app.infrastructure.history_client import HistoricalDataError


class StubFeed:
    """Feed en vivo sin red: registra cuándo arranca y se detiene."""

    def __init__(self):
        self.started_with = None
        self.stopped = False

    async def start(self):
        self.started_with = main.container.engine.state.market.backfilled_candles

    async def stop(self):
        self.stopped = True

    @property
    def stats(self):
        return {
            "running": self.started_with is not None and not self.stopped,
            "connected": False,
            "ticks_received": 0,
            "last_tick_time": 0.0,
            "connected_since": 0.0,
            "reconnect_attempts": 0,
            "last_error": None,
        }


def _reset_container():
    for name in ("engine", "process_tick", "event_bus", "history_client", "finnhub_client"):
        main.container.override(name, None)


@pytest.fixture
def feed():
    _reset_container()
    stub = StubFeed()
    main.container.override("finnhub_client", stub)
    yield stub
    init_routes(None)
    _reset_container()


def test_failed_backfill_aborts_startup(feed):
    main.container.override("history_client", FakeHistoryClient(error=HistoricalDataError("down")))

    with pytest.raises(HistoricalDataError):
        with TestClient(main.app):
            pass

    assert feed.started_with is None


def test_backfill_completes_before_live_feed(feed):
    main.container.override("history_client", FakeHistoryClient(order_block_series()))

    with TestClient(main.app) as client:
        status = client.get("/api/status").json()
        assert status["market"]["backfilled_candles"] == 30
        assert status["feed"]["running"] is True

    assert feed.started_with == 30
    assert feed.stopped is True
