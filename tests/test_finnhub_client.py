import asyncio
import json

from zonepulse.app.infrastructure import finnhub_client
from zonepulse.app.infrastructure.event_bus import EventBus
from zonepulse.app.infrastructure.finnhub_client import TICK_TOPIC, FinnhubClient, parse_trades


def run_messages(*messages):
    """Entregar mensajes crudos al cliente y recoger lo publicado en el bus."""

    async def run():
        bus = EventBus()
        queue = await bus.subscribe(TICK_TOPIC, "test")
        client = FinnhubClient(
            bus, ws_url="wss://ws.finnhub.test", api_key="k", symbol="OANDA:XAU_USD",
        )
        counts = [await client.handle_message(m) for m in messages]
        published = []
        while not queue.empty():
            published.append(queue.get_nowait())
        return client, counts, published

    return asyncio.run(run())


def test_trade_message_publishes_batch():
    msg = json.dumps({
        "type": "trade",
        "data": [
            {"p": 2034.5, "t": 1717000000123, "s": "OANDA:XAU_USD", "v": 1},
            {"p": 2034.7, "t": 1717000000456, "s": "OANDA:XAU_USD", "v": 1},
        ],
    })

    client, counts, published = run_messages(msg)

    assert counts == [2]
    [batch] = published
    assert [t.price for t in batch] == [2034.5, 2034.7]
    assert client.stats["ticks_received"] == 2
    assert client.stats["last_tick_time"] == batch[-1].timestamp


def test_invalid_trades_are_skipped():
    msg = json.dumps({
        "type": "trade",
        "data": [{"p": "x", "t": 1}, {"t": 1717000000000}, {"p": 2030.0, "t": 1717000000000}],
    })

    _, counts, published = run_messages(msg)

    assert counts == [1]
    assert len(published[0]) == 1


def test_non_trade_messages_are_ignored():
    _, counts, published = run_messages(
        json.dumps({"type": "ping"}),
        json.dumps({"type": "trade", "data": []}),
        "not json",
        json.dumps([1, 2, 3]),
    )

    assert counts == [0, 0, 0, 0]
    assert published == []


def test_error_message_is_recorded():
    client, counts, _ = run_messages(json.dumps({"type": "error", "msg": "Invalid token"}))

    assert counts == [0]
    assert client.stats["last_error"] == "Invalid token"
    assert client.stats["connected"] is False


def test_parse_trades_requires_list():
    assert parse_trades(None) == []
    assert parse_trades({"p": 1}) == []


class FakeConnection:
    """Conexión que entrega un trade y luego se cae."""

    def __init__(self, message):
        self.message = message
        self.sent = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    async def send(self, data):
        self.sent.append(data)

    async def close(self):
        pass

    def __aiter__(self):
        return self._messages()

    async def _messages(self):
        yield self.message
        raise OSError("connection reset")


def test_reconnects_after_drop_and_keeps_publishing(monkeypatch):
    attempts = []

    def fake_connect(url, **kwargs):
        attempts.append(url)
        trade = {"p": 2030.0 + len(attempts), "t": 1717000000000 + len(attempts) * 1000}
        return FakeConnection(json.dumps({"type": "trade", "data": [trade]}))

    monkeypatch.setattr(finnhub_client.websockets, "connect", fake_connect)

    async def run():
        bus = EventBus()
        queue = await bus.subscribe(TICK_TOPIC, "test")
        client = FinnhubClient(
            bus,
            ws_url="wss://ws.finnhub.test",
            api_key="k",
            symbol="OANDA:XAU_USD",
            reconnect_delay=0.01,
        )
        await client.start()
        for _ in range(200):
            if len(attempts) >= 2 and queue.qsize() >= 2:
                break
            await asyncio.sleep(0.01)
        await client.stop()

        batches = []
        while not queue.empty():
            batches.append(queue.get_nowait())
        return client.stats, batches

    stats, batches = asyncio.run(run())

    assert len(attempts) >= 2
    assert attempts[0] == "wss://ws.finnhub.test?token=k"
    assert stats["reconnect_attempts"] >= 1
    assert stats["running"] is False
    prices = [batch[0].price for batch in batches]
    assert prices[:2] == [2031.0, 2032.0]
