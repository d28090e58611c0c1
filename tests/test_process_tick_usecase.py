import asyncio

from tests.factories import make_tick
from zonepulse.app.application.process_tick_usecase import ProcessTickUseCase
from zonepulse.app.infrastructure.event_bus import EventBus
from zonepulse.app.infrastructure.finnhub_client import TICK_TOPIC


def test_handle_batch_feeds_engine(engine):
    usecase = ProcessTickUseCase(EventBus(), engine)

    assert usecase.handle_batch([make_tick(100.0), make_tick(101.0, offset=60)]) == 2
    assert usecase.handle_batch([]) == 0
    assert usecase.handle_batch(None) == 0

    assert engine.state.market.total_candles == 1
    assert usecase.stats == {
        "running": False,
        "processed_batches": 1,
        "processed_ticks": 2,
        "queued": 0,
        "dropped": 0,
    }


def test_consumes_batches_from_bus_in_order(engine):
    async def run():
        bus = EventBus()
        usecase = ProcessTickUseCase(bus, engine)
        await usecase.subscribe()
        task = asyncio.create_task(usecase.start())

        await bus.publish(TICK_TOPIC, [make_tick(100.0)])
        await bus.publish(TICK_TOPIC, [make_tick(102.0, offset=60), make_tick(103.0, offset=70)])
        for _ in range(50):
            if usecase.stats["processed_batches"] == 2:
                break
            await asyncio.sleep(0.01)

        await usecase.stop()
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        return usecase.stats

    stats = asyncio.run(run())

    assert stats["processed_ticks"] == 3
    assert engine.current_price == 103.0
    assert engine.state.market.candles[0].close == 100.0


def test_subscribe_is_idempotent(engine):
    async def run():
        bus = EventBus()
        usecase = ProcessTickUseCase(bus, engine)
        await usecase.subscribe()
        await usecase.subscribe()
        return bus.subscriber_count

    assert asyncio.run(run()) == 1
