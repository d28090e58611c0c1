import pytest

from zonepulse.app.core.settings import Settings
from zonepulse.container import Container, init_container


def test_engine_built_from_settings():
    container = Container(settings=Settings(symbol="OANDA:EUR_USD", max_zones=5))

    engine = container.engine

    assert engine.symbol == "OANDA:EUR_USD"
    assert engine.state.zones.maxlen == 5
    assert container.engine is engine


def test_process_tick_shares_engine_and_bus():
    container = Container(settings=Settings())

    usecase = container.process_tick

    assert usecase._engine is container.engine
    assert usecase._event_bus is container.event_bus


def test_backfill_usecase_is_new_each_time():
    container = Container(settings=Settings())

    assert container.get_backfill_usecase() is not container.get_backfill_usecase()


def test_override():
    container = Container(settings=Settings())
    fake = object()

    container.override("history_client", fake)

    assert container.history_client is fake
    with pytest.raises(ValueError):
        container.override("nope", fake)


def test_init_container_replaces_global():
    settings = Settings(symbol="OANDA:XAG_USD")

    assert init_container(settings).settings.symbol == "OANDA:XAG_USD"
