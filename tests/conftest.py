from __future__ import annotations

import pytest

from tests.factories import SYMBOL, order_block_series
from zonepulse.app.services.analytics_engine import AnalyticsEngine


@pytest.fixture
def engine() -> AnalyticsEngine:
    return AnalyticsEngine(SYMBOL)


@pytest.fixture
def loaded_engine(engine: AnalyticsEngine) -> AnalyticsEngine:
    engine.backfill(order_block_series())
    return engine
