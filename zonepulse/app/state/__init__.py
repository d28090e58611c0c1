"""Estado en memoria del motor (un objeto por instrumento)."""

from zonepulse.app.state.engine_state import EngineState
from zonepulse.app.state.indicator_state import IndicatorState, MacdEntry
from zonepulse.app.state.market_state import MarketState

__all__ = ["EngineState", "IndicatorState", "MacdEntry", "MarketState"]
