"""
ZonePulse – Engine State
=========================
Objeto de estado único y explícito del motor de análisis para UN
instrumento. Sustituye a los arrays globales: cada servicio recibe por
referencia solo la parte que le corresponde mutar.

PROPIEDAD:
- market           → AnalyticsEngine (historial + último precio)
- indicators       → IndicatorService
- quarterly_levels → QuarterlyLevelService
- zones            → ZoneDetector
- recommendations  → RecommendationEngine (se reemplaza entera)

PROTECCIÓN DE MEMORIA:
- zones usa deque(maxlen) → FIFO, la más antigua se descarta sola.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, List, Tuple

from zonepulse.app.domain.entities.quarterly_level import QuarterlyLevel
from zonepulse.app.domain.entities.recommendation import Recommendation
from zonepulse.app.domain.entities.zone import Zone
from zonepulse.app.state.indicator_state import IndicatorState
from zonepulse.app.state.market_state import MarketState

DEFAULT_MAX_ZONES = 20


@dataclass
class EngineState:
    market: MarketState
    indicators: IndicatorState = field(default_factory=IndicatorState)
    # (año, trimestre) → nivel, siempre ordenado ascendente
    quarterly_levels: Dict[Tuple[int, int], QuarterlyLevel] = field(default_factory=dict)
    zones: Deque[Zone] = field(default_factory=lambda: deque(maxlen=DEFAULT_MAX_ZONES))
    recommendations: List[Recommendation] = field(default_factory=list)

    @classmethod
    def for_symbol(cls, symbol: str, max_zones: int = DEFAULT_MAX_ZONES) -> "EngineState":
        return cls(
            market=MarketState(symbol=symbol),
            zones=deque(maxlen=max_zones),
        )

    @property
    def symbol(self) -> str:
        return self.market.symbol

    def levels(self) -> list[QuarterlyLevel]:
        return list(self.quarterly_levels.values())
