"""
ZonePulse – Analytics Engine
=============================
Orquestador síncrono del motor de análisis para UN instrumento.

FLUJO:
  tick
    │
    ▼
  CandleBuilder.process_tick()
    │
    └── Si vela cerrada → _finalize(candle):
            ├── MarketState.add_candle()              → historial
            ├── IndicatorService.update()             → RSI / MACD / ATR
            ├── QuarterlyLevelService.update()        → niveles trimestrales
            ├── ZoneDetector.update()   (cada 5 velas) → FVG / Order Blocks
            ├── RecommendationEngine.evaluate()       → ideas puntuadas
            └── listeners("candle", engine)

  backfill(candles) reproduce el histórico por el MISMO camino de
  _finalize, en orden ascendente, antes de aceptar ticks en vivo.

CONCURRENCIA:
- Cada operación es síncrona y acotada, sin I/O ni await.
- No es re-entrante: el host debe serializar los ticks antes de llegar
  aquí (ProcessTickUseCase consume de una única cola).

SNAPSHOT:
- snapshot() y export_snapshot() son proyecciones puras del estado,
  se pueden pedir en cualquier momento sin mutarlo.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional

from zonepulse.app.core.logging import get_logger
from zonepulse.app.domain.entities.candle import Candle
from zonepulse.app.domain.entities.tick import Tick
from zonepulse.app.domain.exceptions import EngineStateError
from zonepulse.app.services.candle_builder import CandleBuilder
from zonepulse.app.services.indicator_service import IndicatorService
from zonepulse.app.services.quarterly_level_service import QuarterlyLevelService
from zonepulse.app.services.recommendation_engine import RecommendationEngine
from zonepulse.app.services.zone_detector import ZoneDetector
from zonepulse.app.state.engine_state import EngineState

logger = get_logger("analytics_engine")

TICK_EVENT = "tick"
CANDLE_EVENT = "candle"

Listener = Callable[[str, "AnalyticsEngine"], None]


class AnalyticsEngine:
    """
    Dueño explícito del EngineState. Ningún otro componente lo muta.

    Uso:
        engine = AnalyticsEngine("OANDA:XAU_USD")
        engine.backfill(historical_candles)
        engine.process_tick(Tick(price=2034.5, timestamp=1717000000.0))
        engine.snapshot()
    """

    def __init__(
        self,
        symbol: str,
        *,
        state: Optional[EngineState] = None,
        candle_builder: Optional[CandleBuilder] = None,
        indicator_service: Optional[IndicatorService] = None,
        quarterly_service: Optional[QuarterlyLevelService] = None,
        zone_detector: Optional[ZoneDetector] = None,
        recommendation_engine: Optional[RecommendationEngine] = None,
        snapshot_candle_window: int = 500,
        export_candle_count: int = 100,
    ) -> None:
        self._state = state or EngineState.for_symbol(symbol)
        self._candle_builder = candle_builder or CandleBuilder()
        self._indicator_service = indicator_service or IndicatorService()
        self._quarterly_service = quarterly_service or QuarterlyLevelService()
        self._zone_detector = zone_detector or ZoneDetector()
        self._recommendation_engine = recommendation_engine or RecommendationEngine()
        self._snapshot_candle_window = snapshot_candle_window
        self._export_candle_count = export_candle_count
        self._listeners: List[Listener] = []

    # ════════════════════════════════════════════════════════════════
    #  PROPIEDADES
    # ════════════════════════════════════════════════════════════════

    @property
    def symbol(self) -> str:
        return self._state.symbol

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def current_price(self) -> float:
        return self._state.market.last_price

    # ════════════════════════════════════════════════════════════════
    #  LISTENERS
    # ════════════════════════════════════════════════════════════════

    def add_listener(self, listener: Listener) -> None:
        """Registrar un callback invocado tras cada transición de estado."""
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, event: str) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, self)
            except Exception as e:
                logger.error("Error en listener (%s): %s", event, e, exc_info=True)

    # ════════════════════════════════════════════════════════════════
    #  HISTÓRICO
    # ════════════════════════════════════════════════════════════════

    def backfill(self, candles: Iterable[Candle], max_candles: Optional[int] = None) -> int:
        """
        Reproducir velas históricas en orden ascendente por el mismo camino
        que las velas en vivo. Se conservan las `max_candles` primeras.

        Lanza EngineStateError si el motor ya tiene historial e
        InvalidCandleError si alguna vela viola el invariante OHLC
        (ninguna vela se aplica en ese caso).
        """
        if self._state.market.candles:
            raise EngineStateError("El motor ya tiene historial; backfill solo al inicio")

        ordered = sorted(candles, key=lambda c: c.timestamp)
        if max_candles is not None:
            ordered = ordered[:max_candles]

        for candle in ordered:
            candle.validate()

        for candle in ordered:
            self._finalize(candle, notify=False)

        self._state.market.backfilled_candles = len(ordered)
        last = self._state.market.last_candle
        if last is not None:
            self._candle_builder.seed(last)

        logger.info(
            "Backfill completo: %d velas, %d zonas, %d trimestres, %d recomendaciones",
            len(ordered),
            len(self._state.zones),
            len(self._state.quarterly_levels),
            len(self._state.recommendations),
        )
        self._notify(CANDLE_EVENT)
        return len(ordered)

    # ════════════════════════════════════════════════════════════════
    #  TICKS EN VIVO
    # ════════════════════════════════════════════════════════════════

    def process_tick(self, tick: Tick) -> Optional[Candle]:
        """Procesar un tick. Retorna la vela cerrada si hubo rollover."""
        self._state.market.update_tick(tick)
        closed = self._candle_builder.process_tick(tick)

        if closed is not None:
            self._finalize(closed)

        self._notify(TICK_EVENT)
        return closed

    def process_ticks(self, ticks: Optional[Iterable[Tick]]) -> int:
        """Procesar un lote en orden. Lote vacío o None → no-op."""
        if not ticks:
            return 0
        count = 0
        for tick in ticks:
            self.process_tick(tick)
            count += 1
        return count

    # ════════════════════════════════════════════════════════════════
    #  CASCADA POR VELA CERRADA
    # ════════════════════════════════════════════════════════════════

    def _finalize(self, candle: Candle, notify: bool = True) -> None:
        state = self._state
        state.market.add_candle(candle)
        history = state.market.history()

        self._indicator_service.update(state.indicators, history)
        self._quarterly_service.update(state.quarterly_levels, candle)

        if self._zone_detector.should_scan(len(history)):
            self._zone_detector.update(state.zones, history)

        self.refresh_recommendations()

        logger.debug(
            "Vela %.0f C=%.5f RSI=%s ATR=%s zonas=%d",
            candle.timestamp,
            candle.close,
            state.indicators.rsi,
            state.indicators.atr,
            len(state.zones),
        )

        if notify:
            self._notify(CANDLE_EVENT)

    def refresh_recommendations(self) -> None:
        """Recalcular (reemplazar) la lista de recomendaciones."""
        state = self._state
        state.recommendations = self._recommendation_engine.evaluate(
            state.zones,
            state.indicators.atr,
            state.levels(),
            self.current_price,
        )

    # ════════════════════════════════════════════════════════════════
    #  SNAPSHOTS
    # ════════════════════════════════════════════════════════════════

    def snapshot(self, candle_window: Optional[int] = None) -> dict:
        """Proyección completa del estado para render / API."""
        state = self._state
        window = self._snapshot_candle_window if candle_window is None else candle_window
        return {
            "symbol": self.symbol,
            "current_price": self.current_price,
            "building_candle": self._candle_builder.get_building_candle(),
            "candles": [c.to_dict() for c in state.market.get_candles(window)],
            "quarterly_levels": [level.to_dict() for level in state.levels()],
            "zones": [zone.to_dict() for zone in state.zones],
            "indicators": state.indicators.to_dict(),
            "recommendations": [r.to_dict() for r in state.recommendations],
            "stats": state.market.to_dict(),
        }

    def export_snapshot(self, now: Optional[datetime] = None) -> dict:
        """Snapshot puntual serializable a JSON (contrato de export)."""
        state = self._state
        now = now or datetime.now(timezone.utc)
        return {
            "symbol": self.symbol,
            "timestamp": now.isoformat(),
            "last_price": self.current_price,
            "ohlc": [c.to_dict() for c in state.market.get_candles(self._export_candle_count)],
            "quarterly_levels": [level.to_dict() for level in state.levels()],
            "zones": [zone.to_dict() for zone in state.zones],
            "indicators": state.indicators.latest(),
            "recommendations": [r.to_dict() for r in state.recommendations],
        }
