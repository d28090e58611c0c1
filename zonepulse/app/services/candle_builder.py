"""
ZonePulse – Candle Builder Service
===================================
Construye velas OHLCV a partir de trades en tiempo real.

ALGORITMO:
  1. El bucket de un tick es su timestamp truncado al intervalo
     (floor(ts / intervalo) * intervalo).
  2. Si no hay vela abierta, o el bucket del tick difiere del actual,
     la vela abierta se "cierra": se congela como Candle inmutable y se
     retorna. Se abre otra con open=high=low=close=precio, volume=1.
  3. Si el tick cae en el mismo bucket, actualiza high/low/close y volume.

CÓMO SE EVITA REPAINTING:
- La vela temporal solo existe en `_building`. Solo al rollover se
  convierte en Candle(frozen=True) y se entrega al consumidor.
- La vela en construcción se expone como dict de solo lectura para
  preview; nunca entra al historial hasta cerrarse.

CONTINUIDAD TRAS EL HISTÓRICO:
- seed(last_candle) abre un bucket de continuación en el minuto de la
  última vela histórica (OHLC = su close, volume = 0). Si no llega ningún
  tick a ese bucket, se descarta en el rollover para no duplicar la vela
  histórica.

COSTO:
- process_tick() es O(1): solo comparaciones y asignaciones, sin I/O.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from zonepulse.app.core.logging import get_logger
from zonepulse.app.domain.entities.candle import Candle
from zonepulse.app.domain.entities.tick import Tick

logger = get_logger("candle_builder")


@dataclass
class _BuildingCandle:
    """Vela mutable en construcción (solo uso interno)."""

    open_time: float      # epoch de apertura (alineado al intervalo)
    open: float
    high: float
    low: float
    close: float
    volume: int = 0

    @classmethod
    def start(cls, open_time: float, price: float, volume: int = 1) -> "_BuildingCandle":
        return cls(
            open_time=open_time,
            open=price,
            high=price,
            low=price,
            close=price,
            volume=volume,
        )

    def update(self, price: float) -> None:
        """Actualizar HLC con un nuevo precio."""
        self.high = max(self.high, price)
        self.low = min(self.low, price)
        self.close = price
        self.volume += 1

    def freeze(self) -> Candle:
        """Convertir en Candle inmutable."""
        return Candle(
            timestamp=self.open_time,
            open=self.open,
            high=self.high,
            low=self.low,
            close=self.close,
            volume=self.volume,
        )


class CandleBuilder:
    """
    Agregador de ticks en velas de intervalo fijo para UN instrumento.

    Uso:
        builder = CandleBuilder(interval=60)
        closed = builder.process_tick(tick)
        if closed:
            # vela completada → historial, indicadores, etc.
    """

    def __init__(self, interval: int = 60) -> None:
        if interval <= 0:
            raise ValueError("El intervalo de vela debe ser positivo")
        self._interval = interval
        self._building: Optional[_BuildingCandle] = None
        logger.info("CandleBuilder inicializado (intervalo=%ds)", self._interval)

    @property
    def interval(self) -> int:
        return self._interval

    @property
    def current_bucket_start(self) -> Optional[float]:
        return self._building.open_time if self._building is not None else None

    def align_time(self, epoch: float) -> float:
        """Alinear un timestamp al inicio de su intervalo."""
        return math.floor(epoch / self._interval) * self._interval

    def seed(self, last_candle: Candle) -> None:
        """
        Continuar el bucket de la última vela histórica con ticks en vivo.

        La vela de continuación arranca con OHLC = last_candle.close y no
        hereda el high/low históricos. Si recibe ticks, al cerrarse entra al
        historial con el MISMO timestamp que la última vela histórica: son
        dos velas distintas para el mismo minuto (la histórica y la porción
        en vivo), no un duplicado accidental.
        """
        self._building = _BuildingCandle.start(
            self.align_time(last_candle.timestamp), last_candle.close, volume=0,
        )
        logger.info(
            "CandleBuilder sembrado desde histórico (bucket=%.0f, close=%.5f)",
            self._building.open_time,
            last_candle.close,
        )

    def process_tick(self, tick: Tick) -> Optional[Candle]:
        """
        Procesar un tick. Retorna Candle si una vela se cerró, None si no.
        """
        bucket = self.align_time(tick.timestamp)
        building = self._building

        # ── CASO 1: Tick pertenece a la vela actual ──
        if building is not None and bucket == building.open_time:
            building.update(tick.price)
            return None

        # ── CASO 2: No hay vela o cambió el bucket → cerrar y abrir nueva ──
        closed_candle: Optional[Candle] = None
        if building is not None and building.volume > 0:
            closed_candle = building.freeze()
            logger.debug(
                "Vela cerrada: O=%.5f H=%.5f L=%.5f C=%.5f vol=%d",
                closed_candle.open,
                closed_candle.high,
                closed_candle.low,
                closed_candle.close,
                closed_candle.volume,
            )

        self._building = _BuildingCandle.start(bucket, tick.price)
        return closed_candle

    def get_building_candle(self) -> Optional[dict]:
        """Obtener la vela en construcción (para preview)."""
        building = self._building
        if building is None:
            return None
        return {
            "timestamp": building.open_time,
            "open": building.open,
            "high": building.high,
            "low": building.low,
            "close": building.close,
            "volume": building.volume,
            "is_building": True,
        }
