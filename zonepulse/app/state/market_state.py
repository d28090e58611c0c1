"""
ZonePulse – Market State
=========================
Historial de velas cerradas y último precio del instrumento.

HISTORIAL:
- Lista append-only en orden cronológico. Es el único modelo de lectura
  compartido por indicadores, trimestres y zonas.
- Nunca se elimina una vela del historial analítico. La ventana recortada
  para visualización se calcula al pedir el snapshot.

RACE CONDITIONS:
- Todas las mutaciones llegan desde un único consumidor (ProcessTickUseCase)
  o desde el backfill, que termina antes de que arranque el feed en vivo.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from zonepulse.app.domain.entities.candle import Candle
from zonepulse.app.domain.entities.tick import Tick


@dataclass
class MarketState:
    """Estado de mercado para UN símbolo."""

    symbol: str
    candles: List[Candle] = field(default_factory=list)
    last_tick: Optional[Tick] = None

    # Contadores de monitoreo
    total_ticks: int = 0
    backfilled_candles: int = 0

    @property
    def total_candles(self) -> int:
        return len(self.candles)

    @property
    def last_candle(self) -> Optional[Candle]:
        return self.candles[-1] if self.candles else None

    @property
    def last_price(self) -> float:
        """Último trade en vivo; si aún no hay, cierre de la última vela."""
        if self.last_tick is not None:
            return self.last_tick.price
        if self.candles:
            return self.candles[-1].close
        return 0.0

    def update_tick(self, tick: Tick) -> None:
        self.last_tick = tick
        self.total_ticks += 1

    def add_candle(self, candle: Candle) -> None:
        self.candles.append(candle)

    def history(self) -> Sequence[Candle]:
        """
        Historial completo tipado como Sequence: los servicios lo leen,
        solo add_candle() lo modifica. Sin copia, O(1).
        """
        return self.candles

    def get_candles(self, count: int | None = None) -> list[Candle]:
        """Últimas N velas (todas si count es None)."""
        if count is None:
            return list(self.candles)
        if count <= 0:
            return []
        return self.candles[-count:]

    def to_dict(self) -> dict:
        return {
            "symbol": self.symbol,
            "last_price": self.last_price,
            "total_ticks": self.total_ticks,
            "total_candles": self.total_candles,
            "backfilled_candles": self.backfilled_candles,
        }
