"""
ZonePulse – Domain Entity: Candle
==================================
Vela OHLCV inmutable, ya sea construida a partir de ticks o recibida
del histórico.

Decisiones de diseño:
- frozen=True → inmutable una vez cerrada. Nadie puede alterar una vela
  pasada, garantizando la integridad del historial compartido.
- Se usa dataclass por rendimiento (más ligera que Pydantic para hot-path).
"""

from __future__ import annotations

from dataclasses import dataclass

from zonepulse.app.domain.exceptions import InvalidCandleError


@dataclass(frozen=True, slots=True)
class Candle:
    """Vela OHLCV con timestamp de apertura del bucket."""

    timestamp: float     # epoch (s) de inicio del bucket
    open: float
    high: float
    low: float
    close: float
    volume: float = 0

    @property
    def is_bullish(self) -> bool:
        return self.close > self.open

    @property
    def is_bearish(self) -> bool:
        return self.close < self.open

    def validate(self) -> "Candle":
        """
        Verificar low ≤ min(open, close) ≤ max(open, close) ≤ high.
        Retorna la propia vela para poder encadenar.
        """
        if not (self.low <= min(self.open, self.close) <= max(self.open, self.close) <= self.high):
            raise InvalidCandleError(
                f"Vela inconsistente @ {self.timestamp}: "
                f"O={self.open} H={self.high} L={self.low} C={self.close}",
                timestamp=self.timestamp,
            )
        return self

    def to_dict(self) -> dict:
        """Serialización para API / export."""
        return {
            "timestamp": self.timestamp,
            "open": self.open,
            "high": self.high,
            "low": self.low,
            "close": self.close,
            "volume": self.volume,
        }
