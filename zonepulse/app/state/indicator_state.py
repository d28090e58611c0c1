"""
ZonePulse – Indicator State
============================
Series de indicadores técnicos de UN instrumento.

DISEÑO:
- Una entrada por vela cerrada, añadida solo cuando el warm-up del
  indicador se cumple. Antes de eso el indicador simplemente no produce
  nada (no es un error).
- MACD y ATR dependen de su entrada anterior (recursión EMA / Wilder),
  por eso se conservan las series completas y no solo el último valor.
- RSI no guarda estado intermedio: se recalcula desde el historial de velas.

WARM-UP (N = velas en el historial):
- RSI 14  → N ≥ 14
- ATR 14  → N ≥ 15
- MACD    → N ≥ 26
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

# Períodos estándar de los indicadores
RSI_PERIOD = 14
MACD_FAST_PERIOD = 12
MACD_SLOW_PERIOD = 26
MACD_SIGNAL_PERIOD = 9
ATR_PERIOD = 14

# Umbrales solo de presentación
RSI_OVERBOUGHT = 70.0
RSI_OVERSOLD = 30.0


@dataclass(frozen=True, slots=True)
class MacdEntry:
    ema12: float
    ema26: float
    macd: float
    signal: float

    def to_dict(self) -> dict:
        return {
            "ema12": self.ema12,
            "ema26": self.ema26,
            "macd": self.macd,
            "signal": self.signal,
        }


@dataclass
class IndicatorState:
    """Series RSI / MACD / ATR. La muta únicamente IndicatorService."""

    rsi_values: List[float] = field(default_factory=list)
    macd_values: List[MacdEntry] = field(default_factory=list)
    atr_values: List[float] = field(default_factory=list)

    @property
    def rsi(self) -> Optional[float]:
        return self.rsi_values[-1] if self.rsi_values else None

    @property
    def macd(self) -> Optional[MacdEntry]:
        return self.macd_values[-1] if self.macd_values else None

    @property
    def atr(self) -> Optional[float]:
        return self.atr_values[-1] if self.atr_values else None

    @property
    def rsi_zone(self) -> Optional[str]:
        """Clasificación de presentación: overbought / oversold / neutral."""
        rsi = self.rsi
        if rsi is None:
            return None
        if rsi > RSI_OVERBOUGHT:
            return "overbought"
        if rsi < RSI_OVERSOLD:
            return "oversold"
        return "neutral"

    @property
    def macd_trend(self) -> Optional[str]:
        """Clasificación de presentación: MACD por encima/debajo de la señal."""
        entry = self.macd
        if entry is None:
            return None
        return "bullish" if entry.macd > entry.signal else "bearish"

    def latest(self) -> dict:
        """Últimos valores, tal como se exportan."""
        macd = self.macd
        return {
            "rsi": self.rsi,
            "macd": macd.to_dict() if macd is not None else None,
            "atr": self.atr,
        }

    def to_dict(self) -> dict:
        """Serialización para API, con clasificaciones de presentación."""
        data = self.latest()
        data["rsi_zone"] = self.rsi_zone
        data["macd_trend"] = self.macd_trend
        return data
