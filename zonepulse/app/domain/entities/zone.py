"""
ZonePulse – Domain Entity: Structural Zone
===========================================
Zona de precio detectada por geometría de velas:

- FVG_UP / FVG_DOWN → Fair Value Gap (hueco entre rangos consecutivos).
- OB_BULL / OB_BEAR → Order Block (vela previa a un envolvente de giro).

Inmutable una vez creada.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ZoneType(str, Enum):
    FVG_UP = "FVG_UP"
    FVG_DOWN = "FVG_DOWN"
    OB_BULL = "OB_BULL"
    OB_BEAR = "OB_BEAR"

    @property
    def is_bullish(self) -> bool:
        return self in (ZoneType.FVG_UP, ZoneType.OB_BULL)


@dataclass(frozen=True, slots=True)
class Zone:
    """Rango [low, high] de una zona estructural."""

    type: ZoneType
    low: float
    high: float
    timestamp: float     # epoch (s) de la vela que confirmó la zona

    @property
    def midpoint(self) -> float:
        return (self.low + self.high) / 2

    def overlaps(self, low: float, high: float) -> bool:
        """¿El rango de la zona se cruza con [low, high]?"""
        return self.low <= high and self.high >= low

    def is_similar(self, other: "Zone", tolerance: float) -> bool:
        """Mismo tipo y ambos extremos a menos de `tolerance` de distancia."""
        return (
            self.type == other.type
            and abs(self.low - other.low) < tolerance
            and abs(self.high - other.high) < tolerance
        )

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "range": [self.low, self.high],
            "timestamp": self.timestamp,
        }
