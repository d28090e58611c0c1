"""
ZonePulse – Domain Entity: Recommendation
==========================================
Idea de trade derivada de una zona. No se persiste ni se muta: el motor
de recomendaciones reemplaza la lista completa en cada recálculo.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from zonepulse.app.domain.entities.zone import Zone


class Bias(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


@dataclass(frozen=True, slots=True)
class Recommendation:
    zone: Zone
    bias: Bias
    entry: float
    stop_loss: float
    take_profit: float
    atr: float
    confidence: int

    @property
    def risk(self) -> float:
        return abs(self.entry - self.stop_loss)

    @property
    def reward(self) -> float:
        return abs(self.take_profit - self.entry)

    @property
    def risk_reward(self) -> Optional[float]:
        """Reward / Risk. None si el riesgo es cero."""
        if self.risk == 0:
            return None
        return self.reward / self.risk

    def to_dict(self) -> dict:
        rr = self.risk_reward
        return {
            "zone": self.zone.to_dict(),
            "bias": self.bias.value,
            "entry": self.entry,
            "stop_loss": self.stop_loss,
            "take_profit": self.take_profit,
            "atr": self.atr,
            "confidence": self.confidence,
            "risk": self.risk,
            "reward": self.reward,
            "risk_reward": round(rr, 2) if rr is not None else None,
        }
