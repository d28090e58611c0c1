"""
ZonePulse – Recommendation Engine
==================================
Convierte cada zona vigente en una idea de trade puntuada.

═══════════════════════════════════════════════════════════════
         REGLAS POR ZONA (en el orden de la lista de zonas)
═══════════════════════════════════════════════════════════════

  Bias:        FVG_UP / OB_BULL → BUY      FVG_DOWN / OB_BEAR → SELL

  Entry:       punto medio, sin pasar el extremo lejano de la zona
                 BUY  → min(mid, high)     SELL → max(mid, low)

  Stop Loss:   BUY  → low  − 0.8 × ATR     SELL → high + 0.8 × ATR

  Take Profit: nivel trimestral (H, L o C) más cercano estrictamente
               más allá del entry en la dirección del trade; si no hay,
                 BUY  → entry + 2.2 × ATR  SELL → entry − 2.2 × ATR

  Confianza:   40
               + 20 si |entry − precio actual| ≤ ATR
               + 20 si la zona se cruza con el [low, high] de algún trimestre
               acotada a [0, 95]

La lista final se ordena por confianza descendente (orden estable en
empates) y reemplaza completa a la anterior. Sin zonas o sin ATR el
resultado es una lista vacía.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from zonepulse.app.core.logging import get_logger
from zonepulse.app.domain.entities.quarterly_level import QuarterlyLevel
from zonepulse.app.domain.entities.recommendation import Bias, Recommendation
from zonepulse.app.domain.entities.zone import Zone

logger = get_logger("recommendation_engine")


class RecommendationEngine:

    def __init__(
        self,
        *,
        stop_atr_multiplier: float = 0.8,
        target_atr_multiplier: float = 2.2,
        base_confidence: int = 40,
        confidence_bonus: int = 20,
        max_confidence: int = 95,
    ) -> None:
        self._stop_mult = stop_atr_multiplier
        self._target_mult = target_atr_multiplier
        self._base_confidence = base_confidence
        self._bonus = confidence_bonus
        self._max_confidence = max_confidence

        logger.info(
            "RecommendationEngine inicializado (SL=%.1f×ATR, TP respaldo=%.1f×ATR, "
            "confianza base=%d, bonus=%d, máx=%d)",
            stop_atr_multiplier, target_atr_multiplier,
            base_confidence, confidence_bonus, max_confidence,
        )

    def evaluate(
        self,
        zones: Iterable[Zone],
        atr: Optional[float],
        levels: Sequence[QuarterlyLevel],
        current_price: float,
    ) -> List[Recommendation]:
        zones = list(zones)
        if not zones or atr is None:
            return []

        result = [self._recommend(zone, atr, levels, current_price) for zone in zones]
        # sorted() es estable: los empates conservan el orden de las zonas
        return sorted(result, key=lambda r: r.confidence, reverse=True)

    def _recommend(
        self,
        zone: Zone,
        atr: float,
        levels: Sequence[QuarterlyLevel],
        current_price: float,
    ) -> Recommendation:
        level_values = [value for level in levels for value in level.values]

        if zone.type.is_bullish:
            bias = Bias.BUY
            entry = min(zone.midpoint, zone.high)
            stop_loss = zone.low - self._stop_mult * atr
            above = [v for v in level_values if v > entry]
            take_profit = min(above) if above else entry + self._target_mult * atr
        else:
            bias = Bias.SELL
            entry = max(zone.midpoint, zone.low)
            stop_loss = zone.high + self._stop_mult * atr
            below = [v for v in level_values if v < entry]
            take_profit = max(below) if below else entry - self._target_mult * atr

        return Recommendation(
            zone=zone,
            bias=bias,
            entry=entry,
            stop_loss=stop_loss,
            take_profit=take_profit,
            atr=atr,
            confidence=self.score(zone, entry, atr, levels, current_price),
        )

    def score(
        self,
        zone: Zone,
        entry: float,
        atr: float,
        levels: Sequence[QuarterlyLevel],
        current_price: float,
    ) -> int:
        confidence = self._base_confidence

        if abs(entry - current_price) <= atr:
            confidence += self._bonus

        if any(zone.overlaps(level.low, level.high) for level in levels):
            confidence += self._bonus

        return max(0, min(self._max_confidence, confidence))
