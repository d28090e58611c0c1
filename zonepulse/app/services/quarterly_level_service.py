"""
ZonePulse – Quarterly Level Service
====================================
Mantiene high / low / close por trimestre natural (UTC).

- Clave: (año, trimestre) con trimestre = mes // 3 + 1 → "Qn YYYY".
- Primera vela del trimestre → crea el nivel con H/L/C de la vela.
- Siguientes → high = max, low = min, close = último close recibido
  (se sobreescribe siempre, sin importar el orden temporal de llegada).
- La colección se mantiene ordenada por (año, trimestre) ascendente.
  Solo una clave nueva puede alterar el orden, así que solo entonces
  se reordena.
"""

from __future__ import annotations

from typing import Dict, Tuple

from zonepulse.app.core.logging import get_logger
from zonepulse.app.domain.entities.candle import Candle
from zonepulse.app.domain.entities.quarterly_level import QuarterlyLevel, quarter_of

logger = get_logger("quarterly_levels")


class QuarterlyLevelService:

    def update(
        self,
        levels: Dict[Tuple[int, int], QuarterlyLevel],
        candle: Candle,
    ) -> QuarterlyLevel:
        """Incorporar una vela cerrada. Retorna el nivel afectado."""
        year, quarter = quarter_of(candle.timestamp)
        level = levels.get((year, quarter))

        if level is None:
            level = QuarterlyLevel(
                year=year,
                quarter=quarter,
                high=candle.high,
                low=candle.low,
                close=candle.close,
            )
            levels[(year, quarter)] = level
            self._sort(levels)
            logger.info("Nuevo trimestre %s (H=%.5f L=%.5f)", level.key, level.high, level.low)
            return level

        level.high = max(level.high, candle.high)
        level.low = min(level.low, candle.low)
        level.close = candle.close
        return level

    @staticmethod
    def _sort(levels: Dict[Tuple[int, int], QuarterlyLevel]) -> None:
        ordered = sorted(levels.items())
        levels.clear()
        levels.update(ordered)
