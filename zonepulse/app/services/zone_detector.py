"""
ZonePulse – Structural Zone Detector
=====================================
Detección de Fair Value Gaps y Order Blocks sobre las 3 últimas velas
del historial.

═══════════════════════════════════════════════════════════════
         PATRONES (geometría pura de precio)
═══════════════════════════════════════════════════════════════

  Buffer:
    [..., candle[-3], candle[-2], candle[-1]]
                        ↑ prev      ↑ last (recién cerrada)

  FVG_UP    last.low > prev.high              → (prev.high, last.low)
  FVG_DOWN  prev.low > last.high              → (last.high, prev.low)
  OB_BULL   prev bajista, last alcista y envolvente:
              last.close > prev.open AND last.open < prev.close
                                              → (prev.low, prev.high)
  OB_BEAR   prev alcista, last bajista y envolvente:
              last.close < prev.open AND last.open > prev.close
                                              → (prev.low, prev.high)

  candle[-3] no participa en las reglas, pero se exigen 3 velas.

FRECUENCIA:
  Solo se escanea cada `scan_interval` velas cerradas (5 por defecto)
  para reducir ruido.

DEDUPLICACIÓN:
  Una zona nueva se descarta si ya existe otra del mismo tipo con ambos
  extremos a menos de `dedup_tolerance` (0.5) unidades de precio.

PROTECCIÓN DE MEMORIA:
  Las zonas viven en deque(maxlen=20) → la más antigua sale primero.
"""

from __future__ import annotations

from typing import Deque, List, Sequence

from zonepulse.app.core.logging import get_logger
from zonepulse.app.domain.entities.candle import Candle
from zonepulse.app.domain.entities.zone import Zone, ZoneType

logger = get_logger("zone_detector")


class ZoneDetector:
    """
    Servicio de detección de zonas estructurales.

    Ciclo de vida:
      1. Se instancia una vez (AnalyticsEngine).
      2. Por cada vela cerrada se consulta should_scan(); si toca,
         update() detecta e inserta las zonas nuevas.
      3. RecommendationEngine lee la lista de zonas resultante.
    """

    def __init__(
        self,
        *,
        scan_interval: int = 5,
        dedup_tolerance: float = 0.5,
    ) -> None:
        self._scan_interval = scan_interval
        self._dedup_tolerance = dedup_tolerance

        logger.info(
            "ZoneDetector inicializado (scan cada %d velas, tolerancia=%.2f)",
            scan_interval, dedup_tolerance,
        )

    def should_scan(self, candle_count: int) -> bool:
        return candle_count >= 3 and candle_count % self._scan_interval == 0

    # ════════════════════════════════════════════════════════════════
    #  DETECCIÓN
    # ════════════════════════════════════════════════════════════════

    @staticmethod
    def detect(candles: Sequence[Candle]) -> List[Zone]:
        """Zonas presentes en las 3 últimas velas (sin deduplicar)."""
        if len(candles) < 3:
            return []

        prev = candles[-2]
        last = candles[-1]
        found: List[Zone] = []

        # ── Fair Value Gaps ──
        if last.low > prev.high:
            found.append(Zone(ZoneType.FVG_UP, prev.high, last.low, last.timestamp))

        if prev.low > last.high:
            found.append(Zone(ZoneType.FVG_DOWN, last.high, prev.low, last.timestamp))

        # ── Order Blocks (envolvente de giro) ──
        if (
            prev.is_bearish
            and last.is_bullish
            and last.close > prev.open
            and last.open < prev.close
        ):
            found.append(Zone(ZoneType.OB_BULL, prev.low, prev.high, last.timestamp))

        if (
            prev.is_bullish
            and last.is_bearish
            and last.close < prev.open
            and last.open > prev.close
        ):
            found.append(Zone(ZoneType.OB_BEAR, prev.low, prev.high, last.timestamp))

        return found

    # ════════════════════════════════════════════════════════════════
    #  ALMACENAMIENTO
    # ════════════════════════════════════════════════════════════════

    def insert(self, zones: Deque[Zone], zone: Zone) -> bool:
        """
        Añadir una zona si no es duplicada. El deque con maxlen descarta
        la más antigua al exceder el límite. Retorna True si se añadió.
        """
        if any(existing.is_similar(zone, self._dedup_tolerance) for existing in zones):
            logger.debug("Zona duplicada descartada: %s %.5f-%.5f", zone.type.value, zone.low, zone.high)
            return False

        zones.append(zone)
        logger.info(
            "Zona %s [%.5f - %.5f] (ts=%.0f)",
            zone.type.value, zone.low, zone.high, zone.timestamp,
        )
        return True

    def update(self, zones: Deque[Zone], candles: Sequence[Candle]) -> List[Zone]:
        """Detectar sobre las últimas velas e insertar. Retorna las añadidas."""
        return [zone for zone in self.detect(candles) if self.insert(zones, zone)]
