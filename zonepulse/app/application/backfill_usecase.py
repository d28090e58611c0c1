"""
ZonePulse – Backfill Use Case
==============================
Carga el histórico de la ventana de lookback y lo reproduce en el motor
antes de que arranque el feed en vivo.

Si el proveedor falla (HistoricalDataError) o llega una vela corrupta
(InvalidCandleError), la excepción se propaga: la inicialización se
aborta y el llamador debe reiniciar.
"""

from __future__ import annotations

from typing import Optional

from zonepulse.app.core.logging import get_logger
from zonepulse.app.infrastructure.history_client import HistoryClient
from zonepulse.app.services.analytics_engine import AnalyticsEngine

logger = get_logger("backfill")


class BackfillUseCase:

    def __init__(
        self,
        history_client: HistoryClient,
        engine: AnalyticsEngine,
        *,
        resolution: str = "1",
        days: int = 5,
        max_candles: int = 5000,
    ) -> None:
        self._history_client = history_client
        self._engine = engine
        self._resolution = resolution
        self._days = days
        self._max_candles = max_candles

    async def run(self, now: Optional[float] = None) -> int:
        """Descargar y reproducir. Retorna cuántas velas se aplicaron."""
        candles = await self._history_client.fetch_recent(
            self._engine.symbol, self._resolution, self._days, now=now,
        )
        applied = self._engine.backfill(candles, max_candles=self._max_candles)
        if applied < len(candles):
            logger.warning(
                "Histórico recortado: %d de %d velas aplicadas (máximo=%d)",
                applied, len(candles), self._max_candles,
            )
        return applied
