"""
ZonePulse – Process Tick Use Case
==================================
Caso de uso central en vivo: consume lotes de ticks del EventBus y los
entrega al AnalyticsEngine, de a uno por vez.

FLUJO:
  EventBus (tick topic)
       │
       ▼
  ProcessTickUseCase._run()  ◄── loop consumiendo de su Queue exclusiva
       │
       └── AnalyticsEngine.process_ticks(batch)
               └── Si vela cerrada → indicadores, trimestres, zonas,
                   recomendaciones y listeners

SERIALIZACIÓN:
- Un único consumidor por motor: los lotes llegan en orden y nunca se
  procesan en paralelo aunque el transporte los entregue concurrentes.
- El loop espera solo en queue.get(); no consume CPU sin datos.

ERRORES:
- Un lote que falla se registra y el loop continúa con el siguiente.
"""

from __future__ import annotations

import asyncio
from typing import List, Optional

from zonepulse.app.core.logging import get_logger
from zonepulse.app.domain.entities.tick import Tick
from zonepulse.app.infrastructure.event_bus import EventBus
from zonepulse.app.infrastructure.finnhub_client import TICK_TOPIC
from zonepulse.app.services.analytics_engine import AnalyticsEngine

logger = get_logger("process_tick")

CONSUMER_NAME = "process_tick_usecase"


class ProcessTickUseCase:
    """Consume ticks del bus y alimenta al motor de análisis."""

    def __init__(self, event_bus: EventBus, engine: AnalyticsEngine) -> None:
        self._event_bus = event_bus
        self._engine = engine
        self._queue: asyncio.Queue | None = None
        self._running = False
        self._processed_batches = 0
        self._processed_ticks = 0

    async def subscribe(self) -> None:
        """Suscribirse al tópico de ticks (idempotente)."""
        if self._queue is None:
            self._queue = await self._event_bus.subscribe(TICK_TOPIC, CONSUMER_NAME)

    async def start(self) -> None:
        """Suscribirse al EventBus y lanzar loop de procesamiento."""
        await self.subscribe()
        self._running = True
        logger.info("ProcessTickUseCase iniciado, consumiendo tópico '%s'", TICK_TOPIC)
        await self._run()

    async def stop(self) -> None:
        """Detener procesamiento."""
        self._running = False
        logger.info(
            "ProcessTickUseCase detenido. Lotes: %d, ticks: %d",
            self._processed_batches,
            self._processed_ticks,
        )

    def handle_batch(self, batch: Optional[List[Tick]]) -> int:
        """Entregar un lote al motor. Lote vacío → no-op."""
        if not batch:
            return 0
        count = self._engine.process_ticks(batch)
        self._processed_batches += 1
        self._processed_ticks += count
        return count

    async def _run(self) -> None:
        assert self._queue is not None

        while self._running:
            try:
                # Esperar lote con timeout para permitir shutdown limpio
                try:
                    batch = await asyncio.wait_for(self._queue.get(), timeout=1.0)
                except asyncio.TimeoutError:
                    continue

                self.handle_batch(batch)

            except asyncio.CancelledError:
                logger.info("ProcessTickUseCase cancelado")
                break
            except Exception as e:
                logger.error("Error procesando ticks: %s", e, exc_info=True)
                continue

    @property
    def stats(self) -> dict:
        queue = self._event_bus.stats(TICK_TOPIC).get(CONSUMER_NAME, {})
        return {
            "running": self._running,
            "processed_batches": self._processed_batches,
            "processed_ticks": self._processed_ticks,
            "queued": queue.get("queued", 0),
            "dropped": queue.get("dropped", 0),
        }
