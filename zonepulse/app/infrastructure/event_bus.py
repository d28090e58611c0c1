"""
ZonePulse – Event Bus (asyncio.Queue fan-out)
==============================================
Bus de eventos interno para desacoplar el productor de trades
(FinnhubClient) del consumidor que alimenta el motor (ProcessTickUseCase).

Arquitectura:
  ┌──────────┐          ┌───────────┐
  │ Finnhub  │──ticks──▸│ Event Bus │──▸ ProcessTickUseCase
  │  Client  │          │ (fan-out) │──▸ Consumer N ...
  └──────────┘          └───────────┘

SERIALIZACIÓN:
- Cada consumidor tiene su propia asyncio.Queue y la consume de a un
  evento, así el motor nunca recibe lotes en paralelo.

CÓMO SE PROTEGE MEMORIA:
- Cada cola tiene un maxsize configurable (default 10,000).
- Si un consumidor es lento y su cola se llena, se descarta el evento
  MÁS ANTIGUO (drop-oldest): el productor nunca se bloquea.
- Los descartes se cuentan por consumidor y se exponen en stats().
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, List

from zonepulse.app.core.logging import get_logger

logger = get_logger("event_bus")


@dataclass
class Subscription:
    """Cola exclusiva de un consumidor en un tópico."""

    topic: str
    consumer: str
    queue: asyncio.Queue = field(repr=False)
    dropped: int = 0

    def offer(self, data: Any) -> None:
        """Encolar sin bloquear; si está llena sale el evento más antiguo."""
        if self.queue.full():
            try:
                self.queue.get_nowait()
                self.dropped += 1
                logger.warning(
                    "Cola llena para '%s' en tópico '%s' – evento antiguo descartado (total=%d)",
                    self.consumer,
                    self.topic,
                    self.dropped,
                )
            except asyncio.QueueEmpty:
                pass
        self.queue.put_nowait(data)


class EventBus:
    """Fan-out event bus basado en asyncio.Queue."""

    def __init__(self, max_queue_size: int = 10_000) -> None:
        self._max_queue_size = max_queue_size
        self._subscriptions: Dict[str, List[Subscription]] = {}
        self._lock = asyncio.Lock()

    async def subscribe(self, topic: str, consumer_name: str) -> asyncio.Queue:
        """Registrar un consumidor. Retorna su Queue exclusiva."""
        async with self._lock:
            sub = Subscription(
                topic=topic,
                consumer=consumer_name,
                queue=asyncio.Queue(maxsize=self._max_queue_size),
            )
            self._subscriptions.setdefault(topic, []).append(sub)
            logger.info(
                "Consumidor '%s' suscrito a tópico '%s' (max_queue=%d)",
                consumer_name,
                topic,
                self._max_queue_size,
            )
            return sub.queue

    async def publish(self, topic: str, data: Any) -> int:
        """Publicar a todos los suscriptores del tópico. Retorna cuántos lo recibieron."""
        subs = self._subscriptions.get(topic, [])
        for sub in subs:
            sub.offer(data)
        return len(subs)

    async def unsubscribe_all(self, topic: str | None = None) -> None:
        """Desuscribir consumidores (cleanup al shutdown)."""
        async with self._lock:
            if topic:
                self._subscriptions.pop(topic, None)
                logger.info("Suscriptores del tópico '%s' eliminados", topic)
            else:
                self._subscriptions.clear()
                logger.info("Todos los suscriptores eliminados (shutdown)")

    @property
    def subscriber_count(self) -> int:
        return sum(len(subs) for subs in self._subscriptions.values())

    def stats(self, topic: str) -> Dict[str, dict]:
        """{consumidor: {queued, dropped}} para un tópico."""
        return {
            sub.consumer: {"queued": sub.queue.qsize(), "dropped": sub.dropped}
            for sub in self._subscriptions.get(topic, [])
        }
