"""
ZonePulse – Finnhub WebSocket Client (trades en vivo)
======================================================
Cliente WebSocket que se conecta a wss://ws.finnhub.io?token=...,
se suscribe al símbolo configurado y publica cada lote de trades como
list[Tick] en el EventBus.

MENSAJES:
  → {"type": "subscribe", "symbol": "OANDA:XAU_USD"}
  ← {"type": "trade", "data": [{"p": 2034.5, "t": 1717000000123, "s": "...", "v": 1}]}
  ← {"type": "ping"}
  ← {"type": "error", "msg": "..."}

RECONEXIÓN:
- Ante cualquier desconexión se espera un delay FIJO y se reintenta
  mientras el flag `_running` siga activo.
- El motor no se resetea: al reconectar se siguen alimentando ticks
  sobre el mismo estado. Los trades perdidos durante el corte no se
  recuperan.

MENSAJES MAL FORMADOS:
- Trades sin precio/timestamp válidos se descartan uno a uno.
- Lotes vacíos no se publican.
"""

from __future__ import annotations

import asyncio
import json
import time
from typing import Any, List, Optional

import websockets
from websockets.asyncio.client import ClientConnection

from zonepulse.app.core.logging import get_logger
from zonepulse.app.domain.entities.tick import Tick
from zonepulse.app.domain.exceptions import InvalidTickError
from zonepulse.app.infrastructure.event_bus import EventBus

logger = get_logger("finnhub_client")

# Tópico estándar del EventBus para lotes de ticks
TICK_TOPIC = "tick"


def parse_trades(data: Any) -> List[Tick]:
    """Extraer los ticks válidos de la lista `data` de un mensaje trade."""
    if not isinstance(data, list):
        return []
    ticks: List[Tick] = []
    for raw in data:
        if not isinstance(raw, dict):
            continue
        try:
            ticks.append(Tick.from_trade(raw))
        except InvalidTickError as e:
            logger.debug("Trade descartado: %s", e.message)
    return ticks


class FinnhubClient:
    """
    Cliente WebSocket asíncrono para Finnhub.

    Ciclo de vida:
      1. start()  → lanza task de conexión
      2. _connect_loop() → reconexión perpetua con delay fijo
      3. _listen()       → parsear mensajes y publicar ticks
      4. stop()          → shutdown limpio
    """

    def __init__(
        self,
        event_bus: EventBus,
        *,
        ws_url: str,
        api_key: str,
        symbol: str,
        reconnect_delay: float = 3.0,
    ) -> None:
        self._event_bus = event_bus
        self._ws_url = ws_url
        self._api_key = api_key
        self._symbol = symbol
        self._reconnect_delay = reconnect_delay
        self._ws: Optional[ClientConnection] = None
        self._running = False
        self._connect_task: Optional[asyncio.Task] = None

        # Estadísticas de monitoreo
        self._ticks_received: int = 0
        self._last_tick_time: float = 0.0
        self._connected_since: float = 0.0
        self._reconnect_attempt = 0
        self._last_error: Optional[str] = None

    # ──────────────────────── Lifecycle ──────────────────────────────────

    async def start(self) -> None:
        """Iniciar cliente. Idempotente: llamar varias veces es seguro."""
        if self._running:
            logger.warning("FinnhubClient ya está corriendo, ignorando start()")
            return

        self._running = True
        self._connect_task = asyncio.create_task(
            self._connect_loop(), name="finnhub-connect-loop"
        )
        logger.info("FinnhubClient iniciado (%s)", self._symbol)

    async def stop(self) -> None:
        """Shutdown limpio: cerrar WS y cancelar task."""
        self._running = False
        logger.info("Deteniendo FinnhubClient...")

        if self._ws is not None:
            try:
                await self._ws.close()
            except websockets.exceptions.WebSocketException as e:
                logger.debug("Error cerrando WebSocket: %s", e)

        if self._connect_task and not self._connect_task.done():
            self._connect_task.cancel()
            try:
                await self._connect_task
            except asyncio.CancelledError:
                pass

        logger.info(
            "FinnhubClient detenido. Total ticks recibidos: %d", self._ticks_received
        )

    # ──────────────────────── Connection Loop ───────────────────────────

    async def _connect_loop(self) -> None:
        """
        Loop de reconexión con delay fijo.
        Se ejecuta hasta que self._running = False.
        """
        ws_url = f"{self._ws_url}?token={self._api_key}"

        while self._running:
            try:
                logger.info("Conectando a Finnhub: %s", self._ws_url)
                async with websockets.connect(
                    ws_url,
                    close_timeout=10,
                    max_size=2**20,       # 1 MB máximo por mensaje
                ) as ws:
                    self._ws = ws
                    self._connected_since = time.time()
                    logger.info("✓ Conectado a Finnhub WebSocket")

                    await ws.send(json.dumps({"type": "subscribe", "symbol": self._symbol}))
                    logger.info("Suscrito a trades de '%s'", self._symbol)

                    await self._listen(ws)

            except websockets.exceptions.ConnectionClosed as e:
                logger.warning("Conexión cerrada: %s", e)
            except OSError as e:
                logger.error("Error de red: %s", e)
            except Exception as e:
                logger.error("Error inesperado en connect_loop: %s", e, exc_info=True)
            finally:
                self._ws = None

            if not self._running:
                break

            self._reconnect_attempt += 1
            logger.info(
                "Reconectando en %.1fs (intento #%d)...",
                self._reconnect_delay,
                self._reconnect_attempt,
            )
            await asyncio.sleep(self._reconnect_delay)

    # ──────────────────────── Listener ──────────────────────────────────

    async def _listen(self, ws: ClientConnection) -> None:
        async for raw_msg in ws:
            if not self._running:
                break
            await self.handle_message(raw_msg)

    async def handle_message(self, raw_msg: str | bytes) -> int:
        """
        Procesar un mensaje del WS. Retorna cuántos ticks se publicaron.
        Solo los mensajes 'trade' producen ticks; el resto se ignora.
        """
        try:
            data = json.loads(raw_msg)
        except (json.JSONDecodeError, TypeError):
            logger.warning("Mensaje no-JSON recibido, ignorando")
            return 0

        if not isinstance(data, dict):
            return 0

        msg_type = data.get("type")

        if msg_type == "error":
            self._last_error = str(data.get("msg", "sin detalle"))
            logger.error("Error de Finnhub API: %s", self._last_error)
            return 0

        if msg_type != "trade":
            return 0

        ticks = parse_trades(data.get("data"))
        if not ticks:
            return 0

        self._ticks_received += len(ticks)
        self._last_tick_time = ticks[-1].timestamp

        # Publicar al EventBus – NUNCA bloquea
        await self._event_bus.publish(TICK_TOPIC, ticks)
        return len(ticks)

    # ──────────────────────── Stats ─────────────────────────────────────

    @property
    def stats(self) -> dict:
        """Estadísticas del cliente para monitoreo."""
        return {
            "running": self._running,
            "connected": self._ws is not None,
            "ticks_received": self._ticks_received,
            "last_tick_time": self._last_tick_time,
            "connected_since": self._connected_since,
            "reconnect_attempts": self._reconnect_attempt,
            "last_error": self._last_error,
        }
