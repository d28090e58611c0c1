"""
ZonePulse – Main Application Entry Point
=========================================
Orquesta el motor de análisis: histórico + feed en vivo + API REST.

ARQUITECTURA DE ARRANQUE:
  1. Configurar logging
  2. Crear instancias desde el contenedor (Event Bus, motor, clientes)
  3. FastAPI lifespan (startup):
     a. Backfill del histórico (si falla, el arranque se aborta)
     b. Suscribir e iniciar ProcessTickUseCase
     c. Iniciar FinnhubClient (conexión WS a Finnhub)
  4. FastAPI lifespan (shutdown):
     a. Detener todo en orden inverso

FLUJO DE DATOS:
  Finnhub REST → HistoryClient → AnalyticsEngine.backfill()
  Finnhub WS → FinnhubClient → EventBus(tick) → ProcessTickUseCase
       → CandleBuilder → MarketState
       → IndicatorService → IndicatorState (RSI 14, MACD 12/26/9, ATR 14)
       → QuarterlyLevelService → niveles trimestrales
       → ZoneDetector → FVG / Order Blocks
       → RecommendationEngine → recomendaciones BUY/SELL
  uvicorn zonepulse.main:app --host 0.0.0.0 --port 8888
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from zonepulse.app.api.routes import init_routes, router
from zonepulse.app.core.logging import get_logger, setup_logging
from zonepulse.app.core.settings import settings
from zonepulse.container import init_container

# ─── Logging ────────────────────────────────────────────────────────────
setup_logging(logging.DEBUG if settings.debug else settings.log_level)
logger = get_logger("main")

# ─── Contenedor de Dependencias ─────────────────────────────────────────
container = init_container(settings)

# Task references para lifecycle
_background_tasks: list[asyncio.Task] = []


# ─── FastAPI Lifespan ───────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup/shutdown lifecycle de la aplicación.
    El histórico se reproduce completo antes de aceptar ticks en vivo.
    """
    logger.info("=" * 60)
    logger.info("  ZonePulse - Market Structure Analytics")
    logger.info("  Símbolo: %s", settings.symbol)
    logger.info("  Vela: %ds  Histórico: %d días (máx %d velas)",
                settings.candle_interval_seconds,
                settings.history_days,
                settings.max_history_candles)
    logger.info("  Indicadores: RSI 14, MACD 12/26/9, ATR 14")
    logger.info("  Zonas: escaneo cada %d velas, máx %d",
                settings.zone_scan_interval, settings.max_zones)
    logger.info("=" * 60)

    engine = container.engine
    init_routes(
        engine,
        finnhub_client=container.finnhub_client,
        process_tick=container.process_tick,
    )

    # Histórico: cualquier error se propaga y aborta el arranque
    applied = await container.get_backfill_usecase().run()
    logger.info("  Backfill: %d velas aplicadas", applied)

    # Suscribir antes de conectar el feed para no perder ticks
    await container.process_tick.subscribe()
    tick_task = asyncio.create_task(
        container.process_tick.start(), name="process-tick-usecase"
    )
    _background_tasks.append(tick_task)

    await container.finnhub_client.start()

    logger.info("✓ Todos los componentes iniciados correctamente")

    yield  # ← La app está corriendo aquí

    # ── SHUTDOWN ──
    logger.info("Iniciando shutdown...")

    await container.finnhub_client.stop()
    await container.process_tick.stop()

    # Cancelar background tasks
    for task in _background_tasks:
        if not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
    _background_tasks.clear()

    await container.event_bus.unsubscribe_all()
    logger.info("✓ Shutdown completo")


# ─── FastAPI App ────────────────────────────────────────────────────────

app = FastAPI(
    title="ZonePulse",
    description="Motor de análisis de estructura de mercado: indicadores, niveles trimestrales, zonas y recomendaciones",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


def run() -> None:
    """Entry point de consola: `zonepulse`."""
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
