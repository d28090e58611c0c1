"""
ZonePulse – API Routes (FastAPI)
=================================
Endpoints REST de solo lectura sobre el estado del motor.

Endpoints disponibles:
  GET  /api/health            → health check
  GET  /api/status            → contadores del motor, feed y consumidor
  GET  /api/snapshot          → snapshot completo (ventana de velas opcional)
  GET  /api/candles           → últimas N velas cerradas
  GET  /api/indicators        → últimos RSI / MACD / ATR
  GET  /api/levels            → niveles trimestrales
  GET  /api/zones             → zonas estructurales vigentes
  GET  /api/recommendations   → recomendaciones ordenadas por confianza
  GET  /api/export            → snapshot JSON descargable
"""

from __future__ import annotations

import re
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query, Response

from zonepulse.app.api.schemas import (
    CandlesResponse,
    ExportResponse,
    HealthResponse,
    IndicatorsSchema,
    QuarterlyLevelSchema,
    RecommendationSchema,
    SnapshotResponse,
    SystemStatusResponse,
    ZoneSchema,
)
from zonepulse.app.core.logging import get_logger

logger = get_logger("api.routes")

router = APIRouter()

# Referencias a componentes inyectados desde main.py
_engine = None
_finnhub_client = None
_process_tick = None


def init_routes(engine, finnhub_client=None, process_tick=None) -> None:
    """Inyectar dependencias desde main.py al arrancar."""
    global _engine, _finnhub_client, _process_tick
    _engine = engine
    _finnhub_client = finnhub_client
    _process_tick = process_tick


def _require_engine():
    if _engine is None:
        raise HTTPException(status_code=503, detail="Motor no inicializado")
    return _engine


def export_filename(symbol: str, timestamp: str) -> str:
    """'OANDA:XAU_USD' + ISO → 'XAUUSD_Analysis_2024-05-29T10-00-00+00-00.json'."""
    name = symbol.split(":")[-1].replace("_", "")
    name = re.sub(r"[^A-Za-z0-9-]", "", name) or "SNAPSHOT"
    return f"{name}_Analysis_{re.sub(r'[:.]', '-', timestamp)}.json"


# ─── REST endpoints ────────────────────────────────────────────────────

@router.get("/api/health", response_model=HealthResponse)
async def health_check() -> dict:
    """Health check para monitoreo."""
    return {"status": "ok", "service": "zonepulse"}


@router.get("/api/status", response_model=SystemStatusResponse)
async def system_status() -> dict:
    engine = _require_engine()
    return {
        "market": engine.state.market.to_dict(),
        "feed": _finnhub_client.stats if _finnhub_client is not None else None,
        "consumer": _process_tick.stats if _process_tick is not None else None,
    }


@router.get("/api/snapshot", response_model=SnapshotResponse)
async def get_snapshot(
    candles: Optional[int] = Query(default=None, ge=0, le=5000),
) -> dict:
    return _require_engine().snapshot(candle_window=candles)


@router.get("/api/candles", response_model=CandlesResponse)
async def get_candles(count: int = Query(default=100, ge=1, le=5000)) -> dict:
    engine = _require_engine()
    candles = engine.state.market.get_candles(count)
    return {
        "symbol": engine.symbol,
        "count": len(candles),
        "candles": [c.to_dict() for c in candles],
    }


@router.get("/api/indicators", response_model=IndicatorsSchema)
async def get_indicators() -> dict:
    return _require_engine().state.indicators.to_dict()


@router.get("/api/levels", response_model=List[QuarterlyLevelSchema])
async def get_levels() -> list:
    return [level.to_dict() for level in _require_engine().state.levels()]


@router.get("/api/zones", response_model=List[ZoneSchema])
async def get_zones() -> list:
    return [zone.to_dict() for zone in _require_engine().state.zones]


@router.get("/api/recommendations", response_model=List[RecommendationSchema])
async def get_recommendations() -> list:
    return [r.to_dict() for r in _require_engine().state.recommendations]


@router.get("/api/export", response_model=ExportResponse)
async def export_snapshot(response: Response) -> dict:
    engine = _require_engine()
    if not engine.state.market.candles:
        raise HTTPException(status_code=404, detail="No hay datos para exportar")

    snapshot = engine.export_snapshot()
    filename = export_filename(engine.symbol, snapshot["timestamp"])
    response.headers["Content-Disposition"] = f'attachment; filename="{filename}"'
    logger.info("Export generado: %s", filename)
    return snapshot
