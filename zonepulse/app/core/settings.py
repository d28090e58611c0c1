"""
ZonePulse – Settings (Pydantic BaseSettings)
============================================
Configuración centralizada cargada desde variables de entorno / .env.
Se usa pydantic-settings para validación estricta al arranque.
"""

from __future__ import annotations

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    # ─── Finnhub ────────────────────────────────────────────────────────
    finnhub_api_key: str = Field(default="", description="API key de Finnhub")
    finnhub_rest_url: str = Field(
        default="https://finnhub.io/api/v1",
        description="Endpoint REST de Finnhub (histórico de velas)",
    )
    finnhub_ws_url: str = Field(
        default="wss://ws.finnhub.io",
        description="WebSocket endpoint de Finnhub (trades en vivo)",
    )

    # Instrumento a analizar (un único símbolo por motor)
    symbol: str = Field(default="OANDA:XAU_USD", description="Símbolo Finnhub")

    # ─── Histórico ──────────────────────────────────────────────────────
    candle_resolution: str = Field(
        default="1", description="Resolución Finnhub de las velas históricas"
    )
    history_days: int = Field(default=5, description="Días de histórico a cargar")
    max_history_candles: int = Field(
        default=5000, description="Máximo de velas históricas a reproducir"
    )
    history_timeout: float = Field(
        default=30.0, description="Timeout (seg) de la petición de histórico"
    )

    # ─── Candle Builder ─────────────────────────────────────────────────
    candle_interval_seconds: int = Field(
        default=60, description="Duración de la vela en segundos"
    )

    # ─── Reconexión ─────────────────────────────────────────────────────
    ws_reconnect_delay: float = Field(
        default=3.0, description="Delay fijo (seg) entre reconexiones al feed"
    )

    # ─── Zonas ──────────────────────────────────────────────────────────
    zone_scan_interval: int = Field(
        default=5, description="Cada cuántas velas cerradas se buscan zonas",
    )
    max_zones: int = Field(default=20, description="Máximo de zonas retenidas")
    zone_dedup_tolerance: float = Field(
        default=0.5, description="Tolerancia de precio para considerar zonas duplicadas",
    )

    # ─── Recomendaciones ────────────────────────────────────────────────
    stop_atr_multiplier: float = Field(
        default=0.8, description="Multiplicador ATR para el Stop Loss",
    )
    target_atr_multiplier: float = Field(
        default=2.2, description="Multiplicador ATR para el Take Profit de respaldo",
    )
    base_confidence: int = Field(default=40, description="Confianza base")
    confidence_bonus: int = Field(default=20, description="Bonus por condición cumplida")
    max_confidence: int = Field(default=95, description="Confianza máxima")

    # ─── Snapshot / Export ──────────────────────────────────────────────
    snapshot_candle_window: int = Field(
        default=500, description="Velas incluidas por defecto en el snapshot",
    )
    export_candle_count: int = Field(
        default=100, description="Velas incluidas en el export JSON",
    )

    # ─── Event Bus ──────────────────────────────────────────────────────
    event_bus_max_queue_size: int = Field(
        default=10_000,
        description="Tamaño máximo de cola del Event Bus para contrapresión",
    )

    # ─── Server ─────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8888)
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO", description="Nivel de logging (ignorado si debug=True)")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


# Singleton global – se importa donde se necesite
settings = Settings()
