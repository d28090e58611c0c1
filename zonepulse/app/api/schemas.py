"""
ZonePulse – API Schemas (Pydantic)
===================================
Schemas de respuesta de la API REST. Reflejan los to_dict() de las
entidades y del AnalyticsEngine.
"""

from __future__ import annotations

from pydantic import BaseModel
from typing import List, Optional


class HealthResponse(BaseModel):
    status: str
    service: str


class CandleSchema(BaseModel):
    timestamp: float
    open: float
    high: float
    low: float
    close: float
    volume: float


class BuildingCandleSchema(CandleSchema):
    is_building: bool = True


class CandlesResponse(BaseModel):
    symbol: str
    count: int
    candles: List[CandleSchema]


class QuarterlyLevelSchema(BaseModel):
    quarter: str
    high: float
    low: float
    close: float


class ZoneSchema(BaseModel):
    type: str
    range: List[float]
    timestamp: float


class MacdSchema(BaseModel):
    ema12: float
    ema26: float
    macd: float
    signal: float


class IndicatorsSchema(BaseModel):
    rsi: Optional[float] = None
    macd: Optional[MacdSchema] = None
    atr: Optional[float] = None
    rsi_zone: Optional[str] = None
    macd_trend: Optional[str] = None


class RecommendationSchema(BaseModel):
    zone: ZoneSchema
    bias: str
    entry: float
    stop_loss: float
    take_profit: float
    atr: float
    confidence: int
    risk: float
    reward: float
    risk_reward: Optional[float] = None


class MarketStatsSchema(BaseModel):
    symbol: str
    last_price: float
    total_ticks: int
    total_candles: int
    backfilled_candles: int


class SnapshotResponse(BaseModel):
    symbol: str
    current_price: float
    building_candle: Optional[BuildingCandleSchema] = None
    candles: List[CandleSchema]
    quarterly_levels: List[QuarterlyLevelSchema]
    zones: List[ZoneSchema]
    indicators: IndicatorsSchema
    recommendations: List[RecommendationSchema]
    stats: MarketStatsSchema


class ExportResponse(BaseModel):
    symbol: str
    timestamp: str
    last_price: float
    ohlc: List[CandleSchema]
    quarterly_levels: List[QuarterlyLevelSchema]
    zones: List[ZoneSchema]
    indicators: IndicatorsSchema
    recommendations: List[RecommendationSchema]


class FeedStatusSchema(BaseModel):
    running: bool
    connected: bool
    ticks_received: int
    last_tick_time: float
    connected_since: float
    reconnect_attempts: int
    last_error: Optional[str] = None


class SystemStatusResponse(BaseModel):
    market: MarketStatsSchema
    feed: Optional[FeedStatusSchema] = None
    consumer: Optional[dict] = None
