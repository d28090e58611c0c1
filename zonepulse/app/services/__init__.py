"""Servicios del motor de análisis (síncronos, sin I/O)."""

from zonepulse.app.services.analytics_engine import AnalyticsEngine
from zonepulse.app.services.candle_builder import CandleBuilder
from zonepulse.app.services.indicator_service import IndicatorService
from zonepulse.app.services.quarterly_level_service import QuarterlyLevelService
from zonepulse.app.services.recommendation_engine import RecommendationEngine
from zonepulse.app.services.zone_detector import ZoneDetector

__all__ = [
    "AnalyticsEngine",
    "CandleBuilder",
    "IndicatorService",
    "QuarterlyLevelService",
    "RecommendationEngine",
    "ZoneDetector",
]
