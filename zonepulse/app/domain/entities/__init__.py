"""Entidades y value objects del dominio."""

from zonepulse.app.domain.entities.candle import Candle
from zonepulse.app.domain.entities.quarterly_level import QuarterlyLevel
from zonepulse.app.domain.entities.recommendation import Bias, Recommendation
from zonepulse.app.domain.entities.tick import Tick
from zonepulse.app.domain.entities.zone import Zone, ZoneType

__all__ = [
    "Bias",
    "Candle",
    "QuarterlyLevel",
    "Recommendation",
    "Tick",
    "Zone",
    "ZoneType",
]
