"""
ZonePulse – Domain Entity: Quarterly Level
===========================================
Máximo, mínimo y último cierre observados en un trimestre natural (UTC).
Es la única entidad mutable del dominio: el tracker la actualiza con cada
vela cerrada del mismo trimestre.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Tuple


def quarter_of(timestamp: float) -> Tuple[int, int]:
    """(año, trimestre 1..4) en UTC para un epoch en segundos."""
    dt = datetime.fromtimestamp(timestamp, tz=timezone.utc)
    return dt.year, (dt.month - 1) // 3 + 1


def quarter_key(year: int, quarter: int) -> str:
    return f"Q{quarter} {year}"


@dataclass(slots=True)
class QuarterlyLevel:
    year: int
    quarter: int
    high: float
    low: float
    close: float

    @property
    def key(self) -> str:
        return quarter_key(self.year, self.quarter)

    @property
    def values(self) -> Tuple[float, float, float]:
        return self.high, self.low, self.close

    def to_dict(self) -> dict:
        return {
            "quarter": self.key,
            "high": self.high,
            "low": self.low,
            "close": self.close,
        }
