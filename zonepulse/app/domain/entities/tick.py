"""
ZonePulse – Domain Value Object: Tick
======================================
Representa un trade individual recibido del feed en vivo.

- frozen=True → inmutable, seguro para pasar entre coroutines.
- slots=True  → menor footprint de memoria en hot-path.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping

from zonepulse.app.domain.exceptions import InvalidTickError


@dataclass(frozen=True, slots=True)
class Tick:
    """Trade atómico: precio y momento en que se ejecutó."""

    price: float
    timestamp: float          # epoch UNIX en segundos
    symbol: str = ""
    volume: float | None = None

    @classmethod
    def from_trade(cls, raw: Mapping[str, Any]) -> "Tick":
        """
        Construir un Tick desde un trade Finnhub: {"p", "t" (ms), "s", "v"}.

        Lanza InvalidTickError si faltan campos o no son numéricos.
        """
        try:
            price = float(raw["p"])
            timestamp = float(raw["t"]) / 1000.0
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidTickError(f"Trade mal formado: {raw!r}") from e

        if not math.isfinite(price) or not math.isfinite(timestamp) or price <= 0:
            raise InvalidTickError(f"Trade con valores inválidos: {raw!r}")

        volume = raw.get("v")
        return cls(
            price=price,
            timestamp=timestamp,
            symbol=str(raw.get("s") or ""),
            volume=float(volume) if isinstance(volume, (int, float)) else None,
        )

    def to_dict(self) -> dict:
        """Serialización para API / logs."""
        return {
            "symbol": self.symbol,
            "price": self.price,
            "timestamp": self.timestamp,
            "volume": self.volume,
        }
