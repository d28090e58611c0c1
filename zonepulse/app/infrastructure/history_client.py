"""
ZonePulse – Finnhub Historical Candles Client (httpx)
======================================================
Descarga velas OHLCV de la ventana de lookback vía REST:

  GET {rest_url}/stock/candle?symbol=&resolution=&from=&to=&token=

Respuesta Finnhub (arrays paralelos):
  {"s": "ok", "t": [...], "o": [...], "h": [...], "l": [...], "c": [...], "v": [...]}

ERRORES:
- HTTP no-2xx, error de red, JSON inválido o s != "ok" → HistoricalDataError.
  El arranque se aborta: un histórico parcial no se considera utilizable.
"""

from __future__ import annotations

import time
from typing import List, Optional

import httpx

from zonepulse.app.core.logging import get_logger
from zonepulse.app.domain.entities.candle import Candle

logger = get_logger("history_client")

SECONDS_PER_DAY = 24 * 60 * 60


class HistoricalDataError(Exception):
    """El proveedor de histórico falló o respondió sin datos utilizables."""

    def __init__(self, message: str, status: Optional[str] = None) -> None:
        super().__init__(message)
        self.status = status


class HistoryClient:
    """
    Cliente REST asíncrono para velas históricas.

    Se le puede inyectar un httpx.AsyncClient (p.ej. con MockTransport
    en tests); si no, crea uno propio por petición.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout
        self._client = client

    async def fetch_recent(
        self,
        symbol: str,
        resolution: str,
        days: int,
        now: Optional[float] = None,
    ) -> List[Candle]:
        """Velas de los últimos `days` días hasta `now` (epoch s)."""
        end = int(now if now is not None else time.time())
        start = end - days * SECONDS_PER_DAY
        return await self.fetch_candles(symbol, resolution, start, end)

    async def fetch_candles(
        self, symbol: str, resolution: str, start: int, end: int,
    ) -> List[Candle]:
        params = {
            "symbol": symbol,
            "resolution": resolution,
            "from": start,
            "to": end,
            "token": self._api_key,
        }
        url = f"{self._base_url}/stock/candle"
        logger.info("Descargando histórico %s (res=%s, %d → %d)", symbol, resolution, start, end)

        try:
            if self._client is not None:
                response = await self._client.get(url, params=params, timeout=self._timeout)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.get(url, params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise HistoricalDataError(
                f"Finnhub respondió HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise HistoricalDataError(f"Error de red al cargar histórico: {e}") from e
        except ValueError as e:
            raise HistoricalDataError("Respuesta de histórico no es JSON válido") from e

        candles = self.parse_candles(data)
        logger.info("Histórico recibido: %d velas", len(candles))
        return candles

    @staticmethod
    def parse_candles(data: dict) -> List[Candle]:
        """Convertir la respuesta de arrays paralelos en velas."""
        if not isinstance(data, dict):
            raise HistoricalDataError("Respuesta de histórico inesperada")

        status = data.get("s")
        if status != "ok":
            raise HistoricalDataError(
                data.get("error") or "Failed to load historical data", status=status,
            )

        try:
            columns = [data[key] for key in ("t", "o", "h", "l", "c", "v")]
            rows = list(zip(*columns, strict=True))
            return [
                Candle(
                    timestamp=float(t),
                    open=float(o),
                    high=float(h),
                    low=float(l),
                    close=float(c),
                    volume=v,
                )
                for t, o, h, l, c, v in rows
            ]
        except (KeyError, TypeError, ValueError) as e:
            raise HistoricalDataError(f"Arrays de histórico inválidos: {e}", status=status) from e
