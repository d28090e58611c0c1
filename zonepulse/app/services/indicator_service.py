"""
ZonePulse – Indicator Service (RSI 14, MACD 12/26/9, ATR 14)
=============================================================
Se ejecuta una vez por vela cerrada sobre el historial completo
(índice N-1 = vela recién cerrada, N = longitud del historial).

═══════════════════════════════════════════════════════════════════
                    MATEMÁTICA
═══════════════════════════════════════════════════════════════════

─── RSI 14 (ventana completa, NO Wilder) ──────────────────────────

  Requiere N ≥ 14. Sobre las últimas 14 diferencias close-a-close
  (con N == 14 solo existen 13; la ventana empieza en la vela 1):

      gains  = Σ delta  (delta > 0)
      losses = Σ |delta| (delta ≤ 0)
      avg_gain = gains / 14,  avg_loss = losses / 14
      RS  = 100 si avg_loss == 0, si no avg_gain / avg_loss
      RSI = 100 − 100 / (1 + RS)

  Con solo subidas RS = 100 → RSI ≈ 99.0099, no 100.
  Se recalcula la ventana entera en cada vela: O(14).

─── MACD 12/26/9 ─────────────────────────────────────────────────

  No se produce ninguna entrada mientras N < 26.

      EMA_t = (close − EMA_{t-1}) × 2/(period+1) + EMA_{t-1}

  EMA 26: seed = SMA de los primeros 26 closes cuando N == 26.
  EMA 12: el seed por SMA solo aplicaría con N == 12, pero a esa altura
          aún no hay entradas MACD, así que nunca ocurre. La recursión
          arranca en N == 26 con EMA_{t-1} = 0 (sin entrada previa).
          Se reproduce tal cual: corregirlo cambiaría los valores.

  macd   = ema12 − ema26
  signal = 0 hasta tener 8 entradas previas. Con exactamente 8, SMA de
           los 9 macd (8 previos + actual). Después EMA con 2/10.

─── ATR 14 (Wilder) ──────────────────────────────────────────────

  TR = max(high − low, |high − prev_close|, |low − prev_close|)
  Requiere N ≥ 15. Seed (N == 15) = media de los 14 TR que terminan
  en la vela actual. Después:

      ATR_t = (ATR_{t-1} × 13 + TR_t) / 14

═══════════════════════════════════════════════════════════════════

POR QUÉ NO PANDAS / TA-LIB:
- Tres cálculos aritméticos por vela; la conversión array ↔ escalar
  cuesta más que el cálculo.
- Control total sobre la política exacta (incluidas sus rarezas).
"""

from __future__ import annotations

from typing import Optional, Sequence

from zonepulse.app.core.logging import get_logger
from zonepulse.app.domain.entities.candle import Candle
from zonepulse.app.state.indicator_state import (
    ATR_PERIOD,
    MACD_FAST_PERIOD,
    MACD_SIGNAL_PERIOD,
    MACD_SLOW_PERIOD,
    RSI_PERIOD,
    IndicatorState,
    MacdEntry,
)

logger = get_logger("indicator_service")

# RS usado cuando no hay pérdidas en la ventana (en lugar de infinito)
RS_NO_LOSSES = 100.0


def true_range(candle: Candle, prev_close: float) -> float:
    return max(
        candle.high - candle.low,
        abs(candle.high - prev_close),
        abs(candle.low - prev_close),
    )


class IndicatorService:
    """
    Motor de indicadores técnicos.

    Ciclo de vida:
      1. Se instancia una vez (AnalyticsEngine).
      2. Por cada vela cerrada se llama a update(state, candles).
      3. update() añade como máximo una entrada a cada serie.
      4. Retorna los últimos valores para log / broadcast.
    """

    def __init__(self) -> None:
        # α = 2 / (period + 1)
        self._alpha_fast: float = 2.0 / (MACD_FAST_PERIOD + 1)
        self._alpha_slow: float = 2.0 / (MACD_SLOW_PERIOD + 1)
        self._alpha_signal: float = 2.0 / (MACD_SIGNAL_PERIOD + 1)

        logger.info(
            "IndicatorService inicializado (RSI%d ventana, MACD %d/%d/%d, ATR%d Wilder)",
            RSI_PERIOD, MACD_FAST_PERIOD, MACD_SLOW_PERIOD, MACD_SIGNAL_PERIOD, ATR_PERIOD,
        )

    # ════════════════════════════════════════════════════════════════
    #  PUNTO DE ENTRADA PRINCIPAL
    # ════════════════════════════════════════════════════════════════

    def update(self, state: IndicatorState, candles: Sequence[Candle]) -> dict:
        """
        Actualizar RSI, MACD y ATR con la última vela del historial.
        El historial ya contiene la vela recién cerrada.
        """
        if not candles:
            return state.latest()

        rsi = self.compute_rsi(candles)
        if rsi is not None:
            state.rsi_values.append(rsi)

        macd = self.compute_macd(candles, state.macd_values)
        if macd is not None:
            state.macd_values.append(macd)

        atr = self.compute_atr(candles, state.atr_values)
        if atr is not None:
            state.atr_values.append(atr)

        return state.latest()

    # ════════════════════════════════════════════════════════════════
    #  RSI
    # ════════════════════════════════════════════════════════════════

    @staticmethod
    def compute_rsi(candles: Sequence[Candle], period: int = RSI_PERIOD) -> Optional[float]:
        n = len(candles)
        if n < period:
            return None

        gains = 0.0
        losses = 0.0
        for i in range(max(1, n - period), n):
            change = candles[i].close - candles[i - 1].close
            if change > 0:
                gains += change
            else:
                losses += abs(change)

        avg_gain = gains / period
        avg_loss = losses / period

        rs = RS_NO_LOSSES if avg_loss == 0 else avg_gain / avg_loss
        return 100.0 - (100.0 / (1.0 + rs))

    # ════════════════════════════════════════════════════════════════
    #  MACD
    # ════════════════════════════════════════════════════════════════

    def compute_macd(
        self, candles: Sequence[Candle], history: Sequence[MacdEntry],
    ) -> Optional[MacdEntry]:
        n = len(candles)
        if n < MACD_SLOW_PERIOD:
            return None

        prev = history[-1] if history else None

        # Con N ≥ 26 esta rama de seed nunca se cumple: ema12 arranca desde 0.
        ema12 = self._ema_step(
            candles, n, MACD_FAST_PERIOD, self._alpha_fast,
            prev.ema12 if prev is not None else 0.0,
        )
        ema26 = self._ema_step(
            candles, n, MACD_SLOW_PERIOD, self._alpha_slow,
            prev.ema26 if prev is not None else 0.0,
        )
        macd = ema12 - ema26

        signal = 0.0
        if len(history) == MACD_SIGNAL_PERIOD - 1:
            window = [e.macd for e in history[:MACD_SIGNAL_PERIOD]]
            window += [macd] * (MACD_SIGNAL_PERIOD - len(window))
            signal = sum(window) / MACD_SIGNAL_PERIOD
        elif len(history) > MACD_SIGNAL_PERIOD - 1 and prev is not None:
            signal = (macd - prev.signal) * self._alpha_signal + prev.signal

        return MacdEntry(ema12=ema12, ema26=ema26, macd=macd, signal=signal)

    @staticmethod
    def _ema_step(
        candles: Sequence[Candle], n: int, period: int, alpha: float, prev_ema: float,
    ) -> float:
        """SMA de los primeros `period` closes si N == period, si no un paso EMA."""
        if n == period:
            return sum(c.close for c in candles[:period]) / period
        if n > period:
            close = candles[-1].close
            return (close - prev_ema) * alpha + prev_ema
        return 0.0

    # ════════════════════════════════════════════════════════════════
    #  ATR
    # ════════════════════════════════════════════════════════════════

    @staticmethod
    def compute_atr(
        candles: Sequence[Candle], history: Sequence[float], period: int = ATR_PERIOD,
    ) -> Optional[float]:
        n = len(candles)
        if n < period + 1:
            return None

        tr = true_range(candles[-1], candles[-2].close)

        if n == period + 1 or not history:
            total = tr
            for i in range(n - period, n - 1):
                total += true_range(candles[i], candles[i - 1].close)
            return total / period

        prev_atr = history[-1]
        return (prev_atr * (period - 1) + tr) / period
