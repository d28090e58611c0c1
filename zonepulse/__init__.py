"""
ZonePulse – análisis de estructura de mercado en tiempo real.

Velas de 1 minuto a partir de trades, indicadores (RSI, MACD, ATR),
niveles trimestrales, zonas FVG / Order Block y recomendaciones.
"""

__version__ = "0.1.0"
