"""Colaboradores de transporte: event bus, histórico REST y feed WebSocket."""

from zonepulse.app.infrastructure.event_bus import EventBus
from zonepulse.app.infrastructure.finnhub_client import FinnhubClient, TICK_TOPIC
from zonepulse.app.infrastructure.history_client import HistoricalDataError, HistoryClient

__all__ = [
    "EventBus",
    "FinnhubClient",
    "HistoricalDataError",
    "HistoryClient",
    "TICK_TOPIC",
]
