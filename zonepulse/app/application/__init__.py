"""Casos de uso: backfill histórico y consumo de ticks en vivo."""

from zonepulse.app.application.backfill_usecase import BackfillUseCase
from zonepulse.app.application.process_tick_usecase import ProcessTickUseCase

__all__ = ["BackfillUseCase", "ProcessTickUseCase"]
