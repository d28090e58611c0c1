"""
ZonePulse – Logging configuration
==================================
Un único handler a stdout, formato legible con columnas fijas:

  2024-05-29 10:00:00 | INFO     | zonepulse.zone_detector        | Zona OB_BULL [...]

Todos los loggers del proyecto cuelgan de `zonepulse.*`.
"""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-30s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Librerías cuyo nivel INFO es demasiado verboso para este servicio
NOISY_LOGGERS = ("websockets", "httpx", "httpcore", "uvicorn.access")


def setup_logging(level: int | str = logging.INFO) -> None:
    """Configurar el root logger. Llamadas repetidas solo ajustan el nivel."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    if not any(getattr(h, "_zonepulse", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        handler._zonepulse = True
        root.addHandler(handler)
    root.setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Logger `zonepulse.<name>`."""
    return logging.getLogger(f"zonepulse.{name}")
