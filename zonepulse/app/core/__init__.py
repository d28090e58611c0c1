"""
ZonePulse – Core
=================
Configuración (pydantic-settings) y logging compartidos.
"""

from zonepulse.app.core.logging import get_logger, setup_logging
from zonepulse.app.core.settings import Settings, settings

__all__ = ["Settings", "settings", "get_logger", "setup_logging"]
